# uisafe/config.py
"""
@file config.py
@brief Centralized timeout and pause configuration for interactors.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Dict, Generator, Optional

from .timings import (PAUSE_FIELDS, TIMEOUT_FIELDS, build_preset_values,
                      list_presets)


@dataclass
class TimeoutSettings:
    """Timeout settings for one retrying interactor.

    retry_count switches from a time budget to a fixed number of attempts.
    """
    timeout: float
    interval: float
    retry_count: Optional[int] = None

    def with_overrides(
        self,
        timeout: Optional[float] = None,
        interval: Optional[float] = None,
        retry_count: Optional[int] = None,
    ) -> TimeoutSettings:
        """Create a new settings instance with overrides applied."""
        return TimeoutSettings(
            timeout=timeout if timeout is not None else self.timeout,
            interval=interval if interval is not None else self.interval,
            retry_count=retry_count if retry_count is not None else self.retry_count,
        )


class TimeConfig:
    """
    Timing configuration read by interactors at interaction time.

    Precedence per run: base defaults -> preset -> overrides.
    Lookup order in current(): run config -> override() block -> process default.
    """

    _default_instance: Optional[TimeConfig] = None
    _default_preset: str = "default"
    _local = threading.local()
    _lock = threading.Lock()

    def __init__(self, preset: Optional[str] = None):
        self.preset = preset or self._default_preset
        self._apply_values(build_preset_values(self.preset))

    def _apply_values(self, values: Dict[str, Any]) -> None:
        for name in TIMEOUT_FIELDS:
            val = values.get(name)
            if isinstance(val, TimeoutSettings):
                setting = deepcopy(val)
            elif isinstance(val, dict):
                setting = TimeoutSettings(
                    timeout=float(val["timeout"]),
                    interval=float(val["interval"]),
                    retry_count=val.get("retry_count"),
                )
            else:
                raise ValueError(f"Invalid timeout setting for {name}: {val}")
            setattr(self, name, setting)

        for name in PAUSE_FIELDS:
            if name not in values:
                raise ValueError(f"Missing pause setting for {name}")
            setattr(self, name, float(values[name]))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for name in TIMEOUT_FIELDS:
            setting: TimeoutSettings = getattr(self, name)
            data[name] = {
                "timeout": setting.timeout,
                "interval": setting.interval,
                "retry_count": setting.retry_count,
            }
        for name in PAUSE_FIELDS:
            data[name] = getattr(self, name)
        return data

    def clone(self) -> TimeConfig:
        """Return a deep clone of this config."""
        clone = TimeConfig(self.preset)
        clone._apply_values(self.to_dict())
        return clone

    @classmethod
    def build_from(
        cls,
        *,
        preset: str = "default",
        overrides: Optional[Dict[str, Any]] = None,
    ) -> TimeConfig:
        """Build a deterministic run-scope config snapshot."""
        cfg = cls(preset)
        if overrides:
            _apply_overrides(cfg, overrides)
        return cfg

    @classmethod
    def default(cls) -> TimeConfig:
        """Get the process default configuration (singleton)."""
        if cls._default_instance is None:
            with cls._lock:
                if cls._default_instance is None:
                    cls._default_instance = cls(cls._default_preset)
        return cls._default_instance

    @classmethod
    def install_run_config(cls, config: TimeConfig) -> None:
        """Install per-thread run configuration snapshot."""
        cls._local.run_config = config

    @classmethod
    def clear_run_config(cls) -> None:
        """Clear per-thread run configuration snapshot."""
        cls._local.run_config = None

    @classmethod
    def current(cls) -> TimeConfig:
        """Get the current effective configuration."""
        run_cfg = getattr(cls._local, "run_config", None)
        if run_cfg is not None:
            return run_cfg

        override = getattr(cls._local, "override", None)
        if override is not None:
            return override

        return cls.default()

    @classmethod
    @contextmanager
    def override(cls, **kwargs: Any) -> Generator[TimeConfig, None, None]:
        """Context manager for temporary configuration overrides."""
        previous = getattr(cls._local, "override", None)
        new_config = cls.current().clone()
        _apply_overrides(new_config, kwargs)

        cls._local.override = new_config
        try:
            yield new_config
        finally:
            cls._local.override = previous

    @classmethod
    def reset_to_defaults(cls) -> None:
        """Reset default and clear all thread-local config state."""
        with cls._lock:
            cls._default_preset = "default"
            cls._default_instance = cls(cls._default_preset)
        cls._local.override = None
        cls._local.run_config = None


def _apply_overrides(config: TimeConfig, overrides: Dict[str, Any]) -> None:
    for key, value in overrides.items():
        if key in TIMEOUT_FIELDS:
            base_setting: TimeoutSettings = getattr(config, key)
            if isinstance(value, TimeoutSettings):
                setattr(config, key, deepcopy(value))
            elif isinstance(value, dict):
                setattr(config, key, base_setting.with_overrides(
                    timeout=value.get("timeout"),
                    interval=value.get("interval"),
                    retry_count=value.get("retry_count"),
                ))
            else:
                raise ValueError(f"Invalid override for {key}: {value}")
        elif key in PAUSE_FIELDS:
            setattr(config, key, float(value))
        else:
            raise ValueError(f"Unknown TimeConfig field: {key}")


def available_presets() -> Dict[str, Dict[str, Any]]:
    return list_presets()
