# uisafe/profile.py
"""
@file profile.py
@brief YAML interactor profiles: timings, logging and interactor chains per context tag.

Example:

    timing:
      preset: ci
      overrides:
        flaky_safety: {timeout: 5}
    logging:
      enabled: true
      format: jsonl
    default: [direct]
    interactors:
      web:
        - logging
        - {name: autoscroll, recoverable: [PerformError]}
        - flaky_safe
"""

from __future__ import annotations

import builtins
import importlib
import json
import os
from typing import Any, Dict, List, Optional, Tuple

import yaml
from jsonschema import Draft202012Validator

from . import exceptions as uisafe_exceptions
from .config import TimeConfig, TimeoutSettings
from .exceptions import ConfigError
from .flaky import FlakySafeInteractor
from .interactionlogger import INTERACTION_LOGGER
from .interactors import (DirectInteractor, FailureLoggingInteractor,
                          Interactor, InteractorChain, LoggingInteractor)
from .recovery import AutoscrollInteractor
from .registry import InteractorRegistry

DEFAULT_SCHEMA_PATH = os.path.join(os.path.dirname(__file__), "schemas", "profile.schema.json")


def resolve_exception(name: str) -> type:
    """
    Resolve an exception class by name: uisafe exceptions and builtins by
    bare name, anything else as "package.module.ClassName".
    """
    if "." in name:
        module_name, _, attr = name.rpartition(".")
        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise ConfigError(f"Cannot import module for exception '{name}': {e}") from e
        candidate = getattr(module, attr, None)
    else:
        candidate = getattr(uisafe_exceptions, name, None) or getattr(builtins, name, None)

    if not (isinstance(candidate, type) and issubclass(candidate, BaseException)):
        raise ConfigError(f"Not an exception class: {name}")
    if not issubclass(candidate, Exception):
        raise ConfigError(f"Interactors only handle Exception subclasses: {name}")
    return candidate


def _resolve_exceptions(names: List[str]) -> Tuple[type, ...]:
    return tuple(resolve_exception(n) for n in names)


class Profile:
    """
    Loads and validates an interactor profile and builds interactors from it.
    """

    def __init__(self, data: Dict[str, Any], source: str = "<dict>", schema_path: Optional[str] = None):
        self.source = source
        self.schema_path = os.path.abspath(schema_path or DEFAULT_SCHEMA_PATH)
        self._validator = Draft202012Validator(self._load_schema(self.schema_path))
        self._raw = data
        self.validate(data)
        self._timing = data.get("timing", {}) or {}
        self._logging = data.get("logging", {}) or {}
        self._default = data.get("default", []) or []
        self._chains: Dict[str, List[Any]] = data.get("interactors", {}) or {}
        self._time_config = self._build_time_config()
        self._check_chains()

    @classmethod
    def load(cls, path: str, schema_path: Optional[str] = None) -> Profile:
        """Load a profile from a YAML file."""
        path = os.path.abspath(path)
        return cls(cls._load_yaml(path), source=path, schema_path=schema_path)

    @staticmethod
    def _load_yaml(path: str) -> Dict[str, Any]:
        if not os.path.exists(path):
            raise ConfigError(f"Profile YAML not found: {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError("Profile YAML must be a mapping at root.")
        return data

    @staticmethod
    def _load_schema(path: str) -> Dict[str, Any]:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def validate(self, data: Dict[str, Any]) -> None:
        """Validate profile data against the JSON schema."""
        errors = sorted(self._validator.iter_errors(data), key=lambda e: list(e.path))
        if errors:
            lines = [f"Profile schema validation failed: {self.source}"]
            for e in errors:
                lines.append(f"- {list(e.path)}: {e.message}")
            raise ConfigError("\n".join(lines))

    def _build_time_config(self) -> TimeConfig:
        try:
            return TimeConfig.build_from(
                preset=self._timing.get("preset", "default"),
                overrides=self._timing.get("overrides") or {},
            )
        except ValueError as e:
            raise ConfigError(f"Invalid timing section: {e}") from e

    def _check_chains(self) -> None:
        # Resolves every exception name once so bad names fail at load time.
        self.build_default()
        for tag in self._chains:
            self.build_interactor(tag)

    @property
    def time_config(self) -> TimeConfig:
        return self._time_config

    def tags(self) -> List[str]:
        return sorted(self._chains)

    def _build_link(self, link: Any) -> Interactor:
        spec = {"name": link} if isinstance(link, str) else dict(link)
        name = spec["name"]

        if name == "direct":
            return DirectInteractor()
        if name == "logging":
            return LoggingInteractor()
        if name == "failure_logging":
            return FailureLoggingInteractor()
        if name == "autoscroll":
            kwargs: Dict[str, Any] = {}
            if "recoverable" in spec:
                kwargs["recoverable"] = _resolve_exceptions(spec["recoverable"])
            if "pause" in spec:
                kwargs["pause"] = float(spec["pause"])
            return AutoscrollInteractor(**kwargs)
        if name == "flaky_safe":
            kwargs = {}
            if "exceptions" in spec:
                kwargs["exceptions"] = _resolve_exceptions(spec["exceptions"])
            if any(key in spec for key in ("timeout", "interval", "retry_count")):
                kwargs["settings"] = self._time_config.flaky_safety.with_overrides(
                    timeout=spec.get("timeout"),
                    interval=spec.get("interval"),
                    retry_count=spec.get("retry_count"),
                )
            return FlakySafeInteractor(**kwargs)
        raise ConfigError(f"Unknown interactor: {name}")

    def _build_chain(self, links: List[Any]) -> Interactor:
        built = [self._build_link(link) for link in links]
        if not built:
            return DirectInteractor()
        if len(built) == 1:
            return built[0]
        return InteractorChain(*built)

    def build_default(self) -> Interactor:
        return self._build_chain(self._default)

    def build_interactor(self, tag: str) -> Interactor:
        if tag not in self._chains:
            raise ConfigError(f"Unknown interactor tag: {tag}. Known: {self.tags()}")
        return self._build_chain(self._chains[tag])

    def build_registry(self, context_types: Dict[str, type]) -> InteractorRegistry:
        """
        Build a registry mapping each tag's context type to its interactor.

        @param context_types Tag -> interaction-context class
        @throws ConfigError if a tag is missing on either side
        """
        unknown = sorted(set(context_types) - set(self._chains))
        if unknown:
            raise ConfigError(f"No interactor chain configured for tags: {unknown}")
        unmapped = sorted(set(self._chains) - set(context_types))
        if unmapped:
            raise ConfigError(f"No context type given for tags: {unmapped}")

        registry = InteractorRegistry(default=self.build_default())
        for tag, context_type in context_types.items():
            registry.register(context_type, self.build_interactor(tag), tag=tag)
        return registry

    def apply(self) -> TimeConfig:
        """Install this profile's timings for the current thread and configure logging."""
        config = self._time_config.clone()
        TimeConfig.install_run_config(config)

        if self._logging:
            INTERACTION_LOGGER.configure(
                console=self._logging.get("console", True),
                file_path=self._logging.get("file"),
                level=self._logging.get("level", "INFO"),
                format=self._logging.get("format", "line"),
                max_traceback_chars=self._logging.get("max_traceback_chars", 4000),
                sample_retry_events=self._logging.get("sample_retry_events", 1),
            )
            if self._logging.get("enabled", True):
                INTERACTION_LOGGER.enable()
            else:
                INTERACTION_LOGGER.disable()
        return config

    def describe(self) -> Dict[str, Any]:
        """Resolved view of the profile, for display."""
        return {
            "source": self.source,
            "timing": {
                "preset": self._time_config.preset,
                "values": self._time_config.to_dict(),
            },
            "logging": dict(self._logging),
            "default": repr(self.build_default()),
            "interactors": {tag: repr(self.build_interactor(tag)) for tag in self.tags()},
        }
