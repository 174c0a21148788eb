# uisafe/timings.py
"""
@file timings.py
@brief Timing presets and defaults for interactors.
"""

from __future__ import annotations
from copy import deepcopy
from typing import Any, Dict


TIMEOUT_FIELDS: Dict[str, Dict[str, Any]] = {
    "flaky_safety": {"timeout": 10.0, "interval": 0.5},
}

PAUSE_FIELDS: Dict[str, float] = {
    "after_recovery_pause": 0.0,
}

PRESET_OVERRIDES: Dict[str, Dict[str, Any]] = {
    "fast": {
        "flaky_safety": {"timeout": 5.0, "interval": 0.2},
    },
    "slow": {
        "flaky_safety": {"timeout": 20.0, "interval": 0.7},
        "after_recovery_pause": 0.1,
    },
    "ci": {
        "flaky_safety": {"timeout": 30.0, "interval": 1.0},
        "after_recovery_pause": 0.2,
    },
}


def list_presets() -> Dict[str, Dict[str, Any]]:
    return {"default": {}, **PRESET_OVERRIDES}


def build_preset_values(preset: str) -> Dict[str, Any]:
    preset_key = (preset or "default").lower()
    values: Dict[str, Any] = {}
    values.update(deepcopy(TIMEOUT_FIELDS))
    values.update(deepcopy(PAUSE_FIELDS))

    if preset_key == "default":
        return values

    overrides = PRESET_OVERRIDES.get(preset_key)
    if overrides is None:
        raise ValueError(f"Unknown timing preset: {preset}")

    for key, value in overrides.items():
        if key in TIMEOUT_FIELDS:
            base = deepcopy(values[key])
            base.update(value)
            values[key] = base
        else:
            values[key] = value

    return values
