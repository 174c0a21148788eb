"""
Tests for timing presets and TimeConfig.
"""

import threading

import pytest

from uisafe.config import TimeConfig, TimeoutSettings, available_presets
from uisafe.timings import build_preset_values


class TestPresets:
    """Tests for timing presets."""

    def test_default_values(self):
        """Should use the base defaults without a preset."""
        config = TimeConfig()
        assert config.flaky_safety == TimeoutSettings(timeout=10.0, interval=0.5)
        assert config.after_recovery_pause == 0.0

    def test_preset_overrides(self):
        """Should apply preset values over the defaults."""
        config = TimeConfig("ci")
        assert config.flaky_safety.timeout == 30.0
        assert config.after_recovery_pause == 0.2

    def test_unknown_preset(self):
        """Should reject an unknown preset name."""
        with pytest.raises(ValueError):
            build_preset_values("turbo")

    def test_available_presets(self):
        """Should list the default and named presets."""
        assert set(available_presets()) == {"default", "fast", "slow", "ci"}


class TestTimeConfig:
    """Tests for config precedence and scoping."""

    def test_build_from_applies_overrides(self):
        """Should apply overrides on top of the preset."""
        config = TimeConfig.build_from(
            preset="fast",
            overrides={"flaky_safety": {"retry_count": 4}, "after_recovery_pause": 0.3},
        )
        assert config.flaky_safety == TimeoutSettings(timeout=5.0, interval=0.2, retry_count=4)
        assert config.after_recovery_pause == 0.3

    def test_unknown_override_field(self):
        """Should reject overrides of unknown fields."""
        with pytest.raises(ValueError):
            TimeConfig.build_from(overrides={"click_timeout": 3})

    def test_override_is_scoped(self):
        """Should restore the previous config after override()."""
        with TimeConfig.override(after_recovery_pause=1.5) as config:
            assert TimeConfig.current() is config
            assert TimeConfig.current().after_recovery_pause == 1.5
        assert TimeConfig.current().after_recovery_pause == 0.0

    def test_run_config_takes_precedence(self):
        """Should prefer the run config over override()."""
        run_config = TimeConfig("slow")
        TimeConfig.install_run_config(run_config)
        try:
            with TimeConfig.override(after_recovery_pause=9.0):
                assert TimeConfig.current() is run_config
        finally:
            TimeConfig.clear_run_config()
        assert TimeConfig.current() is TimeConfig.default()

    def test_run_config_is_per_thread(self):
        """Should not leak the run config into other threads."""
        TimeConfig.install_run_config(TimeConfig("ci"))
        seen = {}

        def worker():
            seen["pause"] = TimeConfig.current().after_recovery_pause

        thread = threading.Thread(target=worker)
        thread.start()
        thread.join()

        assert seen["pause"] == 0.0
        assert TimeConfig.current().after_recovery_pause == 0.2

    def test_to_dict_round_trip_via_clone(self):
        """Should clone into an equal but separate config."""
        config = TimeConfig.build_from(preset="slow", overrides={"after_recovery_pause": 0.4})
        clone = config.clone()

        assert clone is not config
        assert clone.to_dict() == config.to_dict()
        assert clone.preset == "slow"
