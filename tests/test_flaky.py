"""
Tests for FlakySafeInteractor.
"""

import pytest

from uisafe.config import TimeConfig, TimeoutSettings
from uisafe.exceptions import PerformError
from uisafe.flaky import FlakySafeInteractor


def flaky(failures, error_type=PerformError):
    counter = {"value": 0, "errors": []}

    def action():
        counter["value"] += 1
        if counter["value"] <= failures:
            error = error_type(f"attempt {counter['value']}")
            counter["errors"].append(error)
            raise error
        return "passed"

    action.counter = counter
    return action


class TestFlakySafeInteractor:
    """Tests for repeated execution of flaky actions."""

    def test_passes_after_transient_failures(self):
        """Should return once the action stops failing."""
        interactor = FlakySafeInteractor(settings=TimeoutSettings(timeout=5, interval=0.01))
        action = flaky(2)

        assert interactor.interact(None, action) == "passed"
        assert action.counter["value"] == 3

    def test_raises_last_failure_of_the_action(self):
        """Should raise the action's last failure, not a TimeoutError."""
        interactor = FlakySafeInteractor(settings=TimeoutSettings(timeout=0.2, interval=0.05))
        action = flaky(1000)

        with pytest.raises(PerformError) as exc_info:
            interactor.interact(None, action)

        assert exc_info.value is action.counter["errors"][-1]

    def test_other_errors_propagate_immediately(self):
        """Should not retry errors outside the flaky kinds."""
        interactor = FlakySafeInteractor(
            exceptions=(PerformError,),
            settings=TimeoutSettings(timeout=5, interval=0.01),
        )
        action = flaky(3, error_type=ValueError)

        with pytest.raises(ValueError):
            interactor.interact(None, action)
        assert action.counter["value"] == 1

    def test_retry_count_bounds_attempts(self):
        """Should stop after retry_count attempts."""
        interactor = FlakySafeInteractor(
            settings=TimeoutSettings(timeout=60, interval=0.0, retry_count=3)
        )
        action = flaky(10)

        with pytest.raises(PerformError) as exc_info:
            interactor.interact(None, action)

        assert action.counter["value"] == 3
        assert exc_info.value is action.counter["errors"][-1]

    def test_assertion_errors_are_flaky_by_default(self):
        """Should retry AssertionError by default."""
        interactor = FlakySafeInteractor(settings=TimeoutSettings(timeout=5, interval=0.01))
        assert interactor.interact(None, flaky(1, error_type=AssertionError)) == "passed"

    def test_reads_time_config_at_interaction_time(self):
        """Should read settings from the current TimeConfig."""
        interactor = FlakySafeInteractor()
        action = flaky(10)

        with TimeConfig.override(flaky_safety={"retry_count": 2, "interval": 0.0}):
            with pytest.raises(PerformError):
                interactor.interact(None, action)

        assert action.counter["value"] == 2
