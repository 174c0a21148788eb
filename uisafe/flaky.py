# uisafe/flaky.py
"""
@file flaky.py
@brief Interactor repeating flaky actions until they pass or time runs out.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Tuple, TypeVar

from .config import TimeConfig, TimeoutSettings
from .context import CallTracker
from .exceptions import PerformError, TimeoutError
from .interactors import Interactor
from .waits import retry, wait_until_passes

R = TypeVar("R")

_STAGE = "flaky_safety"


class FlakySafeInteractor(Interactor[Any]):
    """
    Re-runs the action while it raises one of `exceptions`.

    The budget comes from `settings` or, when None, from
    TimeConfig.current().flaky_safety at interaction time: a fixed number
    of attempts if retry_count is set, otherwise a time budget. When the
    budget is exhausted the last failure of the action itself is raised.
    """

    def __init__(
        self,
        exceptions: Tuple[type, ...] = (PerformError, AssertionError),
        settings: Optional[TimeoutSettings] = None,
    ):
        self._exceptions = tuple(exceptions)
        self._settings = settings

    @property
    def exceptions(self) -> Tuple[type, ...]:
        return self._exceptions

    def _effective_settings(self) -> TimeoutSettings:
        if self._settings is not None:
            return self._settings
        return TimeConfig.current().flaky_safety

    def interact(self, context: Any, action: Callable[[], R]) -> R:
        settings = self._effective_settings()
        description = CallTracker.get_current_description()
        try:
            if settings.retry_count is not None:
                return retry(
                    action,
                    max_attempts=settings.retry_count,
                    interval=settings.interval,
                    exceptions=self._exceptions,
                    description=description,
                    stage=_STAGE,
                )
            return wait_until_passes(
                action,
                timeout=settings.timeout,
                interval=settings.interval,
                exceptions=self._exceptions,
                description=description,
                stage=_STAGE,
            )
        except TimeoutError as e:
            if e.stage != _STAGE or e.original_exception is None:
                raise
            last_failure = e.original_exception
        raise last_failure
