# uisafe/recovery.py
"""
@file recovery.py
@brief Retry-with-corrective-action interactors.

RecoveryInteractor runs an action; when it fails with a recoverable error
it performs one corrective sub-interaction against the same context and
retries the action once. If either step fails the *original* error is
raised, never the secondary one.

    Attempting --ok-------------------------------> Done(result)
    Attempting --unrecoverable--------------------> Done(raise error)
    Attempting --recoverable--> Recovering
    Recovering --recover ok, retry ok-------------> Done(retry result)
    Recovering --recover or retry raises----------> Done(raise original)
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Optional, Tuple, Type, TypeVar, Union

from .config import TimeConfig
from .context import CallTracker
from .exceptions import PerformError
from .interactionlogger import INTERACTION_LOGGER
from .interactors import Interactor

C = TypeVar("C")
R = TypeVar("R")

RecoverableSpec = Union[
    Type[BaseException],
    Tuple[Type[BaseException], ...],
    Callable[[BaseException], bool],
]

log = logging.getLogger("uisafe.recovery")


class FailureKind(Enum):
    """Classification of a failure seen by a recovery interactor."""
    RECOVERABLE = "recoverable"
    UNRECOVERABLE = "unrecoverable"
    RECOVERY_ATTEMPT = "recovery_attempt"


@dataclass(frozen=True)
class Attempt(Generic[R]):
    """Outcome of one call: either a value or the exception it raised."""
    value: Any = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def run(cls, func: Callable[[], R]) -> Attempt[R]:
        try:
            return cls(value=func())
        except Exception as e:
            return cls(error=e)


def _is_exception_type(candidate: Any) -> bool:
    return isinstance(candidate, type) and issubclass(candidate, BaseException)


def _check_recoverable_type(candidate: type) -> None:
    # Attempt.run never catches BaseException-only kinds (KeyboardInterrupt...).
    if not issubclass(candidate, Exception):
        raise TypeError(
            f"recoverable kinds must be Exception subclasses, got {candidate.__name__}"
        )


def as_predicate(recoverable: RecoverableSpec) -> Callable[[BaseException], bool]:
    """Normalize an exception type, tuple of types, or predicate into a predicate."""
    if _is_exception_type(recoverable):
        _check_recoverable_type(recoverable)
        return lambda error: isinstance(error, recoverable)
    if isinstance(recoverable, tuple):
        for item in recoverable:
            if not _is_exception_type(item):
                raise TypeError(f"recoverable tuple must hold exception types, got {item!r}")
            _check_recoverable_type(item)
        return lambda error: isinstance(error, recoverable)
    if callable(recoverable) and not isinstance(recoverable, type):
        return recoverable
    raise TypeError(
        "recoverable must be an exception type, a tuple of exception types or a predicate, "
        f"got {type(recoverable).__name__}"
    )


class RecoveryInteractor(Interactor[C]):
    """
    Attempt the action; on a recoverable failure run `recover(context)` once,
    then retry the action once.

    @param recover Corrective sub-interaction, called with the interaction context
    @param recoverable Exception type(s) or predicate selecting recoverable failures
    @param pause Seconds to sleep between recovery and retry
                 (None reads TimeConfig.current().after_recovery_pause)
    """

    def __init__(
        self,
        recover: Callable[[C], Any],
        recoverable: RecoverableSpec = PerformError,
        pause: Optional[float] = None,
    ):
        self._recover = recover
        self._is_recoverable = as_predicate(recoverable)
        self._pause = pause

    def interact(self, context: C, action: Callable[[], R]) -> R:
        first = Attempt.run(action)
        if first.ok:
            return first.value

        original = first.error
        if not self._is_recoverable(original):
            self._emit("recovery_skipped", FailureKind.UNRECOVERABLE, original, status="error")
            raise original

        self._emit("recovery_attempt", FailureKind.RECOVERABLE, original, status="info")
        outcome = self._recover_and_retry(context, action)
        if outcome.ok:
            self._emit("recovery_success", FailureKind.RECOVERABLE, original, status="success")
            return outcome.value

        self._emit("recovery_failed", FailureKind.RECOVERY_ATTEMPT, original, status="error",
                   secondary=outcome.error)
        raise original

    def _recover_and_retry(self, context: C, action: Callable[[], R]) -> Attempt[R]:
        corrective = Attempt.run(lambda: self._recover(context))
        if not corrective.ok:
            self._suppress("corrective sub-interaction", corrective.error)
            return corrective

        pause = self._pause if self._pause is not None else TimeConfig.current().after_recovery_pause
        if pause > 0:
            time.sleep(pause)

        second = Attempt.run(action)
        if not second.ok:
            self._suppress("retried action", second.error)
        return second

    def _suppress(self, stage: str, error: Exception) -> None:
        log.debug(
            "%s: suppressed %s failure during recovery of %s: %s: %s",
            self.name, stage, CallTracker.get_current_description(),
            type(error).__name__, error,
        )

    def _emit(
        self,
        event: str,
        kind: FailureKind,
        error: Exception,
        status: str,
        secondary: Optional[Exception] = None,
    ) -> None:
        if not INTERACTION_LOGGER.is_enabled():
            return
        metadata = {"failure_kind": kind.value, "error_type": type(error).__name__}
        if secondary is not None:
            metadata["suppressed_type"] = type(secondary).__name__
        record = CallTracker.current()
        INTERACTION_LOGGER.log(
            event=event,
            interaction=record.method_name if record else None,
            target=record.target_name if record else None,
            call_id=record.call_id if record else None,
            interactor=self.name,
            status=status,
            phase="recovery",
            metadata=metadata,
        )


class Scrollable(ABC):
    """Interaction context able to scroll its element into the viewport."""

    @abstractmethod
    def scroll_into_view(self) -> Any:
        pass

    @classmethod
    def __subclasshook__(cls, subclass: type) -> Any:
        if cls is Scrollable:
            if callable(getattr(subclass, "scroll_into_view", None)):
                return True
        return NotImplemented


class AutoscrollInteractor(RecoveryInteractor[Scrollable]):
    """
    Scrolls the element into view and retries once when the UI layer
    reports it cannot act on the element.
    """

    def __init__(self, recoverable: RecoverableSpec = PerformError, pause: Optional[float] = None):
        super().__init__(recover=_scroll_into_view, recoverable=recoverable, pause=pause)


def _scroll_into_view(context: Scrollable) -> Any:
    return context.scroll_into_view()
