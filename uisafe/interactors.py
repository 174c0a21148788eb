"""
@file interactors.py
@brief The Interactor contract and the general-purpose interactors.

An Interactor receives an interaction context (what is being interacted
with) and an Action (a zero-argument callable performing one attempt) and
decides how the action is executed: directly, repeatedly, with recovery.
Interactors hold configuration only; everything an invocation needs lives
on the stack of that invocation.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, Optional, Sequence, TypeVar

from .context import CallRecord, CallTracker
from .interactionlogger import INTERACTION_LOGGER

C = TypeVar("C")
R = TypeVar("R")


class Interactor(ABC, Generic[C]):
    """
    Abstract interactor: manages the execution of actions and assertions
    against one kind of interaction context.
    """

    @abstractmethod
    def interact(self, context: C, action: Callable[[], R]) -> R:
        """
        Execute the action according to this interactor's policy.

        Args:
            context: Opaque handle of the thing being interacted with
            action: Zero-argument callable performing one attempt

        Returns:
            The action's result on the attempt the policy deems successful
        """
        pass

    @property
    def name(self) -> str:
        return type(self).__name__

    def __repr__(self) -> str:
        return f"{self.name}()"


class DirectInteractor(Interactor[Any]):
    """Invokes the action once, no policy."""

    def interact(self, context: Any, action: Callable[[], R]) -> R:
        return action()


class InteractorChain(Interactor[Any]):
    """
    Composes interactors into one. The first interactor is the outermost:
    it receives an action that runs the rest of the chain.
    """

    def __init__(self, *interactors: Interactor):
        self._interactors = tuple(interactors)

    @property
    def interactors(self) -> Sequence[Interactor]:
        return self._interactors

    def interact(self, context: Any, action: Callable[[], R]) -> R:
        wrapped = action
        for interactor in reversed(self._interactors):
            wrapped = _bind(interactor, context, wrapped)
        return wrapped()

    def __repr__(self) -> str:
        return f"InteractorChain({', '.join(repr(i) for i in self._interactors)})"


def _bind(interactor: Interactor, context: Any, action: Callable[[], R]) -> Callable[[], R]:
    def run() -> R:
        return interactor.interact(context, action)
    return run


class LoggingInteractor(Interactor[Any]):
    """Emits one interaction_finish event per interaction."""

    def interact(self, context: Any, action: Callable[[], R]) -> R:
        if not INTERACTION_LOGGER.is_enabled():
            return action()

        record = CallTracker.current()
        start_time = time.monotonic()
        try:
            result = action()
        except Exception as exc:
            self._emit(record, "error", start_time, exc)
            raise
        self._emit(record, "ok", start_time)
        return result

    def _emit(
        self,
        record: Optional[CallRecord],
        status: str,
        start_time: float,
        exc: Optional[BaseException] = None,
    ) -> None:
        INTERACTION_LOGGER.log(
            event="interaction_finish",
            interaction=record.method_name if record else None,
            target=record.target_name if record else None,
            call_id=record.call_id if record else None,
            interactor=self.name,
            status=status,
            duration_ms=int((time.monotonic() - start_time) * 1000),
            exception=exc,
            phase="execute",
        )


class FailureLoggingInteractor(Interactor[Any]):
    """Logs failed interactions with their call trace and re-raises them unchanged."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._log = logger or logging.getLogger("uisafe")

    def interact(self, context: Any, action: Callable[[], R]) -> R:
        try:
            return action()
        except Exception as exc:
            record = CallTracker.current()
            trace = record.format_trace() if record else CallTracker.get_current_description()
            self._log.error(
                "Interaction failed: %s: %s\n%s", type(exc).__name__, exc, trace
            )
            raise
