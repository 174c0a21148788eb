# uisafe/exceptions.py
"""
@file exceptions.py
@brief Exception classes for the interaction safety layer.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence


class UISafeError(Exception):
    """Base exception for the framework."""
    pass


class ConfigError(UISafeError):
    """Raised when a YAML profile or registry lookup is invalid."""
    pass


class TimeoutError(UISafeError):
    """
    Raised when a wait/retry times out.

    Preserves the last exception raised by the retried operation.

    Attributes:
        original_exception: The last exception that was raised before timeout
        description: Human-readable description of what was being retried
        timeout: The timeout value in seconds
        attempt_count: Number of attempts made
        elapsed_time: Actual elapsed time in seconds
        stage: Name of the stage that owned the retry loop
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.original_exception: Optional[BaseException] = None
        self.description: Optional[str] = None
        self.timeout: Optional[float] = None
        self.attempt_count: Optional[int] = None
        self.elapsed_time: Optional[float] = None
        self.stage: Optional[str] = None

    def __str__(self) -> str:
        base_msg = super().__str__()

        details = []
        if self.original_exception is not None:
            details.append(f"Original exception: {type(self.original_exception).__name__}")
        if self.attempt_count is not None:
            details.append(f"Attempts: {self.attempt_count}")
        if self.elapsed_time is not None:
            details.append(f"Elapsed: {self.elapsed_time:.2f}s")
        if self.stage is not None:
            details.append(f"Stage: {self.stage}")

        if details:
            return f"{base_msg} [{', '.join(details)}]"
        return base_msg

    def get_root_cause(self) -> Optional[BaseException]:
        """
        Get the root cause exception by traversing the chain.

        @return The deepest original_exception in the chain, or None
        """
        current = self.original_exception
        while current is not None:
            nested = getattr(current, "original_exception", None)
            if nested is None:
                return current
            current = nested
        return None

    def get_traceback_str(self) -> str:
        """Formatted traceback of the original exception, or an empty string."""
        if self.original_exception is None:
            return ""

        import traceback
        return "".join(traceback.format_exception(
            type(self.original_exception),
            self.original_exception,
            self.original_exception.__traceback__
        ))


class PerformError(UISafeError):
    """
    Raised by the UI layer when an element cannot be acted upon
    (hidden behind a scroll container, covered, detached...).

    This is the default recoverable failure for AutoscrollInteractor.
    """

    def __init__(
        self,
        action: str,
        element_name: Optional[str] = None,
        details: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        self.action = action
        self.element_name = element_name
        self.details = details
        self.cause = cause
        super().__init__(self.__str__())

    def __str__(self) -> str:
        base = f"PerformError: action='{self.action}'"
        if self.element_name:
            base += f" element='{self.element_name}'"
        if self.details:
            base += f" details='{self.details}'"
        if self.cause:
            base += f" cause='{type(self.cause).__name__}: {self.cause}'"
        return base


class CapabilityError(UISafeError, TypeError):
    """Base class for dispatch proxy construction errors."""
    pass


class InvalidCapabilityError(CapabilityError):
    """
    Raised when a requested capability is a concrete class rather than an
    abstraction, or when the target does not implement it.
    """

    def __init__(self, capability: Any, target: Any = None, reason: Optional[str] = None):
        self.capability = capability
        self.target = target
        self.reason = reason or "not an abstract class or protocol"
        name = getattr(capability, "__qualname__", repr(capability))
        msg = f"Invalid capability {name}: {self.reason}"
        if target is not None:
            msg += f" (target type: {type(target).__name__})"
        super().__init__(msg)


class EmptyCapabilitySetError(CapabilityError):
    """Raised when capability discovery finds nothing to proxy."""

    def __init__(self, target_type: type, inspected: Sequence[type] = ()):
        self.target_type = target_type
        self.inspected = list(inspected)
        msg = (
            f"No capabilities found on {target_type.__qualname__}. "
            "Derive the target from an abstract class or protocol, "
            "or pass the capabilities explicitly."
        )
        super().__init__(msg)
