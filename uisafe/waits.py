# uisafe/waits.py
"""
@file waits.py
@brief Retry loops used by the retrying interactors.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Optional, Tuple, TypeVar

from .exceptions import TimeoutError
from .interactionlogger import INTERACTION_LOGGER

T = TypeVar("T")


def _now() -> float:
    """Monotonic time source for deterministic timeout calculations."""
    return time.monotonic()


def _set_timeout_metadata(
    error: TimeoutError,
    *,
    original: Optional[BaseException],
    description: str,
    timeout: float,
    attempt_count: int,
    elapsed: float,
    stage: Optional[str],
) -> None:
    error.original_exception = original
    error.description = description
    error.timeout = timeout
    error.attempt_count = attempt_count
    error.elapsed_time = elapsed
    error.stage = stage


def _log(event: str, description: str, stage: Optional[str], status: str = "info", **metadata: Any) -> None:
    if not INTERACTION_LOGGER.is_enabled():
        return
    metadata["description"] = description
    INTERACTION_LOGGER.log(event=event, status=status, phase=stage or "retry", metadata=metadata)


def _log_retry_attempt(description: str, attempt: int, stage: Optional[str]) -> None:
    if not INTERACTION_LOGGER.is_enabled():
        return
    if not INTERACTION_LOGGER.should_log_retry_attempt(attempt):
        return
    INTERACTION_LOGGER.log(
        event="retry_attempt",
        status="info",
        attempt=attempt,
        phase=stage or "retry",
        metadata={"description": description},
    )


def wait_until_passes(
    func: Callable[..., T],
    timeout: float,
    interval: float = 0.2,
    exceptions: Tuple[type, ...] = (Exception,),
    description: str = "operation",
    *args: Any,
    stage: Optional[str] = None,
    **kwargs: Any,
) -> T:
    """
    Call func(*args, **kwargs) until it stops raising one of `exceptions`.

    Exceptions outside `exceptions` propagate immediately. On timeout a
    TimeoutError is raised with the last caught exception attached as
    `original_exception` (and as __cause__).
    """
    start_time = _now()
    attempt_count = 0

    _log("retry_start", description, stage, timeout_s=timeout, interval_s=interval)

    while True:
        attempt_count += 1
        _log_retry_attempt(description, attempt_count, stage)
        try:
            result = func(*args, **kwargs)
            _log(
                "retry_success", description, stage, status="success",
                attempts=attempt_count, elapsed_s=round(_now() - start_time, 3),
            )
            return result
        except exceptions as e:
            elapsed = _now() - start_time
            time_left = timeout - elapsed

            if time_left <= 0:
                _log(
                    "retry_timeout", description, stage, status="error",
                    attempts=attempt_count, elapsed_s=round(elapsed, 3),
                )
                error = TimeoutError(
                    f"Timed out waiting for {description} after {timeout}s "
                    f"({attempt_count} attempts). "
                    f"Last error: {type(e).__name__}: {e}"
                )
                _set_timeout_metadata(
                    error,
                    original=e,
                    description=description,
                    timeout=timeout,
                    attempt_count=attempt_count,
                    elapsed=elapsed,
                    stage=stage,
                )
                raise error from e

            sleep_time = min(interval, time_left)
            _log(
                "retry_wait", description, stage,
                attempt=attempt_count, sleep_s=round(sleep_time, 3),
            )
            time.sleep(sleep_time)


def retry(
    func: Callable[..., T],
    max_attempts: int = 3,
    interval: float = 0.5,
    exceptions: Tuple[type, ...] = (Exception,),
    description: str = "operation",
    *args: Any,
    stage: Optional[str] = None,
    **kwargs: Any
) -> T:
    """Call func up to max_attempts times, sleeping `interval` between attempts."""
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    start_time = _now()
    _log("retry_start", description, stage, max_attempts=max_attempts, interval_s=interval)

    for attempt in range(1, max_attempts + 1):
        _log_retry_attempt(description, attempt, stage)
        try:
            result = func(*args, **kwargs)
            _log(
                "retry_success", description, stage, status="success",
                attempts=attempt, elapsed_s=round(_now() - start_time, 3),
            )
            return result
        except exceptions as e:
            if attempt < max_attempts:
                _log("retry_wait", description, stage, attempt=attempt, sleep_s=round(interval, 3))
                time.sleep(interval)
                continue

            elapsed = _now() - start_time
            _log(
                "retry_timeout", description, stage, status="error",
                attempts=attempt, elapsed_s=round(elapsed, 3),
            )
            error = TimeoutError(
                f"Failed {description} after {max_attempts} attempts. "
                f"Last error: {type(e).__name__}: {e}"
            )
            _set_timeout_metadata(
                error,
                original=e,
                description=description,
                timeout=elapsed,
                attempt_count=max_attempts,
                elapsed=elapsed,
                stage=stage,
            )
            raise error from e

    raise AssertionError("unreachable")
