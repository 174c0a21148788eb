"""
@file interactionlogger.py
@brief Structured event log for proxied interactions, recoveries and retries.
"""

from __future__ import annotations

import json
import os
import threading
import time
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_TRUTHY = {"1", "true", "yes", "on"}


class InteractionLogger:
    """Thread-safe interaction event logger with line/jsonl output."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._enabled = False
        self._console = True
        self._file_path: Optional[str] = None
        self._level = "INFO"
        self._format = "line"
        self._max_traceback_chars = 4000
        self._sample_retry_events = 1

    def configure(
        self,
        *,
        console: bool = True,
        file_path: Optional[str] = None,
        level: str = "INFO",
        format: str = "line",
        max_traceback_chars: int = 4000,
        sample_retry_events: int = 1,
    ) -> None:
        """Configure logger settings."""
        fmt = (format or "line").lower()
        if fmt not in {"line", "jsonl"}:
            raise ValueError("InteractionLogger format must be 'line' or 'jsonl'")

        with self._lock:
            self._console = bool(console)
            self._file_path = file_path
            self._level = level.upper()
            self._format = fmt
            self._max_traceback_chars = max(256, int(max_traceback_chars))
            self._sample_retry_events = max(1, int(sample_retry_events))

    def configure_from_env(self) -> None:
        """Configure and enable/disable from UISAFE_INTERACTION_* variables."""
        enabled = os.getenv("UISAFE_INTERACTION_LOGGING", "").lower() in _TRUTHY
        if not enabled:
            self.disable()
            return

        self.configure(
            console=True,
            file_path=os.getenv("UISAFE_INTERACTION_LOG_FILE"),
            level=os.getenv("UISAFE_INTERACTION_LOG_LEVEL", "INFO"),
            format=os.getenv("UISAFE_INTERACTION_LOG_FORMAT", "line"),
            sample_retry_events=int(os.getenv("UISAFE_INTERACTION_LOG_SAMPLE_RETRY", "1")),
        )
        self.enable()

    def enable(self) -> None:
        with self._lock:
            self._enabled = True

    def disable(self) -> None:
        with self._lock:
            self._enabled = False

    def is_enabled(self) -> bool:
        return self._enabled

    def should_log_retry_attempt(self, attempt: int) -> bool:
        """Sample retry attempt events so long retry loops don't flood the log."""
        if attempt <= 1:
            return True
        return attempt % self._sample_retry_events == 0

    def log(
        self,
        *,
        event: str,
        interaction: Optional[str] = None,
        target: Optional[str] = None,
        interactor: Optional[str] = None,
        status: str = "ok",
        duration_ms: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
        exception: Optional[BaseException] = None,
        call_id: Optional[str] = None,
        phase: Optional[str] = None,
        attempt: Optional[int] = None,
    ) -> None:
        """Emit a log event."""
        if not self._enabled:
            return

        meta = self._redact_metadata(dict(metadata or {}))

        event_obj: Dict[str, Any] = {
            "timestamp": time.strftime("%H:%M:%S"),
            "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": self._level,
            "event": event,
            "interaction": interaction,
            "call_id": call_id,
            "target": target,
            "interactor": interactor,
            "phase": phase,
            "status": status,
            "attempt": attempt,
            "duration_ms": duration_ms,
            "metadata": meta,
        }

        if exception is not None:
            event_obj["exception"] = self._format_exception(exception)

        line = self._format_output(event_obj)

        if self._console:
            print(line, flush=True)

        if self._file_path:
            self._write_file(line)

    def _write_file(self, line: str) -> None:
        try:
            os.makedirs(os.path.dirname(os.path.abspath(self._file_path)) or ".", exist_ok=True)
            with open(self._file_path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError:
            pass

    def _format_output(self, event: Dict[str, Any]) -> str:
        if self._format == "jsonl":
            return json.dumps(event, ensure_ascii=False, separators=(",", ":"), default=repr)
        return self._format_line(event)

    def _format_line(self, event: Dict[str, Any]) -> str:
        parts = [
            event.get("timestamp", ""),
            event.get("level", "INFO"),
            event.get("event", ""),
        ]

        for key in ("interaction", "call_id", "target", "interactor", "phase",
                    "attempt", "status", "duration_ms"):
            value = event.get(key)
            if value is None or value == "":
                continue
            if key == "target":
                parts.append(f"target='{value}'")
            else:
                parts.append(f"{key}={value}")

        meta = event.get("metadata") or {}
        for key, value in meta.items():
            parts.append(f"{key}={value}")

        exc = event.get("exception")
        if exc:
            parts.append(f"exc_type={exc.get('type')}")
            parts.append(f"exc_message={exc.get('message')}")

        return " | ".join(parts)

    def _redact_metadata(self, metadata: Dict[str, Any]) -> Dict[str, Any]:
        sensitive_keys = {"password", "passwd", "secret", "token"}
        redacted = {}
        for key, value in metadata.items():
            if key.lower() in sensitive_keys:
                redacted[key] = "***"
            else:
                redacted[key] = value
        return redacted

    def _format_exception(self, exception: BaseException) -> Dict[str, Any]:
        tb = "".join(traceback.format_exception(type(exception), exception, exception.__traceback__))
        if len(tb) > self._max_traceback_chars:
            tb = tb[: self._max_traceback_chars] + "...<truncated>"

        cause = exception.__cause__
        return {
            "type": type(exception).__name__,
            "message": str(exception),
            "traceback": tb.strip(),
            "cause_type": type(cause).__name__ if cause is not None else None,
            "cause_message": str(cause) if cause is not None else None,
        }


INTERACTION_LOGGER = InteractionLogger()
