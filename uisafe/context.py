# uisafe/context.py
"""
@file context.py
@brief Per-thread tracking of proxied calls for log enrichment and failure traces.
"""

from __future__ import annotations
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Generator, List, Optional
from uuid import uuid4


@dataclass
class CallRecord:
    """One capability call dispatched through a safe proxy."""
    call_id: str = field(default_factory=lambda: str(uuid4())[:8])
    method_name: str = ""
    target_name: Optional[str] = None
    capability: Optional[str] = None
    start_time: float = field(default_factory=time.time)
    metadata: Dict[str, Any] = field(default_factory=dict)
    parent: Optional[CallRecord] = None

    @property
    def description(self) -> str:
        """Human-readable description, e.g. "IButton.click on 'login'"."""
        name = f"{self.capability}.{self.method_name}" if self.capability else self.method_name
        if self.target_name:
            return f"{name} on '{self.target_name}'"
        return name

    @property
    def elapsed_time(self) -> float:
        return time.time() - self.start_time

    def to_dict(self) -> Dict[str, Any]:
        return {
            "call_id": self.call_id,
            "method_name": self.method_name,
            "target_name": self.target_name,
            "capability": self.capability,
            "elapsed_time": self.elapsed_time,
            "metadata": self.metadata,
        }

    def get_full_trace(self) -> List[CallRecord]:
        """This record followed by its parents, innermost first."""
        trace = [self]
        current = self.parent
        while current is not None:
            trace.append(current)
            current = current.parent
        return trace

    def format_trace(self) -> str:
        lines = ["Call trace (most recent first):"]
        for i, record in enumerate(self.get_full_trace()):
            prefix = "  -> " if i > 0 else "  X "
            lines.append(f"{prefix}{record.description} [{record.elapsed_time:.2f}s]")
        return "\n".join(lines)


class CallTracker:
    """Thread-safe manager for the call record stack."""

    _local = threading.local()

    @classmethod
    def _get_stack(cls) -> List[CallRecord]:
        if not hasattr(cls._local, "stack"):
            cls._local.stack = []
        return cls._local.stack

    @classmethod
    def current(cls) -> Optional[CallRecord]:
        """Get the innermost call record of this thread."""
        stack = cls._get_stack()
        return stack[-1] if stack else None

    @classmethod
    def push(cls, record: CallRecord) -> None:
        stack = cls._get_stack()
        if stack:
            record.parent = stack[-1]
        stack.append(record)

    @classmethod
    def pop(cls) -> Optional[CallRecord]:
        stack = cls._get_stack()
        return stack.pop() if stack else None

    @classmethod
    @contextmanager
    def call(
        cls,
        method_name: str,
        target_name: Optional[str] = None,
        capability: Optional[str] = None,
        **metadata: Any
    ) -> Generator[CallRecord, None, None]:
        """Context manager tracking one dispatched call."""
        record = CallRecord(
            method_name=method_name,
            target_name=target_name,
            capability=capability,
            metadata=metadata,
        )
        cls.push(record)
        try:
            yield record
        finally:
            cls.pop()

    @classmethod
    def get_current_description(cls) -> str:
        current = cls.current()
        if current:
            return current.description
        return "interaction"

    @classmethod
    def clear(cls) -> None:
        """Clear the stack (useful for test cleanup)."""
        cls._local.stack = []
