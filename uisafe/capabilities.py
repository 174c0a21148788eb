# uisafe/capabilities.py
"""
@file capabilities.py
@brief Capability discovery for safe proxies.

A capability is an abstraction a target exposes: an abstract class with
at least one abstract member (abc.ABC style interfaces) or a
typing.Protocol class. Concrete classes are never capabilities.
"""

from __future__ import annotations

import typing
from abc import ABC
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .exceptions import EmptyCapabilitySetError, InvalidCapabilityError

_NOT_CAPABILITIES = {object, ABC, typing.Generic, typing.Protocol}


@dataclass(frozen=True)
class Member:
    """One forwardable member of a capability surface."""
    name: str
    kind: str
    owner: type
    settable: bool = False
    source: Any = None

    @property
    def is_property(self) -> bool:
        return self.kind == "property"


def _origin(candidate: Any) -> Any:
    """Map parameterized generics (IRepo[int]) to their class."""
    if isinstance(candidate, type):
        return candidate
    return typing.get_origin(candidate) or candidate


def _is_protocol(cls: type) -> bool:
    return bool(getattr(cls, "_is_protocol", False))


def is_capability(candidate: Any) -> bool:
    """Return True if candidate is an abstract class or a protocol."""
    cls = _origin(candidate)
    if not isinstance(cls, type) or cls in _NOT_CAPABILITIES:
        return False
    if _is_protocol(cls):
        return True
    return bool(getattr(cls, "__abstractmethods__", None))


def discover_capabilities(target_type: type) -> List[type]:
    """
    Every capability target_type implements, transitively, in MRO order.

    @throws EmptyCapabilitySetError if there is none
    """
    found = [cls for cls in target_type.__mro__ if is_capability(cls)]
    if not found:
        raise EmptyCapabilitySetError(target_type, target_type.__mro__)
    return found


def expand_capabilities(requested: Iterable[Any]) -> List[type]:
    """
    Validate requested capabilities and add the capabilities they inherit,
    ordered most-derived first.

    @throws InvalidCapabilityError for any requested type that is not a capability
    """
    result: List[type] = []
    for candidate in requested:
        cls = _origin(candidate)
        if not is_capability(cls):
            raise InvalidCapabilityError(candidate)
        for parent in cls.__mro__:
            if is_capability(parent) and parent not in result:
                result.append(parent)
    return most_derived_first(result)


def _has_member(target: Any, name: str) -> bool:
    # Looked up without triggering descriptors on the target.
    if any(name in vars(klass) for klass in type(target).__mro__):
        return True
    return name in getattr(target, "__dict__", {})


def ensure_implemented(target: Any, capabilities: Sequence[type]) -> None:
    """@throws InvalidCapabilityError if target does not implement a capability"""
    for cap in capabilities:
        if _is_protocol(cap):
            missing = [
                name for name in capability_members([cap])
                if not _has_member(target, name)
            ]
            if missing:
                raise InvalidCapabilityError(
                    cap, target, reason=f"target is missing protocol members {sorted(missing)}"
                )
        elif not isinstance(target, cap):
            raise InvalidCapabilityError(cap, target, reason="not implemented by target")


def _inherits(cls: type, base: type) -> bool:
    # MRO membership; issubclass() rejects non-runtime protocols.
    return cls is not base and base in cls.__mro__


def most_derived_first(capabilities: Sequence[type]) -> List[type]:
    """
    Reorder capabilities so each one precedes the capabilities it inherits.
    Otherwise the given order is kept.
    """
    pending = list(capabilities)
    ordered: List[type] = []
    while pending:
        for cap in pending:
            if not any(_inherits(other, cap) for other in pending):
                ordered.append(cap)
                pending.remove(cap)
                break
    return ordered


def minimal_bases(capabilities: Sequence[type]) -> List[type]:
    """Drop capabilities already inherited by another one, keeping order."""
    return [
        cap for cap in capabilities
        if not any(_inherits(other, cap) for other in capabilities)
    ]


def _member_for(cap: type, name: str, value: Any) -> Optional[Member]:
    if isinstance(value, property):
        return Member(name, "property", cap, settable=value.fset is not None, source=value)
    if isinstance(value, (staticmethod, classmethod)):
        return Member(name, "method", cap, source=value.__func__)
    if callable(value):
        return Member(name, "method", cap, source=value)
    return None


def capability_members(capabilities: Sequence[type]) -> Dict[str, Member]:
    """
    Public methods and properties, abstract members (dunders included) and
    protocol attributes of the given capabilities. The first capability
    defining a name wins, so pass them most-derived first
    (see most_derived_first).
    """
    members: Dict[str, Member] = {}
    for cap in capabilities:
        abstract = getattr(cap, "__abstractmethods__", frozenset())
        for name, value in vars(cap).items():
            if name in members:
                continue
            if name.startswith("_") and name not in abstract:
                continue
            member = _member_for(cap, name, value)
            if member is not None:
                members[name] = member

        if _is_protocol(cap):
            for name in getattr(cap, "__annotations__", {}):
                if name.startswith("_") or name in members:
                    continue
                members[name] = Member(name, "property", cap, settable=True)
    return members
