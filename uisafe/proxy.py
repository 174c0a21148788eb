# uisafe/proxy.py
"""
@file proxy.py
@brief Safe proxies: same-shaped substitutes routing every capability call
through an interactor.

A proxy class is generated once per capability set. It subclasses the
capabilities (so isinstance checks against them pass) and its namespace is
a dispatch table: one forwarding function per capability member. Each call
on a proxy becomes an action that performs the identical call on the
target; the action and the interaction context are handed to the
interactor, whose result or error is what the caller sees.
"""

from __future__ import annotations

import logging
import threading
import types
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

from .capabilities import (Member, capability_members, discover_capabilities,
                           ensure_implemented, expand_capabilities,
                           minimal_bases, most_derived_first)
from .context import CallTracker
from .exceptions import ConfigError, InvalidCapabilityError
from .interactors import Interactor
from .registry import InteractorRegistry

log = logging.getLogger("uisafe.proxy")

_STATE_ATTR = "_uisafe_state"


@dataclass(frozen=True)
class ProxyState:
    """What a proxy binds: none of it is owned by the proxy."""
    target: Any
    interactor: Interactor
    context: Any
    capabilities: Tuple[type, ...]
    name: str


class SafeProxy:
    """Base of every generated proxy class."""
    __slots__ = ()


def is_safe_proxy(obj: Any) -> bool:
    return isinstance(obj, SafeProxy)


def proxy_state(proxy: Any) -> ProxyState:
    if not is_safe_proxy(proxy):
        raise TypeError(f"Not a safe proxy: {type(proxy).__name__}")
    return object.__getattribute__(proxy, _STATE_ATTR)


def unwrap(proxy: Any) -> Any:
    """Return the object behind a safe proxy."""
    return proxy_state(proxy).target


def _dispatch(state: ProxyState, member: Member, action: Callable[[], Any]) -> Any:
    with CallTracker.call(
        member.name,
        target_name=state.name,
        capability=member.owner.__name__,
    ):
        return state.interactor.interact(state.context, action)


def _forward_method(member: Member) -> Callable[..., Any]:
    name = member.name

    def forward(self: Any, *args: Any, **kwargs: Any) -> Any:
        state = proxy_state(self)
        target = state.target

        def action() -> Any:
            return getattr(target, name)(*args, **kwargs)

        return _dispatch(state, member, action)

    forward.__name__ = name
    forward.__qualname__ = f"{member.owner.__qualname__}.{name}"
    if member.source is not None:
        forward.__doc__ = getattr(member.source, "__doc__", None)
        forward.__wrapped__ = member.source
    return forward


def _forward_property(member: Member) -> property:
    name = member.name

    def fget(self: Any) -> Any:
        state = proxy_state(self)
        return _dispatch(state, member, lambda: getattr(state.target, name))

    fset = None
    if member.settable:
        def fset(self: Any, value: Any) -> None:
            state = proxy_state(self)
            _dispatch(state, member, lambda: setattr(state.target, name, value))

    doc = getattr(member.source, "__doc__", None) if member.source is not None else None
    return property(fget, fset, doc=doc)


def _proxy_repr(self: Any) -> str:
    state = proxy_state(self)
    caps = ", ".join(cap.__name__ for cap in state.capabilities)
    return f"<{type(self).__name__} [{caps}] for {state.name!r} via {state.interactor!r}>"


def _build_namespace(members: Dict[str, Member]) -> Dict[str, Any]:
    namespace: Dict[str, Any] = {"__module__": __name__, "__repr__": _proxy_repr}
    for name, member in members.items():
        if member.is_property:
            namespace[name] = _forward_property(member)
        else:
            namespace[name] = _forward_method(member)
    return namespace


_class_cache: Dict[Tuple[type, ...], type] = {}
_class_cache_lock = threading.Lock()


def proxy_class_for(capabilities: Sequence[type]) -> type:
    """Generated (and cached) proxy class for an expanded capability set."""
    key = tuple(most_derived_first(capabilities))
    with _class_cache_lock:
        cls = _class_cache.get(key)
        if cls is not None:
            return cls

        members = capability_members(key)
        namespace = _build_namespace(members)
        bases = tuple(minimal_bases(key)) + (SafeProxy,)
        try:
            cls = types.new_class(
                f"Safe{key[0].__name__}Proxy",
                bases,
                exec_body=lambda ns: ns.update(namespace),
            )
        except TypeError as e:
            raise InvalidCapabilityError(key, reason=f"capabilities cannot be combined: {e}") from e

        _class_cache[key] = cls
        log.debug("Created %s over %d members", cls.__name__, len(members))
        return cls


class ProxyFactory:
    """
    Builds safe proxies using a fixed interactor, or one resolved per
    interaction context from a registry.
    """

    def __init__(
        self,
        interactor: Optional[Interactor] = None,
        registry: Optional[InteractorRegistry] = None,
    ):
        if interactor is not None and registry is not None:
            raise ConfigError("Pass either an interactor or a registry, not both")
        self._interactor = interactor
        self._registry = registry or InteractorRegistry()

    def interactor_for(self, context: Any) -> Interactor:
        if self._interactor is not None:
            return self._interactor
        return self._registry.resolve(context)

    def wrap(
        self,
        target: Any,
        *capabilities: Any,
        context: Any = None,
        name: Optional[str] = None,
    ) -> Any:
        """
        Proxy target over the given capabilities, or over every capability
        its type implements when none are given.

        @param context Interaction context handed to the interactor (defaults to target)
        @param name Display name for logs and traces (defaults to the target's type name)
        @throws InvalidCapabilityError if a requested type is not a capability or not implemented
        @throws EmptyCapabilitySetError if discovery finds no capability
        """
        if capabilities:
            caps = expand_capabilities(capabilities)
            ensure_implemented(target, caps)
        else:
            caps = discover_capabilities(type(target))

        context = target if context is None else context
        cls = proxy_class_for(caps)
        state = ProxyState(
            target=target,
            interactor=self.interactor_for(context),
            context=context,
            capabilities=tuple(caps),
            name=name or type(target).__name__,
        )
        proxy = object.__new__(cls)
        object.__setattr__(proxy, _STATE_ATTR, state)
        return proxy


def safe_proxy(
    target: Any,
    *capabilities: Any,
    interactor: Optional[Interactor] = None,
    registry: Optional[InteractorRegistry] = None,
    context: Any = None,
    name: Optional[str] = None,
) -> Any:
    """Shortcut for ProxyFactory(interactor, registry).wrap(target, *capabilities, ...)."""
    factory = ProxyFactory(interactor=interactor, registry=registry)
    return factory.wrap(target, *capabilities, context=context, name=name)
