"""
@file registry.py
@brief Selection of an interactor per interaction-context type.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional, Tuple

from .exceptions import ConfigError
from .interactors import DirectInteractor, Interactor


class InteractorRegistry:
    """
    Maps interaction-context types (and optional tags) to interactors.

    resolve() walks the context's MRO, so registering a base type covers
    its subclasses; unmatched contexts get the default interactor.
    """

    def __init__(self, default: Optional[Interactor] = None):
        self._lock = threading.Lock()
        self._default: Interactor = default or DirectInteractor()
        self._by_type: Dict[type, Interactor] = {}
        self._by_tag: Dict[str, Tuple[type, Interactor]] = {}

    @property
    def default(self) -> Interactor:
        return self._default

    def register(self, context_type: type, interactor: Interactor, tag: Optional[str] = None) -> None:
        """Register interactor for context_type, replacing any previous entry."""
        if not isinstance(context_type, type):
            raise ConfigError(f"context_type must be a class, got {context_type!r}")
        if not isinstance(interactor, Interactor):
            raise ConfigError(f"interactor must be an Interactor, got {type(interactor).__name__}")
        with self._lock:
            self._by_type[context_type] = interactor
            if tag is not None:
                self._by_tag[tag] = (context_type, interactor)

    def resolve(self, context: Any) -> Interactor:
        """Interactor for the most specific registered type of context."""
        with self._lock:
            by_type = dict(self._by_type)
        for klass in type(context).__mro__:
            interactor = by_type.get(klass)
            if interactor is not None:
                return interactor
        return self._default

    def get(self, tag: str) -> Interactor:
        with self._lock:
            entry = self._by_tag.get(tag)
        if entry is None:
            raise ConfigError(f"Unknown interactor tag: {tag}. Known: {self.tags()}")
        return entry[1]

    def context_type(self, tag: str) -> type:
        with self._lock:
            entry = self._by_tag.get(tag)
        if entry is None:
            raise ConfigError(f"Unknown interactor tag: {tag}. Known: {self.tags()}")
        return entry[0]

    def tags(self) -> List[str]:
        with self._lock:
            return sorted(self._by_tag)
