"""
Shared fixtures: fake UI elements and global state cleanup.
"""

from abc import ABC, abstractmethod

import pytest

from uisafe.config import TimeConfig
from uisafe.context import CallTracker
from uisafe.exceptions import PerformError
from uisafe.interactionlogger import INTERACTION_LOGGER


@pytest.fixture(autouse=True)
def _reset_global_state():
    TimeConfig.reset_to_defaults()
    CallTracker.clear()
    INTERACTION_LOGGER.configure()
    INTERACTION_LOGGER.disable()
    yield
    TimeConfig.reset_to_defaults()
    CallTracker.clear()
    INTERACTION_LOGGER.configure()
    INTERACTION_LOGGER.disable()


class IClickable(ABC):
    @abstractmethod
    def click(self):
        """Click the element."""


class IText(ABC):
    @abstractmethod
    def get_text(self) -> str:
        pass

    @abstractmethod
    def set_text(self, text: str, clear_first: bool = True) -> None:
        pass


class ITextField(IText, IClickable):
    @property
    @abstractmethod
    def hint(self) -> str:
        pass


class FakeTextField(ITextField):
    """In-memory text field that can be told to fail a number of times."""

    def __init__(self, name="field", failures=0, error_factory=None):
        self.name = name
        self.text = ""
        self.calls = []
        self.scrolls = 0
        self.failures = failures
        self.error_factory = error_factory or (lambda: PerformError("click", name, "not displayed"))

    def _maybe_fail(self):
        if self.failures > 0:
            self.failures -= 1
            raise self.error_factory()

    def click(self):
        self.calls.append(("click", (), {}))
        self._maybe_fail()
        return "clicked"

    def get_text(self):
        self.calls.append(("get_text", (), {}))
        self._maybe_fail()
        return self.text

    def set_text(self, text, clear_first=True):
        self.calls.append(("set_text", (text,), {"clear_first": clear_first}))
        self._maybe_fail()
        self.text = text if clear_first else self.text + text

    @property
    def hint(self):
        return f"hint:{self.name}"

    def scroll_into_view(self):
        self.scrolls += 1


@pytest.fixture
def field():
    return FakeTextField()
