"""
uisafe - resilient execution of flaky UI interactions.

Wraps interaction calls in chains of policy-driven interactors and applies
them transparently through safe proxies:

    from uisafe import AutoscrollInteractor, safe_proxy

    button = safe_proxy(web_button, IButton, interactor=AutoscrollInteractor())
    button.click()   # scrolled into view and retried once on PerformError
"""

from uisafe.capabilities import (capability_members, discover_capabilities,
                                 expand_capabilities, is_capability)
from uisafe.config import TimeConfig, TimeoutSettings
from uisafe.context import CallRecord, CallTracker
from uisafe.exceptions import (
    UISafeError,
    ConfigError,
    TimeoutError,
    PerformError,
    CapabilityError,
    InvalidCapabilityError,
    EmptyCapabilitySetError,
)
from uisafe.flaky import FlakySafeInteractor
from uisafe.interactionlogger import INTERACTION_LOGGER, InteractionLogger
from uisafe.interactors import (DirectInteractor, FailureLoggingInteractor,
                                Interactor, InteractorChain, LoggingInteractor)
from uisafe.profile import Profile
from uisafe.proxy import (ProxyFactory, SafeProxy, is_safe_proxy, safe_proxy,
                          unwrap)
from uisafe.recovery import (AutoscrollInteractor, FailureKind,
                             RecoveryInteractor, Scrollable)
from uisafe.registry import InteractorRegistry

__all__ = [
    "Interactor",
    "DirectInteractor",
    "InteractorChain",
    "LoggingInteractor",
    "FailureLoggingInteractor",
    "RecoveryInteractor",
    "AutoscrollInteractor",
    "FlakySafeInteractor",
    "FailureKind",
    "Scrollable",
    "InteractorRegistry",
    "ProxyFactory",
    "SafeProxy",
    "safe_proxy",
    "unwrap",
    "is_safe_proxy",
    "is_capability",
    "discover_capabilities",
    "expand_capabilities",
    "capability_members",
    "Profile",
    "TimeConfig",
    "TimeoutSettings",
    "CallRecord",
    "CallTracker",
    "INTERACTION_LOGGER",
    "InteractionLogger",
    "UISafeError",
    "ConfigError",
    "TimeoutError",
    "PerformError",
    "CapabilityError",
    "InvalidCapabilityError",
    "EmptyCapabilitySetError",
]

__version__ = "1.0.0"
