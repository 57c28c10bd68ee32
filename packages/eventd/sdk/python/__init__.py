"""eventd SDK - NATS client for eventd"""

__version__ = "0.1.0"

from .app import HostApplication, StartupAction
from .client import (
    EventdClient,
    get_global_client,
    on_reconnected,
    publish,
    set_global_client,
    subscribe,
)
from .errors import (
    EventdClientNotInitializedError,
    EventdConnectError,
    EventdError,
    EventdNkeyError,
    EventdOptionsError,
    EventdSerializationError,
)
from .options import EventdOptions, eventd_disabled, get_options, load_options
from .starter import connect_with_retry, init_eventd_client_startup_action

__all__ = [
    "__version__",
    "EventdClient",
    "EventdOptions",
    "HostApplication",
    "StartupAction",
    "get_global_client",
    "set_global_client",
    "publish",
    "subscribe",
    "on_reconnected",
    "get_options",
    "load_options",
    "eventd_disabled",
    "connect_with_retry",
    "init_eventd_client_startup_action",
    "EventdError",
    "EventdOptionsError",
    "EventdNkeyError",
    "EventdConnectError",
    "EventdClientNotInitializedError",
    "EventdSerializationError",
]
