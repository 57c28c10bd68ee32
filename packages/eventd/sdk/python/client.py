"""
eventd client.

Wraps a single nats-py connection with eventd options, optional nkey
authentication and logging callbacks. Reconnects after the first successful
dial are handled by nats-py; the initial dial is attempted once per
connect() call and retried by the startup action.
"""

import asyncio
import inspect
import json
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from nats.aio.client import Client as NATS
from nats.aio.msg import Msg
from nats.aio.subscription import Subscription
from nats.errors import Error as NatsError

from eventd_debug_tools import debug, info, warn

from .errors import (
    EventdClientNotInitializedError,
    EventdConnectError,
    EventdSerializationError,
)
from .nkey_auth import NkeyAuth, nkey_option_from_seed_file, nkey_option_from_value, normalize_path
from .options import EventdOptions, get_options

CLIENT_NAME = "eventd publisher"

MsgHandler = Callable[[Msg], Awaitable[None]]
ReconnectHandler = Callable[[], Union[None, Awaitable[None]]]


class EventdConnection(NATS):
    """
    nats-py connection that can advertise a public nkey whose nonce
    signatures come from a caller supplied signature_cb.

    nats-py only sends the public nkey when it loaded the seed file itself,
    so it is set here before connect().
    """

    def __init__(self, public_nkey: Optional[str] = None):
        super().__init__()
        self._public_nkey = public_nkey


ConnectionFactory = Callable[[Optional[str]], NATS]


class EventdClient:
    """Client for one eventd server."""

    def __init__(
        self,
        options: Optional[EventdOptions] = None,
        connection_factory: ConnectionFactory = EventdConnection,
    ):
        self._options = options
        self._connection_factory = connection_factory
        self._nc: Optional[NATS] = None
        self._on_reconnected: Optional[ReconnectHandler] = None

    @property
    def options(self) -> EventdOptions:
        if self._options is None:
            self._options = get_options()
        return self._options

    def _nkey_auth(self) -> Optional[NkeyAuth]:
        """Nkey value takes precedence over the nkey seed file."""
        nkey = self.options.nkey_value()
        if nkey:
            return nkey_option_from_value(nkey)

        if self.options.nkey_file:
            return nkey_option_from_seed_file(normalize_path(self.options.nkey_file))
        return None

    def _build_connection_options(self, auth: Optional[NkeyAuth]) -> Dict[str, Any]:
        options = {
            "servers": [self.options.url],
            "name": CLIENT_NAME,
            "max_reconnect_attempts": -1,
            "error_cb": self._error_callback,
            "disconnected_cb": self._disconnected_callback,
            "reconnected_cb": self._reconnected_callback,
            "closed_cb": self._closed_callback,
        }
        if auth is not None:
            options["signature_cb"] = auth.signature_cb
        return options

    async def connect(self) -> None:
        """
        Dial the eventd server once.

        Raises:
            EventdNkeyError: the nkey configuration is invalid.
            EventdConnectError: the server could not be reached in time.
        """
        if self.is_connected():
            debug(f"eventd -> already connected to {self.options.url}")
            return

        # A previous connection that never came back is replaced
        await self.close()

        auth = self._nkey_auth()
        nc = self._connection_factory(auth.public_key if auth else None)
        options = self._build_connection_options(auth)

        try:
            await asyncio.wait_for(nc.connect(**options), timeout=self.options.connect_timeout)
        except asyncio.TimeoutError as e:
            raise EventdConnectError(
                f"timed out connecting to eventd at {self.options.url} after {self.options.connect_timeout}s"
            ) from e
        except (OSError, NatsError) as e:
            raise EventdConnectError(f"unable to connect to eventd at {self.options.url}: {e}") from e

        self._nc = nc
        debug(f"eventd -> connected to {self.options.url}")

    def is_connected(self) -> bool:
        return self._nc is not None and self._nc.is_connected

    def get_connection(self) -> Optional[NATS]:
        return self._nc

    def _require_connection(self) -> NATS:
        if self._nc is None:
            raise EventdClientNotInitializedError()
        return self._nc

    async def publish(self, topic: str, value: Any) -> None:
        """Publish value as JSON under topic."""
        nc = self._require_connection()
        try:
            data = json.dumps(value).encode()
        except (TypeError, ValueError) as e:
            raise EventdSerializationError(f"unable to serialize value for {topic}: {e}") from e
        await nc.publish(topic, data)

    async def subscribe(self, topic: str, handler: MsgHandler) -> Subscription:
        """Register handler for messages on topic."""
        nc = self._require_connection()
        return await nc.subscribe(topic, cb=handler)

    def on_reconnected(self, fn: ReconnectHandler) -> None:
        """Replace the reconnect handler. The last registration wins."""
        self._on_reconnected = fn

    async def drain(self) -> None:
        if self._nc and not self._nc.is_closed:
            await self._nc.drain()
            info("eventd -> drained all subscriptions and disconnected")

    async def close(self) -> None:
        if self._nc and not self._nc.is_closed:
            await self._nc.close()
            info("eventd -> disconnected gracefully")
        self._nc = None

    def _client_id(self) -> Optional[int]:
        return self._nc.client_id if self._nc else None

    # Connection event callbacks

    async def _error_callback(self, e: Exception) -> None:
        subject = getattr(e, "subject", None)
        if subject is not None:
            warn(f"eventd subscription error, topic: {subject}, err: {e}")
        else:
            warn(f"eventd -> connection error: {e}")

    async def _disconnected_callback(self) -> None:
        info(f"disconnected from eventd server, clientId: {self._client_id()}")

    async def _reconnected_callback(self) -> None:
        if self._on_reconnected is None:
            info(f"reconnected to eventd server, clientId: {self._client_id()}")
            return

        result = self._on_reconnected()
        if inspect.isawaitable(result):
            await result

    async def _closed_callback(self) -> None:
        warn("eventd -> connection closed")


_client: Optional[EventdClient] = None


def get_global_client() -> Optional[EventdClient]:
    """The process-wide client, if one was set."""
    return _client


def set_global_client(c: Optional[EventdClient]) -> None:
    global _client
    _client = c


def _global_client() -> EventdClient:
    if _client is None or _client.get_connection() is None:
        raise EventdClientNotInitializedError()
    return _client


async def publish(topic: str, value: Any) -> None:
    """Publish value as JSON through the global client."""
    await _global_client().publish(topic, value)


async def subscribe(topic: str, handler: MsgHandler) -> Subscription:
    """Subscribe handler to topic through the global client."""
    return await _global_client().subscribe(topic, handler)


def on_reconnected(fn: ReconnectHandler) -> None:
    """Replace the reconnect handler of the global client."""
    if _client is None:
        warn("eventd client is not initialized, reconnect handler ignored")
        return
    _client.on_reconnected(fn)
