"""
Startup action that connects the global eventd client, retrying until the
server is reachable.
"""

import asyncio
from typing import Optional

from eventd_debug_tools import debug, warn

from .app import HostApplication, StartupAction
from .client import EventdClient, set_global_client
from .errors import EventdConnectError

RETRY_INTERVAL = 5.0


async def _wait(stop_event: Optional[asyncio.Event], interval: float) -> bool:
    """Sleep for interval; True if stop_event was set meanwhile."""
    if stop_event is None:
        await asyncio.sleep(interval)
        return False
    try:
        await asyncio.wait_for(stop_event.wait(), timeout=interval)
    except asyncio.TimeoutError:
        return False
    return True


async def connect_with_retry(
    client: EventdClient,
    retry_interval: float = RETRY_INTERVAL,
    stop_event: Optional[asyncio.Event] = None,
) -> bool:
    """
    Connect client, retrying every retry_interval seconds until it succeeds.

    There is no retry limit. Returns True once connected, or False when
    stop_event is set while waiting. Nkey errors are not retried.
    """
    attempt = 0
    while True:
        if stop_event is not None and stop_event.is_set():
            return False

        attempt += 1
        debug(f"connecting to eventd at {client.options}, attempt {attempt}")
        try:
            await client.connect()
        except EventdConnectError as e:
            warn(f"unable to connect to eventd server, err: {e}, retrying in {retry_interval:g}s...")
            if await _wait(stop_event, retry_interval):
                return False
            continue

        debug(f"connected to eventd server at {client.options}")
        return True


def init_eventd_client_startup_action(
    host: HostApplication,
    retry_interval: float = RETRY_INTERVAL,
) -> StartupAction:
    """Build the startup action that sets and connects the global client."""

    async def init_eventd_client() -> Optional[EventdClient]:
        if host.is_run_in_cli:
            return None

        options = host.options
        if options.disabled:
            warn("eventd.disabled is true, the eventd client is disabled")
            return None

        client = EventdClient(options)
        set_global_client(client)
        await connect_with_retry(client, retry_interval=retry_interval, stop_event=host.shutdown_event)
        return client

    return StartupAction(init_eventd_client, name="init eventd client")


def register(host: HostApplication) -> None:
    """Register the eventd startup action with host."""
    host.add_startup_action(init_eventd_client_startup_action(host))
