"""
Host application lifecycle used by the eventd startup action.
"""

import asyncio
from typing import Any, Awaitable, Callable, List, Mapping, Optional

from eventd_debug_tools import debug

from .options import EventdOptions, get_options, load_options


class StartupAction:
    """An async callable run once when the host application boots."""

    def __init__(self, fn: Callable[[], Awaitable[Any]], name: Optional[str] = None):
        self.fn = fn
        self.name = name or getattr(fn, "__name__", "startup action")

    async def run(self) -> Any:
        return await self.fn()


class HostApplication:
    """
    Minimal application host.

    Args:
        is_run_in_cli: The process is a one-shot CLI run; background
            services such as eventd are not started.
        configuration: Configuration mapping holding an "eventd" section.
            When omitted the process-wide options are used.
    """

    def __init__(self, is_run_in_cli: bool = False, configuration: Optional[Mapping[str, Any]] = None):
        self.is_run_in_cli = is_run_in_cli
        self.configuration = configuration
        self.shutdown_event = asyncio.Event()
        self._startup_actions: List[StartupAction] = []
        self._options: Optional[EventdOptions] = None

    @property
    def options(self) -> EventdOptions:
        if self._options is None:
            if self.configuration is not None:
                self._options = load_options(self.configuration)
            else:
                self._options = get_options()
        return self._options

    @property
    def startup_actions(self) -> List[StartupAction]:
        return list(self._startup_actions)

    def add_startup_action(self, action: StartupAction) -> None:
        self._startup_actions.append(action)

    async def run_startup_actions(self) -> None:
        for action in self._startup_actions:
            debug(f"running startup action: {action.name}")
            await action.run()

    def request_shutdown(self) -> None:
        self.shutdown_event.set()
