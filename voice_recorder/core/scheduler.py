"""asyncio-backed scheduler used by the core components."""

import asyncio
from collections.abc import Callable


class LoopScheduler:
    """Adapts an asyncio event loop to the ``Scheduler`` protocol.

    Args:
        loop: Event loop to schedule on (default: the running loop).
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop or asyncio.get_running_loop()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def time(self) -> float:
        return self._loop.time()

    def call_soon(self, callback: Callable[[], None]) -> asyncio.Handle:
        return self._loop.call_soon(callback)

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self._loop.call_later(delay, callback)
