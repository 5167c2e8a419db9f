"""Shared fixtures: a manual scheduler and fake platform collaborators."""

from __future__ import annotations

import heapq
import itertools
from typing import Any, Callable

import numpy as np
import pytest

from voice_recorder.core.events import EventBus


class ManualHandle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Deterministic scheduler: time only moves when a test advances it."""

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[tuple[float, int, Callable[[], None], ManualHandle]] = []
        self._seq = itertools.count()

    def time(self) -> float:
        return self.now

    def call_soon(self, callback: Callable[[], None]) -> ManualHandle:
        return self.call_later(0, callback)

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle()
        heapq.heappush(self._queue, (self.now + delay, next(self._seq), callback, handle))
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for *_, handle in self._queue if not handle.cancelled)

    def run_pending(self) -> None:
        """Run everything due now, including callbacks scheduled meanwhile."""
        self.advance(0)

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target + 1e-9:
            due, _, callback, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self.now = max(self.now, due)
            callback()
        self.now = target


class FakeCapture:
    """Media capture that denies the first ``denials`` requests."""

    def __init__(self, scheduler: ManualScheduler, denials: int = 0) -> None:
        self.scheduler = scheduler
        self.denials = denials
        self.requests: list[float] = []
        self.stream = FakeStream()

    def request_stream(self, on_success: Callable, on_error: Callable) -> None:
        self.requests.append(self.scheduler.time())
        if len(self.requests) <= self.denials:
            self.scheduler.call_soon(lambda: on_error("NotAllowedError"))
        else:
            self.scheduler.call_soon(lambda: on_success(self.stream))


class FakeStream:
    def __init__(self, chunks: list[np.ndarray] | None = None) -> None:
        self.chunks = list(chunks or [])
        self.closed = False
        self.cleared = 0

    @property
    def name(self) -> str:
        return "Fake Microphone"

    @property
    def is_active(self) -> bool:
        return not self.closed

    def read_all(self) -> np.ndarray | None:
        if not self.chunks:
            return None
        data = np.concatenate(self.chunks, axis=0)
        self.chunks.clear()
        return data

    def clear_buffer(self) -> None:
        self.cleared += 1

    def close(self) -> None:
        self.closed = True


class FakeControl:
    """Recorder handle that records calls.

    In automatic mode every operation succeeds on the next turn unless it is
    listed in ``failures``. In manual mode callbacks are kept in ``pending``
    until the test resolves or rejects them.
    """

    def __init__(self, scheduler: ManualScheduler, auto: bool = True) -> None:
        self.scheduler = scheduler
        self.auto = auto
        self.failures: dict[str, Any] = {}
        self.calls: list[str] = []
        self.settings: list[Any] = []
        self.pending: dict[str, tuple[Callable, Callable]] = {}
        self.released = 0

    def _complete(self, op: str, on_success: Callable, on_error: Callable) -> None:
        self.calls.append(op)
        if not self.auto:
            self.pending[op] = (on_success, on_error)
        elif op in self.failures:
            error = self.failures[op]
            self.scheduler.call_soon(lambda: on_error(error))
        else:
            self.scheduler.call_soon(on_success)

    def resolve(self, op: str) -> None:
        on_success, _ = self.pending.pop(op)
        on_success()

    def reject(self, op: str, error: Any) -> None:
        _, on_error = self.pending.pop(op)
        on_error(error)

    def apply_settings(self, settings: Any, on_success: Callable, on_error: Callable) -> None:
        self.settings.append(settings)
        self._complete("apply", on_success, on_error)

    def start(self, on_success: Callable, on_error: Callable) -> None:
        self._complete("start", on_success, on_error)

    def stop(self, on_success: Callable, on_error: Callable) -> None:
        self._complete("stop", on_success, on_error)

    def release(self) -> None:
        self.calls.append("release")
        self.released += 1


class FakeFactory:
    def __init__(self, scheduler: ManualScheduler, control: FakeControl, error: Any = None) -> None:
        self.scheduler = scheduler
        self.control = control
        self.error = error
        self.streams: list[Any] = []

    def create_control(self, stream: Any, on_success: Callable, on_error: Callable) -> None:
        self.streams.append(stream)
        if self.error is not None:
            self.scheduler.call_soon(lambda: on_error(self.error))
        else:
            self.scheduler.call_soon(lambda: on_success(self.control))


class FakeResolver:
    def __init__(self, scheduler: ManualScheduler, directory: str | None = "/sounds") -> None:
        self.scheduler = scheduler
        self.directory = directory

    def resolve(self, on_success: Callable, on_error: Callable) -> None:
        if self.directory is None:
            self.scheduler.call_soon(lambda: on_error("NotFoundError"))
        else:
            self.scheduler.call_soon(lambda: on_success(self.directory))


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def events(bus: EventBus) -> list:
    received: list = []
    bus.subscribe_all(received.append)
    return received


@pytest.fixture
def control(scheduler: ManualScheduler) -> FakeControl:
    return FakeControl(scheduler)


def event_names(events: list) -> list[str]:
    return [event.name for event in events]
