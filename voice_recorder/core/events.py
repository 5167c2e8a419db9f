"""Typed lifecycle events and the in-process event bus.

Every event kind is its own frozen dataclass; the ``Event`` union lists them
all so handlers can ``match`` on it exhaustively. ``name`` keeps the short
event name used in log output.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, ClassVar, TypeVar

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StreamReady:
    """A live microphone stream has been obtained."""

    name: ClassVar[str] = "ready"
    stream: Any


@dataclass(frozen=True)
class AcquisitionRetry:
    """A stream request was denied and another attempt is scheduled."""

    name: ClassVar[str] = "retry"
    attempt: int


@dataclass(frozen=True)
class CannotAccessAudio:
    """All stream requests of a campaign were denied."""

    name: ClassVar[str] = "cannot-access-audio"


@dataclass(frozen=True)
class SessionReady:
    """The session holds a recorder handle and accepts recordings."""

    name: ClassVar[str] = "ready"


@dataclass(frozen=True)
class SessionFailed:
    """A recorder handle could not be created from a stream."""

    name: ClassVar[str] = "error"
    error: Any


@dataclass(frozen=True)
class RecordingStarted:
    """The recorder confirmed that recording began."""

    name: ClassVar[str] = "recording.start"
    path: str


@dataclass(frozen=True)
class RecordingDone:
    """A recording finished and was written to ``path``."""

    name: ClassVar[str] = "recording.done"
    path: str


@dataclass(frozen=True)
class RecordingFailed:
    """Applying settings, starting or stopping the recorder failed."""

    name: ClassVar[str] = "recording.error"
    error: Any


@dataclass(frozen=True)
class RecordingCancelled:
    """A stop request arrived before the recorder was started."""

    name: ClassVar[str] = "recording.cancel"


@dataclass(frozen=True)
class SessionReleased:
    """The recorder handle was released."""

    name: ClassVar[str] = "release"


Event = (
    StreamReady
    | AcquisitionRetry
    | CannotAccessAudio
    | SessionReady
    | SessionFailed
    | RecordingStarted
    | RecordingDone
    | RecordingFailed
    | RecordingCancelled
    | SessionReleased
)

E = TypeVar("E")
Handler = Callable[[Any], None]


class EventBus:
    """Synchronous publish/subscribe channel shared by all components.

    Handlers run in subscription order on the publisher's turn. A handler
    that raises is logged and skipped so one faulty listener never breaks
    the component that published the event.

    Example:
        bus = EventBus()
        bus.subscribe(RecordingDone, lambda event: print(event.path))
        bus.publish(RecordingDone(path="/tmp/a.wav"))
    """

    def __init__(self) -> None:
        self._handlers: dict[type, list[Handler]] = {}
        self._catch_all: list[Handler] = []

    def subscribe(self, event_type: type[E], handler: Callable[[E], None]) -> Callable[[], None]:
        """Register ``handler`` for events of ``event_type``.

        Returns:
            A callable that removes the subscription.
        """
        handlers = self._handlers.setdefault(event_type, [])
        handlers.append(handler)

        def unsubscribe() -> None:
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def subscribe_all(self, handler: Callable[[Event], None]) -> Callable[[], None]:
        """Register ``handler`` for every published event."""
        self._catch_all.append(handler)

        def unsubscribe() -> None:
            if handler in self._catch_all:
                self._catch_all.remove(handler)

        return unsubscribe

    def publish(self, event: Event) -> None:
        """Deliver ``event`` to its subscribers."""
        logger.debug("Event %s: %s", event.name, event)
        handlers = list(self._handlers.get(type(event), ())) + list(self._catch_all)
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception("Handler %r failed on %s", handler, event.name)
