"""Wiring of stream acquisition and the recording session."""

import logging

from voice_recorder.config import RecorderConfig
from voice_recorder.core.events import EventBus, StreamReady
from voice_recorder.core.protocols import (
    ControlFactory,
    DestinationResolver,
    MediaCapture,
    Scheduler,
)
from voice_recorder.core.session import RecordingSession
from voice_recorder.core.stream import StreamAcquirer

logger = logging.getLogger(__name__)


def format_recording_time(milliseconds: int) -> str:
    """Format a duration as zero-padded ``MM:SS``."""
    seconds = milliseconds // 1000
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


class RecorderController:
    """Owns a StreamAcquirer and a RecordingSession and connects them.

    Once a stream is obtained it is registered with the session; the session
    publishes ``SessionReady`` when its recorder handle exists.

    Args:
        bus: Event bus shared by both components and their listeners.
        scheduler: Scheduler for retries, timers and callbacks.
        capture: Media capture layer.
        control_factory: Creates recorder handles from streams.
        destination: Resolves the recording directory.
        config: Recorder configuration.
    """

    def __init__(
        self,
        bus: EventBus,
        scheduler: Scheduler,
        capture: MediaCapture,
        control_factory: ControlFactory,
        destination: DestinationResolver | None = None,
        config: RecorderConfig | None = None,
    ) -> None:
        config = config or RecorderConfig()
        self._bus = bus
        self.acquirer = StreamAcquirer(capture, bus, scheduler, config.acquisition)
        self.session = RecordingSession(
            bus, scheduler, control_factory, destination, config.session
        )
        self._unsubscribe = bus.subscribe(StreamReady, self._on_stream_ready)

    def _on_stream_ready(self, event: StreamReady) -> None:
        self.session.register_stream(event.stream)

    def start(self) -> None:
        """Resolve the destination and request a microphone stream."""
        self.session.init()
        self.acquirer.acquire()

    def toggle_recording(self) -> bool:
        """Stop a recording in progress, or start a new one.

        A stop that lands before the recorder started cancels the attempt but
        keeps the session busy, so from then on this returns False until
        ``shutdown()`` releases the session.

        Returns:
            True if a stop was requested or a new recording accepted.
        """
        if self.session.is_recording():
            self.session.stop_recording()
            return True
        return self.session.start_recording()

    def recording_time_text(self) -> str:
        return format_recording_time(self.session.get_recording_time())

    def shutdown(self) -> None:
        """Release the session and stop listening for streams."""
        self._unsubscribe()
        self.session.release()
