"""Recording session state machine.

This module provides the RecordingSession class that owns a recorder handle,
drives start/stop requests through it, caps the recording duration and
reports every lifecycle transition on the event bus.
"""

import enum
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from voice_recorder.config import SessionConfig
from voice_recorder.core.events import (
    EventBus,
    RecordingCancelled,
    RecordingDone,
    RecordingFailed,
    RecordingStarted,
    SessionFailed,
    SessionReady,
    SessionReleased,
)
from voice_recorder.core.protocols import (
    AudioStream,
    ControlFactory,
    DestinationResolver,
    RecorderControl,
    RecordingSettings,
    Scheduler,
    TimerHandle,
)
from voice_recorder.exceptions import (
    HandleAlreadyRegisteredError,
    SessionError,
    SessionNotReadyError,
)

logger = logging.getLogger(__name__)


class SessionState(enum.Enum):
    IDLE = "idle"
    READY = "ready"
    STARTING = "starting"
    RECORDING = "recording"
    STOPPING = "stopping"


def create_file_name(
    file_name_format: str, recording_format: str, when: datetime | None = None
) -> str:
    """Build a file name such as ``20140101_120000.wav`` from a timestamp."""
    when = when or datetime.now()
    return f"{when.strftime(file_name_format)}.{recording_format}"


class RecordingSession:
    """Owns one recorder handle and runs recordings on it.

    The handle is registered once and reused for many recordings. A recording
    attempt is ``busy`` from the moment ``start_recording()`` accepts it until
    it is done, failed or the session is released; at most one attempt is in
    flight. While the recorder is running a length-check timer measures the
    elapsed time and stops the recording once ``max_recording_time_ms`` is
    exceeded. The armed timer is the authoritative "recording" signal.

    A stop requested before the recorder confirmed its settings cancels the
    attempt with ``RecordingCancelled`` but leaves the session busy: the
    caller follows up with ``release()``, which is the only way to clear it.

    Args:
        bus: Event bus that receives the session's lifecycle events.
        scheduler: Scheduler used for the length-check timer.
        control_factory: Creates recorder handles from streams.
        destination: Resolves the directory recordings are written to.
        config: Session limits and file naming.

    Example:
        session = RecordingSession(bus, scheduler, factory, resolver)
        session.init()
        session.register_stream(stream)
        # ... after SessionReady
        session.start_recording()
        session.stop_recording()
        session.release()
    """

    def __init__(
        self,
        bus: EventBus,
        scheduler: Scheduler,
        control_factory: ControlFactory | None = None,
        destination: DestinationResolver | None = None,
        config: SessionConfig | None = None,
    ) -> None:
        self._bus = bus
        self._scheduler = scheduler
        self._control_factory = control_factory
        self._destination = destination
        self._config = config or SessionConfig()

        self._control: RecorderControl | None = None
        self._destination_dir = ""
        self._destination_path = ""
        self._busy = False
        self._stop_requested = False
        self._stopping = False
        self._recording_start_time: float | None = None
        self._recording_time = 0
        self._length_check: TimerHandle | None = None

    @property
    def max_recording_time_ms(self) -> int:
        return self._config.max_recording_time_ms

    @property
    def destination_dir(self) -> str:
        """Resolved destination directory ("" until resolved)."""
        return self._destination_dir

    @property
    def destination_path(self) -> str:
        """Path of the current or last recording."""
        return self._destination_path

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def state(self) -> SessionState:
        if self._control is None:
            return SessionState.IDLE
        if self._length_check is not None:
            return SessionState.RECORDING
        if self._busy and self._stopping:
            return SessionState.STOPPING
        if self._busy:
            return SessionState.STARTING
        return SessionState.READY

    def init(self) -> None:
        """Start resolving the destination directory.

        Resolution failures are logged only; recordings then fall back to a
        bare file name.
        """
        if self._destination is None:
            return
        try:
            self._destination.resolve(self._on_destination_resolved, self._on_destination_error)
        except Exception as e:
            self._on_destination_error(e)

    def _on_destination_resolved(self, directory: str) -> None:
        self._destination_dir = directory
        logger.info("Recording destination: %s", directory)

    def _on_destination_error(self, error: Any) -> None:
        logger.error("Destination resolve error: %s", error)

    def register_stream(self, stream: AudioStream) -> None:
        """Create a recorder handle from ``stream``.

        ``SessionReady`` is published once the handle exists, ``SessionFailed``
        if it cannot be created.

        Raises:
            SessionError: If the session has no control factory.
        """
        if self._control_factory is None:
            raise SessionError("No control factory configured")
        try:
            self._control_factory.create_control(
                stream,
                self._on_control_created,
                lambda error: self._on_control_error(stream, error),
            )
        except Exception as e:
            self._on_control_error(stream, e)

    def _on_control_created(self, control: RecorderControl) -> None:
        try:
            self.register_handle(control)
        except HandleAlreadyRegisteredError as e:
            logger.error("%s", e)
            control.release()
            self._bus.publish(SessionFailed(error=e))

    def _on_control_error(self, stream: AudioStream, error: Any) -> None:
        logger.error("Recorder handle creation failed: %s", error)
        # No handle owns the stream, so nothing else will free the device
        try:
            stream.close()
        except Exception as e:
            logger.error("Error closing stream: %s", e)
        self._bus.publish(SessionFailed(error=error))

    def register_handle(self, control: RecorderControl) -> None:
        """Take ownership of ``control`` and publish ``SessionReady``.

        Raises:
            HandleAlreadyRegisteredError: If a handle is already held.
        """
        if self._control is not None:
            raise HandleAlreadyRegisteredError("A recorder handle is already registered")
        self._control = control
        logger.info("Recorder handle registered")
        self._bus.publish(SessionReady())

    def is_ready(self) -> bool:
        """True iff a recorder handle is held."""
        return self._control is not None

    def is_recording(self) -> bool:
        """True iff the length-check timer is armed."""
        return self._length_check is not None

    def get_recording_time(self) -> int:
        """Elapsed time of the current recording in milliseconds (0 when idle)."""
        return self._recording_time

    def start_recording(self) -> bool:
        """Start a new recording.

        The outcome is reported asynchronously: ``RecordingStarted`` on
        success, ``RecordingFailed`` on error, ``RecordingCancelled`` if a stop
        arrives before the recorder starts.

        Returns:
            True if the attempt was accepted, False if another one is in progress.

        Raises:
            SessionNotReadyError: If no recorder handle is registered.
        """
        if self._busy:
            return False
        if self._control is None:
            raise SessionNotReadyError("No recorder handle registered")

        self._stop_requested = False
        self._busy = True

        file_name = create_file_name(
            self._config.file_name_format, self._config.recording_format
        )
        if self._destination_dir:
            self._destination_path = str(Path(self._destination_dir) / file_name)
        else:
            logger.warning("Destination directory not resolved, recording to %s", file_name)
            self._destination_path = file_name

        settings = RecordingSettings(
            file_name=file_name,
            recording_format=self._config.recording_format,
            path=self._destination_path,
        )
        logger.debug("Applying recorder settings: %s", settings)
        try:
            self._control.apply_settings(
                settings, self._on_settings_applied, self._on_settings_error
            )
        except Exception as e:
            self._on_settings_error(e)
        return True

    def _on_settings_applied(self) -> None:
        if self._stop_requested or self._control is None:
            logger.info("Recording cancelled before start")
            self._bus.publish(RecordingCancelled())
            return
        try:
            self._control.start(self._on_recording_started, self._on_recording_start_error)
        except Exception as e:
            self._on_recording_start_error(e)

    def _on_settings_error(self, error: Any) -> None:
        logger.error("Applying recorder settings failed: %s", error)
        self._busy = False
        self._bus.publish(RecordingFailed(error=error))

    def _on_recording_started(self) -> None:
        if self._control is None:
            logger.warning("Recorder started after the session was released")
            return
        self._start_length_check()
        logger.info("Recording started: %s", self._destination_path)
        self._bus.publish(RecordingStarted(path=self._destination_path))

    def _on_recording_start_error(self, error: Any) -> None:
        logger.error("Recording start failed: %s", error)
        self._busy = False
        self._bus.publish(RecordingFailed(error=error))

    def _start_length_check(self) -> None:
        self._recording_start_time = self._scheduler.time()
        self._recording_time = 0
        self._arm_length_check()

    def _arm_length_check(self) -> None:
        self._length_check = self._scheduler.call_later(
            self._config.length_check_interval_ms / 1000, self._check_length
        )

    def _stop_length_check(self) -> None:
        if self._length_check is not None:
            self._length_check.cancel()
        self._length_check = None

    def _check_length(self) -> None:
        if self._length_check is None or self._recording_start_time is None:
            return
        elapsed = self._scheduler.time() - self._recording_start_time
        self._recording_time = round(elapsed * 1000)
        if self._recording_time > self._config.max_recording_time_ms:
            logger.info("Maximum recording time reached (%d ms)", self._recording_time)
            self.stop_recording()
            return
        self._arm_length_check()

    def stop_recording(self) -> None:
        """Stop the current recording.

        Ends with ``RecordingDone`` carrying the file path, or
        ``RecordingFailed``. Safe to call repeatedly and before the recorder
        has started: the stop request is remembered either way.
        """
        self._stop_requested = True
        control = self._control
        if not self.is_recording() or control is None:
            return

        self._stop_length_check()
        self._stopping = True
        path = self._destination_path
        try:
            control.stop(
                lambda: self._on_recording_stopped(control, path),
                lambda error: self._on_recording_stop_error(control, error),
            )
        except Exception as e:
            self._on_recording_stop_error(control, e)

    def _on_recording_stopped(self, control: RecorderControl, path: str) -> None:
        if control is not self._control:
            # Stop issued on a handle released since; the next attempt is not affected
            logger.info("Recording done after release: %s", path)
            self._bus.publish(RecordingDone(path=path))
            return
        self._busy = False
        self._stopping = False
        logger.info("Recording done: %s (%d ms)", path, self._recording_time)
        self._bus.publish(RecordingDone(path=path))
        self._recording_time = 0

    def _on_recording_stop_error(self, control: RecorderControl, error: Any) -> None:
        if control is not self._control:
            logger.error("Recording stop failed after release: %s", error)
            self._bus.publish(RecordingFailed(error=error))
            return
        logger.error("Recording stop failed: %s", error)
        self._busy = False
        self._stopping = False
        self._bus.publish(RecordingFailed(error=error))
        self._recording_time = 0

    def release(self) -> None:
        """Stop any recording in progress and free the recorder handle.

        Publishes ``SessionReleased`` if a handle was held. Safe to call
        multiple times. The outcome of a stop issued here is still published,
        but it no longer changes the session's state.
        """
        if self._busy:
            self.stop_recording()
        self._busy = False
        self._stopping = False
        self._recording_time = 0
        if self._control is None:
            return

        control = self._control
        self._control = None
        control.release()
        logger.info("Recorder handle released")
        self._bus.publish(SessionReleased())
