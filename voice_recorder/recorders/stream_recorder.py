"""Recorder handle that records a live stream into a sound file.

StreamRecorderControl implements the ``RecorderControl`` protocol on top of
a ``SoundDeviceStream`` and a ``SoundFileWriter``. Buffered audio is moved
from the stream into the file by a pump timer on the scheduler, so all file
I/O happens on the scheduler's thread.
"""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from voice_recorder.config import AudioConfig
from voice_recorder.core.protocols import (
    AudioStream,
    ErrorCallback,
    RecorderControl,
    RecordingSettings,
    Scheduler,
    SuccessCallback,
    TimerHandle,
)
from voice_recorder.exceptions import AudioCaptureError, AudioWriteError
from voice_recorder.writers.sound_writer import SoundFileWriter, is_supported_format

logger = logging.getLogger(__name__)


class StreamRecorderControl:
    """Records a live stream into the file named by the applied settings.

    Args:
        stream: Live microphone stream to record from.
        scheduler: Scheduler for callbacks and the pump timer.
        config: Audio parameters of the stream.
        pump_interval: Seconds between two transfers from stream to file.
    """

    def __init__(
        self,
        stream: AudioStream,
        scheduler: Scheduler,
        config: AudioConfig,
        pump_interval: float = 0.05,
    ) -> None:
        self._stream = stream
        self._scheduler = scheduler
        self._config = config
        self._pump_interval = pump_interval
        self._settings: RecordingSettings | None = None
        self._writer: SoundFileWriter | None = None
        self._pump: TimerHandle | None = None
        self._write_error: AudioWriteError | None = None
        self._released = False

    @property
    def settings(self) -> RecordingSettings | None:
        return self._settings

    @property
    def is_recording(self) -> bool:
        return self._writer is not None

    def _defer(self, callback: Callable[..., None], *args: Any) -> None:
        self._scheduler.call_soon(lambda: callback(*args))

    def apply_settings(
        self,
        settings: RecordingSettings,
        on_success: SuccessCallback,
        on_error: ErrorCallback,
    ) -> None:
        if self._released:
            self._defer(on_error, AudioCaptureError("Recorder handle was released"))
        elif self.is_recording:
            self._defer(on_error, AudioCaptureError("Cannot change settings while recording"))
        elif not is_supported_format(settings.recording_format):
            self._defer(
                on_error,
                AudioWriteError(f"Unsupported recording format: '{settings.recording_format}'"),
            )
        else:
            self._settings = settings
            self._defer(on_success)

    def start(self, on_success: SuccessCallback, on_error: ErrorCallback) -> None:
        if self._settings is None:
            self._defer(on_error, AudioCaptureError("Recorder settings not applied"))
            return
        if self.is_recording or self._released:
            self._defer(on_error, AudioCaptureError("Recorder is not idle"))
            return

        path = Path(self._settings.path or self._settings.file_name)
        writer = SoundFileWriter(path, self._config, self._settings.recording_format)
        try:
            writer.open()
        except AudioWriteError as e:
            self._defer(on_error, e)
            return

        self._stream.clear_buffer()
        self._writer = writer
        self._write_error = None
        self._schedule_pump()
        self._defer(on_success)

    def _schedule_pump(self) -> None:
        self._pump = self._scheduler.call_later(self._pump_interval, self._on_pump)

    def _on_pump(self) -> None:
        self._pump = None
        if self._writer is None:
            return
        if self._transfer():
            self._schedule_pump()

    def _transfer(self) -> bool:
        """Move buffered audio into the file; False once writing failed."""
        if self._writer is None or self._write_error is not None:
            return False
        data = self._stream.read_all()
        if data is None:
            return True
        try:
            self._writer.write(data)
        except AudioWriteError as e:
            logger.error("%s", e)
            self._write_error = e
            return False
        return True

    def _cancel_pump(self) -> None:
        if self._pump is not None:
            self._pump.cancel()
            self._pump = None

    def stop(self, on_success: SuccessCallback, on_error: ErrorCallback) -> None:
        writer = self._writer
        if writer is None:
            self._defer(on_error, AudioCaptureError("Recorder is not recording"))
            return

        self._cancel_pump()
        self._transfer()
        self._writer = None
        try:
            writer.close()
        except AudioWriteError as e:
            self._defer(on_error, e)
            return

        if self._write_error is not None:
            self._defer(on_error, self._write_error)
        else:
            self._defer(on_success)

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        self._cancel_pump()
        if self._writer is not None:
            try:
                self._writer.close()
            except AudioWriteError as e:
                logger.error("%s", e)
            self._writer = None
        self._stream.close()


class StreamRecorderFactory:
    """Creates ``StreamRecorderControl`` handles for live streams.

    Args:
        scheduler: Scheduler passed on to the created handles.
        config: Audio parameters of the streams.
    """

    def __init__(self, scheduler: Scheduler, config: AudioConfig | None = None) -> None:
        self._scheduler = scheduler
        self._config = config or AudioConfig()

    def create_control(
        self,
        stream: AudioStream,
        on_success: Callable[[RecorderControl], None],
        on_error: ErrorCallback,
    ) -> None:
        if not stream.is_active:
            error = AudioCaptureError(f"Stream {stream.name} is not capturing")
            self._scheduler.call_soon(lambda: on_error(error))
            return
        control = StreamRecorderControl(stream, self._scheduler, self._config)
        self._scheduler.call_soon(lambda: on_success(control))
