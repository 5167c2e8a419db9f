"""Microphone capture using the sounddevice library.

SoundDeviceStream buffers audio from a PortAudio callback thread in a
thread-safe queue. SoundDeviceCapture opens such streams in an executor and
reports the outcome through callbacks on the event loop thread.
"""

import asyncio
import logging
from collections.abc import Callable
from queue import Empty, Full, Queue
from typing import Any

import numpy as np
import sounddevice as sd
from numpy.typing import NDArray

from voice_recorder.config import AudioConfig
from voice_recorder.core.protocols import AudioStream, ErrorCallback
from voice_recorder.exceptions import AudioCaptureError, VoiceRecorderError
from voice_recorder.sources.enumerator import DeviceEnumerator

logger = logging.getLogger(__name__)


class SoundDeviceStream:
    """A live microphone stream backed by ``sd.InputStream``.

    The callback runs in a separate thread managed by sounddevice/PortAudio.

    Args:
        device_index: Sounddevice device index.
        device_name: Human-readable device name for logging.
        config: Audio configuration parameters.
    """

    def __init__(self, device_index: int, device_name: str, config: AudioConfig) -> None:
        self._device_index = device_index
        self._device_name = device_name
        self._config = config
        self._buffer: Queue[NDArray[np.float32]] = Queue(maxsize=config.buffer_size)
        self._stream: sd.InputStream | None = None
        self._overflow_count = 0

    @property
    def name(self) -> str:
        return self._device_name

    @property
    def is_active(self) -> bool:
        return self._stream is not None and self._stream.active

    def _audio_callback(
        self,
        indata: NDArray[np.float32],
        frames: int,
        time_info: Any,
        status: sd.CallbackFlags,
    ) -> None:
        """Callback invoked by sounddevice when audio data is available.

        This runs in a separate thread - must be thread-safe and fast.
        """
        if status.input_overflow:
            logger.warning("Input overflow on %s", self._device_name)

        # Copy data since sounddevice may reuse the buffer
        try:
            self._buffer.put_nowait(indata.copy())
        except Full:
            self._overflow_count += 1
            if self._overflow_count % 10 == 1:  # Log every 10th overflow
                logger.warning(
                    "Buffer overflow on %s (count: %d)", self._device_name, self._overflow_count
                )

    def open(self) -> None:
        """Open the device and start capturing.

        Raises:
            AudioCaptureError: If the stream cannot be opened.
        """
        if self._stream is not None:
            logger.warning("Stream %s already open", self._device_name)
            return

        try:
            self._stream = sd.InputStream(
                device=self._device_index,
                samplerate=self._config.sample_rate,
                channels=self._config.channels,
                dtype=self._config.dtype,
                blocksize=self._config.block_size,
                callback=self._audio_callback,
            )
            self._stream.start()
            logger.info("Opened %s (index %d)", self._device_name, self._device_index)
        except sd.PortAudioError as e:
            self._stream = None
            raise AudioCaptureError(f"Failed to open {self._device_name}: {e}") from e

    def close(self) -> None:
        """Stop capturing and free the device."""
        if self._stream is None:
            return

        try:
            self._stream.stop()
            self._stream.close()
        except sd.PortAudioError as e:
            logger.error("Error closing stream %s: %s", self._device_name, e)
        finally:
            self._stream = None
            logger.info("Closed %s", self._device_name)

    def read(self) -> NDArray[np.float32] | None:
        """Read one buffered block, or None if the buffer is empty."""
        try:
            return self._buffer.get_nowait()
        except Empty:
            return None

    def read_all(self) -> NDArray[np.float32] | None:
        """Read all buffered audio concatenated into a single array."""
        chunks = []
        while True:
            chunk = self.read()
            if chunk is None:
                break
            chunks.append(chunk)

        if not chunks:
            return None

        return np.concatenate(chunks, axis=0)

    def clear_buffer(self) -> None:
        """Clear any buffered audio data."""
        while not self._buffer.empty():
            try:
                self._buffer.get_nowait()
            except Empty:
                break
        self._overflow_count = 0


class SoundDeviceCapture:
    """Opens microphone streams for the ``StreamAcquirer``.

    Connecting to PulseAudio, enumerating devices and opening the PortAudio
    stream all block, so they run in the event loop's default executor. The
    callbacks are delivered back on the loop thread. A device that is busy
    or missing is reported through ``on_error`` so the acquirer can retry.

    Must be used from a coroutine running on the event loop.

    Args:
        config: Audio configuration for opened streams.
        device_name: Microphone name substring (None for the default microphone).
    """

    def __init__(
        self,
        config: AudioConfig | None = None,
        device_name: str | None = None,
    ) -> None:
        self._config = config or AudioConfig()
        self._device_name = device_name

    def _open_stream(self) -> SoundDeviceStream:
        with DeviceEnumerator() as enumerator:
            if self._device_name:
                device = enumerator.find_microphone(self._device_name)
            else:
                device = enumerator.get_default_microphone()

        stream = SoundDeviceStream(device.index, device.name, self._config)
        stream.open()
        return stream

    def request_stream(
        self, on_success: Callable[[AudioStream], None], on_error: ErrorCallback
    ) -> None:
        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(None, self._open_stream)

        def on_opened(done: asyncio.Future) -> None:
            if done.cancelled():
                on_error(AudioCaptureError("Microphone request cancelled"))
                return
            error = done.exception()
            if error is None:
                on_success(done.result())
                return
            if isinstance(error, (VoiceRecorderError, sd.PortAudioError)):
                logger.debug("Microphone unavailable: %s", error)
            else:
                logger.error("Unexpected error opening microphone: %s", error)
            on_error(error)

        future.add_done_callback(on_opened)
