"""Protocol definitions for the platform layer.

The core never talks to audio hardware or the event loop directly. Every
platform call is a non-blocking request that reports its outcome through a
success or error callback on a later turn of the scheduler.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

import numpy as np
from numpy.typing import NDArray

ErrorCallback = Callable[[Any], None]
SuccessCallback = Callable[[], None]


@dataclass(frozen=True)
class RecordingSettings:
    """Settings applied to a recorder before it starts.

    Attributes:
        file_name: Name of the file to record into, including extension.
        recording_format: Container/extension of the recording (e.g. "wav").
        path: Full destination path of the file.
    """

    file_name: str
    recording_format: str
    path: str = ""


class TimerHandle(Protocol):
    """Handle of a scheduled callback."""

    def cancel(self) -> None:
        """Prevent the callback from running."""
        ...


class Scheduler(Protocol):
    """Cooperative single-threaded scheduler (an asyncio loop or a test double)."""

    def time(self) -> float:
        """Monotonic time in seconds."""
        ...

    def call_soon(self, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` on the next turn."""
        ...

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` after ``delay`` seconds."""
        ...


class AudioStream(Protocol):
    """A live audio input source obtained from the capture layer."""

    @property
    def name(self) -> str:
        """Human-readable name of the stream's device."""
        ...

    @property
    def is_active(self) -> bool:
        """Whether the stream is currently capturing audio."""
        ...

    def read_all(self) -> NDArray[np.float32] | None:
        """Read all buffered audio, or None if nothing is buffered."""
        ...

    def clear_buffer(self) -> None:
        """Discard any buffered audio data."""
        ...

    def close(self) -> None:
        """Stop capturing and free the device."""
        ...


class MediaCapture(Protocol):
    """Grants access to the microphone."""

    def request_stream(
        self, on_success: Callable[[AudioStream], None], on_error: ErrorCallback
    ) -> None:
        """Request a live microphone stream.

        Exactly one of the callbacks is invoked on a later turn.
        """
        ...


class RecorderControl(Protocol):
    """Hardware recording handle created from a stream."""

    def apply_settings(
        self,
        settings: RecordingSettings,
        on_success: SuccessCallback,
        on_error: ErrorCallback,
    ) -> None:
        """Configure the next recording."""
        ...

    def start(self, on_success: SuccessCallback, on_error: ErrorCallback) -> None:
        """Start recording with the applied settings."""
        ...

    def stop(self, on_success: SuccessCallback, on_error: ErrorCallback) -> None:
        """Stop recording and finalize the file."""
        ...

    def release(self) -> None:
        """Free the handle and its stream."""
        ...


class ControlFactory(Protocol):
    """Registers a stream with the recording hardware."""

    def create_control(
        self,
        stream: AudioStream,
        on_success: Callable[[RecorderControl], None],
        on_error: ErrorCallback,
    ) -> None:
        """Create a recorder handle for ``stream``."""
        ...


class DestinationResolver(Protocol):
    """Locates the directory recordings are written to."""

    def resolve(self, on_success: Callable[[str], None], on_error: ErrorCallback) -> None:
        """Resolve a writable directory path."""
        ...
