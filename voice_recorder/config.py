"""Configuration dataclasses for voice recording."""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class AudioConfig:
    """Configuration for audio capture parameters.

    Attributes:
        sample_rate: Sample rate in Hz (default: 48000 for PipeWire compatibility).
        channels: Number of audio channels (default: 1, a voice microphone).
        block_size: Number of frames per audio block (default: 1024).
        dtype: NumPy dtype string for audio samples.
        buffer_size: Maximum number of audio blocks buffered by a live stream.
    """

    sample_rate: int = 48000
    channels: int = 1
    block_size: int = 1024
    dtype: str = "float32"
    buffer_size: int = 200

    def __post_init__(self) -> None:
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.channels <= 0:
            raise ValueError(f"channels must be positive, got {self.channels}")


@dataclass(frozen=True)
class AcquisitionConfig:
    """Configuration for obtaining a live microphone stream.

    Attributes:
        max_attempts: Number of requests made before giving up.
        retry_delay: Fixed delay in seconds between two requests.
    """

    max_attempts: int = 3
    retry_delay: float = 0.5

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.retry_delay < 0:
            raise ValueError(f"retry_delay must not be negative, got {self.retry_delay}")


@dataclass(frozen=True)
class SessionConfig:
    """Configuration for a recording session.

    Attributes:
        max_recording_time_ms: Recordings longer than this are stopped automatically.
        length_check_interval_ms: Period of the elapsed-time check.
        recording_format: File extension and container of recorded files.
        file_name_format: strftime pattern used for new file names.
    """

    max_recording_time_ms: int = 10000
    length_check_interval_ms: int = 10
    recording_format: str = "wav"
    file_name_format: str = "%Y%m%d_%H%M%S"

    def __post_init__(self) -> None:
        if self.max_recording_time_ms <= 0:
            raise ValueError(
                f"max_recording_time_ms must be positive, got {self.max_recording_time_ms}"
            )
        if self.length_check_interval_ms <= 0:
            raise ValueError(
                f"length_check_interval_ms must be positive, got {self.length_check_interval_ms}"
            )
        if not self.recording_format or "." in self.recording_format:
            raise ValueError(f"Invalid recording format: '{self.recording_format}'")


@dataclass
class RecorderConfig:
    """Configuration for the whole recorder.

    Attributes:
        destination_dir: Directory for recorded files (None for ~/Sounds).
        device_name: Microphone name or description (None for the default).
        audio: Audio parameters configuration.
        acquisition: Stream acquisition configuration.
        session: Recording session configuration.
        verbose: Enable verbose logging.
    """

    destination_dir: Path | None = None
    device_name: str | None = None
    audio: AudioConfig = field(default_factory=AudioConfig)
    acquisition: AcquisitionConfig = field(default_factory=AcquisitionConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    verbose: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.destination_dir, str):
            object.__setattr__(self, "destination_dir", Path(self.destination_dir))
