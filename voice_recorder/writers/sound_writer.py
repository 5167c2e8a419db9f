"""Audio file writer using the soundfile library.

This module provides safe, context-managed audio file writing
with proper resource cleanup.
"""

import logging
from pathlib import Path
from typing import Self

import numpy as np
import soundfile as sf
from numpy.typing import NDArray

from voice_recorder.config import AudioConfig
from voice_recorder.exceptions import AudioWriteError

logger = logging.getLogger(__name__)


def is_supported_format(recording_format: str) -> bool:
    """Whether soundfile can write files with the extension ``recording_format``."""
    return recording_format.upper() in sf.available_formats()


class SoundFileWriter:
    """Writes audio data to a file in any soundfile-supported format.

    The container is taken from ``recording_format`` (e.g. "wav", "flac").

    Args:
        path: Output file path.
        config: Audio configuration (sample rate, channels).
        recording_format: File format/extension.

    Example:
        with SoundFileWriter(Path("memo.wav"), config, "wav") as writer:
            writer.write(audio_chunk)
        # File is automatically closed and finalized
    """

    def __init__(self, path: Path, config: AudioConfig, recording_format: str = "wav") -> None:
        self._path = path
        self._config = config
        self._format = recording_format.upper()
        self._file: sf.SoundFile | None = None
        self._frames_written = 0

    @property
    def path(self) -> Path:
        return self._path

    @property
    def frames_written(self) -> int:
        return self._frames_written

    @property
    def duration(self) -> float:
        """Duration of audio written in seconds."""
        return self._frames_written / self._config.sample_rate

    def open(self) -> None:
        """Open the file for writing.

        Raises:
            AudioWriteError: If the file cannot be created.
        """
        try:
            self._file = sf.SoundFile(
                self._path,
                mode="w",
                samplerate=self._config.sample_rate,
                channels=self._config.channels,
                format=self._format,
            )
            logger.info("Opened %s for writing", self._path)
        except (sf.SoundFileError, OSError, ValueError) as e:
            raise AudioWriteError(f"Failed to open {self._path}: {e}") from e

    def __enter__(self) -> Self:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: Exception | None,
        exc_tb: object,
    ) -> None:
        self.close()

    def write(self, data: NDArray[np.float32]) -> None:
        """Write audio data to the file.

        Args:
            data: Audio data as float32 array with shape (frames, channels).

        Raises:
            AudioWriteError: If writing fails or file is not open.
        """
        if self._file is None:
            raise AudioWriteError("Writer not opened")

        if data.size == 0:
            return

        try:
            self._file.write(data)
            self._frames_written += data.shape[0]
        except sf.SoundFileError as e:
            raise AudioWriteError(f"Failed to write audio data: {e}") from e

    def close(self) -> None:
        """Close the writer and finalize the output file.

        Raises:
            AudioWriteError: If the file cannot be finalized.
        """
        if self._file is None:
            return
        try:
            self._file.close()
            logger.info(
                "Closed %s (%.2f seconds, %d frames)",
                self._path,
                self.duration,
                self._frames_written,
            )
        except sf.SoundFileError as e:
            raise AudioWriteError(f"Error closing {self._path}: {e}") from e
        finally:
            self._file = None
