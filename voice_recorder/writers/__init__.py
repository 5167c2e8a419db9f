"""Audio file writers."""

from voice_recorder.writers.sound_writer import SoundFileWriter, is_supported_format

__all__ = ["SoundFileWriter", "is_supported_format"]
