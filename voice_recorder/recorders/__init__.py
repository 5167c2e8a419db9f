"""Recorder handles built on live streams."""

from voice_recorder.recorders.stream_recorder import StreamRecorderControl, StreamRecorderFactory

__all__ = ["StreamRecorderControl", "StreamRecorderFactory"]
