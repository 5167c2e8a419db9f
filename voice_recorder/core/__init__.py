"""Core recording components."""

from voice_recorder.core.controller import RecorderController
from voice_recorder.core.events import EventBus
from voice_recorder.core.scheduler import LoopScheduler
from voice_recorder.core.session import RecordingSession, SessionState
from voice_recorder.core.stream import StreamAcquirer

__all__ = [
    "EventBus",
    "LoopScheduler",
    "RecorderController",
    "RecordingSession",
    "SessionState",
    "StreamAcquirer",
]
