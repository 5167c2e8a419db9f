"""Voice recorder: microphone stream acquisition and bounded recording sessions."""

__version__ = "0.1.0"
