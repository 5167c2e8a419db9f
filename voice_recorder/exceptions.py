"""Custom exceptions for the voice recorder."""


class VoiceRecorderError(Exception):
    """Base exception for all voice recorder errors."""


class DeviceNotFoundError(VoiceRecorderError):
    """Raised when a requested audio device cannot be found."""

    def __init__(self, device_name: str, device_type: str = "device") -> None:
        self.device_name = device_name
        self.device_type = device_type
        super().__init__(f"{device_type.capitalize()} not found: '{device_name}'")


class NoDevicesAvailableError(VoiceRecorderError):
    """Raised when no audio devices of the required type are available."""

    def __init__(self, device_type: str) -> None:
        self.device_type = device_type
        super().__init__(f"No {device_type} devices available")


class AudioCaptureError(VoiceRecorderError):
    """Raised when audio capture fails."""


class AudioWriteError(VoiceRecorderError):
    """Raised when writing audio data fails."""


class DestinationError(VoiceRecorderError):
    """Raised when the recording destination directory cannot be resolved."""


class SessionError(VoiceRecorderError):
    """Raised when the recording session is used incorrectly."""


class SessionNotReadyError(SessionError):
    """Raised when a recording is requested before a handle is registered."""


class HandleAlreadyRegisteredError(SessionError):
    """Raised when a second recorder handle is registered on a session."""
