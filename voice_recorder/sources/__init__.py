"""Microphone source implementations."""

from voice_recorder.sources.enumerator import AudioDevice, DeviceEnumerator
from voice_recorder.sources.sounddevice_source import SoundDeviceCapture, SoundDeviceStream

__all__ = ["AudioDevice", "DeviceEnumerator", "SoundDeviceCapture", "SoundDeviceStream"]
