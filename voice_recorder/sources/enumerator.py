"""Microphone enumeration using sounddevice and PulseAudio/PipeWire.

This module discovers input devices through sounddevice (PortAudio) and uses
pulsectl to recognise sink monitors, which are inputs but not microphones.
"""

from dataclasses import dataclass

import pulsectl
import sounddevice as sd

from voice_recorder.exceptions import DeviceNotFoundError, NoDevicesAvailableError

# Generic/virtual PortAudio devices that aren't real microphones
VIRTUAL_DEVICES = ("sysdefault", "pipewire", "default", "spdif")


@dataclass(frozen=True)
class AudioDevice:
    """Represents a microphone.

    Attributes:
        index: Sounddevice device index.
        name: Device name as seen by sounddevice.
        is_default: Whether this is the default input device.
        input_channels: Number of input channels.
    """

    index: int
    name: str
    is_default: bool = False
    input_channels: int = 1

    def __str__(self) -> str:
        return f"{self.name} [default]" if self.is_default else self.name


class DeviceEnumerator:
    """Enumerates and selects microphones.

    Example:
        with DeviceEnumerator() as enumerator:
            mic = enumerator.get_default_microphone()
    """

    def __init__(self) -> None:
        self._pulse: pulsectl.Pulse | None = None
        self._monitor_names: set[str] = set()

    def __enter__(self) -> "DeviceEnumerator":
        try:
            self._pulse = pulsectl.Pulse("voice-recorder-enumerator")
        except pulsectl.PulseError:
            # No PulseAudio server; every input is treated as a microphone
            self._pulse = None
        self._load_monitor_names()
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        if self._pulse is not None:
            self._pulse.close()
            self._pulse = None

    def _load_monitor_names(self) -> None:
        """Load sink descriptions, which name the monitor inputs."""
        if self._pulse is None:
            return
        for sink in self._pulse.sink_list():
            self._monitor_names.add(sink.description or sink.name)

    def _is_monitor_device(self, device: dict) -> bool:
        if device.get("max_output_channels", 0) <= 0:
            return False
        return any(desc in device["name"] for desc in self._monitor_names)

    def _get_default_input_index(self) -> int | None:
        try:
            default = sd.query_devices(kind="input")
            if isinstance(default, dict):
                return default.get("index")
        except sd.PortAudioError:
            pass
        return None

    def list_microphones(self) -> list[AudioDevice]:
        """List available microphones.

        Raises:
            NoDevicesAvailableError: If no microphones are available.
        """
        default_idx = self._get_default_input_index()
        devices = sd.query_devices()
        if isinstance(devices, dict):
            devices = [devices]

        mics = []
        for idx, d in enumerate(devices):
            if d.get("max_input_channels", 0) <= 0:
                continue
            if d["name"] in VIRTUAL_DEVICES or self._is_monitor_device(d):
                continue
            mics.append(
                AudioDevice(
                    index=idx,
                    name=d["name"],
                    is_default=(idx == default_idx),
                    input_channels=d.get("max_input_channels", 1),
                )
            )

        if not mics:
            raise NoDevicesAvailableError("microphone")
        return mics

    def get_default_microphone(self) -> AudioDevice:
        """Get the default microphone, or the first one if none is marked default.

        Raises:
            NoDevicesAvailableError: If no microphones are available.
        """
        mics = self.list_microphones()
        for mic in mics:
            if mic.is_default:
                return mic
        return mics[0]

    def find_microphone(self, name: str) -> AudioDevice:
        """Find a microphone by case-insensitive name substring.

        Raises:
            DeviceNotFoundError: If no matching microphone is found.
        """
        search = name.lower()
        for mic in self.list_microphones():
            if search in mic.name.lower():
                return mic
        raise DeviceNotFoundError(name, "microphone")
