"""Command-line interface for the voice recorder.

This module provides the main entry point and argument parsing
for the voice recorder CLI tool.
"""

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path

from voice_recorder import __version__
from voice_recorder.config import AudioConfig, RecorderConfig, SessionConfig
from voice_recorder.core.controller import RecorderController
from voice_recorder.core.events import (
    CannotAccessAudio,
    EventBus,
    RecordingCancelled,
    RecordingDone,
    RecordingFailed,
    RecordingStarted,
    SessionFailed,
    SessionReady,
)
from voice_recorder.core.scheduler import LoopScheduler
from voice_recorder.destination import DirectoryResolver
from voice_recorder.exceptions import VoiceRecorderError
from voice_recorder.recorders.stream_recorder import StreamRecorderFactory
from voice_recorder.sources.enumerator import DeviceEnumerator
from voice_recorder.sources.sounddevice_source import SoundDeviceCapture
from voice_recorder.writers.sound_writer import is_supported_format

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity setting."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def list_devices() -> None:
    """List all available microphones."""
    print("Available Microphones")
    print("=" * 50)

    with DeviceEnumerator() as enumerator:
        for mic in enumerator.list_microphones():
            print(f"  {mic}")
            print(f"    Index: {mic.index}, Channels: {mic.input_channels}")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="voice-recorder",
        description="Record a short voice memo from the microphone.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Record a memo into ~/Sounds (stops after 10 seconds or Ctrl+C)
  voice-recorder

  # List available microphones
  voice-recorder --list-devices

  # Record a 30 second FLAC memo from a specific microphone
  voice-recorder -d memos --mic "USB" --max-seconds 30 --format flac
""",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--list-devices",
        action="store_true",
        help="List available microphones and exit",
    )
    parser.add_argument(
        "-d",
        "--directory",
        type=Path,
        default=None,
        help="Destination directory (default: ~/Sounds)",
    )
    parser.add_argument(
        "--mic",
        type=str,
        default=None,
        metavar="DEVICE",
        help="Microphone device name (default: system default)",
    )

    recording_group = parser.add_argument_group("Recording Options")
    recording_group.add_argument(
        "--max-seconds",
        type=float,
        default=10.0,
        metavar="SECS",
        help="Maximum recording length in seconds (default: 10)",
    )
    recording_group.add_argument(
        "--format",
        type=str,
        default="wav",
        help="Recording file format (default: wav)",
    )
    recording_group.add_argument(
        "--sample-rate",
        type=int,
        default=48000,
        metavar="HZ",
        help="Sample rate in Hz (default: 48000)",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    return parser


def validate_args(args: argparse.Namespace) -> None:
    """Validate command-line arguments.

    Raises:
        ValueError: If arguments are invalid.
    """
    if args.max_seconds <= 0:
        raise ValueError(f"Maximum length must be positive, got {args.max_seconds}")

    if args.sample_rate <= 0:
        raise ValueError(f"Sample rate must be positive, got {args.sample_rate}")

    if not is_supported_format(args.format):
        raise ValueError(f"Unsupported recording format: {args.format}")


def build_config(args: argparse.Namespace) -> RecorderConfig:
    """Build recorder configuration from arguments."""
    return RecorderConfig(
        destination_dir=args.directory,
        device_name=args.mic,
        audio=AudioConfig(sample_rate=args.sample_rate),
        session=SessionConfig(
            max_recording_time_ms=int(args.max_seconds * 1000),
            recording_format=args.format.lower(),
        ),
        verbose=args.verbose,
    )


async def record(config: RecorderConfig) -> int:
    """Acquire the microphone, record one memo and release everything.

    Returns:
        Exit code (0 for success, 1 if recording failed).
    """
    loop = asyncio.get_running_loop()
    scheduler = LoopScheduler(loop)
    bus = EventBus()
    controller = RecorderController(
        bus,
        scheduler,
        SoundDeviceCapture(config.audio, config.device_name),
        StreamRecorderFactory(scheduler, config.audio),
        DirectoryResolver(scheduler, config.destination_dir),
        config,
    )
    session = controller.session
    finished = asyncio.Event()
    exit_code = 0

    def fail(message: str, error: object = None) -> None:
        nonlocal exit_code
        exit_code = 1
        logger.error("%s%s", message, f": {error}" if error is not None else "")
        finished.set()

    def on_interrupt() -> None:
        logger.info("Interrupted, stopping recording...")
        if session.busy:
            session.stop_recording()
        else:
            finished.set()

    def on_started(event: RecordingStarted) -> None:
        logger.info("Recording to %s... Press Ctrl+C to stop", event.path)

    def on_done(event: RecordingDone) -> None:
        print(event.path)
        finished.set()

    bus.subscribe(SessionReady, lambda event: session.start_recording())
    bus.subscribe(RecordingStarted, on_started)
    bus.subscribe(RecordingDone, on_done)
    bus.subscribe(RecordingCancelled, lambda event: finished.set())
    bus.subscribe(RecordingFailed, lambda event: fail("Recording failed", event.error))
    bus.subscribe(SessionFailed, lambda event: fail("Cannot use microphone", event.error))
    bus.subscribe(CannotAccessAudio, lambda event: fail("Cannot access the microphone"))

    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, on_interrupt)

    try:
        controller.start()
        await finished.wait()
    finally:
        for signum in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(signum)
        controller.shutdown()
        # Let pending stop/close callbacks run before the loop goes away
        await asyncio.sleep(0)

    return exit_code


def main() -> int:
    """Main entry point for the CLI.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    args = parser.parse_args()

    if args.list_devices:
        try:
            list_devices()
            return 0
        except VoiceRecorderError as e:
            print(f"Error listing devices: {e}", file=sys.stderr)
            return 1

    setup_logging(args.verbose)

    try:
        validate_args(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    config = build_config(args)

    try:
        return asyncio.run(record(config))
    except VoiceRecorderError as e:
        logger.error("Recording failed: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
