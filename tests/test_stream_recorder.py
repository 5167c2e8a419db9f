"""Tests for the soundfile-backed recorder handle and writer."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
import soundfile as sf

from conftest import FakeStream
from voice_recorder.config import AudioConfig
from voice_recorder.core.protocols import RecordingSettings
from voice_recorder.exceptions import AudioWriteError
from voice_recorder.recorders.stream_recorder import StreamRecorderControl, StreamRecorderFactory
from voice_recorder.writers.sound_writer import SoundFileWriter, is_supported_format

CONFIG = AudioConfig(sample_rate=8000, channels=1)


class Outcome:
    def __init__(self) -> None:
        self.results: list = []

    def ok(self) -> None:
        self.results.append("ok")

    def error(self, error) -> None:
        self.results.append(error)


def block(frames: int = 800) -> np.ndarray:
    return np.zeros((frames, 1), dtype=np.float32)


def settings_for(tmp_path: Path, recording_format: str = "wav") -> RecordingSettings:
    name = f"memo.{recording_format}"
    return RecordingSettings(name, recording_format, str(tmp_path / name))


def test_records_stream_into_file(tmp_path, scheduler) -> None:
    stream = FakeStream()
    control = StreamRecorderControl(stream, scheduler, CONFIG)
    outcome = Outcome()

    control.apply_settings(settings_for(tmp_path), outcome.ok, outcome.error)
    scheduler.run_pending()
    control.start(outcome.ok, outcome.error)
    scheduler.run_pending()
    assert control.is_recording
    assert stream.cleared == 1

    stream.chunks.append(block())
    scheduler.advance(0.1)
    stream.chunks.append(block())
    control.stop(outcome.ok, outcome.error)
    scheduler.run_pending()

    assert outcome.results == ["ok", "ok", "ok"]
    info = sf.info(str(tmp_path / "memo.wav"))
    assert info.frames == 1600
    assert info.samplerate == 8000


def test_unsupported_format_is_rejected(tmp_path, scheduler) -> None:
    control = StreamRecorderControl(FakeStream(), scheduler, CONFIG)
    outcome = Outcome()

    control.apply_settings(settings_for(tmp_path, "amr"), outcome.ok, outcome.error)
    scheduler.run_pending()

    assert isinstance(outcome.results[0], AudioWriteError)
    assert control.settings is None


def test_start_without_settings_fails(scheduler) -> None:
    control = StreamRecorderControl(FakeStream(), scheduler, CONFIG)
    outcome = Outcome()

    control.start(outcome.ok, outcome.error)
    scheduler.run_pending()

    assert isinstance(outcome.results[0], Exception)
    assert not control.is_recording


def test_stop_when_idle_fails(scheduler) -> None:
    control = StreamRecorderControl(FakeStream(), scheduler, CONFIG)
    outcome = Outcome()

    control.stop(outcome.ok, outcome.error)
    scheduler.run_pending()

    assert isinstance(outcome.results[0], Exception)


def test_start_into_missing_directory_fails(tmp_path, scheduler) -> None:
    control = StreamRecorderControl(FakeStream(), scheduler, CONFIG)
    outcome = Outcome()
    settings = RecordingSettings("a.wav", "wav", str(tmp_path / "missing" / "a.wav"))

    control.apply_settings(settings, outcome.ok, outcome.error)
    control.start(outcome.ok, outcome.error)
    scheduler.run_pending()

    assert outcome.results[0] == "ok"
    assert isinstance(outcome.results[1], AudioWriteError)
    assert not control.is_recording


def test_release_closes_stream_and_file(tmp_path, scheduler) -> None:
    stream = FakeStream()
    control = StreamRecorderControl(stream, scheduler, CONFIG)
    outcome = Outcome()
    control.apply_settings(settings_for(tmp_path), outcome.ok, outcome.error)
    control.start(outcome.ok, outcome.error)
    scheduler.run_pending()

    control.release()
    control.release()

    assert stream.closed
    assert not control.is_recording
    assert scheduler.pending == 0


def test_factory_rejects_inactive_stream(scheduler) -> None:
    stream = FakeStream()
    stream.close()
    factory = StreamRecorderFactory(scheduler, CONFIG)
    outcome = Outcome()

    factory.create_control(stream, outcome.results.append, outcome.error)
    scheduler.run_pending()

    assert isinstance(outcome.results[0], Exception)


def test_factory_creates_control(scheduler) -> None:
    factory = StreamRecorderFactory(scheduler, CONFIG)
    created: list = []

    factory.create_control(FakeStream(), created.append, pytest.fail)
    scheduler.run_pending()

    assert isinstance(created[0], StreamRecorderControl)


def test_writer_counts_frames(tmp_path) -> None:
    with SoundFileWriter(tmp_path / "out.flac", CONFIG, "flac") as writer:
        writer.write(block(400))
        writer.write(block(0))
        assert writer.frames_written == 400
        assert writer.duration == pytest.approx(0.05)

    assert sf.info(str(tmp_path / "out.flac")).frames == 400


def test_writer_requires_open(tmp_path) -> None:
    writer = SoundFileWriter(tmp_path / "out.wav", CONFIG)
    with pytest.raises(AudioWriteError):
        writer.write(block())


def test_supported_formats() -> None:
    assert is_supported_format("wav")
    assert is_supported_format("FLAC")
    assert not is_supported_format("amr")
