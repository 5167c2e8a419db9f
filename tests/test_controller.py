"""End-to-end tests of the controller wiring with fake platform collaborators."""

from __future__ import annotations

import pytest

from conftest import FakeCapture, FakeControl, FakeFactory, FakeResolver, event_names
from voice_recorder.config import RecorderConfig, SessionConfig
from voice_recorder.core.controller import RecorderController, format_recording_time
from voice_recorder.core.events import SessionReady


@pytest.fixture
def controller(bus, scheduler, control) -> RecorderController:
    return RecorderController(
        bus,
        scheduler,
        FakeCapture(scheduler, denials=1),
        FakeFactory(scheduler, control),
        FakeResolver(scheduler),
    )


def test_start_acquires_stream_and_readies_session(controller, scheduler, events) -> None:
    controller.start()
    scheduler.advance(1.0)

    assert event_names(events) == ["retry", "ready", "ready"]
    assert isinstance(events[-1], SessionReady)
    assert controller.session.is_ready()
    assert controller.session.destination_dir == "/sounds"


def test_toggle_records_and_stops(controller, scheduler, events) -> None:
    controller.start()
    scheduler.advance(1.0)

    assert controller.toggle_recording() is True
    scheduler.run_pending()
    scheduler.advance(2.5)
    assert controller.recording_time_text() == "00:02"

    assert controller.toggle_recording() is True
    scheduler.run_pending()

    assert event_names(events)[-2:] == ["recording.start", "recording.done"]
    assert controller.recording_time_text() == "00:00"


def test_toggle_refused_after_cancelled_start(bus, scheduler, events) -> None:
    control = FakeControl(scheduler, auto=False)
    controller = RecorderController(
        bus, scheduler, FakeCapture(scheduler), FakeFactory(scheduler, control)
    )
    controller.start()
    scheduler.run_pending()

    assert controller.toggle_recording() is True
    controller.session.stop_recording()
    control.resolve("apply")

    assert event_names(events)[-1] == "recording.cancel"
    assert control.calls == ["apply"]
    assert controller.toggle_recording() is False
    assert controller.toggle_recording() is False
    assert control.calls == ["apply"]

    controller.shutdown()

    assert not controller.session.busy
    assert control.released == 1


def test_shutdown_releases_session(controller, scheduler, control, events) -> None:
    controller.start()
    scheduler.advance(1.0)

    controller.shutdown()

    assert control.released == 1
    assert event_names(events)[-1] == "release"


def test_config_reaches_components(bus, scheduler, control) -> None:
    config = RecorderConfig(session=SessionConfig(max_recording_time_ms=2000))
    controller = RecorderController(
        bus, scheduler, FakeCapture(scheduler), FakeFactory(scheduler, control), config=config
    )

    assert controller.session.max_recording_time_ms == 2000


@pytest.mark.parametrize(
    ("milliseconds", "expected"),
    [(0, "00:00"), (999, "00:00"), (10000, "00:10"), (61000, "01:01"), (600000, "10:00")],
)
def test_format_recording_time(milliseconds: int, expected: str) -> None:
    assert format_recording_time(milliseconds) == expected
