"""Microphone stream acquisition with bounded, fixed-delay retries."""

import logging
from typing import Any

from voice_recorder.config import AcquisitionConfig
from voice_recorder.core.events import AcquisitionRetry, CannotAccessAudio, EventBus, StreamReady
from voice_recorder.core.protocols import AudioStream, MediaCapture, Scheduler, TimerHandle

logger = logging.getLogger(__name__)


class StreamAcquirer:
    """Obtains a live microphone stream from an unreliable capture layer.

    A denied request is usually transient: another application may still
    hold the microphone. Each denial is retried after a fixed delay until
    ``max_attempts`` requests have failed, then ``CannotAccessAudio`` is
    published and the campaign ends. A new ``acquire()`` call is required
    after that.

    The attempt counter is reset only on success or terminal failure.

    Args:
        capture: Media capture layer to request streams from.
        bus: Event bus that receives ``StreamReady``, ``AcquisitionRetry``
            and ``CannotAccessAudio``.
        scheduler: Scheduler used for the retry delay.
        config: Retry policy.
    """

    def __init__(
        self,
        capture: MediaCapture,
        bus: EventBus,
        scheduler: Scheduler,
        config: AcquisitionConfig | None = None,
    ) -> None:
        self._capture = capture
        self._bus = bus
        self._scheduler = scheduler
        self._config = config or AcquisitionConfig()
        self._attempt_count = 0
        self._in_flight = False
        self._retry_handle: TimerHandle | None = None

    @property
    def attempt_count(self) -> int:
        """Number of failed requests in the current campaign."""
        return self._attempt_count

    @property
    def is_acquiring(self) -> bool:
        """Whether a request is in flight or a retry is pending."""
        return self._in_flight or self._retry_handle is not None

    def acquire(self) -> bool:
        """Request a microphone stream.

        Returns:
            True if a request was issued, False if one is already in progress.
        """
        if self.is_acquiring:
            logger.debug("Stream acquisition already in progress")
            return False
        self._request()
        return True

    def _request(self) -> None:
        self._retry_handle = None
        self._in_flight = True
        logger.debug("Requesting microphone stream (attempt %d)", self._attempt_count + 1)
        try:
            self._capture.request_stream(self._on_stream, self._on_denied)
        except Exception as e:
            self._on_denied(e)

    def _on_stream(self, stream: AudioStream) -> None:
        self._in_flight = False
        self._attempt_count = 0
        logger.info("Microphone stream obtained: %s", getattr(stream, "name", stream))
        self._bus.publish(StreamReady(stream=stream))

    def _on_denied(self, error: Any = None) -> None:
        self._in_flight = False
        self._attempt_count += 1
        if self._attempt_count >= self._config.max_attempts:
            logger.error(
                "Cannot access microphone after %d attempts: %s", self._attempt_count, error
            )
            self._attempt_count = 0
            self._bus.publish(CannotAccessAudio())
            return

        logger.warning(
            "Microphone request denied (attempt %d of %d): %s",
            self._attempt_count,
            self._config.max_attempts,
            error,
        )
        self._retry_handle = self._scheduler.call_later(self._config.retry_delay, self._request)
        self._bus.publish(AcquisitionRetry(attempt=self._attempt_count))
