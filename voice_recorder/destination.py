"""Resolution of the directory recordings are saved to."""

import logging
from collections.abc import Callable
from pathlib import Path

from voice_recorder.core.protocols import ErrorCallback, Scheduler
from voice_recorder.exceptions import DestinationError

logger = logging.getLogger(__name__)

DEFAULT_DIRECTORY_NAME = "Sounds"


def default_destination() -> Path:
    """Default directory for recordings: ``~/Sounds``."""
    return Path.home() / DEFAULT_DIRECTORY_NAME


class DirectoryResolver:
    """Resolves (and creates) the destination directory.

    Args:
        scheduler: Scheduler the callbacks are delivered on.
        directory: Directory to use (None for ``~/Sounds``).
    """

    def __init__(self, scheduler: Scheduler, directory: Path | None = None) -> None:
        self._scheduler = scheduler
        self._directory = directory

    def resolve(self, on_success: Callable[[str], None], on_error: ErrorCallback) -> None:
        try:
            directory = (self._directory or default_destination()).expanduser().resolve()
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            error = DestinationError(f"Cannot use destination directory: {e}")
            self._scheduler.call_soon(lambda: on_error(error))
            return

        logger.debug("Resolved destination directory %s", directory)
        self._scheduler.call_soon(lambda: on_success(str(directory)))
