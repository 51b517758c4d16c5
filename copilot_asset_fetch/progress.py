# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Progress events and throttled progress reporting.

Progress is a value broadcast rather than a buffered stream: every emission is
delivered straight to the consumer callback and replaces whatever the consumer
saw before. Nothing is queued, so a slow consumer never blocks a transfer.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable

from .cancellation import CancellationToken

logger = logging.getLogger(__name__)

INDETERMINATE = None
"""Placeholder progress value used when the total length is unknown."""

DEFAULT_PROGRESS_INTERVAL = 0.125
"""Minimum seconds between two progress emissions for one transfer."""


@dataclass(frozen=True)
class ProgressEvent:
    """Progress snapshot for one transfer."""

    locator: str
    """Source locator text of the transfer."""

    progress: float | None
    """Ratio in [0, 1], or None when the transfer length is unknown."""

    @property
    def is_indeterminate(self) -> bool:
        return self.progress is INDETERMINATE


ProgressCallback = Callable[[ProgressEvent], None]


def null_progress(event: ProgressEvent) -> None:
    """Default progress sink that discards every event."""


def progress_ratio(written: int, total: int | None) -> float | None:
    """Return ``written / total`` clamped to [0, 1], or None without a total."""
    if not total or total <= 0:
        return INDETERMINATE
    return min(max(written / total, 0.0), 1.0)


class ProgressThrottle:
    """Rate-limits progress emissions for a single transfer.

    The interval clock starts when the throttle is created, so the first event
    is emitted one interval into the transfer. Once the cancellation token has
    fired no further events are delivered.
    """

    def __init__(
        self,
        locator: str,
        callback: ProgressCallback | None = None,
        interval: float = DEFAULT_PROGRESS_INTERVAL,
        cancel_token: CancellationToken | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the throttle.

        Args:
            locator: Source locator text reported in every event
            callback: Progress consumer (defaults to null_progress)
            interval: Minimum seconds between emissions
            cancel_token: Token that suppresses emission once cancelled
            clock: Monotonic clock, injectable for tests
        """
        self.locator = locator
        self.callback = callback or null_progress
        self.interval = interval
        self.cancel_token = cancel_token
        self._clock = clock
        self._last_emit = clock()
        self.emitted = 0

    def tick(self, progress: float | None) -> bool:
        """Emit ``progress`` if the interval has elapsed.

        Returns:
            True if an event was delivered
        """
        if self._clock() - self._last_emit < self.interval:
            return False
        return self.emit(progress)

    def emit(self, progress: float | None) -> bool:
        """Emit ``progress`` immediately, bypassing the interval check."""
        if self.cancel_token is not None and self.cancel_token.is_cancelled():
            return False

        if progress is not None:
            progress = min(max(progress, 0.0), 1.0)

        self._last_emit = self._clock()
        try:
            self.callback(ProgressEvent(self.locator, progress))
        except Exception:
            # A misbehaving consumer must not fault the transfer
            logger.exception(f"Progress callback failed for {self.locator}")
            return False
        self.emitted += 1
        return True
