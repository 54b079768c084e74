"""Sleep/wake detection by comparing wall-clock and monotonic progress."""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime
from typing import Callable, Optional

from .events import EventPublisher, WakeSignalEvent


def detect_suspension_gap(
    *,
    wall_elapsed: float,
    monotonic_elapsed: float,
    expected_elapsed: float,
    threshold_seconds: float,
) -> Optional[float]:
    """Return the unexplained gap between two polls, or `None` when the gap is normal.

    A suspended host stops the monotonic clock on most platforms while the wall
    clock keeps going; on others both clocks jump. Either shape, and a wall
    clock stepped backwards, counts as a gap worth recomputing deadlines for.
    """
    drift = abs(wall_elapsed - monotonic_elapsed)
    if drift > threshold_seconds:
        return drift
    overrun = max(wall_elapsed, monotonic_elapsed) - expected_elapsed
    if overrun > threshold_seconds:
        return overrun
    return None


class SleepWakeDetector:
    """Background poller that publishes `WakeSignalEvent` after host suspension."""

    def __init__(
        self,
        *,
        publisher: EventPublisher,
        poll_interval_seconds: float = 5.0,
        gap_threshold_seconds: float = 30.0,
        wall_clock: Callable[[], float] = time.time,
        monotonic_clock: Callable[[], float] = time.monotonic,
        logger: Optional[logging.Logger] = None,
    ):
        if poll_interval_seconds <= 0:
            raise ValueError("poll_interval_seconds must be greater than zero")
        if gap_threshold_seconds <= 0:
            raise ValueError("gap_threshold_seconds must be greater than zero")

        self._publisher = publisher
        self._poll_interval_seconds = float(poll_interval_seconds)
        self._gap_threshold_seconds = float(gap_threshold_seconds)
        self._wall_clock = wall_clock
        self._monotonic_clock = monotonic_clock
        self._logger = logger or logging.getLogger("wake")
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._last_wall: Optional[float] = None
        self._last_monotonic: Optional[float] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            self._logger.warning("Wake detector is already running")
            return
        self._stop_event.clear()
        self.reset()
        self._thread = threading.Thread(
            target=self._run,
            daemon=True,
            name="wake-detector",
        )
        self._thread.start()
        self._logger.debug(
            "Wake detector started (poll=%.1fs, threshold=%.1fs)",
            self._poll_interval_seconds,
            self._gap_threshold_seconds,
        )

    def stop(self, timeout_seconds: float = 2.0) -> None:
        self._stop_event.set()
        if self._thread is None:
            return
        self._thread.join(timeout=timeout_seconds)
        if self._thread.is_alive():
            self._logger.error(
                "Wake detector thread did not stop within %.1fs",
                timeout_seconds,
            )
        self._thread = None

    def reset(self) -> None:
        self._last_wall = self._wall_clock()
        self._last_monotonic = self._monotonic_clock()

    def check(self) -> Optional[float]:
        """Sample both clocks once; publish and return the gap if one is detected."""
        wall = self._wall_clock()
        monotonic = self._monotonic_clock()
        last_wall, last_monotonic = self._last_wall, self._last_monotonic
        self._last_wall, self._last_monotonic = wall, monotonic
        if last_wall is None or last_monotonic is None:
            return None

        gap = detect_suspension_gap(
            wall_elapsed=wall - last_wall,
            monotonic_elapsed=monotonic - last_monotonic,
            expected_elapsed=self._poll_interval_seconds,
            threshold_seconds=self._gap_threshold_seconds,
        )
        if gap is None:
            return None

        self._logger.info("Host resume detected (gap=%.0fs)", gap)
        self._publisher.publish(
            WakeSignalEvent(occurred_at=datetime.now().astimezone(), gap_seconds=gap)
        )
        return gap

    def _run(self) -> None:
        while not self._stop_event.wait(self._poll_interval_seconds):
            try:
                self.check()
            except Exception as error:
                self._logger.error("Wake detector check failed: %s", error, exc_info=True)
