"""Background purge of bookings that ended long ago.

One daemon thread per process wakes every ``interval_seconds`` and deletes
bookings whose end time is older than ``retention``. A missed pass only
delays reclamation; it never affects conflict detection.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from typing import Optional

from flask import Flask

from ..services import booking_service

logger = logging.getLogger(__name__)


class ExpirySweeper:
    def __init__(self, app: Flask, interval_seconds: int = 300, retention: timedelta = timedelta(hours=2)):
        self.app = app
        self.interval_seconds = interval_seconds
        self.retention = retention
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def run_once(self, now: Optional[datetime] = None) -> int:
        """Run a single sweep inside a fresh app context."""

        with self.app.app_context():
            return booking_service.sweep_expired(self.retention, now=now)

    def _loop(self) -> None:
        while not self._stop.wait(self.interval_seconds):
            try:
                self.run_once()
            except Exception:  # pylint: disable=broad-except
                logger.exception("Auto-delete booking sweep failed")

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="expiry-sweeper", daemon=True)
        self._thread.start()
        logger.info(
            "Expiry sweeper started (every %ss, retention %s)",
            self.interval_seconds,
            self.retention,
        )

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
