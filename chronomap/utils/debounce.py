"""
Debounce - Trailing-edge coalescing of high-frequency recomputation requests.

A Debouncer holds at most one pending callback. Scheduling again replaces
the callback and restarts the quiescence window, so only the most recent
request runs once the window elapses without further requests.
"""

import logging
import time

from PyQt5.QtCore import QObject, QTimer, pyqtSignal

# Configure logger
logger = logging.getLogger(__name__)


class Debouncer(QObject):
    """
    Single-shot QTimer wrapper with replace-on-reschedule semantics.

    Signals:
        fired: Emitted after a pending callback has run
    """

    fired = pyqtSignal()

    DEFAULT_INTERVAL_MS = 50

    def __init__(self, interval_ms=DEFAULT_INTERVAL_MS, parent=None):
        """
        Initialize the debouncer.

        Args:
            interval_ms (int): Quiescence window in milliseconds
            parent: Parent QObject
        """
        super().__init__(parent)
        if interval_ms < 0:
            raise ValueError(f"Debounce interval must not be negative, got {interval_ms}")

        self.interval_ms = int(interval_ms)
        self._pending = None
        self._scheduled_at = None
        self._coalesced = 0

        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(self.interval_ms)
        self._timer.timeout.connect(self._fire)

    @property
    def is_pending(self):
        return self._pending is not None

    @property
    def scheduled_at(self):
        """Monotonic time (seconds) at which the pending callback is due, or None."""
        return self._scheduled_at

    @property
    def coalesced_count(self):
        """Number of requests superseded since the last run."""
        return self._coalesced

    def schedule(self, callback):
        """
        Schedule callback, replacing any pending one and restarting the window.

        Args:
            callback: Zero-argument callable
        """
        if self._pending is not None:
            self._coalesced += 1
        self._pending = callback
        self._scheduled_at = time.monotonic() + self.interval_ms / 1000.0
        self._timer.start()

    def cancel(self):
        """Drop the pending callback without running it."""
        self._timer.stop()
        self._pending = None
        self._scheduled_at = None
        self._coalesced = 0

    def flush(self):
        """
        Run the pending callback now, if any.

        Returns:
            bool: True if a callback ran
        """
        if self._pending is None:
            return False
        self._timer.stop()
        self._fire()
        return True

    def _fire(self):
        callback = self._pending
        if callback is None:
            return
        coalesced = self._coalesced
        self._pending = None
        self._scheduled_at = None
        self._coalesced = 0
        if coalesced:
            logger.debug(f"Running debounced callback after coalescing {coalesced} requests")
        callback()
        self.fired.emit()
