from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable

from PySide6.QtCore import QObject, Qt, QTimer

logger = logging.getLogger(__name__)


class ReminderTicker(QObject):
    """Coarse periodic timer that feeds the current time to a callback."""

    def __init__(
        self,
        on_tick: Callable[[datetime], object],
        interval_sec: int = 60,
        clock: Callable[[], datetime] = datetime.now,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._on_tick = on_tick
        self._clock = clock

        self.timer = QTimer(self)
        self.timer.setInterval(max(int(interval_sec), 1) * 1000)
        self.timer.timeout.connect(self._tick)

    def is_running(self) -> bool:
        return self.timer.isActive()

    def start(self) -> None:
        if not self.timer.isActive():
            logger.debug("Reminder ticker started (%d ms)", self.timer.interval())
            self.timer.start()

    def stop(self) -> None:
        if self.timer.isActive():
            logger.debug("Reminder ticker stopped")
        self.timer.stop()

    def _tick(self) -> None:
        self._on_tick(self._clock())


class ToastExpiry(QObject):
    """One-shot timers that re-run the tick when a toast's idle timeout elapses.

    Each ``arm`` gets its own timer so overlapping toasts expire on time.
    Precise timers never fire early, so the tick always sees the full timeout.
    """

    def __init__(
        self,
        on_expire: Callable[[datetime], object],
        timeout: timedelta,
        clock: Callable[[], datetime] = datetime.now,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._on_expire = on_expire
        self._clock = clock
        self._timeout_ms = max(int(timeout.total_seconds() * 1000), 1)
        self._timers: list[QTimer] = []

    def pending(self) -> int:
        return len(self._timers)

    def arm(self) -> None:
        timer = QTimer(self)
        timer.setSingleShot(True)
        timer.setTimerType(Qt.TimerType.PreciseTimer)
        timer.setInterval(self._timeout_ms)
        timer.timeout.connect(lambda: self._expire(timer))
        self._timers.append(timer)
        timer.start()

    def stop(self) -> None:
        for timer in self._timers:
            timer.stop()
            timer.deleteLater()
        self._timers.clear()

    def _expire(self, timer: QTimer) -> None:
        if timer in self._timers:
            self._timers.remove(timer)
            timer.deleteLater()
        self._on_expire(self._clock())
