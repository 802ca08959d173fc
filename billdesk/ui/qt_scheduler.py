from __future__ import annotations
from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer

from billdesk.services.scheduler import Scheduler


class QtTimerScheduler(Scheduler):
    """Minuteur mono-coup dans la boucle d'évènements Qt (thread UI)."""

    def __init__(self, parent: Optional[QObject] = None):
        self._timer = QTimer(parent)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self._fire)
        self._callback: Optional[Callable[[], None]] = None

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self._callback = callback
        self._timer.start(max(0, int(delay_ms)))  # start() relance si déjà actif

    def _fire(self) -> None:
        cb, self._callback = self._callback, None
        if cb is not None:
            cb()

    def cancel(self) -> None:
        self._timer.stop()
        self._callback = None

    @property
    def pending(self) -> bool:
        return self._timer.isActive()
