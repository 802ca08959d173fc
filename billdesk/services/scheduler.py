from __future__ import annotations
import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Scheduler(ABC):
    """Planificateur à un seul emplacement : au plus une tâche en attente."""

    @abstractmethod
    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> None:
        """Remplace la tâche en attente par `callback`, dans `delay_ms` millisecondes."""

    @abstractmethod
    def cancel(self) -> None:
        ...

    @property
    @abstractmethod
    def pending(self) -> bool:
        ...


class ThreadingScheduler(Scheduler):
    """
    Headless implementation on top of threading.Timer.
    Le callback tourne sur le thread du minuteur : un état modifié au même instant
    par un autre thread peut donner un instantané approximatif, corrigé au cycle suivant.
    L'interface Qt utilise QtTimerScheduler, qui reste sur le thread UI.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            timer = threading.Timer(max(0, delay_ms) / 1000.0, self._fire, args=(callback,))
            timer.daemon = True
            self._timer = timer
            timer.start()

    def _fire(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if self._timer is None or threading.current_thread() is not self._timer:
                return  # remplacé entre-temps
            self._timer = None
        try:
            callback()
        except Exception:
            logger.exception("Scheduled callback failed")

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None
