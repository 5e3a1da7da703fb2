"""
Thread plumbing shared by the compare and watch workers.

A worker is a QObject moved onto its own QThread. It reports exactly one
terminal outcome through `signals`: `finished` with the return value of
`do_work`, `error` with the exception type and message, or `cancelled`
when `cancel()` was called before the work returned.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import Any, Optional

from PyQt6.QtCore import QObject, QThread, pyqtSignal, pyqtSlot, QMutex, QMutexLocker


class WorkerState(Enum):
    PENDING = auto()
    RUNNING = auto()
    CANCELLED = auto()
    COMPLETED = auto()
    FAILED = auto()


class WorkerSignals(QObject):
    """Terminal outcomes, delivered to the thread that owns the receiver."""
    finished = pyqtSignal(object)   # do_work() return value
    error = pyqtSignal(str, str)    # (exception type, message)
    cancelled = pyqtSignal()


class WorkerMeta(type(QObject), type(ABC)):
    pass


class BaseWorker(QObject, ABC, metaclass=WorkerMeta):
    """
    Subclasses implement `do_work`; long-running loops poll `is_cancelled`.

    `run` is the slot a WorkerThread starts. It is also safe to call
    directly, which runs the work on the calling thread.
    """

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.signals = WorkerSignals()
        self._mutex = QMutex()
        self._state = WorkerState.PENDING
        self._cancel_requested = False
        self._result: Any = None

    @property
    def state(self) -> WorkerState:
        with QMutexLocker(self._mutex):
            return self._state

    @property
    def is_cancelled(self) -> bool:
        with QMutexLocker(self._mutex):
            return self._cancel_requested

    @property
    def result(self) -> Any:
        """Return value of `do_work`, None until the worker completes."""
        return self._result

    def cancel(self) -> None:
        with QMutexLocker(self._mutex):
            self._cancel_requested = True

    @pyqtSlot()
    def run(self) -> None:
        self._set_state(WorkerState.RUNNING)
        try:
            value = self.do_work()
        except Exception as e:
            self._set_state(WorkerState.FAILED)
            self.signals.error.emit(type(e).__name__, str(e))
            return

        if self.is_cancelled:
            self._set_state(WorkerState.CANCELLED)
            self.signals.cancelled.emit()
            return

        self._result = value
        self._set_state(WorkerState.COMPLETED)
        self.signals.finished.emit(value)

    @abstractmethod
    def do_work(self) -> Any:
        ...

    def _set_state(self, state: WorkerState) -> None:
        with QMutexLocker(self._mutex):
            self._state = state


class WorkerThread(QThread):
    """Owns one worker and stops its event loop on the worker's outcome."""

    def __init__(
        self,
        worker: BaseWorker,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self.worker = worker
        self.worker.moveToThread(self)

        self.started.connect(self.worker.run)
        signals = self.worker.signals
        signals.finished.connect(self.quit)
        signals.error.connect(self.quit)
        signals.cancelled.connect(self.quit)

    def cancel(self) -> None:
        self.worker.cancel()
