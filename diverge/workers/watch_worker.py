"""
Filesystem watching for the compared directories.

DirectoryWatchWorker polls the roots for created, modified and deleted
files. RefreshDebouncer collapses a burst of change notifications (a
batch save touches many files) into a single refresh call.
"""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Callable, Iterable, Optional

from PyQt6.QtCore import QObject, QTimer, pyqtSignal, pyqtSlot

from diverge.workers.base_worker import BaseWorker


DEFAULT_DEBOUNCE_MS = 1000


class DirectoryWatchWorker(BaseWorker):
    """
    Worker that watches directory trees for file changes.

    Uses polling of (mtime, size) snapshots, which works on every
    platform without extra dependencies.
    """

    # Signal emitted when a change is detected
    change_detected = pyqtSignal(str, str)  # (path, change_type)

    def __init__(
        self,
        paths: Iterable[str | Path],
        interval: float = 1.0,
        ignore_dirs: Iterable[str] = (),
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self.paths = [Path(p) for p in paths]
        self.interval = interval
        self.ignore_dirs = frozenset(ignore_dirs)
        self._file_states: dict[str, tuple[float, int]] = {}  # path -> (mtime, size)

    def do_work(self) -> None:
        """Watch for changes until cancelled."""
        self._file_states = self.snapshot()

        while not self.is_cancelled:
            time.sleep(self.interval)

            if self.is_cancelled:
                break

            for path, change_type in self.check_changes():
                self.change_detected.emit(path, change_type)

    def snapshot(self) -> dict[str, tuple[float, int]]:
        """Current (mtime, size) of every watched file."""
        states: dict[str, tuple[float, int]] = {}
        for root in self.paths:
            for path in self._iter_files(root):
                try:
                    stat = path.stat()
                except OSError as e:
                    logging.debug(f"DirectoryWatchWorker - Failed to stat {path}: {e}")
                    continue
                states[str(path)] = (stat.st_mtime, stat.st_size)
        return states

    def check_changes(self) -> list[tuple[str, str]]:
        """Compare a fresh snapshot with the last one and remember it."""
        current = self.snapshot()
        changes = []

        for path, state in current.items():
            previous = self._file_states.get(path)
            if previous is None:
                changes.append((path, 'created'))
            elif previous != state:
                changes.append((path, 'modified'))

        for path in self._file_states.keys() - current.keys():
            changes.append((path, 'deleted'))

        self._file_states = current
        return changes

    def _iter_files(self, root: Path):
        def on_error(error: OSError) -> None:
            logging.warning(f"DirectoryWatchWorker - Cannot scan {error.filename}: {error}")

        for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
            dirnames[:] = [d for d in dirnames if d not in self.ignore_dirs]
            for name in filenames:
                yield Path(dirpath) / name


class RefreshDebouncer(QObject):
    """
    Calls `callback` once notifications stop arriving for `delay_ms`.

    Every `notify()` restarts the single-shot timer.
    """

    triggered = pyqtSignal()

    def __init__(
        self,
        callback: Callable[[], object],
        delay_ms: int = DEFAULT_DEBOUNCE_MS,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self._callback = callback
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(delay_ms)
        self._timer.timeout.connect(self.fire)

    @property
    def pending(self) -> bool:
        return self._timer.isActive()

    @pyqtSlot(str, str)
    def notify(self, path: str = "", change_type: str = "") -> None:
        if path:
            logging.debug(f"RefreshDebouncer - {change_type}: {path}")
        self._timer.start()

    def cancel(self) -> None:
        self._timer.stop()

    @pyqtSlot()
    def fire(self) -> None:
        self._timer.stop()
        self.triggered.emit()
        self._callback()
