"""
Session façade: one API over comparison, selection and overlay state.

Each state container owns its own data. The façade sequences the
cross-container resets: whenever the comparison result is replaced by a
compare, or discarded by a clear, the selection and the overlay are
reset with it so no stale path survives.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from PyQt6.QtCore import QObject, pyqtSlot

from diverge.core.models import (
    ComparisonRecord,
    ComparisonResult,
    EffectiveStatus,
    SaveReport,
)
from diverge.services.compare_service import CompareService
from diverge.services.file_io import FileWriter
from diverge.session.comparison import ComparisonSession
from diverge.session.overlay import ModificationOverlay
from diverge.session.selection import SelectionState
from diverge.workers.base_worker import WorkerThread
from diverge.workers.compare_worker import CompareWorker
from diverge.workers.watch_worker import DirectoryWatchWorker, RefreshDebouncer


class DivergeSession(QObject):
    """Composes the comparison session, selection state and overlay."""

    def __init__(
        self,
        compare_service: CompareService,
        file_writer: FileWriter,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self.comparison = ComparisonSession(compare_service, parent=self)
        self.selection = SelectionState(self.comparison, parent=self)
        self.overlay = ModificationOverlay(self.comparison, file_writer, parent=self)

        self._compare_thread: Optional[WorkerThread] = None
        self._watch_thread: Optional[WorkerThread] = None
        self._debouncer: Optional[RefreshDebouncer] = None

    # -------------------------------------------------------------------------
    # Directories and result
    # -------------------------------------------------------------------------

    @property
    def left_dir(self) -> str:
        return self.comparison.left_dir

    @left_dir.setter
    def left_dir(self, value: str) -> None:
        self.comparison.left_dir = value

    @property
    def right_dir(self) -> str:
        return self.comparison.right_dir

    @right_dir.setter
    def right_dir(self, value: str) -> None:
        self.comparison.right_dir = value

    def set_directories(self, left: str, right: str) -> None:
        self.comparison.left_dir = left
        self.comparison.right_dir = right

    @property
    def result(self) -> Optional[ComparisonResult]:
        return self.comparison.result

    @property
    def loading(self) -> bool:
        return self.comparison.loading

    @property
    def error(self) -> Optional[str]:
        return self.comparison.error

    # -------------------------------------------------------------------------
    # Session-wide operations
    # -------------------------------------------------------------------------

    def compare(self) -> bool:
        """
        Compare the current roots, blocking until done.

        Returns:
            True if the result was replaced; selection and overlay are
            reset only in that case.
        """
        replaced = self.comparison.compare()
        if replaced:
            self._reset_derived_state()
        return replaced

    def start_compare(self) -> Optional[WorkerThread]:
        """
        Compare the current roots on a worker thread.

        The loading flag stays set until the worker reports back. Issuing
        another compare while one is pending is a caller error.

        Returns:
            The running thread, or None without both roots.
        """
        if not self.comparison.has_directories:
            return None

        worker = CompareWorker(
            self.comparison.compare_service,
            self.comparison.left_dir,
            self.comparison.right_dir,
        )
        worker.signals.finished.connect(self._on_compare_finished)
        worker.signals.error.connect(self._on_compare_failed)

        self.comparison.mark_loading()
        thread = WorkerThread(worker, parent=self)
        self._compare_thread = thread
        thread.start()
        return thread

    @pyqtSlot(object)
    def _on_compare_finished(self, result: ComparisonResult) -> None:
        self.comparison.accept(result)
        self._reset_derived_state()

    @pyqtSlot(str, str)
    def _on_compare_failed(self, error_type: str, message: str) -> None:
        self.comparison.fail(message)

    def refresh(self) -> bool:
        """Re-compare an existing comparison; the watcher's entry point."""
        if self.comparison.result is None or not self.comparison.has_directories:
            return False
        logging.info("DivergeSession - Refreshing comparison")
        return self.compare()

    def clear(self) -> None:
        """Discard the comparison and every piece of derived state."""
        self.comparison.clear()
        self._reset_derived_state()

    def _reset_derived_state(self) -> None:
        self.selection.reset()
        self.overlay.reset()

    # -------------------------------------------------------------------------
    # Selection & navigation
    # -------------------------------------------------------------------------

    @property
    def selected_file(self) -> Optional[str]:
        return self.selection.selected_file

    @property
    def selected_record(self) -> Optional[ComparisonRecord]:
        return self.selection.selected_record

    @property
    def checked_files(self) -> frozenset[str]:
        return self.selection.checked_files

    @property
    def collapsed_folders(self) -> frozenset[str]:
        return self.selection.collapsed_folders

    @property
    def folders(self) -> list[str]:
        return self.selection.folders

    def select_file(self, relative_path: Optional[str]) -> None:
        self.selection.select_file(relative_path)

    def toggle_checked(self, relative_path: str) -> None:
        self.selection.toggle_checked(relative_path)

    def toggle_folder_checked(self, folder: str) -> None:
        self.selection.toggle_folder_checked(folder)

    def check_all_different(self) -> None:
        self.selection.check_all_different()

    def uncheck_all(self) -> None:
        self.selection.uncheck_all()

    def toggle_folder(self, folder: str) -> None:
        self.selection.toggle_folder(folder)

    def toggle_all_folders(self) -> None:
        self.selection.toggle_all_folders()

    # -------------------------------------------------------------------------
    # Modifications
    # -------------------------------------------------------------------------

    @property
    def modified_contents(self) -> dict[str, str]:
        return self.overlay.modified_contents

    @property
    def modified_count(self) -> int:
        return len(self.overlay)

    @property
    def has_unsaved_changes(self) -> bool:
        return len(self.overlay) > 0

    def effective_status(self, record: ComparisonRecord) -> EffectiveStatus:
        return self.overlay.effective_status(record)

    def update_modified_content(self, relative_path: str, content: str) -> None:
        self.overlay.update_modified_content(relative_path, content)

    def apply_left_to_right(self, relative_path: str) -> None:
        self.overlay.apply_left_to_right(relative_path)

    def apply_all_to_right(self) -> int:
        return self.overlay.apply_all_to_right()

    def apply_selected_to_right(self, checked_paths: Optional[Iterable[str]] = None) -> int:
        """Apply the checked files; defaults to the current checked set."""
        if checked_paths is None:
            checked_paths = self.selection.checked_files
        return self.overlay.apply_selected_to_right(checked_paths)

    def save_file(self, relative_path: str) -> bool:
        return self.overlay.save_file(relative_path)

    def save_all(self) -> SaveReport:
        return self.overlay.save_all(self.comparison.left_dir)

    # -------------------------------------------------------------------------
    # Watching
    # -------------------------------------------------------------------------

    def start_watching(
        self,
        interval: float = 1.0,
        ignore_dirs: Iterable[str] = (),
        debounce_ms: int = 1000
    ) -> Optional[WorkerThread]:
        """Poll both roots and refresh once a burst of changes settles."""
        if not self.comparison.has_directories:
            return None
        self.stop_watching()

        self._debouncer = RefreshDebouncer(self.refresh, debounce_ms, parent=self)
        worker = DirectoryWatchWorker(
            [self.comparison.left_dir, self.comparison.right_dir],
            interval=interval,
            ignore_dirs=ignore_dirs,
        )
        worker.change_detected.connect(self._debouncer.notify)

        self._watch_thread = WorkerThread(worker, parent=self)
        self._watch_thread.start()
        return self._watch_thread

    def stop_watching(self, timeout_ms: int = 5000) -> None:
        if self._debouncer is not None:
            self._debouncer.cancel()
            self._debouncer = None
        if self._watch_thread is not None:
            self._watch_thread.cancel()
            self._watch_thread.quit()
            self._watch_thread.wait(timeout_ms)
            self._watch_thread = None
