"""
Modification overlay: unsaved right-side edits layered over a comparison.

The overlay maps relative paths to edited right-side text. Effective
statuses are derived from it on every read and are never cached, so any
overlay mutation is visible immediately.

Saving writes the overlay content to disk. A batch save is best-effort:
per-file failures are collected and the batch continues. After at least
one successful write the baseline is re-compared so the raw statuses
reflect what is now on disk, and the overlay is cleared.
Entries whose file is no longer in the current result are dropped before
the batch starts.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, Mapping, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from diverge.core.models import (
    ComparisonRecord,
    EffectiveStatus,
    FileStatus,
    SaveFailure,
    SaveReport,
)
from diverge.services.file_io import FileWriter, FileWriteError
from diverge.session.comparison import ComparisonSession


def effective_status(
    record: ComparisonRecord,
    modified_contents: Mapping[str, str]
) -> EffectiveStatus:
    """
    Status of a record as seen through the overlay.

    A record with an overlay entry is `applied` when the edit equals the
    left content exactly, otherwise `different`. Records without an entry
    keep their raw status.
    """
    content = modified_contents.get(record.relative_path)
    if content is None:
        return EffectiveStatus.from_file_status(record.status)
    if content == record.left_content:
        return EffectiveStatus.APPLIED
    return EffectiveStatus.DIFFERENT


class ModificationOverlay(QObject):
    """Owns the edited-content overlay and the save protocol."""

    overlay_changed = pyqtSignal()
    file_saved = pyqtSignal(str)           # relative path
    save_failed = pyqtSignal(str, str)     # (relative path, message)

    def __init__(
        self,
        comparison: ComparisonSession,
        writer: FileWriter,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self._comparison = comparison
        self._writer = writer
        self._modified: dict[str, str] = {}

    @property
    def modified_contents(self) -> dict[str, str]:
        """Snapshot of the overlay."""
        return dict(self._modified)

    def __len__(self) -> int:
        return len(self._modified)

    def __contains__(self, relative_path: str) -> bool:
        return relative_path in self._modified

    def content_for(self, relative_path: str) -> Optional[str]:
        return self._modified.get(relative_path)

    def effective_status(self, record: ComparisonRecord) -> EffectiveStatus:
        return effective_status(record, self._modified)

    # -------------------------------------------------------------------------
    # Edits
    # -------------------------------------------------------------------------

    def update_modified_content(self, relative_path: str, content: str) -> None:
        self._modified[relative_path] = content
        self.overlay_changed.emit()

    def apply_left_to_right(self, relative_path: str) -> None:
        """Overwrite the right side of one file with its left content."""
        record = self._record(relative_path)
        if record is None:
            logging.debug(f"ModificationOverlay - No record for {relative_path}, nothing applied")
            return
        self.update_modified_content(relative_path, record.left_content)

    def apply_all_to_right(self) -> int:
        """Apply left content to every file whose raw status is different."""
        return self._apply_where(lambda record: True)

    def apply_selected_to_right(self, checked_paths: Iterable[str]) -> int:
        """Apply left content to the checked files whose raw status is different."""
        checked = set(checked_paths)
        return self._apply_where(lambda record: record.relative_path in checked)

    def _apply_where(self, predicate: Callable[[ComparisonRecord], bool]) -> int:
        result = self._comparison.result
        if result is None:
            return 0
        updates = {
            record.relative_path: record.left_content
            for record in result.iter_by_status(FileStatus.DIFFERENT)
            if predicate(record)
        }
        if updates:
            self._modified.update(updates)
            self.overlay_changed.emit()
        return len(updates)

    # -------------------------------------------------------------------------
    # Saving
    # -------------------------------------------------------------------------

    def destination_for(self, record: ComparisonRecord) -> str:
        """Absolute path the right-side content of `record` is written to."""
        if record.right_path:
            return record.right_path
        right_dir = self._comparison.right_dir
        if not right_dir:
            raise FileWriteError(f"No right directory to save {record.relative_path} into")
        return str(Path(right_dir, record.relative_path))

    def save_file(self, relative_path: str) -> bool:
        """
        Write the overlay content of one file.

        Returns:
            True if a write happened, False for files with no overlay
            entry or no record in the current result.

        Raises:
            FileWriteError: If the write fails; the overlay is unchanged.
        """
        content = self._modified.get(relative_path)
        if content is None:
            return False
        record = self._record(relative_path)
        if record is None:
            logging.debug(f"ModificationOverlay - No record for {relative_path}, not saved")
            return False

        destination = self.destination_for(record)
        self._writer.write(destination, content)
        logging.info(f"ModificationOverlay - Saved {relative_path} to {destination}")
        self.file_saved.emit(relative_path)
        return True

    def save_all(self, left_dir: str) -> SaveReport:
        """
        Save every overlay entry, one file at a time.

        Args:
            left_dir: Left root used to re-compare after the writes

        Returns:
            SaveReport with the success count, per-file failures and the
            number of entries dropped because their file left the result
        """
        report = SaveReport()

        stale = [path for path in self._modified if self._record(path) is None]
        for relative_path in stale:
            logging.debug(f"ModificationOverlay - Dropping {relative_path}, not in the current result")
            del self._modified[relative_path]
        report.discarded = len(stale)
        if stale:
            self.overlay_changed.emit()

        for relative_path in list(self._modified):
            try:
                if self.save_file(relative_path):
                    report.saved += 1
            except Exception as e:
                logging.error(f"ModificationOverlay - Failed to save {relative_path}: {e}")
                report.failures.append(SaveFailure(
                    path=relative_path,
                    error_type=type(e).__name__,
                    message=str(e),
                ))
                self.save_failed.emit(relative_path, str(e))

        if report.saved > 0 and left_dir and self._comparison.right_dir:
            report.resynced = self._comparison.resync(left_dir)
            self.reset()

        return report

    def reset(self) -> None:
        """Drop every pending edit."""
        self._modified = {}
        self.overlay_changed.emit()

    def _record(self, relative_path: str) -> Optional[ComparisonRecord]:
        result = self._comparison.result
        return result.get(relative_path) if result is not None else None
