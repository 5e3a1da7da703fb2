"""
Selection and navigation state derived from the current comparison.

Tracks the open file, the files checked for bulk operations and the
collapsed folders. Folder groupings are always derived from the
comparison session's current result, never stored.
"""

from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import QObject, Qt, pyqtSignal

from diverge.core.models import ComparisonRecord, FileStatus
from diverge.core.paths import files_in_folder, folders_for
from diverge.session.comparison import ComparisonSession


class SelectionState(QObject):
    """Owns selected file, checked set and collapsed folder set."""

    selection_changed = pyqtSignal(object)   # Optional[str]
    checked_changed = pyqtSignal(object)     # frozenset[str]
    collapsed_changed = pyqtSignal(object)   # frozenset[str]

    def __init__(self, comparison: ComparisonSession, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._comparison = comparison
        self._selected_file: Optional[str] = None
        self._checked: set[str] = set()
        self._collapsed: set[str] = set()

    @property
    def selected_file(self) -> Optional[str]:
        return self._selected_file

    @property
    def selected_record(self) -> Optional[ComparisonRecord]:
        """Record for the selected file, or None if absent from the result."""
        result = self._comparison.result
        if result is None or self._selected_file is None:
            return None
        return result.get(self._selected_file)

    @property
    def checked_files(self) -> frozenset[str]:
        return frozenset(self._checked)

    @property
    def collapsed_folders(self) -> frozenset[str]:
        return frozenset(self._collapsed)

    @property
    def folders(self) -> list[str]:
        """Folder keys of the current result, sorted."""
        result = self._comparison.result
        return folders_for(result) if result is not None else []

    def select_file(self, relative_path: Optional[str]) -> None:
        self._selected_file = relative_path
        self.selection_changed.emit(relative_path)

    # -------------------------------------------------------------------------
    # Checked files
    # -------------------------------------------------------------------------

    def is_checked(self, relative_path: str) -> bool:
        return relative_path in self._checked

    def toggle_checked(self, relative_path: str) -> None:
        if relative_path in self._checked:
            self._checked.discard(relative_path)
        else:
            self._checked.add(relative_path)
        self._emit_checked()

    def files_in_folder(self, folder: str) -> list[str]:
        result = self._comparison.result
        return files_in_folder(result, folder) if result is not None else []

    def folder_check_state(self, folder: str) -> Qt.CheckState:
        """Tri-state checkbox value for a folder."""
        files = self.files_in_folder(folder)
        checked = sum(1 for f in files if f in self._checked)
        if files and checked == len(files):
            return Qt.CheckState.Checked
        if checked:
            return Qt.CheckState.PartiallyChecked
        return Qt.CheckState.Unchecked

    def toggle_folder_checked(self, folder: str) -> None:
        """Uncheck every file of the folder if all are checked, else check all."""
        if self._comparison.result is None:
            return
        files = self.files_in_folder(folder)
        if all(f in self._checked for f in files):
            self._checked.difference_update(files)
        else:
            self._checked.update(files)
        self._emit_checked()

    def check_all_different(self) -> None:
        """Check exactly the files whose raw status is different."""
        result = self._comparison.result
        if result is None:
            return
        self._checked = {r.relative_path for r in result.iter_by_status(FileStatus.DIFFERENT)}
        self._emit_checked()

    def uncheck_all(self) -> None:
        self._checked = set()
        self._emit_checked()

    # -------------------------------------------------------------------------
    # Collapsed folders
    # -------------------------------------------------------------------------

    def is_collapsed(self, folder: str) -> bool:
        return folder in self._collapsed

    def toggle_folder(self, folder: str) -> None:
        if folder in self._collapsed:
            self._collapsed.discard(folder)
        else:
            self._collapsed.add(folder)
        self.collapsed_changed.emit(self.collapsed_folders)

    def toggle_all_folders(self) -> None:
        """Collapse every folder unless all are already collapsed."""
        folders = set(self.folders)
        if folders <= self._collapsed:
            self._collapsed = set()
        else:
            self._collapsed = folders
        self.collapsed_changed.emit(self.collapsed_folders)

    def reset(self) -> None:
        """Forget selection, checked and collapsed state."""
        self._selected_file = None
        self._checked = set()
        self._collapsed = set()
        self.selection_changed.emit(None)
        self._emit_checked()
        self.collapsed_changed.emit(self.collapsed_folders)

    def _emit_checked(self) -> None:
        self.checked_changed.emit(self.checked_files)
