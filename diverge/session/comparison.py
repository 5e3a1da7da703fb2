"""
Comparison session: the two root directories and the latest result.

The result is only ever replaced wholesale. A failed compare records an
error string and keeps the previous result. Overlapping compares on the
same session are a caller error and are not serialized here.
"""

from __future__ import annotations

import logging
from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal

from diverge.core.models import ComparisonResult
from diverge.services.compare_service import CompareService


MISSING_DIRECTORIES = "Both directories must be set"


class ComparisonSession(QObject):
    """Owns the root paths, loading/error state and the ComparisonResult."""

    directories_changed = pyqtSignal(str, str)   # (left_dir, right_dir)
    loading_changed = pyqtSignal(bool)
    result_changed = pyqtSignal(object)          # Optional[ComparisonResult]
    error_changed = pyqtSignal(object)           # Optional[str]

    def __init__(
        self,
        compare_service: CompareService,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self.compare_service = compare_service
        self._left_dir = ""
        self._right_dir = ""
        self._result: Optional[ComparisonResult] = None
        self._loading = False
        self._error: Optional[str] = None

    @property
    def left_dir(self) -> str:
        return self._left_dir

    @left_dir.setter
    def left_dir(self, value: str) -> None:
        self._left_dir = value
        self.directories_changed.emit(self._left_dir, self._right_dir)

    @property
    def right_dir(self) -> str:
        return self._right_dir

    @right_dir.setter
    def right_dir(self, value: str) -> None:
        self._right_dir = value
        self.directories_changed.emit(self._left_dir, self._right_dir)

    @property
    def result(self) -> Optional[ComparisonResult]:
        return self._result

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def has_directories(self) -> bool:
        return bool(self._left_dir and self._right_dir)

    def compare(self, left: Optional[str] = None, right: Optional[str] = None) -> bool:
        """
        Compare the two roots, blocking until the service returns.

        Args:
            left: Replaces `left_dir` when given
            right: Replaces `right_dir` when given

        Returns:
            True if the result was replaced.
        """
        if left is not None:
            self.left_dir = left
        if right is not None:
            self.right_dir = right

        if not self.has_directories:
            logging.debug("ComparisonSession - Compare requested without both directories")
            self._set_error(MISSING_DIRECTORIES)
            return False

        self.mark_loading()
        try:
            result = self.compare_service.compare_directories(self._left_dir, self._right_dir)
        except Exception as e:
            self.fail(str(e))
            return False
        self.accept(result)
        return True

    def mark_loading(self) -> None:
        """Enter the pending state of a compare."""
        self._set_error(None)
        self._set_loading(True)

    def accept(self, result: ComparisonResult) -> None:
        """Finish a pending compare with a new result."""
        self._set_result(result)
        self._set_loading(False)

    def fail(self, message: str) -> None:
        """Finish a pending compare with an error, keeping the old result."""
        logging.error(f"ComparisonSession - Compare failed: {message}")
        self._set_error(message)
        self._set_loading(False)

    def resync(self, left_dir: str) -> bool:
        """
        Re-compare `left_dir` against the current right root after a save.

        Service errors propagate to the caller; loading state is untouched.

        Returns:
            True if the result was replaced.
        """
        if not left_dir or not self._right_dir:
            return False
        result = self.compare_service.compare_directories(left_dir, self._right_dir)
        self._set_result(result)
        self._set_error(None)
        return True

    def clear(self) -> None:
        """Discard the result, loading/error state and both root paths."""
        self._set_result(None)
        self._set_loading(False)
        self._set_error(None)
        self._left_dir = ""
        self._right_dir = ""
        self.directories_changed.emit("", "")

    def _set_result(self, result: Optional[ComparisonResult]) -> None:
        self._result = result
        self.result_changed.emit(result)

    def _set_loading(self, loading: bool) -> None:
        if self._loading != loading:
            self._loading = loading
            self.loading_changed.emit(loading)

    def _set_error(self, error: Optional[str]) -> None:
        if self._error != error:
            self._error = error
            self.error_changed.emit(error)
