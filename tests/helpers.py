"""Fakes and builders shared by the test modules."""

import time
from pathlib import Path
from typing import Callable, Optional

from PyQt6.QtCore import QCoreApplication

from diverge.core.models import ComparisonRecord, ComparisonResult, FileStatus
from diverge.services.compare_service import CompareService, CompareServiceError
from diverge.services.file_io import FileWriter, FileWriteError


class FakeCompareService(CompareService):
    """Returns queued results in order; a queued exception is raised instead."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls: list[tuple[str, str]] = []

    def queue(self, outcome) -> None:
        self.outcomes.append(outcome)

    def compare_directories(self, left: str, right: str) -> ComparisonResult:
        self.calls.append((left, right))
        if not self.outcomes:
            raise CompareServiceError("No result queued")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeFileWriter(FileWriter):
    """Records writes; paths in `fail_paths` raise FileWriteError."""

    def __init__(self, fail_paths: Optional[set[str]] = None):
        self.writes: dict[str, str] = {}
        self.order: list[str] = []
        self.fail_paths = set(fail_paths or ())

    def write(self, path: str, content: str) -> None:
        if path in self.fail_paths:
            raise FileWriteError(f"Permission denied: {path}")
        self.writes[path] = content
        self.order.append(path)


def make_result(*records: ComparisonRecord, ignored_dirs=()) -> ComparisonResult:
    return ComparisonResult.from_records(records, ignored_dirs)


def record(
    relative_path: str,
    status: FileStatus,
    left: str = "",
    right: str = "",
    root_left: str = "/l",
    root_right: str = "/r",
) -> ComparisonRecord:
    return ComparisonRecord(
        relative_path=relative_path,
        status=status,
        left_content=left,
        right_content=right,
        left_path="" if status == FileStatus.ONLY_RIGHT else f"{root_left}/{relative_path}",
        right_path="" if status == FileStatus.ONLY_LEFT else f"{root_right}/{relative_path}",
    )


def sample_result() -> ComparisonResult:
    """a.txt identical, b.txt different, src/c.txt only left, src/d.txt only right."""
    return make_result(
        record("a.txt", FileStatus.IDENTICAL, "A\n", "A\n"),
        record("b.txt", FileStatus.DIFFERENT, "B left\n", "B right\n"),
        record("src/c.txt", FileStatus.ONLY_LEFT, left="C\n"),
        record("src/d.txt", FileStatus.ONLY_RIGHT, right="D\n"),
    )


def wait_until(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    """Process Qt events until `predicate` holds or the timeout expires."""
    app = QCoreApplication.instance()
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        app.processEvents()
        if predicate():
            return True
        time.sleep(0.01)
    app.processEvents()
    return predicate()


def write_tree(root: Path, files: dict[str, str]) -> Path:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root
