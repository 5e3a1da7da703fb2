"""
Compare service: turns two directory roots into a ComparisonResult.

The session layer only depends on the `CompareService` interface. The
local implementation classifies files by exact text equality; anything
that does not read as text (binary, oversized, unreadable) is left out
of the result.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from diverge.core.models import ComparisonRecord, ComparisonResult, FileStatus
from diverge.services.file_io import FileIOService


DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB


class CompareServiceError(Exception):
    """Raised when two directories cannot be compared."""
    pass


class CompareService(ABC):
    """Produces a comparison of two directory trees."""

    @abstractmethod
    def compare_directories(self, left: str, right: str) -> ComparisonResult:
        """
        Compare the trees rooted at `left` and `right`.

        Raises:
            CompareServiceError: With a human-readable message on failure.
        """


@dataclass
class ScanResult:
    """Text files found under one root."""
    root: Path
    files: dict[str, tuple[str, str]] = field(default_factory=dict)  # rel -> (abs, content)
    ignored_dirs: list[str] = field(default_factory=list)
    skipped: int = 0


class LocalCompareService(CompareService):
    """Compares directories on the local filesystem."""

    def __init__(
        self,
        ignore_dirs: Iterable[str] = (),
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        file_io: Optional[FileIOService] = None
    ):
        self.ignore_dirs = frozenset(ignore_dirs)
        self.max_file_size = max_file_size
        self.file_io = file_io or FileIOService()

    def compare_directories(self, left: str, right: str) -> ComparisonResult:
        if not Path(left).is_dir():
            raise CompareServiceError(f"Left path is not a directory: {left}")
        if not Path(right).is_dir():
            raise CompareServiceError(f"Right path is not a directory: {right}")

        left_scan = self.scan(left)
        right_scan = self.scan(right)

        records = []
        for key in sorted(left_scan.files.keys() | right_scan.files.keys()):
            records.append(self._make_record(
                key,
                left_scan.files.get(key),
                right_scan.files.get(key),
            ))

        ignored = sorted(set(left_scan.ignored_dirs) | set(right_scan.ignored_dirs))
        result = ComparisonResult.from_records(records, ignored)
        logging.info(f"LocalCompareService - {left} <> {right}: {result.summary}")
        return result

    def scan(self, root: str | Path) -> ScanResult:
        """Collect the text files under `root`, pruning ignored directories."""
        root = Path(root)
        scan = ScanResult(root=root)

        for dirpath, dirnames, filenames in os.walk(root, onerror=self._on_walk_error):
            current = Path(dirpath)
            kept = []
            for name in sorted(dirnames):
                if name in self.ignore_dirs:
                    scan.ignored_dirs.append((current / name).relative_to(root).as_posix())
                else:
                    kept.append(name)
            dirnames[:] = kept

            for name in filenames:
                if name in self.ignore_dirs:
                    continue
                path = current / name
                read = self.file_io.read_file(path, max_text_size=self.max_file_size)
                if not read.success or read.content is None:
                    scan.skipped += 1
                    logging.debug(f"LocalCompareService - Skipping {path}: {read.error}")
                    continue
                rel = path.relative_to(root).as_posix()
                scan.files[rel] = (str(path), read.content.content)

        return scan

    @staticmethod
    def _make_record(
        key: str,
        left: Optional[tuple[str, str]],
        right: Optional[tuple[str, str]]
    ) -> ComparisonRecord:
        if left and right:
            status = FileStatus.IDENTICAL if left[1] == right[1] else FileStatus.DIFFERENT
            return ComparisonRecord(
                relative_path=key,
                status=status,
                left_content=left[1],
                right_content=right[1],
                left_path=left[0],
                right_path=right[0],
            )
        if left:
            return ComparisonRecord(
                relative_path=key,
                status=FileStatus.ONLY_LEFT,
                left_content=left[1],
                left_path=left[0],
            )
        return ComparisonRecord(
            relative_path=key,
            status=FileStatus.ONLY_RIGHT,
            right_content=right[1],
            right_path=right[0],
        )

    @staticmethod
    def _on_walk_error(error: OSError) -> None:
        logging.warning(f"LocalCompareService - Cannot read directory: {error}")
