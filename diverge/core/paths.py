"""
Helpers for slash-delimited relative paths.

Relative paths always use '/' regardless of platform, so these helpers
work on plain strings rather than pathlib objects.
"""

from __future__ import annotations

from typing import Iterable

from diverge.core.models import ComparisonRecord


# Folder key for files at the top of the compared tree
ROOT_FOLDER = "."


def folder_for_path(relative_path: str) -> str:
    """Return the parent folder key of a relative path."""
    head, sep, _ = relative_path.rpartition("/")
    return head if sep else ROOT_FOLDER


def file_name(relative_path: str) -> str:
    """Return the base name of a relative path."""
    return relative_path.rpartition("/")[2]


def folders_for(records: Iterable[ComparisonRecord]) -> list[str]:
    """Distinct folder keys of the given records, sorted lexicographically."""
    return sorted({folder_for_path(r.relative_path) for r in records})


def files_in_folder(records: Iterable[ComparisonRecord], folder: str) -> list[str]:
    """Relative paths grouped under `folder`, in record order."""
    return [
        r.relative_path for r in records
        if folder_for_path(r.relative_path) == folder
    ]


def group_by_folder(
    records: Iterable[ComparisonRecord]
) -> dict[str, list[ComparisonRecord]]:
    """Group records by folder key; folders sorted, records in given order."""
    groups: dict[str, list[ComparisonRecord]] = {}
    for record in records:
        groups.setdefault(folder_for_path(record.relative_path), []).append(record)
    return {folder: groups[folder] for folder in sorted(groups)}
