"""
Core data models for the directory comparison session.

This module defines the data structures shared across the application:
- Per-file comparison records and the aggregate comparison result
- Raw and effective file statuses
- Outline (structure tree) nodes
- Save reporting models

All models are designed to be:
- UI-agnostic (can be used with any frontend)
- Serializable (the comparison result mirrors the compare service payload)
- Immutable where practical
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Optional, Sequence


# =============================================================================
# Enumerations
# =============================================================================

class FileStatus(str, Enum):
    """Raw status of a file as reported by the compare service."""
    IDENTICAL = "identical"      # Same content on both sides
    DIFFERENT = "different"      # Exists on both sides, content differs
    ONLY_LEFT = "only_left"      # Exists only in the left tree
    ONLY_RIGHT = "only_right"    # Exists only in the right tree


class EffectiveStatus(str, Enum):
    """User-facing status of a file, accounting for unsaved edits."""
    IDENTICAL = "identical"
    DIFFERENT = "different"
    ONLY_LEFT = "only_left"
    ONLY_RIGHT = "only_right"
    APPLIED = "applied"          # Edited right content matches the left side

    @classmethod
    def from_file_status(cls, status: FileStatus) -> 'EffectiveStatus':
        return cls(status.value)


# =============================================================================
# Comparison Models
# =============================================================================

@dataclass(frozen=True)
class ComparisonRecord:
    """
    Comparison of a single file between the two trees.

    Content fields are full text snapshots taken at compare time. The
    path on the missing side is empty for only_left/only_right records.
    """
    relative_path: str
    status: FileStatus
    left_content: str = ""
    right_content: str = ""
    left_path: str = ""
    right_path: str = ""

    @property
    def exists_left(self) -> bool:
        return self.status != FileStatus.ONLY_RIGHT

    @property
    def exists_right(self) -> bool:
        return self.status != FileStatus.ONLY_LEFT

    def to_dict(self) -> dict:
        """Convert to the compare service entry shape."""
        return {
            'rel_path': self.relative_path,
            'status': self.status.value,
            'left_content': self.left_content,
            'right_content': self.right_content,
            'left_path': self.left_path,
            'right_path': self.right_path,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ComparisonRecord':
        """Create from a compare service entry."""
        return cls(
            relative_path=data['rel_path'],
            status=FileStatus(data['status']),
            left_content=data.get('left_content', ''),
            right_content=data.get('right_content', ''),
            left_path=data.get('left_path', ''),
            right_path=data.get('right_path', ''),
        )


@dataclass(frozen=True)
class ComparisonResult:
    """
    Complete result of a directory comparison.

    The record list is never patched: every compare produces a new
    result. Aggregate counts always agree with the record statuses.
    """
    records: tuple[ComparisonRecord, ...] = ()
    total: int = 0
    identical: int = 0
    different: int = 0
    only_left: int = 0
    only_right: int = 0
    ignored_dirs: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        counts = _count_statuses(self.records)
        actual = (self.total, self.identical, self.different,
                  self.only_left, self.only_right)
        if counts != actual:
            raise ValueError(
                f"Inconsistent comparison counts: expected {counts}, got {actual}"
            )

    @classmethod
    def from_records(
        cls,
        records: Sequence[ComparisonRecord],
        ignored_dirs: Sequence[str] = ()
    ) -> 'ComparisonResult':
        """Build a result, computing the aggregate counts."""
        records = tuple(records)
        total, identical, different, only_left, only_right = _count_statuses(records)
        return cls(
            records=records,
            total=total,
            identical=identical,
            different=different,
            only_left=only_left,
            only_right=only_right,
            ignored_dirs=tuple(ignored_dirs),
        )

    @classmethod
    def from_dict(cls, data: dict) -> 'ComparisonResult':
        """
        Create from a compare service payload.

        Raises:
            ValueError: If the payload counts disagree with its entries.
        """
        records = tuple(ComparisonRecord.from_dict(e) for e in data.get('entries', []))
        counts = _count_statuses(records)
        return cls(
            records=records,
            total=data.get('total', counts[0]),
            identical=data.get('identical', counts[1]),
            different=data.get('different', counts[2]),
            only_left=data.get('only_left', counts[3]),
            only_right=data.get('only_right', counts[4]),
            ignored_dirs=tuple(data.get('ignored_dirs') or ()),
        )

    def to_dict(self) -> dict:
        """Convert to the compare service payload shape."""
        return {
            'entries': [r.to_dict() for r in self.records],
            'total': self.total,
            'identical': self.identical,
            'different': self.different,
            'only_left': self.only_left,
            'only_right': self.only_right,
            'ignored_dirs': list(self.ignored_dirs),
        }

    def get(self, relative_path: str) -> Optional[ComparisonRecord]:
        """Look up a record by relative path."""
        for record in self.records:
            if record.relative_path == relative_path:
                return record
        return None

    def __iter__(self) -> Iterator[ComparisonRecord]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    @property
    def total_differences(self) -> int:
        """Total number of files that are not identical."""
        return self.different + self.only_left + self.only_right

    @property
    def is_identical(self) -> bool:
        return self.total_differences == 0

    @property
    def summary(self) -> str:
        """Get a summary string."""
        return (f"Files: {self.total}, Identical: {self.identical}, "
                f"Different: {self.different}, Left only: {self.only_left}, "
                f"Right only: {self.only_right}")

    def iter_by_status(self, status: FileStatus) -> Iterator[ComparisonRecord]:
        """Iterate over records with the given raw status."""
        for record in self.records:
            if record.status == status:
                yield record


def _count_statuses(records: Sequence[ComparisonRecord]) -> tuple[int, int, int, int, int]:
    identical = different = only_left = only_right = 0
    for record in records:
        if record.status == FileStatus.IDENTICAL:
            identical += 1
        elif record.status == FileStatus.DIFFERENT:
            different += 1
        elif record.status == FileStatus.ONLY_LEFT:
            only_left += 1
        else:
            only_right += 1
    return len(records), identical, different, only_left, only_right


# =============================================================================
# Status Presentation
# =============================================================================

@dataclass(frozen=True)
class StatusStyle:
    """How an effective status is presented."""
    icon: str
    color: str
    label: str


STATUS_STYLES: dict[EffectiveStatus, StatusStyle] = {
    EffectiveStatus.IDENTICAL: StatusStyle("✓", "#4ec9b0", "Identical"),
    EffectiveStatus.APPLIED: StatusStyle("✓", "#4ec9b0", "Applied (unsaved)"),
    EffectiveStatus.DIFFERENT: StatusStyle("≠", "#e5c07b", "Different"),
    EffectiveStatus.ONLY_LEFT: StatusStyle("←", "#e06c75", "Only in left"),
    EffectiveStatus.ONLY_RIGHT: StatusStyle("→", "#c678dd", "Only in right"),
}


# =============================================================================
# Outline Models
# =============================================================================

@dataclass
class OutlineNode:
    """
    A named symbol recovered from text.

    Nodes form a forest; `line` is the 1-based line of the match.
    """
    key: str
    line: int
    children: list['OutlineNode'] = field(default_factory=list)

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    def iter_all(self) -> Iterator['OutlineNode']:
        """Iterate over this node and all descendants in pre-order."""
        yield self
        for child in self.children:
            yield from child.iter_all()


@dataclass(frozen=True)
class OutlineItem:
    """A flattened outline node paired with its nesting depth."""
    node: OutlineNode
    depth: int

    @property
    def key(self) -> str:
        return self.node.key

    @property
    def line(self) -> int:
        return self.node.line


# =============================================================================
# Save Models
# =============================================================================

@dataclass
class SaveFailure:
    """A single file that could not be written during a batch save."""
    path: str
    error_type: str
    message: str

    def __str__(self) -> str:
        return f"{self.error_type}: {self.path} - {self.message}"


@dataclass
class SaveReport:
    """Outcome of saving every pending edit."""
    saved: int = 0
    failures: list[SaveFailure] = field(default_factory=list)
    resynced: bool = False          # True when the baseline was re-compared
    discarded: int = 0              # entries with no record in the current result

    @property
    def attempted(self) -> int:
        return self.saved + len(self.failures)

    @property
    def success(self) -> bool:
        return not self.failures

    def to_dict(self) -> dict[str, Any]:
        return {
            'saved': self.saved,
            'failures': [
                {'path': f.path, 'error_type': f.error_type, 'message': f.message}
                for f in self.failures
            ],
            'resynced': self.resynced,
            'discarded': self.discarded,
        }
