"""
Session state containers.

Each container owns one piece of state and announces changes through Qt
signals:
- ComparisonSession: root paths, loading/error state, comparison result
- SelectionState: selected file, checked files, collapsed folders
- ModificationOverlay: unsaved edits and the save protocol
- DivergeSession: composes the three and sequences their resets
"""

from diverge.session.comparison import ComparisonSession
from diverge.session.selection import SelectionState
from diverge.session.overlay import ModificationOverlay, effective_status
from diverge.session.facade import DivergeSession

__all__ = [
    'ComparisonSession',
    'SelectionState',
    'ModificationOverlay',
    'effective_status',
    'DivergeSession',
]
