"""
Core comparison models and pure helpers.

Provides:
- Comparison records, results and statuses
- Relative path and folder grouping helpers
- Language detection
- Structure outline parsing and navigation
"""

from diverge.core.models import (
    ComparisonRecord,
    ComparisonResult,
    EffectiveStatus,
    FileStatus,
    OutlineItem,
    OutlineNode,
    SaveFailure,
    SaveReport,
    STATUS_STYLES,
)
from diverge.core.outline import (
    OutlineNavigator,
    filter_outline,
    flatten_outline,
    parse_structure,
)

__all__ = [
    # Models
    'ComparisonRecord',
    'ComparisonResult',
    'EffectiveStatus',
    'FileStatus',
    'OutlineItem',
    'OutlineNode',
    'SaveFailure',
    'SaveReport',
    'STATUS_STYLES',
    # Outline
    'OutlineNavigator',
    'filter_outline',
    'flatten_outline',
    'parse_structure',
]
