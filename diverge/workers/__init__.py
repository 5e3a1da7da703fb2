"""
Background workers for non-blocking operations.

Provides QThread-based workers for:
- Directory comparison
- Watching the compared directories for changes

All workers use Qt signals for thread-safe communication
with the UI thread.
"""

from diverge.workers.base_worker import (
    BaseWorker,
    WorkerSignals,
    WorkerState,
    WorkerThread,
)
from diverge.workers.compare_worker import (
    CompareWorker,
)
from diverge.workers.watch_worker import (
    DirectoryWatchWorker,
    RefreshDebouncer,
)

__all__ = [
    # Base
    'BaseWorker',
    'WorkerSignals',
    'WorkerState',
    'WorkerThread',
    # Compare
    'CompareWorker',
    # Watch
    'DirectoryWatchWorker',
    'RefreshDebouncer',
]
