"""
Snapshot store for a selected repository.

- mirror_tree copies the repository (minus control directories) into the store
- SnapshotRepository runs init / add / commit / log inside the store
- SnapshotManager hands out one repository per store so commits are serialized
- AutoCommitScheduler runs delayed, cancellable commits after assistant runs
"""

from .errors import MirrorError, NothingToCommitError, SnapshotError, VcsCommandError
from .manager import SnapshotManager
from .mirror import mirror_tree
from .repository import SnapshotRepository, format_commit_message
from .scheduler import AutoCommitScheduler

__all__ = [
    'MirrorError',
    'NothingToCommitError',
    'SnapshotError',
    'VcsCommandError',
    'SnapshotManager',
    'mirror_tree',
    'SnapshotRepository',
    'format_commit_message',
    'AutoCommitScheduler',
]
