"""Core data managers and helpers."""

from .checkpoints import CheckpointStore
from .git_snapshot import GitSnapshotError, GitSnapshotService
from .history import ConversationHistory, HistoryItem
from .session_log import SessionLogger

__all__ = [
    "CheckpointStore",
    "ConversationHistory",
    "GitSnapshotError",
    "GitSnapshotService",
    "HistoryItem",
    "SessionLogger",
]
