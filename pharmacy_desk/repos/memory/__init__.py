"""
Memory repository implementations.

These implementations use Python dictionaries and lists for storage and are
ideal for testing scenarios where external dependencies should be avoided.
"""

from .backup_sink import MemoryBackupSink
from .email import MemoryEmailRepository
from .store import MemoryDocumentStore

__all__ = [
    "MemoryBackupSink",
    "MemoryEmailRepository",
    "MemoryDocumentStore",
]
