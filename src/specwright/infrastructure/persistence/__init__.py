"""
Persistence adapters for project status and session records.
"""

from specwright.infrastructure.persistence.filesystem import (
    FilesystemSessionRepository,
    FilesystemStatusRepository,
)
from specwright.infrastructure.persistence.memory import (
    InMemorySessionRepository,
    InMemoryStatusRepository,
)

__all__ = [
    "FilesystemSessionRepository",
    "FilesystemStatusRepository",
    "InMemorySessionRepository",
    "InMemoryStatusRepository",
]
