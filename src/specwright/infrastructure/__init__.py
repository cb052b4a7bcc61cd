"""
Infrastructure layer for specwright.

Contains adapters for external concerns (file access, persistence,
configuration).
"""

from specwright.infrastructure.config import SpecwrightConfig, load_config
from specwright.infrastructure.files import InMemoryFileAccess, LocalFileAccess
from specwright.infrastructure.persistence import (
    FilesystemSessionRepository,
    FilesystemStatusRepository,
    InMemorySessionRepository,
    InMemoryStatusRepository,
)

__all__ = [
    # File access
    "LocalFileAccess",
    "InMemoryFileAccess",
    # Persistence
    "FilesystemStatusRepository",
    "FilesystemSessionRepository",
    "InMemoryStatusRepository",
    "InMemorySessionRepository",
    # Configuration
    "SpecwrightConfig",
    "load_config",
]
