"""
Domain interfaces (Ports) for specwright.

These abstract base classes define the contracts adapters must satisfy.
File watching is deliberately absent: it belongs to front ends, which
call back into the services once an artifact changes.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from specwright.domain.models import ProjectStatus, SessionAgent, SessionEntry


class FileAccessInterface(ABC):
    """
    Port for reading and writing project artifacts.

    Paths are plain strings; adapters decide how to resolve them.
    """

    @abstractmethod
    def file_exists(self, path: str) -> bool:
        """Return True if a regular file exists at path."""
        pass

    @abstractmethod
    def read_file(self, path: str) -> str | None:
        """
        Read a text file.

        Returns:
            The file content, or None if the file does not exist
        """
        pass

    @abstractmethod
    def write_file(self, path: str, content: str) -> None:
        """Write a text file, creating parent directories as needed."""
        pass


class ProjectStatusRepositoryInterface(ABC):
    """Port for persisting ProjectStatus records, one per project."""

    @abstractmethod
    def load(self, project_id: str) -> "ProjectStatus | None":
        """
        Load a project's status.

        Returns:
            The record, or None if the project has none yet

        Raises:
            PersistenceError: If the record exists but cannot be read
        """
        pass

    @abstractmethod
    def save(self, status: "ProjectStatus") -> None:
        """
        Replace the stored record for status.project_id.

        Raises:
            PersistenceError: If the record cannot be written
        """
        pass


class SessionRepositoryInterface(ABC):
    """Port for persisting the session record of a project."""

    @abstractmethod
    def load(self, project_id: str) -> "dict[SessionAgent, SessionEntry]":
        """
        Load every session of a project.

        Returns:
            Mapping of agent to session entry, empty if none were saved

        Raises:
            PersistenceError: If the record exists but cannot be read
        """
        pass

    @abstractmethod
    def save(
        self, project_id: str, sessions: "dict[SessionAgent, SessionEntry]"
    ) -> None:
        """Replace the session record of a project."""
        pass

    @abstractmethod
    def delete(self, project_id: str) -> None:
        """Remove the session record of a project. Missing records are ignored."""
        pass
