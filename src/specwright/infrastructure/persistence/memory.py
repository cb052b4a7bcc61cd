"""
In-memory implementations of the status and session repositories.

Useful for testing and ephemeral runs.
"""

from specwright.domain.interfaces import (
    ProjectStatusRepositoryInterface,
    SessionRepositoryInterface,
)
from specwright.domain.models import ProjectStatus, SessionAgent, SessionEntry


class InMemoryStatusRepository(ProjectStatusRepositoryInterface):
    """Simple in-memory status store for testing."""

    def __init__(self) -> None:
        self._records: dict[str, ProjectStatus] = {}
        self.save_count = 0

    def load(self, project_id: str) -> ProjectStatus | None:
        return self._records.get(project_id)

    def save(self, status: ProjectStatus) -> None:
        self._records[status.project_id] = status
        self.save_count += 1


class InMemorySessionRepository(SessionRepositoryInterface):
    """Simple in-memory session store for testing."""

    def __init__(self) -> None:
        self._records: dict[str, dict[SessionAgent, SessionEntry]] = {}

    def load(self, project_id: str) -> dict[SessionAgent, SessionEntry]:
        # Copy so callers cannot mutate the stored record in place
        return dict(self._records.get(project_id, {}))

    def save(self, project_id: str, sessions: dict[SessionAgent, SessionEntry]) -> None:
        self._records[project_id] = dict(sessions)

    def delete(self, project_id: str) -> None:
        self._records.pop(project_id, None)
