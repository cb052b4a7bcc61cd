"""Application service for agent session continuity.

Each agent of a project keeps one conversation with the external
assistant across all of its phases. This service remembers the opaque
conversation id per (project, agent) so a later phase can resume it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from specwright.domain.exceptions import UnknownWorkflowError
from specwright.domain.models import SessionAgent, SessionEntry
from specwright.domain.state_machine import utc_now
from specwright.domain.workflows import WORKFLOWS

if TYPE_CHECKING:
    from specwright.domain.interfaces import SessionRepositoryInterface

logger = logging.getLogger(__name__)

# Scoping runs before a project id exists, so it is stored under this key
SCOPING_PROJECT_ID = "_scoping_active"

_WORKFLOW_SESSIONS: dict[str, SessionAgent] = {
    "scope": SessionAgent.SCOPING,
    "pm_analysis": SessionAgent.PM,
    "ux_analysis": SessionAgent.UX,
    "engineer_analysis": SessionAgent.ENGINEER,
    "breakdown": SessionAgent.BREAKDOWN,
}


def session_agent_for_workflow(workflow_name: str) -> SessionAgent | None:
    """Session key a workflow's conversation continues under.

    Returns:
        The agent key, or None for workflows that do not keep a session.

    Raises:
        UnknownWorkflowError: If the workflow is not registered.
    """
    if workflow_name not in WORKFLOWS:
        raise UnknownWorkflowError(workflow_name, tuple(WORKFLOWS))
    return _WORKFLOW_SESSIONS.get(workflow_name)


class SessionService:
    """Per-project, per-agent session store.

    Sessions never expire on their own; last write wins. A record that
    exists but cannot be read raises PersistenceError.
    """

    def __init__(
        self,
        repository: SessionRepositoryInterface,
        clock: Callable[[], str] | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            repository: Storage for session records.
            clock: Returns the current timestamp, UTC ISO-8601 by default.
        """
        self._repository = repository
        self._clock = clock or utc_now

    def get_agent_session(self, project_id: str, agent: SessionAgent) -> str | None:
        """Session id saved for an agent, or None if there is none."""
        entry = self._repository.load(project_id).get(agent)
        if entry is None:
            logger.debug("No session for %s in project %s", agent.value, project_id)
            return None
        return entry.session_id

    def save_agent_session(
        self, project_id: str, agent: SessionAgent, session_id: str
    ) -> None:
        """Store a session id, replacing any previous one for the agent.

        The creation time of an existing entry is kept; updated_at is
        refreshed.
        """
        sessions = self._repository.load(project_id)
        now = self._clock()
        previous = sessions.get(agent)
        sessions[agent] = SessionEntry(
            session_id=session_id,
            created_at=previous.created_at if previous else now,
            updated_at=now,
        )
        self._repository.save(project_id, sessions)
        logger.debug("Saved session for %s in project %s", agent.value, project_id)

    def clear_agent_session(self, project_id: str, agent: SessionAgent) -> None:
        sessions = self._repository.load(project_id)
        if sessions.pop(agent, None) is not None:
            self._repository.save(project_id, sessions)
            logger.debug("Cleared session for %s in project %s", agent.value, project_id)

    def clear_all_sessions(self, project_id: str) -> None:
        self._repository.delete(project_id)
        logger.debug("Cleared all sessions for project %s", project_id)

    def get_all_sessions(self, project_id: str) -> dict[str, str]:
        """Session ids keyed by agent name."""
        return {
            agent.value: entry.session_id
            for agent, entry in self._repository.load(project_id).items()
        }

    # Scoping happens before the project exists

    def get_scoping_session(self) -> str | None:
        return self.get_agent_session(SCOPING_PROJECT_ID, SessionAgent.SCOPING)

    def save_scoping_session(self, session_id: str) -> None:
        self.save_agent_session(SCOPING_PROJECT_ID, SessionAgent.SCOPING, session_id)

    def clear_scoping_session(self) -> None:
        self.clear_agent_session(SCOPING_PROJECT_ID, SessionAgent.SCOPING)
