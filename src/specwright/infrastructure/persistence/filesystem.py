"""
Filesystem implementation of the status and session repositories.

Each project directory holds two JSON records with independent
lifecycles: project_status.json and sessions.json. Records are written
atomically (write-to-temp + rename) and validated against their JSON
Schema on load.
"""

import json
import logging
from pathlib import Path
from typing import Any

import jsonschema

from specwright.domain.exceptions import PersistenceError
from specwright.domain.interfaces import (
    ProjectStatusRepositoryInterface,
    SessionRepositoryInterface,
)
from specwright.domain.models import (
    COMPLETE,
    AgentRole,
    AgentStatus,
    CostTier,
    CostTracking,
    DocumentLength,
    PhaseHistoryEntry,
    PhaseState,
    PhaseStatus,
    ProjectLayout,
    ProjectSettings,
    ProjectStatus,
    QuestionDepth,
    SessionAgent,
    SessionEntry,
)
from specwright.domain.phases import (
    AGENT_ORDER,
    agent_definition,
    parse_claimed_phase,
)
from specwright.schemas import validate_project_status, validate_sessions

logger = logging.getLogger(__name__)


# =============================================================================
# SERIALIZATION
# =============================================================================


def _optional(data: dict[str, Any], **fields: str | None) -> dict[str, Any]:
    """Add the fields that are set; unset timestamps are omitted."""
    data.update({k: v for k, v in fields.items() if v is not None})
    return data


def status_to_dict(status: ProjectStatus) -> dict[str, Any]:
    """Serialize a ProjectStatus to its camelCase JSON form."""
    data: dict[str, Any] = {
        "version": status.version,
        "projectId": status.project_id,
        "currentAgent": (
            status.current_agent.value if status.current_agent else COMPLETE
        ),
        "currentPhase": status.current_phase,
        "agents": {
            agent.role.value: _optional(
                {
                    "status": agent.status.value,
                    "currentPhase": agent.current_phase,
                    "phases": {
                        phase.name: _optional(
                            {"status": phase.status.value},
                            startedAt=phase.started_at,
                            completedAt=phase.completed_at,
                        )
                        for phase in agent.phases
                    },
                },
                completedAt=agent.completed_at,
            )
            for agent in status.agents
        },
        "history": [
            _optional(
                {
                    "phase": entry.phase,
                    "startedAt": entry.started_at,
                    "status": entry.status.value,
                },
                completedAt=entry.completed_at,
                note=entry.note or None,
            )
            for entry in status.history
        ],
        "settings": {
            "question_depth": status.settings.question_depth.value,
            "document_length": status.settings.document_length.value,
        },
        "createdAt": status.created_at,
        "lastUpdatedAt": status.last_updated_at,
    }
    if status.cost_tracking is not None:
        tracking = status.cost_tracking
        data["costTracking"] = _optional(
            {
                "tier": tracking.tier.value,
                "totalInputTokens": tracking.total_input_tokens,
                "cachedOutputTokens": tracking.cached_output_tokens,
            },
            outputCalculatedAt=tracking.output_calculated_at,
            lastUpdated=tracking.last_updated,
        )
    return data


def _agent_from_dict(role: AgentRole, data: dict[str, Any]) -> AgentStatus:
    phases = data["phases"]
    return AgentStatus(
        role=role,
        status=PhaseStatus(data["status"]),
        current_phase=data["currentPhase"],
        completed_at=data.get("completedAt"),
        # Catalog order, regardless of key order in the file
        phases=tuple(
            PhaseState(
                name=name,
                status=PhaseStatus(phases[name]["status"]),
                started_at=phases[name].get("startedAt"),
                completed_at=phases[name].get("completedAt"),
            )
            for name in agent_definition(role).phase_names
        ),
    )


def status_from_dict(data: dict[str, Any]) -> ProjectStatus:
    """
    Deserialize a ProjectStatus from its JSON form.

    Raises:
        KeyError: If a catalog phase is missing from the record
        ValueError: If an enum value or the current phase is unknown
    """
    # UnknownPhaseError is a ValueError
    parse_claimed_phase(data["currentPhase"])
    settings = data.get("settings") or {}
    tracking = data.get("costTracking")
    current_agent = data["currentAgent"]
    return ProjectStatus(
        version=data["version"],
        project_id=data["projectId"],
        current_agent=None if current_agent == COMPLETE else AgentRole(current_agent),
        current_phase=data["currentPhase"],
        agents=tuple(
            _agent_from_dict(role, data["agents"][role.value]) for role in AGENT_ORDER
        ),
        history=tuple(
            PhaseHistoryEntry(
                phase=entry["phase"],
                started_at=entry["startedAt"],
                status=PhaseStatus(entry["status"]),
                completed_at=entry.get("completedAt"),
                note=entry.get("note", ""),
            )
            for entry in data["history"]
        ),
        settings=ProjectSettings(
            question_depth=QuestionDepth(settings.get("question_depth", "standard")),
            document_length=DocumentLength(settings.get("document_length", "standard")),
        ),
        cost_tracking=(
            CostTracking(
                tier=CostTier(tracking["tier"]),
                total_input_tokens=tracking["totalInputTokens"],
                cached_output_tokens=tracking["cachedOutputTokens"],
                output_calculated_at=tracking.get("outputCalculatedAt"),
                last_updated=tracking.get("lastUpdated"),
            )
            if tracking
            else None
        ),
        created_at=data["createdAt"],
        last_updated_at=data["lastUpdatedAt"],
    )


def sessions_to_dict(sessions: dict[SessionAgent, SessionEntry]) -> dict[str, Any]:
    return {
        agent.value: {
            "sessionId": entry.session_id,
            "createdAt": entry.created_at,
            "updatedAt": entry.updated_at,
        }
        for agent, entry in sessions.items()
    }


def sessions_from_dict(data: dict[str, Any]) -> dict[SessionAgent, SessionEntry]:
    return {
        SessionAgent(agent): SessionEntry(
            session_id=entry["sessionId"],
            created_at=entry["createdAt"],
            updated_at=entry["updatedAt"],
        )
        for agent, entry in data.items()
    }


# =============================================================================
# FILE HELPERS
# =============================================================================


def _read_json(path: Path) -> Any | None:
    """Read a JSON file, None if it does not exist.

    Raises:
        PersistenceError: If the file cannot be read or decoded
    """
    if not path.exists():
        return None
    try:
        with open(path) as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise PersistenceError(f"Cannot read {path}: {e}", path) from e


def _write_json_atomic(path: Path, data: Any) -> None:
    """Write a JSON file using write-to-temp + rename.

    Raises:
        PersistenceError: If the file cannot be written
    """
    temp_path = path.with_suffix(".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(temp_path, "w") as f:
            json.dump(data, f, indent=2)
        temp_path.replace(path)  # Atomic on POSIX
    except OSError as e:
        raise PersistenceError(f"Cannot write {path}: {e}", path) from e


# =============================================================================
# REPOSITORIES
# =============================================================================


class FilesystemStatusRepository(ProjectStatusRepositoryInterface):
    """Stores one project_status.json per project directory."""

    def __init__(self, layout: ProjectLayout):
        self._layout = layout

    def _path(self, project_id: str) -> Path:
        return Path(self._layout.status_path(project_id))

    def load(self, project_id: str) -> ProjectStatus | None:
        path = self._path(project_id)
        data = _read_json(path)
        if data is None:
            return None
        try:
            validate_project_status(data)
            return status_from_dict(data)
        except (jsonschema.ValidationError, KeyError, ValueError) as e:
            raise PersistenceError(f"Malformed status record {path}: {e}", path) from e

    def save(self, status: ProjectStatus) -> None:
        path = self._path(status.project_id)
        _write_json_atomic(path, status_to_dict(status))
        logger.debug("Wrote %s", path)


class FilesystemSessionRepository(SessionRepositoryInterface):
    """Stores one sessions.json per project directory."""

    def __init__(self, layout: ProjectLayout):
        self._layout = layout

    def _path(self, project_id: str) -> Path:
        return Path(self._layout.sessions_path(project_id))

    def load(self, project_id: str) -> dict[SessionAgent, SessionEntry]:
        path = self._path(project_id)
        data = _read_json(path)
        if data is None:
            return {}
        try:
            validate_sessions(data)
            return sessions_from_dict(data)
        except (jsonschema.ValidationError, KeyError, ValueError) as e:
            raise PersistenceError(f"Malformed session record {path}: {e}", path) from e

    def save(self, project_id: str, sessions: dict[SessionAgent, SessionEntry]) -> None:
        path = self._path(project_id)
        _write_json_atomic(path, sessions_to_dict(sessions))
        logger.debug("Wrote %s", path)

    def delete(self, project_id: str) -> None:
        path = self._path(project_id)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(f"Cannot delete {path}: {e}", path) from e
