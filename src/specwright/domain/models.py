"""
Domain models for specwright.

Pure data structures describing where a project stands in the
PM → Designer → Engineer specification workflow.
All models are immutable (frozen dataclasses); transitions build new
instances with dataclasses.replace().
"""

import posixpath
from dataclasses import dataclass
from enum import Enum

from specwright.domain.exceptions import InvalidProjectIdError

# Serialized marker for currentAgent / currentPhase once every agent is done
COMPLETE = "complete"


# =============================================================================
# ENUMERATIONS
# =============================================================================


class AgentRole(Enum):
    """Specification roles, in their fixed processing order."""

    PM = "pm"
    UX = "ux"
    ENGINEER = "engineer"


class SessionAgent(Enum):
    """Keys a conversation session can be stored under."""

    SCOPING = "scoping"
    PM = "pm"
    UX = "ux"
    ENGINEER = "engineer"
    BREAKDOWN = "breakdown"


class PhaseStatus(Enum):
    """Status of a single phase."""

    NOT_STARTED = "not-started"
    AI_WORKING = "ai-working"  # Assistant is producing the phase output
    AWAITING_USER = "awaiting-user"  # User must answer questions
    USER_REVIEWING = "user-reviewing"  # User must approve a document
    COMPLETE = "complete"


class QuestionDepth(Enum):
    """How many questions each agent asks."""

    LIGHT = "light"
    STANDARD = "standard"
    THOROUGH = "thorough"


class DocumentLength(Enum):
    """How detailed generated documents should be."""

    BRIEF = "brief"
    STANDARD = "standard"
    COMPREHENSIVE = "comprehensive"


class CostTier(Enum):
    """Pricing tier used for token cost estimates."""

    BUDGET = "budget"
    STANDARD = "standard"
    PREMIUM = "premium"


# =============================================================================
# PHASE STATE
# =============================================================================


@dataclass(frozen=True)
class PhaseState:
    """Status and timestamps of one phase of one agent."""

    name: str  # Agent-local phase name, e.g. "prd-generate"
    status: PhaseStatus = PhaseStatus.NOT_STARTED
    started_at: str | None = None
    completed_at: str | None = None


@dataclass(frozen=True)
class AgentStatus:
    """
    Progress of one agent through its four phases.

    current_phase is always the first phase that is not complete,
    or None once all of them are.
    """

    role: AgentRole
    status: PhaseStatus
    current_phase: str | None
    phases: tuple[PhaseState, ...]
    completed_at: str | None = None

    def phase(self, name: str) -> PhaseState:
        """Get the state of a phase by its agent-local name.

        Raises:
            KeyError: If the agent has no such phase
        """
        for state in self.phases:
            if state.name == name:
                return state
        raise KeyError(f"Agent {self.role.value} has no phase {name}")

    @property
    def is_complete(self) -> bool:
        return all(p.status == PhaseStatus.COMPLETE for p in self.phases)


@dataclass(frozen=True)
class PhaseHistoryEntry:
    """Single entry in the append-only audit trail."""

    phase: str  # Full phase name, e.g. "pm-prd-generate"
    started_at: str
    status: PhaseStatus
    completed_at: str | None = None
    note: str = ""  # Set for recovery entries


# =============================================================================
# PROJECT SETTINGS / COST TRACKING
# =============================================================================


@dataclass(frozen=True)
class ProjectSettings:
    """Per-project depth and detail configuration."""

    question_depth: QuestionDepth = QuestionDepth.STANDARD
    document_length: DocumentLength = DocumentLength.STANDARD


@dataclass(frozen=True)
class CostTracking:
    """Running token totals for cost estimation."""

    tier: CostTier = CostTier.STANDARD
    total_input_tokens: int = 0
    cached_output_tokens: int = 0
    output_calculated_at: str | None = None
    last_updated: str | None = None


# =============================================================================
# PROJECT STATUS (root record)
# =============================================================================


@dataclass(frozen=True)
class ProjectStatus:
    """
    Persisted record of a project's phase progression.

    Single source of truth for phase progression; the session record is a
    sibling with an independent lifecycle.
    """

    version: str
    project_id: str
    current_agent: AgentRole | None  # None once every agent is complete
    current_phase: str  # "<agent>-<phase>" or "complete"
    agents: tuple[AgentStatus, ...]  # Ordered pm, ux, engineer
    history: tuple[PhaseHistoryEntry, ...]
    created_at: str
    last_updated_at: str
    settings: ProjectSettings = ProjectSettings()
    cost_tracking: CostTracking | None = None

    def agent(self, role: AgentRole) -> AgentStatus:
        """Get the status of one agent."""
        for agent_status in self.agents:
            if agent_status.role == role:
                return agent_status
        raise KeyError(f"No status for agent {role.value}")

    @property
    def is_complete(self) -> bool:
        return self.current_agent is None


# =============================================================================
# VALIDATION / RECONCILIATION RESULTS
# =============================================================================


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of checking a claimed phase against artifacts on disk."""

    claimed_phase: str
    is_valid: bool
    reason: str | None = None
    missing_files: tuple[str, ...] = ()
    suggested_phase: str | None = None  # Latest phase the artifacts support


@dataclass(frozen=True)
class DriftReport:
    """A phase recorded as complete whose produced artifacts are missing."""

    phase: str
    missing_files: tuple[str, ...]


@dataclass(frozen=True)
class Progress:
    """Completed phases over total phases."""

    completed: int
    total: int

    @property
    def percent(self) -> int:
        if self.total == 0:
            return 0
        return round(100 * self.completed / self.total)


# =============================================================================
# SESSIONS
# =============================================================================


@dataclass(frozen=True)
class SessionEntry:
    """Conversation id of one agent with the external assistant."""

    session_id: str
    created_at: str
    updated_at: str


# =============================================================================
# PROJECT LAYOUT
# =============================================================================


STATUS_FILENAME = "project_status.json"
SESSIONS_FILENAME = "sessions.json"


@dataclass(frozen=True)
class ProjectLayout:
    """Resolves project ids to their directory and record files."""

    projects_root: str

    def project_dir(self, project_id: str) -> str:
        """Directory of one project.

        Raises:
            InvalidProjectIdError: If the id is empty, "." or "..", or
                contains a path separator
        """
        if (
            project_id in ("", ".", "..")
            or "/" in project_id
            or "\\" in project_id
        ):
            raise InvalidProjectIdError(project_id)
        return posixpath.join(self.projects_root, project_id)

    def status_path(self, project_id: str) -> str:
        return posixpath.join(self.project_dir(project_id), STATUS_FILENAME)

    def sessions_path(self, project_id: str) -> str:
        return posixpath.join(self.project_dir(project_id), SESSIONS_FILENAME)
