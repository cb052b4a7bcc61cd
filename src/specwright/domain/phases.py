"""
Phase catalog shared by the state machine, the validator and the
workflow registry.

Every agent walks the same four kinds of phase; only the document it
produces differs. The global order is pm → ux → engineer, and within an
agent questions-generate → questions-answer → <doc>-generate → <doc>-review.
"""

from dataclasses import dataclass
from enum import Enum

from specwright.domain.exceptions import UnknownPhaseError
from specwright.domain.models import COMPLETE, AgentRole, PhaseStatus


class PhaseKind(Enum):
    """The four steps every agent goes through, in order."""

    QUESTIONS_GENERATE = "questions-generate"
    QUESTIONS_ANSWER = "questions-answer"
    DOCUMENT_GENERATE = "generate"
    DOCUMENT_REVIEW = "review"


KIND_ORDER: tuple[PhaseKind, ...] = tuple(PhaseKind)


@dataclass(frozen=True)
class AgentDefinition:
    """Static facts about one agent: its document and where files live."""

    role: AgentRole
    document: str  # Slug used in phase names, e.g. "design-brief"
    questions_file: str  # Relative to the project directory
    document_file: str  # Relative to the project directory
    analysis_workflow: str  # Registry key of the document-generating workflow
    template_dir: str  # Directory under specwright/agents/

    def phase_name(self, kind: PhaseKind) -> str:
        if kind in (PhaseKind.DOCUMENT_GENERATE, PhaseKind.DOCUMENT_REVIEW):
            return f"{self.document}-{kind.value}"
        return kind.value

    @property
    def phase_names(self) -> tuple[str, ...]:
        return tuple(self.phase_name(kind) for kind in KIND_ORDER)


AGENTS: tuple[AgentDefinition, ...] = (
    AgentDefinition(
        role=AgentRole.PM,
        document="prd",
        questions_file="questions/pm_questions.json",
        document_file="documents/prd.md",
        analysis_workflow="pm_analysis",
        template_dir="product_manager",
    ),
    AgentDefinition(
        role=AgentRole.UX,
        document="design-brief",
        questions_file="questions/ux_questions.json",
        document_file="documents/design_brief.md",
        analysis_workflow="ux_analysis",
        template_dir="ux_designer",
    ),
    AgentDefinition(
        role=AgentRole.ENGINEER,
        document="spec",
        questions_file="questions/engineer_questions.json",
        document_file="documents/technical_specification.md",
        analysis_workflow="engineer_analysis",
        template_dir="engineer",
    ),
)

AGENT_ORDER: tuple[AgentRole, ...] = tuple(a.role for a in AGENTS)


def agent_definition(role: AgentRole) -> AgentDefinition:
    for definition in AGENTS:
        if definition.role == role:
            return definition
    raise KeyError(f"No definition for agent {role}")


def next_agent(role: AgentRole) -> AgentRole | None:
    """Agent that follows `role`, or None after the engineer."""
    index = AGENT_ORDER.index(role)
    if index + 1 < len(AGENT_ORDER):
        return AGENT_ORDER[index + 1]
    return None


@dataclass(frozen=True)
class Phase:
    """One step of one agent. Only catalog phases can be constructed."""

    agent: AgentRole
    kind: PhaseKind

    @property
    def definition(self) -> AgentDefinition:
        return agent_definition(self.agent)

    @property
    def name(self) -> str:
        """Agent-local name, e.g. "prd-generate"."""
        return self.definition.phase_name(self.kind)

    @property
    def full_name(self) -> str:
        """Project-wide name, e.g. "pm-prd-generate"."""
        return f"{self.agent.value}-{self.name}"

    @property
    def index(self) -> int:
        """Position in the global phase order."""
        return PHASE_ORDER.index(self)

    @property
    def requires_human(self) -> bool:
        return self.kind in (PhaseKind.QUESTIONS_ANSWER, PhaseKind.DOCUMENT_REVIEW)

    @property
    def active_status(self) -> PhaseStatus:
        """Status a phase takes when work on it begins."""
        if self.kind == PhaseKind.QUESTIONS_ANSWER:
            return PhaseStatus.AWAITING_USER
        if self.kind == PhaseKind.DOCUMENT_REVIEW:
            return PhaseStatus.USER_REVIEWING
        return PhaseStatus.AI_WORKING

    @property
    def produces(self) -> tuple[str, ...]:
        """Artifacts (relative to the project dir) this phase must write."""
        if self.kind == PhaseKind.QUESTIONS_GENERATE:
            return (self.definition.questions_file,)
        if self.kind == PhaseKind.DOCUMENT_GENERATE:
            return (self.definition.document_file,)
        return ()

    @classmethod
    def of(cls, agent: AgentRole, name: str) -> "Phase":
        """Build a phase from an agent and its agent-local name.

        Raises:
            UnknownPhaseError: If the agent has no such phase
        """
        definition = agent_definition(agent)
        for kind in KIND_ORDER:
            if definition.phase_name(kind) == name:
                return cls(agent, kind)
        raise UnknownPhaseError(
            f"Unknown phase '{name}' for agent {agent.value}. "
            f"Expected one of: {', '.join(definition.phase_names)}"
        )

    @classmethod
    def parse(cls, full_name: str) -> "Phase":
        """Build a phase from its full name, e.g. "ux-design-brief-review".

        Raises:
            UnknownPhaseError: If the name is not in the catalog
        """
        agent_value, _, name = full_name.partition("-")
        try:
            agent = AgentRole(agent_value)
        except ValueError:
            raise UnknownPhaseError(f"Unknown phase: {full_name}") from None
        return cls.of(agent, name)


PHASE_ORDER: tuple[Phase, ...] = tuple(
    Phase(role, kind) for role in AGENT_ORDER for kind in KIND_ORDER
)

HUMAN_REQUIRED_PHASES: tuple[str, ...] = tuple(
    p.full_name for p in PHASE_ORDER if p.requires_human
)


def phase_sequence(role: AgentRole) -> tuple[Phase, ...]:
    """The four phases of one agent, in order."""
    return tuple(p for p in PHASE_ORDER if p.agent == role)


def parse_claimed_phase(full_name: str) -> Phase | None:
    """Parse a phase name that may also be the "complete" marker.

    Returns:
        The Phase, or None for "complete"
    """
    if full_name == COMPLETE:
        return None
    return Phase.parse(full_name)


def required_artifacts(phase: Phase | None) -> tuple[str, ...]:
    """
    Artifacts that must exist for a project to be at `phase`.

    These are the outputs of every phase before it in the global order.
    None stands for a completed project and requires every artifact.
    """
    end = len(PHASE_ORDER) if phase is None else phase.index
    return tuple(
        artifact for earlier in PHASE_ORDER[:end] for artifact in earlier.produces
    )
