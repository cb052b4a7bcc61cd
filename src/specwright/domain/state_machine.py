"""
Phase state machine.

Pure transitions over ProjectStatus. Every function takes the current
record and returns a new one; nothing here touches storage. Callers pass
an explicit `now` timestamp so transitions are reproducible in tests.

After every transition the record is normalized so that:
- each agent's current_phase is its first phase that is not complete
- current_agent is the first agent that is not complete (None when done)
- current_phase is "<agent>-<phase>" or "complete"
- a human phase that has just become current is activated
"""

from dataclasses import replace
from datetime import UTC, datetime

from specwright.domain.exceptions import (
    HumanConfirmationRequiredError,
    OutOfOrderTransitionError,
)
from specwright.domain.models import (
    COMPLETE,
    AgentRole,
    AgentStatus,
    PhaseHistoryEntry,
    PhaseState,
    PhaseStatus,
    Progress,
    ProjectSettings,
    ProjectStatus,
)
from specwright.domain.phases import (
    AGENT_ORDER,
    PHASE_ORDER,
    Phase,
    parse_claimed_phase,
    phase_sequence,
)

STATUS_VERSION = "1.0.0"


def utc_now() -> str:
    return datetime.now(UTC).isoformat()


# =============================================================================
# CONSTRUCTION
# =============================================================================


def create_initial_status(
    project_id: str,
    settings: ProjectSettings | None = None,
    now: str | None = None,
) -> ProjectStatus:
    """
    Create the record of a project that has not started any phase.

    Args:
        project_id: Identifier of the project directory
        settings: Question depth and document length, defaults if omitted
        now: Creation timestamp, current UTC time if omitted

    Returns:
        ProjectStatus positioned at pm-questions-generate
    """
    now = now or utc_now()
    agents = tuple(
        AgentStatus(
            role=role,
            status=PhaseStatus.NOT_STARTED,
            current_phase=None,
            phases=tuple(PhaseState(name=p.name) for p in phase_sequence(role)),
        )
        for role in AGENT_ORDER
    )
    status = ProjectStatus(
        version=STATUS_VERSION,
        project_id=project_id,
        current_agent=AgentRole.PM,
        current_phase="",
        agents=agents,
        history=(),
        created_at=now,
        last_updated_at=now,
        settings=settings or ProjectSettings(),
    )
    return _normalize(status, now)


# =============================================================================
# QUERIES
# =============================================================================


def current_phase(status: ProjectStatus) -> Phase | None:
    """The phase the project is in, or None once complete."""
    return parse_claimed_phase(status.current_phase)


def phase_state(status: ProjectStatus, phase: Phase) -> PhaseState:
    return status.agent(phase.agent).phase(phase.name)


def is_human_input_required(status: ProjectStatus) -> bool:
    """True when the project waits on the user to answer or approve."""
    phase = current_phase(status)
    return phase is not None and phase.requires_human


def first_incomplete_phase(status: ProjectStatus) -> Phase | None:
    """The phase the per-phase statuses put the project in."""
    for phase in PHASE_ORDER:
        if phase_state(status, phase).status != PhaseStatus.COMPLETE:
            return phase
    return None


def is_consistent(status: ProjectStatus) -> bool:
    """
    Check the recorded position against the per-phase statuses.

    A consistent record has current_agent/current_phase on its first
    incomplete phase, that phase in its entry or active status, nothing
    started after it, and agent summaries matching their phases. Every
    transition in this module produces a consistent record; a record that
    is not one was edited outside of it.
    """
    first = first_incomplete_phase(status)
    if first is None:
        if status.current_agent is not None or status.current_phase != COMPLETE:
            return False
    else:
        if (
            status.current_agent != first.agent
            or status.current_phase != first.full_name
        ):
            return False
        state = phase_state(status, first)
        if first.requires_human:
            allowed = (first.active_status,)
        else:
            allowed = (PhaseStatus.NOT_STARTED, PhaseStatus.AI_WORKING)
        if state.status not in allowed:
            return False
        if any(
            phase_state(status, later).status != PhaseStatus.NOT_STARTED
            for later in PHASE_ORDER[first.index + 1 :]
        ):
            return False
    return all(_normalize_agent(a) == a for a in status.agents)


def progress(status: ProjectStatus) -> Progress:
    completed = sum(
        1
        for agent in status.agents
        for state in agent.phases
        if state.status == PhaseStatus.COMPLETE
    )
    return Progress(completed=completed, total=len(PHASE_ORDER))


# =============================================================================
# TRANSITIONS
# =============================================================================


def begin_phase(
    status: ProjectStatus, agent: AgentRole, phase: str, now: str
) -> ProjectStatus:
    """
    Move the current phase into its active status.

    Generate phases become ai-working, questions-answer becomes
    awaiting-user and review phases become user-reviewing. Beginning a
    phase that is already active returns the record unchanged.

    Raises:
        UnknownPhaseError: If the agent has no such phase
        OutOfOrderTransitionError: If the phase is not the current phase
    """
    target = Phase.of(agent, phase)
    state = phase_state(status, target)

    if status.current_phase != target.full_name:
        raise OutOfOrderTransitionError(target.full_name, status.current_phase)
    if state.status == target.active_status:
        return status

    started = replace(state, status=target.active_status, started_at=now)
    entry = PhaseHistoryEntry(
        phase=target.full_name, started_at=now, status=target.active_status
    )
    return _normalize(_with_phase_state(status, target, started, entry, now), now)


def complete_phase(
    status: ProjectStatus,
    agent: AgentRole,
    phase: str,
    now: str,
    confirmed: bool = False,
) -> ProjectStatus:
    """
    Mark the current phase complete and advance.

    Completing a phase that is already complete is a no-op: no history is
    appended and the current agent does not move.

    Args:
        status: Current record
        agent: Agent owning the phase
        phase: Agent-local phase name, e.g. "prd-review"
        now: Completion timestamp
        confirmed: Explicit user confirmation, required for human phases

    Returns:
        The advanced record

    Raises:
        UnknownPhaseError: If the agent has no such phase
        OutOfOrderTransitionError: If the phase is not the current phase
        HumanConfirmationRequiredError: If a human phase is not confirmed
    """
    target = Phase.of(agent, phase)
    state = phase_state(status, target)

    if state.status == PhaseStatus.COMPLETE:
        return status
    if status.current_phase != target.full_name:
        raise OutOfOrderTransitionError(target.full_name, status.current_phase)
    if target.requires_human and not confirmed:
        raise HumanConfirmationRequiredError(target.full_name)

    started_at = state.started_at or now
    completed = replace(
        state, status=PhaseStatus.COMPLETE, started_at=started_at, completed_at=now
    )
    entry = PhaseHistoryEntry(
        phase=target.full_name,
        started_at=started_at,
        status=PhaseStatus.COMPLETE,
        completed_at=now,
    )
    return _normalize(_with_phase_state(status, target, completed, entry, now), now)


def rewind_to_phase(
    status: ProjectStatus, target: Phase | None, now: str, note: str
) -> ProjectStatus:
    """
    Reposition the project at `target`, used by recovery.

    Phases before the target become complete (keeping their timestamps if
    they already were), the target is reset to its entry status and every
    later phase to not-started. A history entry carrying `note` records
    the correction. A target of None rewinds to the completed state.
    """
    end = len(PHASE_ORDER) if target is None else target.index
    agents = []
    for agent_status in status.agents:
        states = []
        for phase in phase_sequence(agent_status.role):
            state = agent_status.phase(phase.name)
            if phase.index < end:
                if state.status != PhaseStatus.COMPLETE:
                    state = replace(
                        state,
                        status=PhaseStatus.COMPLETE,
                        started_at=state.started_at or now,
                        completed_at=now,
                    )
            else:
                state = PhaseState(name=phase.name)
            states.append(state)
        agents.append(replace(agent_status, phases=tuple(states)))

    rewound = _normalize(
        replace(status, agents=tuple(agents), last_updated_at=now), now
    )
    if target is None:
        entry_status = PhaseStatus.COMPLETE
        label = COMPLETE
    else:
        entry_status = phase_state(rewound, target).status
        label = target.full_name
    entry = PhaseHistoryEntry(
        phase=label, started_at=now, status=entry_status, note=note
    )
    return replace(rewound, history=rewound.history + (entry,))


# =============================================================================
# HELPERS
# =============================================================================


def _with_phase_state(
    status: ProjectStatus,
    phase: Phase,
    state: PhaseState,
    entry: PhaseHistoryEntry,
    now: str,
) -> ProjectStatus:
    agents = tuple(
        replace(
            a,
            phases=tuple(state if p.name == phase.name else p for p in a.phases),
        )
        if a.role == phase.agent
        else a
        for a in status.agents
    )
    return replace(
        status,
        agents=agents,
        history=status.history + (entry,),
        last_updated_at=now,
    )


def _normalize(status: ProjectStatus, now: str) -> ProjectStatus:
    """Recompute derived fields and activate a newly current human phase."""
    current = first_incomplete_phase(status)

    if current is not None and current.requires_human:
        state = phase_state(status, current)
        if state.status == PhaseStatus.NOT_STARTED:
            activated = replace(state, status=current.active_status, started_at=now)
            status = replace(
                status,
                agents=tuple(
                    replace(
                        a,
                        phases=tuple(
                            activated if p.name == current.name else p
                            for p in a.phases
                        ),
                    )
                    if a.role == current.agent
                    else a
                    for a in status.agents
                ),
            )

    agents = tuple(_normalize_agent(a) for a in status.agents)
    if current is None:
        return replace(
            status, agents=agents, current_agent=None, current_phase=COMPLETE
        )
    return replace(
        status,
        agents=agents,
        current_agent=current.agent,
        current_phase=current.full_name,
    )


def _normalize_agent(agent_status: AgentStatus) -> AgentStatus:
    pending = [p for p in agent_status.phases if p.status != PhaseStatus.COMPLETE]
    if not pending:
        return replace(
            agent_status,
            status=PhaseStatus.COMPLETE,
            current_phase=None,
            completed_at=agent_status.completed_at
            or agent_status.phases[-1].completed_at,
        )
    return replace(
        agent_status,
        status=pending[0].status,
        current_phase=pending[0].name,
        completed_at=None,
    )
