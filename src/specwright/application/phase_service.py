"""Application service for phase tracking.

Loads and persists ProjectStatus records, runs validation and recovery
before accepting any transition, and exposes the status queries front
ends need (human input, settings, progress, cost totals).
"""

from __future__ import annotations

import logging
import posixpath
from collections.abc import Callable
from dataclasses import replace
from typing import TYPE_CHECKING

from specwright.domain.exceptions import MissingArtifactsError, PersistenceError
from specwright.domain.models import (
    AgentRole,
    CostTracking,
    DocumentLength,
    DriftReport,
    PhaseStatus,
    Progress,
    ProjectSettings,
    ProjectStatus,
    QuestionDepth,
    ValidationResult,
)
from specwright.domain.phases import Phase, parse_claimed_phase
from specwright.domain import state_machine
from specwright.domain.validation import find_drift, validate_phase
from specwright.domain.workflows import check_catalog_consistency

if TYPE_CHECKING:
    from specwright.domain.interfaces import (
        FileAccessInterface,
        ProjectStatusRepositoryInterface,
    )
    from specwright.domain.models import ProjectLayout

logger = logging.getLogger(__name__)


class PhaseTrackingService:
    """Application service owning the phase progression of projects.

    Every mutating call first reconciles the persisted record with the
    artifacts on disk, so a transition is always judged against the phase
    the project is really in.
    """

    def __init__(
        self,
        repository: ProjectStatusRepositoryInterface,
        files: FileAccessInterface,
        layout: ProjectLayout,
        clock: Callable[[], str] | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            repository: Storage for ProjectStatus records.
            files: File access used for artifact existence checks.
            layout: Resolves project ids to directories.
            clock: Returns the current timestamp, UTC ISO-8601 by default.

        Raises:
            WorkflowCatalogError: If the workflow and phase catalogs disagree.
        """
        check_catalog_consistency()
        self._repository = repository
        self._files = files
        self._layout = layout
        self._clock = clock or state_machine.utc_now

    # =========================================================================
    # RECORD ACCESS
    # =========================================================================

    def read_status(self, project_id: str) -> ProjectStatus | None:
        """Load the stored record without creating or repairing it.

        Raises:
            PersistenceError: If the record exists but cannot be read.
        """
        return self._repository.load(project_id)

    def initialize_status(
        self, project_id: str, settings: ProjectSettings | None = None
    ) -> ProjectStatus:
        """Create and persist a fresh record, replacing any existing one."""
        status = state_machine.create_initial_status(
            project_id, settings, now=self._clock()
        )
        self._repository.save(status)
        logger.debug("Initialized status for project %s", project_id)
        return status

    def get_or_create_status(self, project_id: str) -> ProjectStatus:
        """Load the record, initializing it when absent or unreadable."""
        try:
            status = self._repository.load(project_id)
        except PersistenceError as e:
            logger.error(
                "Unreadable status for project %s, reinitializing: %s", project_id, e
            )
            status = None
        if status is None:
            return self.initialize_status(project_id)
        return status

    # =========================================================================
    # VALIDATION / RECOVERY
    # =========================================================================

    def validate_current_phase(
        self, project_id: str, claimed_phase: str
    ) -> ValidationResult:
        """Check a claimed phase against the project's artifacts.

        Args:
            project_id: Project to check.
            claimed_phase: Full phase name, or "complete".

        Returns:
            ValidationResult, with a suggested phase when invalid.

        Raises:
            UnknownPhaseError: If claimed_phase is not a catalog phase.
        """
        return validate_phase(
            claimed_phase, self._layout.project_dir(project_id), self._files
        )

    def validate_and_recover_phase(self, project_id: str) -> ProjectStatus:
        """Repair the recorded phase if it disagrees with the record or the files.

        Two kinds of drift are repaired, in this order:
        - a recorded current phase/agent that does not match the per-phase
          statuses (hand edits, foreign writers): the project is rewound
          to its first incomplete phase, discarding progress recorded
          after it
        - a current phase whose required artifacts are missing: the
          project is rewound to the latest phase the artifacts support

        Each repair appends a history note. Running this twice in a row
        leaves the record unchanged the second time.

        Returns:
            The (possibly rewound and persisted) record.
        """
        status = self.get_or_create_status(project_id)
        recovered = status

        if not state_machine.is_consistent(recovered):
            target = state_machine.first_incomplete_phase(recovered)
            actual = target.full_name if target else "complete"
            note = (
                f"Recovered from {status.current_phase}: recorded phase "
                f"disagrees with phase statuses, which put the project at {actual}"
            )
            recovered = state_machine.rewind_to_phase(
                recovered, target, self._clock(), note
            )
            logger.warning(
                "Project %s record inconsistent, rewound from %s to %s",
                project_id,
                status.current_phase,
                recovered.current_phase,
            )

        result = self.validate_current_phase(project_id, recovered.current_phase)
        if not result.is_valid:
            if result.suggested_phase is None:
                raise ValueError(
                    f"No recovery target for {result.claimed_phase}: {result.reason}"
                )
            previous = recovered.current_phase
            note = f"Recovered from {previous}: {result.reason}"
            recovered = state_machine.rewind_to_phase(
                recovered, Phase.parse(result.suggested_phase), self._clock(), note
            )
            logger.warning(
                "Project %s rewound from %s to %s (missing: %s)",
                project_id,
                previous,
                recovered.current_phase,
                ", ".join(result.missing_files),
            )

        if recovered is not status:
            self._repository.save(recovered)
        return recovered

    def check_for_drift(self, project_id: str) -> tuple[DriftReport, ...]:
        """Report completed phases whose output is gone. Changes nothing."""
        status = self.get_or_create_status(project_id)
        return find_drift(status, self._layout.project_dir(project_id), self._files)

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    def begin_phase(
        self, project_id: str, agent: AgentRole, phase: str
    ) -> ProjectStatus:
        """Move the current phase into its active status.

        Raises:
            UnknownPhaseError: If the agent has no such phase.
            OutOfOrderTransitionError: If the phase is not the current phase.
        """
        status = self.validate_and_recover_phase(project_id)
        updated = state_machine.begin_phase(status, agent, phase, self._clock())
        if updated is not status:
            self._repository.save(updated)
            logger.debug("Project %s began %s-%s", project_id, agent.value, phase)
        return updated

    def complete_phase(
        self,
        project_id: str,
        agent: AgentRole,
        phase: str,
        confirmed: bool = False,
    ) -> ProjectStatus:
        """Complete a phase and advance the project.

        Args:
            project_id: Project to update.
            agent: Agent owning the phase.
            phase: Agent-local phase name, e.g. "questions-answer".
            confirmed: Explicit user confirmation, required for human phases.

        Returns:
            The advanced record.

        Raises:
            UnknownPhaseError: If the agent has no such phase.
            OutOfOrderTransitionError: If the phase is not the current phase.
            HumanConfirmationRequiredError: If a human phase is not confirmed.
            MissingArtifactsError: If a generate phase's output is absent.
        """
        status = self.validate_and_recover_phase(project_id)
        target = Phase.of(agent, phase)

        if (
            state_machine.phase_state(status, target).status != PhaseStatus.COMPLETE
            and status.current_phase == target.full_name
            and target.produces
        ):
            project_dir = self._layout.project_dir(project_id)
            missing = tuple(
                path
                for path in (posixpath.join(project_dir, a) for a in target.produces)
                if not self._files.file_exists(path)
            )
            if missing:
                raise MissingArtifactsError(target.full_name, missing)

        updated = state_machine.complete_phase(
            status, agent, phase, self._clock(), confirmed
        )
        if updated is status:
            logger.debug("Project %s: %s already complete", project_id, target.full_name)
            return updated

        self._repository.save(updated)
        logger.debug(
            "Project %s completed %s, now at %s",
            project_id,
            target.full_name,
            updated.current_phase,
        )
        return updated

    def mark_ai_work_started(self, project_id: str) -> ProjectStatus:
        """Begin the current phase if the assistant performs it."""
        status = self.validate_and_recover_phase(project_id)
        phase = state_machine.current_phase(status)
        if phase is None or phase.requires_human:
            return status
        return self.begin_phase(project_id, phase.agent, phase.name)

    def mark_ai_work_complete(self, project_id: str) -> ProjectStatus:
        """Complete the current phase if the assistant performs it."""
        status = self.validate_and_recover_phase(project_id)
        phase = state_machine.current_phase(status)
        if phase is None or phase.requires_human:
            return status
        return self.complete_phase(project_id, phase.agent, phase.name)

    def confirm_current_phase(self, project_id: str) -> ProjectStatus:
        """Record the user's answer or approval for the current human phase."""
        status = self.validate_and_recover_phase(project_id)
        phase = state_machine.current_phase(status)
        if phase is None or not phase.requires_human:
            return status
        return self.complete_phase(project_id, phase.agent, phase.name, confirmed=True)

    # =========================================================================
    # QUERIES
    # =========================================================================

    def is_human_input_required(self, project_id: str) -> bool:
        status = self.get_or_create_status(project_id)
        return state_machine.is_human_input_required(status)

    def get_progress(self, project_id: str) -> Progress:
        return state_machine.progress(self.get_or_create_status(project_id))

    def get_current_phase(self, project_id: str) -> Phase | None:
        return parse_claimed_phase(self.get_or_create_status(project_id).current_phase)

    # =========================================================================
    # SETTINGS / COST TRACKING
    # =========================================================================

    def get_settings(self, project_id: str) -> ProjectSettings:
        return self.get_or_create_status(project_id).settings

    def update_settings(
        self,
        project_id: str,
        question_depth: QuestionDepth | None = None,
        document_length: DocumentLength | None = None,
    ) -> ProjectSettings:
        """Change the settings fields that are given, keep the others."""
        status = self.get_or_create_status(project_id)
        settings = status.settings
        if question_depth is not None:
            settings = replace(settings, question_depth=question_depth)
        if document_length is not None:
            settings = replace(settings, document_length=document_length)
        self._repository.save(
            replace(status, settings=settings, last_updated_at=self._clock())
        )
        return settings

    def add_input_tokens(self, project_id: str, tokens: int) -> CostTracking:
        """Add to the running input token total.

        Raises:
            ValueError: If tokens is negative.
        """
        if tokens < 0:
            raise ValueError(f"Token count must be non-negative, got {tokens}")
        status = self.get_or_create_status(project_id)
        now = self._clock()
        tracking = status.cost_tracking or CostTracking()
        tracking = replace(
            tracking,
            total_input_tokens=tracking.total_input_tokens + tokens,
            last_updated=now,
        )
        self._repository.save(
            replace(status, cost_tracking=tracking, last_updated_at=now)
        )
        return tracking
