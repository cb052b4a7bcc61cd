"""
Domain exceptions for specwright.

These represent business rule violations in the domain layer.
State drift is deliberately absent: it is reported as a ValidationResult
and repaired by recovery rather than raised.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class SpecwrightError(Exception):
    """Base class for all specwright errors."""


# =============================================================================
# WORKFLOW REGISTRY / PROMPT COMPOSITION
# =============================================================================


class UnknownWorkflowError(SpecwrightError, KeyError):
    """Raised when a workflow name is not in the registry."""

    def __init__(self, workflow_name: str, available: tuple[str, ...] = ()):
        """
        Args:
            workflow_name: The name that failed to resolve
            available: Names that do exist, for the error message
        """
        message = f"Unknown workflow: {workflow_name}"
        if available:
            message += f". Available workflows: {', '.join(available)}"
        super().__init__(message)
        self.workflow_name = workflow_name

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class CompositeWorkflowError(SpecwrightError):
    """Raised when a multi-phase workflow is used where a leaf is required."""

    def __init__(self, workflow_name: str):
        super().__init__(
            f"Workflow {workflow_name} is multi-phase and cannot build a direct prompt"
        )
        self.workflow_name = workflow_name


class WorkflowCatalogError(SpecwrightError):
    """Raised when the workflow catalog and the phase catalog disagree."""


# =============================================================================
# PHASES AND TRANSITIONS
# =============================================================================


class UnknownPhaseError(SpecwrightError, ValueError):
    """Raised when a string does not name a phase of the fixed catalog."""


class PhaseTransitionError(SpecwrightError):
    """Base class for rejected phase transitions."""

    def __init__(self, message: str, phase: str):
        super().__init__(message)
        self.phase = phase


class OutOfOrderTransitionError(PhaseTransitionError):
    """
    Raised when a transition targets a phase that is not the current phase.

    The caller is expected to run validation/recovery and retry against
    the phase the project is actually in.
    """

    def __init__(self, phase: str, current_phase: str):
        """
        Args:
            phase: Full name of the phase the caller tried to move
            current_phase: Full name of the phase the project is in
        """
        super().__init__(
            f"Cannot transition {phase}: project is at {current_phase}", phase
        )
        self.current_phase = current_phase


class HumanConfirmationRequiredError(PhaseTransitionError):
    """Raised when a human phase is completed without explicit confirmation."""

    def __init__(self, phase: str):
        super().__init__(
            f"Phase {phase} requires explicit user confirmation to complete", phase
        )


class MissingArtifactsError(PhaseTransitionError):
    """Raised when a generate phase is completed but its output is absent."""

    def __init__(self, phase: str, missing_files: tuple[str, ...]):
        super().__init__(
            f"Phase {phase} cannot complete, missing: {', '.join(missing_files)}",
            phase,
        )
        self.missing_files = missing_files


class HumanPhaseError(SpecwrightError):
    """Raised when an AI prompt is requested for a phase a human performs."""

    def __init__(self, phase: str):
        super().__init__(f"Phase {phase} is performed by the user, not the assistant")
        self.phase = phase


# =============================================================================
# PERSISTENCE / CONFIGURATION
# =============================================================================


class PersistenceError(SpecwrightError):
    """Raised when a persisted record cannot be read or written."""

    def __init__(self, message: str, path: "Path | str | None" = None):
        super().__init__(message)
        self.path = path


class ConfigurationError(SpecwrightError):
    """Raised when configuration files are invalid or missing."""


# =============================================================================
# PROJECT LAYOUT
# =============================================================================


class InvalidProjectIdError(SpecwrightError, ValueError):
    """Raised when a project id does not name a directory under the projects root."""

    def __init__(self, project_id: str):
        super().__init__(
            f"Invalid project id {project_id!r}: must be a single directory name"
        )
        self.project_id = project_id
