"""
Specwright: phase tracking for multi-agent specification workflows.

Tracks a project through the Product Manager, Designer and Engineer
agents, keeps the recorded phase consistent with the files on disk, and
composes the prompts that drive an external assistant through each phase.

Example:
    from specwright import PhaseTrackingService, ProjectLayout, build_prompt
    from specwright.infrastructure import FilesystemStatusRepository, LocalFileAccess

    layout = ProjectLayout("specwright/outputs/projects")
    service = PhaseTrackingService(
        FilesystemStatusRepository(layout), LocalFileAccess(), layout
    )
    status = service.validate_and_recover_phase("042")
    prompt = build_prompt("pm_analysis", layout.project_dir("042"), "Add OAuth login")
"""

# Application layer (orchestration)
from specwright.application import (
    SCOPING_PROJECT_ID,
    PhaseTrackingService,
    SessionService,
    session_agent_for_workflow,
)

# Domain exceptions
from specwright.domain.exceptions import (
    CompositeWorkflowError,
    HumanConfirmationRequiredError,
    InvalidProjectIdError,
    MissingArtifactsError,
    OutOfOrderTransitionError,
    PersistenceError,
    SpecwrightError,
    UnknownPhaseError,
    UnknownWorkflowError,
)

# Domain interfaces (for type hints and custom implementations)
from specwright.domain.interfaces import (
    FileAccessInterface,
    ProjectStatusRepositoryInterface,
    SessionRepositoryInterface,
)
from specwright.domain.models import (
    AgentRole,
    PhaseStatus,
    ProjectLayout,
    ProjectSettings,
    ProjectStatus,
    SessionAgent,
    ValidationResult,
)
from specwright.domain.phases import Phase

# Workflows and prompts
from specwright.domain.prompts import PromptBuildResult, build_phase_prompt, build_prompt
from specwright.domain.workflows import WORKFLOWS, expand_workflow, get_workflow

__version__ = "0.4.0"

__all__ = [
    # Version
    "__version__",
    # Domain models
    "AgentRole",
    "Phase",
    "PhaseStatus",
    "ProjectLayout",
    "ProjectSettings",
    "ProjectStatus",
    "SessionAgent",
    "ValidationResult",
    # Workflows and prompts
    "WORKFLOWS",
    "PromptBuildResult",
    "build_phase_prompt",
    "build_prompt",
    "expand_workflow",
    "get_workflow",
    # Domain interfaces
    "FileAccessInterface",
    "ProjectStatusRepositoryInterface",
    "SessionRepositoryInterface",
    # Domain exceptions
    "SpecwrightError",
    "CompositeWorkflowError",
    "HumanConfirmationRequiredError",
    "InvalidProjectIdError",
    "MissingArtifactsError",
    "OutOfOrderTransitionError",
    "PersistenceError",
    "UnknownPhaseError",
    "UnknownWorkflowError",
    # Application layer
    "SCOPING_PROJECT_ID",
    "PhaseTrackingService",
    "SessionService",
    "session_agent_for_workflow",
]
