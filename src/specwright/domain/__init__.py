"""
Domain layer for specwright.

Contains the phase catalog, workflow registry, prompt composition and the
phase state machine, with no I/O.
"""

from specwright.domain.exceptions import (
    CompositeWorkflowError,
    ConfigurationError,
    HumanConfirmationRequiredError,
    HumanPhaseError,
    InvalidProjectIdError,
    MissingArtifactsError,
    OutOfOrderTransitionError,
    PersistenceError,
    PhaseTransitionError,
    SpecwrightError,
    UnknownPhaseError,
    UnknownWorkflowError,
    WorkflowCatalogError,
)
from specwright.domain.interfaces import (
    FileAccessInterface,
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
    DriftReport,
    PhaseHistoryEntry,
    PhaseState,
    PhaseStatus,
    Progress,
    ProjectLayout,
    ProjectSettings,
    ProjectStatus,
    QuestionDepth,
    SessionAgent,
    SessionEntry,
    ValidationResult,
)
from specwright.domain.phases import (
    HUMAN_REQUIRED_PHASES,
    PHASE_ORDER,
    Phase,
    PhaseKind,
)
from specwright.domain.prompts import (
    PromptBuildResult,
    build_phase_prompt,
    build_prompt,
)
from specwright.domain.workflows import (
    WORKFLOWS,
    CompositeWorkflow,
    LeafWorkflow,
    get_workflow,
)

__all__ = [
    # Models
    "COMPLETE",
    "AgentRole",
    "AgentStatus",
    "CostTier",
    "CostTracking",
    "DocumentLength",
    "DriftReport",
    "PhaseHistoryEntry",
    "PhaseState",
    "PhaseStatus",
    "Progress",
    "ProjectLayout",
    "ProjectSettings",
    "ProjectStatus",
    "QuestionDepth",
    "SessionAgent",
    "SessionEntry",
    "ValidationResult",
    # Phase catalog
    "HUMAN_REQUIRED_PHASES",
    "PHASE_ORDER",
    "Phase",
    "PhaseKind",
    # Workflows and prompts
    "WORKFLOWS",
    "CompositeWorkflow",
    "LeafWorkflow",
    "PromptBuildResult",
    "build_phase_prompt",
    "build_prompt",
    "get_workflow",
    # Interfaces
    "FileAccessInterface",
    "ProjectStatusRepositoryInterface",
    "SessionRepositoryInterface",
    # Exceptions
    "SpecwrightError",
    "CompositeWorkflowError",
    "ConfigurationError",
    "HumanConfirmationRequiredError",
    "HumanPhaseError",
    "InvalidProjectIdError",
    "MissingArtifactsError",
    "OutOfOrderTransitionError",
    "PersistenceError",
    "PhaseTransitionError",
    "UnknownPhaseError",
    "UnknownWorkflowError",
    "WorkflowCatalogError",
]
