"""
Workflow Registry.

Declarative, process-wide catalog of the workflows the assistant can be
driven through. Leaf workflows carry a template, context files and the
files the assistant is expected to write; composite workflows list leaf
workflow names in the order a caller should run them.

The catalog is checked against the phase catalog (domain/phases.py) by
check_catalog_consistency(), which services run at startup.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from specwright.domain.exceptions import (
    CompositeWorkflowError,
    UnknownWorkflowError,
    WorkflowCatalogError,
)
from specwright.domain.models import AgentRole
from specwright.domain.phases import AGENTS

PROJECT_DIR_TOKEN = "{{PROJECT_DIR}}"


@dataclass(frozen=True)
class AgentConfig:
    """Who performs a workflow."""

    name: str
    emoji: str
    role: str


@dataclass(frozen=True)
class LeafWorkflow:
    """Single-phase workflow, directly composable into a prompt."""

    key: str
    name: str
    description: str
    agent: AgentConfig
    template: str
    inputs: tuple[str, ...]
    outputs: tuple[str, ...]
    context_files: tuple[str, ...]
    output_templates: tuple[tuple[str, str], ...] = ()  # (output, template)
    role: AgentRole | None = None  # Phase-catalog agent that owns the workflow


@dataclass(frozen=True)
class CompositeWorkflow:
    """Ordered list of leaf workflow names."""

    key: str
    name: str
    description: str
    phases: tuple[str, ...]


Workflow = LeafWorkflow | CompositeWorkflow


_SCOPING_PLAN = "specwright/outputs/scoping_plan.json"

WORKFLOWS: Mapping[str, Workflow] = MappingProxyType(
    {
        "scope": LeafWorkflow(
            key="scope",
            name="Project Scoping",
            description="Analyze project scope and classify as issues or projects",
            agent=AgentConfig("Product Manager", "🎯", "Strategic Planning"),
            template="specwright/templates/scoping_prompt.md",
            inputs=("user_request",),
            outputs=(_SCOPING_PLAN,),
            context_files=(),
        ),
        "playbook": LeafWorkflow(
            key="playbook",
            name="Playbook Generation",
            description="Generate project playbook defining core principles and standards",
            agent=AgentConfig("Governance Architect", "📜", "Project Standards"),
            template="specwright/agents/playbook/generation_prompt.md",
            inputs=("codebase_structure", "package.json", "README.md"),
            outputs=("PLAYBOOK.md",),
            context_files=(),
        ),
        "spec": CompositeWorkflow(
            key="spec",
            name="Specification",
            description="Complete AI squad specification process (PM → Designer → Engineer)",
            phases=("pm_analysis", "ux_analysis", "engineer_analysis"),
        ),
        "pm_analysis": LeafWorkflow(
            key="pm_analysis",
            name="Product Manager Analysis",
            description="Create PRD with Job Stories and acceptance criteria",
            agent=AgentConfig("Product Manager", "📋", "Requirements & Behavior"),
            template="specwright/agents/product_manager/analysis_prompt.md",
            inputs=("project_request.md", "questions/pm_questions.json"),
            outputs=("documents/prd.md",),
            context_files=(
                _SCOPING_PLAN,
                "{{PROJECT_DIR}}/project_request.md",
                "{{PROJECT_DIR}}/questions/pm_questions.json",
            ),
            output_templates=(
                ("documents/prd.md", "specwright/templates/prd_template.md"),
            ),
            role=AgentRole.PM,
        ),
        "ux_analysis": LeafWorkflow(
            key="ux_analysis",
            name="Designer Analysis",
            description="Create design brief with screen inventory and wireframes",
            agent=AgentConfig("Designer", "🎨", "User Experience Design"),
            template="specwright/agents/ux_designer/analysis_prompt.md",
            inputs=(
                "project_request.md",
                "documents/prd.md",
                "questions/ux_questions.json",
            ),
            outputs=("documents/design_brief.md", "documents/screens.json"),
            context_files=(
                _SCOPING_PLAN,
                "{{PROJECT_DIR}}/project_request.md",
                "{{PROJECT_DIR}}/documents/prd.md",
                "{{PROJECT_DIR}}/questions/ux_questions.json",
            ),
            output_templates=(
                (
                    "documents/design_brief.md",
                    "specwright/templates/design_brief_template.md",
                ),
                ("documents/screens.json", "specwright/templates/screens_template.json"),
            ),
            role=AgentRole.UX,
        ),
        "engineer_analysis": LeafWorkflow(
            key="engineer_analysis",
            name="Engineer Analysis",
            description="Define technical specification and technology stack",
            agent=AgentConfig("Engineer", "🔧", "Technical Specification"),
            template="specwright/agents/engineer/analysis_prompt.md",
            inputs=(
                "project_request.md",
                "documents/prd.md",
                "documents/design_brief.md",
                "questions/engineer_questions.json",
            ),
            outputs=(
                "documents/technical_specification.md",
                "documents/technology_choices.json",
            ),
            context_files=(
                _SCOPING_PLAN,
                "{{PROJECT_DIR}}/project_request.md",
                "{{PROJECT_DIR}}/documents/prd.md",
                "{{PROJECT_DIR}}/documents/design_brief.md",
                "{{PROJECT_DIR}}/questions/engineer_questions.json",
            ),
            output_templates=(
                (
                    "documents/technical_specification.md",
                    "specwright/templates/technical_specification_template.md",
                ),
                (
                    "documents/technology_choices.json",
                    "specwright/templates/technology_choices_template.json",
                ),
            ),
            role=AgentRole.ENGINEER,
        ),
        "breakdown": LeafWorkflow(
            key="breakdown",
            name="Issue Breakdown",
            description="Break down project into implementation issues in a single JSON file",
            agent=AgentConfig("Issue Breakdown", "📊", "Implementation Planning"),
            template="specwright/agents/breakdown/issue_breakdown_prompt.md",
            inputs=(
                "project_request.md",
                "documents/prd.md",
                "documents/design_brief.md",
                "documents/technical_specification.md",
            ),
            outputs=("issues/issues.json",),
            context_files=(
                _SCOPING_PLAN,
                "{{PROJECT_DIR}}/project_request.md",
                "{{PROJECT_DIR}}/documents/prd.md",
                "{{PROJECT_DIR}}/documents/design_brief.md",
                "{{PROJECT_DIR}}/documents/technical_specification.md",
                "{{PROJECT_DIR}}/documents/acceptance_criteria.json",
                "{{PROJECT_DIR}}/documents/screens.json",
                "{{PROJECT_DIR}}/documents/technology_choices.json",
            ),
            output_templates=(
                ("issues/issues.json", "specwright/templates/issues_template.json"),
            ),
        ),
    }
)


def get_workflow(name: str) -> Workflow | None:
    """Look up a workflow by name. Unknown names return None."""
    return WORKFLOWS.get(name)


def require_leaf_workflow(name: str) -> LeafWorkflow:
    """
    Resolve a name to a leaf workflow.

    Raises:
        UnknownWorkflowError: If the name is not registered
        CompositeWorkflowError: If the workflow has multiple phases
    """
    workflow = get_workflow(name)
    if workflow is None:
        raise UnknownWorkflowError(name, tuple(WORKFLOWS))
    if isinstance(workflow, CompositeWorkflow):
        raise CompositeWorkflowError(name)
    return workflow


def expand_workflow(name: str) -> tuple[LeafWorkflow, ...]:
    """Leaf workflows to run, in order, for `name`."""
    workflow = get_workflow(name)
    if workflow is None:
        raise UnknownWorkflowError(name, tuple(WORKFLOWS))
    if isinstance(workflow, LeafWorkflow):
        return (workflow,)
    return tuple(require_leaf_workflow(phase) for phase in workflow.phases)


def check_catalog_consistency(workflows: Mapping[str, Workflow] = WORKFLOWS) -> None:
    """
    Verify the workflow catalog agrees with the phase catalog.

    Raises:
        WorkflowCatalogError: Listing every inconsistency found
    """
    problems: list[str] = []

    for key, workflow in workflows.items():
        if workflow.key != key:
            problems.append(f"'{key}' is registered under a different key ({workflow.key})")
        if isinstance(workflow, CompositeWorkflow):
            for phase in workflow.phases:
                if not isinstance(workflows.get(phase), LeafWorkflow):
                    problems.append(f"'{key}' references unknown leaf workflow '{phase}'")

    for definition in AGENTS:
        workflow = workflows.get(definition.analysis_workflow)
        label = f"{definition.role.value} analysis workflow '{definition.analysis_workflow}'"
        if not isinstance(workflow, LeafWorkflow):
            problems.append(f"{label} is missing or not a leaf workflow")
            continue
        if workflow.role != definition.role:
            problems.append(f"{label} is not owned by {definition.role.value}")
        if definition.questions_file not in workflow.inputs:
            problems.append(f"{label} does not read {definition.questions_file}")
        if definition.document_file not in workflow.outputs:
            problems.append(f"{label} does not write {definition.document_file}")

    if problems:
        raise WorkflowCatalogError(
            "Workflow catalog is inconsistent with the phase catalog:\n"
            + "\n".join(f"  - {p}" for p in problems)
        )
