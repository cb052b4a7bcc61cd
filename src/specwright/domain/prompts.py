"""
Prompt composition.

Turns a workflow, a project directory and the user's request into the
literal text handed to the external assistant. Everything here is pure
string building: no filesystem access, no timestamps.
"""

import posixpath
from dataclasses import dataclass

from specwright.domain.exceptions import HumanPhaseError
from specwright.domain.models import (
    AgentRole,
    DocumentLength,
    ProjectSettings,
    QuestionDepth,
)
from specwright.domain.phases import (
    AGENT_ORDER,
    AGENTS,
    Phase,
    PhaseKind,
    agent_definition,
)
from specwright.domain.workflows import (
    PROJECT_DIR_TOKEN,
    LeafWorkflow,
    require_leaf_workflow,
)

# Outputs below this prefix are shared across projects and never re-rooted
SHARED_OUTPUTS_PREFIX = "specwright/outputs/"


@dataclass(frozen=True)
class PromptBuildResult:
    """Composed prompt plus the context files it references."""

    prompt_text: str
    context_files: tuple[str, ...]  # Resolved, in prompt order
    workflow: LeafWorkflow


@dataclass(frozen=True)
class DocumentConstraints:
    """Length guidance appended to document-generating prompts."""

    description: str
    word_target: str
    read_time: str
    max_words: int
    max_tokens: int


QUESTION_COUNTS: dict[QuestionDepth, tuple[int, int]] = {
    QuestionDepth.LIGHT: (3, 5),
    QuestionDepth.STANDARD: (5, 8),
    QuestionDepth.THOROUGH: (8, 12),
}

DOCUMENT_CONSTRAINTS: dict[DocumentLength, DocumentConstraints] = {
    DocumentLength.BRIEF: DocumentConstraints(
        "Brief and focused", "600-900 words", "3-5 minutes", 900, 1200
    ),
    DocumentLength.STANDARD: DocumentConstraints(
        "Balanced detail", "1500-2100 words", "7-10 minutes", 2100, 2800
    ),
    DocumentLength.COMPREHENSIVE: DocumentConstraints(
        "Comprehensive and thorough", "3600-4500 words", "15-20 minutes", 4500, 6000
    ),
}

_QUESTION_FOCUS: dict[AgentRole, str] = {
    AgentRole.PM: "strategic",
    AgentRole.UX: "user interaction",
    AgentRole.ENGINEER: "technical",
}


def resolve_output_path(output: str, project_dir: str) -> str:
    """Resolve a declared output path for the FILES TO EDIT list."""
    if output.startswith(SHARED_OUTPUTS_PREFIX):
        return output
    return posixpath.join(project_dir, output)


def _compose(
    template: str,
    context_files: tuple[str, ...],
    user_request: str,
    outputs: tuple[str, ...],
    instructions: str = "",
) -> str:
    lines = [f"@{template}\n"]
    lines.extend(f"@{path}\n" for path in context_files)
    lines.append(f"\nUSER REQUEST:\n{user_request}\n")
    if instructions:
        lines.append(f"\n{instructions}\n")
    if outputs:
        lines.append("\nFILES TO EDIT:\n")
        lines.extend(f"{i}. {path}\n" for i, path in enumerate(outputs, start=1))
    return "".join(lines)


def build_prompt(
    workflow_name: str, project_dir: str, user_request: str
) -> PromptBuildResult:
    """
    Compose the assistant prompt for a leaf workflow.

    The prompt references the workflow template, then each context file
    with {{PROJECT_DIR}} replaced by project_dir, then the user request,
    then a 1-indexed list of the files the assistant must edit.

    Args:
        workflow_name: Registry key of a leaf workflow
        project_dir: Project directory substituted into context paths
        user_request: Free-text intent, embedded verbatim

    Returns:
        PromptBuildResult with the text and resolved context files

    Raises:
        UnknownWorkflowError: If the workflow is not registered
        CompositeWorkflowError: If the workflow has multiple phases
    """
    workflow = require_leaf_workflow(workflow_name)
    context_files = tuple(
        path.replace(PROJECT_DIR_TOKEN, project_dir) for path in workflow.context_files
    )
    outputs = tuple(resolve_output_path(o, project_dir) for o in workflow.outputs)
    text = _compose(workflow.template, context_files, user_request, outputs)
    return PromptBuildResult(
        prompt_text=text, context_files=context_files, workflow=workflow
    )


def document_length_block(length: DocumentLength) -> str:
    """Length constraint section appended to document prompts."""
    c = DOCUMENT_CONSTRAINTS[length]
    return (
        "\n# DOCUMENT LENGTH CONSTRAINT\n\n"
        f"{c.description}\n"
        f"Target Length: {c.word_target} (approximately {c.read_time} reading time)\n\n"
        f"Do NOT exceed {c.max_words} words. "
        "Write concisely and prioritize the most important information.\n"
        f"Limit your response to approximately {c.max_tokens} tokens.\n"
    )


def build_questions_prompt(
    agent: AgentRole,
    project_dir: str,
    user_request: str,
    depth: QuestionDepth = QuestionDepth.STANDARD,
) -> str:
    """
    Compose the prompt that asks an agent to write its questions file.

    Context is the project request plus the documents of every earlier
    agent.
    """
    definition = agent_definition(agent)
    earlier = AGENTS[: AGENT_ORDER.index(agent)]
    context = [posixpath.join(project_dir, "project_request.md")]
    context.extend(posixpath.join(project_dir, d.document_file) for d in earlier)

    low, high = QUESTION_COUNTS[depth]
    instructions = (
        f"Generate {low}-{high} {_QUESTION_FOCUS[agent]} questions "
        f"(depth: {depth.value})."
    )
    return _compose(
        f"specwright/agents/{definition.template_dir}/questioning_prompt.md",
        tuple(context),
        user_request,
        (posixpath.join(project_dir, definition.questions_file),),
        instructions,
    )


def build_phase_prompt(
    phase: Phase,
    project_dir: str,
    user_request: str,
    settings: ProjectSettings | None = None,
) -> str:
    """
    Compose the prompt for whichever AI phase a project is in.

    Args:
        phase: A questions-generate or document-generate phase
        project_dir: Project directory
        user_request: Free-text intent
        settings: Project settings for question count and document length

    Returns:
        Prompt text

    Raises:
        HumanPhaseError: If the phase is performed by the user
    """
    settings = settings or ProjectSettings()
    if phase.requires_human:
        raise HumanPhaseError(phase.full_name)
    if phase.kind == PhaseKind.QUESTIONS_GENERATE:
        return build_questions_prompt(
            phase.agent, project_dir, user_request, settings.question_depth
        )
    result = build_prompt(
        phase.definition.analysis_workflow, project_dir, user_request
    )
    return result.prompt_text + document_length_block(settings.document_length)
