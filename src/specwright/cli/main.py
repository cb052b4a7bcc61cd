"""Command line interface for specwright.

Usage:
    specwright init 042
    specwright status 042
    specwright prompt 042 "Add OAuth login"
    specwright complete 042 pm questions-generate
    specwright complete 042 pm questions-answer --confirm
    specwright session save 042 pm abc-123
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass, replace
from functools import cached_property, wraps
from pathlib import Path
from typing import Any, TypeVar

import click

from specwright.application import PhaseTrackingService, SessionService
from specwright.domain.exceptions import ConfigurationError, SpecwrightError
from specwright.domain.models import (
    AgentRole,
    DocumentLength,
    ProjectSettings,
    QuestionDepth,
    SessionAgent,
)
from specwright.domain.phases import parse_claimed_phase
from specwright.domain.prompts import build_phase_prompt, build_prompt
from specwright.domain.workflows import WORKFLOWS
from specwright.infrastructure import (
    FilesystemSessionRepository,
    FilesystemStatusRepository,
    LocalFileAccess,
    SpecwrightConfig,
    load_config,
)

from .console import (
    console,
    print_drift,
    print_error,
    print_status,
    print_success,
    print_validation,
    print_workflows,
)
from .logging_setup import setup_logging

logger = logging.getLogger("specwright.cli")

_AGENTS = click.Choice([a.value for a in AgentRole])
_SESSION_AGENTS = click.Choice([a.value for a in SessionAgent])


@dataclass
class AppContext:
    """Process-wide handles built once per invocation."""

    config: SpecwrightConfig

    @cached_property
    def phases(self) -> PhaseTrackingService:
        layout = self.config.layout
        return PhaseTrackingService(
            FilesystemStatusRepository(layout), LocalFileAccess(), layout
        )

    @cached_property
    def sessions(self) -> SessionService:
        return SessionService(FilesystemSessionRepository(self.config.layout))

    def project_dir(self, project_id: str) -> str:
        return self.config.layout.project_dir(project_id)


pass_app = click.make_pass_decorator(AppContext)


F = TypeVar("F", bound=Callable[..., Any])


def handle_errors(func: F) -> F:
    """Turn domain errors into an error panel and exit status 1."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except SpecwrightError as e:
            logger.debug("Command failed", exc_info=True)
            print_error(str(e))
            sys.exit(1)

    return wrapper  # type: ignore[return-value]


@click.group()
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(path_type=Path),
    help="Path to specwright.json (default: ./specwright.json if present)",
)
@click.option(
    "--projects-root",
    default=None,
    type=click.Path(),
    help="Directory holding the project directories",
)
@click.option(
    "--log-file",
    default=None,
    type=click.Path(),
    help="Path to log file",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable verbose (DEBUG) logging to console",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Path | None,
    projects_root: str | None,
    log_file: str | None,
    verbose: bool,
) -> None:
    """Track specification phases and compose assistant prompts."""
    try:
        config = load_config(config_path)
    except ConfigurationError as e:
        print_error(str(e), "Check that your JSON files exist and are valid.")
        sys.exit(1)
    if projects_root:
        config = replace(config, projects_root=str(Path(projects_root).resolve()))

    setup_logging("specwright", log_file or config.log_file, verbose)
    logger.debug("Projects root: %s", config.projects_root)
    ctx.obj = AppContext(config)


# =========================================================================
# Phase tracking
# =========================================================================


@cli.command()
@click.argument("project_id")
@click.option(
    "--question-depth",
    type=click.Choice([d.value for d in QuestionDepth]),
    default=QuestionDepth.STANDARD.value,
    show_default=True,
)
@click.option(
    "--document-length",
    type=click.Choice([d.value for d in DocumentLength]),
    default=DocumentLength.STANDARD.value,
    show_default=True,
)
@pass_app
@handle_errors
def init(
    app: AppContext, project_id: str, question_depth: str, document_length: str
) -> None:
    """Create a fresh status record for PROJECT_ID."""
    settings = ProjectSettings(
        question_depth=QuestionDepth(question_depth),
        document_length=DocumentLength(document_length),
    )
    record = app.phases.initialize_status(project_id, settings)
    print_success(f"Initialized {project_id} at {record.current_phase}")


@cli.command()
@click.argument("project_id")
@pass_app
@handle_errors
def status(app: AppContext, project_id: str) -> None:
    """Show where PROJECT_ID stands, repairing drift first."""
    record = app.phases.validate_and_recover_phase(project_id)
    print_status(
        record,
        app.phases.get_progress(project_id),
        app.phases.is_human_input_required(project_id),
    )


@cli.command()
@click.argument("project_id")
@click.option(
    "--phase",
    default=None,
    help="Phase to check, e.g. pm-prd-review (default: the recorded phase)",
)
@pass_app
@handle_errors
def validate(app: AppContext, project_id: str, phase: str | None) -> None:
    """Check a phase of PROJECT_ID against its files. Exits 1 when invalid."""
    claimed = phase or app.phases.get_or_create_status(project_id).current_phase
    result = app.phases.validate_current_phase(project_id, claimed)
    print_validation(result)
    if not result.is_valid:
        sys.exit(1)


@cli.command()
@click.argument("project_id")
@pass_app
@handle_errors
def recover(app: AppContext, project_id: str) -> None:
    """Rewind PROJECT_ID to the latest phase its files support."""
    before = app.phases.get_or_create_status(project_id)
    after = app.phases.validate_and_recover_phase(project_id)
    if before == after:
        print_success(f"{project_id} is consistent at {after.current_phase}")
    else:
        print_success(
            f"{project_id} recovered from {before.current_phase} "
            f"to {after.current_phase}"
        )


@cli.command()
@click.argument("project_id")
@pass_app
@handle_errors
def drift(app: AppContext, project_id: str) -> None:
    """List completed phases of PROJECT_ID whose output is missing."""
    print_drift(app.phases.check_for_drift(project_id))


@cli.command()
@click.argument("project_id")
@click.argument("agent", type=_AGENTS)
@click.argument("phase")
@pass_app
@handle_errors
def begin(app: AppContext, project_id: str, agent: str, phase: str) -> None:
    """Start PHASE of AGENT, e.g. `begin 042 pm prd-generate`."""
    role = AgentRole(agent)
    record = app.phases.begin_phase(project_id, role, phase)
    state = record.agent(role).phase(phase)
    print_success(f"{agent}-{phase}: {state.status.value}")


@cli.command()
@click.argument("project_id")
@click.argument("agent", type=_AGENTS)
@click.argument("phase")
@click.option("--confirm", is_flag=True, help="Confirm a user phase (answers/review)")
@pass_app
@handle_errors
def complete(
    app: AppContext, project_id: str, agent: str, phase: str, confirm: bool
) -> None:
    """Complete PHASE of AGENT and advance PROJECT_ID."""
    record = app.phases.complete_phase(
        project_id, AgentRole(agent), phase, confirmed=confirm
    )
    print_success(f"{agent}-{phase} complete, now at {record.current_phase}")


# =========================================================================
# Workflows and prompts
# =========================================================================


@cli.command()
def workflows() -> None:
    """List the registered workflows."""
    print_workflows(WORKFLOWS)


@cli.command()
@click.argument("project_id")
@click.argument("request")
@click.option(
    "--workflow",
    "workflow_name",
    default=None,
    help="Leaf workflow to compose (default: the project's current phase)",
)
@pass_app
@handle_errors
def prompt(
    app: AppContext, project_id: str, request: str, workflow_name: str | None
) -> None:
    """Print the assistant prompt for PROJECT_ID and REQUEST."""
    project_dir = app.project_dir(project_id)
    if workflow_name:
        click.echo(build_prompt(workflow_name, project_dir, request).prompt_text)
        return

    record = app.phases.validate_and_recover_phase(project_id)
    phase = parse_claimed_phase(record.current_phase)
    if phase is None:
        console.print(f"{project_id} is complete, nothing to prompt for")
        return
    click.echo(build_phase_prompt(phase, project_dir, request, record.settings))


# =========================================================================
# Sessions
# =========================================================================


@cli.group()
def session() -> None:
    """Remember assistant conversation ids per agent."""


@session.command("get")
@click.argument("project_id")
@click.argument("agent", type=_SESSION_AGENTS)
@pass_app
@handle_errors
def session_get(app: AppContext, project_id: str, agent: str) -> None:
    session_id = app.sessions.get_agent_session(project_id, SessionAgent(agent))
    if session_id is None:
        console.print(f"No session for {agent}")
        sys.exit(1)
    click.echo(session_id)


@session.command("save")
@click.argument("project_id")
@click.argument("agent", type=_SESSION_AGENTS)
@click.argument("session_id")
@pass_app
@handle_errors
def session_save(app: AppContext, project_id: str, agent: str, session_id: str) -> None:
    app.sessions.save_agent_session(project_id, SessionAgent(agent), session_id)
    print_success(f"Saved session for {agent}")


@session.command("clear")
@click.argument("project_id")
@click.argument("agent", type=_SESSION_AGENTS, required=False)
@pass_app
@handle_errors
def session_clear(app: AppContext, project_id: str, agent: str | None) -> None:
    """Clear one agent's session, or every session of PROJECT_ID."""
    if agent is None:
        app.sessions.clear_all_sessions(project_id)
        print_success(f"Cleared all sessions of {project_id}")
    else:
        app.sessions.clear_agent_session(project_id, SessionAgent(agent))
        print_success(f"Cleared session for {agent}")


if __name__ == "__main__":
    cli()
