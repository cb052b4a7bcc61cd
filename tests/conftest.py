"""Shared pytest fixtures for specwright tests."""

import itertools
from collections.abc import Callable

import pytest

from specwright.application.phase_service import PhaseTrackingService
from specwright.application.session_service import SessionService
from specwright.domain.models import ProjectLayout
from specwright.infrastructure.files import InMemoryFileAccess
from specwright.infrastructure.persistence.memory import (
    InMemorySessionRepository,
    InMemoryStatusRepository,
)

PROJECTS_ROOT = "/projects"
PROJECT_ID = "042"
PROJECT_DIR = f"{PROJECTS_ROOT}/{PROJECT_ID}"


@pytest.fixture
def clock() -> Callable[[], str]:
    """Deterministic clock, one second later on every call."""
    ticks = itertools.count()

    def _now() -> str:
        second = next(ticks)
        return f"2025-01-01T00:{second // 60:02d}:{second % 60:02d}+00:00"

    return _now


@pytest.fixture
def project_dir() -> str:
    return PROJECT_DIR


@pytest.fixture
def layout() -> ProjectLayout:
    return ProjectLayout(PROJECTS_ROOT)


@pytest.fixture
def files() -> InMemoryFileAccess:
    """Empty in-memory project files."""
    return InMemoryFileAccess()


@pytest.fixture
def add_artifacts(files: InMemoryFileAccess) -> Callable[..., None]:
    """Write artifacts (relative paths) into the test project."""

    def _add(*artifacts: str) -> None:
        for artifact in artifacts:
            files.write_file(f"{PROJECT_DIR}/{artifact}", "content")

    return _add


@pytest.fixture
def status_repo() -> InMemoryStatusRepository:
    return InMemoryStatusRepository()


@pytest.fixture
def session_repo() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@pytest.fixture
def phase_service(
    status_repo: InMemoryStatusRepository,
    files: InMemoryFileAccess,
    layout: ProjectLayout,
    clock: Callable[[], str],
) -> PhaseTrackingService:
    return PhaseTrackingService(status_repo, files, layout, clock=clock)


@pytest.fixture
def session_service(
    session_repo: InMemorySessionRepository, clock: Callable[[], str]
) -> SessionService:
    return SessionService(session_repo, clock=clock)
