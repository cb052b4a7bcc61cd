"""
Phase validation against on-disk artifacts.

A project may only claim a phase when every artifact produced by the
generate phases before it exists. Checks are existence-only and go
through FileAccessInterface so the logic stays free of I/O.
"""

import posixpath
from typing import TYPE_CHECKING

from specwright.domain.models import (
    DriftReport,
    PhaseStatus,
    ProjectStatus,
    ValidationResult,
)
from specwright.domain.phases import (
    PHASE_ORDER,
    Phase,
    parse_claimed_phase,
    required_artifacts,
)

if TYPE_CHECKING:
    from specwright.domain.interfaces import FileAccessInterface


class _ArtifactLookup:
    """Caches existence checks for one validation run."""

    def __init__(self, project_dir: str, files: "FileAccessInterface"):
        self._project_dir = project_dir
        self._files = files
        self._seen: dict[str, bool] = {}

    def path(self, artifact: str) -> str:
        return posixpath.join(self._project_dir, artifact)

    def missing(self, artifacts: tuple[str, ...]) -> tuple[str, ...]:
        result = []
        for artifact in artifacts:
            path = self.path(artifact)
            if path not in self._seen:
                self._seen[path] = self._files.file_exists(path)
            if not self._seen[path]:
                result.append(path)
        return tuple(result)


def validate_phase(
    claimed_phase: str, project_dir: str, files: "FileAccessInterface"
) -> ValidationResult:
    """
    Check that the artifacts a phase depends on exist.

    Args:
        claimed_phase: Full phase name, or "complete"
        project_dir: Directory the artifacts are resolved against
        files: File access port used for existence checks

    Returns:
        ValidationResult. When invalid, missing_files holds absolute
        paths and suggested_phase the latest earlier phase whose
        requirements are all present.

    Raises:
        UnknownPhaseError: If claimed_phase is not a catalog phase
    """
    claimed = parse_claimed_phase(claimed_phase)
    lookup = _ArtifactLookup(project_dir, files)

    missing = lookup.missing(required_artifacts(claimed))
    if not missing:
        return ValidationResult(claimed_phase=claimed_phase, is_valid=True)

    end = len(PHASE_ORDER) if claimed is None else claimed.index
    suggested = PHASE_ORDER[0]
    for candidate in reversed(PHASE_ORDER[:end]):
        if not lookup.missing(required_artifacts(candidate)):
            suggested = candidate
            break

    return ValidationResult(
        claimed_phase=claimed_phase,
        is_valid=False,
        reason=(
            f"Phase {claimed_phase} requires artifacts that do not exist: "
            + ", ".join(missing)
        ),
        missing_files=missing,
        suggested_phase=suggested.full_name,
    )


def find_drift(
    status: ProjectStatus, project_dir: str, files: "FileAccessInterface"
) -> tuple[DriftReport, ...]:
    """
    Report phases recorded as complete whose output is missing.

    Read-only: nothing is repaired. Phases that produce nothing are never
    reported.
    """
    lookup = _ArtifactLookup(project_dir, files)
    reports = []
    for phase in PHASE_ORDER:
        if _is_complete(status, phase) and phase.produces:
            missing = lookup.missing(phase.produces)
            if missing:
                reports.append(DriftReport(phase=phase.full_name, missing_files=missing))
    return tuple(reports)


def _is_complete(status: ProjectStatus, phase: Phase) -> bool:
    return status.agent(phase.agent).phase(phase.name).status == PhaseStatus.COMPLETE
