"""Tests for the filesystem and in-memory status repositories."""

import json
from dataclasses import replace

import pytest

from specwright.domain.exceptions import PersistenceError
from specwright.domain.models import (
    AgentRole,
    CostTracking,
    DocumentLength,
    ProjectLayout,
    ProjectSettings,
)
from specwright.domain.phases import Phase
from specwright.domain.state_machine import (
    complete_phase,
    create_initial_status,
    rewind_to_phase,
)
from specwright.infrastructure.persistence.filesystem import (
    FilesystemStatusRepository,
    status_from_dict,
    status_to_dict,
)
from specwright.infrastructure.persistence.memory import InMemoryStatusRepository

T0 = "2025-01-01T00:00:00+00:00"
T1 = "2025-01-01T00:00:01+00:00"


@pytest.fixture
def repo(tmp_path):  # noqa: ANN001, ANN201
    return FilesystemStatusRepository(ProjectLayout(str(tmp_path)))


@pytest.fixture
def advanced():  # noqa: ANN201
    """A record with a completed phase, settings and cost tracking."""
    status = create_initial_status(
        "042", ProjectSettings(document_length=DocumentLength.BRIEF), now=T0
    )
    status = complete_phase(status, AgentRole.PM, "questions-generate", T1)
    status = rewind_to_phase(status, Phase.parse("pm-questions-answer"), T1, "note")
    return replace(status, cost_tracking=CostTracking(total_input_tokens=42))


class TestStatusSerialization:
    """Tests for the camelCase JSON form."""

    def test_initial_record_shape(self) -> None:
        """A new record serializes to the camelCase layout."""
        data = status_to_dict(create_initial_status("042", now=T0))

        assert data["projectId"] == "042"
        assert data["currentAgent"] == "pm"
        assert data["currentPhase"] == "pm-questions-generate"
        assert data["agents"]["pm"]["currentPhase"] == "questions-generate"
        assert data["agents"]["ux"]["phases"]["design-brief-review"] == {
            "status": "not-started"
        }
        assert data["settings"] == {
            "question_depth": "standard",
            "document_length": "standard",
        }
        assert "costTracking" not in data

    def test_history_entry_keys(self, advanced) -> None:  # noqa: ANN001
        """Unset history fields are omitted."""
        entry = status_to_dict(advanced)["history"][0]

        assert entry == {
            "phase": "pm-questions-generate",
            "startedAt": T1,
            "status": "complete",
            "completedAt": T1,
        }

    def test_round_trip(self, advanced) -> None:  # noqa: ANN001
        """Deserializing a serialized record gives it back."""
        assert status_from_dict(status_to_dict(advanced)) == advanced

    def test_completed_project_marks_agent_complete(self) -> None:
        """A finished record uses "complete" for agent and phase."""
        status = rewind_to_phase(create_initial_status("042", now=T0), None, T1, "")

        data = status_to_dict(status)

        assert data["currentAgent"] == "complete"
        assert data["currentPhase"] == "complete"
        assert data["agents"]["engineer"]["currentPhase"] is None


class TestFilesystemStatusRepository:
    """Tests for FilesystemStatusRepository."""

    def test_missing_record_loads_none(self, repo) -> None:  # noqa: ANN001
        """No file means no record."""
        assert repo.load("042") is None

    def test_save_and_load(self, repo, advanced, tmp_path) -> None:  # noqa: ANN001
        """Saved records load back unchanged."""
        repo.save(advanced)

        assert (tmp_path / "042" / "project_status.json").is_file()
        assert repo.load("042") == advanced

    def test_no_temp_file_left_behind(self, repo, advanced, tmp_path) -> None:  # noqa: ANN001
        """The temporary file is renamed away."""
        repo.save(advanced)

        assert [p.name for p in (tmp_path / "042").iterdir()] == ["project_status.json"]

    def test_save_overwrites(self, repo, advanced) -> None:  # noqa: ANN001
        """The latest save wins."""
        repo.save(create_initial_status("042", now=T0))
        repo.save(advanced)

        assert repo.load("042") == advanced

    def test_invalid_json_raises(self, repo, tmp_path) -> None:  # noqa: ANN001
        """Undecodable files raise PersistenceError with the path."""
        (tmp_path / "042").mkdir()
        (tmp_path / "042" / "project_status.json").write_text("{broken")

        with pytest.raises(PersistenceError) as exc_info:
            repo.load("042")

        assert exc_info.value.path == tmp_path / "042" / "project_status.json"

    def test_schema_violation_raises(self, repo, tmp_path) -> None:  # noqa: ANN001
        """Records failing the schema raise PersistenceError."""
        data = status_to_dict(create_initial_status("042", now=T0))
        data["currentAgent"] = "qa"
        (tmp_path / "042").mkdir()
        (tmp_path / "042" / "project_status.json").write_text(json.dumps(data))

        with pytest.raises(PersistenceError, match="Malformed status record"):
            repo.load("042")

    def test_missing_phase_raises(self, repo, tmp_path) -> None:  # noqa: ANN001
        """Every catalog phase must be present."""
        data = status_to_dict(create_initial_status("042", now=T0))
        del data["agents"]["pm"]["phases"]["prd-review"]
        (tmp_path / "042").mkdir()
        (tmp_path / "042" / "project_status.json").write_text(json.dumps(data))

        with pytest.raises(PersistenceError):
            repo.load("042")

    def test_unknown_current_phase_raises(self, repo, tmp_path) -> None:  # noqa: ANN001
        """A current phase outside the catalog is a malformed record."""
        data = status_to_dict(create_initial_status("042", now=T0))
        data["currentPhase"] = "pm-prd-revue"
        (tmp_path / "042").mkdir()
        (tmp_path / "042" / "project_status.json").write_text(json.dumps(data))

        with pytest.raises(PersistenceError, match="prd-revue"):
            repo.load("042")

    def test_inconsistent_record_loads_as_stored(self, repo, tmp_path) -> None:  # noqa: ANN001
        """Loading does not repair records; recovery does."""
        data = status_to_dict(create_initial_status("042", now=T0))
        data["currentPhase"] = "pm-prd-review"
        (tmp_path / "042").mkdir()
        (tmp_path / "042" / "project_status.json").write_text(json.dumps(data))

        assert repo.load("042").current_phase == "pm-prd-review"


class TestInMemoryStatusRepository:
    """Tests for InMemoryStatusRepository."""

    def test_save_and_load(self, advanced) -> None:  # noqa: ANN001
        """Records are kept by id and saves are counted."""
        repo = InMemoryStatusRepository()

        repo.save(advanced)

        assert repo.load("042") is advanced
        assert repo.load("043") is None
        assert repo.save_count == 1
