"""Tests for the filesystem and in-memory session repositories."""

import json

import pytest

from specwright.domain.exceptions import PersistenceError
from specwright.domain.models import ProjectLayout, SessionAgent, SessionEntry
from specwright.infrastructure.persistence.filesystem import FilesystemSessionRepository
from specwright.infrastructure.persistence.memory import InMemorySessionRepository

ENTRY = SessionEntry(
    session_id="sess-1",
    created_at="2025-01-01T00:00:00+00:00",
    updated_at="2025-01-01T00:00:05+00:00",
)


@pytest.fixture
def repo(tmp_path):  # noqa: ANN001, ANN201
    return FilesystemSessionRepository(ProjectLayout(str(tmp_path)))


class TestFilesystemSessionRepository:
    """Tests for FilesystemSessionRepository."""

    def test_missing_record_is_empty(self, repo) -> None:  # noqa: ANN001
        """No file means no sessions."""
        assert repo.load("042") == {}

    def test_save_writes_camel_case(self, repo, tmp_path) -> None:  # noqa: ANN001
        """Entries are stored under camelCase keys."""
        repo.save("042", {SessionAgent.UX: ENTRY})

        data = json.loads((tmp_path / "042" / "sessions.json").read_text())
        assert data == {
            "ux": {
                "sessionId": "sess-1",
                "createdAt": "2025-01-01T00:00:00+00:00",
                "updatedAt": "2025-01-01T00:00:05+00:00",
            }
        }

    def test_save_and_load(self, repo) -> None:  # noqa: ANN001
        """Saved sessions load back unchanged."""
        sessions = {SessionAgent.PM: ENTRY, SessionAgent.SCOPING: ENTRY}

        repo.save("042", sessions)

        assert repo.load("042") == sessions

    def test_delete(self, repo, tmp_path) -> None:  # noqa: ANN001
        """Deleting twice leaves no file behind."""
        repo.save("042", {SessionAgent.PM: ENTRY})

        repo.delete("042")
        repo.delete("042")

        assert not (tmp_path / "042" / "sessions.json").exists()
        assert repo.load("042") == {}

    def test_unknown_agent_raises(self, repo, tmp_path) -> None:  # noqa: ANN001
        """Unknown agent keys are a malformed record."""
        (tmp_path / "042").mkdir()
        (tmp_path / "042" / "sessions.json").write_text(
            json.dumps({"qa": {"sessionId": "x", "createdAt": "t", "updatedAt": "t"}})
        )

        with pytest.raises(PersistenceError, match="Malformed session record"):
            repo.load("042")

    def test_empty_session_id_raises(self, repo, tmp_path) -> None:  # noqa: ANN001
        """Session ids must not be empty."""
        (tmp_path / "042").mkdir()
        (tmp_path / "042" / "sessions.json").write_text(
            json.dumps({"pm": {"sessionId": "", "createdAt": "t", "updatedAt": "t"}})
        )

        with pytest.raises(PersistenceError):
            repo.load("042")


class TestInMemorySessionRepository:
    """Tests for InMemorySessionRepository."""

    def test_load_returns_copy(self) -> None:
        """Callers cannot mutate the stored mapping."""
        repo = InMemorySessionRepository()
        repo.save("042", {SessionAgent.PM: ENTRY})

        loaded = repo.load("042")
        loaded.clear()

        assert repo.load("042") == {SessionAgent.PM: ENTRY}

    def test_delete(self) -> None:
        """Deleted projects load as empty."""
        repo = InMemorySessionRepository()
        repo.save("042", {SessionAgent.PM: ENTRY})

        repo.delete("042")

        assert repo.load("042") == {}
