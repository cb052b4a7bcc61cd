"""
File access adapters for project artifacts.
"""

from pathlib import Path

from specwright.domain.interfaces import FileAccessInterface


class LocalFileAccess(FileAccessInterface):
    """Reads and writes artifacts on the local filesystem."""

    def file_exists(self, path: str) -> bool:
        return Path(path).is_file()

    def read_file(self, path: str) -> str | None:
        try:
            return Path(path).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def write_file(self, path: str, content: str) -> None:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")


class InMemoryFileAccess(FileAccessInterface):
    """Dictionary-backed file access for testing."""

    def __init__(self, files: dict[str, str] | None = None) -> None:
        self._files: dict[str, str] = dict(files or {})

    def file_exists(self, path: str) -> bool:
        return path in self._files

    def read_file(self, path: str) -> str | None:
        return self._files.get(path)

    def write_file(self, path: str, content: str) -> None:
        self._files[path] = content

    def delete_file(self, path: str) -> None:
        self._files.pop(path, None)
