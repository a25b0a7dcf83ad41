"""Content set — the in-memory build tree shared with the page pipeline.

Maps POSIX paths relative to the content root to ``FileRecord`` objects.
Iteration follows insertion order, which is the discovery order when the
set is loaded with ``ContentSet.from_directory``.

The aggregation engine only reads and deletes entries; it never adds any.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass(slots=True)
class FileRecord:
    """A file resident in the content set.

    Attributes:
        contents: Raw file bytes.
        metadata: Arbitrary mutable per-file metadata (frontmatter etc.).

    """

    contents: bytes
    metadata: dict[str, Any] = field(default_factory=dict)


class ContentSet:
    """Ordered, mutable mapping of content path -> FileRecord."""

    __slots__ = ("_files",)

    def __init__(self, files: Mapping[str, FileRecord] | None = None) -> None:
        self._files: dict[str, FileRecord] = dict(files or {})

    @classmethod
    def from_directory(cls, root: Path) -> ContentSet:
        """Load every file under ``root`` into a new content set.

        Paths are walked in sorted order so that discovery order, and
        therefore iteration order, is deterministic across platforms.
        A missing ``root`` yields an empty set.

        """
        files: dict[str, FileRecord] = {}
        if root.is_dir():
            for path in sorted(root.rglob("*")):
                if path.is_file():
                    rel = path.relative_to(root).as_posix()
                    files[rel] = FileRecord(contents=path.read_bytes())
        return cls(files)

    @classmethod
    def from_texts(cls, texts: Mapping[str, str]) -> ContentSet:
        """Build a content set from ``{path: text}`` pairs (UTF-8 encoded)."""
        return cls({
            path: FileRecord(contents=text.encode("utf-8"))
            for path, text in texts.items()
        })

    def get(self, path: str) -> FileRecord | None:
        """Return the record at ``path``, or None if absent."""
        return self._files.get(path)

    def delete(self, path: str) -> None:
        """Remove ``path`` from the set. Missing paths are ignored."""
        self._files.pop(path, None)

    def list_paths(self) -> list[str]:
        """All paths, in insertion order."""
        return list(self._files)

    def __contains__(self, path: object) -> bool:
        return path in self._files

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._files))

    def __repr__(self) -> str:
        return f"ContentSet({len(self._files)} files)"
