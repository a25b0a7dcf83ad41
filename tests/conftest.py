"""Shared test fixtures for trove."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from trove.content.set import ContentSet
from trove.coordinator import AggregationCoordinator


@pytest.fixture
def tmp_project(tmp_path: Path) -> Path:
    """Create a minimal project with local and external data sources.

    Layout::

        content/
            index.md
            data/site.json          local file
            data/nav.yaml           local file
            team/alice.json         local directory (3 data files + 1 other)
            team/bob.yaml
            team/carol.toml
            team/readme.md
        data/
            footer.toml             external file
            authors/a.json          external directory, recursive
            authors/sub/b.yaml
            authors/notes.txt

    """
    content = tmp_path / "content"
    (content / "data").mkdir(parents=True)
    (content / "team").mkdir()
    (content / "index.md").write_text("---\ntitle: Home\n---\n\n# Welcome\n")
    (content / "data" / "site.json").write_text(
        '{"title": "Example", "url": "https://example.com"}'
    )
    (content / "data" / "nav.yaml").write_text("home: /\nabout: /about/\n")
    (content / "team" / "alice.json").write_text('{"name": "Alice"}')
    (content / "team" / "bob.yaml").write_text("name: Bob\n")
    (content / "team" / "carol.toml").write_text('name = "Carol"\n')
    (content / "team" / "readme.md").write_text("# Team\n")

    data = tmp_path / "data"
    (data / "authors" / "sub").mkdir(parents=True)
    (data / "footer.toml").write_text('legal = "/legal/"\n')
    (data / "authors" / "a.json").write_text('{"name": "A"}')
    (data / "authors" / "sub" / "b.yaml").write_text("name: B\n")
    (data / "authors" / "notes.txt").write_text("not data\n")

    return tmp_path


@pytest.fixture
def content_set(tmp_project: Path) -> ContentSet:
    """The content set loaded from tmp_project/content."""
    return ContentSet.from_directory(tmp_project / "content")


def make_coordinator(
    root: Path,
    content_set: ContentSet,
    tree: dict[str, Any] | None = None,
    **kwargs: Any,
) -> AggregationCoordinator:
    """Create a coordinator rooted at ``root`` with content under ``root/content``."""
    return AggregationCoordinator(
        root,
        root / "content",
        content_set,
        tree if tree is not None else {},
        **kwargs,
    )


class CallbackRecorder:
    """Completion callback that records every invocation."""

    def __init__(self) -> None:
        self.calls: list[Any] = []

    def __call__(self, error: Any) -> None:
        self.calls.append(error)
