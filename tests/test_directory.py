"""Tests for trove.sources.directory — local and external directory aggregation."""

from __future__ import annotations

import os
from pathlib import Path, PurePosixPath

import pytest

from trove._errors import MalformedDataError, SourceNotFoundError, SourceReadError
from trove.content.set import ContentSet
from trove.formats import DataFormat
from trove.sources.directory import (
    aggregate_external_directory,
    aggregate_local_directory,
    normalize_key,
    read_external_directory,
    read_external_file,
    walk_external_directory,
)


# ---------------------------------------------------------------------------
# Local directories
# ---------------------------------------------------------------------------


class TestAggregateLocalDirectory:
    """aggregate_local_directory — content-set scan, discovery order."""

    def test_three_data_files_one_other(self, content_set: ContentSet) -> None:
        before = content_set.list_paths()
        values = aggregate_local_directory("team", content_set, key="team")
        assert values == [{"name": "Alice"}, {"name": "Bob"}, {"name": "Carol"}]
        # Read-only: nothing removed, non-data file untouched
        assert content_set.list_paths() == before
        assert "team/readme.md" in content_set

    def test_follows_content_set_order(self) -> None:
        cs = ContentSet.from_texts({
            "people/z.json": '{"n": "z"}',
            "people/a.yaml": "n: a\n",
            "people/m.toml": 'n = "m"\n',
        })
        values = aggregate_local_directory("people", cs, key="people")
        assert [v["n"] for v in values] == ["z", "a", "m"]

    def test_includes_nested_files(self) -> None:
        cs = ContentSet.from_texts({
            "people/a.json": '{"n": 1}',
            "people/sub/b.json": '{"n": 2}',
        })
        assert aggregate_local_directory("people", cs, key="p") == [{"n": 1}, {"n": 2}]

    def test_prefix_does_not_match_sibling(self) -> None:
        cs = ContentSet.from_texts({
            "team/a.json": '{"n": 1}',
            "team-archive/b.json": '{"n": 2}',
        })
        assert aggregate_local_directory("team", cs, key="team") == [{"n": 1}]

    def test_trailing_slash_prefix(self) -> None:
        cs = ContentSet.from_texts({"team/a.json": "1"})
        assert aggregate_local_directory("team/", cs, key="team") == [1]

    def test_empty_raises_not_found(self) -> None:
        cs = ContentSet.from_texts({"team/readme.md": "# Team"})
        with pytest.raises(SourceNotFoundError) as exc_info:
            aggregate_local_directory("team", cs, key="team")
        assert exc_info.value.key == "team"

    def test_malformed_file_names_path(self) -> None:
        cs = ContentSet.from_texts({"team/a.json": "{}", "team/bad.json": "{invalid"})
        with pytest.raises(MalformedDataError) as exc_info:
            aggregate_local_directory("team", cs, key="team")
        assert exc_info.value.path == "team/bad.json"


# ---------------------------------------------------------------------------
# Walk + key normalization (pure)
# ---------------------------------------------------------------------------


class TestNormalizeKey:
    @pytest.mark.parametrize(
        ("rel", "expected"),
        [
            ("a.json", "a"),
            ("sub/b.yaml", "sub/b"),
            ("deep/er/c.toml", "deep/er/c"),
            ("v1.2.yml", "v1.2"),
        ],
    )
    def test_strips_extension(self, rel: str, expected: str) -> None:
        assert normalize_key(rel) == expected

    def test_native_separators(self) -> None:
        assert normalize_key(Path("sub") / "b.yaml") == "sub/b"
        assert normalize_key(PurePosixPath("sub/b.yaml")) == "sub/b"

    def test_empty(self) -> None:
        assert normalize_key("") == ""


class TestWalkExternalDirectory:
    def test_recursive_sorted_data_only(self, tmp_project: Path) -> None:
        directory = tmp_project / "data" / "authors"
        found = [p.relative_to(directory).as_posix() for p in walk_external_directory(directory)]
        assert found == ["a.json", "sub/b.yaml"]

    def test_files_before_subdirectories(self, tmp_path: Path) -> None:
        (tmp_path / "a").mkdir()
        (tmp_path / "a" / "x.json").write_text("1")
        (tmp_path / "b.json").write_text("2")
        (tmp_path / "c").mkdir()
        (tmp_path / "c" / "y.json").write_text("3")
        found = [p.relative_to(tmp_path).as_posix() for p in walk_external_directory(tmp_path)]
        assert found == ["b.json", "a/x.json", "c/y.json"]

    def test_missing_directory_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            list(walk_external_directory(tmp_path / "nope"))

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlinked_directory_not_followed(self, tmp_path: Path) -> None:
        (tmp_path / "a.json").write_text("{}")
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "b.json").write_text("{}")
        try:
            (tmp_path / "sub" / "loop").symlink_to(tmp_path, target_is_directory=True)
        except OSError:
            pytest.skip("cannot create symlinks here")
        found = [p.relative_to(tmp_path).as_posix() for p in walk_external_directory(tmp_path)]
        assert found == ["a.json", "sub/b.json"]


# ---------------------------------------------------------------------------
# External I/O
# ---------------------------------------------------------------------------


class TestReadExternalDirectory:
    def test_keys_and_values(self, tmp_project: Path) -> None:
        pairs = read_external_directory(tmp_project / "data" / "authors")
        assert pairs == [("a", {"name": "A"}), ("sub/b", {"name": "B"})]

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(SourceNotFoundError):
            read_external_directory(tmp_path / "nope")

    def test_path_is_a_file(self, tmp_path: Path) -> None:
        target = tmp_path / "plain"
        target.write_text("not a directory")
        with pytest.raises(SourceReadError):
            read_external_directory(target)

    def test_colliding_keys_reported(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        (tmp_path / "a.json").write_text('{"from": "json"}')
        (tmp_path / "a.yaml").write_text("from: yaml\n")
        pairs = read_external_directory(tmp_path)
        assert pairs == [("a", {"from": "json"}), ("a", {"from": "yaml"})]
        err = capsys.readouterr().err
        assert "Duplicate key 'a'" in err
        assert "a.yaml replaces a.json" in err

    def test_malformed_file(self, tmp_path: Path) -> None:
        (tmp_path / "bad.yaml").write_text("key: [unclosed\n")
        with pytest.raises(MalformedDataError) as exc_info:
            read_external_directory(tmp_path)
        assert exc_info.value.path.endswith("bad.yaml")


class TestAsyncReads:
    @pytest.mark.asyncio
    async def test_aggregate_external_directory(self, tmp_project: Path) -> None:
        result = await aggregate_external_directory(tmp_project / "data" / "authors")
        assert result == {"a": {"name": "A"}, "sub/b": {"name": "B"}}

    @pytest.mark.asyncio
    async def test_aggregate_external_directory_empty(self, tmp_path: Path) -> None:
        (tmp_path / "notes.txt").write_text("hi")
        assert await aggregate_external_directory(tmp_path) == {}

    @pytest.mark.asyncio
    async def test_aggregate_external_directory_later_file_wins(self, tmp_path: Path) -> None:
        (tmp_path / "a.json").write_text('{"from": "json"}')
        (tmp_path / "a.yaml").write_text("from: yaml\n")
        assert await aggregate_external_directory(tmp_path) == {"a": {"from": "yaml"}}

    @pytest.mark.asyncio
    async def test_read_external_file(self, tmp_project: Path) -> None:
        value = await read_external_file(tmp_project / "data" / "footer.toml", DataFormat.TOML)
        assert value == {"legal": "/legal/"}

    @pytest.mark.asyncio
    async def test_read_external_file_missing(self, tmp_path: Path) -> None:
        with pytest.raises(SourceNotFoundError):
            await read_external_file(tmp_path / "missing.json", DataFormat.JSON)

    @pytest.mark.asyncio
    @pytest.mark.skipif(
        os.name == "nt" or (hasattr(os, "geteuid") and os.geteuid() == 0),
        reason="permission bits not enforced",
    )
    async def test_read_external_file_unreadable(self, tmp_path: Path) -> None:
        target = tmp_path / "secret.json"
        target.write_text("{}")
        target.chmod(0)
        try:
            with pytest.raises(SourceReadError):
                await read_external_file(target, DataFormat.JSON)
        finally:
            target.chmod(0o644)
