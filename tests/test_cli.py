"""Tests for trove._cli — argument parsing and command dispatch."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from trove._cli import _build_parser, main


class TestBuildParser:
    """_build_parser — CLI argument parsing."""

    def test_resolve_default_args(self) -> None:
        parser = _build_parser()
        args = parser.parse_args(["resolve"])
        assert args.command == "resolve"
        assert args.root == "."
        assert args.content_dir is None
        assert args.source == []
        assert args.timeout is None
        assert args.output is None
        assert args.verbose is False

    def test_resolve_with_custom_root(self) -> None:
        parser = _build_parser()
        args = parser.parse_args(["resolve", "my-site/"])
        assert args.root == "my-site/"

    def test_repeated_sources(self) -> None:
        parser = _build_parser()
        args = parser.parse_args([
            "resolve",
            "--source", "site=./content/data/site.json",
            "--source", "nav.primary=./data/nav.yaml",
        ])
        assert args.source == [
            ("site", "./content/data/site.json"),
            ("nav.primary", "./data/nav.yaml"),
        ]

    def test_source_path_may_contain_equals(self) -> None:
        parser = _build_parser()
        args = parser.parse_args(["resolve", "--source", "x=./data/a=b.json"])
        assert args.source == [("x", "./data/a=b.json")]

    @pytest.mark.parametrize("value", ["site", "=./x.json", "site="])
    def test_malformed_source_rejected(self, value: str) -> None:
        parser = _build_parser()
        with pytest.raises(SystemExit):
            parser.parse_args(["resolve", "--source", value])

    def test_all_flags(self) -> None:
        parser = _build_parser()
        args = parser.parse_args([
            "resolve", "my-site/",
            "--content-dir", "pages",
            "--timeout", "2.5",
            "--output", "meta.json",
            "--verbose",
        ])
        assert args.content_dir == "pages"
        assert args.timeout == 2.5
        assert args.output == "meta.json"
        assert args.verbose is True

    def test_no_command(self) -> None:
        parser = _build_parser()
        args = parser.parse_args([])
        assert args.command is None


class TestMain:
    """main() — dispatch, output and exit codes."""

    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        assert "resolve" in capsys.readouterr().out

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert "trove 0.1.0" in capsys.readouterr().out

    def test_resolve_prints_json(
        self, tmp_project: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        main([
            "resolve", str(tmp_project),
            "--source", "site=./content/data/site.json",
            "--source", "authors=./data/authors",
        ])
        tree = json.loads(capsys.readouterr().out)
        assert tree["site"]["title"] == "Example"
        assert tree["authors"]["sub/b"] == {"name": "B"}

    def test_resolve_writes_output_file(
        self, tmp_project: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        target = tmp_project / "meta.json"
        main([
            "resolve", str(tmp_project),
            "--source", "footer=./data/footer.toml",
            "--output", str(target),
        ])
        assert json.loads(target.read_text(encoding="utf-8")) == {
            "footer": {"legal": "/legal/"},
        }
        assert capsys.readouterr().out == ""

    def test_resolve_error_exits_1(
        self, tmp_project: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["resolve", str(tmp_project), "--source", "gone=./data/gone.json"])
        assert exc_info.value.code == 1
        captured = capsys.readouterr()
        assert "trove: error:" in captured.err
        assert captured.out == ""

    def test_resolve_uses_config_file(
        self, tmp_project: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        (tmp_project / "trove.yaml").write_text(
            "trove:\n  sources:\n    nav: ./content/data/nav.yaml\n"
        )
        main(["resolve", str(tmp_project)])
        tree = json.loads(capsys.readouterr().out)
        assert tree == {"nav": {"home": "/", "about": "/about/"}}
