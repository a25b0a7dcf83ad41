"""Load TroveConfig from trove.yaml if present.

Merges file config with CLI kwargs. CLI overrides file.
"""

from __future__ import annotations

import tomllib
from pathlib import Path

import yaml

from trove._errors import ConfigError
from trove.config import TroveConfig

_KNOWN_KEYS = ("content_dir", "sources", "timeout", "verbose")


def load_config(root: Path, **overrides: object) -> TroveConfig:
    """Load TroveConfig from root, optionally merging trove.yaml.

    Looks for trove.yaml, trove.yml, or trove.toml in root. If found, loads
    and merges with overrides. Overrides take precedence, except ``sources``
    which is merged key by key so the CLI can add entries to the file's map.

    Raises:
        ConfigError: If the config file is malformed or has bad values.

    """
    file_config = _read_trove_config(root)
    extra_sources = overrides.pop("sources", None) or {}
    merged = {**file_config, **overrides}
    sources = merged.get("sources") or {}
    if not isinstance(sources, dict):
        msg = f"'sources' must be a mapping of key -> path, got {type(sources).__name__}"
        raise ConfigError(msg)
    merged["sources"] = {**sources, **dict(extra_sources)}  # type: ignore[call-overload]
    for key, value in merged["sources"].items():
        if not isinstance(key, str) or not isinstance(value, str):
            msg = f"source entry {key!r}: {value!r} must map a string key to a string path"
            raise ConfigError(msg)
    _check_settings(merged)
    return TroveConfig(root=root, **merged)  # type: ignore[arg-type]


def _check_settings(merged: dict[str, object]) -> None:
    """Reject scalar settings of the wrong type before they reach TroveConfig."""
    content_dir = merged.get("content_dir", "content")
    if not isinstance(content_dir, str) or not content_dir:
        msg = f"'content_dir' must be a non-empty string, got {content_dir!r}"
        raise ConfigError(msg)

    timeout = merged.get("timeout")
    # bool is an int subclass
    if timeout is not None and (
        isinstance(timeout, bool) or not isinstance(timeout, int | float) or timeout <= 0
    ):
        msg = f"'timeout' must be a positive number of seconds, got {timeout!r}"
        raise ConfigError(msg)

    verbose = merged.get("verbose", False)
    if not isinstance(verbose, bool):
        msg = f"'verbose' must be true or false, got {verbose!r}"
        raise ConfigError(msg)


def _read_trove_config(root: Path) -> dict[str, object]:
    """Read trove config from yaml/toml if present. Returns empty dict otherwise."""
    for name in ("trove.yaml", "trove.yml"):
        path = root / name
        if path.is_file():
            return _parse_yaml(path)
    toml_path = root / "trove.toml"
    if toml_path.is_file():
        return _parse_toml(toml_path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    """Parse YAML config."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        msg = f"Failed to read {path.name}: {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(data, dict):
        msg = f"{path.name} must contain a mapping at the top level"
        raise ConfigError(msg)
    return _flatten_trove_section(data)


def _parse_toml(path: Path) -> dict[str, object]:
    """Parse TOML config."""
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        msg = f"Failed to read {path.name}: {exc}"
        raise ConfigError(msg) from exc
    return _flatten_trove_section(data)


def _flatten_trove_section(data: dict[str, object]) -> dict[str, object]:
    """Extract trove.* keys into top-level config."""
    result: dict[str, object] = {}
    for k, v in data.items():
        if k != "trove" and k in _KNOWN_KEYS:
            result[k] = v
    trove = data.get("trove")
    if isinstance(trove, dict):
        for k, v in trove.items():
            if k in _KNOWN_KEYS:
                result[k] = v
    return result
