"""Data formats — extension dispatch and parsing.

The supported set is closed: JSON, YAML (``.yaml`` and ``.yml``) and TOML.
The format is resolved once from the extension of the last path segment
(case-sensitive) and parsing dispatches on the resulting ``DataFormat``.
"""

from __future__ import annotations

import json
import tomllib
from enum import Enum
from pathlib import PurePath
from typing import Any

import yaml

from trove._errors import MalformedDataError, UnsupportedFormatError


class DataFormat(Enum):
    """Serialization format of a metadata source."""

    JSON = "json"
    YAML = "yaml"
    TOML = "toml"

    @classmethod
    def from_path(cls, path: str | PurePath) -> DataFormat | None:
        """Return the format for ``path``, or None if its extension is unsupported."""
        return SUPPORTED_EXTENSIONS.get(PurePath(path).suffix)


SUPPORTED_EXTENSIONS: dict[str, DataFormat] = {
    ".json": DataFormat.JSON,
    ".yaml": DataFormat.YAML,
    ".yml": DataFormat.YAML,
    ".toml": DataFormat.TOML,
}


def has_extension(path: str | PurePath) -> bool:
    """Whether the final segment of ``path`` carries any extension at all."""
    return bool(PurePath(path).suffix)


def format_for(path: str | PurePath, *, key: str | None = None) -> DataFormat:
    """Resolve the format of ``path`` or raise ``UnsupportedFormatError``."""
    fmt = DataFormat.from_path(path)
    if fmt is None:
        raise UnsupportedFormatError(str(path), key)
    return fmt


def parse(data: bytes | str, fmt: DataFormat, path: str) -> Any:
    """Decode ``data`` according to ``fmt``.

    Args:
        data: Raw file contents. Bytes are decoded as UTF-8; a leading BOM
            is tolerated.
        fmt: The declared format.
        path: Source path, used only for error reporting.

    Returns:
        The parsed value. No validation beyond syntax is performed.

    Raises:
        MalformedDataError: If the contents are not valid in ``fmt``.

    """
    try:
        text = data.decode("utf-8-sig") if isinstance(data, bytes) else data
        if fmt is DataFormat.JSON:
            return json.loads(text)
        if fmt is DataFormat.YAML:
            return yaml.safe_load(text)
        return tomllib.loads(text)
    except (UnicodeDecodeError, ValueError, RecursionError, yaml.YAMLError) as exc:
        # json.JSONDecodeError and tomllib.TOMLDecodeError are ValueErrors.
        # RecursionError comes from pathologically deep nesting.
        msg = f"malformed data in {path!r}: {exc}"
        raise MalformedDataError(msg, path=path) from exc
