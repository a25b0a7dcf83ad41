"""Path classifier — local vs. external, file vs. directory.

A source is *local* when its path, resolved against the project root, lies
inside the content root: its bytes are already resident in the content set.
Anything else is *external* and must be read from disk.

A source whose final path segment has an extension is a *file*; otherwise it
is a *directory*. File sources must carry a supported data extension.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from trove._errors import SourceNotFoundError
from trove.formats import DataFormat, format_for, has_extension
from trove.tree import split_key

if TYPE_CHECKING:
    from trove.content.set import ContentSet


class Classification(Enum):
    """Where a source lives and what shape it has."""

    LOCAL_FILE = "local_file"
    LOCAL_DIRECTORY = "local_directory"
    EXTERNAL_FILE = "external_file"
    EXTERNAL_DIRECTORY = "external_directory"

    @property
    def is_local(self) -> bool:
        return self in (Classification.LOCAL_FILE, Classification.LOCAL_DIRECTORY)

    @property
    def is_file(self) -> bool:
        return self in (Classification.LOCAL_FILE, Classification.EXTERNAL_FILE)


@dataclass(frozen=True, slots=True)
class SourceSpec:
    """One configured metadata source.

    Attributes:
        key: Destination key in the metadata tree (dots denote nesting).
        path: Source path relative to the project root, or absolute.

    """

    key: str
    path: str


@dataclass(frozen=True, slots=True)
class ClassifiedSource:
    """A SourceSpec together with its resolved location.

    Attributes:
        spec: The originating specification.
        classification: Local/external, file/directory.
        content_path: Path inside the content set (POSIX, local sources only).
        absolute_path: Absolute filesystem path of the source.
        format: Data format for file sources, None for directories.

    """

    spec: SourceSpec
    classification: Classification
    content_path: str | None
    absolute_path: Path
    format: DataFormat | None

    @property
    def key(self) -> str:
        return self.spec.key


def specs_from_mapping(sources: Mapping[str, str]) -> list[SourceSpec]:
    """Turn a ``{key: path}`` mapping into SourceSpecs, preserving order."""
    return [SourceSpec(key=key, path=path) for key, path in sources.items()]


def classify(spec: SourceSpec, root: Path, content_root: Path) -> ClassifiedSource:
    """Classify a single source specification.

    Raises:
        ConfigError: If the destination key is malformed.
        UnsupportedFormatError: If a file source has an unsupported extension.

    """
    split_key(spec.key)
    absolute = Path(os.path.normpath(root / spec.path))
    rel = os.path.relpath(absolute, content_root)
    local = rel != os.pardir and not rel.startswith(os.pardir + os.sep)
    is_file = has_extension(absolute)
    fmt = format_for(spec.path, key=spec.key) if is_file else None

    if local:
        content_path = Path(rel).as_posix() if rel != os.curdir else ""
        classification = (
            Classification.LOCAL_FILE if is_file else Classification.LOCAL_DIRECTORY
        )
    else:
        content_path = None
        classification = (
            Classification.EXTERNAL_FILE if is_file else Classification.EXTERNAL_DIRECTORY
        )

    return ClassifiedSource(
        spec=spec,
        classification=classification,
        content_path=content_path,
        absolute_path=absolute,
        format=fmt,
    )


def validate(
    specs: list[SourceSpec],
    content_set: ContentSet,
    root: Path,
    content_root: Path,
) -> list[ClassifiedSource]:
    """Classify every spec and check local files exist, before any parsing.

    Returns the classified sources in declaration order.

    Raises:
        UnsupportedFormatError: On the first file source with a bad extension.
        SourceNotFoundError: On the first local file absent from the content set.

    """
    classified: list[ClassifiedSource] = []
    for spec in specs:
        source = classify(spec, root, content_root)
        if (
            source.classification is Classification.LOCAL_FILE
            and source.content_path not in content_set
        ):
            msg = f"file not found for entry {spec.key!r} ({spec.path})"
            raise SourceNotFoundError(msg, path=spec.path, key=spec.key)
        classified.append(source)
    return classified
