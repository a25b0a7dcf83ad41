"""Directory aggregation and external reads.

Local directories are scanned in the content set and produce a list of
parsed values in content-set order. External directories are walked
recursively on disk and produce a mapping keyed by the file's path relative
to the directory, extension stripped (``sub/b.yaml`` -> ``"sub/b"``).

The walk (``walk_external_directory``) and the key derivation
(``normalize_key``) are kept separate from the I/O so both can be tested
on their own. Blocking reads run in worker threads via ``asyncio.to_thread``.
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Iterator
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Any

from trove._errors import SourceNotFoundError, SourceReadError
from trove.formats import DataFormat, parse

if TYPE_CHECKING:
    from trove.content.set import ContentSet


def _is_under(path: str, prefix: str) -> bool:
    """Whether content path ``path`` lies inside directory ``prefix``."""
    if not prefix:
        return True
    return path.startswith(prefix.rstrip("/") + "/")


def aggregate_local_directory(
    prefix: str,
    content_set: ContentSet,
    *,
    key: str,
) -> list[Any]:
    """Parse every data file under ``prefix`` in the content set.

    Files without a supported extension are skipped and left in place.
    Nothing is removed from the content set.

    Args:
        prefix: Directory path relative to the content root (POSIX).
        content_set: The in-memory content set.
        key: Destination key, used for error reporting.

    Returns:
        Parsed values in content-set iteration order.

    Raises:
        SourceNotFoundError: If no data file lives under ``prefix``.
        MalformedDataError: If a matching file fails to parse.

    """
    values: list[Any] = []
    for path in content_set.list_paths():
        if not _is_under(path, prefix):
            continue
        fmt = DataFormat.from_path(path)
        if fmt is None:
            continue
        record = content_set.get(path)
        if record is None:
            continue
        values.append(parse(record.contents, fmt, path))

    if not values:
        msg = f"no data files found in directory {prefix!r} for entry {key!r}"
        raise SourceNotFoundError(msg, path=prefix, key=key)
    return values


def walk_external_directory(directory: Path) -> Iterator[Path]:
    """Yield every supported data file under ``directory``, recursively.

    Children are visited in sorted order; non-data files are skipped.
    Symlinked directories are not followed, so a link back to an ancestor
    cannot make the walk loop.

    Raises:
        FileNotFoundError: If ``directory`` does not exist.
        NotADirectoryError: If ``directory`` is a file.

    """
    stack = [directory]
    while stack:
        current = stack.pop()
        entries = sorted(current.iterdir(), key=lambda p: p.name)
        subdirs: list[Path] = []
        for entry in entries:
            if entry.is_dir():
                if not entry.is_symlink():
                    subdirs.append(entry)
            elif DataFormat.from_path(entry) is not None:
                yield entry
        # Reversed so the stack pops them in sorted order
        stack.extend(reversed(subdirs))


def normalize_key(relative_path: str | PurePosixPath | Path) -> str:
    """Derive a mapping key from a path relative to the walked directory.

    Strips the extension and joins the segments with ``/`` regardless of
    the host path separator::

        >>> normalize_key("a.json")
        'a'
        >>> normalize_key(Path("sub") / "b.yaml")
        'sub/b'

    """
    parts = Path(relative_path).parts
    if not parts:
        return ""
    *parents, name = parts
    stem = PurePosixPath(name).stem
    return "/".join([*parents, stem])


def read_external_directory(directory: Path) -> list[tuple[str, Any]]:
    """Walk, read and parse every data file under ``directory`` (blocking).

    Returns:
        ``(key, value)`` pairs in walk order. Files whose keys collide
        (``a.json`` and ``a.yaml``) both appear; the later one wins once the
        pairs become a mapping, and a notice is printed to stderr.

    Raises:
        SourceNotFoundError: If the directory does not exist.
        SourceReadError: If the directory or a file cannot be read.
        MalformedDataError: If a file fails to parse.

    """
    if not directory.exists():
        msg = f"directory not found: {directory}"
        raise SourceNotFoundError(msg, path=str(directory))

    results: list[tuple[str, Any]] = []
    seen: dict[str, Path] = {}
    try:
        for path in walk_external_directory(directory):
            rel = path.relative_to(directory)
            key = normalize_key(rel)
            if key in seen:
                print(
                    f"  Duplicate key {key!r} in {directory}: "
                    f"{rel.as_posix()} replaces {seen[key].as_posix()}",
                    file=sys.stderr,
                )
            seen[key] = rel
            fmt = DataFormat.from_path(path)
            assert fmt is not None
            results.append((key, parse(path.read_bytes(), fmt, str(path))))
    except OSError as exc:
        msg = f"failed to read directory {directory}: {exc}"
        raise SourceReadError(msg, path=str(directory)) from exc
    return results


def read_external_file_sync(path: Path, fmt: DataFormat) -> Any:
    """Read and parse a single external file (blocking)."""
    try:
        data = path.read_bytes()
    except FileNotFoundError as exc:
        msg = f"file not found: {path}"
        raise SourceNotFoundError(msg, path=str(path)) from exc
    except OSError as exc:
        msg = f"failed to read {path}: {exc}"
        raise SourceReadError(msg, path=str(path)) from exc
    return parse(data, fmt, str(path))


async def read_external_file(path: Path, fmt: DataFormat) -> Any:
    """Read and parse a single external file in a worker thread."""
    return await asyncio.to_thread(read_external_file_sync, path, fmt)


async def aggregate_external_directory(directory: Path) -> dict[str, Any]:
    """Read an external directory in a worker thread.

    Returns:
        Mapping of normalized key -> parsed value. Empty if the directory
        holds no data files.

    """
    pairs = await asyncio.to_thread(read_external_directory, directory)
    return dict(pairs)
