"""Trove application — load a project and aggregate its metadata.

``aggregate()`` is the primary entry point: it loads configuration, reads the
content tree into a ContentSet, runs the AggregationCoordinator, and returns
the merged metadata tree.
"""

from __future__ import annotations

import asyncio
import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any

from trove._errors import ConfigError
from trove.config_loader import load_config
from trove.content.set import ContentSet
from trove.coordinator import AggregationCoordinator, AggregationResult

if TYPE_CHECKING:
    from trove.config import TroveConfig
    from trove.observability.collector import EventCollector


def _load_content(config: TroveConfig) -> ContentSet:
    """Read the content tree from disk.

    Raises:
        ConfigError: If the content directory cannot be read.

    """
    try:
        return ContentSet.from_directory(config.content_path)
    except OSError as exc:
        msg = f"Failed to load content from {config.content_path}: {exc}"
        raise ConfigError(msg) from exc


async def run_stage(
    config: TroveConfig,
    content_set: ContentSet,
    tree: dict[str, Any],
    *,
    collector: EventCollector | None = None,
) -> AggregationResult:
    """Run the aggregation stage for ``config`` against an existing content set."""
    coordinator = AggregationCoordinator.from_config(
        config, content_set, tree, collector=collector,
    )
    return await coordinator.run(config.sources)


def aggregate(
    root: str | Path = ".",
    *,
    collector: EventCollector | None = None,
    **overrides: Any,
) -> dict[str, Any]:
    """Aggregate every configured metadata source under ``root``.

    Args:
        root: Project root directory.
        collector: Optional event collector for observability.
        **overrides: Config overrides (content_dir, sources, timeout, verbose).

    Returns:
        The merged metadata tree.

    Raises:
        TroveError: If configuration is invalid or any source fails.

    """
    config = load_config(Path(root), **overrides)
    content_set = _load_content(config)
    tree: dict[str, Any] = {}

    start = time.perf_counter()
    result = asyncio.run(run_stage(config, content_set, tree, collector=collector))
    elapsed = (time.perf_counter() - start) * 1000

    if result.error is not None:
        raise result.error

    _print_summary(config, result, elapsed)
    return tree


def _print_summary(config: TroveConfig, result: AggregationResult, elapsed_ms: float) -> None:
    """Print a short aggregation summary to stderr."""
    lines = [
        "",
        f"  trove  {config.root}",
        "",
        f"  Sources:   {len(config.sources)}",
        f"  Placed:    {len(result.placed)}",
    ]
    if result.skipped:
        lines.append(f"  Skipped:   {len(result.skipped)} ({', '.join(result.skipped)})")
    if result.removed:
        lines.append(f"  Removed:   {len(result.removed)} data file(s) from content")
    lines.extend([f"  Time:      {elapsed_ms:.0f}ms", ""])
    print("\n".join(lines), file=sys.stderr)
