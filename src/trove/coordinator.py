"""Aggregation coordinator — resolves every source into the metadata tree.

Orchestrates the full aggregation stage:
    1. Validate and classify every specification (no I/O yet)
    2. Resolve local sources synchronously against the content set
    3. Dispatch each external source as its own asyncio task
    4. Wait for every task to settle, then place results in declaration order
    5. Fire the completion exactly once

The coordinator is the single writer of both the metadata tree and the
content set. External tasks only read and parse; their results are applied
after the join, so no locking is needed.

State machine::

    IDLE -> CLASSIFYING -> LOCAL_RESOLVING -> EXTERNAL_DISPATCHED
         -> ALL_SETTLED -> DONE

Any state before EXTERNAL_DISPATCHED may jump straight to DONE when an
error short-circuits the stage. DONE is terminal.
"""

from __future__ import annotations

import asyncio
import sys
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from trove._errors import (
    AggregationError,
    SourceError,
    SourceNotFoundError,
    SourceReadError,
    TroveError,
)
from trove.formats import parse
from trove.sources.classifier import (
    Classification,
    ClassifiedSource,
    SourceSpec,
    specs_from_mapping,
    validate,
)
from trove.sources.directory import (
    aggregate_external_directory,
    aggregate_local_directory,
    read_external_file,
)
from trove.tree import place

if TYPE_CHECKING:
    from trove._types import DoneCallback
    from trove.config import TroveConfig
    from trove.content.set import ContentSet
    from trove.observability.collector import EventCollector


class CoordinatorState(Enum):
    """Lifecycle of a single aggregation run."""

    IDLE = "idle"
    CLASSIFYING = "classifying"
    LOCAL_RESOLVING = "local_resolving"
    EXTERNAL_DISPATCHED = "external_dispatched"
    ALL_SETTLED = "all_settled"
    DONE = "done"


_TRANSITIONS: dict[CoordinatorState, frozenset[CoordinatorState]] = {
    CoordinatorState.IDLE: frozenset({CoordinatorState.CLASSIFYING, CoordinatorState.DONE}),
    CoordinatorState.CLASSIFYING: frozenset({
        CoordinatorState.LOCAL_RESOLVING, CoordinatorState.DONE,
    }),
    CoordinatorState.LOCAL_RESOLVING: frozenset({
        CoordinatorState.EXTERNAL_DISPATCHED, CoordinatorState.DONE,
    }),
    CoordinatorState.EXTERNAL_DISPATCHED: frozenset({CoordinatorState.ALL_SETTLED}),
    CoordinatorState.ALL_SETTLED: frozenset({CoordinatorState.DONE}),
    CoordinatorState.DONE: frozenset(),
}


class Completion:
    """One-shot completion signal.

    Wraps a ``(error | None) -> None`` callback so that it runs exactly once.
    A second ``fire()`` raises ``AggregationError`` and does not call the
    callback again.

    """

    __slots__ = ("_callback", "_error", "_fired")

    def __init__(self, callback: DoneCallback | None = None) -> None:
        self._callback = callback
        self._fired = False
        self._error: TroveError | None = None

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def error(self) -> TroveError | None:
        """The error the completion fired with, if any."""
        return self._error

    def fire(self, error: TroveError | None = None) -> None:
        if self._fired:
            msg = "completion already fired"
            raise AggregationError(msg)
        self._fired = True
        self._error = error
        if self._callback is not None:
            self._callback(error)


@dataclass(slots=True)
class AggregationResult:
    """Outcome of one aggregation run.

    Attributes:
        errors: Every error recorded, first (stage) error first.
        placed: Destination keys written to the tree, in placement order.
        removed: Content-set paths deleted (single local files).
        skipped: Destination keys of sources that produced nothing.
        duration_ms: Wall-clock time of the stage.

    """

    errors: list[TroveError] = field(default_factory=list)
    placed: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def error(self) -> TroveError | None:
        """The error the stage failed with, or None."""
        return self.errors[0] if self.errors else None


def _tag(exc: TroveError, key: str) -> TroveError:
    """Attach the destination key to a source error that lacks one."""
    if isinstance(exc, SourceError) and exc.key is None:
        exc.key = key
    return exc


class AggregationCoordinator:
    """Resolves a set of metadata sources into one metadata tree.

    A coordinator runs once; build a new one per build invocation.

    Args:
        root: Absolute project root. Source paths resolve against it.
        content_root: Absolute content root. Sources inside it are local.
        content_set: In-memory content set (read, and pruned of single
            local data files).
        tree: Metadata tree to populate. Mutated in place.
        collector: Optional event collector.
        timeout: Per-source timeout in seconds for external reads.
        verbose: Print a line to stderr for every resolved source.

    """

    def __init__(
        self,
        root: Path,
        content_root: Path,
        content_set: ContentSet,
        tree: dict[str, Any],
        *,
        collector: EventCollector | None = None,
        timeout: float | None = None,
        verbose: bool = False,
    ) -> None:
        self._root = root
        self._content_root = content_root
        self._content_set = content_set
        self._tree = tree
        self._collector = collector
        self._timeout = timeout
        self._verbose = verbose
        self._state = CoordinatorState.IDLE
        self._result = AggregationResult()

    @classmethod
    def from_config(
        cls,
        config: TroveConfig,
        content_set: ContentSet,
        tree: dict[str, Any],
        *,
        collector: EventCollector | None = None,
    ) -> AggregationCoordinator:
        """Build a coordinator from a TroveConfig."""
        return cls(
            config.root,
            config.content_path,
            content_set,
            tree,
            collector=collector,
            timeout=config.timeout,
            verbose=config.verbose,
        )

    @property
    def state(self) -> CoordinatorState:
        return self._state

    @property
    def tree(self) -> dict[str, Any]:
        return self._tree

    def _advance(self, new_state: CoordinatorState) -> None:
        if new_state not in _TRANSITIONS[self._state]:
            msg = f"illegal transition {self._state.value} -> {new_state.value}"
            raise AggregationError(msg)
        self._state = new_state

    async def run(
        self,
        specs: Mapping[str, str] | Sequence[SourceSpec],
        done: DoneCallback | None = None,
    ) -> AggregationResult:
        """Run the aggregation stage.

        Errors never escape as exceptions: the first one is passed to
        ``done`` and is available as ``result.error``. ``done`` fires
        exactly once.

        Raises:
            AggregationError: If the coordinator has already run.

        """
        completion = Completion(done)
        start = time.perf_counter()

        if isinstance(specs, Mapping):
            spec_list = specs_from_mapping(specs)
        else:
            spec_list = list(specs)

        if not spec_list:
            self._finish(completion, start, 0)
            return self._result

        # Classifying
        self._advance(CoordinatorState.CLASSIFYING)
        try:
            sources = validate(
                spec_list, self._content_set, self._root, self._content_root,
            )
        except TroveError as exc:
            self._record_error(exc, spec_key=getattr(exc, "key", None) or "", spec_path="")
            self._finish(completion, start, len(spec_list))
            return self._result

        # Local resolving
        self._advance(CoordinatorState.LOCAL_RESOLVING)
        for source in sources:
            if not source.classification.is_local:
                continue
            try:
                self._resolve_local(source)
            except Exception as exc:
                self._record_error(
                    self._as_trove_error(exc, source), source.key, source.spec.path,
                )
                self._finish(completion, start, len(spec_list))
                return self._result

        # External dispatched
        self._advance(CoordinatorState.EXTERNAL_DISPATCHED)
        external = [s for s in sources if not s.classification.is_local]
        tasks = [
            asyncio.create_task(self._resolve_external(source), name=f"trove:{source.key}")
            for source in external
        ]
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        # All settled: apply results in declaration order
        self._advance(CoordinatorState.ALL_SETTLED)
        for source, outcome in zip(external, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                self._record_error(
                    self._as_trove_error(outcome, source), source.key, source.spec.path,
                )
                continue
            value, files, duration_ms = outcome
            self._apply_external(source, value, files, duration_ms)

        self._finish(completion, start, len(spec_list))
        return self._result

    # ------------------------------------------------------------------
    # Local sources
    # ------------------------------------------------------------------

    def _resolve_local(self, source: ClassifiedSource) -> None:
        """Parse a local source, place it, and prune single files."""
        t0 = time.perf_counter()
        content_path = source.content_path or ""

        if source.classification is Classification.LOCAL_FILE:
            record = self._content_set.get(content_path)
            if record is None:
                msg = f"file not found for entry {source.key!r} ({source.spec.path})"
                raise SourceNotFoundError(msg, path=source.spec.path, key=source.key)
            assert source.format is not None
            value = parse(record.contents, source.format, content_path)
            place(self._tree, source.key, value)
            # Data files must not be rendered as pages
            self._content_set.delete(content_path)
            self._result.removed.append(content_path)
            files = 1
        else:
            values = aggregate_local_directory(
                content_path, self._content_set, key=source.key,
            )
            place(self._tree, source.key, values)
            files = len(values)

        self._result.placed.append(source.key)
        self._report_resolved(source, files, (time.perf_counter() - t0) * 1000)

    # ------------------------------------------------------------------
    # External sources
    # ------------------------------------------------------------------

    async def _resolve_external(
        self, source: ClassifiedSource,
    ) -> tuple[Any, int, float]:
        """Read and parse one external source. Does not touch the tree."""
        t0 = time.perf_counter()
        if self._timeout is None:
            value = await self._read_external(source)
        else:
            try:
                async with asyncio.timeout(self._timeout):
                    value = await self._read_external(source)
            except TimeoutError as exc:
                msg = (
                    f"timed out after {self._timeout}s reading entry "
                    f"{source.key!r} ({source.spec.path})"
                )
                raise SourceReadError(msg, path=source.spec.path, key=source.key) from exc
        if source.classification is Classification.EXTERNAL_DIRECTORY:
            files = len(value) if value is not None else 0
        else:
            files = 1
        return value, files, (time.perf_counter() - t0) * 1000

    async def _read_external(self, source: ClassifiedSource) -> Any:
        if source.classification is Classification.EXTERNAL_FILE:
            assert source.format is not None
            return await read_external_file(source.absolute_path, source.format)
        try:
            return await aggregate_external_directory(source.absolute_path)
        except SourceNotFoundError:
            # Directories are optional; a missing one is skipped like an empty one
            return None

    def _apply_external(
        self,
        source: ClassifiedSource,
        value: Any,
        files: int,
        duration_ms: float,
    ) -> None:
        if source.classification is Classification.EXTERNAL_DIRECTORY and not value:
            if value is None:
                notice, reason = "Directory not found", "directory not found"
            else:
                notice, reason = "No data files found", "empty directory"
            print(
                f"  {notice} for entry {source.key!r} ({source.spec.path})",
                file=sys.stderr,
            )
            self._result.skipped.append(source.key)
            if self._collector is not None:
                self._collector.record_skipped(source.key, source.spec.path, reason=reason)
            return

        place(self._tree, source.key, value)
        self._result.placed.append(source.key)
        self._report_resolved(source, files, duration_ms)

    @staticmethod
    def _as_trove_error(exc: BaseException, source: ClassifiedSource) -> TroveError:
        if isinstance(exc, TroveError):
            return _tag(exc, source.key)
        msg = f"failed to read entry {source.key!r} ({source.spec.path}): {exc}"
        err = SourceReadError(msg, path=source.spec.path, key=source.key)
        err.__cause__ = exc
        return err

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def _report_resolved(
        self, source: ClassifiedSource, files: int, duration_ms: float,
    ) -> None:
        if self._verbose:
            print(
                f"  {source.key} <- {source.spec.path} ({duration_ms:.1f}ms)",
                file=sys.stderr,
            )
        if self._collector is not None:
            self._collector.record_resolved(
                source.key,
                source.spec.path,
                classification=source.classification.value,
                files=files,
                duration_ms=duration_ms,
            )

    def _record_error(self, exc: TroveError, spec_key: str, spec_path: str) -> None:
        if self._result.errors:
            # Only the first error completes the stage; the rest are logged.
            print(f"  Additional error ({spec_key}): {exc}", file=sys.stderr)
        self._result.errors.append(exc)
        if self._collector is not None:
            self._collector.record_failed(spec_key, spec_path or getattr(exc, "path", ""), exc)

    def _finish(self, completion: Completion, start: float, sources: int) -> None:
        self._advance(CoordinatorState.DONE)
        self._result.duration_ms = (time.perf_counter() - start) * 1000
        if self._collector is not None:
            self._collector.record_finished(
                sources=sources,
                errors=len(self._result.errors),
                duration_ms=self._result.duration_ms,
            )
        completion.fire(self._result.error)


async def aggregate_metadata(
    specs: Mapping[str, str] | Sequence[SourceSpec],
    content_set: ContentSet,
    tree: dict[str, Any],
    *,
    root: Path,
    content_root: Path,
    collector: EventCollector | None = None,
    timeout: float | None = None,
) -> AggregationResult:
    """Run one aggregation stage and raise its error, if any.

    Convenience wrapper for callers that prefer exceptions to a callback.

    Raises:
        TroveError: The first error recorded during the stage.

    """
    coordinator = AggregationCoordinator(
        root, content_root, content_set, tree, collector=collector, timeout=timeout,
    )
    result = await coordinator.run(specs)
    if result.error is not None:
        raise result.error
    return result
