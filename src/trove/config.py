"""Trove configuration.

TroveConfig is the central configuration object, frozen after creation.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType


@dataclass(frozen=True, slots=True)
class TroveConfig:
    """Configuration for a metadata aggregation run.

    Attributes:
        root: Path to the project root. Source paths are resolved against it.
              Always resolved to an absolute path on construction.
        content_dir: Directory (relative to root) holding renderable content.
            Sources inside it are local, everything else is external.
        sources: Mapping from destination key (dot-separated for nesting) to
            source path, e.g. ``{"site": "./content/data/site.json"}``.
        timeout: Per-source timeout in seconds for external reads
            (None = wait indefinitely).
        verbose: Print a line to stderr for every resolved source.

    """

    root: Path = field(default_factory=Path.cwd)
    content_dir: str = "content"
    sources: Mapping[str, str] = field(default_factory=dict)
    timeout: float | None = None
    verbose: bool = False

    def __post_init__(self) -> None:
        # Resolve root to absolute so classification can compare paths
        # against content_path with os.path.relpath.
        if not self.root.is_absolute():
            object.__setattr__(self, "root", self.root.resolve())
        object.__setattr__(self, "sources", MappingProxyType(dict(self.sources)))

    @property
    def content_path(self) -> Path:
        """Absolute path to content directory."""
        return self.root / self.content_dir
