"""Shared type definitions for trove."""

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from trove._errors import TroveError

# Dotted destination key in the metadata tree (e.g., "nav.primary")
type DestinationKey = str

# Source path relative to the project root (e.g., "./content/data/site.json")
type SourcePath = str

# Path of an entry inside the content set, POSIX-style, relative to the content root
type ContentPath = str

# Parsed data value: mapping, sequence, or scalar
type MetadataValue = Any

# The shared metadata tree handed to the templating stage
type MetadataTree = dict[str, Any]

# Completion signal fired once when the aggregation stage settles
type DoneCallback = Callable[[TroveError | None], None]
