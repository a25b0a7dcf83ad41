"""Metadata sources — classification and directory aggregation."""

from trove.sources.classifier import (
    Classification,
    ClassifiedSource,
    SourceSpec,
    classify,
    specs_from_mapping,
    validate,
)
from trove.sources.directory import (
    aggregate_external_directory,
    aggregate_local_directory,
    normalize_key,
    read_external_file,
    walk_external_directory,
)

__all__ = [
    "Classification",
    "ClassifiedSource",
    "SourceSpec",
    "aggregate_external_directory",
    "aggregate_local_directory",
    "classify",
    "normalize_key",
    "read_external_file",
    "specs_from_mapping",
    "validate",
    "walk_external_directory",
]
