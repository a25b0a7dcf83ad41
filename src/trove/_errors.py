"""Trove error hierarchy.

All trove-specific errors inherit from TroveError for easy catching.
"""


class TroveError(Exception):
    """Base error for all trove operations."""


class ConfigError(TroveError):
    """Invalid or missing configuration."""


class UnsupportedFormatError(ConfigError):
    """A file source has a missing or unrecognized data extension.

    Raised while specifications are validated, before any I/O happens.
    """

    def __init__(self, path: str, key: str | None = None) -> None:
        self.path = path
        self.key = key
        suffix = path.rsplit("/", 1)[-1]
        ext = "." + suffix.rsplit(".", 1)[-1] if "." in suffix else ""
        msg = f"unsupported data format {ext!r} for entry {path!r}"
        if key is not None:
            msg += f" (key {key!r})"
        super().__init__(msg)


class SourceError(TroveError):
    """Error resolving a single metadata source.

    Attributes:
        path: The offending source path.
        key: Destination key of the specification, when known.

    """

    def __init__(self, msg: str, *, path: str, key: str | None = None) -> None:
        super().__init__(msg)
        self.path = path
        self.key = key


class SourceNotFoundError(SourceError):
    """A source file or directory does not exist."""


class MalformedDataError(SourceError):
    """Source bytes could not be parsed in their declared format."""


class SourceReadError(SourceError):
    """Reading a source from disk failed for a reason other than parsing."""


class AggregationError(TroveError):
    """The aggregation coordinator was driven through an illegal state."""
