"""Content layer — the in-memory content set the page pipeline renders from.

Local metadata sources are read from (and single files removed from) this set.
"""

from trove.content.set import ContentSet, FileRecord

__all__ = [
    "ContentSet",
    "FileRecord",
]
