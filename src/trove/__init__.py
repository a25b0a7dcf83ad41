"""Trove — aggregate JSON, YAML and TOML data files into one metadata tree.

Sources are declared as a mapping of destination key to path. Sources inside
the content root are read from the in-memory content set; sources outside it
are read from disk concurrently. Dotted keys nest (``nav.primary``).

Quick start::

    import trove

    tree = trove.aggregate("my-site/", sources={
        "site": "./content/data/site.json",
        "nav.primary": "./data/nav.yaml",
        "authors": "./data/authors",
    })

Lower level::

    from trove import AggregationCoordinator, ContentSet

    coordinator = AggregationCoordinator(root, content_root, content_set, tree)
    result = await coordinator.run(specs, done=callback)

"""

__version__ = "0.1.0"
__all__ = [
    "AggregationCoordinator",
    "ContentSet",
    "TroveConfig",
    "__version__",
    "aggregate",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import trove`` fast while providing a clean top-level API.
    """
    if name == "TroveConfig":
        from trove.config import TroveConfig

        return TroveConfig

    if name == "ContentSet":
        from trove.content.set import ContentSet

        return ContentSet

    if name == "AggregationCoordinator":
        from trove.coordinator import AggregationCoordinator

        return AggregationCoordinator

    if name == "aggregate":
        from trove.app import aggregate

        return aggregate

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
