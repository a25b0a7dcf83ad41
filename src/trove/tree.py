"""Nested key resolver — places parsed values into the metadata tree.

A destination key like ``"nav.primary"`` addresses ``tree["nav"]["primary"]``.
Intermediate mappings are created on demand and existing siblings are never
disturbed, so several sources can populate one namespace::

    >>> tree = {}
    >>> place(tree, "nav.primary", {"home": "/"})
    >>> place(tree, "nav.footer", {"legal": "/legal/"})
    >>> sorted(tree["nav"])
    ['footer', 'primary']

"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from trove._errors import ConfigError


def split_key(dotted_key: str) -> list[str]:
    """Split a destination key on ``.``.

    Raises:
        ConfigError: If the key is empty or has an empty segment.

    """
    parts = dotted_key.split(".")
    if not all(parts):
        msg = f"invalid destination key {dotted_key!r}"
        raise ConfigError(msg)
    return parts


def place(tree: dict[str, Any], dotted_key: str, value: Any) -> None:
    """Merge ``value`` into ``tree`` at ``dotted_key``.

    Without a dot the value replaces whatever ``tree[key]`` held. With dots,
    intermediate nodes are walked or created (a non-mapping intermediate is
    replaced by a fresh dict) and at the leaf a mapping value is shallow-merged
    into an existing mapping, new keys winning. Non-mapping leaves are assigned.

    """
    parts = split_key(dotted_key)
    if len(parts) == 1:
        tree[parts[0]] = value
        return

    *parents, leaf = parts
    node = tree
    for part in parents:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child

    existing = node.get(leaf)
    if isinstance(existing, dict) and isinstance(value, Mapping):
        node[leaf] = {**existing, **value}
    else:
        node[leaf] = value


def lookup(tree: Mapping[str, Any], dotted_key: str) -> Any:
    """Return the value at ``dotted_key``.

    Raises:
        KeyError: If any segment is missing or traverses a non-mapping.

    """
    node: Any = tree
    for part in split_key(dotted_key):
        if not isinstance(node, Mapping) or part not in node:
            raise KeyError(dotted_key)
        node = node[part]
    return node
