"""
Slash-delimited path helpers.

A path such as ``"key_binder/bindings"`` addresses a value inside nested
maps. Components are separated by ``/`` only; empty components are
dropped, so ``"/style//font_face/"`` and ``"style/font_face"`` are the
same path.

Writes never mutate the tree they are given. ``with_value`` copies each
map along the path and shares everything else, which keeps the base tree
untouched when the merged tree is edited.
"""

from __future__ import annotations

import typing as _typing

import rimecfg.tree._types as _types

DELIMITER = "/"


class InvalidPathError(ValueError):
    """Raised when a write targets a path with no components."""

    def __init__(self, path: object) -> None:
        self.path = path
        super().__init__(f"Invalid configuration path: {path!r}")


def split_path(path: str | _types.Path) -> _types.Path:
    """
    Split a path string into its components.

    Tuples are returned unchanged (minus empty components) so callers
    can pass either form.
    """
    if isinstance(path, tuple):
        return tuple(component for component in path if component)
    return tuple(component for component in path.split(DELIMITER) if component)


def join_path(components: _typing.Iterable[str]) -> str:
    """Join components into a canonical path string."""
    return DELIMITER.join(component for component in components if component)


def canonical_path(path: str | _types.Path) -> str:
    """Return the canonical string form of a path."""
    return join_path(split_path(path))


def get_at_path(tree: _typing.Any, path: str | _types.Path) -> _typing.Any:
    """
    Look up a value by path.

    Args:
        tree: The root map.
        path: Path string or component tuple. An empty path returns the
            root itself.

    Returns:
        The value at the path, or None if any intermediate node is
        missing or not a map, or the terminal key is missing.
    """
    current = tree
    for component in split_path(path):
        if not isinstance(current, dict):
            return None
        if component not in current:
            return None
        current = current[component]
    return current


def with_value(
    tree: _types.Tree,
    path: str | _types.Path,
    value: _typing.Any,
) -> _types.Tree:
    """
    Return a copy of ``tree`` with ``value`` stored at ``path``.

    Intermediate maps are created as needed; a non-map intermediate is
    replaced by a new map. Only the maps along the path are copied.

    Raises:
        InvalidPathError: If the path has no components.
    """
    components = split_path(path)
    if not components:
        raise InvalidPathError(path)
    return _with_value(tree, components, value)


def _with_value(
    node: _typing.Any,
    components: _types.Path,
    value: _typing.Any,
) -> _types.Tree:
    result = dict(node) if isinstance(node, dict) else {}
    head = components[0]
    if len(components) == 1:
        result[head] = value
    else:
        result[head] = _with_value(result.get(head), components[1:], value)
    return result


def iter_leaf_paths(tree: _types.Tree, prefix: str = "") -> _typing.Iterator[str]:
    """
    Yield the full path of every leaf in the tree.

    Non-map values are leaves; empty maps yield nothing.
    """
    for key, value in tree.items():
        full_key = f"{prefix}{DELIMITER}{key}" if prefix else str(key)
        if isinstance(value, dict):
            yield from iter_leaf_paths(value, full_key)
        else:
            yield full_key
