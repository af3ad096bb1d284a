"""
Normalization of Rime configuration maps.

Rime accepts flat slash-delimited keys anywhere a nested key is allowed,
so ``{"style/font_point": 18}`` and ``{"style": {"font_point": 18}}``
mean the same thing. ``normalize`` rewrites the first form into the
second, recursing into nested maps and into lists made only of maps.

When a flattened key and a literal nested key land on the same position,
maps are deep-merged and any other value is taken from whichever entry
comes later in the mapping. The YAML loader keeps file order, so the
outcome is stable for a given file; each such collision is logged.

``flatten`` goes the other way and is used for patch maps, which are kept
flat so that every customization is addressed by its own full path.
"""

from __future__ import annotations

import logging as _logging
import typing as _typing

import rimecfg.tree._paths as _paths
import rimecfg.tree._types as _types

_logger = _logging.getLogger(__name__)


def normalize(raw: _typing.Mapping[_typing.Any, _typing.Any]) -> _types.Tree:
    """
    Canonicalize a raw map into nested form.

    Args:
        raw: A map as produced by the YAML loader. Keys are coerced to str.

    Returns:
        A new map in which no key contains ``/``. Normalizing an already
        normalized map returns an equal map.
    """
    normalized: _types.Tree = {}
    for raw_key, value in raw.items():
        key = key_text(raw_key)
        if _paths.DELIMITER in key:
            components = _paths.split_path(key)
            if not components:
                _logger.warning("Ignoring entry with empty path %r", key)
                continue
            _insert(normalized, components, normalize_value(value), key)
        else:
            _place(normalized, key, normalize_value(value), key)
    return normalized


def normalize_value(value: _typing.Any) -> _typing.Any:
    """
    Normalize a single value.

    Maps are normalized; lists whose items are all maps have each item
    normalized; everything else (including mixed lists) is returned as is.
    """
    if isinstance(value, dict):
        return normalize(value)
    if isinstance(value, list) and all(isinstance(item, dict) for item in value):
        return [normalize(item) for item in value]
    return value


def key_text(raw_key: _typing.Any) -> str:
    """
    Render a YAML key as text.

    Booleans and null keep their YAML spelling (``true``, ``null``) so a
    key written back reads the same way it was loaded. Numbers use their
    Python form, so ``1.0`` stays ``"1.0"``.
    """
    if isinstance(raw_key, bool):
        return "true" if raw_key else "false"
    if raw_key is None:
        return "null"
    return str(raw_key)


def expand(flat: _typing.Mapping[str, _typing.Any]) -> _types.Tree:
    """Expand a flat path map into a nested tree."""
    return normalize(flat)


def flatten(
    tree: _typing.Mapping[_typing.Any, _typing.Any],
    prefix: str = "",
) -> dict[str, _typing.Any]:
    """
    Flatten nested maps into a map of full paths.

    Non-empty maps are descended into; scalars, lists and empty maps are
    leaves. Keys that already contain ``/`` are kept as path fragments.

    Example:
        >>> flatten({"style": {"font_face": "Avenir"}, "menu/page_size": 7})
        {'style/font_face': 'Avenir', 'menu/page_size': 7}
    """
    flat: dict[str, _typing.Any] = {}
    for raw_key, value in tree.items():
        path = _paths.canonical_path(f"{prefix}{_paths.DELIMITER}{key_text(raw_key)}")
        if not path:
            _logger.warning("Ignoring patch entry with empty path %r", raw_key)
            continue
        if isinstance(value, dict) and value:
            flat.update(flatten(value, path))
        else:
            flat[path] = value
    return flat


def _insert(
    target: _types.Tree,
    components: _types.Path,
    value: _typing.Any,
    source_key: str,
) -> None:
    for component in components[:-1]:
        child = target.get(component)
        if not isinstance(child, dict):
            if component in target:
                _warn_collision(source_key)
            child = {}
            target[component] = child
        target = child
    _place(target, components[-1], value, source_key)


def _place(target: _types.Tree, key: str, value: _typing.Any, source_key: str) -> None:
    existing = target.get(key)
    if isinstance(existing, dict) and isinstance(value, dict):
        for child_key, child_value in value.items():
            _place(existing, child_key, child_value, source_key)
        return
    if key in target:
        _warn_collision(source_key)
    target[key] = value


def _warn_collision(source_key: str) -> None:
    _logger.warning(
        "Entry %r overrides a value set earlier in the same map; the later entry wins",
        source_key,
    )
