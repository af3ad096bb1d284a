"""
Deep merge used to apply a patch tree onto a base tree.

The rule is asymmetric: when both sides hold a map under the same key the
maps are merged recursively; in every other case the patch value replaces
the base value outright. Lists are never concatenated or merged by
position, so a patched ``schema_list`` is the patch's list, not a union.

Example:
    >>> base = {"style": {"font_face": "Avenir", "font_point": 16}}
    >>> deep_merge(base, {"style": {"font_point": 18}})
    {'style': {'font_face': 'Avenir', 'font_point': 18}}
"""

from __future__ import annotations

import copy as _copy
import typing as _typing

import rimecfg.tree._types as _types


def deep_merge(base: _types.Tree, patch: _typing.Mapping[str, _typing.Any]) -> _types.Tree:
    """
    Deep merge two maps, with ``patch`` taking priority.

    Args:
        base: The base map. Never modified.
        patch: The map to merge in. Never modified; values taken from it
            are deep-copied.

    Returns:
        ``base`` itself when ``patch`` is empty, otherwise a new map.
    """
    if not patch:
        return base

    result = dict(base)
    for key, value in patch.items():
        existing = result.get(key)
        if isinstance(existing, dict) and isinstance(value, dict):
            result[key] = deep_merge(existing, value)
        else:
            result[key] = _copy.deepcopy(value)
    return result
