"""
Tree operations for Rime configuration maps.

This package holds the pure functions the configuration store is built
on: path splitting and lookup, the asymmetric deep merge used to apply
patches, and normalization of slash-delimited flat keys into nested maps.

Example:
    >>> from rimecfg.tree import deep_merge, get_at_path, normalize
    >>> base = normalize({"style": {"font_face": "Avenir", "font_point": 16}})
    >>> patch = normalize({"style/font_point": 18})
    >>> merged = deep_merge(base, patch)
    >>> get_at_path(merged, "style/font_point")
    18
"""

from rimecfg.tree._merge import deep_merge
from rimecfg.tree._normalize import expand, flatten, key_text, normalize, normalize_value
from rimecfg.tree._paths import (
    DELIMITER,
    InvalidPathError,
    canonical_path,
    get_at_path,
    iter_leaf_paths,
    join_path,
    split_path,
    with_value,
)
from rimecfg.tree._types import Path, Tree

__all__ = [
    "DELIMITER",
    "InvalidPathError",
    "Path",
    "Tree",
    "canonical_path",
    "deep_merge",
    "expand",
    "flatten",
    "get_at_path",
    "iter_leaf_paths",
    "join_path",
    "key_text",
    "normalize",
    "normalize_value",
    "split_path",
    "with_value",
]
