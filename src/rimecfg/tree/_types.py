"""
Type aliases for the tree package.

- Path: Tuple of path components (``"style/font_face"`` is
  ``("style", "font_face")``)
- Tree: A nested map as produced by the YAML loader
"""

from __future__ import annotations

import typing as _typing

Path: _typing.TypeAlias = tuple[str, ...]

Tree: _typing.TypeAlias = dict[str, _typing.Any]
