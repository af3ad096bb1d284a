"""
Shared constants for rimecfg.

This module provides a single source of truth for default values
that are used across multiple modules.
"""

import pathlib as _pathlib

DEFAULT_RIME_DIR = _pathlib.Path.home() / "Library" / "Rime"
"""Default Rime user directory (Squirrel on macOS)."""

DEFAULT_DEBOUNCE_SECONDS = 0.3
"""Quiescence window before a repeated edit to one path is written."""

FLOAT_DECIMAL_PLACES = 4
"""Floats written to a patch are rounded to this many decimal places."""

PATCH_KEY = "patch"
"""The only recognized top-level key of a ``.custom.yaml`` patch file."""

EMPTY_PATCH_TEXT = "patch:\n"
"""Raw text shown for a patch file that does not exist yet."""

# Virtual field paths
KEY_BINDER_PREFIX = "key_binder/"
BINDINGS_PATH = "key_binder/bindings"
SELECT_FIRST_PATH = "key_binder/select_first_character"
SELECT_LAST_PATH = "key_binder/select_last_character"

# Summary defaults, used when the merged config has no value
DEFAULT_PAGE_SIZE = 5
DEFAULT_COLOR_SCHEME = "purity_of_form_custom"
DEFAULT_FONT_FACE = "Avenir"
DEFAULT_FONT_POINT = 16
