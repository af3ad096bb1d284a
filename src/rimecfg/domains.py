"""
Configuration domains.

Each domain is one (base file, patch file) pair in the Rime user
directory. Paths never resolve across domains.
"""

from __future__ import annotations

import enum as _enum
import pathlib as _pathlib


class ConfigDomain(_enum.Enum):
    """Known configuration domains."""

    DEFAULT = "default"
    """General engine settings: schema list, menu, key bindings."""

    SQUIRREL = "squirrel"
    """Squirrel frontend appearance: style, color schemes, app options."""

    @property
    def base_file_name(self) -> str:
        """Name of the read-only base file, e.g. ``default.yaml``."""
        return f"{self.value}.yaml"

    @property
    def patch_file_name(self) -> str:
        """Name of the read-write patch file, e.g. ``default.custom.yaml``."""
        return f"{self.value}.custom.yaml"

    def base_path(self, rime_dir: _pathlib.Path) -> _pathlib.Path:
        return rime_dir / self.base_file_name

    def patch_path(self, rime_dir: _pathlib.Path) -> _pathlib.Path:
        return rime_dir / self.patch_file_name

    @classmethod
    def parse(cls, value: str | ConfigDomain) -> ConfigDomain:
        """
        Resolve a domain from its name.

        Raises:
            ValueError: If the name is not a known domain.
        """
        if isinstance(value, ConfigDomain):
            return value
        return cls(value)
