"""
rimecfg - layered configuration engine for the Rime input method.

Reads ``<domain>.yaml`` and the ``patch`` map of ``<domain>.custom.yaml``,
serves the merged result by slash-separated path, and writes edits back
to the patch file without ever touching the base file.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("rimecfg")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)

from rimecfg.config import Settings  # noqa: E402
from rimecfg.domains import ConfigDomain  # noqa: E402
from rimecfg.store import ConfigManager  # noqa: E402

__all__ = ["__version__", "__version_info__", "ConfigDomain", "ConfigManager", "Settings"]
