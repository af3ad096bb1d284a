"""
YAML file access for Rime configuration files.

Reading is forgiving: a missing file, an unreadable file, invalid YAML or
a document whose root is not a map all load as an empty map, with a
warning logged. Writing always replaces the whole file atomically: the
new text goes to a temporary file in the same directory, is fsync'd, and
is then renamed over the target, so readers never see a partial file.

Write outcomes are returned as WriteStatus values rather than raised.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import logging as _logging
import os as _os
import pathlib as _pathlib
import tempfile as _tempfile
import typing as _typing

import yaml as _yaml

_logger = _logging.getLogger(__name__)


@_dataclasses.dataclass(frozen=True)
class WriteStatus:
    """
    Outcome of a write to a configuration file.

    Attributes:
        path: The file that was written (or that failed to be written).
        ok: Whether the file now holds the intended content.
        message: Short human-readable description.
        error: The exception that caused a failure, if any.
    """

    path: _pathlib.Path
    ok: bool
    message: str
    error: BaseException | None = None

    @classmethod
    def success(cls, path: _pathlib.Path, message: str | None = None) -> WriteStatus:
        return cls(path=path, ok=True, message=message or f"Saved {path.name}")

    @classmethod
    def failure(cls, path: _pathlib.Path, error: BaseException) -> WriteStatus:
        return cls(
            path=path,
            ok=False,
            message=f"Failed to save {path.name}: {error}",
            error=error,
        )


def read_text(path: _pathlib.Path) -> str | None:
    """Read a UTF-8 file, returning None if it is missing or unreadable."""
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        _logger.warning("Cannot read %s: %s", path, e)
        return None


def parse_mapping(content: str, source: str = "<string>") -> dict[str, _typing.Any]:
    """
    Parse YAML text into a map.

    Returns an empty map for empty documents, invalid YAML, or a root
    that is not a map.
    """
    try:
        data = _yaml.safe_load(content)
    except _yaml.YAMLError as e:
        _logger.warning("Invalid YAML in %s: %s", source, e)
        return {}

    if data is None:
        return {}
    if not isinstance(data, dict):
        _logger.warning(
            "Ignoring %s: expected a YAML mapping, got %s",
            source,
            type(data).__name__,
        )
        return {}
    return data


def load_mapping(path: _pathlib.Path) -> dict[str, _typing.Any]:
    """Load a YAML file as a map, or an empty map if that is not possible."""
    content = read_text(path)
    if content is None:
        return {}
    _logger.debug("Loaded %s", path)
    return parse_mapping(content, str(path))


def dump_yaml(data: _typing.Mapping[str, _typing.Any]) -> str:
    """
    Serialize a map to YAML text.

    Lines are never wrapped, non-ASCII text is written as is, and key
    order is preserved.
    """
    return _yaml.safe_dump(
        dict(data),
        width=float("inf"),
        allow_unicode=True,
        default_flow_style=False,
        sort_keys=False,
    )


def atomic_write_text(path: _pathlib.Path, content: str) -> None:
    """
    Replace ``path`` with ``content`` atomically.

    The parent directory is created if missing. Any leftover temporary
    file is removed if the write fails.

    Raises:
        OSError: If the file cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path: _pathlib.Path | None = None
    try:
        with _tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as f:
            tmp_path = _pathlib.Path(f.name)
            f.write(content)
            f.flush()
            _os.fsync(f.fileno())
        _os.replace(tmp_path, path)
        tmp_path = None
    finally:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)


def write_text(path: _pathlib.Path, content: str) -> WriteStatus:
    """Atomically write text, reporting the outcome as a WriteStatus."""
    try:
        atomic_write_text(path, content)
    except OSError as e:
        _logger.error("Failed to write %s: %s", path, e)
        return WriteStatus.failure(path, e)
    _logger.debug("Wrote %s", path)
    return WriteStatus.success(path)
