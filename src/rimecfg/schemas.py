"""
Catalog of Rime input schemas.

Schemas come from two places:

- Built-in: the ``schema_list`` entries of ``default.yaml``, read line by
  line so that the trailing comment (``- schema: luna_pinyin  # 朙月拼音``)
  can be used as the display name.
- Installed: any ``<id>.schema.yaml`` file in the Rime directory that the
  base list does not already mention, named from its ``schema/name``.

Adding and deleting schemas manages those files and keeps a customized
``schema_list`` in step.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import logging as _logging
import pathlib as _pathlib
import re as _re

import rimecfg.domains as domains
import rimecfg.storage as storage
import rimecfg.store as store

_logger = _logging.getLogger(__name__)

SCHEMA_LIST_PATH = "schema_list"

SCHEMA_FILE_SUFFIX = ".schema.yaml"

_SCHEMA_LINE = _re.compile(r"-\s+schema:\s+([a-zA-Z0-9_]+)(?:\s+#\s*(.*))?")

_SCHEMA_ID = _re.compile(r"[A-Za-z0-9_]+")


@_dataclasses.dataclass(frozen=True)
class SchemaInfo:
    """An input schema known to the catalog."""

    schema_id: str
    name: str
    is_builtin: bool


def validate_schema_id(schema_id: str) -> str:
    """
    Check that a schema id is safe to use as a file name.

    Raises:
        ValueError: If the id is empty or has characters other than
            letters, digits and underscores.
    """
    if not _SCHEMA_ID.fullmatch(schema_id):
        raise ValueError(
            f"Invalid schema id {schema_id!r}: use letters, digits and underscores only"
        )
    return schema_id


def parse_schema_lines(content: str) -> list[SchemaInfo]:
    """Extract ``- schema: <id>  # <name>`` entries from YAML text."""
    schemas: list[SchemaInfo] = []
    seen: set[str] = set()
    for line in content.splitlines():
        match = _SCHEMA_LINE.search(line)
        if match is None:
            continue
        schema_id = match.group(1)
        if schema_id in seen:
            continue
        seen.add(schema_id)
        name = (match.group(2) or "").strip() or schema_id
        schemas.append(SchemaInfo(schema_id=schema_id, name=name, is_builtin=True))
    return schemas


class SchemaCatalog:
    """Lists, adds and deletes schemas in a manager's Rime directory."""

    def __init__(self, manager: store.ConfigManager) -> None:
        self._manager = manager

    @property
    def rime_dir(self) -> _pathlib.Path:
        return self._manager.rime_dir

    def schema_path(self, schema_id: str) -> _pathlib.Path:
        return self.rime_dir / f"{validate_schema_id(schema_id)}{SCHEMA_FILE_SUFFIX}"

    def available(self) -> list[SchemaInfo]:
        """Return built-in schemas followed by installed schema files."""
        base_path = domains.ConfigDomain.DEFAULT.base_path(self.rime_dir)
        content = storage.read_text(base_path)
        schemas = parse_schema_lines(content) if content is not None else []
        known = {schema.schema_id for schema in schemas}

        if self.rime_dir.is_dir():
            for path in sorted(self.rime_dir.glob(f"*{SCHEMA_FILE_SUFFIX}")):
                schema_id = path.name[: -len(SCHEMA_FILE_SUFFIX)]
                if schema_id in known:
                    continue
                known.add(schema_id)
                schemas.append(
                    SchemaInfo(
                        schema_id=schema_id,
                        name=_schema_name(path) or schema_id,
                        is_builtin=False,
                    )
                )
        return schemas

    def enabled(self) -> list[str]:
        """Return the schema ids of the effective ``schema_list``."""
        entries = self._manager.get(domains.ConfigDomain.DEFAULT, SCHEMA_LIST_PATH)
        if not isinstance(entries, list):
            return []
        return [
            entry["schema"]
            for entry in entries
            if isinstance(entry, dict) and isinstance(entry.get("schema"), str)
        ]

    def add(self, schema_id: str, name: str) -> storage.WriteStatus:
        """
        Create a minimal ``<id>.schema.yaml`` and reload.

        Raises:
            ValueError: If the schema id is invalid.
        """
        path = self.schema_path(schema_id)
        content = "# Rime schema settings\n" + storage.dump_yaml(
            {"schema": {"schema_id": schema_id, "name": name, "version": "0.1"}}
        )
        status = storage.write_text(path, content)
        self._manager.reload()
        if status.ok:
            status = storage.WriteStatus.success(path, f"Added schema: {name}")
        self._manager.status_message = status.message
        return status

    def delete(self, schema_id: str) -> storage.WriteStatus:
        """
        Remove a schema from a customized ``schema_list`` and delete its file.

        Raises:
            ValueError: If the schema id is invalid.
        """
        path = self.schema_path(schema_id)
        domain = domains.ConfigDomain.DEFAULT

        if self._manager.is_customized(domain, SCHEMA_LIST_PATH):
            entries = self._manager.patch_map(domain)[SCHEMA_LIST_PATH]
            if isinstance(entries, list):
                kept = [
                    entry
                    for entry in entries
                    if not (isinstance(entry, dict) and entry.get("schema") == schema_id)
                ]
                if len(kept) != len(entries):
                    self._manager.set(domain, SCHEMA_LIST_PATH, kept)
                    for flushed in self._manager.flush():
                        if not flushed.ok:
                            return flushed

        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            _logger.error("Failed to delete %s: %s", path, e)
            status = storage.WriteStatus.failure(path, e)
        else:
            status = storage.WriteStatus.success(path, f"Deleted schema: {schema_id}")

        self._manager.reload()
        self._manager.status_message = status.message
        return status


def _schema_name(path: _pathlib.Path) -> str | None:
    schema = storage.load_mapping(path).get("schema")
    if not isinstance(schema, dict):
        return None
    name = schema.get("name")
    return name if isinstance(name, str) and name else None
