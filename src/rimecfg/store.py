"""
Path-addressed configuration store.

ConfigManager owns the configuration state of every domain:

- base: the normalized content of ``<domain>.yaml``, never written
- patch: a flat map from full path to value, mirroring the ``patch``
  entry of ``<domain>.custom.yaml``
- merged: ``deep_merge(base, expand(patch))``, the effective config

Reads walk the merged tree. ``set`` updates the merged tree and the patch
map in memory, so the new value is readable at once, and schedules a
debounced write. ``remove`` drops a customization, recomputes the merged
tree from scratch, and writes the reduced patch map immediately.

Example:
    >>> manager = ConfigManager(pathlib.Path("~/Library/Rime").expanduser())
    >>> manager.get(ConfigDomain.DEFAULT, "menu/page_size")
    5
    >>> manager.set(ConfigDomain.DEFAULT, "menu/page_size", 7)
    >>> manager.is_customized(ConfigDomain.DEFAULT, "menu/page_size")
    True
    >>> manager.flush()  # write pending edits now
"""

from __future__ import annotations

import atexit as _atexit
import copy as _copy
import dataclasses as _dataclasses
import logging as _logging
import pathlib as _pathlib
import threading as _threading
import typing as _typing

import rimecfg.constants as constants
import rimecfg.domains as domains
import rimecfg.storage as storage
import rimecfg.tree as tree
import rimecfg.values as values
import rimecfg.virtual as virtual
import rimecfg.writer as writer

if _typing.TYPE_CHECKING:
    import rimecfg.config as config

_logger = _logging.getLogger(__name__)

ConfigDomain = domains.ConfigDomain

DomainLike: _typing.TypeAlias = domains.ConfigDomain | str


def get_example_config_path() -> _pathlib.Path:
    """Get the path to the bundled example configuration."""
    return _pathlib.Path(__file__).parent / "defaults" / "example.yaml"


@_dataclasses.dataclass
class DomainState:
    """
    In-memory configuration of one domain.

    Attributes:
        base: Normalized base tree.
        patch: Flat map of customizations, keyed by full path.
        merged: Effective configuration.
        fallback: True when the domain has no files and shows the
            bundled example instead.
    """

    base: tree.Tree = _dataclasses.field(default_factory=dict)
    patch: dict[str, _typing.Any] = _dataclasses.field(default_factory=dict)
    merged: tree.Tree = _dataclasses.field(default_factory=dict)
    fallback: bool = False
    lock: _threading.RLock = _dataclasses.field(
        default_factory=_threading.RLock, repr=False, compare=False
    )

    def recompute(self) -> None:
        """Rebuild the merged tree from the base tree and patch map."""
        self.merged = tree.deep_merge(self.base, tree.expand(self.patch))


class ConfigManager:
    """
    Loads, queries and edits the configuration of all domains.

    Each domain's state is guarded by its own lock, so the manager may be
    shared with the writer's timer threads or a multi-threaded host.
    Every value handed out is a copy; mutating it does not change the
    store.

    Edits still pending at interpreter exit are flushed by an ``atexit``
    hook registered until ``close``.
    """

    def __init__(
        self,
        rime_dir: _pathlib.Path,
        *,
        debounce_seconds: float = constants.DEFAULT_DEBOUNCE_SECONDS,
        example_path: _pathlib.Path | None = None,
        load: bool = True,
    ) -> None:
        """
        Initialize the manager.

        Args:
            rime_dir: The Rime user directory.
            debounce_seconds: Quiescence window for persisting edits.
            example_path: Override for the bundled example configuration
                (for testing).
            load: Load all domains immediately.
        """
        self._rime_dir = _pathlib.Path(rime_dir).expanduser()
        self._example_path = example_path or get_example_config_path()
        self._writer = writer.PatchWriter(
            self._rime_dir,
            debounce_seconds=debounce_seconds,
            on_status=self._record_status,
        )
        self._states: dict[domains.ConfigDomain, DomainState] = {
            domain: DomainState() for domain in domains.ConfigDomain
        }
        self._virtual = virtual.VirtualFieldResolver(self)
        self.status_message = ""
        self.last_status: storage.WriteStatus | None = None
        _atexit.register(self.close)

        if load:
            self.load_all()

    @classmethod
    def from_settings(cls, settings: config.Settings, **kwargs: _typing.Any) -> ConfigManager:
        """Create a manager from loaded settings."""
        return cls(
            settings.rime_dir,
            debounce_seconds=settings.debounce_seconds,
            **kwargs,
        )

    def __enter__(self) -> ConfigManager:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def rime_dir(self) -> _pathlib.Path:
        return self._rime_dir

    @property
    def writer(self) -> writer.PatchWriter:
        return self._writer

    @property
    def virtual_fields(self) -> virtual.VirtualFieldResolver:
        return self._virtual

    # =========================================================================
    # Loading
    # =========================================================================

    def load_all(self) -> None:
        """
        Load every domain from disk.

        Pending edits are written first so that nothing scheduled is lost
        or read back stale.
        """
        self._writer.flush()
        for domain in domains.ConfigDomain:
            self._load_domain(domain)

        fallback = [domain.value for domain in domains.ConfigDomain if self.is_fallback(domain)]
        if len(fallback) == len(self._states):
            self.status_message = "Using example configuration"
        elif fallback:
            self.status_message = (
                f"Loaded {self._rime_dir} (example configuration for {', '.join(fallback)})"
            )
        else:
            self.status_message = f"Loaded {self._rime_dir}"
        _logger.debug(self.status_message)

    def reload(self) -> None:
        """Discard in-memory state and load every domain again."""
        self.load_all()

    def _load_domain(self, domain: domains.ConfigDomain) -> None:
        base_path = domain.base_path(self._rime_dir)
        patch_path = domain.patch_path(self._rime_dir)

        if not base_path.exists() and not patch_path.exists():
            _logger.warning(
                "No %s or %s in %s; using example configuration",
                domain.base_file_name,
                domain.patch_file_name,
                self._rime_dir,
            )
            base = tree.normalize(storage.load_mapping(self._example_path))
            patch: dict[str, _typing.Any] = {}
            fallback = True
        else:
            base = tree.normalize(storage.load_mapping(base_path))
            patch = _load_patch(patch_path)
            fallback = False

        state = self._states[domain]
        with state.lock:
            state.base = base
            state.patch = patch
            state.fallback = fallback
            state.recompute()

    def is_fallback(self, domain: DomainLike) -> bool:
        """Check whether a domain shows the bundled example configuration."""
        return self._state(domain).fallback

    # =========================================================================
    # Queries
    # =========================================================================

    def get(self, domain: DomainLike, path: str) -> _typing.Any:
        """
        Get the effective value at a path.

        Virtual fields are synthesized from the entries backing them.
        An empty path returns the whole merged tree.

        Returns:
            A copy of the value, or None if the path does not resolve.
        """
        domain = domains.ConfigDomain.parse(domain)
        key = tree.canonical_path(path)
        if self._virtual.is_virtual(key):
            return self._virtual.read(domain, key)

        state = self._states[domain]
        with state.lock:
            value = tree.get_at_path(state.merged, key)
            return _copy.deepcopy(value)

    def int_value(self, domain: DomainLike, path: str) -> int | None:
        return values.as_int(self.get(domain, path))

    def float_value(self, domain: DomainLike, path: str) -> float | None:
        return values.as_float(self.get(domain, path))

    def is_customized(self, domain: DomainLike, path: str) -> bool:
        """
        Check whether a path has its own entry in the patch map.

        A virtual field counts as customized when any path backing it is.
        """
        domain = domains.ConfigDomain.parse(domain)
        key = tree.canonical_path(path)
        if self._virtual.is_virtual(key):
            return any(
                self.is_customized(domain, backing)
                for backing in self._virtual.backing_paths(key)
            )
        state = self._states[domain]
        with state.lock:
            return key in state.patch

    def list_keys(self, domain: DomainLike) -> list[str]:
        """Return the sorted leaf paths of the merged tree."""
        state = self._state(domain)
        with state.lock:
            return sorted(tree.iter_leaf_paths(state.merged))

    def merged_config(self, domain: DomainLike) -> tree.Tree:
        """Return a copy of the merged tree."""
        state = self._state(domain)
        with state.lock:
            return _copy.deepcopy(state.merged)

    def patch_map(self, domain: DomainLike) -> dict[str, _typing.Any]:
        """Return a copy of the flat patch map."""
        state = self._state(domain)
        with state.lock:
            return _copy.deepcopy(state.patch)

    # =========================================================================
    # Mutations
    # =========================================================================

    def set(self, domain: DomainLike, path: str, value: _typing.Any) -> None:
        """
        Customize the value at a path.

        The change is visible to ``get`` immediately; the patch file is
        written once no further ``set`` for the same path has arrived for
        the debounce window. Floats are rounded to four decimal places.

        Raises:
            InvalidPathError: If the path is empty.
            ValueError: If a virtual field receives a malformed value.
        """
        domain = domains.ConfigDomain.parse(domain)
        key = tree.canonical_path(path)
        if not key:
            raise tree.InvalidPathError(path)
        if self._virtual.is_virtual(key):
            self._virtual.write(domain, key, value)
            return

        value = values.clean_numbers(_copy.deepcopy(value))
        state = self._states[domain]
        with state.lock:
            state.merged = tree.with_value(state.merged, key, value)
            state.patch[key] = value
        self._writer.schedule(domain, key, value)

    def remove(self, domain: DomainLike, path: str) -> storage.WriteStatus:
        """
        Drop the customization of a path, restoring the base value.

        The reduced patch map is written immediately. Removing a scalar
        pair field removes both paths backing it. Removing a hotkey pair
        field restores only that field's bindings entries; other binding
        edits stay customized.

        Returns:
            The status of the write.
        """
        domain = domains.ConfigDomain.parse(domain)
        key = tree.canonical_path(path)
        if self._virtual.is_paired(key):
            return self._restore_bindings(domain, key)
        keys = self._virtual.backing_paths(key) if self._virtual.is_virtual(key) else [key]

        for removed in keys:
            self._writer.cancel(domain, removed)

        state = self._states[domain]
        with state.lock:
            for removed in keys:
                state.patch.pop(removed, None)
            state.recompute()
            patch = _copy.deepcopy(state.patch)
        return self._writer.write_patch(domain, patch)

    def _restore_bindings(self, domain: domains.ConfigDomain, key: str) -> storage.WriteStatus:
        bindings_path = self._virtual.bindings_path
        self._writer.cancel(domain, bindings_path)

        state = self._states[domain]
        with state.lock:
            base = _copy.deepcopy(tree.get_at_path(state.base, bindings_path))
            restored = self._virtual.restored_bindings(domain, key, base)
            if restored is None:
                state.patch.pop(bindings_path, None)
            else:
                state.patch[bindings_path] = restored
            state.recompute()
            patch = _copy.deepcopy(state.patch)
        return self._writer.write_patch(domain, patch)

    # =========================================================================
    # Raw patch file access
    # =========================================================================

    def patch_file(self, domain: DomainLike) -> _pathlib.Path:
        return domains.ConfigDomain.parse(domain).patch_path(self._rime_dir)

    def load_raw_text(self, domain: DomainLike) -> str:
        """Return the patch file's text, or an empty patch if there is none."""
        content = storage.read_text(self.patch_file(domain))
        return constants.EMPTY_PATCH_TEXT if content is None else content

    def save_raw_text(self, domain: DomainLike, content: str) -> storage.WriteStatus:
        """
        Replace the patch file with hand-edited text and reload.

        Edits still pending for the domain are dropped; the saved text
        supersedes them.
        """
        domain = domains.ConfigDomain.parse(domain)
        dropped = self._writer.cancel_domain(domain)
        if dropped:
            _logger.info("Dropped %d pending edit(s) for %s", dropped, domain.value)

        status = self._writer.write_raw(domain, content)
        self.reload()
        self.status_message = status.message
        return status

    # =========================================================================
    # Persistence
    # =========================================================================

    def flush(self) -> list[storage.WriteStatus]:
        """Write every pending edit now."""
        return self._writer.flush()

    def close(self) -> None:
        """Flush pending edits; later edits are written immediately."""
        _atexit.unregister(self.close)
        self._writer.close()

    def _record_status(self, status: storage.WriteStatus) -> None:
        self.last_status = status
        self.status_message = status.message

    def _state(self, domain: DomainLike) -> DomainState:
        return self._states[domains.ConfigDomain.parse(domain)]


def _load_patch(path: _pathlib.Path) -> dict[str, _typing.Any]:
    root = storage.load_mapping(path)
    patch = root.get(constants.PATCH_KEY)
    if patch is None:
        return {}
    if not isinstance(patch, dict):
        _logger.warning(
            "Ignoring '%s' in %s: expected a mapping, got %s",
            constants.PATCH_KEY,
            path,
            type(patch).__name__,
        )
        return {}
    return tree.flatten(patch)
