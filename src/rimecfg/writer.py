"""
Debounced persistence of patch edits.

Continuous edits (a slider drag, typing into a field) call ``schedule``
many times for the same path. Each call cancels the timer armed for that
``(domain, path)`` and arms a new one; only the value present when the
timer finally fires is written. Intermediate values are dropped.

Every write re-reads the patch file, updates a single flat key in its
``patch`` map, and replaces the whole file atomically. Keys are always
written flat (``style/font_point: 18``) so that customizations of sibling
keys never overwrite each other.

Cancelling a path also cancels a write of it that has already fired but
has not yet reached the file: the entry is re-checked under the I/O lock
before anything is written.

Failures are reported through ``on_status`` and logged. They are not
retried, and the in-memory configuration is left as it is.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import logging as _logging
import pathlib as _pathlib
import threading as _threading
import time as _time
import typing as _typing

import yaml as _yaml

import rimecfg.constants as constants
import rimecfg.domains as domains
import rimecfg.storage as storage
import rimecfg.tree as tree

_logger = _logging.getLogger(__name__)

StatusCallback: _typing.TypeAlias = _typing.Callable[[storage.WriteStatus], None]

WriteKey: _typing.TypeAlias = tuple[domains.ConfigDomain, str]


@_dataclasses.dataclass
class _PendingWrite:
    domain: domains.ConfigDomain
    path: str
    value: _typing.Any
    timer: _threading.Timer | None = None


class PatchWriter:
    """
    Writes patch entries to ``<domain>.custom.yaml`` files.

    Thread safety: ``schedule``, ``cancel`` and ``flush`` may be called
    from any thread. Timer callbacks run on their own threads; file
    writes are serialized so two writes to the same file never interleave.
    """

    def __init__(
        self,
        rime_dir: _pathlib.Path,
        *,
        debounce_seconds: float = constants.DEFAULT_DEBOUNCE_SECONDS,
        on_status: StatusCallback | None = None,
    ) -> None:
        """
        Initialize the writer.

        Args:
            rime_dir: Directory holding the patch files.
            debounce_seconds: Quiescence window for scheduled writes.
            on_status: Called with the outcome of every write, including
                writes made from timer threads.
        """
        self._rime_dir = _pathlib.Path(rime_dir)
        self._debounce_seconds = debounce_seconds
        self._on_status = on_status
        self._pending: dict[WriteKey, _PendingWrite] = {}
        self._in_flight: dict[WriteKey, _PendingWrite] = {}
        self._active = 0
        self._condition = _threading.Condition()
        self._io_lock = _threading.Lock()
        self._closed = False

    @property
    def rime_dir(self) -> _pathlib.Path:
        return self._rime_dir

    @property
    def debounce_seconds(self) -> float:
        return self._debounce_seconds

    # =========================================================================
    # Debounced writes
    # =========================================================================

    def schedule(self, domain: domains.ConfigDomain, path: str, value: _typing.Any) -> None:
        """
        Arm a debounced write of ``value`` to ``path``.

        Any write still pending for the same domain and path is superseded.
        After ``close`` the write happens immediately instead.
        """
        key = (domain, path)
        with self._condition:
            if self._closed:
                closed = True
            else:
                closed = False
                previous = self._pending.pop(key, None)
                if previous is not None and previous.timer is not None:
                    previous.timer.cancel()
                pending = _PendingWrite(domain=domain, path=path, value=value)
                timer = _threading.Timer(self._debounce_seconds, self._fire, args=(key, pending))
                timer.daemon = True
                pending.timer = timer
                self._pending[key] = pending
                timer.start()

        if closed:
            _logger.warning("Writer is closed; writing %s/%s immediately", domain.value, path)
            self.write_entry(domain, path, value)

    def cancel(self, domain: domains.ConfigDomain, path: str) -> bool:
        """
        Drop the pending write for one path.

        A write that has fired but not yet reached the file is dropped too.

        Returns:
            True if a write was pending or in flight.
        """
        key = (domain, path)
        with self._condition:
            pending = self._pending.pop(key, None)
            in_flight = self._in_flight.pop(key, None)
            if pending is None and in_flight is None:
                return False
            if pending is not None and pending.timer is not None:
                pending.timer.cancel()
            self._condition.notify_all()
        return True

    def cancel_domain(self, domain: domains.ConfigDomain) -> int:
        """
        Drop every pending or in-flight write for a domain.

        Returns:
            The number of writes dropped.
        """
        with self._condition:
            keys = [key for key in self._pending if key[0] is domain]
            for key in keys:
                pending = self._pending.pop(key)
                if pending.timer is not None:
                    pending.timer.cancel()
            in_flight = [key for key in self._in_flight if key[0] is domain]
            for key in in_flight:
                del self._in_flight[key]
            self._condition.notify_all()
        return len(set(keys) | set(in_flight))

    def pending(self) -> list[WriteKey]:
        """Return the (domain, path) keys with a write still pending."""
        with self._condition:
            return list(self._pending)

    def flush(self) -> list[storage.WriteStatus]:
        """
        Write every pending value now.

        Returns:
            The status of each write, in scheduling order. Writes
            cancelled meanwhile are skipped.
        """
        with self._condition:
            claimed = list(self._pending.values())
            self._pending.clear()
            for pending in claimed:
                if pending.timer is not None:
                    pending.timer.cancel()
                self._in_flight[(pending.domain, pending.path)] = pending
            self._active += len(claimed)

        statuses: list[storage.WriteStatus] = []
        try:
            for pending in claimed:
                status = self._write_claimed(pending)
                if status is not None:
                    statuses.append(status)
        finally:
            with self._condition:
                self._active -= len(claimed)
                self._condition.notify_all()
        return statuses

    def wait(self, timeout: float | None = None) -> bool:
        """
        Block until no write is pending or in progress.

        Returns:
            False if the timeout expired first.
        """
        deadline = None if timeout is None else _time.monotonic() + timeout
        with self._condition:
            while self._pending or self._active:
                remaining = None if deadline is None else deadline - _time.monotonic()
                if remaining is not None and remaining <= 0:
                    return False
                self._condition.wait(remaining)
        return True

    def close(self) -> list[storage.WriteStatus]:
        """Flush pending writes; later schedules write immediately."""
        with self._condition:
            self._closed = True
        return self.flush()

    def _fire(self, key: WriteKey, pending: _PendingWrite) -> None:
        with self._condition:
            if self._pending.get(key) is not pending:
                # Superseded, cancelled, or already flushed
                return
            del self._pending[key]
            self._in_flight[key] = pending
            self._active += 1
        try:
            self._write_claimed(pending)
        finally:
            with self._condition:
                self._active -= 1
                self._condition.notify_all()

    def _write_claimed(self, pending: _PendingWrite) -> storage.WriteStatus | None:
        """Write a claimed entry unless it was cancelled or superseded meanwhile."""
        key = (pending.domain, pending.path)
        target = pending.domain.patch_path(self._rime_dir)
        with self._io_lock:
            with self._condition:
                live = self._in_flight.get(key) is pending
                if live:
                    del self._in_flight[key]
            if not live:
                _logger.debug(
                    "Skipping cancelled write of %s/%s", pending.domain.value, pending.path
                )
                return None
            status = self._set_entry(target, pending.path, pending.value)
        self._report(status)
        return status

    # =========================================================================
    # Immediate writes
    # =========================================================================

    def write_entry(
        self,
        domain: domains.ConfigDomain,
        path: str,
        value: _typing.Any,
    ) -> storage.WriteStatus:
        """
        Set one flat key in the domain's patch file.

        The file's current content is re-read so that entries written by
        other writes (or by hand) are kept.
        """
        target = domain.patch_path(self._rime_dir)
        with self._io_lock:
            status = self._set_entry(target, path, value)
        self._report(status)
        return status

    def write_patch(
        self,
        domain: domains.ConfigDomain,
        patch: _typing.Mapping[str, _typing.Any],
    ) -> storage.WriteStatus:
        """
        Replace the domain's whole patch map.

        Other top-level keys of the file are kept.
        """
        target = domain.patch_path(self._rime_dir)
        with self._io_lock:
            root = storage.load_mapping(target)
            root[constants.PATCH_KEY] = dict(patch)
            status = self._write(target, root)
        self._report(status)
        return status

    def write_raw(self, domain: domains.ConfigDomain, content: str) -> storage.WriteStatus:
        """Replace the domain's patch file with ``content`` verbatim."""
        target = domain.patch_path(self._rime_dir)
        with self._io_lock:
            status = storage.write_text(target, content)
        self._report(status)
        return status

    def _set_entry(
        self,
        target: _pathlib.Path,
        path: str,
        value: _typing.Any,
    ) -> storage.WriteStatus:
        root = storage.load_mapping(target)
        patch = _existing_patch(root, target)
        patch[path] = value
        root[constants.PATCH_KEY] = patch
        return self._write(target, root)

    def _write(self, target: _pathlib.Path, root: dict[str, _typing.Any]) -> storage.WriteStatus:
        try:
            content = storage.dump_yaml(root)
        except _yaml.YAMLError as e:
            _logger.error("Cannot serialize patch for %s: %s", target, e)
            status = storage.WriteStatus.failure(target, e)
        else:
            status = storage.write_text(target, content)
        return status

    def _report(self, status: storage.WriteStatus) -> None:
        if self._on_status is not None:
            self._on_status(status)


def _existing_patch(root: dict[str, _typing.Any], source: _pathlib.Path) -> dict[str, _typing.Any]:
    existing = root.get(constants.PATCH_KEY)
    if existing is None:
        return {}
    if not isinstance(existing, dict):
        _logger.warning(
            "Replacing non-map '%s' entry in %s",
            constants.PATCH_KEY,
            source,
        )
        return {}
    return tree.flatten(existing)
