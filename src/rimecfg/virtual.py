"""
Virtual fields synthesized from real configuration entries.

A few settings a user thinks of as one value are stored by Rime as
several entries. Hotkey pairs such as "move cursor left/right" are two
entries of the ``key_binder/bindings`` list, each a map like::

    {when: composing, accept: "Control+b", send: "Shift+Left"}

``cursor_pair`` and ``page_pair`` expose those entries as an ordered list
of ``[first, second]`` hotkey pairs. ``select_pair`` is backed by two
plain scalars instead of the bindings list.

Reads are lossy: if the list holds more hotkeys for one action
than the other, the extra ones are dropped from the pairs. Writes rebuild
every entry of both actions, so a write also repairs such a mismatch.
"""

from __future__ import annotations

import collections.abc as _abc
import dataclasses as _dataclasses
import typing as _typing

import rimecfg.constants as constants
import rimecfg.domains as domains

Pair: _typing.TypeAlias = list[str]


class _Store(_typing.Protocol):
    def get(self, domain: domains.ConfigDomain, path: str) -> _typing.Any: ...

    def set(self, domain: domains.ConfigDomain, path: str, value: _typing.Any) -> None: ...


@_dataclasses.dataclass(frozen=True)
class HotkeyAction:
    """One binding signature: what is sent, and in which state."""

    name: str
    send: str
    when: str

    def matches(self, binding: _typing.Any) -> bool:
        """Check whether a bindings entry belongs to this action."""
        return (
            isinstance(binding, _abc.Mapping)
            and binding.get("send") == self.send
            and binding.get("when") == self.when
        )

    def binding(self, accept: str) -> dict[str, str]:
        """Build a bindings entry for this action."""
        return {"when": self.when, "accept": accept, "send": self.send}


ACTIONS: dict[str, HotkeyAction] = {
    action.name: action
    for action in (
        HotkeyAction("cursor_prev", send="Shift+Left", when="composing"),
        HotkeyAction("cursor_next", send="Shift+Right", when="composing"),
        HotkeyAction("page_up", send="Page_Up", when="has_menu"),
        HotkeyAction("page_down", send="Page_Down", when="has_menu"),
    )
}


@_dataclasses.dataclass(frozen=True)
class PairedHotkeyField:
    """A virtual field pairing the hotkeys of two actions."""

    path: str
    first: HotkeyAction
    second: HotkeyAction


@_dataclasses.dataclass(frozen=True)
class ScalarPairField:
    """A virtual field pairing two scalar settings."""

    path: str
    first_path: str
    second_path: str


VirtualField: _typing.TypeAlias = PairedHotkeyField | ScalarPairField

DEFAULT_FIELDS: tuple[VirtualField, ...] = (
    PairedHotkeyField(
        f"{constants.KEY_BINDER_PREFIX}cursor_pair",
        first=ACTIONS["cursor_prev"],
        second=ACTIONS["cursor_next"],
    ),
    PairedHotkeyField(
        f"{constants.KEY_BINDER_PREFIX}page_pair",
        first=ACTIONS["page_up"],
        second=ACTIONS["page_down"],
    ),
    ScalarPairField(
        f"{constants.KEY_BINDER_PREFIX}select_pair",
        first_path=constants.SELECT_FIRST_PATH,
        second_path=constants.SELECT_LAST_PATH,
    ),
)


class VirtualFieldResolver:
    """
    Reads and writes virtual fields through a path-addressed store.

    The store is only used through ``get`` and ``set`` on real paths, so
    every write lands in the patch map and is persisted like any other
    edit.
    """

    def __init__(
        self,
        store: _Store,
        fields: _typing.Iterable[VirtualField] = DEFAULT_FIELDS,
        *,
        bindings_path: str = constants.BINDINGS_PATH,
    ) -> None:
        self._store = store
        self._fields = {field.path: field for field in fields}
        self._bindings_path = bindings_path

    def is_virtual(self, path: str) -> bool:
        return path in self._fields

    def is_paired(self, path: str) -> bool:
        """Check whether a path is a virtual field over the bindings list."""
        return isinstance(self._fields.get(path), PairedHotkeyField)

    @property
    def paths(self) -> list[str]:
        return list(self._fields)

    @property
    def bindings_path(self) -> str:
        return self._bindings_path

    def backing_paths(self, path: str) -> list[str]:
        """
        Return the real paths a virtual field is stored in.

        Raises:
            KeyError: If ``path`` is not a virtual field.
        """
        field = self._fields[path]
        if isinstance(field, ScalarPairField):
            return [field.first_path, field.second_path]
        return [self._bindings_path]

    def read(self, domain: domains.ConfigDomain, path: str) -> list[Pair]:
        """
        Read a virtual field as a list of pairs.

        Raises:
            KeyError: If ``path`` is not a virtual field.
        """
        field = self._fields[path]
        if isinstance(field, ScalarPairField):
            return self._read_scalar_pair(domain, field)

        firsts = self.read_action(domain, field.first)
        seconds = self.read_action(domain, field.second)
        return [[first, second] for first, second in zip(firsts, seconds)]

    def write(self, domain: domains.ConfigDomain, path: str, value: _typing.Any) -> None:
        """
        Write a virtual field from a list of pairs.

        Raises:
            KeyError: If ``path`` is not a virtual field.
            ValueError: If ``value`` is not a list of two-hotkey pairs.
        """
        field = self._fields[path]
        pairs = _coerce_pairs(value, path)
        if isinstance(field, ScalarPairField):
            self._write_scalar_pair(domain, field, pairs)
            return

        bindings = [
            binding
            for binding in self._bindings(domain)
            if not field.first.matches(binding) and not field.second.matches(binding)
        ]
        for first, second in pairs:
            bindings.append(field.first.binding(first))
            bindings.append(field.second.binding(second))
        self._store.set(domain, self._bindings_path, bindings)

    def restored_bindings(
        self,
        domain: domains.ConfigDomain,
        path: str,
        base_bindings: _typing.Any,
    ) -> list[_typing.Any] | None:
        """
        Reset one hotkey pair field to its base entries.

        Entries of the field's two actions are taken from ``base_bindings``;
        every other entry of the effective list is kept as it is.

        Returns:
            The rebuilt bindings list, or None if it would equal the base
            list (the bindings customization can then be dropped).

        Raises:
            KeyError: If ``path`` is not a hotkey pair field.
        """
        field = self._fields[path]
        if not isinstance(field, PairedHotkeyField):
            raise KeyError(path)
        base = list(base_bindings) if isinstance(base_bindings, list) else []

        def owned(binding: _typing.Any) -> bool:
            return field.first.matches(binding) or field.second.matches(binding)

        others = [binding for binding in self._bindings(domain) if not owned(binding)]
        if others == [binding for binding in base if not owned(binding)]:
            return None
        return others + [binding for binding in base if owned(binding)]

    def read_action(self, domain: domains.ConfigDomain, action: HotkeyAction | str) -> list[str]:
        """Return the hotkeys bound to one action, in list order."""
        action = _resolve_action(action)
        return [
            binding["accept"]
            for binding in self._bindings(domain)
            if action.matches(binding) and isinstance(binding.get("accept"), str)
        ]

    def write_action(
        self,
        domain: domains.ConfigDomain,
        action: HotkeyAction | str,
        hotkeys: _typing.Iterable[str],
    ) -> None:
        """Replace the hotkeys bound to one action."""
        action = _resolve_action(action)
        bindings = [binding for binding in self._bindings(domain) if not action.matches(binding)]
        bindings.extend(action.binding(hotkey) for hotkey in hotkeys)
        self._store.set(domain, self._bindings_path, bindings)

    def _bindings(self, domain: domains.ConfigDomain) -> list[_typing.Any]:
        bindings = self._store.get(domain, self._bindings_path)
        if not isinstance(bindings, list):
            return []
        return list(bindings)

    def _read_scalar_pair(
        self,
        domain: domains.ConfigDomain,
        field: ScalarPairField,
    ) -> list[Pair]:
        first = self._store.get(domain, field.first_path)
        second = self._store.get(domain, field.second_path)
        if isinstance(first, str) and isinstance(second, str) and first and second:
            return [[first, second]]
        return []

    def _write_scalar_pair(
        self,
        domain: domains.ConfigDomain,
        field: ScalarPairField,
        pairs: list[Pair],
    ) -> None:
        first, second = pairs[0] if pairs else ("", "")
        self._store.set(domain, field.first_path, first)
        self._store.set(domain, field.second_path, second)


def _resolve_action(action: HotkeyAction | str) -> HotkeyAction:
    if isinstance(action, HotkeyAction):
        return action
    try:
        return ACTIONS[action]
    except KeyError:
        raise ValueError(f"Unknown hotkey action: {action!r}") from None


def _coerce_pairs(value: _typing.Any, path: str) -> list[Pair]:
    if value is None:
        return []
    if isinstance(value, (str, bytes)) or not isinstance(value, _abc.Sequence):
        raise ValueError(f"{path} expects a list of hotkey pairs, got {type(value).__name__}")

    pairs: list[Pair] = []
    for item in value:
        if (
            isinstance(item, (str, bytes))
            or not isinstance(item, _abc.Sequence)
            or len(item) != 2
            or not all(isinstance(hotkey, str) for hotkey in item)
        ):
            raise ValueError(f"{path} expects pairs of two hotkey strings, got {item!r}")
        pairs.append([item[0], item[1]])
    return pairs
