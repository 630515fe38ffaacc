"""Immutable entry store, populated once per successful load."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from .models import Entry


class EntryStore:
    """Ordered, read-only sequence of entries in load order."""

    __slots__ = ("_entries", "_texts")

    def __init__(self, entries: Iterable[Entry] = ()) -> None:
        self._entries: tuple[Entry, ...] = tuple(entries)
        self._texts: tuple[str, ...] = tuple(entry.id for entry in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> Entry:
        return self._entries[index]

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EntryStore):
            return NotImplemented
        return self._entries == other._entries

    def __hash__(self) -> int:
        return hash(self._entries)

    def __repr__(self) -> str:
        return f"EntryStore({len(self._entries)} entries)"

    def texts(self) -> tuple[str, ...]:
        """Searchable strings (entry ids) in load order."""
        return self._texts
