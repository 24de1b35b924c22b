"""EntryStore — the in-memory mirror of one owner's entries.

The store is the source of truth for listing.  It is populated wholesale
by a load, grows by one entry per committed create and shrinks by one per
committed delete.  Mutations are synchronous; callers only touch the store
after the backend has confirmed the change.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from enum import StrEnum

from loguru import logger

from .models import JournalEntry


class InsertPolicy(StrEnum):
    """Where a freshly created entry lands in the mirror."""

    PREPEND = "prepend"  # Always at the head: newest action first
    SORTED = "sorted"  # Keep date-descending order strictly


class EntryStore:
    """Ordered sequence of journal entries belonging to a single owner.

    Every entry's ``owner_id`` must equal :attr:`owner_id`; entries from
    anyone else are refused with ``ValueError``.  With
    :attr:`InsertPolicy.PREPEND` the sequence is in insertion order, not
    strictly date order, once entries have been created locally.

    Example::

        store = EntryStore(owner_id="u1")
        store.replace_all(await service.list_by_owner("u1"))
        store.insert_new(created)
        store.remove(created.id)
    """

    def __init__(self, owner_id: str | None = None, policy: InsertPolicy | str = InsertPolicy.PREPEND):
        self._owner_id = owner_id
        self.policy = InsertPolicy(policy)
        self._entries: list[JournalEntry] = []

    @property
    def owner_id(self) -> str | None:
        """Identity the mirrored entries belong to, or ``None`` when unbound."""
        return self._owner_id

    def bind(self, owner_id: str) -> None:
        """Bind the store to ``owner_id``; binding to a different owner empties it first."""
        if self._owner_id != owner_id:
            self._entries = []
            self._owner_id = owner_id

    def _check_owner(self, entry: JournalEntry) -> None:
        if self._owner_id is not None and entry.owner_id != self._owner_id:
            raise ValueError(f"Entry {entry.id} belongs to {entry.owner_id}, not {self._owner_id}")

    def replace_all(self, entries: Iterable[JournalEntry], owner_id: str | None = None) -> None:
        """Discard the current contents and install ``entries`` in the given order.

        Args:
            entries: Entries already ordered by the caller.
            owner_id: Rebind the store to a new owner before installing.
        """
        if owner_id is not None:
            self._owner_id = owner_id
        incoming = list(entries)
        for entry in incoming:
            self._check_owner(entry)
        self._entries = incoming
        logger.debug(f"Mirror replaced: {len(incoming)} entries for {self._owner_id}")

    def insert_new(self, entry: JournalEntry) -> int:
        """Add a newly created entry and return the index it landed at."""
        self._check_owner(entry)
        if self.policy is InsertPolicy.SORTED:
            index = next((i for i, e in enumerate(self._entries) if e.date <= entry.date), len(self._entries))
        else:
            index = 0
        self._entries.insert(index, entry)
        return index

    def remove(self, entry_id: str) -> bool:
        """Remove the first entry with ``entry_id``. Returns False if there was none."""
        for i, entry in enumerate(self._entries):
            if entry.id == entry_id:
                del self._entries[i]
                return True
        return False

    def clear(self) -> None:
        """Drop every entry and the owner binding."""
        self._entries = []
        self._owner_id = None

    def get(self, entry_id: str) -> JournalEntry | None:
        return next((e for e in self._entries if e.id == entry_id), None)

    def size(self) -> int:
        return len(self._entries)

    def list(self) -> list[JournalEntry]:
        """Return a copy of the entries in display order."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[JournalEntry]:
        return iter(list(self._entries))

    def __contains__(self, entry_id: object) -> bool:
        return any(e.id == entry_id for e in self._entries)
