"""Ports — the contracts the journal core consumes.

Backends (a hosted table, a directory of JSON files, in-memory fakes in
tests) implement :class:`RemoteEntryService` and :class:`SessionProvider`.
Front ends supply a :class:`Confirmer` for destructive commands.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from .models import Identity, JournalEntry, NewEntry


@runtime_checkable
class RemoteEntryService(Protocol):
    """Persistent store of entries, keyed by owner identity.

    Every method raises :class:`~daybook.core.exceptions.RemoteError` on failure.
    """

    async def list_by_owner(self, owner_id: str) -> list[JournalEntry]:
        """Return the owner's entries ordered by ``date`` descending."""
        ...

    async def insert(self, candidate: NewEntry) -> JournalEntry:
        """Store a candidate and return it with ``id`` and ``created_at`` assigned."""
        ...

    async def delete_by_id(self, entry_id: str) -> None:
        """Delete one entry. An unknown id is a failure, not a no-op."""
        ...


@runtime_checkable
class SessionProvider(Protocol):
    """Source of the current identity."""

    async def current_identity(self) -> Identity | None: ...

    async def sign_out(self) -> None: ...


@runtime_checkable
class Confirmer(Protocol):
    """Synchronous yes/no gate in front of destructive commands."""

    def confirm(self, message: str) -> bool: ...


class AlwaysConfirm:
    """Confirmer that grants every request (``--yes`` flags, scripts)."""

    def confirm(self, message: str) -> bool:
        return True


class NeverConfirm:
    def confirm(self, message: str) -> bool:
        return False


class CallbackConfirmer:
    """Adapt any ``(message) -> bool`` callable, e.g. ``click.confirm``."""

    def __init__(self, callback: Callable[[str], bool]):
        self._callback = callback

    def confirm(self, message: str) -> bool:
        return bool(self._callback(message))
