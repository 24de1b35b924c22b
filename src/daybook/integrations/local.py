"""
Local filesystem backend.

Entries live in one JSON file per owner under ``base_path``; the session is a
small JSON file naming the signed-in user.  Useful offline and as the default
backend for the CLI.  Async file access goes through aiofiles.
"""

from __future__ import annotations

import asyncio
import json
import uuid
from datetime import UTC, datetime
from pathlib import Path

import aiofiles
import aiofiles.os
from loguru import logger

from daybook.core.exceptions import DataProcessingError, RemoteError
from daybook.journal.models import Identity, JournalEntry, NewEntry


def _safe_name(owner_id: str) -> str:
    """Map an owner id to a file name, rejecting anything that could escape ``base_path``."""
    raw = owner_id.strip()
    if not raw:
        raise RemoteError("Owner id cannot be empty.")
    if any(ch in raw for ch in ("/", "\\", "\x00")) or raw in (".", "..") or raw.startswith("~"):
        raise RemoteError(f"Unsafe owner id '{owner_id}'.")
    return f"{raw}.json"


class LocalEntryService:
    """File-backed :class:`~daybook.journal.ports.RemoteEntryService`.

    Access follows the signed-in identity of ``sessions``, the way row-level
    security does on the hosted table: writes and deletes touch only that
    identity's file, and another owner's list holds only their public entries.

    Layout::

        base_path/
            {owner_id}.json    # list of entry records, unordered
    """

    def __init__(self, base_path: str | Path, sessions: LocalSessionProvider):
        self.base_path = Path(base_path).expanduser().resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.sessions = sessions
        self._lock = asyncio.Lock()

    async def _current_owner(self) -> str:
        identity = await self.sessions.current_identity()
        if identity is None:
            raise RemoteError("Not signed in")
        return identity.id

    def _owner_path(self, owner_id: str) -> Path:
        return self.base_path / _safe_name(owner_id)

    async def _read(self, path: Path) -> list[dict]:
        if not path.exists():
            return []
        try:
            async with aiofiles.open(path, encoding="utf-8") as f:
                data = json.loads(await f.read() or "[]")
        except (OSError, json.JSONDecodeError) as e:
            raise RemoteError(f"Cannot read {path}: {e}") from e
        if not isinstance(data, list):
            raise RemoteError(f"Corrupt entry file {path}: expected a list")
        return data

    async def _write(self, path: Path, records: list[dict]) -> None:
        tmp = path.with_suffix(".json.tmp")
        try:
            async with aiofiles.open(tmp, "w", encoding="utf-8") as f:
                await f.write(json.dumps(records, indent=2))
            await aiofiles.os.replace(tmp, path)
        except OSError as e:
            raise RemoteError(f"Cannot write {path}: {e}") from e

    async def list_by_owner(self, owner_id: str) -> list[JournalEntry]:
        viewer = await self._current_owner()
        records = await self._read(self._owner_path(owner_id))
        try:
            entries = [JournalEntry.from_record(r) for r in records]
        except DataProcessingError as e:
            raise RemoteError(str(e)) from e
        if viewer != owner_id:
            entries = [e for e in entries if e.is_public]
        epoch = datetime.min.replace(tzinfo=UTC)
        entries.sort(key=lambda e: (e.date, e.created_at or epoch), reverse=True)
        return entries

    async def insert(self, candidate: NewEntry) -> JournalEntry:
        owner = await self._current_owner()
        if candidate.owner_id != owner:
            raise RemoteError(f"Cannot store an entry for {candidate.owner_id} while signed in as {owner}")
        path = self._owner_path(owner)
        record = candidate.to_record()
        record["id"] = uuid.uuid4().hex
        record["created_at"] = datetime.now(UTC).isoformat()
        entry = JournalEntry.from_record(record)

        async with self._lock:
            records = await self._read(path)
            records.append(entry.to_record())
            await self._write(path, records)
        logger.debug(f"Stored entry {entry.id} in {path.name}")
        return entry

    async def delete_by_id(self, entry_id: str) -> None:
        path = self._owner_path(await self._current_owner())
        async with self._lock:
            records = await self._read(path)
            kept = [r for r in records if str(r.get("id")) != entry_id]
            if len(kept) == len(records):
                raise RemoteError(f"Entry not found: {entry_id}")
            await self._write(path, kept)
        logger.debug(f"Removed entry {entry_id} from {path.name}")


class LocalSessionProvider:
    """File-backed :class:`~daybook.journal.ports.SessionProvider`.

    No credentials are checked; signing in simply records who is using the
    journal on this machine.
    """

    def __init__(self, path: str | Path = "~/.daybook/session.json"):
        self.path = Path(path).expanduser()

    async def sign_in(self, user_id: str, email: str | None = None) -> Identity:
        identity = Identity(id=user_id, email=email)
        _safe_name(user_id)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            async with aiofiles.open(self.path, "w", encoding="utf-8") as f:
                await f.write(json.dumps({"user_id": identity.id, "email": identity.email}))
        except OSError as e:
            raise RemoteError(f"Cannot write session file {self.path}: {e}") from e
        logger.info(f"Signed in as {identity.id}")
        return identity

    async def current_identity(self) -> Identity | None:
        if not self.path.exists():
            return None
        try:
            async with aiofiles.open(self.path, encoding="utf-8") as f:
                data = json.loads(await f.read())
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {e}")
            return None
        user_id = data.get("user_id") if isinstance(data, dict) else None
        if not user_id:
            return None
        return Identity(id=str(user_id), email=data.get("email"))

    async def sign_out(self) -> None:
        try:
            if self.path.exists():
                await aiofiles.os.remove(self.path)
        except OSError as e:
            raise RemoteError(f"Cannot remove session file {self.path}: {e}") from e
