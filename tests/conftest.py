"""Shared test fixtures for daybook."""

from __future__ import annotations

import asyncio
import os
import tempfile
from datetime import UTC, date, datetime

import pytest

from daybook.core.exceptions import RemoteError
from daybook.journal import Dashboard, Identity, JournalEntry, NewEntry

TODAY = date(2026, 10, 19)


def _make_entry(entry_id: str, day: date, owner: str = "u1", content: str = "text", **kwargs) -> JournalEntry:
    return JournalEntry(id=entry_id, owner_id=owner, date=day, content=content, **kwargs)


class FakeEntryService:
    """In-memory backend that records every call.

    Set ``fail`` to a method name to make that method raise RemoteError, or
    ``hold`` to an asyncio.Event to park calls until the event is set.
    """

    def __init__(self, entries: dict[str, list[JournalEntry]] | None = None):
        self.entries = {k: list(v) for k, v in (entries or {}).items()}
        self.calls: list[tuple] = []
        self.fail: str | None = None
        self.hold: asyncio.Event | None = None
        self._next_id = 1

    async def _enter(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        if self.hold is not None:
            await self.hold.wait()
        if self.fail == name:
            raise RemoteError(f"{name} exploded")

    async def list_by_owner(self, owner_id: str) -> list[JournalEntry]:
        await self._enter("list_by_owner", owner_id)
        return list(self.entries.get(owner_id, []))

    async def insert(self, candidate: NewEntry) -> JournalEntry:
        await self._enter("insert", candidate)
        entry = JournalEntry(
            id=f"x{self._next_id}",
            owner_id=candidate.owner_id,
            date=candidate.date,
            content=candidate.content,
            title=candidate.title,
            is_public=candidate.is_public,
            created_at=datetime(2026, 10, 19, 12, 0, tzinfo=UTC),
        )
        self._next_id += 1
        self.entries.setdefault(candidate.owner_id, []).insert(0, entry)
        return entry

    async def delete_by_id(self, entry_id: str) -> None:
        await self._enter("delete_by_id", entry_id)
        for owned in self.entries.values():
            for i, entry in enumerate(owned):
                if entry.id == entry_id:
                    del owned[i]
                    return
        raise RemoteError(f"Entry not found: {entry_id}")


class FakeSessions:
    def __init__(self, identity: Identity | None = None):
        self.identity = identity
        self.sign_outs = 0
        self.fail_sign_out = False

    async def current_identity(self) -> Identity | None:
        return self.identity

    async def sign_out(self) -> None:
        self.sign_outs += 1
        if self.fail_sign_out:
            raise RemoteError("sign-out exploded")
        self.identity = None


class RecordingConfirmer:
    def __init__(self, answer: bool = True):
        self.answer = answer
        self.messages: list[str] = []

    def confirm(self, message: str) -> bool:
        self.messages.append(message)
        return self.answer


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as d:
        yield d


@pytest.fixture
def tmp_config_file(tmp_dir):
    """Create a temporary YAML config file pointing at a local backend in tmp_dir."""
    import yaml

    config_data = {
        "paths": {
            "data_dir": tmp_dir,
            "entries_dir": os.path.join(tmp_dir, "entries"),
        },
        "backend": "local",
        "local": {"session_file": os.path.join(tmp_dir, "session.json")},
    }
    config_path = os.path.join(tmp_dir, "config.yaml")
    with open(config_path, "w") as f:
        yaml.dump(config_data, f)
    return config_path


@pytest.fixture
def stored_entries():
    return [
        _make_entry("e3", date(2026, 10, 18), content="third"),
        _make_entry("e2", date(2026, 10, 12), content="second", title="Mid"),
        _make_entry("e1", date(2026, 10, 1), content="first"),
    ]


@pytest.fixture
def service(stored_entries):
    return FakeEntryService({"u1": stored_entries})


@pytest.fixture
def sessions():
    return FakeSessions(Identity(id="u1", email="u1@example.com"))


@pytest.fixture
def confirmer():
    return RecordingConfirmer(answer=True)


@pytest.fixture
def dashboard(service, sessions, confirmer):
    return Dashboard(service, sessions, confirmer, today=lambda: TODAY)


@pytest.fixture
def anonymous_sessions():
    """A session provider with nobody signed in."""
    return FakeSessions(None)


@pytest.fixture
def make_entry():
    """Factory for owned JournalEntry values: ``make_entry(id, day, owner="u1", ...)``."""
    return _make_entry


@pytest.fixture
def today():
    return TODAY
