"""Tests for daybook.integrations.local."""

import json
from datetime import date

import pytest

from daybook.core.exceptions import RemoteError
from daybook.integrations.local import LocalEntryService, LocalSessionProvider
from daybook.journal import AlwaysConfirm, Dashboard, NewEntry, Outcome


@pytest.fixture
def sessions(tmp_path):
    return LocalSessionProvider(tmp_path / "session.json")


@pytest.fixture
def service(tmp_path, sessions):
    return LocalEntryService(base_path=tmp_path / "entries", sessions=sessions)


@pytest.fixture
async def signed_in(sessions):
    await sessions.sign_in("u1")
    return sessions


def _candidate(day: date, content: str = "hello", owner: str = "u1", **kwargs) -> NewEntry:
    return NewEntry(owner_id=owner, date=day, content=content, **kwargs)


@pytest.mark.usefixtures("signed_in")
class TestLocalEntryService:
    @pytest.mark.asyncio
    async def test_insert_assigns_id_and_created_at(self, service):
        entry = await service.insert(_candidate(date(2026, 10, 19)))
        assert entry.id
        assert entry.created_at is not None
        assert entry.owner_id == "u1"

    @pytest.mark.asyncio
    async def test_list_orders_by_date_descending(self, service):
        await service.insert(_candidate(date(2026, 10, 1), "first"))
        await service.insert(_candidate(date(2026, 10, 19), "third"))
        await service.insert(_candidate(date(2026, 10, 5), "second"))

        entries = await service.list_by_owner("u1")
        assert [e.content for e in entries] == ["third", "second", "first"]

    @pytest.mark.asyncio
    async def test_same_date_newest_first(self, service):
        await service.insert(_candidate(date(2026, 10, 19), "morning"))
        await service.insert(_candidate(date(2026, 10, 19), "evening"))
        entries = await service.list_by_owner("u1")
        assert [e.content for e in entries] == ["evening", "morning"]

    @pytest.mark.asyncio
    async def test_delete(self, service):
        entry = await service.insert(_candidate(date(2026, 10, 19)))
        await service.delete_by_id(entry.id)
        assert await service.list_by_owner("u1") == []

    @pytest.mark.asyncio
    async def test_delete_missing_raises(self, service):
        with pytest.raises(RemoteError, match="not found"):
            await service.delete_by_id("ghost")

    @pytest.mark.asyncio
    async def test_unsafe_owner_rejected(self, service):
        with pytest.raises(RemoteError, match="Unsafe"):
            await service.list_by_owner("../etc")

    @pytest.mark.asyncio
    async def test_corrupt_file_is_remote_error(self, service):
        (service.base_path / "u1.json").write_text("{not json")
        with pytest.raises(RemoteError):
            await service.list_by_owner("u1")

    @pytest.mark.asyncio
    async def test_file_holds_wire_records(self, service):
        await service.insert(NewEntry(owner_id="u1", date=date(2026, 10, 19), content="x", title=None))
        records = json.loads((service.base_path / "u1.json").read_text())
        assert records[0]["user_id"] == "u1"
        assert records[0]["title"] is None
        assert records[0]["date"] == "2026-10-19"


class TestOwnerAccess:
    @pytest.mark.asyncio
    async def test_requires_session(self, service):
        with pytest.raises(RemoteError, match="Not signed in"):
            await service.list_by_owner("u1")
        with pytest.raises(RemoteError, match="Not signed in"):
            await service.delete_by_id("anything")

    @pytest.mark.asyncio
    async def test_insert_for_someone_else_refused(self, service, sessions):
        await sessions.sign_in("u1")
        with pytest.raises(RemoteError, match="signed in as u1"):
            await service.insert(_candidate(date(2026, 10, 19), owner="u2"))
        assert not (service.base_path / "u2.json").exists()

    @pytest.mark.asyncio
    async def test_other_owners_list_shows_only_public(self, service, sessions):
        await sessions.sign_in("u2")
        await service.insert(_candidate(date(2026, 10, 19), "private", owner="u2"))
        await service.insert(_candidate(date(2026, 10, 18), "shared", owner="u2", is_public=True))

        await sessions.sign_in("u1")
        assert [e.content for e in await service.list_by_owner("u2")] == ["shared"]
        assert await service.list_by_owner("u1") == []
        assert await service.list_by_owner("nobody") == []

    @pytest.mark.asyncio
    async def test_cannot_delete_another_owners_entry(self, service, sessions):
        await sessions.sign_in("u2")
        theirs = await service.insert(_candidate(date(2026, 10, 19), owner="u2", is_public=True))

        await sessions.sign_in("u1")
        with pytest.raises(RemoteError, match="not found"):
            await service.delete_by_id(theirs.id)

        await sessions.sign_in("u2")
        assert [e.id for e in await service.list_by_owner("u2")] == [theirs.id]


class TestLocalSessionProvider:
    @pytest.mark.asyncio
    async def test_no_session_file(self, sessions):
        assert await sessions.current_identity() is None

    @pytest.mark.asyncio
    async def test_sign_in_and_out(self, sessions):
        await sessions.sign_in("u1", email="u1@example.com")
        identity = await sessions.current_identity()
        assert identity.id == "u1"
        assert identity.email == "u1@example.com"

        await sessions.sign_out()
        assert await sessions.current_identity() is None

    @pytest.mark.asyncio
    async def test_sign_out_without_session(self, sessions):
        await sessions.sign_out()

    @pytest.mark.asyncio
    async def test_garbage_session_file(self, sessions):
        sessions.path.write_text("[]")
        assert await sessions.current_identity() is None


class TestDashboardOnLocalBackend:
    @pytest.mark.asyncio
    async def test_full_cycle(self, service, sessions):
        await sessions.sign_in("u1")
        dash = Dashboard(service, sessions, AlwaysConfirm(), today=lambda: date(2026, 10, 19))
        assert (await dash.activate()).ok

        dash.form.content = "Hello"
        created = await dash.create()
        assert created.ok
        assert [e.id for e in dash.entries] == [created.entry.id]

        reloaded = Dashboard(service, sessions, AlwaysConfirm())
        await reloaded.activate()
        assert reloaded.entries == dash.entries

        assert (await dash.delete(created.entry.id)).ok
        assert dash.entries == []
        assert await service.list_by_owner("u1") == []

    @pytest.mark.asyncio
    async def test_delete_of_another_owners_entry_fails(self, service, sessions):
        await sessions.sign_in("u2")
        theirs = await service.insert(_candidate(date(2026, 10, 19), owner="u2"))

        await sessions.sign_in("u1")
        dash = Dashboard(service, sessions, AlwaysConfirm())
        await dash.activate()
        result = await dash.delete(theirs.id)

        assert result.status is Outcome.FAILED
        assert "not found" in str(result.error)
        assert (service.base_path / "u2.json").exists()
        assert theirs.id in (service.base_path / "u2.json").read_text()
