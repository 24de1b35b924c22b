"""Tests for daybook.journal.gate."""

import pytest

from daybook.core.exceptions import RemoteError, Unauthenticated
from daybook.journal.gate import SessionGate


class TestSessionGate:
    @pytest.mark.asyncio
    async def test_require_returns_identity(self, sessions):
        identity = await SessionGate(sessions).require()
        assert identity.id == "u1"

    @pytest.mark.asyncio
    async def test_require_without_session_raises(self, anonymous_sessions):
        gate = SessionGate(anonymous_sessions)
        with pytest.raises(Unauthenticated):
            await gate.require()

    @pytest.mark.asyncio
    async def test_resolve_without_session_is_none(self, anonymous_sessions):
        assert await SessionGate(anonymous_sessions).resolve() is None

    @pytest.mark.asyncio
    async def test_provider_failure_is_remote_error(self, sessions, monkeypatch):
        async def broken():
            raise ConnectionError("auth server down")

        monkeypatch.setattr(sessions, "current_identity", broken)
        with pytest.raises(RemoteError, match="auth server down"):
            await SessionGate(sessions).require()
