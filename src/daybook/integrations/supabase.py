"""Supabase backend — PostgREST for entries, GoTrue for the session.

Uses the public REST endpoints with the project's anon key plus the
signed-in user's bearer token, so row-level security on the table decides
what each user can see.  Requests go out through urllib on a worker
thread via ``asyncio.to_thread``.
"""

from __future__ import annotations

import asyncio
import json
import os
import urllib.error
import urllib.parse
import urllib.request
from pathlib import Path
from typing import Any

from loguru import logger

from daybook.core.exceptions import AuthenticationError, DataProcessingError, RemoteError
from daybook.journal.models import Identity, JournalEntry, NewEntry

DEFAULT_TABLE = "journal_entries"


class _RestClient:
    """Shared request plumbing for the REST and auth endpoints."""

    def __init__(self, url: str, api_key: str, *, timeout: int = 20):
        if not url or not api_key:
            raise ValueError("url and api_key are required")
        self.url = url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

    def _request(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        query: dict[str, Any] | None = None,
        payload: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        url = f"{self.url}/{path.lstrip('/')}"
        if query:
            url = f"{url}?{urllib.parse.urlencode(query, doseq=True)}"

        all_headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {token or self.api_key}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        all_headers.update(headers or {})
        data = json.dumps(payload).encode("utf-8") if payload is not None else None
        req = urllib.request.Request(url=url, method=method.upper(), data=data, headers=all_headers)

        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="ignore") if hasattr(e, "read") else ""
            if e.code in (401, 403):
                raise AuthenticationError(f"Supabase {e.code}: {body or e.reason}") from e
            raise RemoteError(f"Supabase {e.code}: {body or e.reason}") from e
        except urllib.error.URLError as e:
            raise RemoteError(f"Supabase request failed: {e}") from e

        if not raw:
            return None
        try:
            return json.loads(raw.decode("utf-8", errors="ignore"))
        except json.JSONDecodeError as e:
            raise RemoteError(f"Supabase returned invalid JSON: {e}") from e


class SupabaseAuth(_RestClient):
    """GoTrue-backed :class:`~daybook.journal.ports.SessionProvider`.

    The access token is cached in ``token_path`` (mode 0600) so separate CLI
    invocations share one session.
    """

    def __init__(self, url: str, api_key: str, token_path: str | Path, *, timeout: int = 20):
        super().__init__(url, api_key, timeout=timeout)
        self.token_path = Path(token_path).expanduser()

    @property
    def access_token(self) -> str | None:
        if not self.token_path.exists():
            return None
        try:
            data = json.loads(self.token_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable token cache {self.token_path}: {e}")
            return None
        token = data.get("access_token") if isinstance(data, dict) else None
        return token or None

    def _save_token(self, session: dict[str, Any]) -> None:
        self.token_path.parent.mkdir(parents=True, exist_ok=True)
        self.token_path.write_text(
            json.dumps({"access_token": session["access_token"], "refresh_token": session.get("refresh_token")}),
            encoding="utf-8",
        )
        os.chmod(self.token_path, 0o600)

    def _forget_token(self) -> None:
        try:
            self.token_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove token cache {self.token_path}: {e}")

    def sign_in_sync(self, email: str, password: str) -> Identity:
        session = self._request(
            "POST",
            "/auth/v1/token",
            query={"grant_type": "password"},
            payload={"email": email, "password": password},
        )
        if not isinstance(session, dict) or not session.get("access_token"):
            raise AuthenticationError("Supabase did not return an access token")
        self._save_token(session)
        user = session.get("user") or {}
        if not user.get("id"):
            raise AuthenticationError("Supabase session carries no user id")
        logger.info(f"Signed in as {user.get('email') or email}")
        return Identity(id=str(user.get("id", "")), email=user.get("email") or email)

    def current_identity_sync(self) -> Identity | None:
        token = self.access_token
        if not token:
            return None
        try:
            user = self._request("GET", "/auth/v1/user", token=token)
        except AuthenticationError:
            logger.info("Cached session is no longer valid")
            return None
        if not isinstance(user, dict) or not user.get("id"):
            return None
        return Identity(id=str(user["id"]), email=user.get("email"))

    def sign_out_sync(self) -> None:
        token = self.access_token
        try:
            if token:
                self._request("POST", "/auth/v1/logout", token=token)
        except AuthenticationError:
            logger.debug("Token already invalid at sign-out")
        finally:
            self._forget_token()

    async def sign_in(self, email: str, password: str) -> Identity:
        return await asyncio.to_thread(self.sign_in_sync, email, password)

    async def current_identity(self) -> Identity | None:
        return await asyncio.to_thread(self.current_identity_sync)

    async def sign_out(self) -> None:
        await asyncio.to_thread(self.sign_out_sync)


class SupabaseEntryService(_RestClient):
    """PostgREST-backed :class:`~daybook.journal.ports.RemoteEntryService`."""

    def __init__(
        self,
        url: str,
        api_key: str,
        auth: SupabaseAuth,
        *,
        table: str = DEFAULT_TABLE,
        timeout: int = 20,
    ):
        super().__init__(url, api_key, timeout=timeout)
        self.auth = auth
        self.table = table

    def _table_request(self, method: str, **kwargs: Any) -> Any:
        try:
            return self._request(method, f"/rest/v1/{self.table}", token=self.auth.access_token, **kwargs)
        except AuthenticationError as e:
            raise RemoteError(str(e)) from e

    @staticmethod
    def _rows(result: Any) -> list[dict[str, Any]]:
        if result is None:
            return []
        if not isinstance(result, list):
            raise RemoteError(f"Expected a list of rows, got {type(result).__name__}")
        return result

    @staticmethod
    def _entries(rows: list[dict[str, Any]]) -> list[JournalEntry]:
        try:
            return [JournalEntry.from_record(r) for r in rows]
        except DataProcessingError as e:
            raise RemoteError(str(e)) from e

    def list_by_owner_sync(self, owner_id: str) -> list[JournalEntry]:
        rows = self._rows(
            self._table_request(
                "GET",
                query={"select": "*", "user_id": f"eq.{owner_id}", "order": "date.desc"},
            )
        )
        return self._entries(rows)

    def insert_sync(self, candidate: NewEntry) -> JournalEntry:
        rows = self._rows(
            self._table_request(
                "POST",
                payload=[candidate.to_record()],
                headers={"Prefer": "return=representation"},
            )
        )
        if not rows:
            raise RemoteError("Insert returned no row")
        return self._entries(rows[:1])[0]

    def delete_by_id_sync(self, entry_id: str) -> None:
        rows = self._rows(
            self._table_request(
                "DELETE",
                query={"id": f"eq.{entry_id}"},
                headers={"Prefer": "return=representation"},
            )
        )
        if not rows:
            raise RemoteError(f"Entry not found: {entry_id}")

    async def list_by_owner(self, owner_id: str) -> list[JournalEntry]:
        return await asyncio.to_thread(self.list_by_owner_sync, owner_id)

    async def insert(self, candidate: NewEntry) -> JournalEntry:
        return await asyncio.to_thread(self.insert_sync, candidate)

    async def delete_by_id(self, entry_id: str) -> None:
        await asyncio.to_thread(self.delete_by_id_sync, entry_id)
