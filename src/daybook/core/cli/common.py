"""Shared setup logic for CLI commands."""

from __future__ import annotations

import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

import click
import pydantic

from daybook.core.config import Config
from daybook.core.exceptions import ConfigurationError
from daybook.core.utils.async_helpers import run_async_safely
from daybook.journal import CommandResult, Confirmer, Dashboard, JournalEntry, Outcome, local_today

DAYBOOK_DIR = Path.home() / ".daybook"
DEFAULT_CONFIG_PATH = DAYBOOK_DIR / "config.yaml"

NOT_SIGNED_IN = "Not signed in. Run 'daybook login' first."


def load_config(config_path: str | None = None) -> Config:
    """Load and validate config; invalid settings end the command."""
    try:
        config = Config(config_file=config_path or str(DEFAULT_CONFIG_PATH), data_dir=str(DAYBOOK_DIR))
        config.validated()
    except (ConfigurationError, pydantic.ValidationError) as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(2)
    return config


def build_backend(config: Config) -> tuple[Any, Any]:
    """Return ``(entry_service, session_provider)`` for the configured backend."""
    settings = config.validated()
    if settings.backend == "supabase":
        from daybook.integrations.supabase import SupabaseAuth, SupabaseEntryService

        sb = settings.supabase
        token_file = sb.token_file or Path(config.get_data_dir()) / "supabase-session.json"
        auth = SupabaseAuth(sb.url, sb.api_key, token_file, timeout=sb.timeout)
        service = SupabaseEntryService(sb.url, sb.api_key, auth, table=sb.table, timeout=sb.timeout)
        return service, auth

    from daybook.integrations.local import LocalEntryService, LocalSessionProvider

    entries_dir = settings.paths.entries_dir or settings.paths.data_dir / "entries"
    session_file = settings.local.session_file or settings.paths.data_dir / "session.json"
    sessions = LocalSessionProvider(session_file)
    return LocalEntryService(entries_dir, sessions), sessions


def build_dashboard(config: Config, confirmer: Confirmer) -> Dashboard:
    settings = config.validated()
    service, sessions = build_backend(config)
    timezone = settings.journal.timezone or None
    return Dashboard(
        service,
        sessions,
        confirmer,
        policy=settings.journal.insert_policy,
        today=lambda: local_today(timezone),
    )


def run_on_dashboard(
    dashboard: Dashboard,
    action: Callable[[Dashboard], Awaitable[CommandResult]] | None = None,
) -> CommandResult:
    """Activate the dashboard, then run ``action`` if the session is usable.

    Exits with status 1 when there is no session or a command fails.
    """

    async def _go() -> CommandResult:
        result = await dashboard.activate()
        if result.ok and action is not None:
            result = await action(dashboard)
        return result

    result = run_async_safely(_go())
    if result.status is Outcome.UNAUTHENTICATED:
        click.echo(NOT_SIGNED_IN, err=True)
        sys.exit(1)
    if result.status in (Outcome.FAILED, Outcome.INVALID):
        click.echo(f"Error: {result.error}", err=True)
        sys.exit(1)
    return result


def format_entry(entry: JournalEntry) -> str:
    d = entry.date
    visibility = "Public" if entry.is_public else "Private"
    header = f"{d:%A, %B} {d.day}, {d.year}  [{visibility}]  {entry.id}"
    lines = [header]
    if entry.title:
        lines.append(click.style(entry.title, bold=True))
    lines.append(entry.content)
    return "\n".join(lines)
