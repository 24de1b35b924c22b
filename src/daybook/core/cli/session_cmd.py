"""daybook login / logout."""

from __future__ import annotations

import sys

import click

from daybook.core.exceptions import AuthenticationError, RemoteError
from daybook.core.utils.async_helpers import run_async_safely


@click.command()
@click.option("--user", "user_id", default=None, help="User id (local backend).")
@click.option("--email", default=None, help="Account email (supabase backend).")
@click.pass_obj
def login(config, user_id: str | None, email: str | None) -> None:
    """Sign in so entry commands know whose journal to use."""
    from daybook.core.cli.common import build_backend

    _, sessions = build_backend(config)
    try:
        if config.get("backend") == "supabase":
            email = email or click.prompt("Email")
            password = click.prompt("Password", hide_input=True)
            identity = run_async_safely(sessions.sign_in(email, password))
        else:
            user_id = user_id or click.prompt("User id")
            identity = run_async_safely(sessions.sign_in(user_id, email=email))
    except (AuthenticationError, RemoteError) as e:
        click.echo(f"Sign-in failed: {e}", err=True)
        sys.exit(1)
    click.echo(f"Signed in as {identity.email or identity.id}.")


@click.command()
@click.pass_obj
def logout(config) -> None:
    """End the current session."""
    from daybook.core.cli.common import build_dashboard
    from daybook.journal import AlwaysConfirm

    dashboard = build_dashboard(config, AlwaysConfirm())
    result = run_async_safely(dashboard.end_session())
    if result.error is not None:
        click.echo(f"Sign-out reported an error: {result.error}", err=True)
    click.echo("Signed out.")
