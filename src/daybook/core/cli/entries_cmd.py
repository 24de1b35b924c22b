"""daybook list / new / delete."""

from __future__ import annotations

import click


@click.command("list")
@click.pass_obj
def list_entries(config) -> None:
    """Show your entries, most recent first."""
    from daybook.core.cli.common import build_dashboard, format_entry, run_on_dashboard
    from daybook.journal import AlwaysConfirm

    dashboard = build_dashboard(config, AlwaysConfirm())
    run_on_dashboard(dashboard)

    entries = dashboard.entries
    click.echo(f"Your Entries ({len(entries)})")
    if not entries:
        click.echo("No entries yet. Create your first one with 'daybook new'.")
        return
    for entry in entries:
        click.echo("")
        click.echo(format_entry(entry))


@click.command()
@click.argument("content")
@click.option("--title", default="", help="Optional title.")
@click.option("--public", "is_public", is_flag=True, help="Make the entry public.")
@click.pass_obj
def new(config, content: str, title: str, is_public: bool) -> None:
    """Write a new entry dated today."""
    from daybook.core.cli.common import build_dashboard, run_on_dashboard
    from daybook.journal import AlwaysConfirm

    dashboard = build_dashboard(config, AlwaysConfirm())
    dashboard.form.title = title
    dashboard.form.content = content
    dashboard.form.is_public = is_public

    result = run_on_dashboard(dashboard, lambda d: d.create())
    click.echo(f"Created entry {result.entry.id}.")


@click.command()
@click.argument("entry_id")
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt.")
@click.pass_obj
def delete(config, entry_id: str, yes: bool) -> None:
    """Delete one entry by id."""
    from daybook.core.cli.common import build_dashboard, run_on_dashboard
    from daybook.journal import AlwaysConfirm, CallbackConfirmer, Outcome

    confirmer = AlwaysConfirm() if yes else CallbackConfirmer(lambda msg: click.confirm(msg, default=False))
    dashboard = build_dashboard(config, confirmer)

    result = run_on_dashboard(dashboard, lambda d: d.delete(entry_id))
    if result.status is Outcome.DECLINED:
        click.echo("Nothing deleted.")
        return
    click.echo(f"Deleted entry {entry_id}.")
