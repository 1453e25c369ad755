"""``flask seed`` commands loading demo accounts and ad placements."""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext

from adgate.core.extensions import db
from adgate.seeds import seed_data

LOGGER = logging.getLogger(__name__)


def _set_verbosity(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    for name in (__name__, seed_data.__name__):
        logging.getLogger(name).setLevel(level)


def _print_summary(summary: dict[str, dict[str, int]]) -> None:
    """Echo one ``created``/``existing`` line per seeded table."""
    if not summary:
        click.echo("Nothing seeded.")
        return
    click.echo("Seeded:")
    width = max(len(table) for table in summary)
    for table in sorted(summary):
        counts = summary[table]
        click.echo(
            f"  {table:<{width}}  created={counts.get('created', 0):>2}"
            f"  existing={counts.get('existing', 0):>2}"
        )


def _refuse_in_production() -> None:
    """Stop schema-dropping commands outside development and testing."""
    cfg = current_app.config
    if cfg.get("TESTING") or cfg.get("DEBUG"):
        return
    if str(cfg.get("APP_ENV", "production")).lower() not in {"development", "testing"}:
        raise click.UsageError("'flask seed fresh' only runs in development or testing.")


def _run_seeders(verbose: bool, failure: str) -> None:
    try:
        summary = seed_data.run_all(db, verbose=verbose)
    except Exception as exc:  # pragma: no cover - CLI safeguard
        db.session.rollback()
        raise click.ClickException(f"{failure}: {exc}") from exc
    _print_summary(summary)


@click.group("seed")
@click.option("--verbose", is_flag=True, help="Log every seeding step.")
@click.pass_context
def seed_cli(ctx: click.Context, verbose: bool) -> None:
    """Load demo users (one per subscription state) and ad placements."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    _set_verbosity(verbose)


@seed_cli.command("run")
@click.pass_context
@with_appcontext
def run_command(ctx: click.Context) -> None:
    """Insert missing demo rows; existing rows are refreshed, never duplicated."""
    _run_seeders(bool(ctx.obj.get("verbose")), "Seeding failed")


@seed_cli.command("fresh")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_context
@with_appcontext
def fresh_command(ctx: click.Context, yes: bool) -> None:
    """Recreate every table, then seed."""
    _refuse_in_production()
    if not yes:
        click.confirm("Drop and recreate all tables?", abort=True)
    LOGGER.info("seed.fresh.reset_schema")
    db.session.remove()
    db.drop_all()
    db.create_all()
    _run_seeders(bool(ctx.obj.get("verbose")), "Fresh seed failed")
