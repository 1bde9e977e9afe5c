"""Main CLI entry point."""

import logging

import click
from tripledger.database.factories import create_database

# Import and register all commands at module level
from tripledger.cli.commands import (
    trip,
    member,
    activity,
    expense,
    ledger,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides TRIPLEDGER_DB_PATH environment variable)",
    envvar="TRIPLEDGER_DB_PATH",
)
@click.option(
    "--db-url",
    help="SQLAlchemy database URL; takes precedence over --db-path",
    envvar="TRIPLEDGER_DATABASE_URL",
)
@click.option(
    "--as",
    "actor",
    help="Acting member e-mail or ID",
    envvar="TRIPLEDGER_MEMBER",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    envvar="TRIPLEDGER_LOG_LEVEL",
    help="Logging level for ledger diagnostics (default: WARNING)",
)
@click.pass_context
def cli(ctx, db_path: str | None, db_url: str | None, actor: str | None, log_level: str):
    """Tripledger - shared expenses for collaborative trips.

    Record who paid for what, split costs among trip members, see who owes
    whom and record settlements.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj["actor"] = actor

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_database(database_url=db_url, database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
trip.register_commands(cli)
member.register_commands(cli)
activity.register_commands(cli)
expense.register_commands(cli)
ledger.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
