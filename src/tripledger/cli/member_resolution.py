"""CLI helpers for member resolution and error handling."""

from __future__ import annotations

import click
from tripledger.database.base import Database
from tripledger.utils.member_resolver import resolve_member


def resolve_member_or_exit(ctx: click.Context, db: Database, trip_id: int, member: str | int) -> int:
    """Resolve member e-mail or ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return resolve_member(db, trip_id, member)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def resolve_actor_or_exit(ctx: click.Context, trip_id: int) -> int:
    """Resolve the acting member given with --as for a trip."""
    actor = ctx.obj.get("actor")
    if not actor:
        click.echo("Error: No acting member given; use --as or TRIPLEDGER_MEMBER", err=True)
        ctx.exit(1)
    return resolve_member_or_exit(ctx, ctx.obj["db"], trip_id, actor)


def member_names(db: Database, trip_id: int) -> dict[int, str]:
    """Map member IDs of a trip, including removed members, to display names."""
    return {m.id: m.name for m in db.list_members(trip_id, include_inactive=True)}
