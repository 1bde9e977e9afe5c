"""Planned activity commands."""

import click
from tripledger.cli.error_handling import handle_domain_error
from tripledger.cli.member_resolution import resolve_actor_or_exit
from tripledger.domain.errors import DomainError, StoreError
from tripledger.domain.trip import TripService
from tripledger.utils.amount_parser import parse_amount


@click.group()
def activity_group():
    """Manage planned activities."""
    pass


@activity_group.command("add")
@click.argument("trip_id", type=int)
@click.argument("title")
@click.option("--cost", default="0", help="Estimated cost (e.g., 120.00)")
@click.option("--description", help="Activity description")
@click.pass_context
def add_activity(ctx, trip_id: int, title: str, cost: str, description: str | None):
    """Add a planned activity with an estimated cost."""
    service = TripService(ctx.obj["db"])
    actor_id = resolve_actor_or_exit(ctx, trip_id)

    try:
        estimated_cost = parse_amount(cost)
    except ValueError as e:
        click.echo(f"Error: Invalid cost: {e}", err=True)
        ctx.exit(1)

    try:
        activity = service.add_activity(trip_id, actor_id, title, estimated_cost, description)
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created activity '{activity.title}' (ID: {activity.id}, estimated: {activity.estimated_cost:,.2f})")


@activity_group.command("list")
@click.argument("trip_id", type=int)
@click.pass_context
def list_activities(ctx, trip_id: int):
    """List planned activities."""
    service = TripService(ctx.obj["db"])
    actor_id = resolve_actor_or_exit(ctx, trip_id)

    try:
        activities = service.list_activities(trip_id, actor_id)
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    if not activities:
        click.echo("No activities found.")
        return

    for a in activities:
        click.echo(f"{a.id:<6} {a.title:<30} {a.estimated_cost:>12,.2f}")


def register_commands(cli):
    """Register activity commands with main CLI."""
    cli.add_command(activity_group, name="activity")
