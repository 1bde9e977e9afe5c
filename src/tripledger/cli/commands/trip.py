"""Trip management commands."""

import click
from tripledger.cli.error_handling import handle_domain_error
from tripledger.domain.errors import DomainError, StoreError
from tripledger.domain.trip import TripService


@click.group()
def trip_group():
    """Manage trips."""
    pass


@trip_group.command("create")
@click.argument("name")
@click.option("--currency", default="USD", show_default=True, help="Three-letter trip currency")
@click.option("--owner", "owner_name", required=True, help="Owner display name")
@click.option("--email", "owner_email", required=True, help="Owner e-mail")
@click.pass_context
def create_trip(ctx, name: str, currency: str, owner_name: str, owner_email: str):
    """Create a trip and its owner."""
    service = TripService(ctx.obj["db"])

    try:
        trip, owner = service.create_trip(
            name=name, currency=currency, owner_name=owner_name, owner_email=owner_email.strip().lower()
        )
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created trip '{trip.name}' (ID: {trip.id}, currency: {trip.currency})")
    click.echo(f"  Owner: {owner.name} <{owner.email}> (member ID: {owner.id})")


@trip_group.command("show")
@click.argument("trip_id", type=int)
@click.pass_context
def show_trip(ctx, trip_id: int):
    """Show a trip and its members."""
    service = TripService(ctx.obj["db"])

    try:
        trip = service.get_trip(trip_id)
        members = service.list_members(trip_id)
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"{trip.name} (ID: {trip.id})")
    click.echo(f"  Currency: {trip.currency}")
    click.echo(f"  Created: {trip.created_at:%Y-%m-%d}")
    click.echo(f"  Members: {len(members)}")


def register_commands(cli):
    """Register trip commands with main CLI."""
    cli.add_command(trip_group, name="trip")
