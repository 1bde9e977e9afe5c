"""Member management commands."""

import click
from tripledger.cli.error_handling import handle_domain_error
from tripledger.cli.member_resolution import resolve_actor_or_exit, resolve_member_or_exit
from tripledger.domain.entities import MemberRole
from tripledger.domain.errors import DomainError, StoreError
from tripledger.domain.trip import TripService

ROLE_CHOICE = click.Choice([role.value for role in MemberRole], case_sensitive=False)


@click.group()
def member_group():
    """Manage trip members."""
    pass


@member_group.command("add")
@click.argument("trip_id", type=int)
@click.argument("name")
@click.argument("email")
@click.option("--role", type=ROLE_CHOICE, default="editor", show_default=True, help="Member role")
@click.pass_context
def add_member(ctx, trip_id: int, name: str, email: str, role: str):
    """Add a member to a trip."""
    service = TripService(ctx.obj["db"])
    actor_id = resolve_actor_or_exit(ctx, trip_id)

    try:
        member = service.add_member(trip_id, actor_id, name=name, email=email, role=MemberRole(role.lower()))
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"Added {member.name} <{member.email}> as {member.role.value} (member ID: {member.id})")


@member_group.command("list")
@click.argument("trip_id", type=int)
@click.option("--all", "include_inactive", is_flag=True, help="Include removed members")
@click.pass_context
def list_members(ctx, trip_id: int, include_inactive: bool):
    """List members of a trip."""
    service = TripService(ctx.obj["db"])

    try:
        members = service.list_members(trip_id, include_inactive=include_inactive)
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    if not members:
        click.echo("No members found.")
        return

    click.echo(f"\n{'ID':<6} {'Name':<20} {'E-mail':<30} {'Role':<8}")
    click.echo("-" * 66)
    for m in members:
        suffix = "" if m.active else " (removed)"
        click.echo(f"{m.id:<6} {m.name:<20} {m.email:<30} {m.role.value:<8}{suffix}")


@member_group.command("role")
@click.argument("trip_id", type=int)
@click.argument("member")
@click.argument("role", type=ROLE_CHOICE)
@click.pass_context
def change_role(ctx, trip_id: int, member: str, role: str):
    """Change a member's role."""
    db = ctx.obj["db"]
    service = TripService(db)
    actor_id = resolve_actor_or_exit(ctx, trip_id)
    member_id = resolve_member_or_exit(ctx, db, trip_id, member)

    try:
        updated = service.change_role(member_id, actor_id, MemberRole(role.lower()))
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"{updated.name} is now {updated.role.value}")


@member_group.command("remove")
@click.argument("trip_id", type=int)
@click.argument("member")
@click.pass_context
def remove_member(ctx, trip_id: int, member: str):
    """Remove a member from a trip. Their expenses stay in the ledger."""
    db = ctx.obj["db"]
    service = TripService(db)
    actor_id = resolve_actor_or_exit(ctx, trip_id)
    member_id = resolve_member_or_exit(ctx, db, trip_id, member)

    try:
        service.remove_member(member_id, actor_id)
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"Removed member {member_id} from trip {trip_id}")


def register_commands(cli):
    """Register member commands with main CLI."""
    cli.add_command(member_group, name="member")
