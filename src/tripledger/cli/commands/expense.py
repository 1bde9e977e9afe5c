"""Expense commands."""

from decimal import Decimal

import click
from tripledger.cli.error_handling import handle_domain_error
from tripledger.cli.member_resolution import member_names, resolve_actor_or_exit, resolve_member_or_exit
from tripledger.domain.entities import ExpenseStatus, SplitPolicy
from tripledger.domain.errors import DomainError, StoreError
from tripledger.domain.splits import SplitService
from tripledger.utils.amount_parser import parse_amount, parse_share
from tripledger.utils.date_parser import parse_date

SPLIT_CHOICE = click.Choice([p.value for p in SplitPolicy], case_sensitive=False)
STATUS_CHOICE = click.Choice([s.value for s in ExpenseStatus], case_sensitive=False)


def split_options(func):
    """Options shared by every command that composes splits."""
    func = click.option(
        "--share",
        "shares",
        multiple=True,
        help="MEMBER=VALUE amount (custom) or percentage (percentage); repeatable",
    )(func)
    func = click.option(
        "--split", "policy", type=SPLIT_CHOICE, default="equal", show_default=True, help="Split policy"
    )(func)
    func = click.option(
        "--participant",
        "participants",
        multiple=True,
        help="Member e-mail or ID sharing the cost; repeatable (default: all members, or the --share members)",
    )(func)
    return func


def resolve_split_args(
    ctx: click.Context, trip_id: int, participants: tuple[str, ...], policy: str, shares: tuple[str, ...]
) -> tuple[list[int], SplitPolicy, dict[int, Decimal] | None]:
    """Turn CLI participant and share options into service arguments."""
    db = ctx.obj["db"]
    policy_value = SplitPolicy(policy.lower())

    share_map: dict[int, Decimal] = {}
    for share in shares:
        try:
            member_ref, value = parse_share(share)
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)
        share_map[resolve_member_or_exit(ctx, db, trip_id, member_ref)] = value

    if participants:
        participant_ids = [resolve_member_or_exit(ctx, db, trip_id, p) for p in participants]
    elif share_map:
        participant_ids = list(share_map)
    else:
        participant_ids = [m.id for m in db.list_members(trip_id)]

    if policy_value == SplitPolicy.EQUAL:
        return participant_ids, policy_value, None
    return participant_ids, policy_value, share_map


def echo_expense(expense, names: dict[int, str]) -> None:
    """Print an expense and its splits."""
    click.echo(f"  Amount: {expense.amount:,.2f} {expense.currency}")
    click.echo(f"  Paid by: {names.get(expense.paid_by, expense.paid_by)}")
    click.echo(f"  Split ({expense.split_policy.value}):")
    for split in expense.splits:
        marker = " (paid)" if split.paid else ""
        click.echo(f"    {names.get(split.member_id, split.member_id):<20} {split.amount:>12,.2f}{marker}")


@click.group()
def expense_group():
    """Record and manage expenses."""
    pass


@expense_group.command("add")
@click.argument("trip_id", type=int)
@click.argument("title")
@click.argument("amount")
@click.option("--paid-by", required=True, help="Member e-mail or ID who paid")
@split_options
@click.option("--category", help="Expense category")
@click.option("--status", type=STATUS_CHOICE, default="purchased", show_default=True, help="Purchase status")
@click.option("--date", "purchase_date", help="Purchase date (YYYY-MM-DD, 'today', 'yesterday')")
@click.option("--description", help="Expense description")
@click.pass_context
def add_expense(
    ctx,
    trip_id: int,
    title: str,
    amount: str,
    paid_by: str,
    participants: tuple[str, ...],
    policy: str,
    shares: tuple[str, ...],
    category: str | None,
    status: str,
    purchase_date: str | None,
    description: str | None,
):
    """Add an expense and split it among members.

    Examples:
        tripledger --as ana@example.com expense add 1 "Dinner" 300 --paid-by ana@example.com
        tripledger --as ana@example.com expense add 1 "Hotel" 250 --paid-by 1 --split custom --share 1=100 --share 2=150
    """
    db = ctx.obj["db"]
    service = SplitService(db)
    actor_id = resolve_actor_or_exit(ctx, trip_id)
    payer_id = resolve_member_or_exit(ctx, db, trip_id, paid_by)

    try:
        expense_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    parsed_date = None
    if purchase_date:
        try:
            parsed_date = parse_date(purchase_date)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    participant_ids, policy_value, share_map = resolve_split_args(ctx, trip_id, participants, policy, shares)

    try:
        expense = service.create_expense(
            trip_id=trip_id,
            actor_id=actor_id,
            title=title,
            amount=expense_amount,
            paid_by=payer_id,
            participant_ids=participant_ids,
            policy=policy_value,
            shares=share_map,
            status=ExpenseStatus(status.lower()),
            description=description,
            category=category,
            purchase_date=parsed_date,
        )
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created expense {expense.id}: {expense.title}")
    echo_expense(expense, member_names(db, trip_id))


@expense_group.command("split-cost")
@click.argument("activity_id", type=int)
@click.option("--paid-by", required=True, help="Member e-mail or ID who paid")
@split_options
@click.pass_context
def split_cost(ctx, activity_id: int, paid_by: str, participants, policy: str, shares):
    """Divide a planned activity's estimated cost among members."""
    db = ctx.obj["db"]
    service = SplitService(db)
    activity = db.get_activity(activity_id)
    if activity is None:
        click.echo(f"Error: Activity {activity_id} not found", err=True)
        ctx.exit(1)

    trip_id = activity.trip_id
    actor_id = resolve_actor_or_exit(ctx, trip_id)
    payer_id = resolve_member_or_exit(ctx, db, trip_id, paid_by)
    participant_ids, policy_value, share_map = resolve_split_args(ctx, trip_id, participants, policy, shares)

    try:
        expense = service.split_planned_cost(
            activity_id, actor_id, payer_id, participant_ids, policy_value, share_map
        )
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"Divided '{activity.title}' into expense {expense.id}")
    echo_expense(expense, member_names(db, trip_id))


@expense_group.command("resplit")
@click.argument("expense_id", type=int)
@split_options
@click.pass_context
def resplit_expense(ctx, expense_id: int, participants, policy: str, shares):
    """Replace the splits of an existing expense."""
    db = ctx.obj["db"]
    service = SplitService(db)
    existing = db.get_expense(expense_id)
    if existing is None:
        click.echo(f"Error: Expense {expense_id} not found", err=True)
        ctx.exit(1)

    trip_id = existing.trip_id
    actor_id = resolve_actor_or_exit(ctx, trip_id)
    participant_ids, policy_value, share_map = resolve_split_args(ctx, trip_id, participants, policy, shares)

    try:
        expense = service.replace_splits(expense_id, actor_id, participant_ids, policy_value, share_map)
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"Updated splits of expense {expense.id}: {expense.title}")
    echo_expense(expense, member_names(db, trip_id))


@expense_group.command("delete")
@click.argument("expense_id", type=int)
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_expense(ctx, expense_id: int, yes: bool):
    """Delete an expense or settlement."""
    db = ctx.obj["db"]
    service = SplitService(db)
    existing = db.get_expense(expense_id)
    if existing is None:
        click.echo(f"Error: Expense {expense_id} not found", err=True)
        ctx.exit(1)

    actor_id = resolve_actor_or_exit(ctx, existing.trip_id)
    if not yes and not click.confirm(f"Delete '{existing.title}' ({existing.amount:,.2f})?"):
        click.echo("Cancelled.")
        return

    try:
        service.delete_expense(expense_id, actor_id)
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"Deleted expense {expense_id}")


@expense_group.command("list")
@click.argument("trip_id", type=int)
@click.option("--settlements/--no-settlements", default=True, help="Include settlements (default: yes)")
@click.pass_context
def list_expenses(ctx, trip_id: int, settlements: bool):
    """List a trip's expenses, oldest first."""
    db = ctx.obj["db"]
    service = SplitService(db)
    actor_id = resolve_actor_or_exit(ctx, trip_id)

    try:
        expenses = service.list_expenses(trip_id, actor_id, include_settlements=settlements)
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    if not expenses:
        click.echo("No expenses found.")
        return

    names = member_names(db, trip_id)
    click.echo(f"\n{'ID':<6} {'Title':<30} {'Paid by':<20} {'Amount':>12}  Kind")
    click.echo("-" * 80)
    for e in expenses:
        kind = "settlement" if e.is_settlement else e.status.value
        click.echo(f"{e.id:<6} {e.title[:30]:<30} {names.get(e.paid_by, str(e.paid_by)):<20} {e.amount:>12,.2f}  {kind}")


def register_commands(cli):
    """Register expense commands with main CLI."""
    cli.add_command(expense_group, name="expense")
