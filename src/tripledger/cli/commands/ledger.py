"""Balance, debt, settlement and history commands."""

import click
from tripledger.cli.error_handling import handle_domain_error
from tripledger.cli.member_resolution import member_names, resolve_actor_or_exit, resolve_member_or_exit
from tripledger.domain.balances import BalanceService
from tripledger.domain.breakdown import BreakdownService
from tripledger.domain.debts import resolve_debts
from tripledger.domain.errors import DomainError, StoreError
from tripledger.domain.settlement import SettlementService
from tripledger.utils.amount_parser import parse_amount


@click.command("balances")
@click.argument("trip_id", type=int)
@click.pass_context
def show_balances(ctx, trip_id: int):
    """Show what each member paid, owes and their net balance."""
    db = ctx.obj["db"]
    actor_id = resolve_actor_or_exit(ctx, trip_id)

    try:
        balances = BalanceService(db).compute_balances(trip_id, actor_id)
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    if not balances:
        click.echo("No expenses recorded yet.")
        return

    names = member_names(db, trip_id)
    click.echo(f"\n{'Member':<20} {'Paid':>12} {'Owes':>12} {'Settled':>12} {'Balance':>12}")
    click.echo("-" * 72)
    for b in balances:
        click.echo(
            f"{names.get(b.member_id, str(b.member_id)):<20} {b.total_paid:>12,.2f} "
            f"{b.total_owed:>12,.2f} {b.net_settled:>12,.2f} {b.balance:>12,.2f}"
        )


@click.command("debts")
@click.argument("trip_id", type=int)
@click.pass_context
def show_debts(ctx, trip_id: int):
    """Show who should pay whom to settle the trip."""
    db = ctx.obj["db"]
    actor_id = resolve_actor_or_exit(ctx, trip_id)

    try:
        debts = resolve_debts(BalanceService(db).compute_balances(trip_id, actor_id))
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    if not debts:
        click.echo("Everyone is settled up.")
        return

    names = member_names(db, trip_id)
    for d in debts:
        click.echo(f"{names.get(d.from_member, d.from_member)} owes {names.get(d.to_member, d.to_member)} {d.amount:,.2f}")


@click.command("settle")
@click.argument("trip_id", type=int)
@click.option("--from", "from_member", required=True, help="Member e-mail or ID who pays")
@click.option("--to", "to_member", required=True, help="Member e-mail or ID who receives")
@click.option("--amount", help="Partial amount (default: the whole debt)")
@click.pass_context
def settle(ctx, trip_id: int, from_member: str, to_member: str, amount: str | None):
    """Record a payment between two members."""
    db = ctx.obj["db"]
    actor_id = resolve_actor_or_exit(ctx, trip_id)
    from_id = resolve_member_or_exit(ctx, db, trip_id, from_member)
    to_id = resolve_member_or_exit(ctx, db, trip_id, to_member)
    service = SettlementService(db)

    try:
        debts = resolve_debts(BalanceService(db).compute_balances(trip_id, actor_id))
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    debt = next((d for d in debts if d.from_member == from_id and d.to_member == to_id), None)
    if debt is None:
        click.echo(f"Error: Member {from_id} has no outstanding debt to member {to_id}", err=True)
        ctx.exit(1)

    try:
        payment = debt.amount if amount is None else parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        settlement = service.record_settlement(debt, payment, actor_id)
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    remaining = debt.amount - settlement.amount
    click.echo(f"Recorded settlement {settlement.expense_id}: {settlement.amount:,.2f}")
    if remaining > 0:
        click.echo(f"  Remaining debt: {remaining:,.2f}")


@click.command("history")
@click.argument("trip_id", type=int)
@click.pass_context
def history(ctx, trip_id: int):
    """Show the expense history with running balances."""
    db = ctx.obj["db"]
    actor_id = resolve_actor_or_exit(ctx, trip_id)

    try:
        report = BreakdownService(db).build_report(trip_id, actor_id)
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    names = member_names(db, trip_id)
    currency = report.trip.currency
    click.echo(f"\n{report.trip.name}: {report.total_expenses:,.2f} {currency} spent, "
               f"{report.total_settled:,.2f} {currency} settled")

    if not report.history:
        click.echo("No expenses recorded yet.")
        return

    for entry in report.history:
        expense = entry.expense
        click.echo(f"\n{expense.created_at:%Y-%m-%d %H:%M}  {expense.title}  {expense.amount:,.2f}")
        for position in entry.positions:
            change = entry.impact.get(position.member_id)
            change_str = f"{change:+,.2f}" if change is not None else ""
            click.echo(
                f"  {names.get(position.member_id, str(position.member_id)):<20} "
                f"{change_str:>12} {position.balance:>12,.2f}"
            )

    if report.category_totals:
        click.echo("\nBy category:")
        for name, total in report.category_totals.items():
            click.echo(f"  {name:<20} {total:>12,.2f}")
    if report.status_totals:
        click.echo("\nBy status:")
        for name, total in report.status_totals.items():
            click.echo(f"  {name:<20} {total:>12,.2f}")


def register_commands(cli):
    """Register ledger commands with main CLI."""
    cli.add_command(show_balances)
    cli.add_command(show_debts)
    cli.add_command(settle)
    cli.add_command(history)
