"""Breakdown report domain service."""

from collections import defaultdict
from decimal import Decimal
from itertools import groupby
from typing import Optional, Sequence

from tripledger.database.base import Database
from tripledger.domain.authorization import Authorizer, MembershipAuthorizer
from tripledger.domain.balances import calculate_balances
from tripledger.domain.debts import resolve_debts
from tripledger.domain.entities import (
    BreakdownReport,
    Expense,
    HistoryEntry,
    MemberPosition,
)
from tripledger.domain.errors import NotFoundError, trip_not_found
from tripledger.domain.settlement import settlement_from_expense

ZERO = Decimal("0.00")
UNCATEGORIZED = "Uncategorized"


def expense_impact(expense: Expense) -> dict[int, Decimal]:
    """Net effect of one expense on each member's balance.

    The payer gains the amount minus their own share; every other
    participant loses their share.
    """
    impact: dict[int, Decimal] = defaultdict(lambda: ZERO)
    impact[expense.paid_by] += expense.amount
    for split in expense.splits:
        impact[split.member_id] -= split.amount
    return dict(impact)


def build_history(expenses: Sequence[Expense]) -> list[HistoryEntry]:
    """Replay regular expenses in order, recording cumulative positions.

    Settlements are skipped. Each entry's positions include every expense
    created at or before it, so expenses sharing a timestamp report the same
    positions. Positions cover every member seen so far, ordered by member ID.
    Expenses are expected in (created_at, id) order, as the store lists them.
    """
    paid: dict[int, Decimal] = defaultdict(lambda: ZERO)
    owed: dict[int, Decimal] = defaultdict(lambda: ZERO)
    history = []

    regular = [expense for expense in expenses if not expense.is_settlement]
    for _, group in groupby(regular, key=lambda expense: expense.created_at):
        group = list(group)
        for expense in group:
            paid[expense.paid_by] += expense.amount
            owed.setdefault(expense.paid_by, ZERO)
            for split in expense.splits:
                owed[split.member_id] += split.amount
                paid.setdefault(split.member_id, ZERO)

        positions = tuple(
            MemberPosition(member_id=member_id, paid=paid[member_id], owed=owed[member_id])
            for member_id in sorted(paid)
        )
        history.extend(
            HistoryEntry(expense=expense, impact=expense_impact(expense), positions=positions)
            for expense in group
        )

    return history


def totals_by(expenses: Sequence[Expense], key) -> dict[str, Decimal]:
    """Sum regular expense amounts grouped by ``key(expense)``."""
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for expense in expenses:
        if not expense.is_settlement:
            totals[key(expense)] += expense.amount
    return dict(sorted(totals.items()))


class BreakdownService:
    """Service for building the trip expense breakdown."""

    def __init__(self, db: Database, authorizer: Optional[Authorizer] = None):
        """Initialize breakdown service.

        Args:
            db: Database instance
            authorizer: Access checks, defaults to trip membership roles
        """
        self.db = db
        self.authorizer = authorizer or MembershipAuthorizer(db)

    def build_report(self, trip_id: int, actor_id: int) -> BreakdownReport:
        """Build the breakdown report for a trip.

        Args:
            trip_id: Trip ID
            actor_id: Member requesting the report

        Returns:
            BreakdownReport with history, balances, debts and totals

        Raises:
            NotFoundError: If the trip doesn't exist
            PermissionDenied: If the actor may not view the trip
        """
        trip = self.db.get_trip(trip_id)
        if trip is None:
            raise NotFoundError(trip_not_found(trip_id))
        self.authorizer.require_view(trip_id, actor_id)

        expenses = self.db.list_expenses(trip_id)
        balances = calculate_balances(expenses)
        settlements = [settlement_from_expense(e) for e in expenses if e.is_settlement]

        return BreakdownReport(
            trip=trip,
            history=tuple(build_history(expenses)),
            balances=tuple(balances),
            debts=tuple(resolve_debts(balances)),
            category_totals=totals_by(expenses, lambda e: e.category or UNCATEGORIZED),
            status_totals=totals_by(expenses, lambda e: e.status.value),
            total_expenses=sum((e.amount for e in expenses if not e.is_settlement), ZERO),
            total_settled=sum((s.amount for s in settlements), ZERO),
            settlements=tuple(settlements),
        )
