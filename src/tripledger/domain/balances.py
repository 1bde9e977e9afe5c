"""Balance calculation over a trip's ledger."""

import logging
from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Optional

from tripledger.database.base import Database
from tripledger.domain.authorization import Authorizer, MembershipAuthorizer
from tripledger.domain.entities import Balance, Expense
from tripledger.domain.errors import NotFoundError, trip_not_found

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


def calculate_balances(expenses: Iterable[Expense]) -> list[Balance]:
    """Derive per-member balances from expenses and their splits.

    total_paid and total_owed only count regular expenses. Settlement splits
    are folded in as net_settled: the member paying a settlement (negative
    split) gains the amount, the member receiving it loses it.

    Every member that appears as a payer or split participant is reported,
    whether or not they are still part of the trip. Results are ordered by
    member ID.
    """
    paid: dict[int, Decimal] = defaultdict(lambda: ZERO)
    owed: dict[int, Decimal] = defaultdict(lambda: ZERO)
    settled: dict[int, Decimal] = defaultdict(lambda: ZERO)
    active: set[int] = set()

    for expense in expenses:
        if expense.is_settlement:
            for split in expense.splits:
                settled[split.member_id] -= split.amount
                active.add(split.member_id)
            continue

        paid[expense.paid_by] += expense.amount
        active.add(expense.paid_by)
        for split in expense.splits:
            owed[split.member_id] += split.amount
            active.add(split.member_id)

    balances = []
    for member_id in sorted(active):
        total_paid = paid[member_id]
        total_owed = owed[member_id]
        net_settled = settled[member_id]
        balances.append(
            Balance(
                member_id=member_id,
                total_paid=total_paid,
                total_owed=total_owed,
                balance=total_paid - total_owed + net_settled,
                net_settled=net_settled,
            )
        )
    return balances


class BalanceService:
    """Service for computing member balances of a trip."""

    def __init__(self, db: Database, authorizer: Optional[Authorizer] = None):
        """Initialize balance service.

        Args:
            db: Database instance
            authorizer: Access checks, defaults to trip membership roles
        """
        self.db = db
        self.authorizer = authorizer or MembershipAuthorizer(db)

    def compute_balances(self, trip_id: int, actor_id: int) -> list[Balance]:
        """Compute balances from the committed ledger.

        Args:
            trip_id: Trip ID
            actor_id: Member requesting the balances

        Returns:
            One Balance per member with ledger activity

        Raises:
            NotFoundError: If the trip doesn't exist
            PermissionDenied: If the actor may not view the trip
            StoreUnavailable: If the ledger store cannot be read
        """
        if self.db.get_trip(trip_id) is None:
            raise NotFoundError(trip_not_found(trip_id))
        self.authorizer.require_view(trip_id, actor_id)
        return self.ledger_balances(trip_id)

    def ledger_balances(self, trip_id: int) -> list[Balance]:
        """Compute balances without access checks, for use inside other services."""
        expenses = self.db.list_expenses(trip_id)
        balances = calculate_balances(expenses)
        logger.debug(
            "Computed %d balances for trip %s from %d ledger entries",
            len(balances),
            trip_id,
            len(expenses),
        )
        return balances
