"""Settlement recording."""

import logging
from decimal import Decimal
from typing import Optional

from tripledger.database.base import Database
from tripledger.domain.authorization import Authorizer, MembershipAuthorizer
from tripledger.domain.balances import BalanceService
from tripledger.domain.debts import outstanding_debt, resolve_debts
from tripledger.domain.entities import (
    TOLERANCE,
    Debt,
    Expense,
    Member,
    Settlement,
    SplitDraft,
    SplitPolicy,
    to_money,
)
from tripledger.domain.errors import (
    InvalidSettlementAmount,
    NotFoundError,
    PartialWriteFailure,
    StoreError,
    ValidationError,
    invalid_settlement_amount,
    member_not_found,
    no_outstanding_debt,
    trip_not_found,
)

logger = logging.getLogger(__name__)


def settlement_from_expense(expense: Expense) -> Settlement:
    """Build a Settlement view from a settlement expense row."""
    recipient = next(
        (s.member_id for s in expense.splits if s.member_id != expense.paid_by),
        expense.paid_by,
    )
    return Settlement(
        expense_id=expense.id,
        trip_id=expense.trip_id,
        from_member=expense.paid_by,
        to_member=recipient,
        amount=expense.amount,
        created_at=expense.created_at,
    )


class SettlementService:
    """Service for recording payments between trip members."""

    def __init__(self, db: Database, authorizer: Optional[Authorizer] = None):
        """Initialize settlement service.

        Args:
            db: Database instance
            authorizer: Access checks, defaults to trip membership roles
        """
        self.db = db
        self.authorizer = authorizer or MembershipAuthorizer(db)
        self.balances = BalanceService(db, self.authorizer)

    def _debt_parties(self, debt: Debt) -> tuple[Member, Member]:
        payer = self.db.get_member(debt.from_member)
        if payer is None:
            raise NotFoundError(member_not_found(debt.from_member))
        recipient = self.db.get_member(debt.to_member)
        if recipient is None:
            raise NotFoundError(member_not_found(debt.to_member))
        if payer.trip_id != recipient.trip_id:
            raise ValidationError("Settlement parties belong to different trips")
        if payer.id == recipient.id:
            raise ValidationError("A member cannot settle a debt with themselves")
        return payer, recipient

    def record_settlement(self, debt: Debt, amount: Decimal, actor_id: int) -> Settlement:
        """Record a full or partial payment against a debt.

        The amount is checked against the debt as shown to the user, then
        again inside the write transaction against the debt recomputed from
        the committed ledger, so concurrent settlements cannot overpay.

        Args:
            debt: Debt being paid, as returned by resolve_debts
            amount: Amount paid, 0 < amount <= debt.amount
            actor_id: Member recording the payment

        Returns:
            The recorded settlement

        Raises:
            PermissionDenied: If the actor may not edit the trip
            InvalidSettlementAmount: If the amount is outside the outstanding debt
            PartialWriteFailure: If the settlement splits could not be written
        """
        payer, recipient = self._debt_parties(debt)
        trip_id = payer.trip_id
        trip = self.db.get_trip(trip_id)
        if trip is None:
            raise NotFoundError(trip_not_found(trip_id))
        self.authorizer.require_edit(trip_id, actor_id)

        amount = Decimal(amount)
        if amount != to_money(amount):
            raise InvalidSettlementAmount(f"Settlement amount {amount} has more than two decimal places")
        if amount <= 0 or amount > debt.amount + TOLERANCE:
            raise InvalidSettlementAmount(invalid_settlement_amount(amount, debt.amount))
        amount = to_money(amount)

        with self.db.transaction():
            debts = resolve_debts(self.balances.ledger_balances(trip_id))
            outstanding = outstanding_debt(debts, payer.id, recipient.id)
            if outstanding <= 0:
                raise InvalidSettlementAmount(no_outstanding_debt(payer.id, recipient.id))
            if amount > outstanding + TOLERANCE:
                raise InvalidSettlementAmount(invalid_settlement_amount(amount, outstanding))

            expense_id = self.db.insert_expense(
                trip_id=trip_id,
                title=f"{payer.name} paid {amount:.2f} to {recipient.name}",
                amount=amount,
                currency=trip.currency,
                paid_by=payer.id,
                split_policy=SplitPolicy.CUSTOM,
                is_settlement=True,
                created_by=actor_id,
            )
            splits = [
                SplitDraft(member_id=payer.id, amount=-amount, paid=True),
                SplitDraft(member_id=recipient.id, amount=amount, paid=False),
            ]
            try:
                self.db.insert_splits(expense_id, splits)
            except StoreError as e:
                logger.error(
                    "Settlement split insert failed for expense %s in trip %s, rolling back: %s",
                    expense_id,
                    trip_id,
                    e,
                )
                raise PartialWriteFailure("Could not record the settlement; nothing was saved") from e

        logger.info(
            "Recorded settlement %s in trip %s: member %s paid %s to member %s",
            expense_id,
            trip_id,
            payer.id,
            amount,
            recipient.id,
        )
        return settlement_from_expense(self.db.get_expense(expense_id))

    def settle_in_full(self, debt: Debt, actor_id: int) -> Settlement:
        """Record a payment of the whole debt."""
        return self.record_settlement(debt, debt.amount, actor_id)

    def list_settlements(self, trip_id: int, actor_id: int) -> list[Settlement]:
        """List recorded settlements of a trip, oldest first."""
        if self.db.get_trip(trip_id) is None:
            raise NotFoundError(trip_not_found(trip_id))
        self.authorizer.require_view(trip_id, actor_id)
        return [
            settlement_from_expense(expense)
            for expense in self.db.list_expenses(trip_id)
            if expense.is_settlement
        ]
