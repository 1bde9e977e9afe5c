"""Split composition and expense recording."""

import logging
from datetime import date
from decimal import Decimal, ROUND_DOWN
from typing import Mapping, Optional, Sequence

from tripledger.database.base import Database
from tripledger.domain.authorization import Authorizer, MembershipAuthorizer
from tripledger.domain.entities import (
    CENT,
    TOLERANCE,
    Expense,
    ExpenseStatus,
    SplitDraft,
    SplitPolicy,
    Trip,
    to_money,
)
from tripledger.domain.errors import (
    ConflictError,
    NotFoundError,
    PartialWriteFailure,
    SplitMismatch,
    StoreError,
    ValidationError,
    activity_already_split,
    activity_not_found,
    expense_not_found,
    member_not_in_trip,
    percentage_sum_mismatch,
    split_sum_mismatch,
    trip_not_found,
)

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


def _spread_remainder(amount: Decimal, raw_shares: list[Decimal]) -> list[Decimal]:
    """Round shares down to cents, then hand out the leftover cents.

    Leftover cents go one each to the first shares in order, so the result
    always sums to exactly ``amount``.
    """
    shares = [share.quantize(CENT, rounding=ROUND_DOWN) for share in raw_shares]
    leftover_cents = int((amount - sum(shares)) / CENT)
    for index in range(leftover_cents):
        shares[index % len(shares)] += CENT
    return shares


def compose_splits(
    amount: Decimal,
    payer_id: int,
    participant_ids: Sequence[int],
    policy: SplitPolicy,
    shares: Optional[Mapping[int, Decimal]] = None,
) -> list[SplitDraft]:
    """Divide an expense amount among participants.

    Args:
        amount: Expense amount, greater than zero
        payer_id: Member who paid; does not have to be a participant
        participant_ids: Members sharing the cost, in display order
        policy: EQUAL divides evenly, CUSTOM takes amounts from ``shares``,
            PERCENTAGE takes percentages from ``shares``
        shares: Per-member amounts or percentages for CUSTOM and PERCENTAGE

    Returns:
        One SplitDraft per participant, summing to ``amount``. The payer's
        own split is marked paid.

    Raises:
        ValidationError: If the amount or participant list is invalid
        SplitMismatch: If custom shares don't add up to the amount, or
            percentages don't add up to 100
    """
    policy = SplitPolicy(policy)
    amount = Decimal(amount)
    if amount <= 0:
        raise ValidationError("Expense amount must be greater than zero")
    if amount != to_money(amount):
        raise ValidationError(f"Expense amount {amount} has more than two decimal places")
    if not participant_ids:
        raise ValidationError("At least one participant is required to split an expense")
    if len(set(participant_ids)) != len(participant_ids):
        raise ValidationError("Participants must not be listed more than once")

    if policy == SplitPolicy.EQUAL:
        count = Decimal(len(participant_ids))
        amounts = _spread_remainder(amount, [amount / count] * len(participant_ids))
    else:
        amounts = _shares_for(amount, participant_ids, policy, shares or {})

    return [
        SplitDraft(member_id=member_id, amount=share, paid=member_id == payer_id)
        for member_id, share in zip(participant_ids, amounts)
    ]


def _shares_for(
    amount: Decimal,
    participant_ids: Sequence[int],
    policy: SplitPolicy,
    shares: Mapping[int, Decimal],
) -> list[Decimal]:
    missing = [member_id for member_id in participant_ids if member_id not in shares]
    if missing:
        raise ValidationError(f"No share given for member(s) {', '.join(map(str, missing))}")
    extra = [member_id for member_id in shares if member_id not in participant_ids]
    if extra:
        raise ValidationError(f"Shares given for non-participant member(s) {', '.join(map(str, extra))}")

    values = [Decimal(shares[member_id]) for member_id in participant_ids]
    if any(value < 0 for value in values):
        raise ValidationError("Split shares must not be negative")

    if policy == SplitPolicy.CUSTOM:
        total = sum(values, Decimal("0"))
        if abs(total - amount) > TOLERANCE:
            raise SplitMismatch(split_sum_mismatch(total, amount))
        custom = [to_money(value) for value in values]
        # Rounding difference goes to the largest share; shares stay non-negative
        largest = custom.index(max(custom))
        custom[largest] += amount - sum(custom)
        if custom[largest] < 0:
            raise SplitMismatch(split_sum_mismatch(total, amount))
        return custom

    total_percent = sum(values, Decimal("0"))
    if abs(total_percent - HUNDRED) > TOLERANCE:
        raise SplitMismatch(percentage_sum_mismatch(total_percent))
    return _spread_remainder(amount, [amount * value / total_percent for value in values])


class SplitService:
    """Service for recording split expenses in the ledger."""

    def __init__(self, db: Database, authorizer: Optional[Authorizer] = None):
        """Initialize split service.

        Args:
            db: Database instance
            authorizer: Access checks, defaults to trip membership roles
        """
        self.db = db
        self.authorizer = authorizer or MembershipAuthorizer(db)

    def _require_trip(self, trip_id: int) -> Trip:
        trip = self.db.get_trip(trip_id)
        if trip is None:
            raise NotFoundError(trip_not_found(trip_id))
        return trip

    def _require_active_members(self, trip_id: int, member_ids: Sequence[int]) -> None:
        active = {m.id for m in self.db.list_members(trip_id)}
        for member_id in member_ids:
            if member_id not in active:
                raise ValidationError(member_not_in_trip(member_id, trip_id))

    def _write_expense(self, splits: Sequence[SplitDraft], **expense_fields) -> Expense:
        """Insert an expense and its splits in one transaction."""
        with self.db.transaction():
            expense_id = self.db.insert_expense(**expense_fields)
            try:
                self.db.insert_splits(expense_id, splits)
            except StoreError as e:
                logger.error(
                    "Split insert failed for expense %s in trip %s, rolling back: %s",
                    expense_id,
                    expense_fields["trip_id"],
                    e,
                )
                raise PartialWriteFailure(
                    f"Could not record the splits of '{expense_fields['title']}'; nothing was saved"
                ) from e
        logger.info(
            "Recorded expense %s (%s) in trip %s with %d splits",
            expense_id,
            expense_fields["amount"],
            expense_fields["trip_id"],
            len(splits),
        )
        return self.db.get_expense(expense_id)

    def create_expense(
        self,
        trip_id: int,
        actor_id: int,
        title: str,
        amount: Decimal,
        paid_by: int,
        participant_ids: Sequence[int],
        policy: SplitPolicy = SplitPolicy.EQUAL,
        shares: Optional[Mapping[int, Decimal]] = None,
        status: ExpenseStatus = ExpenseStatus.PURCHASED,
        description: Optional[str] = None,
        category: Optional[str] = None,
        purchase_date: Optional[date] = None,
    ) -> Expense:
        """Create an expense and split it among participants.

        Args:
            trip_id: Trip ID
            actor_id: Member performing the change
            title: Expense title
            amount: Expense amount in the trip currency
            paid_by: Member who paid
            participant_ids: Members sharing the cost
            policy: Split policy
            shares: Amounts (CUSTOM) or percentages (PERCENTAGE) per member
            status: Purchase status
            description: Optional description
            category: Optional category name
            purchase_date: Optional purchase date

        Returns:
            The stored expense with its splits

        Raises:
            NotFoundError: If the trip doesn't exist
            PermissionDenied: If the actor may not edit the trip
            ValidationError: If payer or participants are not active members
            SplitMismatch: If shares don't add up
            PartialWriteFailure: If the splits could not be written
        """
        trip = self._require_trip(trip_id)
        self.authorizer.require_edit(trip_id, actor_id)
        if not title or not title.strip():
            raise ValidationError("Expense title is required")
        self._require_active_members(trip_id, [paid_by, *participant_ids])
        splits = compose_splits(amount, paid_by, participant_ids, policy, shares)

        return self._write_expense(
            splits,
            trip_id=trip_id,
            title=title.strip(),
            amount=to_money(amount),
            currency=trip.currency,
            paid_by=paid_by,
            split_policy=SplitPolicy(policy),
            status=ExpenseStatus(status),
            description=description,
            category=category,
            purchase_date=purchase_date,
            created_by=actor_id,
        )

    def split_planned_cost(
        self,
        activity_id: int,
        actor_id: int,
        paid_by: int,
        participant_ids: Sequence[int],
        policy: SplitPolicy = SplitPolicy.EQUAL,
        shares: Optional[Mapping[int, Decimal]] = None,
    ) -> Expense:
        """Divide a planned activity's estimated cost among participants.

        Each activity can be divided once. The resulting expense is marked
        as planned and linked to the activity.

        Raises:
            NotFoundError: If the activity doesn't exist
            ValidationError: If the activity has no estimated cost
            ConflictError: If the activity was already divided
        """
        activity = self.db.get_activity(activity_id)
        if activity is None:
            raise NotFoundError(activity_not_found(activity_id))
        trip = self._require_trip(activity.trip_id)
        self.authorizer.require_edit(trip.id, actor_id)
        if activity.estimated_cost <= 0:
            raise ValidationError(f"Activity '{activity.title}' has no estimated cost to divide")
        if self.db.find_expense_for_activity(activity_id) is not None:
            raise ConflictError(activity_already_split(activity.title))
        self._require_active_members(trip.id, [paid_by, *participant_ids])
        splits = compose_splits(activity.estimated_cost, paid_by, participant_ids, policy, shares)

        return self._write_expense(
            splits,
            trip_id=trip.id,
            title=activity.title,
            amount=activity.estimated_cost,
            currency=trip.currency,
            paid_by=paid_by,
            split_policy=SplitPolicy(policy),
            status=ExpenseStatus.PLANNED,
            description=activity.description,
            activity_id=activity.id,
            created_by=actor_id,
        )

    def replace_splits(
        self,
        expense_id: int,
        actor_id: int,
        participant_ids: Sequence[int],
        policy: SplitPolicy = SplitPolicy.EQUAL,
        shares: Optional[Mapping[int, Decimal]] = None,
    ) -> Expense:
        """Recompose the splits of an existing expense.

        The old splits are deleted and the new ones inserted in a single
        transaction. Settlements cannot be re-split.

        Raises:
            NotFoundError: If the expense doesn't exist
            ValidationError: If the expense is a settlement
        """
        expense = self.get_expense(expense_id, actor_id)
        self.authorizer.require_edit(expense.trip_id, actor_id)
        if expense.is_settlement:
            raise ValidationError("Settlements cannot be re-split")
        self._require_active_members(expense.trip_id, participant_ids)
        splits = compose_splits(expense.amount, expense.paid_by, participant_ids, policy, shares)

        with self.db.transaction():
            self.db.delete_splits(expense_id)
            try:
                self.db.insert_splits(expense_id, splits)
            except StoreError as e:
                logger.error("Re-split of expense %s failed, rolling back: %s", expense_id, e)
                raise PartialWriteFailure(
                    f"Could not replace the splits of expense {expense_id}; nothing was changed"
                ) from e
        logger.info("Replaced splits of expense %s with %d new splits", expense_id, len(splits))
        return self.db.get_expense(expense_id)

    def delete_expense(self, expense_id: int, actor_id: int) -> None:
        """Delete an expense (or settlement) together with its splits."""
        expense = self.get_expense(expense_id, actor_id)
        self.authorizer.require_edit(expense.trip_id, actor_id)
        self.db.delete_expense(expense_id)
        logger.info("Deleted expense %s from trip %s", expense_id, expense.trip_id)

    def get_expense(self, expense_id: int, actor_id: int) -> Expense:
        """Get an expense the actor may view.

        Raises:
            NotFoundError: If the expense doesn't exist
            PermissionDenied: If the actor may not view its trip
        """
        expense = self.db.get_expense(expense_id)
        if expense is None:
            raise NotFoundError(expense_not_found(expense_id))
        self.authorizer.require_view(expense.trip_id, actor_id)
        return expense

    def list_expenses(
        self, trip_id: int, actor_id: int, include_settlements: bool = True
    ) -> list[Expense]:
        """List a trip's expenses, oldest first."""
        self._require_trip(trip_id)
        self.authorizer.require_view(trip_id, actor_id)
        return self.db.list_expenses(trip_id, include_settlements=include_settlements)
