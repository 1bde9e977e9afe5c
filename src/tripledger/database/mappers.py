"""Mapper functions to convert SQLAlchemy models into domain entities.

Every row read from the store passes through here before ledger logic sees
it. Rows with missing required values or unknown enum values are rejected
with a StoreError instead of leaking loosely-typed data into the domain.
"""

from decimal import Decimal
from typing import Any

from tripledger.domain import entities as domain
from tripledger.domain.errors import StoreError
from tripledger.database.models import (
    Trip as ORMTrip,
    Member as ORMMember,
    Activity as ORMActivity,
    Expense as ORMExpense,
    ExpenseSplit as ORMExpenseSplit,
)


def _require(row: Any, field: str) -> Any:
    value = getattr(row, field, None)
    if value is None:
        raise StoreError(f"{type(row).__name__} row {getattr(row, 'id', '?')} is missing '{field}'")
    return value


def _money(row: Any, field: str) -> Decimal:
    value = _require(row, field)
    try:
        return domain.to_money(value)
    except (ArithmeticError, TypeError, ValueError) as e:
        raise StoreError(f"{type(row).__name__} row {row.id} has a non-numeric '{field}': {value!r}") from e


def _enum(enum_cls: type, row: Any, field: str):
    value = _require(row, field)
    try:
        return enum_cls(value)
    except ValueError as e:
        raise StoreError(f"{type(row).__name__} row {row.id} has an unknown '{field}': {value!r}") from e


def trip_to_domain(orm_trip: ORMTrip) -> domain.Trip:
    """Convert SQLAlchemy Trip model to domain Trip entity."""
    return domain.Trip(
        id=_require(orm_trip, "id"),
        name=_require(orm_trip, "name"),
        currency=_require(orm_trip, "currency"),
        created_at=_require(orm_trip, "created_at"),
    )


def member_to_domain(orm_member: ORMMember) -> domain.Member:
    """Convert SQLAlchemy Member model to domain Member entity."""
    return domain.Member(
        id=_require(orm_member, "id"),
        trip_id=_require(orm_member, "trip_id"),
        name=_require(orm_member, "name"),
        email=_require(orm_member, "email"),
        role=_enum(domain.MemberRole, orm_member, "role"),
        active=bool(_require(orm_member, "active")),
        joined_at=_require(orm_member, "joined_at"),
    )


def activity_to_domain(orm_activity: ORMActivity) -> domain.Activity:
    """Convert SQLAlchemy Activity model to domain Activity entity."""
    return domain.Activity(
        id=_require(orm_activity, "id"),
        trip_id=_require(orm_activity, "trip_id"),
        title=_require(orm_activity, "title"),
        estimated_cost=_money(orm_activity, "estimated_cost"),
        description=orm_activity.description,
        created_at=_require(orm_activity, "created_at"),
    )


def split_to_domain(orm_split: ORMExpenseSplit) -> domain.ExpenseSplit:
    """Convert SQLAlchemy ExpenseSplit model to domain ExpenseSplit entity."""
    return domain.ExpenseSplit(
        id=_require(orm_split, "id"),
        expense_id=_require(orm_split, "expense_id"),
        member_id=_require(orm_split, "member_id"),
        amount=_money(orm_split, "amount"),
        paid=bool(orm_split.paid),
    )


def expense_to_domain(orm_expense: ORMExpense, include_splits: bool = True) -> domain.Expense:
    """Convert SQLAlchemy Expense model to domain Expense entity.

    Args:
        orm_expense: ORM row
        include_splits: If True, the expense's splits are mapped as well
    """
    splits: tuple[domain.ExpenseSplit, ...] = ()
    if include_splits:
        splits = tuple(split_to_domain(s) for s in orm_expense.splits)

    return domain.Expense(
        id=_require(orm_expense, "id"),
        trip_id=_require(orm_expense, "trip_id"),
        title=_require(orm_expense, "title"),
        amount=_money(orm_expense, "amount"),
        currency=_require(orm_expense, "currency"),
        paid_by=_require(orm_expense, "paid_by"),
        split_policy=_enum(domain.SplitPolicy, orm_expense, "split_policy"),
        is_settlement=bool(orm_expense.is_settlement),
        created_at=_require(orm_expense, "created_at"),
        status=_enum(domain.ExpenseStatus, orm_expense, "status"),
        description=orm_expense.description,
        category=orm_expense.category,
        purchase_date=orm_expense.purchase_date,
        activity_id=orm_expense.activity_id,
        created_by=orm_expense.created_by,
        splits=splits,
    )
