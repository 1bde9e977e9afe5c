"""Domain model entities for tripledger.

These are pure data classes representing ledger concepts, independent of
database schema. Store rows are converted into these entities by the mapping
layer before any ledger logic runs.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


CENT = Decimal("0.01")
TOLERANCE = Decimal("0.01")


def to_money(value: Decimal | int | str) -> Decimal:
    """Quantize a value to whole cents."""
    return Decimal(value).quantize(CENT)


class MemberRole(str, Enum):
    """Role of a member within a trip."""

    OWNER = "owner"
    EDITOR = "editor"
    VIEWER = "viewer"

    @property
    def can_edit(self) -> bool:
        return self in (MemberRole.OWNER, MemberRole.EDITOR)


class SplitPolicy(str, Enum):
    """How an expense amount is divided among participants."""

    EQUAL = "equal"
    CUSTOM = "custom"
    PERCENTAGE = "percentage"


class ExpenseStatus(str, Enum):
    """Purchase status of an expense."""

    PLANNED = "planned"
    PURCHASED = "purchased"
    REFUNDED = "refunded"


@dataclass(frozen=True)
class Trip:
    """Trip domain entity."""

    id: int
    name: str
    currency: str
    created_at: datetime


@dataclass(frozen=True)
class Member:
    """Trip participant."""

    id: int
    trip_id: int
    name: str
    email: str
    role: MemberRole
    active: bool
    joined_at: datetime


@dataclass(frozen=True)
class Activity:
    """Planned itinerary item with an estimated cost."""

    id: int
    trip_id: int
    title: str
    estimated_cost: Decimal
    description: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class ExpenseSplit:
    """One participant's share of an expense.

    Positive amounts are a share of cost (or a settlement receipt), negative
    amounts pay down a settlement.
    """

    id: int
    expense_id: int
    member_id: int
    amount: Decimal
    paid: bool


@dataclass(frozen=True)
class Expense:
    """Expense domain entity, including settlements."""

    id: int
    trip_id: int
    title: str
    amount: Decimal
    currency: str
    paid_by: int
    split_policy: SplitPolicy
    is_settlement: bool
    created_at: datetime
    status: ExpenseStatus = ExpenseStatus.PURCHASED
    description: Optional[str] = None
    category: Optional[str] = None
    purchase_date: Optional[date] = None
    activity_id: Optional[int] = None
    created_by: Optional[int] = None
    splits: tuple[ExpenseSplit, ...] = ()


@dataclass(frozen=True)
class SplitDraft:
    """A split that has been composed but not yet persisted."""

    member_id: int
    amount: Decimal
    paid: bool


@dataclass(frozen=True)
class Balance:
    """Derived per-member position in a trip ledger."""

    member_id: int
    total_paid: Decimal
    total_owed: Decimal
    balance: Decimal
    net_settled: Decimal = Decimal("0.00")

    @property
    def is_settled(self) -> bool:
        return abs(self.balance) <= TOLERANCE


@dataclass(frozen=True)
class Debt:
    """Directed settlement suggestion: from_member owes to_member."""

    from_member: int
    to_member: int
    amount: Decimal


@dataclass(frozen=True)
class Settlement:
    """A recorded payment between two members."""

    expense_id: int
    trip_id: int
    from_member: int
    to_member: int
    amount: Decimal
    created_at: datetime


@dataclass(frozen=True)
class MemberPosition:
    """Cumulative paid/owed figures for one member at a point in history."""

    member_id: int
    paid: Decimal
    owed: Decimal

    @property
    def balance(self) -> Decimal:
        return self.paid - self.owed


@dataclass(frozen=True)
class HistoryEntry:
    """One expense in the chronological breakdown."""

    expense: Expense
    impact: dict[int, Decimal]
    positions: tuple[MemberPosition, ...]


@dataclass(frozen=True)
class BreakdownReport:
    """Everything the breakdown view renders for a trip."""

    trip: Trip
    history: tuple[HistoryEntry, ...]
    balances: tuple[Balance, ...]
    debts: tuple[Debt, ...]
    category_totals: dict[str, Decimal] = field(default_factory=dict)
    status_totals: dict[str, Decimal] = field(default_factory=dict)
    total_expenses: Decimal = Decimal("0.00")
    total_settled: Decimal = Decimal("0.00")
    settlements: tuple[Settlement, ...] = ()
