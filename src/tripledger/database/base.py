"""Abstract ledger store interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

# Import entities directly to avoid circular import through domain/__init__.py
from tripledger.domain.entities import (
    Trip,
    Member,
    MemberRole,
    Activity,
    Expense,
    ExpenseSplit,
    ExpenseStatus,
    SplitDraft,
    SplitPolicy,
)


class Database(ABC):
    """Abstract database interface for tripledger.

    Write methods commit immediately unless they run inside
    ``transaction()``, in which case everything commits or rolls back
    together. Infrastructure failures surface as StoreError subclasses.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def transaction(self) -> AbstractContextManager["Database"]:
        """Run the enclosed reads and writes as one serializable transaction.

        Re-entering an open transaction joins it.
        """
        pass

    # Trip operations
    @abstractmethod
    def create_trip(self, name: str, currency: str) -> int:
        """Create a trip. Returns trip ID."""
        pass

    @abstractmethod
    def get_trip(self, trip_id: int) -> Optional[Trip]:
        """Get trip by ID."""
        pass

    # Member operations
    @abstractmethod
    def add_member(self, trip_id: int, name: str, email: str, role: MemberRole) -> int:
        """Add a member to a trip. Returns member ID."""
        pass

    @abstractmethod
    def get_member(self, member_id: int) -> Optional[Member]:
        """Get member by ID, including deactivated members."""
        pass

    @abstractmethod
    def get_member_by_email(self, trip_id: int, email: str) -> Optional[Member]:
        """Get a trip member by e-mail address."""
        pass

    @abstractmethod
    def list_members(self, trip_id: int, include_inactive: bool = False) -> list[Member]:
        """List members of a trip."""
        pass

    @abstractmethod
    def update_member_role(self, member_id: int, role: MemberRole) -> None:
        """Change a member's role."""
        pass

    @abstractmethod
    def deactivate_member(self, member_id: int) -> None:
        """Remove a member from a trip while keeping their ledger rows."""
        pass

    # Activity operations
    @abstractmethod
    def create_activity(
        self,
        trip_id: int,
        title: str,
        estimated_cost: Decimal,
        description: Optional[str] = None,
    ) -> int:
        """Create a planned activity. Returns activity ID."""
        pass

    @abstractmethod
    def get_activity(self, activity_id: int) -> Optional[Activity]:
        """Get activity by ID."""
        pass

    @abstractmethod
    def list_activities(self, trip_id: int) -> list[Activity]:
        """List planned activities of a trip."""
        pass

    # Expense operations
    @abstractmethod
    def insert_expense(
        self,
        trip_id: int,
        title: str,
        amount: Decimal,
        currency: str,
        paid_by: int,
        split_policy: SplitPolicy,
        is_settlement: bool = False,
        status: ExpenseStatus = ExpenseStatus.PURCHASED,
        description: Optional[str] = None,
        category: Optional[str] = None,
        purchase_date: Optional[date] = None,
        activity_id: Optional[int] = None,
        created_by: Optional[int] = None,
    ) -> int:
        """Insert an expense row without splits. Returns expense ID."""
        pass

    @abstractmethod
    def insert_splits(self, expense_id: int, splits: Sequence[SplitDraft]) -> None:
        """Insert split rows for an expense."""
        pass

    @abstractmethod
    def delete_splits(self, expense_id: int) -> None:
        """Delete every split of an expense."""
        pass

    @abstractmethod
    def delete_expense(self, expense_id: int) -> None:
        """Delete an expense and, by cascade, its splits."""
        pass

    @abstractmethod
    def get_expense(self, expense_id: int) -> Optional[Expense]:
        """Get an expense with its splits."""
        pass

    @abstractmethod
    def list_expenses(self, trip_id: int, include_settlements: bool = True) -> list[Expense]:
        """List a trip's expenses with their splits, oldest first."""
        pass

    @abstractmethod
    def list_splits(self, expense_id: int) -> list[ExpenseSplit]:
        """List the splits of one expense."""
        pass

    @abstractmethod
    def find_expense_for_activity(self, activity_id: int) -> Optional[Expense]:
        """Get the expense that divides a planned activity, if any."""
        pass
