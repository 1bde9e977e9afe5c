"""Shared domain error messages and error types."""

from decimal import Decimal


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as dividing the same planned cost twice."""


class SplitMismatch(ValidationError):
    """Split shares do not add up to the expense amount."""


class InvalidSettlementAmount(ValidationError):
    """Settlement amount is outside (0, outstanding debt]."""


class PermissionDenied(DomainError):
    """Acting member lacks the rights required for the operation."""


class StoreError(RuntimeError):
    """Base class for ledger store infrastructure failures."""


class StoreUnavailable(StoreError):
    """Store could not be reached or the transaction could not run.

    Callers may retry with backoff.
    """


class PartialWriteFailure(StoreError):
    """A multi-row ledger write failed part way and was rolled back."""


def trip_not_found(trip_id: int) -> str:
    """Return message for missing trip."""
    return f"Trip {trip_id} not found"


def member_not_found(member_id: int | str) -> str:
    """Return message for missing member."""
    return f"Member {member_id} not found"


def member_not_in_trip(member_id: int, trip_id: int) -> str:
    """Return message for a member that is not an active participant of a trip."""
    return f"Member {member_id} is not an active member of trip {trip_id}"


def expense_not_found(expense_id: int) -> str:
    """Return message for missing expense."""
    return f"Expense {expense_id} not found"


def activity_not_found(activity_id: int) -> str:
    """Return message for missing activity."""
    return f"Activity {activity_id} not found"


def activity_already_split(title: str) -> str:
    """Return message when a planned cost has already been divided."""
    return f"A divided expense already exists for '{title}'"


def split_sum_mismatch(total: Decimal, amount: Decimal) -> str:
    """Return message when custom shares do not match the expense amount."""
    return f"Split shares add up to {total:.2f} but the expense amount is {amount:.2f}"


def percentage_sum_mismatch(total: Decimal) -> str:
    """Return message when percentages do not add up to 100."""
    return f"Split percentages add up to {total:.2f}% instead of 100%"


def invalid_settlement_amount(amount: Decimal, outstanding: Decimal) -> str:
    """Return message for a settlement outside the outstanding debt."""
    return (
        f"Settlement amount {amount:.2f} must be greater than 0 "
        f"and at most the outstanding debt of {outstanding:.2f}"
    )


def no_outstanding_debt(from_member: int, to_member: int) -> str:
    """Return message when the debt being settled no longer exists."""
    return f"Member {from_member} has no outstanding debt to member {to_member}"


def permission_denied(member_id: int, trip_id: int, action: str) -> str:
    """Return message when an actor may not perform an action on a trip."""
    return f"Member {member_id} is not allowed to {action} trip {trip_id}"
