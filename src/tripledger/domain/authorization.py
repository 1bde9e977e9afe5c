"""Trip access checks consumed by the ledger services."""

from abc import ABC, abstractmethod

from tripledger.database.base import Database
from tripledger.domain.errors import PermissionDenied, permission_denied


class Authorizer(ABC):
    """Answers whether a member may read or change a trip's ledger."""

    @abstractmethod
    def can_view(self, trip_id: int, member_id: int) -> bool:
        pass

    @abstractmethod
    def can_edit(self, trip_id: int, member_id: int) -> bool:
        pass

    def require_view(self, trip_id: int, member_id: int) -> None:
        """Raise PermissionDenied unless the member may view the trip."""
        if not self.can_view(trip_id, member_id):
            raise PermissionDenied(permission_denied(member_id, trip_id, "view"))

    def require_edit(self, trip_id: int, member_id: int) -> None:
        """Raise PermissionDenied unless the member may edit the trip."""
        if not self.can_edit(trip_id, member_id):
            raise PermissionDenied(permission_denied(member_id, trip_id, "edit"))


class MembershipAuthorizer(Authorizer):
    """Role-based access from trip membership.

    Any active member may view; active owners and editors may edit.
    """

    def __init__(self, db: Database):
        self.db = db

    def can_view(self, trip_id: int, member_id: int) -> bool:
        member = self.db.get_member(member_id)
        return member is not None and member.trip_id == trip_id and member.active

    def can_edit(self, trip_id: int, member_id: int) -> bool:
        member = self.db.get_member(member_id)
        return (
            member is not None
            and member.trip_id == trip_id
            and member.active
            and member.role.can_edit
        )
