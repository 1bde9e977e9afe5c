"""Trip and membership domain service."""

import logging
from decimal import Decimal
from typing import Optional

from tripledger.database.base import Database
from tripledger.domain.authorization import Authorizer, MembershipAuthorizer
from tripledger.domain.entities import Activity, Member, MemberRole, Trip, to_money
from tripledger.domain.errors import (
    ConflictError,
    NotFoundError,
    PermissionDenied,
    ValidationError,
    member_not_found,
    permission_denied,
    trip_not_found,
)

logger = logging.getLogger(__name__)


class TripService:
    """Service for the trips, members and planned activities the ledger works on."""

    def __init__(self, db: Database, authorizer: Optional[Authorizer] = None):
        """Initialize trip service.

        Args:
            db: Database instance
            authorizer: Access checks, defaults to trip membership roles
        """
        self.db = db
        self.authorizer = authorizer or MembershipAuthorizer(db)

    def create_trip(self, name: str, currency: str, owner_name: str, owner_email: str) -> tuple[Trip, Member]:
        """Create a trip together with its owner.

        Args:
            name: Trip name
            currency: Three-letter currency code used for every expense
            owner_name: Display name of the creating member
            owner_email: E-mail of the creating member

        Returns:
            Tuple of (trip, owner member)

        Raises:
            ValidationError: If the name, currency or owner details are invalid
        """
        currency = currency.strip().upper()
        owner_name = owner_name.strip()
        owner_email = owner_email.strip().lower()
        if not name or not name.strip():
            raise ValidationError("Trip name is required")
        if len(currency) != 3 or not currency.isalpha():
            raise ValidationError(f"Invalid currency code '{currency}'")
        if not owner_name or not owner_email:
            raise ValidationError("Owner name and e-mail are required")

        with self.db.transaction():
            trip_id = self.db.create_trip(name=name.strip(), currency=currency)
            owner_id = self.db.add_member(
                trip_id=trip_id, name=owner_name, email=owner_email, role=MemberRole.OWNER
            )
        logger.info("Created trip %s (%s) owned by member %s", trip_id, currency, owner_id)
        return self.db.get_trip(trip_id), self.db.get_member(owner_id)

    def get_trip(self, trip_id: int) -> Trip:
        """Get trip by ID.

        Raises:
            NotFoundError: If the trip doesn't exist
        """
        trip = self.db.get_trip(trip_id)
        if trip is None:
            raise NotFoundError(trip_not_found(trip_id))
        return trip

    def add_member(
        self,
        trip_id: int,
        actor_id: int,
        name: str,
        email: str,
        role: MemberRole = MemberRole.EDITOR,
    ) -> Member:
        """Add a collaborator to a trip.

        Raises:
            PermissionDenied: If the actor may not edit the trip
            ConflictError: If the e-mail is already an active member
        """
        self.get_trip(trip_id)
        self.authorizer.require_edit(trip_id, actor_id)
        name = name.strip()
        email = email.strip().lower()
        existing = self.db.get_member_by_email(trip_id, email)
        if existing is not None:
            if existing.active:
                raise ConflictError(f"'{email}' is already a member of trip {trip_id}")
            raise ConflictError(f"'{email}' was removed from trip {trip_id} and cannot be re-added")

        member_id = self.db.add_member(trip_id=trip_id, name=name, email=email, role=MemberRole(role))
        logger.info("Added member %s to trip %s as %s", member_id, trip_id, MemberRole(role).value)
        return self.db.get_member(member_id)

    def get_member(self, member_id: int) -> Member:
        """Get member by ID.

        Raises:
            NotFoundError: If the member doesn't exist
        """
        member = self.db.get_member(member_id)
        if member is None:
            raise NotFoundError(member_not_found(member_id))
        return member

    def list_members(self, trip_id: int, include_inactive: bool = False) -> list[Member]:
        """List trip members."""
        self.get_trip(trip_id)
        return self.db.list_members(trip_id, include_inactive=include_inactive)

    def _require_owner(self, trip_id: int, actor_id: int, action: str) -> None:
        actor = self.db.get_member(actor_id)
        if actor is None or actor.trip_id != trip_id or not actor.active or actor.role != MemberRole.OWNER:
            raise PermissionDenied(permission_denied(actor_id, trip_id, action))

    def _check_not_last_owner(self, member: Member) -> None:
        if member.role != MemberRole.OWNER:
            return
        owners = [m for m in self.db.list_members(member.trip_id) if m.role == MemberRole.OWNER]
        if len(owners) <= 1:
            raise ConflictError(f"Member {member.id} is the last owner of trip {member.trip_id}")

    def change_role(self, member_id: int, actor_id: int, role: MemberRole) -> Member:
        """Change a member's role. Only owners may do this."""
        member = self.get_member(member_id)
        self._require_owner(member.trip_id, actor_id, "manage roles in")
        role = MemberRole(role)
        if role != MemberRole.OWNER:
            self._check_not_last_owner(member)
        self.db.update_member_role(member_id, role)
        logger.info("Changed role of member %s to %s", member_id, role.value)
        return self.db.get_member(member_id)

    def remove_member(self, member_id: int, actor_id: int) -> None:
        """Remove a member from a trip.

        The member is deactivated rather than deleted, so expenses and
        splits that reference them keep counting in the balances.
        """
        member = self.get_member(member_id)
        self._require_owner(member.trip_id, actor_id, "remove members from")
        self._check_not_last_owner(member)
        self.db.deactivate_member(member_id)
        logger.info("Removed member %s from trip %s", member_id, member.trip_id)

    def add_activity(
        self,
        trip_id: int,
        actor_id: int,
        title: str,
        estimated_cost: Decimal,
        description: Optional[str] = None,
    ) -> Activity:
        """Add a planned activity with an estimated cost."""
        self.get_trip(trip_id)
        self.authorizer.require_edit(trip_id, actor_id)
        if estimated_cost < 0:
            raise ValidationError("Estimated cost must not be negative")
        activity_id = self.db.create_activity(
            trip_id=trip_id,
            title=title,
            estimated_cost=to_money(estimated_cost),
            description=description,
        )
        return self.db.get_activity(activity_id)

    def list_activities(self, trip_id: int, actor_id: int) -> list[Activity]:
        """List planned activities of a trip."""
        self.get_trip(trip_id)
        self.authorizer.require_view(trip_id, actor_id)
        return self.db.list_activities(trip_id)
