"""Utility for resolving member references to IDs."""

from tripledger.database.base import Database


def resolve_member(db: Database, trip_id: int, member: str | int) -> int:
    """Resolve a member e-mail or ID within a trip to a member ID.

    Args:
        db: Database instance
        trip_id: Trip the member belongs to
        member: Member e-mail (str) or ID (int or string representation of int)

    Returns:
        Member ID

    Raises:
        ValueError: If the member is not found in the trip
    """
    # If it's already an integer, use it as ID
    if isinstance(member, int) or str(member).strip().isdigit():
        member_id = int(member)
        member_obj = db.get_member(member_id)
        if member_obj is None or member_obj.trip_id != trip_id:
            raise ValueError(f"Member ID {member_id} not found in trip {trip_id}")
        return member_id

    member_obj = db.get_member_by_email(trip_id, str(member).strip().lower())
    if member_obj is None:
        raise ValueError(f"Member '{member}' not found in trip {trip_id}")
    return member_obj.id
