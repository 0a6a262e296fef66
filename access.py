"""
Access-control policy.

Pure decision functions: no database access happens here. Callers resolve
the resource a request targets (for entries and comments, the parent trip)
into a ``Resource`` and ask whether the requester may read or write it.

The "friends" tier is enforced exactly like "private": only the owner sees
it. Follow edges are not treated as friendship.
"""
from typing import Any, Dict, NamedTuple, Optional

from errors import AccessDenied
from schemas import PUBLIC


class Resource(NamedTuple):
    owner_id: str
    privacy: str = PUBLIC


def trip_resource(trip: Dict[str, Any]) -> Resource:
    return Resource(owner_id=trip["user_id"], privacy=trip.get("privacy") or PUBLIC)


def profile_resource(user: Dict[str, Any]) -> Resource:
    settings = user.get("privacy_settings") or {}
    return Resource(owner_id=user["_id"], privacy=settings.get("profile_visibility") or PUBLIC)


def trips_resource(user: Dict[str, Any]) -> Resource:
    """Visibility of a user's trip list as a whole."""
    settings = user.get("privacy_settings") or {}
    return Resource(owner_id=user["_id"], privacy=settings.get("trips_visibility") or PUBLIC)


def can_read(resource: Resource, requester_id: Optional[str]) -> bool:
    if resource.privacy == PUBLIC:
        return True
    return requester_id is not None and requester_id == resource.owner_id


def can_write(resource: Resource, requester_id: Optional[str]) -> bool:
    return requester_id is not None and requester_id == resource.owner_id


def can_delete_comment(comment: Dict[str, Any], entry_resource: Resource, requester_id: Optional[str]) -> bool:
    # The comment's author, or whoever owns the trip the entry belongs to
    if requester_id is None:
        return False
    return requester_id == comment.get("user_id") or requester_id == entry_resource.owner_id


def require_read(resource: Resource, requester_id: Optional[str]) -> None:
    if not can_read(resource, requester_id):
        raise AccessDenied("Access denied")


def require_write(resource: Resource, requester_id: Optional[str]) -> None:
    if not can_write(resource, requester_id):
        raise AccessDenied("Access denied")
