"""
Resource graph manager.

Owns every operation that reads or mutates trips, journal entries, comments
and the follow graph. Parent-side lists (trip.entries, entry.comments,
user.followers / user.following) are kept in step with the child-side
references here and nowhere else.

Single-document changes use atomic update operators. Operations spanning
several documents (cascade deletes, the two sides of a follow edge) run
sequentially; a store error part-way through raises PartialFailure.
"""
import logging
from typing import Any, Dict, List, Optional

from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from access import (Resource, can_delete_comment, can_read, require_read, require_write, trip_resource,
                    trips_resource)
from auth import hash_password, verify_password
from database import as_utc, create_document, get_documents, naive_utc, now
from errors import (AccessDenied, Conflict, InvalidArgument, InvalidCredential, InvalidOperation,
                    InvalidReference, NotFound, PartialFailure)
from schemas import PUBLIC, Comment, JournalEntry, PrivacySettings, Trip, User

logger = logging.getLogger(__name__)

NEWEST_FIRST = [("created_at", -1), ("_id", -1)]

# Fields a user may change on their own profile
PROFILE_FIELDS = ("first_name", "last_name", "bio", "location", "avatar", "privacy_settings")


# ---------------------- Lookups ----------------------

def get_user(db: Database, user_id: str) -> Dict[str, Any]:
    user = db["user"].find_one({"_id": user_id})
    if not user:
        raise NotFound("User not found")
    return user


def get_trip(db: Database, trip_id: str) -> Dict[str, Any]:
    trip = db["trip"].find_one({"_id": trip_id})
    if not trip:
        raise NotFound("Trip not found")
    return trip


def get_entry(db: Database, entry_id: str) -> Dict[str, Any]:
    entry = db["journalentry"].find_one({"_id": entry_id})
    if not entry:
        raise NotFound("Entry not found")
    return entry


def get_comment(db: Database, comment_id: str) -> Dict[str, Any]:
    comment = db["comment"].find_one({"_id": comment_id})
    if not comment:
        raise NotFound("Comment not found")
    return comment


def resolve_entry_trip(db: Database, entry: Dict[str, Any]) -> Dict[str, Any]:
    """The trip an entry belongs to; entries have no owner of their own."""
    return get_trip(db, entry["trip_id"])


def entry_resource(db: Database, entry: Dict[str, Any]) -> Resource:
    return trip_resource(resolve_entry_trip(db, entry))


# ---------------------- Users ----------------------

def create_user(db: Database, username: str, email: str, password: str,
                first_name: str = "", last_name: str = "") -> Dict[str, Any]:
    if db["user"].find_one({"$or": [{"username": username}, {"email": email}]}):
        raise Conflict("Username or email already taken")
    user = User(username=username, email=email, first_name=first_name or "",
                last_name=last_name or "").model_dump()
    creds = hash_password(password)
    user["password_hash"] = creds["hash"]
    user["password_salt"] = creds["salt"]
    try:
        doc = create_document(db, "user", user)
    except DuplicateKeyError:
        raise Conflict("Username or email already taken")
    logger.info("Registered user %s (%s)", doc["_id"], username)
    return doc


def authenticate(db: Database, login: str, password: str) -> Dict[str, Any]:
    user = db["user"].find_one({"$or": [{"username": login}, {"email": login}]})
    if not user or not verify_password(password, user["password_salt"], user["password_hash"]):
        raise InvalidCredential("Invalid credentials")
    return user


def update_profile(db: Database, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    update = {k: v for k, v in fields.items() if k in PROFILE_FIELDS and v is not None}
    if "privacy_settings" in update:
        current = get_user(db, user_id).get("privacy_settings") or {}
        update["privacy_settings"] = PrivacySettings(**{**current, **update["privacy_settings"]}).model_dump()
    update["updated_at"] = now()
    user = db["user"].find_one_and_update({"_id": user_id}, {"$set": update},
                                          return_document=ReturnDocument.AFTER)
    if not user:
        raise NotFound("User not found")
    return user


def _update_edge(db: Database, actor_id: str, target_id: str, op: str) -> None:
    # op is "$addToSet" to link or "$pull" to unlink; both sides move together
    inverse = "$pull" if op == "$addToSet" else "$addToSet"
    db["user"].update_one({"_id": actor_id}, {op: {"following": target_id}})
    try:
        db["user"].update_one({"_id": target_id}, {op: {"followers": actor_id}})
    except PyMongoError as exc:
        logger.error("Follow edge %s -> %s half-applied, compensating: %s", actor_id, target_id, exc)
        try:
            db["user"].update_one({"_id": actor_id}, {inverse: {"following": target_id}})
        except PyMongoError:
            logger.exception("Compensation failed for follow edge %s -> %s", actor_id, target_id)
        raise PartialFailure("Follow update did not complete") from exc


def follow_user(db: Database, actor_id: str, target_id: str) -> Dict[str, Any]:
    """Toggle the follow edge actor -> target."""
    if actor_id == target_id:
        raise InvalidOperation("Cannot follow yourself")
    get_user(db, target_id)
    actor = get_user(db, actor_id)
    is_following = target_id in (actor.get("following") or [])
    _update_edge(db, actor_id, target_id, "$pull" if is_following else "$addToSet")
    logger.info("User %s %s %s", actor_id, "unfollowed" if is_following else "followed", target_id)
    return {
        "following": not is_following,
        "message": "Unfollowed successfully" if is_following else "Followed successfully",
    }


def unfollow_user(db: Database, actor_id: str, target_id: str) -> Dict[str, Any]:
    if actor_id == target_id:
        raise InvalidOperation("Cannot unfollow yourself")
    get_user(db, target_id)
    _update_edge(db, actor_id, target_id, "$pull")
    return {"following": False, "message": "Unfollowed successfully"}


# ---------------------- Trips ----------------------

def _check_dates(start, end) -> None:
    if start is not None and end is not None and as_utc(end) < as_utc(start):
        raise InvalidArgument("end_date must not be before start_date")


def create_trip(db: Database, owner_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    trip = Trip(user_id=owner_id, **fields).model_dump()
    _check_dates(trip["start_date"], trip["end_date"])
    trip["start_date"] = naive_utc(trip["start_date"])
    trip["end_date"] = naive_utc(trip["end_date"])
    trip["entries"] = []
    doc = create_document(db, "trip", trip)
    db["user"].update_one({"_id": owner_id}, {"$inc": {"travel_statistics.total_trips": 1}})
    logger.info("Trip %s created by %s", doc["_id"], owner_id)
    return doc


def update_trip(db: Database, trip_id: str, requester_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    trip = get_trip(db, trip_id)
    require_write(trip_resource(trip), requester_id)
    update = {k: v for k, v in fields.items() if k not in ("_id", "user_id", "entries")}
    for key in ("start_date", "end_date"):
        if update.get(key) is not None:
            update[key] = naive_utc(update[key])
    _check_dates(update.get("start_date", trip.get("start_date")), update.get("end_date", trip.get("end_date")))
    update["updated_at"] = now()
    updated = db["trip"].find_one_and_update({"_id": trip_id}, {"$set": update},
                                             return_document=ReturnDocument.AFTER)
    if updated is None:
        raise NotFound("Trip not found")
    return updated


def delete_trip(db: Database, trip_id: str, requester_id: str) -> None:
    """Delete a trip together with its entries and their comments."""
    trip = get_trip(db, trip_id)
    require_write(trip_resource(trip), requester_id)
    try:
        entry_ids = set(trip.get("entries") or [])
        entry_ids.update(e["_id"] for e in db["journalentry"].find({"trip_id": trip_id}, {"_id": 1}))
        entry_ids = list(entry_ids)
        if entry_ids:
            db["comment"].delete_many({"entry_id": {"$in": entry_ids}})
            db["journalentry"].delete_many({"_id": {"$in": entry_ids}})
        db["trip"].delete_one({"_id": trip_id})
        db["user"].update_one({"_id": trip["user_id"]}, {"$inc": {"travel_statistics.total_trips": -1}})
    except PyMongoError as exc:
        logger.exception("Cascade delete of trip %s interrupted", trip_id)
        raise PartialFailure("Trip was only partially deleted") from exc
    logger.info("Trip %s deleted with %d entries", trip_id, len(entry_ids))


def list_trips(db: Database, viewer_id: Optional[str]) -> List[Dict[str, Any]]:
    query: Dict[str, Any] = {"privacy": PUBLIC}
    if viewer_id:
        query = {"$or": [{"privacy": PUBLIC}, {"user_id": viewer_id}]}
    return get_documents(db, "trip", query, sort=NEWEST_FIRST)


def list_user_trips(db: Database, user_id: str, viewer_id: Optional[str]) -> List[Dict[str, Any]]:
    owner = get_user(db, user_id)
    query: Dict[str, Any] = {"user_id": user_id}
    if viewer_id != user_id:
        if not can_read(trips_resource(owner), viewer_id):
            return []
        query["privacy"] = PUBLIC
    return get_documents(db, "trip", query, sort=NEWEST_FIRST)


def read_trip(db: Database, trip_id: str, viewer_id: Optional[str]) -> Dict[str, Any]:
    trip = get_trip(db, trip_id)
    require_read(trip_resource(trip), viewer_id)
    return trip


# ---------------------- Entries ----------------------

def create_entry(db: Database, trip_id: str, requester_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    trip = get_trip(db, trip_id)
    require_write(trip_resource(trip), requester_id)
    data = dict(fields)
    if data.get("date") is None:
        data["date"] = now()
    if data.get("mood") is None:
        data.pop("mood", None)
    entry = JournalEntry(trip_id=trip_id, **data).model_dump()
    entry["date"] = naive_utc(entry["date"])
    entry["likes"] = []
    entry["comments"] = []
    doc = create_document(db, "journalentry", entry)
    db["trip"].update_one({"_id": trip_id}, {"$push": {"entries": doc["_id"]}, "$set": {"updated_at": now()}})
    logger.info("Entry %s added to trip %s", doc["_id"], trip_id)
    return doc


def read_entry(db: Database, entry_id: str, viewer_id: Optional[str]) -> Dict[str, Any]:
    entry = get_entry(db, entry_id)
    require_read(entry_resource(db, entry), viewer_id)
    return entry


def list_entries(db: Database, trip_id: str, viewer_id: Optional[str]) -> List[Dict[str, Any]]:
    read_trip(db, trip_id, viewer_id)
    return get_documents(db, "journalentry", {"trip_id": trip_id}, sort=[("date", 1), ("_id", 1)])


def update_entry(db: Database, entry_id: str, requester_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    entry = get_entry(db, entry_id)
    require_write(entry_resource(db, entry), requester_id)
    update = {k: v for k, v in fields.items() if k not in ("_id", "trip_id", "likes", "comments")}
    if update.get("date") is not None:
        update["date"] = naive_utc(update["date"])
    update["updated_at"] = now()
    updated = db["journalentry"].find_one_and_update({"_id": entry_id}, {"$set": update},
                                                     return_document=ReturnDocument.AFTER)
    if updated is None:
        raise NotFound("Entry not found")
    return updated


def delete_entry(db: Database, entry_id: str, requester_id: str) -> None:
    entry = get_entry(db, entry_id)
    require_write(entry_resource(db, entry), requester_id)
    try:
        db["trip"].update_one({"_id": entry["trip_id"]}, {"$pull": {"entries": entry_id}})
        db["comment"].delete_many({"entry_id": entry_id})
        db["journalentry"].delete_one({"_id": entry_id})
    except PyMongoError as exc:
        logger.exception("Delete of entry %s interrupted", entry_id)
        raise PartialFailure("Entry was only partially deleted") from exc
    logger.info("Entry %s deleted from trip %s", entry_id, entry["trip_id"])


# ---------------------- Likes ----------------------

def toggle_like(db: Database, collection: str, doc_id: str, user_id: str) -> Dict[str, Any]:
    """
    Flip ``user_id``'s like on a document that has a ``likes`` list.

    Each branch is a single guarded update, so two concurrent likes from the
    same user cannot both append.
    """
    res = db[collection].update_one({"_id": doc_id, "likes": {"$ne": user_id}},
                                    {"$addToSet": {"likes": user_id}})
    if res.matched_count:
        liked = True
    else:
        res = db[collection].update_one({"_id": doc_id, "likes": user_id}, {"$pull": {"likes": user_id}})
        if not res.matched_count:
            raise NotFound("Not found")
        liked = False
    doc = db[collection].find_one({"_id": doc_id}, {"likes": 1}) or {}
    likes = doc.get("likes") or []
    return {"liked": liked, "count": len(likes), "likes": likes}


def like_entry(db: Database, entry_id: str, user_id: str) -> Dict[str, Any]:
    get_entry(db, entry_id)
    return toggle_like(db, "journalentry", entry_id, user_id)


def like_comment(db: Database, entry_id: str, comment_id: str, user_id: str) -> Dict[str, Any]:
    get_entry(db, entry_id)
    comment = get_comment(db, comment_id)
    if comment["entry_id"] != entry_id:
        raise NotFound("Comment not found")
    return toggle_like(db, "comment", comment_id, user_id)


# ---------------------- Comments ----------------------

def add_comment(db: Database, entry_id: str, author_id: str, content: str,
                reply_to: Optional[str] = None) -> Dict[str, Any]:
    get_entry(db, entry_id)
    if reply_to:
        parent = db["comment"].find_one({"_id": reply_to}, {"entry_id": 1})
        if not parent or parent["entry_id"] != entry_id:
            raise InvalidReference("reply_to must reference a comment on the same entry")
    comment = Comment(entry_id=entry_id, user_id=author_id, content=content,
                      reply_to=reply_to or None).model_dump()
    doc = create_document(db, "comment", comment)
    db["journalentry"].update_one({"_id": entry_id}, {"$push": {"comments": doc["_id"]}})
    logger.info("Comment %s added to entry %s by %s", doc["_id"], entry_id, author_id)
    return doc


def list_comments(db: Database, entry_id: str, viewer_id: Optional[str]) -> List[Dict[str, Any]]:
    read_entry(db, entry_id, viewer_id)
    return get_documents(db, "comment", {"entry_id": entry_id}, sort=[("created_at", 1), ("_id", 1)])


def delete_comment(db: Database, entry_id: str, comment_id: str, requester_id: str) -> None:
    comment = get_comment(db, comment_id)
    if comment["entry_id"] != entry_id:
        raise NotFound("Comment not found")
    entry = get_entry(db, entry_id)
    if not can_delete_comment(comment, entry_resource(db, entry), requester_id):
        raise AccessDenied("Access denied")
    try:
        db["journalentry"].update_one({"_id": entry_id}, {"$pull": {"comments": comment_id}})
        db["comment"].update_many({"reply_to": comment_id}, {"$set": {"reply_to": None}})
        db["comment"].delete_one({"_id": comment_id})
    except PyMongoError as exc:
        logger.exception("Delete of comment %s interrupted", comment_id)
        raise PartialFailure("Comment was only partially deleted") from exc
    logger.info("Comment %s deleted from entry %s", comment_id, entry_id)
