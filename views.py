"""
Response shaping: populate references and strip private fields.
"""
from typing import Any, Dict, List

from pymongo.database import Database

USER_SUMMARY = {"username": 1, "first_name": 1, "last_name": 1, "avatar": 1}
USER_PUBLIC = {**USER_SUMMARY, "travel_statistics": 1}
CREDENTIAL_FIELDS = ("password_hash", "password_salt")


def public_profile(user: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in user.items() if k not in CREDENTIAL_FIELDS}


def user_summary(db: Database, user_id: str) -> Dict[str, Any]:
    u = db["user"].find_one({"_id": user_id}, USER_SUMMARY)
    return u or {"_id": user_id, "username": "unknown", "first_name": "", "last_name": "", "avatar": ""}


def users_summary(db: Database, user_ids: List[str]) -> List[Dict[str, Any]]:
    """Summaries for ``user_ids`` in the given order; unknown ids are skipped."""
    if not user_ids:
        return []
    found = {u["_id"]: u for u in db["user"].find({"_id": {"$in": list(user_ids)}}, USER_SUMMARY)}
    return [found[uid] for uid in user_ids if uid in found]


def _ordered(db: Database, collection: str, ids: List[str]) -> List[Dict[str, Any]]:
    if not ids:
        return []
    found = {d["_id"]: d for d in db[collection].find({"_id": {"$in": list(ids)}})}
    return [found[i] for i in ids if i in found]


def comment_view(db: Database, comment: Dict[str, Any]) -> Dict[str, Any]:
    view = dict(comment)
    view["user"] = user_summary(db, comment["user_id"])
    view["likes_count"] = len(comment.get("likes") or [])
    return view


def entry_view(db: Database, entry: Dict[str, Any], with_trip: bool = False) -> Dict[str, Any]:
    view = dict(entry)
    likes = entry.get("likes") or []
    view["likes"] = users_summary(db, likes)
    view["likes_count"] = len(likes)
    view["comments"] = [comment_view(db, c) for c in _ordered(db, "comment", entry.get("comments") or [])]
    view["comments_count"] = len(view["comments"])
    if with_trip:
        trip = db["trip"].find_one({"_id": entry["trip_id"]},
                                   {"title": 1, "destination": 1, "user_id": 1, "privacy": 1})
        if trip:
            trip["user"] = user_summary(db, trip["user_id"])
        view["trip"] = trip
    return view


def trip_view(db: Database, trip: Dict[str, Any], with_entries: bool = False) -> Dict[str, Any]:
    view = dict(trip)
    view["user"] = user_summary(db, trip["user_id"])
    view["entries_count"] = len(trip.get("entries") or [])
    if with_entries:
        view["entries"] = [entry_view(db, e) for e in _ordered(db, "journalentry", trip.get("entries") or [])]
    return view


def profile_view(db: Database, user: Dict[str, Any]) -> Dict[str, Any]:
    view = public_profile(user)
    view["followers"] = users_summary(db, user.get("followers") or [])
    view["following"] = users_summary(db, user.get("following") or [])
    return view
