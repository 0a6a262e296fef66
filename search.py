"""
Query/search layer.

Filter builders are pure and return MongoDB predicates; the search_* calls
run them. Search only ever looks at public trips and their entries, even for
the trips' owners.
"""
import re
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from pymongo.database import Database

from config import SEARCH_LIMIT, USER_SEARCH_LIMIT
from database import get_documents, naive_utc
from errors import InvalidArgument
from schemas import PUBLIC
from views import USER_PUBLIC

NEWEST_FIRST = [("created_at", -1), ("_id", -1)]


def parse_tags(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [tag.strip() for tag in raw.split(",") if tag.strip()]


def _contains(text: str) -> Dict[str, str]:
    # Case-insensitive substring match; user input is never a regex
    return {"$regex": re.escape(text.strip()), "$options": "i"}


def _text_clause(text: Optional[str], fields: Iterable[str]) -> Optional[Dict[str, Any]]:
    if not text or not text.strip():
        return None
    return {"$or": [{field: _contains(text)} for field in fields]}


def trip_filter(text: Optional[str] = None, tags: Optional[List[str]] = None,
                start: Optional[datetime] = None, end: Optional[datetime] = None) -> Dict[str, Any]:
    query: Dict[str, Any] = {"privacy": PUBLIC}
    clause = _text_clause(text, ("title", "description", "destination"))
    if clause:
        query.update(clause)
    if tags:
        query["tags"] = {"$in": list(tags)}
    if start or end:
        window = {}
        if start:
            window["$gte"] = naive_utc(start)
        if end:
            window["$lte"] = naive_utc(end)
        query["start_date"] = window
    return query


def entry_filter(trip_ids: List[str], text: Optional[str] = None, mood: Optional[str] = None,
                 tags: Optional[List[str]] = None) -> Dict[str, Any]:
    query: Dict[str, Any] = {"trip_id": {"$in": list(trip_ids)}}
    clause = _text_clause(text, ("title", "content", "location"))
    if clause:
        query.update(clause)
    if mood:
        query["mood"] = mood
    if tags:
        query["personal_tags"] = {"$in": list(tags)}
    return query


def user_filter(text: Optional[str]) -> Dict[str, Any]:
    clause = _text_clause(text, ("username", "first_name", "last_name"))
    if clause is None:
        raise InvalidArgument("Search query is required")
    return clause


def search_trips(db: Database, text: Optional[str] = None, tags: Optional[List[str]] = None,
                 start: Optional[datetime] = None, end: Optional[datetime] = None) -> List[Dict[str, Any]]:
    query = trip_filter(text, tags, start, end)
    return get_documents(db, "trip", query, sort=NEWEST_FIRST, limit=SEARCH_LIMIT)


def search_entries(db: Database, text: Optional[str] = None, mood: Optional[str] = None,
                   tags: Optional[List[str]] = None) -> List[Dict[str, Any]]:
    public_ids = [t["_id"] for t in db["trip"].find({"privacy": PUBLIC}, {"_id": 1})]
    if not public_ids:
        return []
    query = entry_filter(public_ids, text, mood, tags)
    return get_documents(db, "journalentry", query, sort=NEWEST_FIRST, limit=SEARCH_LIMIT)


def search_users(db: Database, text: Optional[str]) -> List[Dict[str, Any]]:
    query = user_filter(text)
    return list(db["user"].find(query, USER_PUBLIC).limit(USER_SEARCH_LIMIT))
