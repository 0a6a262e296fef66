from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pymongo.database import Database

from database import get_db
from errors import InvalidArgument
from schemas import normalize_mood
from search import parse_tags, search_entries, search_trips, search_users
from views import entry_view, trip_view

router = APIRouter(prefix="/search", tags=["search"])


@router.get("/trips")
def find_trips(q: Optional[str] = None, tags: Optional[str] = None,
               start_date: Optional[datetime] = Query(None), end_date: Optional[datetime] = Query(None),
               db: Database = Depends(get_db)):
    trips = search_trips(db, q, parse_tags(tags), start_date, end_date)
    return [trip_view(db, t) for t in trips]


@router.get("/entries")
def find_entries(q: Optional[str] = None, mood: Optional[str] = None, tags: Optional[str] = None,
                 db: Database = Depends(get_db)):
    try:
        mood = normalize_mood(mood or None)
    except ValueError as exc:
        raise InvalidArgument(str(exc))
    entries = search_entries(db, q, mood, parse_tags(tags))
    return [entry_view(db, e, with_trip=True) for e in entries]


@router.get("/users")
def find_users(q: Optional[str] = None, db: Database = Depends(get_db)):
    return search_users(db, q)
