"""
MongoDB access for the Travel Journal API.

Collections (one per stored model, lowercased class name):
user, trip, journalentry, comment.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

from config import DATABASE_NAME, DATABASE_URL
from errors import JournalError

logger = logging.getLogger(__name__)

client: Optional[MongoClient] = None
db: Optional[Database] = None

if DATABASE_URL:
    client = MongoClient(DATABASE_URL)
    db = client[DATABASE_NAME]
else:
    logger.warning("DATABASE_URL is not set, database is unavailable")


def oid() -> str:
    return str(ObjectId())


def now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC, which is how MongoDB stores and returns them."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def naive_utc(value: datetime) -> datetime:
    return as_utc(value).replace(tzinfo=None)


def get_db() -> Database:
    """FastAPI dependency handing the shared database handle to a route."""
    if db is None:
        raise JournalError("Database not configured")
    return db


def ensure_indexes(database: Database) -> None:
    database["user"].create_index([("username", ASCENDING)], unique=True)
    database["user"].create_index([("email", ASCENDING)], unique=True)
    database["trip"].create_index([("user_id", ASCENDING)])
    database["journalentry"].create_index([("trip_id", ASCENDING)])
    database["comment"].create_index([("entry_id", ASCENDING)])


def create_document(database: Database, collection_name: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """Insert a document with a string id and timestamps, returning it."""
    doc = dict(data)
    doc.setdefault("_id", oid())
    stamp = now()
    doc.setdefault("created_at", stamp)
    doc["updated_at"] = stamp
    database[collection_name].insert_one(doc)
    return doc


def get_documents(database: Database, collection_name: str, filter_dict: Optional[Dict[str, Any]] = None,
                  sort: Optional[List] = None, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    cursor = database[collection_name].find(filter_dict or {})
    if sort:
        cursor = cursor.sort(sort)
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)
