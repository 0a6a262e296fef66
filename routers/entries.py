from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field, field_validator
from pymongo.database import Database

from auth import get_current_user, get_optional_user
from database import get_db
from graph import (add_comment, create_entry, delete_comment, delete_entry, like_comment, like_entry,
                   list_comments, list_entries, read_entry, update_entry)
from schemas import Coordinates, Photo, WeatherData, normalize_mood
from views import comment_view, entry_view, users_summary

router = APIRouter(prefix="/entries", tags=["entries"])


class EntryCreate(BaseModel):
    trip_id: str
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    location: str = ""
    location_coordinates: Optional[Coordinates] = None
    photos: List[Photo] = []
    weather_data: Optional[WeatherData] = None
    mood: Optional[str] = None
    personal_tags: List[str] = []
    date: Optional[datetime] = None

    @field_validator("mood")
    @classmethod
    def _mood(cls, v):
        return normalize_mood(v)

class EntryUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=1)
    location: Optional[str] = None
    location_coordinates: Optional[Coordinates] = None
    photos: Optional[List[Photo]] = None
    weather_data: Optional[WeatherData] = None
    mood: Optional[str] = None
    personal_tags: Optional[List[str]] = None
    date: Optional[datetime] = None

    @field_validator("mood")
    @classmethod
    def _mood(cls, v):
        return normalize_mood(v)

class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=1000)
    reply_to: Optional[str] = None


def _like_response(db: Database, result):
    return {
        "liked": result["liked"],
        "count": result["count"],
        "likesCount": result["count"],
        "likes": users_summary(db, result["likes"]),
    }


@router.get("")
def get_entries(trip_id: str = Query(...), viewer: Optional[str] = Depends(get_optional_user),
                db: Database = Depends(get_db)):
    return [entry_view(db, e) for e in list_entries(db, trip_id, viewer)]


@router.get("/trip/{trip_id}")
def get_trip_entries(trip_id: str, viewer: Optional[str] = Depends(get_optional_user),
                     db: Database = Depends(get_db)):
    return [entry_view(db, e) for e in list_entries(db, trip_id, viewer)]


@router.post("", status_code=201)
def post_entry(data: EntryCreate, user_id: str = Depends(get_current_user), db: Database = Depends(get_db)):
    fields = data.model_dump(exclude={"trip_id"})
    return entry_view(db, create_entry(db, data.trip_id, user_id, fields))


@router.get("/{entry_id}")
def get_entry(entry_id: str, viewer: Optional[str] = Depends(get_optional_user),
              db: Database = Depends(get_db)):
    return entry_view(db, read_entry(db, entry_id, viewer), with_trip=True)


@router.put("/{entry_id}")
def put_entry(entry_id: str, data: EntryUpdate, user_id: str = Depends(get_current_user),
              db: Database = Depends(get_db)):
    update = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
    return entry_view(db, update_entry(db, entry_id, user_id, update))


@router.delete("/{entry_id}")
def remove_entry(entry_id: str, user_id: str = Depends(get_current_user), db: Database = Depends(get_db)):
    delete_entry(db, entry_id, user_id)
    return {"message": "Entry deleted successfully"}


@router.post("/{entry_id}/like")
def toggle_entry_like(entry_id: str, user_id: str = Depends(get_current_user), db: Database = Depends(get_db)):
    return _like_response(db, like_entry(db, entry_id, user_id))


@router.get("/{entry_id}/comments")
def get_comments(entry_id: str, viewer: Optional[str] = Depends(get_optional_user),
                 db: Database = Depends(get_db)):
    return [comment_view(db, c) for c in list_comments(db, entry_id, viewer)]


@router.post("/{entry_id}/comment", status_code=201)
@router.post("/{entry_id}/comments", status_code=201)
def post_comment(entry_id: str, data: CommentCreate, user_id: str = Depends(get_current_user),
                 db: Database = Depends(get_db)):
    return comment_view(db, add_comment(db, entry_id, user_id, data.content, data.reply_to))


@router.delete("/{entry_id}/comments/{comment_id}")
def remove_comment(entry_id: str, comment_id: str, user_id: str = Depends(get_current_user),
                   db: Database = Depends(get_db)):
    delete_comment(db, entry_id, comment_id, user_id)
    return {"message": "Comment deleted successfully"}


@router.post("/{entry_id}/comments/{comment_id}/like")
def toggle_comment_like(entry_id: str, comment_id: str, user_id: str = Depends(get_current_user),
                        db: Database = Depends(get_db)):
    return _like_response(db, like_comment(db, entry_id, comment_id, user_id))
