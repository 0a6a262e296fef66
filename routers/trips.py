from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator
from pymongo.database import Database

from auth import get_current_user, get_optional_user
from database import get_db
from graph import create_trip, delete_trip, list_trips, list_user_trips, read_trip, update_trip
from schemas import PUBLIC, Coordinates, normalize_privacy
from views import trip_view

router = APIRouter(prefix="/trips", tags=["trips"])


class TripCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    destination: str = Field(..., min_length=1)
    destination_coordinates: Optional[Coordinates] = None
    start_date: datetime
    end_date: datetime
    privacy: str = PUBLIC
    tags: List[str] = []
    cover_photo: str = ""

    @field_validator("privacy")
    @classmethod
    def _tier(cls, v):
        return normalize_privacy(v)

class TripUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    destination: Optional[str] = Field(None, min_length=1)
    destination_coordinates: Optional[Coordinates] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    privacy: Optional[str] = None
    tags: Optional[List[str]] = None
    cover_photo: Optional[str] = None

    @field_validator("privacy")
    @classmethod
    def _tier(cls, v):
        return normalize_privacy(v)


@router.get("")
def get_trips(viewer: Optional[str] = Depends(get_optional_user), db: Database = Depends(get_db)):
    return [trip_view(db, t) for t in list_trips(db, viewer)]


@router.get("/user/{user_id}")
def get_user_trips(user_id: str, viewer: Optional[str] = Depends(get_optional_user),
                   db: Database = Depends(get_db)):
    return [trip_view(db, t) for t in list_user_trips(db, user_id, viewer)]


@router.post("", status_code=201)
def post_trip(data: TripCreate, user_id: str = Depends(get_current_user), db: Database = Depends(get_db)):
    return trip_view(db, create_trip(db, user_id, data.model_dump()))


@router.get("/{trip_id}")
def get_trip(trip_id: str, viewer: Optional[str] = Depends(get_optional_user), db: Database = Depends(get_db)):
    return trip_view(db, read_trip(db, trip_id, viewer), with_entries=True)


@router.put("/{trip_id}")
def put_trip(trip_id: str, data: TripUpdate, user_id: str = Depends(get_current_user),
             db: Database = Depends(get_db)):
    update = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
    return trip_view(db, update_trip(db, trip_id, user_id, update))


@router.delete("/{trip_id}")
def remove_trip(trip_id: str, user_id: str = Depends(get_current_user), db: Database = Depends(get_db)):
    delete_trip(db, trip_id, user_id)
    return {"message": "Trip deleted successfully"}
