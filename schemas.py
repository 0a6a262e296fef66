"""
Database Schemas for the Travel Journal API

Each Pydantic model maps to a MongoDB collection (lowercased class name).
Nested models describe embedded sub-documents and are reused by the
request bodies in routers/.
"""
from pydantic import BaseModel, Field, EmailStr, field_validator
from typing import Optional, List
from datetime import datetime

PUBLIC = "public"
PRIVATE = "private"
FRIENDS = "friends"
PRIVACY_TIERS = (PUBLIC, PRIVATE, FRIENDS)

# Older clients send "friends-only"
PRIVACY_ALIASES = {"friends-only": FRIENDS}

MOODS = ("excited", "happy", "relaxed", "adventurous", "nostalgic", "tired", "amazed", "peaceful")


def normalize_privacy(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = PRIVACY_ALIASES.get(value, value)
    if value not in PRIVACY_TIERS:
        raise ValueError(f"privacy must be one of {', '.join(PRIVACY_TIERS)}")
    return value


def normalize_mood(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in MOODS:
        raise ValueError(f"mood must be one of {', '.join(MOODS)}")
    return value


# Embedded documents

class Coordinates(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

class Photo(BaseModel):
    url: str
    caption: str = ""
    public_id: Optional[str] = Field(None, description="Id in the photo storage service")

class WeatherData(BaseModel):
    temperature: Optional[float] = None
    description: Optional[str] = None
    humidity: Optional[float] = None
    wind_speed: Optional[float] = None

class PrivacySettings(BaseModel):
    profile_visibility: str = PUBLIC
    trips_visibility: str = PUBLIC

    @field_validator("profile_visibility", "trips_visibility")
    @classmethod
    def _tier(cls, v):
        return normalize_privacy(v)

class TravelStatistics(BaseModel):
    countries_visited: int = 0
    total_trips: int = 0
    total_distance: float = 0

# Collections

class User(BaseModel):
    username: str = Field(..., min_length=3, max_length=32, description="Public handle")
    email: EmailStr
    first_name: str = ""
    last_name: str = ""
    bio: str = Field("", max_length=500)
    location: str = ""
    avatar: str = ""
    privacy_settings: PrivacySettings = Field(default_factory=PrivacySettings)
    travel_statistics: TravelStatistics = Field(default_factory=TravelStatistics)
    followers: List[str] = Field(default_factory=list)
    following: List[str] = Field(default_factory=list)

class Trip(BaseModel):
    user_id: str = Field(..., description="Owner (ObjectId as string)")
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    destination: str = Field(..., min_length=1)
    destination_coordinates: Optional[Coordinates] = None
    start_date: datetime
    end_date: datetime
    privacy: str = PUBLIC
    entries: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    cover_photo: str = ""

    @field_validator("privacy")
    @classmethod
    def _tier(cls, v):
        return normalize_privacy(v)

class JournalEntry(BaseModel):
    trip_id: str
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    location: str = ""
    location_coordinates: Optional[Coordinates] = None
    photos: List[Photo] = Field(default_factory=list)
    weather_data: Optional[WeatherData] = None
    likes: List[str] = Field(default_factory=list)
    comments: List[str] = Field(default_factory=list)
    mood: str = "happy"
    personal_tags: List[str] = Field(default_factory=list)
    date: datetime

    @field_validator("mood")
    @classmethod
    def _mood(cls, v):
        return normalize_mood(v)

class Comment(BaseModel):
    entry_id: str
    user_id: str
    content: str = Field(..., min_length=1, max_length=1000)
    reply_to: Optional[str] = None
    likes: List[str] = Field(default_factory=list)
