from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from pymongo.database import Database

from access import profile_resource, require_read
from auth import get_current_user, get_optional_user
from database import get_db
from graph import follow_user, get_user, unfollow_user, update_profile
from schemas import PrivacySettings
from search import search_users
from views import profile_view, users_summary

router = APIRouter(prefix="/users", tags=["users"])


class ProfileUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    bio: Optional[str] = Field(None, max_length=500)
    location: Optional[str] = None
    avatar: Optional[str] = None
    privacy_settings: Optional[PrivacySettings] = None


def _visible_user(db: Database, user_id: str, viewer: Optional[str]):
    user = get_user(db, user_id)
    require_read(profile_resource(user), viewer)
    return user


# /profile and /search must be declared before /{user_id}
@router.get("/profile")
def get_profile(user_id: str = Depends(get_current_user), db: Database = Depends(get_db)):
    return profile_view(db, get_user(db, user_id))


@router.put("/profile")
def put_profile(data: ProfileUpdate, user_id: str = Depends(get_current_user), db: Database = Depends(get_db)):
    return profile_view(db, update_profile(db, user_id, data.model_dump(exclude_unset=True)))


@router.get("/search")
def find_users(q: Optional[str] = Query(None), db: Database = Depends(get_db)):
    return search_users(db, q)


@router.get("/{user_id}")
def get_user_profile(user_id: str, viewer: Optional[str] = Depends(get_optional_user),
                     db: Database = Depends(get_db)):
    return profile_view(db, _visible_user(db, user_id, viewer))


@router.post("/{user_id}/follow")
def toggle_follow(user_id: str, actor: str = Depends(get_current_user), db: Database = Depends(get_db)):
    return follow_user(db, actor, user_id)


@router.delete("/{user_id}/follow")
def unfollow(user_id: str, actor: str = Depends(get_current_user), db: Database = Depends(get_db)):
    return unfollow_user(db, actor, user_id)


@router.get("/{user_id}/followers")
def get_followers(user_id: str, viewer: Optional[str] = Depends(get_optional_user),
                  db: Database = Depends(get_db)):
    user = _visible_user(db, user_id, viewer)
    return users_summary(db, user.get("followers") or [])


@router.get("/{user_id}/following")
def get_following(user_id: str, viewer: Optional[str] = Depends(get_optional_user),
                  db: Database = Depends(get_db)):
    user = _visible_user(db, user_id, viewer)
    return users_summary(db, user.get("following") or [])
