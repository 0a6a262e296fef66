from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, Field
from pymongo.database import Database

from auth import get_current_user, issue_token
from database import get_db
from errors import InvalidArgument
from graph import authenticate, create_user, get_user
from views import public_profile

router = APIRouter(prefix="/auth", tags=["auth"])


class SignupRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=32)
    email: EmailStr
    password: str = Field(..., min_length=6)
    first_name: Optional[str] = None
    last_name: Optional[str] = None

class LoginRequest(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: str

class TokenResponse(BaseModel):
    token: str
    user_id: str
    username: str
    user: Dict[str, Any]


def _token_response(user: Dict[str, Any]) -> TokenResponse:
    return TokenResponse(token=issue_token(user["_id"]), user_id=user["_id"],
                         username=user["username"], user=public_profile(user))


@router.post("/signup", response_model=TokenResponse, status_code=201)
@router.post("/register", response_model=TokenResponse, status_code=201)
def signup(req: SignupRequest, db: Database = Depends(get_db)):
    user = create_user(db, req.username, req.email, req.password, req.first_name, req.last_name)
    return _token_response(user)


@router.post("/login", response_model=TokenResponse)
def login(req: LoginRequest, db: Database = Depends(get_db)):
    handle = req.username or req.email
    if not handle:
        raise InvalidArgument("username or email is required")
    return _token_response(authenticate(db, handle, req.password))


@router.get("/me")
def me(user_id: str = Depends(get_current_user), db: Database = Depends(get_db)):
    return public_profile(get_user(db, user_id))
