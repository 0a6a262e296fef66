import base64
import hashlib
import hmac
import json
import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from fastapi import Header

from config import AUTH_SECRET, TOKEN_TTL_MINUTES
from errors import InvalidCredential, MissingCredential

logger = logging.getLogger(__name__)

PBKDF2_ROUNDS = 100_000


def hash_password(password: str, salt: Optional[str] = None) -> Dict[str, str]:
    salt_bytes = os.urandom(16) if salt is None else base64.b64decode(salt)
    hashed = hashlib.pbkdf2_hmac("sha256", password.encode(), salt_bytes, PBKDF2_ROUNDS)
    return {
        "salt": base64.b64encode(salt_bytes).decode(),
        "hash": base64.b64encode(hashed).decode(),
    }


def verify_password(password: str, salt: str, stored_hash: str) -> bool:
    calc = hash_password(password, salt)
    return hmac.compare_digest(calc["hash"], stored_hash)


def _sign(data: str, secret: str) -> str:
    return hmac.new(secret.encode(), data.encode(), hashlib.sha256).hexdigest()


def issue_token(user_id: str, now: Optional[datetime] = None, secret: str = AUTH_SECRET,
                ttl_minutes: int = TOKEN_TTL_MINUTES) -> str:
    """
    Mint a signed token for ``user_id``.

    The token is ``<base64url(json payload)>.<hex hmac-sha256>``; the payload
    holds the user id plus issue and expiry times as unix seconds.
    """
    issued = now or datetime.now(timezone.utc)
    payload = {
        "user_id": user_id,
        "iat": int(issued.timestamp()),
        "exp": int((issued + timedelta(minutes=ttl_minutes)).timestamp()),
    }
    data = base64.urlsafe_b64encode(json.dumps(payload, separators=(",", ":")).encode()).decode()
    return f"{data}.{_sign(data, secret)}"


def verify_token(token: str, now: Optional[datetime] = None, secret: str = AUTH_SECRET) -> str:
    """Return the user id bound to ``token`` or raise InvalidCredential."""
    try:
        data, sig = token.split(".")
        payload = json.loads(base64.urlsafe_b64decode(data.encode()).decode())
    except (ValueError, UnicodeDecodeError):
        raise InvalidCredential("Invalid token")
    if not hmac.compare_digest(sig.encode(), _sign(data, secret).encode()):
        raise InvalidCredential("Invalid token")
    if not isinstance(payload, dict) or not payload.get("user_id"):
        raise InvalidCredential("Invalid token payload")
    current = now or datetime.now(timezone.utc)
    try:
        expires = int(payload["exp"])
    except (KeyError, TypeError, ValueError):
        raise InvalidCredential("Invalid token payload")
    if current.timestamp() >= expires:
        raise InvalidCredential("Token expired")
    return str(payload["user_id"])


def _bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.lower().startswith("bearer "):
        return None
    return authorization.split(" ", 1)[1].strip() or None


def get_current_user(authorization: Optional[str] = Header(None)) -> str:
    token = _bearer(authorization)
    if token is None:
        raise MissingCredential("Missing token")
    return verify_token(token)


def get_optional_user(authorization: Optional[str] = Header(None)) -> Optional[str]:
    """Like get_current_user, but anonymous callers (or bad tokens) yield None."""
    token = _bearer(authorization)
    if token is None:
        return None
    try:
        return verify_token(token)
    except InvalidCredential as exc:
        logger.debug("Ignoring bad token on optional-auth route: %s", exc.message)
        return None
