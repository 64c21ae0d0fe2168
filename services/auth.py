from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config import settings

_ALGO = "HS256"
_bearer = HTTPBearer(auto_error=False)


def create_token(user_id: str, ttl_minutes: int = 60) -> str:
    exp = datetime.now(timezone.utc) + timedelta(minutes=ttl_minutes)
    payload = {"sub": user_id, "exp": exp}
    return jwt.encode(payload, settings.jwt_secret, algorithm=_ALGO)


def verify_token(token: str) -> str:
    payload = jwt.decode(token, settings.jwt_secret, algorithms=[_ALGO])
    return payload["sub"]


def current_user_id(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> str:
    """FastAPI dependency: user id from a `Bearer` token, 401 otherwise."""
    if creds is None:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Unauthorized")
    try:
        return verify_token(creds.credentials)
    except (jwt.PyJWTError, KeyError):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Unauthorized")
