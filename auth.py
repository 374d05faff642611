"""
Identity resolution.

Every request is served on behalf of an owner id. A valid bearer token
supplies a durable id; anything else gets a fresh guest id for that call
only, so guests must keep and replay the token from POST /api/auth/guest
to see the same cart twice.
"""
import os
from datetime import timedelta
from typing import Optional

import structlog
from fastapi import Header
from jose import JWTError, jwt
from pydantic import BaseModel

from utils import make_reference, utcnow

logger = structlog.get_logger(__name__)

JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me")
JWT_ALG = "HS256"
TOKEN_TTL = timedelta(days=7)


class Identity(BaseModel):
    user_id: str
    is_guest: bool = False


def new_guest_id() -> str:
    return make_reference("guest")


def create_token(user_id: str, is_guest: bool = False) -> str:
    payload = {
        "userId": user_id,
        "isGuest": is_guest,
        "exp": utcnow() + TOKEN_TTL,
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALG)


def decode_token(token: str) -> Optional[Identity]:
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALG])
    except JWTError as exc:
        logger.debug("Rejected bearer token", error=str(exc))
        return None
    user_id = payload.get("userId")
    if not user_id:
        return None
    return Identity(user_id=str(user_id), is_guest=bool(payload.get("isGuest", False)))


def resolve_identity(authorization: Optional[str]) -> Identity:
    if authorization:
        token = authorization.replace("Bearer ", "").strip()
        identity = decode_token(token) if token else None
        if identity is not None:
            return identity
    return Identity(user_id=new_guest_id(), is_guest=True)


def get_identity(authorization: Optional[str] = Header(None)) -> Identity:
    return resolve_identity(authorization)
