"""Supabase JWT validation dependency for FastAPI."""

import logging
from dataclasses import dataclass

from fastapi import Header, HTTPException

from genproxy.db.supabase_client import get_supabase

logger = logging.getLogger(__name__)


@dataclass
class AuthenticatedUser:
    id: str
    email: str | None
    access_token: str


def verify_jwt(authorization: str = Header(None)) -> AuthenticatedUser:
    """Validate the Supabase JWT from the Authorization header.

    Returns the authenticated user together with the raw token, which the
    history store uses to run queries as that user.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid token")

    token = authorization.replace("Bearer ", "", 1)
    client = get_supabase()
    try:
        user_response = client.auth.get_user(token)
    except Exception as exc:
        logger.info("Rejected token: %s", exc)
        raise HTTPException(status_code=401, detail="Invalid token") from exc

    user = getattr(user_response, "user", None)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid token")
    return AuthenticatedUser(id=user.id, email=getattr(user, "email", None), access_token=token)
