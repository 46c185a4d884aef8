"""Utility for issuing and reading access tokens."""

from datetime import datetime, timedelta, timezone

import jwt
from pydantic import BaseModel

from home.settings import settings

AUDIENCE = "authenticated"
ALGORITHM = "HS256"


class Identity(BaseModel):
    """Who the bearer token says the caller is."""

    email: str
    name: str


def create_access_token(email: str, name: str) -> str:
    """
    Creates a token shaped like a Supabase access token.

    Args:
        email (str): The account email, also used as the subject.
        name (str): Display name, stored in user_metadata.

    Returns:
        str: The encoded JWT token.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "iat": now,
        "exp": now + timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS),
        "sub": email,
        "aud": AUDIENCE,
        "role": AUDIENCE,
        "email": email,
        "user_metadata": {"name": name},
    }
    return jwt.encode(payload, settings.SUPABASE_JWT_SECRET, algorithm=ALGORITHM)


def decode_identity(token: str) -> Identity:
    """Raises jwt.InvalidTokenError (or a subclass) for anything unusable."""
    payload = jwt.decode(
        token, settings.SUPABASE_JWT_SECRET, algorithms=[ALGORITHM], audience=AUDIENCE
    )
    email = payload.get("email") or payload.get("sub")
    if not email or "@" not in email:
        raise jwt.InvalidTokenError("Token carries no email")
    metadata = payload.get("user_metadata") or {}
    name = metadata.get("name") or metadata.get("full_name") or email.split("@")[0]
    return Identity(email=email.lower(), name=name)
