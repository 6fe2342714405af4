"""
Password hashing and stateless session tokens.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from mentesana.config import Settings

TOKEN_ALGORITHM = "HS256"


@dataclass
class TokenIdentity:
    user_id: int
    email: str


def hash_password(password: str, rounds: int = 10) -> str:
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def check_password(password: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # stored value is not a bcrypt hash
        return False


def issue_token(user_id: int, email: str, settings: Settings) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "userId": user_id,
        "email": email,
        "iat": now,
        "exp": now + timedelta(days=settings.token_ttl_days),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=TOKEN_ALGORITHM)


def verify_token(token: str, settings: Settings) -> TokenIdentity:
    """Decode a token; raises ``jwt.InvalidTokenError`` when it is bad or expired."""
    payload = jwt.decode(token, settings.jwt_secret, algorithms=[TOKEN_ALGORITHM])
    try:
        return TokenIdentity(user_id=int(payload["userId"]), email=payload.get("email", ""))
    except (KeyError, TypeError, ValueError) as exc:
        raise jwt.InvalidTokenError("Token payload is missing userId") from exc
