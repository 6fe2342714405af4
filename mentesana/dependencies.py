"""
Dependency wiring for the FastAPI app.

The database adapter and settings live on ``app.state`` for the lifetime of
the process; routes receive them through these dependencies.
"""

from __future__ import annotations

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from mentesana.config import Settings
from mentesana.db import Database
from mentesana.errors import Forbidden, Internal, Unauthorized
from mentesana.security import TokenIdentity, verify_token

_bearer = HTTPBearer(auto_error=False)


def get_db(request: Request) -> Database:
    db = getattr(request.app.state, "db", None)
    if db is None:
        raise Internal("Database is not initialized")
    return db


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(get_app_settings),
) -> TokenIdentity:
    """Resolve the bearer token; no database access is involved."""
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Token required")
    try:
        return verify_token(credentials.credentials, settings)
    except jwt.InvalidTokenError as exc:
        raise Forbidden("Invalid token") from exc
