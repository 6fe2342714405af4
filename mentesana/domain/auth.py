"""
Registration and login.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import insert, select

from mentesana.config import Settings
from mentesana.db import Database
from mentesana.domain.common import clean_text, now
from mentesana.errors import BadRequest, Conflict, NotFound, Unauthorized
from mentesana.schema import profiles, users
from mentesana.security import check_password, hash_password, issue_token

logger = logging.getLogger(__name__)


def public_user(row: dict) -> dict:
    """The stored user row without its password hash."""
    return {key: value for key, value in row.items() if key != "Contrasena"}


def _find_by_email(db: Database, email: str) -> Optional[dict]:
    return db.query_one(select(users).where(users.c.Correo == email))


def register(
    db: Database,
    settings: Settings,
    name: Optional[str],
    email: Optional[str],
    password: Optional[str],
) -> dict:
    name, email, password = clean_text(name), clean_text(email), clean_text(password)
    if not name or not email or not password:
        raise BadRequest("Missing required fields")

    if _find_by_email(db, email) is not None:
        raise Conflict("User already exists")

    hashed = hash_password(password, settings.bcrypt_rounds)
    with db.transaction() as tx:
        result = tx.execute(
            insert(users).values(
                Nombre=name,
                Correo=email,
                Contrasena=hashed,
                Nivel=1,
                Puntos=0,
                FechaRegistro=now(),
            )
        )
        user_id = result.inserted_id
        tx.compensate(users.delete().where(users.c.IdUsuario == user_id))
        tx.execute(insert(profiles).values(IdUsuario=user_id))
        tx.compensate(profiles.delete().where(profiles.c.IdUsuario == user_id))
        user = tx.query_one(select(users).where(users.c.IdUsuario == user_id))

    logger.info("Registered user %s", user_id)
    token = issue_token(user["IdUsuario"], user["Correo"], settings)
    return {"token": token, "user": public_user(user)}


def login(
    db: Database, settings: Settings, email: Optional[str], password: Optional[str]
) -> dict:
    email, password = clean_text(email), clean_text(password)
    if not email or not password:
        raise BadRequest("Email and password are required")

    user = _find_by_email(db, email)
    if user is None:
        raise NotFound("User not found")
    if not check_password(password, user["Contrasena"]):
        raise Unauthorized("Incorrect password")

    token = issue_token(user["IdUsuario"], user["Correo"], settings)
    return {"token": token, "user": public_user(user)}
