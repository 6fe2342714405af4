"""
Profile upsert keyed by user id.
"""

from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy import insert, select, update

from mentesana.db import Database
from mentesana.domain.common import optional_text, require_int
from mentesana.errors import NotFound
from mentesana.schema import profiles, users

PROFILE_FIELDS = {
    "nombreCompleto": "NombreCompleto",
    "correoElectronico": "CorreoElectronico",
    "fechaDeNacimiento": "FechaDeNacimiento",
    "genero": "Genero",
    "biografia": "Biografia",
}


def get_profile(db: Database, user_id: int) -> dict:
    row = db.query_one(select(profiles).where(profiles.c.IdUsuario == user_id))
    if row is None:
        raise NotFound("Profile not found")
    return row


def save_profile(db: Database, user_id: Any, data: Mapping[str, Any]) -> dict:
    """
    Create the profile on first save and overwrite the editable fields after
    that. Password-change fields in ``data`` are ignored.
    """
    user_id = require_int(user_id, "idUsuario is required")
    values = {column: optional_text(data.get(field)) for field, column in PROFILE_FIELDS.items()}

    with db.transaction() as tx:
        user = tx.query_one(select(users.c.IdUsuario).where(users.c.IdUsuario == user_id))
        if user is None:
            raise NotFound("User not found")
        existing = tx.query_one(
            select(profiles.c.IdPerfil).where(profiles.c.IdUsuario == user_id)
        )
        if existing is None:
            tx.execute(insert(profiles).values(IdUsuario=user_id, **values))
        else:
            tx.execute(
                update(profiles).where(profiles.c.IdUsuario == user_id).values(**values)
            )
    return {"success": True, "message": "Profile saved"}
