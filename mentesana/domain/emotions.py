"""
Emotion lookup, logging and the history / calendar views.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import insert, select

from mentesana.db import Database
from mentesana.domain.common import clean_text, now, require_text
from mentesana.errors import BadRequest
from mentesana.schema import emotion_logs, emotions

FIND_EMOTION_BY_NAME = (
    'SELECT "IdEmocion" FROM "Emociones" WHERE LOWER("Nombre") = LOWER(:name)'
)


def _log_query(user_id: int):
    return (
        select(
            emotions.c.Nombre,
            emotions.c.Color,
            emotions.c.Icono,
            emotion_logs.c.Nota,
            emotion_logs.c.FechaRegistro,
        )
        .select_from(
            emotion_logs.join(emotions, emotion_logs.c.IdEmocion == emotions.c.IdEmocion)
        )
        .where(emotion_logs.c.IdUsuario == user_id)
        .order_by(emotion_logs.c.FechaRegistro.desc(), emotion_logs.c.IdRegistro.desc())
    )


def _local_date(value: Optional[datetime]) -> Optional[str]:
    return value.date().isoformat() if value else None


def _local_time(value: Optional[datetime]) -> Optional[str]:
    return value.strftime("%H:%M:%S") if value else None


def list_emotions(db: Database) -> list[dict]:
    return db.query_all(select(emotions).order_by(emotions.c.IdEmocion))


def log_emotion(db: Database, user_id: int, name: Any, note: Any = None) -> dict:
    name = require_text(name, "Invalid emotion type")
    emotion = db.query_one(FIND_EMOTION_BY_NAME, {"name": name})
    if emotion is None:
        raise BadRequest("Invalid emotion type")

    db.execute(
        insert(emotion_logs).values(
            IdUsuario=user_id,
            IdEmocion=emotion["IdEmocion"],
            Nota=clean_text(note),
            FechaRegistro=now(),
        )
    )
    return {"success": True, "message": "Saved"}


def emotion_history(db: Database, user_id: int) -> list[dict]:
    rows = db.query_all(_log_query(user_id))
    for row in rows:
        row["Fecha"] = _local_date(row["FechaRegistro"])
        row["Hora"] = _local_time(row["FechaRegistro"])
    return rows


def emotion_calendar(db: Database, user_id: int) -> list[dict]:
    return [
        {
            "emocion": row["Nombre"],
            "Color": row["Color"],
            "Icono": row["Icono"],
            "Nota": row["Nota"],
            "FechaRegistro": row["FechaRegistro"],
            "fecha": _local_date(row["FechaRegistro"]),
            "Hora": _local_time(row["FechaRegistro"]),
        }
        for row in db.query_all(_log_query(user_id))
    ]
