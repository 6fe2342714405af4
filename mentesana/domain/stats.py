"""
Per-user activity counters.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy import and_, select

from mentesana.db import Database
from mentesana.schema import ChallengeStatus, emotion_logs

STREAK_WINDOW_DAYS = 7

COUNT_EMOTION_LOGS = 'SELECT COUNT(*) AS total FROM "RegistroEmocional" WHERE "IdUsuario" = :user_id'
COUNT_EXERCISE_SESSIONS = 'SELECT COUNT(*) AS total FROM "SesionesEjercicio" WHERE "IdUsuario" = :user_id'
COUNT_CHALLENGES_BY_STATUS = (
    'SELECT COUNT(*) AS total FROM "Retos" WHERE "IdUsuario" = :user_id AND "Estado" = :status'
)


def _count(db: Database, query: str, **params) -> int:
    row = db.query_one(query, params)
    return int(row["total"] or 0) if row else 0


def active_days(db: Database, user_id: int, today: Optional[date] = None) -> int:
    """Distinct local dates with an emotion log in the trailing window, today included."""
    today = today or datetime.now().date()
    first_day = today - timedelta(days=STREAK_WINDOW_DAYS - 1)
    window_end = datetime.combine(today + timedelta(days=1), time.min)
    rows = db.query_all(
        select(emotion_logs.c.FechaRegistro).where(
            and_(
                emotion_logs.c.IdUsuario == user_id,
                emotion_logs.c.FechaRegistro >= datetime.combine(first_day, time.min),
                emotion_logs.c.FechaRegistro < window_end,
            )
        )
    )
    return len({row["FechaRegistro"].date() for row in rows})


def summary(db: Database, user_id: int, today: Optional[date] = None) -> dict:
    return {
        "emocionesRegistradas": _count(db, COUNT_EMOTION_LOGS, user_id=user_id),
        "ejerciciosRealizados": _count(db, COUNT_EXERCISE_SESSIONS, user_id=user_id),
        "retosCompletados": _count(
            db,
            COUNT_CHALLENGES_BY_STATUS,
            user_id=user_id,
            status=ChallengeStatus.FULFILLED.value,
        ),
        "diasConsecutivos": active_days(db, user_id, today),
    }
