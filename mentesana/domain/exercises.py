"""
Exercise completion and the gratitude exercise. Each completed session
credits the user a fixed number of points.
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import func, insert, select, update

from mentesana.db import Database
from mentesana.domain.common import now, require_int, require_text
from mentesana.errors import BadRequest
from mentesana.schema import (
    EXERCISE_POINTS,
    GRATITUDE_EXERCISE_ID,
    exercise_sessions,
    exercises,
    users,
)


def _record_session(
    db: Database, user_id: int, exercise_id: int, gratitude: Optional[str] = None
) -> int:
    with db.transaction() as tx:
        result = tx.execute(
            insert(exercise_sessions).values(
                IdUsuario=user_id,
                IdEjercicio=exercise_id,
                FechaSesion=now(),
                Completado=True,
                RespuestaGratitud=gratitude,
            )
        )
        session_id = result.inserted_id
        tx.compensate(
            exercise_sessions.delete().where(exercise_sessions.c.IdSesion == session_id)
        )
        tx.execute(
            update(users)
            .where(users.c.IdUsuario == user_id)
            .values(Puntos=func.coalesce(users.c.Puntos, 0) + EXERCISE_POINTS)
        )
    return session_id


def list_exercises(db: Database) -> list[dict]:
    return db.query_all(select(exercises).order_by(exercises.c.IdEjercicio))


def complete_exercise(db: Database, user_id: int, exercise_id: Any) -> dict:
    exercise_id = require_int(exercise_id, "idEjercicio is required")
    known = db.query_one(
        select(exercises.c.IdEjercicio).where(exercises.c.IdEjercicio == exercise_id)
    )
    if known is None:
        raise BadRequest("Exercise not found")

    session_id = _record_session(db, user_id, exercise_id)
    return {
        "success": True,
        "message": "Exercise saved",
        "puntosGanados": EXERCISE_POINTS,
        "idSesion": session_id,
    }


def submit_gratitude(db: Database, user_id: int, first: Any, second: Any, third: Any) -> dict:
    message = "Three gratitude answers are required"
    answers = [require_text(value, message) for value in (first, second, third)]
    note = "1. {} | 2. {} | 3. {}".format(*answers)

    session_id = _record_session(db, user_id, GRATITUDE_EXERCISE_ID, gratitude=note)
    return {
        "success": True,
        "message": "Gratitude saved",
        "puntosGanados": EXERCISE_POINTS,
        "idSesion": session_id,
    }
