"""
Personal challenges (retos). Every statement is scoped to the owner, so a
challenge that belongs to someone else looks exactly like a missing one.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import and_, insert, select, update

from mentesana.db import Database
from mentesana.domain.common import now, require_text
from mentesana.errors import NotFound
from mentesana.schema import ChallengeStatus, challenges


def _owned(user_id: int, challenge_id: int):
    return and_(challenges.c.IdReto == challenge_id, challenges.c.IdUsuario == user_id)


def list_challenges(db: Database, user_id: int) -> list[dict]:
    return db.query_all(
        select(challenges)
        .where(challenges.c.IdUsuario == user_id)
        .order_by(challenges.c.FechaCreacion.desc(), challenges.c.IdReto.desc())
    )


def create_challenge(db: Database, user_id: int, title: Any) -> dict:
    title = require_text(title, "Title is required")
    with db.transaction() as tx:
        result = tx.execute(
            insert(challenges).values(
                IdUsuario=user_id,
                Titulo=title,
                Estado=ChallengeStatus.PENDING.value,
                FechaCreacion=now(),
            )
        )
        tx.compensate(challenges.delete().where(challenges.c.IdReto == result.inserted_id))
        return tx.query_one(select(challenges).where(challenges.c.IdReto == result.inserted_id))


def set_challenge_status(db: Database, user_id: int, challenge_id: int, fulfilled: bool) -> dict:
    """Fulfilled stamps the completion time; anything else marks it failed."""
    if fulfilled:
        values = {"Estado": ChallengeStatus.FULFILLED.value, "FechaCumplido": now()}
    else:
        values = {"Estado": ChallengeStatus.FAILED.value, "FechaCumplido": None}

    with db.transaction() as tx:
        result = tx.execute(update(challenges).where(_owned(user_id, challenge_id)).values(**values))
        if result.rows_affected == 0:
            raise NotFound("Challenge not found")
        return tx.query_one(select(challenges).where(_owned(user_id, challenge_id)))


def delete_challenge(db: Database, user_id: int, challenge_id: int) -> dict:
    result = db.execute(challenges.delete().where(_owned(user_id, challenge_id)))
    if result.rows_affected == 0:
        raise NotFound("Challenge not found")
    return {"message": "Challenge deleted"}
