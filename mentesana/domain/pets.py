"""
Virtual pet lifecycle: the active pet, adoption / switching, and stat
updates.

A user has at most one active pet. Switching pets deactivates the current
one and either reactivates an earlier adoption of the requested species or
adopts a new one, all inside a single unit of work.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from sqlalchemy import and_, insert, select, true, update

from mentesana.db import Database
from mentesana.domain.common import now, require_int, require_text
from mentesana.errors import BadRequest, Forbidden, NotFound
from mentesana.schema import PET_STARTING_STATS, pet_species, user_pets, users

logger = logging.getLogger(__name__)

PET_STAT_FIELDS = (
    "Nivel",
    "Experiencia",
    "ExperienciaNecesaria",
    "Felicidad",
    "Energia",
    "Hambre",
    "Monedas",
)


def owner_lock(user_id: int):
    """
    Lock the owner's user row for the rest of the transaction. Concurrent
    selections for the same user queue here, so the deactivate step always
    sees pets adopted by an earlier selection. SQLite renders no FOR UPDATE;
    there the database-wide write lock orders the updates instead.
    """
    return select(users.c.IdUsuario).where(users.c.IdUsuario == user_id).with_for_update()


def _pet_by_id(pet_id: int):
    return select(user_pets).where(user_pets.c.IdUsuarioMascota == pet_id)


def current_pet(db: Database, user_id: int) -> Optional[dict]:
    return db.query_one(
        select(user_pets)
        .where(and_(user_pets.c.IdUsuario == user_id, user_pets.c.Activa == true()))
        .order_by(user_pets.c.FechaAdopcion.desc(), user_pets.c.IdUsuarioMascota.desc())
        .limit(1)
    )


def select_pet(db: Database, user_id: int, species_key: Any) -> dict:
    species_key = require_text(species_key, "Pet type is required")

    with db.transaction() as tx:
        if tx.query_one(owner_lock(user_id)) is None:
            raise NotFound("User not found")

        active = tx.query_all(
            select(user_pets.c.IdUsuarioMascota).where(
                and_(user_pets.c.IdUsuario == user_id, user_pets.c.Activa == true())
            )
        )
        tx.execute(
            update(user_pets)
            .where(and_(user_pets.c.IdUsuario == user_id, user_pets.c.Activa == true()))
            .values(Activa=False)
        )
        for row in active:
            tx.compensate(
                update(user_pets)
                .where(user_pets.c.IdUsuarioMascota == row["IdUsuarioMascota"])
                .values(Activa=True)
            )

        existing = tx.query_one(
            select(user_pets)
            .where(and_(user_pets.c.IdUsuario == user_id, user_pets.c.Tipo == species_key))
            .order_by(user_pets.c.FechaAdopcion.desc(), user_pets.c.IdUsuarioMascota.desc())
            .limit(1)
        )
        if existing is not None:
            pet_id = existing["IdUsuarioMascota"]
            tx.execute(
                update(user_pets)
                .where(user_pets.c.IdUsuarioMascota == pet_id)
                .values(Activa=True)
            )
            logger.info("User %s reactivated pet %s", user_id, pet_id)
            return tx.query_one(_pet_by_id(pet_id))

        species = tx.query_one(
            select(pet_species).where(pet_species.c.Tipo == species_key).limit(1)
        )
        if species is None:
            raise BadRequest("Invalid pet type")

        result = tx.execute(
            insert(user_pets).values(
                IdUsuario=user_id,
                IdMascota=species["IdMascota"],
                Tipo=species["Tipo"],
                FechaAdopcion=now(),
                Activa=True,
                **PET_STARTING_STATS,
            )
        )
        tx.compensate(
            user_pets.delete().where(user_pets.c.IdUsuarioMascota == result.inserted_id)
        )
        logger.info("User %s adopted %s as pet %s", user_id, species_key, result.inserted_id)
        return tx.query_one(_pet_by_id(result.inserted_id))


def update_pet(db: Database, user_id: int, data: Mapping[str, Any]) -> dict:
    """Overwrite every stat of an owned pet with the values supplied."""
    pet_id = require_int(data.get("IdUsuarioMascota"), "IdUsuarioMascota is required")
    values = {
        name: require_int(data.get(name), f"{name} is required") for name in PET_STAT_FIELDS
    }
    values["Estado"] = require_text(data.get("Estado"), "Estado is required")

    owned = db.query_one(
        select(user_pets.c.IdUsuarioMascota).where(
            and_(
                user_pets.c.IdUsuarioMascota == pet_id,
                user_pets.c.IdUsuario == user_id,
            )
        )
    )
    if owned is None:
        raise Forbidden("Not authorized to update this pet")

    db.execute(
        update(user_pets).where(user_pets.c.IdUsuarioMascota == pet_id).values(**values)
    )
    return {"ok": True}
