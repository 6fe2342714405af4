"""
Table definitions, lookup seed data and the one-time schema initializer.

Table and column names double as the JSON field names returned by the API,
so both engines produce rows with the same keys.
"""

from __future__ import annotations

import enum
import logging

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Unicode,
    UnicodeText,
    func,
    insert,
    select,
)
from sqlalchemy.orm import declarative_base

from mentesana.db import Database
from mentesana.errors import Conflict

logger = logging.getLogger(__name__)

Base = declarative_base()


class ChallengeStatus(str, enum.Enum):
    PENDING = "Pending"
    FULFILLED = "Fulfilled"
    FAILED = "Failed"


GRATITUDE_EXERCISE_ID = 4
EXERCISE_POINTS = 10

PET_STARTING_STATS = {
    "Nivel": 1,
    "Experiencia": 0,
    "ExperienciaNecesaria": 100,
    "Felicidad": 100,
    "Energia": 100,
    "Hambre": 0,
    "Monedas": 50,
    "Estado": "Happy",
}


class UserRow(Base):
    __tablename__ = "Usuarios"

    IdUsuario = Column(Integer, primary_key=True, autoincrement=True)
    Nombre = Column(Unicode(100), nullable=False)
    Correo = Column(Unicode(255), nullable=False, unique=True)
    Contrasena = Column(String(255), nullable=False)
    Nivel = Column(Integer, nullable=False, default=1)
    Puntos = Column(Integer, nullable=False, default=0)
    FechaRegistro = Column(DateTime, nullable=False)


class ProfileRow(Base):
    __tablename__ = "Perfil"

    IdPerfil = Column(Integer, primary_key=True, autoincrement=True)
    IdUsuario = Column(
        Integer, ForeignKey("Usuarios.IdUsuario"), nullable=False, unique=True
    )
    NombreCompleto = Column(Unicode(200), nullable=True)
    CorreoElectronico = Column(Unicode(255), nullable=True)
    FechaDeNacimiento = Column(String(20), nullable=True)
    Genero = Column(Unicode(50), nullable=True)
    Biografia = Column(UnicodeText, nullable=True)


class EmotionRow(Base):
    __tablename__ = "Emociones"

    IdEmocion = Column(Integer, primary_key=True, autoincrement=False)
    Nombre = Column(Unicode(50), nullable=False, unique=True)
    Color = Column(String(20), nullable=False)
    Icono = Column(Unicode(16), nullable=False)


class EmotionLogRow(Base):
    __tablename__ = "RegistroEmocional"

    IdRegistro = Column(Integer, primary_key=True, autoincrement=True)
    IdUsuario = Column(
        Integer, ForeignKey("Usuarios.IdUsuario"), nullable=False, index=True
    )
    IdEmocion = Column(Integer, ForeignKey("Emociones.IdEmocion"), nullable=False)
    Nota = Column(UnicodeText, nullable=True)
    FechaRegistro = Column(DateTime, nullable=False, index=True)


class ExerciseRow(Base):
    __tablename__ = "Ejercicios"

    IdEjercicio = Column(Integer, primary_key=True, autoincrement=False)
    Nombre = Column(Unicode(100), nullable=False, unique=True)


class ExerciseSessionRow(Base):
    __tablename__ = "SesionesEjercicio"

    IdSesion = Column(Integer, primary_key=True, autoincrement=True)
    IdUsuario = Column(
        Integer, ForeignKey("Usuarios.IdUsuario"), nullable=False, index=True
    )
    IdEjercicio = Column(
        Integer, ForeignKey("Ejercicios.IdEjercicio"), nullable=False
    )
    FechaSesion = Column(DateTime, nullable=False)
    Completado = Column(Boolean, nullable=False, default=False)
    RespuestaGratitud = Column(UnicodeText, nullable=True)


class ChallengeRow(Base):
    __tablename__ = "Retos"

    IdReto = Column(Integer, primary_key=True, autoincrement=True)
    IdUsuario = Column(
        Integer, ForeignKey("Usuarios.IdUsuario"), nullable=False, index=True
    )
    Titulo = Column(Unicode(255), nullable=False)
    Estado = Column(String(20), nullable=False, default=ChallengeStatus.PENDING.value)
    FechaCreacion = Column(DateTime, nullable=False)
    FechaCumplido = Column(DateTime, nullable=True)


class PetSpeciesRow(Base):
    __tablename__ = "Mascotas"

    IdMascota = Column(Integer, primary_key=True, autoincrement=False)
    Nombre = Column(Unicode(50), nullable=False)
    Tipo = Column(String(50), nullable=False, unique=True)
    Imagen = Column(String(255), nullable=True)


class UserPetRow(Base):
    __tablename__ = "UsuarioMascota"

    IdUsuarioMascota = Column(Integer, primary_key=True, autoincrement=True)
    IdUsuario = Column(
        Integer, ForeignKey("Usuarios.IdUsuario"), nullable=False, index=True
    )
    IdMascota = Column(Integer, ForeignKey("Mascotas.IdMascota"), nullable=False)
    Tipo = Column(String(50), nullable=False)
    FechaAdopcion = Column(DateTime, nullable=False)
    Activa = Column(Boolean, nullable=False, default=False)
    Nivel = Column(Integer, nullable=False, default=1)
    Experiencia = Column(Integer, nullable=False, default=0)
    ExperienciaNecesaria = Column(Integer, nullable=False, default=100)
    Felicidad = Column(Integer, nullable=False, default=100)
    Energia = Column(Integer, nullable=False, default=100)
    Hambre = Column(Integer, nullable=False, default=0)
    Monedas = Column(Integer, nullable=False, default=50)
    Estado = Column(Unicode(50), nullable=False, default="Happy")


users = UserRow.__table__
profiles = ProfileRow.__table__
emotions = EmotionRow.__table__
emotion_logs = EmotionLogRow.__table__
exercises = ExerciseRow.__table__
exercise_sessions = ExerciseSessionRow.__table__
challenges = ChallengeRow.__table__
pet_species = PetSpeciesRow.__table__
user_pets = UserPetRow.__table__


EMOTION_SEED = [
    {"IdEmocion": 1, "Nombre": "Feliz", "Color": "#FFD700", "Icono": "😊"},
    {"IdEmocion": 2, "Nombre": "Triste", "Color": "#3498DB", "Icono": "😢"},
    {"IdEmocion": 3, "Nombre": "Enojado", "Color": "#E74C3C", "Icono": "😠"},
    {"IdEmocion": 4, "Nombre": "Ansioso", "Color": "#9B59B6", "Icono": "😰"},
    {"IdEmocion": 5, "Nombre": "Relajado", "Color": "#2ECC71", "Icono": "😌"},
    {"IdEmocion": 6, "Nombre": "Cansado", "Color": "#95A5A6", "Icono": "😴"},
    {"IdEmocion": 7, "Nombre": "Energico", "Color": "#FF9800", "Icono": "😄"},
    {"IdEmocion": 8, "Nombre": "Confundido", "Color": "#795548", "Icono": "😕"},
    {"IdEmocion": 9, "Nombre": "Agradecido", "Color": "#009688", "Icono": "🙏"},
    {"IdEmocion": 10, "Nombre": "Calmado", "Color": "#8E24AA", "Icono": "😌"},
]

EXERCISE_SEED = [
    {"IdEjercicio": 1, "Nombre": "Respiración"},
    {"IdEjercicio": 2, "Nombre": "Meditación"},
    {"IdEjercicio": 3, "Nombre": "Ejercicio Físico"},
    {"IdEjercicio": GRATITUDE_EXERCISE_ID, "Nombre": "Gratitud"},
]

PET_SPECIES_SEED = [
    {"IdMascota": 1, "Nombre": "Axolote", "Tipo": "axolote", "Imagen": "imagvideos/axolo.png"},
    {"IdMascota": 2, "Nombre": "Caracol", "Tipo": "caracol", "Imagen": "imagvideos/caracoli.png"},
    {"IdMascota": 3, "Nombre": "Dinosaurio", "Tipo": "dinosaurio", "Imagen": "imagvideos/dinosau.png"},
]

SEEDS = (
    (emotions, EMOTION_SEED),
    (exercises, EXERCISE_SEED),
    (pet_species, PET_SPECIES_SEED),
)


def count_rows(db, table) -> int:
    row = db.query_one(select(func.count().label("total")).select_from(table))
    return int(row["total"]) if row else 0


def _seed(db: Database, table, rows: list[dict]) -> None:
    try:
        with db.transaction() as tx:
            if count_rows(tx, table) > 0:
                return
            tx.execute(insert(table).values(rows))
    except Conflict:
        # Another process seeded between our count and insert.
        logger.info("Lookup table %s already seeded", table.name)
        return
    logger.info("Seeded %d rows into %s", len(rows), table.name)


def init_schema(db: Database) -> None:
    """Create every table that is missing and fill empty lookup tables."""
    db.create_all(Base.metadata)
    logger.info("Tables ready on %s", db.name)
    for table, rows in SEEDS:
        _seed(db, table, rows)
