"""
Shared fixtures: every domain test case runs against the embedded engine,
the embedded engine without native transactions, and the networked adapter
(pointed at a SQLite file so no server is needed).
"""

from __future__ import annotations

import os
import tempfile

from sqlalchemy import insert

from mentesana.config import Settings
from mentesana.db import EmbeddedDatabase, NetworkedDatabase
from mentesana.domain.common import now
from mentesana.schema import init_schema, users


def make_settings(**overrides) -> Settings:
    values = dict(
        use_sqlite=True,
        sqlite_path=":memory:",
        jwt_secret="test-secret",
        bcrypt_rounds=4,
        static_dir=None,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


def create_user(db, email: str = "ana@x.com", name: str = "Ana") -> int:
    result = db.execute(
        insert(users).values(
            Nombre=name,
            Correo=email,
            Contrasena="not-a-hash",
            Nivel=1,
            Puntos=0,
            FechaRegistro=now(),
        )
    )
    return result.inserted_id


class EmbeddedBackend:
    def make_db(self):
        db = EmbeddedDatabase(":memory:")
        self.addCleanup(db.close)
        init_schema(db)
        return db


class CompensatingBackend:
    def make_db(self):
        db = EmbeddedDatabase(":memory:", native_transactions=False)
        self.addCleanup(db.close)
        init_schema(db)
        return db


class NetworkedBackend:
    def make_db(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        db = NetworkedDatabase("sqlite+pysqlite:///" + os.path.join(tmp.name, "net.db"))
        self.addCleanup(db.close)
        init_schema(db)
        return db
