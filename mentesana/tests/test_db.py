import sqlite3
import unittest
from datetime import datetime

from sqlalchemy import insert, select, update

from mentesana.config import Settings
from mentesana.db import EmbeddedDatabase, NetworkedDatabase, create_database
from mentesana.errors import BadRequest, Conflict, Internal
from mentesana.schema import challenges, users
from mentesana.tests.support import (
    CompensatingBackend,
    EmbeddedBackend,
    NetworkedBackend,
    create_user,
)


class AdapterContract:
    """The same expectations hold for every adapter variant."""

    def setUp(self):
        self.db = self.make_db()

    def test_execute_reports_insert_id_and_affected_rows(self):
        first = create_user(self.db, "a@x.com")
        second = create_user(self.db, "b@x.com")
        self.assertIsInstance(first, int)
        self.assertGreater(second, first)

        result = self.db.execute(update(users).values(Puntos=5))
        self.assertEqual(result.rows_affected, 2)
        self.assertIsNone(result.inserted_id)

    def test_query_one_and_query_all_return_dicts(self):
        user_id = create_user(self.db)
        row = self.db.query_one(select(users).where(users.c.IdUsuario == user_id))
        self.assertIsInstance(row, dict)
        self.assertEqual(row["Correo"], "ana@x.com")
        self.assertEqual(row["Nivel"], 1)

        missing = self.db.query_one(select(users).where(users.c.IdUsuario == 9999))
        self.assertIsNone(missing)
        self.assertEqual(len(self.db.query_all(select(users))), 1)

    def test_text_templates_bind_by_name(self):
        user_id = create_user(self.db)
        row = self.db.query_one(
            'SELECT "Correo" AS correo FROM "Usuarios" '
            'WHERE "Nivel" = :level AND "IdUsuario" = :user_id',
            {"user_id": user_id, "level": 1},
        )
        self.assertEqual(row, {"correo": "ana@x.com"})

    def test_bind_errors_surface_as_internal(self):
        with self.assertRaises(Internal):
            self.db.query_one('SELECT * FROM "Usuarios" WHERE "IdUsuario" = :id', {})

    def test_duplicate_unique_value_is_conflict(self):
        create_user(self.db, "same@x.com")
        with self.assertRaises(Conflict):
            create_user(self.db, "same@x.com")

    def test_engine_errors_surface_as_internal(self):
        with self.assertRaises(Internal) as ctx:
            self.db.query_all("SELECT * FROM no_such_table")
        self.assertEqual(ctx.exception.message, "Internal server error")

    def test_transaction_commits_as_a_unit(self):
        user_id = create_user(self.db)
        with self.db.transaction() as tx:
            tx.execute(update(users).values(Puntos=10))
            tx.execute(update(users).values(Nivel=2))
        row = self.db.query_one(select(users).where(users.c.IdUsuario == user_id))
        self.assertEqual((row["Puntos"], row["Nivel"]), (10, 2))

    def test_transaction_undoes_work_on_failure(self):
        user_id = create_user(self.db)
        with self.assertRaises(BadRequest):
            with self.db.transaction() as tx:
                tx.execute(update(users).values(Puntos=99))
                tx.compensate(update(users).values(Puntos=0))
                raise BadRequest("stop")
        row = self.db.query_one(select(users).where(users.c.IdUsuario == user_id))
        self.assertEqual(row["Puntos"], 0)

    def test_transaction_undoes_insert_when_a_later_statement_fails(self):
        user_id = create_user(self.db)
        with self.assertRaises(Internal):
            with self.db.transaction() as tx:
                result = tx.execute(
                    insert(challenges).values(
                        IdUsuario=user_id,
                        Titulo="Walk",
                        Estado="Pending",
                        FechaCreacion=datetime(2024, 5, 10, 9, 0),
                    )
                )
                tx.compensate(
                    challenges.delete().where(challenges.c.IdReto == result.inserted_id)
                )
                tx.query_all("SELECT * FROM no_such_table")
        self.assertEqual(self.db.query_all(select(challenges)), [])

    def test_text_insert_reports_inserted_id(self):
        first = create_user(self.db)
        result = self.db.execute(
            'INSERT INTO "Usuarios" ("Nombre", "Correo", "Contrasena", "Nivel", "Puntos", '
            '"FechaRegistro") VALUES (:name, :email, :password, 1, 0, :created)',
            {
                "name": "Luis",
                "email": "luis@x.com",
                "password": "not-a-hash",
                "created": datetime(2024, 5, 10, 9, 0),
            },
        )
        self.assertEqual(result.rows_affected, 1)
        self.assertEqual(result.inserted_id, first + 1)
        row = self.db.query_one(select(users).where(users.c.IdUsuario == result.inserted_id))
        self.assertEqual(row["Correo"], "luis@x.com")

    def test_ping(self):
        self.db.ping()


class EmbeddedAdapterTests(AdapterContract, EmbeddedBackend, unittest.TestCase):
    def test_name(self):
        self.assertEqual(self.db.name, "SQLite")
        self.assertTrue(self.db.native_transactions)

    @unittest.skipUnless(sqlite3.sqlite_version_info >= (3, 35), "needs RETURNING")
    def test_text_insert_with_returning(self):
        result = self.db.execute(
            'INSERT INTO "Retos" ("IdUsuario", "Titulo", "Estado", "FechaCreacion") '
            'VALUES (:user_id, :title, :status, :created) RETURNING "IdReto"',
            {
                "user_id": create_user(self.db),
                "title": "Walk",
                "status": "Pending",
                "created": datetime(2024, 5, 10, 9, 0),
            },
        )
        self.assertEqual(result.inserted_id, 1)


class CompensatingAdapterTests(AdapterContract, CompensatingBackend, unittest.TestCase):
    def test_statements_commit_individually(self):
        user_id = create_user(self.db)
        with self.assertRaises(BadRequest):
            with self.db.transaction() as tx:
                tx.execute(update(users).values(Nivel=3))
                raise BadRequest("no compensation registered")
        row = self.db.query_one(select(users).where(users.c.IdUsuario == user_id))
        self.assertEqual(row["Nivel"], 3)

    def test_failed_compensation_is_reported_as_internal(self):
        create_user(self.db)
        with self.assertLogs("mentesana.db", level="ERROR") as logs:
            with self.assertRaises(Internal) as ctx:
                with self.db.transaction() as tx:
                    tx.execute(update(users).values(Puntos=7))
                    tx.compensate(update(users).values(Puntos=0))
                    tx.compensate("UPDATE no_such_table SET x = 1")
                    raise BadRequest("Invalid pet type")
        self.assertIsInstance(ctx.exception.__cause__, BadRequest)
        self.assertTrue(any("Compensation failed" in line for line in logs.output))
        # earlier compensations still run
        row = self.db.query_one(select(users.c.Puntos))
        self.assertEqual(row["Puntos"], 0)


class NetworkedAdapterTests(AdapterContract, NetworkedBackend, unittest.TestCase):
    def test_values_are_bound_with_explicit_types(self):
        self.assertTrue(self.db.typed_binding)
        self.assertEqual(self.db.name, "SQLite")


class CreateDatabaseTests(unittest.TestCase):
    def test_use_sqlite_selects_embedded_engine(self):
        settings = Settings(_env_file=None, use_sqlite=True, sqlite_path=":memory:")
        db = create_database(settings)
        self.addCleanup(db.close)
        self.assertIsInstance(db, EmbeddedDatabase)

    def test_production_forces_embedded_engine(self):
        settings = Settings(_env_file=None, app_env="Production", sqlite_path=":memory:")
        self.assertEqual(settings.engine, "embedded")

    def test_default_is_networked(self):
        settings = Settings(
            _env_file=None,
            use_sqlite=False,
            app_env="development",
            database_url="sqlite+pysqlite:///:memory:",
        )
        db = create_database(settings)
        self.addCleanup(db.close)
        self.assertIsInstance(db, NetworkedDatabase)

    def test_embedded_without_native_transactions(self):
        settings = Settings(
            _env_file=None,
            use_sqlite=True,
            sqlite_path=":memory:",
            embedded_native_transactions=False,
        )
        db = create_database(settings)
        self.addCleanup(db.close)
        self.assertFalse(db.native_transactions)


if __name__ == "__main__":
    unittest.main()
