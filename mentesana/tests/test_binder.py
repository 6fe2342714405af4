import unittest
from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, Integer, Unicode, select, text
from sqlalchemy.dialects import mssql, mysql, sqlite
from sqlalchemy.sql.elements import TextClause

from mentesana.binder import BindError, bind, placeholders, quote_identifiers, sql_type_for
from mentesana.schema import users


class PlaceholderTests(unittest.TestCase):
    def test_names_in_first_appearance_order(self):
        template = "UPDATE t SET a = :b, c = :a WHERE id = :id AND a = :b"
        self.assertEqual(placeholders(template), ["b", "a", "id"])

    def test_casts_and_time_literals_are_not_placeholders(self):
        template = "SELECT x::text, '10:30' AS t FROM y WHERE z = :value"
        self.assertEqual(placeholders(template), ["value"])


class BindTests(unittest.TestCase):
    def test_missing_value_is_rejected(self):
        with self.assertRaises(BindError):
            bind("SELECT * FROM t WHERE a = :a AND b = :b", {"a": 1})

    def test_unused_value_is_rejected(self):
        with self.assertRaises(BindError):
            bind("SELECT * FROM t WHERE a = :a", {"a": 1, "b": 2})

    def test_reordered_and_repeated_names_bind_by_name(self):
        bound = bind(
            "SELECT :second AS s, :first AS f, :second AS again",
            {"first": 1, "second": "two"},
        )
        self.assertIsInstance(bound.statement, TextClause)
        compiled = bound.statement.compile()
        self.assertEqual(compiled.params, {"first": 1, "second": "two"})

    def test_typed_binding_assigns_sql_types(self):
        stamp = datetime(2024, 5, 10, 8, 30)
        bound = bind(
            "SELECT :n, :flag, :when, :name",
            {"n": 3, "flag": True, "when": stamp, "name": "Ana"},
            typed=True,
        )
        types = {key: type(param.type) for key, param in bound.statement._bindparams.items()}
        self.assertEqual(types["n"], Integer)
        self.assertEqual(types["flag"], Boolean)
        self.assertEqual(types["when"], DateTime)
        self.assertEqual(types["name"], Unicode)

    def test_untyped_binding_infers_types_from_values(self):
        bound = bind(
            "SELECT :name, :when",
            {"name": "Ana", "when": datetime(2024, 5, 10)},
        )
        params = bound.statement._bindparams
        self.assertIsInstance(params["when"].type, DateTime)
        self.assertEqual(params["name"].value, "Ana")

    def test_core_statements_pass_through(self):
        statement = select(users).where(users.c.IdUsuario == 1)
        bound = bind(statement, {"extra": 1})
        self.assertIs(bound.statement, statement)
        self.assertEqual(bound.parameters, {"extra": 1})

    def test_template_without_parameters(self):
        bound = bind("SELECT 1 AS ok")
        self.assertEqual(str(bound.statement), str(text("SELECT 1 AS ok")))


class SqlTypeTests(unittest.TestCase):
    def test_bool_is_not_treated_as_integer(self):
        self.assertIsInstance(sql_type_for(False), Boolean)

    def test_date_and_none(self):
        self.assertIsInstance(sql_type_for(date(2024, 1, 1)), Date)
        self.assertIsNone(sql_type_for(None))

    def test_unsupported_type(self):
        with self.assertRaises(BindError):
            sql_type_for({"a": 1})


class QuoteIdentifierTests(unittest.TestCase):
    template = (
        'SELECT "Nombre" FROM "Emociones" '
        "WHERE \"Color\" = '\"rojo\"' AND LOWER(\"Nombre\") = LOWER(:name)"
    )

    def test_mysql_uses_backticks(self):
        self.assertEqual(
            quote_identifiers(self.template, mysql.dialect()),
            "SELECT `Nombre` FROM `Emociones` "
            "WHERE `Color` = '\"rojo\"' AND LOWER(`Nombre`) = LOWER(:name)",
        )

    def test_sql_server_uses_brackets(self):
        quoted = quote_identifiers('SELECT COUNT(*) AS total FROM "Retos"', mssql.dialect())
        self.assertEqual(quoted, "SELECT COUNT(*) AS total FROM [Retos]")

    def test_ansi_dialects_are_unchanged(self):
        self.assertEqual(quote_identifiers(self.template, sqlite.dialect()), self.template)

    def test_bind_applies_dialect_quoting(self):
        bound = bind(
            'SELECT "IdEmocion" FROM "Emociones" WHERE "Nombre" = :name',
            {"name": "Feliz"},
            dialect=mysql.dialect(),
        )
        self.assertIn("FROM `Emociones`", str(bound.statement))
        self.assertEqual(bound.statement.compile().params, {"name": "Feliz"})


if __name__ == "__main__":
    unittest.main()
