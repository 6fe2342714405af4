"""
Persistence adapters for the embedded (SQLite file) and networked (server)
engines.

Both variants sit behind the same ``Database`` protocol and return plain
dict rows with identical keys, so domain operations never need to know
which engine is active.
"""

from __future__ import annotations

import logging
import re
import threading
from contextlib import contextmanager, nullcontext
from dataclasses import dataclass
from typing import Any, Callable, ContextManager, Iterator, Mapping, Optional, Protocol

from sqlalchemy import MetaData, create_engine
from sqlalchemy.engine import Connection, CursorResult, Engine
from sqlalchemy.exc import IntegrityError, InvalidRequestError, SQLAlchemyError
from sqlalchemy.pool import StaticPool

from mentesana.binder import BindError, Query, bind
from mentesana.config import Settings
from mentesana.errors import Conflict, Internal

logger = logging.getLogger(__name__)

Params = Optional[Mapping[str, Any]]

_DIALECT_LABELS = {
    "mssql": "SQL Server",
    "postgresql": "PostgreSQL",
    "mysql": "MySQL",
    "mariadb": "MariaDB",
    "sqlite": "SQLite",
}


_TEXT_INSERT = re.compile(r"^\s*INSERT\b", re.IGNORECASE)


@dataclass
class ExecResult:
    rows_affected: int
    inserted_id: Optional[int] = None


class Session(Protocol):
    """Statement capabilities shared by a database and a unit of work."""

    def execute(self, query: Query, params: Params = None) -> ExecResult:
        ...

    def query_one(self, query: Query, params: Params = None) -> Optional[dict]:
        ...

    def query_all(self, query: Query, params: Params = None) -> list[dict]:
        ...


class Database(Session, Protocol):
    """Interface for database access."""

    name: str

    def transaction(self) -> ContextManager["UnitOfWork"]:
        ...

    def create_all(self, metadata: MetaData) -> None:
        ...

    def ping(self) -> None:
        ...

    def close(self) -> None:
        ...


def _text_insert_id(result: CursorResult) -> Optional[int]:
    """
    Key of a row inserted by a text template: the first ``RETURNING`` column
    when present, else the driver's lastrowid on dialects that report one.
    """
    if result.returns_rows:
        row = result.first()
        return row[0] if row is not None else None
    if result.context.dialect.postfetch_lastrowid:
        return result.lastrowid or None
    return None


def _exec_result(result: CursorResult) -> ExecResult:
    rows_affected = result.rowcount
    inserted_id = None
    if result.is_insert:
        try:
            key = result.inserted_primary_key
        except InvalidRequestError:
            # multi-row VALUES inserts carry no single key
            key = None
        if key:
            inserted_id = key[0]
    elif _TEXT_INSERT.match(result.context.statement or ""):
        inserted_id = _text_insert_id(result)
    return ExecResult(rows_affected=rows_affected, inserted_id=inserted_id)


def _first(result: CursorResult) -> Optional[dict]:
    row = result.mappings().first()
    return dict(row) if row is not None else None


def _all(result: CursorResult) -> list[dict]:
    return [dict(row) for row in result.mappings()]


class UnitOfWork:
    """
    A group of statements that commit or fail together.

    With a native transaction every statement runs on the same connection
    and the engine rolls back on error. Without one, each statement commits
    on its own and registered compensations are replayed newest-first to
    undo the partial work.
    """

    def __init__(self, db: "SqlDatabase", connection: Optional[Connection] = None):
        self._db = db
        self._connection = connection
        self._compensations: list[tuple[Query, dict]] = []

    @property
    def native(self) -> bool:
        return self._connection is not None

    def execute(self, query: Query, params: Params = None) -> ExecResult:
        return self._db._run(self._connection, query, params, _exec_result)

    def query_one(self, query: Query, params: Params = None) -> Optional[dict]:
        return self._db._run(self._connection, query, params, _first)

    def query_all(self, query: Query, params: Params = None) -> list[dict]:
        return self._db._run(self._connection, query, params, _all)

    def compensate(self, query: Query, params: Params = None) -> None:
        """Register the statement that undoes the write just performed."""
        if not self.native:
            self._compensations.append((query, dict(params or {})))

    def rollback(self) -> bool:
        """Replay compensations newest-first; False if any of them failed."""
        clean = True
        while self._compensations:
            query, params = self._compensations.pop()
            try:
                self._db._run(None, query, params, _exec_result)
            except Exception:
                logger.exception("Compensation failed on %s", self._db.name)
                clean = False
        return clean


class SqlDatabase:
    """SQLAlchemy-backed implementation shared by both engine variants."""

    name = "SQL"
    typed_binding = False

    def __init__(self, engine: Engine, *, native_transactions: bool = True, serialize: bool = False):
        self.engine = engine
        self.native_transactions = native_transactions
        self._lock = threading.RLock() if serialize else None

    def _guard(self) -> ContextManager:
        return self._lock if self._lock is not None else nullcontext()

    def _run(
        self,
        connection: Optional[Connection],
        query: Query,
        params: Params,
        handler: Callable[[CursorResult], Any],
    ) -> Any:
        try:
            bound = bind(
                query, params, typed=self.typed_binding, dialect=self.engine.dialect
            )
        except BindError as exc:
            logger.exception("Could not bind query for %s", self.name)
            raise Internal() from exc
        try:
            if connection is not None:
                return handler(connection.execute(bound.statement, bound.parameters))
            with self._guard(), self.engine.begin() as conn:
                return handler(conn.execute(bound.statement, bound.parameters))
        except IntegrityError as exc:
            logger.warning("Integrity error on %s: %s", self.name, exc.orig)
            raise Conflict("Duplicate value") from exc
        except SQLAlchemyError as exc:
            logger.exception("Database error on %s", self.name)
            raise Internal() from exc

    def execute(self, query: Query, params: Params = None) -> ExecResult:
        return self._run(None, query, params, _exec_result)

    def query_one(self, query: Query, params: Params = None) -> Optional[dict]:
        return self._run(None, query, params, _first)

    def query_all(self, query: Query, params: Params = None) -> list[dict]:
        return self._run(None, query, params, _all)

    @contextmanager
    def transaction(self) -> Iterator[UnitOfWork]:
        with self._guard():
            if not self.native_transactions:
                unit = UnitOfWork(self)
                try:
                    yield unit
                except Exception as exc:
                    if not unit.rollback():
                        # partial work may remain
                        raise Internal() from exc
                    raise
                return
            try:
                with self.engine.begin() as conn:
                    yield UnitOfWork(self, conn)
            except SQLAlchemyError as exc:
                logger.exception("Transaction failed on %s", self.name)
                raise Internal() from exc

    def create_all(self, metadata: MetaData) -> None:
        try:
            with self._guard():
                metadata.create_all(self.engine, checkfirst=True)
        except SQLAlchemyError as exc:
            logger.exception("Could not create tables on %s", self.name)
            raise Internal() from exc

    def ping(self) -> None:
        self.query_one("SELECT 1 AS ok")

    def close(self) -> None:
        self.engine.dispose()


class EmbeddedDatabase(SqlDatabase):
    """
    File-backed SQLite. All work goes through one shared connection, guarded
    by a lock so statements and transactions never interleave.
    """

    name = "SQLite"
    typed_binding = False

    def __init__(self, path: str, *, native_transactions: bool = True):
        if not path:
            raise ValueError("A SQLite path is required for EmbeddedDatabase")
        engine = create_engine(
            f"sqlite+pysqlite:///{path}",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        super().__init__(
            engine, native_transactions=native_transactions, serialize=True
        )
        self.path = path


class NetworkedDatabase(SqlDatabase):
    """
    Client-server engine reached through a pooled SQLAlchemy URL (Postgres,
    SQL Server, ...). Every bound value carries an explicit SQL type.
    """

    typed_binding = True

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for NetworkedDatabase")
        engine = create_engine(
            database_url,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        super().__init__(engine, native_transactions=True)
        self.name = _DIALECT_LABELS.get(engine.dialect.name, engine.dialect.name)


def create_database(settings: Settings) -> SqlDatabase:
    """Select and connect the engine configured for this process."""
    if settings.engine == "embedded":
        logger.info("Using embedded database at %s", settings.sqlite_path)
        return EmbeddedDatabase(
            settings.sqlite_path,
            native_transactions=settings.embedded_native_transactions,
        )
    db = NetworkedDatabase(settings.database_url)
    logger.info("Using networked database (%s)", db.name)
    return db
