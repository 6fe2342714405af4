"""
Named-parameter binding for both persistence engines.

Query templates use ``:name`` placeholders. Values are always bound by
name, so a template may list placeholders in any order and may reuse a
name; the only contract is that placeholder names and parameter names match
exactly.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Mapping, Optional, Union

from sqlalchemy import Boolean, Date, DateTime, Integer, Unicode, bindparam, text
from sqlalchemy.engine import Dialect
from sqlalchemy.sql import Executable
from sqlalchemy.types import TypeEngine

# Same rule SQLAlchemy applies to text(): skips "::" casts and escaped colons.
_PLACEHOLDER = re.compile(r"(?<![:\w\\]):(\w+)(?!:)", re.UNICODE)

# A single-quoted literal (left untouched) or an ANSI double-quoted identifier.
_QUOTED = re.compile(r"'(?:[^']|'')*'|\"((?:[^\"]|\"\")+)\"")

Query = Union[str, Executable]


class BindError(ValueError):
    """Raised when a template and its parameters do not line up."""


@dataclass
class BoundQuery:
    statement: Executable
    parameters: dict = field(default_factory=dict)


def placeholders(template: str) -> list[str]:
    """Placeholder names in order of first appearance."""
    seen: list[str] = []
    for name in _PLACEHOLDER.findall(template):
        if name not in seen:
            seen.append(name)
    return seen


def quote_identifiers(template: str, dialect: Dialect) -> str:
    """
    Rewrite ``"Name"`` identifiers in a template with the dialect's own
    quoting (backticks on MySQL, brackets on SQL Server).
    """
    preparer = dialect.identifier_preparer

    def _requote(match: re.Match) -> str:
        name = match.group(1)
        if name is None:
            return match.group(0)
        return preparer.quote_identifier(name.replace('""', '"'))

    return _QUOTED.sub(_requote, template)


def sql_type_for(value: Any) -> Optional[TypeEngine]:
    if value is None:
        return None
    # bool first: it is a subclass of int.
    if isinstance(value, bool):
        return Boolean()
    if isinstance(value, int):
        return Integer()
    if isinstance(value, datetime):
        return DateTime()
    if isinstance(value, date):
        return Date()
    if isinstance(value, str):
        return Unicode()
    raise BindError(f"Unsupported parameter type: {type(value).__name__}")


def bind(
    query: Query,
    params: Optional[Mapping[str, Any]] = None,
    *,
    typed: bool = False,
    dialect: Optional[Dialect] = None,
) -> BoundQuery:
    """
    Turn a template (or Core statement) plus a parameter map into something
    the engine can execute.

    ``typed=True`` gives every value an explicit SQL type (Unicode text,
    Integer, Boolean, DateTime), which is what the networked engine expects.
    Untyped binding lets SQLAlchemy infer the type from the Python value.
    With a ``dialect``, quoted identifiers are rewritten for that engine.
    """
    params = dict(params or {})
    if not isinstance(query, str):
        return BoundQuery(statement=query, parameters=params)
    if dialect is not None:
        query = quote_identifiers(query, dialect)

    names = placeholders(query)
    missing = [name for name in names if name not in params]
    if missing:
        raise BindError(f"Missing values for placeholders: {', '.join(missing)}")
    unused = [name for name in params if name not in names]
    if unused:
        raise BindError(f"Parameters without placeholders: {', '.join(unused)}")

    statement = text(query)
    if not names:
        return BoundQuery(statement=statement)
    if typed:
        statement = statement.bindparams(
            *[bindparam(name, params[name], type_=sql_type_for(params[name])) for name in names]
        )
    else:
        for name in names:
            sql_type_for(params[name])
        statement = statement.bindparams(**{name: params[name] for name in names})
    return BoundQuery(statement=statement)
