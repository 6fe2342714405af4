"""
Small helpers shared by the domain operations.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from mentesana.errors import BadRequest


def now() -> datetime:
    """Application clock: server-local, naive, whole seconds."""
    return datetime.now().replace(microsecond=0)


def clean_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def require_text(value: Any, message: str) -> str:
    cleaned = clean_text(value)
    if not cleaned:
        raise BadRequest(message)
    return cleaned


def require_int(value: Any, message: str) -> int:
    if isinstance(value, bool) or value in (None, ""):
        raise BadRequest(message)
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise BadRequest(message) from exc


def optional_text(value: Any) -> Optional[str]:
    cleaned = clean_text(value)
    return cleaned or None
