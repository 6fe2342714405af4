"""
Reachability check for the active engine.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from mentesana.db import Database
from mentesana.errors import ServiceError

logger = logging.getLogger(__name__)


def check(db: Database) -> tuple[bool, dict]:
    try:
        db.ping()
    except ServiceError as exc:
        logger.warning("Health check failed on %s", db.name)
        cause = exc.__cause__ or exc
        return False, {"status": "Error", "database": db.name, "error": str(cause)}
    return True, {
        "status": "OK",
        "database": db.name,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
