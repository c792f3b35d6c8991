"""Health check route."""

import logging
import sqlite3
from typing import Any, Dict

from fastapi import APIRouter

from contact_book_api.app.core.db import ping

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """Report whether the contact store answers queries."""
    health: Dict[str, Any] = {"status": "healthy", "database": False}
    try:
        health["database"] = ping()
    except sqlite3.Error as exc:
        logger.warning("Health check could not reach the database: %s", exc)
        health["database_error"] = str(exc)
    if not health["database"]:
        health["status"] = "degraded"
    return health
