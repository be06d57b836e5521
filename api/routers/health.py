"""
Health and Status Endpoints
"""
import time
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter
from sqlalchemy import text

from godrive.database import get_db_context
from godrive.utils.logger import setup_logger

logger = setup_logger(__name__)
router = APIRouter(tags=["health"])

# Track API start time for uptime calculation
API_START_TIME = time.time()


@router.get("/health")
def health_check() -> Dict[str, Any]:
    """
    Health check endpoint with database validation

    Returns:
        Health status; "degraded" when the database cannot be queried
    """
    health_status = {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "uptime_seconds": int(time.time() - API_START_TIME),
        "dependencies": {}
    }

    try:
        with get_db_context() as db:
            db.execute(text("SELECT 1"))
        health_status["dependencies"]["database"] = {"status": "ok"}
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        health_status["status"] = "degraded"
        health_status["dependencies"]["database"] = {"status": "error", "error": str(e)}

    return health_status
