"""
Health Check Router
Liveness and store connectivity endpoints
"""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from finance_tracker.core.config import settings
from finance_tracker.db.base import Storage
from finance_tracker.db.dynamo import get_storage

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
def health_check():
    """
    Health check endpoint.
    Returns API status without touching the store.
    """
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/status")
def store_status(store: Storage = Depends(get_storage)):
    """
    Check that every DynamoDB table answers a one-item scan.
    """
    tables = store.ping()
    connected = all(table["status"] == "accessible" for table in tables.values())
    if not connected:
        logger.warning(f"Store degraded: {tables}")
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {
            "dynamodb": {
                "connected": connected,
                "region": settings.DYNAMO_REGION,
                "tables": tables,
            }
        },
        "overall_status": "healthy" if connected else "degraded",
    }
