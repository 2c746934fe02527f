from fastapi import APIRouter, Depends, HTTPException
import logging

from txvault.dependencies import get_record_store
from txvault.domain.envelope.ports import RecordStore

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/")
def root():
    return {"status": "ok", "service": "txvault"}


@router.get("/health/live")
def liveness():
    """Liveness probe: Service is running."""
    return {"status": "ok", "checks": {"api": "ok"}}


@router.get("/health/ready")
def readiness(store: RecordStore = Depends(get_record_store)):
    """Readiness probe: storage reachable."""
    health = {"status": "ok", "checks": {}}

    try:
        store.ping()
        health["checks"]["storage"] = "ok"
    except Exception as e:
        logger.error(f"Health check failed (storage): {e}")
        health["checks"]["storage"] = "failed"
        health["status"] = "failed"

    if health["status"] == "failed":
        raise HTTPException(status_code=503, detail=health)

    return health
