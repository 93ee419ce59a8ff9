"""Health & Readiness Probes: liveness and readiness endpoints.

Invariants:
    - GET /health/ always returns 200 if the process is up (liveness)
    - GET /health/ready returns 503 if the document store is unreachable (readiness)
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from samaj_diary.api.dependencies import get_document_store
from samaj_diary.core.repository_protocols import DocumentStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "samaj-diary-api",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check(store: DocumentStore = Depends(get_document_store)):
    """Readiness probe, including document store connectivity."""
    store_ok = await store.health_check()
    if not store_ok:
        logger.warning("Readiness check failed: document store unreachable")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "document_store_unavailable",
            },
        )
    return {"status": "ready", "checks": {"document_store": "healthy"}}
