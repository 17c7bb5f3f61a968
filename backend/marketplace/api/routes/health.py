"""Health Probes — liveness and readiness for the marketplace process.

Invariants:
    - GET /api/health/ answers 200 whenever the process serves requests
    - GET /api/health/ready answers 503 unless the items table is readable
    - Readiness reports whether the on-chain balance lookup is configured
"""

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

import marketplace.infrastructure.database as db_module

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def liveness(request: Request):
    return {"status": "healthy", "version": request.app.version}


@router.get("/ready")
async def readiness(request: Request):
    manager = db_module.db_manager
    item_count = await manager.count_items() if manager else None
    if item_count is None:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "database_unavailable"},
        )
    chain_client = getattr(request.app.state, "chain_client", None)
    return {
        "status": "ready",
        "checks": {
            "database": "healthy",
            "catalog_items": item_count,
            "balance_lookup": "enabled" if chain_client else "disabled",
        },
    }
