from __future__ import annotations

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from task_manager.api.deps import get_store
from task_manager.core.storage import Store

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live")
def liveness():
    return {"status": "alive"}


@router.get("/ready")
def readiness(store: Store = Depends(get_store)):
    """Readiness reflects ability to serve traffic: the store must answer."""
    if not store.db.ping():
        return JSONResponse(status_code=503, content={"status": "not_ready", "problems": ["database_unavailable"]})
    return {"status": "ready"}
