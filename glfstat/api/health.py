from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends

from glfstat.config import get_settings
from glfstat.store.domain import DomainStore, get_domain_store

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
async def health(store: DomainStore = Depends(get_domain_store)) -> Dict[str, Any]:
    return {
        "status": "ok",
        "storage": "degraded" if store.degraded else "ok",
        "version": get_settings().build_version,
        "ts": time.time(),
    }


@router.get("/version")
async def version() -> Dict[str, Any]:
    settings = get_settings()
    return {
        "version": settings.build_version,
        "environment": settings.environment,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
