from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool

from glfstat.config import get_settings
from glfstat.store.domain import DomainStore, get_domain_store
from glfstat.tracking.registry import MeasurementRegistry, get_measurement_registry

router = APIRouter(prefix="/api", tags=["maintenance"])

logger = logging.getLogger(__name__)


@router.post("/clear-all-data")
async def clear_all_data(
    store: DomainStore = Depends(get_domain_store),
    registry: MeasurementRegistry = Depends(get_measurement_registry),
) -> Dict[str, Any]:
    if not get_settings().allow_clear:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="clearing data is disabled"
        )

    # Pending measurements point at shots that are about to disappear.
    await registry.shutdown()
    cleared = await run_in_threadpool(store.clear_all)
    logger.warning("all data cleared", extra=cleared)
    return {
        "message": "All data cleared successfully",
        "cleared": cleared,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
