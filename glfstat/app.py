from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from glfstat.api.health import router as health_router
from glfstat.api.routers.maintenance import router as maintenance_router
from glfstat.api.routers.measurements import router as measurements_router
from glfstat.api.routers.players import router as players_router
from glfstat.api.routers.rounds import router as rounds_router
from glfstat.api.routers.stats import router as stats_router
from glfstat.config import cors_origins, get_settings
from glfstat.metrics import MetricsMiddleware, render_metrics
from glfstat.store.domain import get_domain_store
from glfstat.tracking.registry import get_measurement_registry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    store = get_domain_store()
    store.load()
    logger.info(
        "glfstat started",
        extra={"storage": settings.storage, "degraded": store.degraded},
    )
    try:
        yield
    finally:
        await get_measurement_registry().shutdown()


app = FastAPI(title="glfstat", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(MetricsMiddleware)

app.include_router(health_router)
app.include_router(players_router)
app.include_router(rounds_router)
app.include_router(stats_router)
app.include_router(measurements_router)
app.include_router(maintenance_router)


_metrics_router = APIRouter()


@_metrics_router.get("/metrics", include_in_schema=False)
async def metrics_endpoint():
    return render_metrics()


app.include_router(_metrics_router)


__all__ = ["app", "lifespan"]
