from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.admin import router as admin_router
from app.api.auth import router as auth_router
from app.api.health import router as health_router
from app.api.metrics_endpoint import router as metrics_router
from app.api.student import router as student_router
from app.core.config import SETTINGS
from app.core.logging import setup_logging
from app.db import engine
from app.middleware.metrics import MetricsMiddleware
from app.middleware.request_context import RequestContextMiddleware
from app.repos.store import Store, memory_store, pg_store
from app.services.seed import seed_admin, seed_course

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


async def _seed(store: Store) -> None:
    await seed_course(store)
    if SETTINGS.admin_password:
        if await seed_admin(store, email=SETTINGS.admin_email, password=SETTINGS.admin_password):
            logger.info("Seeded admin account email=%s", SETTINGS.admin_email)
    else:
        logger.info("ADMIN_PASSWORD not set, no admin account seeded")


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    async with engine.lifespan_db():
        if SETTINGS.seed_demo_data:
            if engine.async_session_factory is None:
                await _seed(memory_store)
            else:
                async with engine.session_scope() as session:
                    await _seed(pg_store(session))
        yield


app = FastAPI(
    title="course-progress-service",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(SETTINGS.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Middleware execution order: last-added runs first (outermost layer).
# RequestContext (outermost) → Metrics → CORS → route handler
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(student_router)
app.include_router(admin_router)

logger.info(
    "course-progress-service started  env=%s log_level=%s port=%d docs=%s store=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    "on" if SETTINGS.is_dev else "off",
    "postgres" if engine.engine is not None else "memory",
)
