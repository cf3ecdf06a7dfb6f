import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mortgage_funnel import __version__
from mortgage_funnel.config import settings
from mortgage_funnel.database import create_tables, engine
from mortgage_funnel.middleware.exceptions import register_exception_handlers
from mortgage_funnel.middleware.security import SecurityHeadersMiddleware
from mortgage_funnel.routers import admin, health, landing, system
from mortgage_funnel.utils.cache import close_redis

logger = logging.getLogger("mortgage_funnel")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.auto_create_tables:
        logger.info("Creating database tables")
        await create_tables()
    yield
    await close_redis()
    await engine.dispose()


app = FastAPI(
    title="Mortgage Funnel",
    description="Mortgage lead-generation funnel and admin API",
    version=__version__,
    lifespan=lifespan,
)

# ── Exception Handlers ───────────────────────────────────────
register_exception_handlers(app)

# ── Middleware (outermost first) ─────────────────────────────
app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ──────────────────────────────────────────────────
app.include_router(health.router)
app.include_router(system.router, prefix="/api/system", tags=["system"])
app.include_router(landing.router, prefix="/api/landing", tags=["landing"])
app.include_router(admin.router, prefix="/api/mortgage-admin", tags=["mortgage-admin"])
