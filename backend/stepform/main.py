import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stepform.config import settings
from stepform.database import engine
from stepform.middleware.exceptions import register_exception_handlers
from stepform.routers import health, submissions, wizards
from stepform.utils.cache import close_redis

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"StepForm starting ({settings.environment})")
    yield
    await close_redis()
    await engine.dispose()


app = FastAPI(
    title="StepForm",
    description="Dynamic multi-step wizard templates and resumable submissions",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Exception Handlers ───────────────────────────────────────
register_exception_handlers(app)

# ── Middleware ───────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ──────────────────────────────────────────────────
app.include_router(health.router)
app.include_router(wizards.router, prefix="/api/wizards", tags=["wizards"])
app.include_router(
    submissions.router, prefix="/api/wizard-submissions", tags=["wizard-submissions"]
)
