from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from guardian.api import routes_analysis, routes_health, routes_route
from guardian.api.errors import register_exception_handlers
from guardian.core.config import get_settings
from guardian.core.logger import get_logger
from guardian.services.gemini_client import get_gemini_client
from guardian.workers.scheduler import cleanup_uploads, get_scheduler

log = get_logger(__name__)


async def _sweep_uploads() -> None:
    await cleanup_uploads()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    sched = get_scheduler()
    await sched.start()
    sched.schedule(_sweep_uploads, interval_sec=3600)
    log.info("Safety Guardian API started (backend=%s)", get_settings().ANALYSIS_BACKEND)
    try:
        yield
    finally:
        # Shutdown
        await get_scheduler().stop()
        await get_gemini_client().aclose()


app = FastAPI(
    title="AI Personal Safety Guardian API",
    description="Threat assessment for images, video, audio, text and locations",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Routers
app.include_router(routes_analysis.router, prefix="/api", tags=["Analysis"])
app.include_router(routes_route.router, prefix="/api", tags=["Safe route"])
app.include_router(routes_health.router, prefix="/health", tags=["Health"])


@app.get("/api/health")
def health():
    return {"status": "ok", "message": "AI Personal Safety Guardian API is running"}


@app.get("/")
def root():
    return {"status": "AI Personal Safety Guardian backend running"}
