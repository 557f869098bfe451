import logging
from fastapi import FastAPI
from contextlib import asynccontextmanager
from fastapi.middleware.cors import CORSMiddleware
import redis.asyncio as redis

from billsynth.db.session import engine, Base
from billsynth.db.models.generation_run import GenerationRun  # noqa: F401
from .routers import generation, calendar, runs
from billsynth.core.config import settings

# Configure Logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - [%(levelname)s] - %(name)s - %(message)s",
    handlers=[
        logging.FileHandler(settings.LOG_FILE),
        logging.StreamHandler()
    ]
)

logger = logging.getLogger(__name__)


# Lifespan events
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Bill generation service starting up...")

    app.state.active_runs = {}

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured.")

    # Redis is optional; progress polling is unavailable without it
    app.state.redis_client = None
    if settings.REDIS_HOST:
        try:
            app.state.redis_client = redis.from_url(
                settings.REDIS_HOST,
                decode_responses=True
            )
            await app.state.redis_client.ping()
            logger.info("Successfully connected to Redis.")
        except Exception as e:
            logger.error(f"Error connecting to Redis: {e}")
            app.state.redis_client = None
    else:
        logger.info("REDIS_HOST not set; progress snapshots disabled.")

    logger.info("Startup complete.")
    yield

    for token in app.state.active_runs.values():
        token.cancel()
    if app.state.redis_client:
        await app.state.redis_client.close()
        logger.info("Redis connection closed.")
    await engine.dispose()
    logger.info("Resources cleaned up. Application shutting down.")


# FastAPI App
app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
def read_root():
    logger.info("Root endpoint accessed.")
    return {"message": f"{settings.APP_NAME} bill generator is running"}


# Routers
app.include_router(generation.router, tags=["generation"])
app.include_router(calendar.router, prefix="/calendar", tags=["calendar"])
app.include_router(runs.router, prefix="/runs", tags=["runs"])
