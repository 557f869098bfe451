from typing import Dict

from fastapi import Request, HTTPException, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import redis.asyncio as redis

from billsynth.core.config import settings
from billsynth.db.session import get_db
from billsynth.services.generation_service import GenerationService
from billsynth.services.progress_service import ProgressService
from billsynth.services.session import CancelToken

async def get_optional_redis_client(request: Request) -> redis.Redis | None:
    return request.app.state.redis_client

async def get_redis_client(request: Request) -> redis.Redis:
    if request.app.state.redis_client is None:
        raise HTTPException(status_code=503, detail="Redis connection not available")
    return request.app.state.redis_client

async def get_active_runs(request: Request) -> Dict[str, CancelToken]:
    return request.app.state.active_runs

async def get_progress_service(
        redis_client = Depends(get_optional_redis_client)
) -> ProgressService:
    return ProgressService(redis_client, settings.PROGRESS_TTL_SECONDS)

async def get_generation_service(
        db: AsyncSession = Depends(get_db),
        progress: ProgressService = Depends(get_progress_service),
        active_runs: Dict[str, CancelToken] = Depends(get_active_runs),
) -> GenerationService:
    return GenerationService(db, progress, active_runs)
