import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException
from billsynth.core.dependencies import get_generation_service, get_redis_client
from billsynth.db.schemas.generation import ProgressResponse, RunDetailResponse, RunSummaryResponse
from billsynth.services.generation_service import GenerationService
from billsynth.services.progress_service import ProgressService
from billsynth.core.config import settings

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get("/", response_model=List[RunSummaryResponse])
async def get_runs(
    limit: int = 50,
    offset: int = 0,
    service: GenerationService = Depends(get_generation_service),
):
    return await service.list_runs(limit, offset)

@router.get("/{run_id}", response_model=RunDetailResponse)
async def get_run_detail(
    run_id: str,
    service: GenerationService = Depends(get_generation_service),
):
    run = await service.get_run(run_id)
    if not run:
        raise HTTPException(status_code=404, detail="Run not found")
    return run

@router.get("/{run_id}/progress", response_model=ProgressResponse)
async def get_run_progress(
    run_id: str,
    redis_client = Depends(get_redis_client),
):
    snapshot = await ProgressService(redis_client, settings.PROGRESS_TTL_SECONDS).fetch(run_id)
    if not snapshot:
        raise HTTPException(status_code=404, detail="No progress recorded for this run")
    return ProgressResponse(**snapshot)

@router.post("/{run_id}/cancel")
async def cancel_run(
    run_id: str,
    service: GenerationService = Depends(get_generation_service),
):
    if not service.cancel(run_id):
        raise HTTPException(status_code=404, detail="Run is not active")
    return {"status": "success", "message": f"Cancellation requested for run '{run_id}'"}
