from fastapi import APIRouter
from billsynth.core.config import settings
from billsynth.db.schemas.calendar import CalendarRequest, CalendarResponse
from billsynth.db.schemas.generation import DailyTargetRow
from billsynth.utils.dates import build_target_calendar

router = APIRouter()

@router.post("/", response_model=CalendarResponse)
async def build_calendar(request: CalendarRequest):
    """
    Business dates in the range (weekly off-day excluded), each paired with
    its daily target. Targets already entered for a date are carried over.
    """
    existing = {t.date: t.target_amount for t in request.existing_targets}
    rows, total_sum = build_target_calendar(
        request.start_date, request.end_date, existing, settings.WEEKLY_OFF_DAY
    )
    return CalendarResponse(rows=[DailyTargetRow(**r) for r in rows], total_sum=total_sum)
