from datetime import date
from typing import List
from pydantic import BaseModel, model_validator
from billsynth.db.schemas.generation import DailyTargetRow


class CalendarRequest(BaseModel):
    start_date: date
    end_date: date
    existing_targets: List[DailyTargetRow] = []

    @model_validator(mode="after")
    def _ordered(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class CalendarResponse(BaseModel):
    rows: List[DailyTargetRow]
    total_sum: float
