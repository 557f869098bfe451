from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env.local",
        extra="ignore"
    )

#  Storage
    DATABASE_URL: str = f"sqlite+aiosqlite:///{BASE_DIR / 'billsynth.db'}"
    REDIS_HOST: str | None = None
    PROGRESS_TTL_SECONDS: int = 3600


#  Composer tunables
    HIGH_VALUE_MRP: float = 10000.0
    DUST_QTY: float = 0.001
    MIN_USABLE_REMAINDER: float = 50.0
    FRACTION_RULE: Literal["original", "current"] = "original"
    YIELD_EVERY_ATTEMPTS: int = Field(50, gt=0)

#  Scheduler tunables
    FAILURE_CEILING: int = 2500
    STRICT_HALT_ON_CRITICAL: bool = False
    CASH_MIN_BILL_FLOOR: float = 10.0
    CASH_MAX_BILL_CAP: float = 10000.0
    SINGLE_SHOT_MARGIN: float = 5.0
    DAILY_EXACT_MARGIN: float = 50.0
    DAY_DONE_THRESHOLD: float = 5.0
    ANTI_REPEAT_WINDOW: int = 3
    ANTI_REPEAT_ESCAPE: int = 50
    YIELD_EVERY_FAILURES: int = Field(20, gt=0)
    RANDOM_SEED: int | None = None

#  Calendar / export
    WEEKLY_OFF_DAY: int = 6
    DEFAULT_BILL_PREFIX: str = "BILL"


    APP_NAME: str = "BILLSYNTH"
    DEBUG_MODE: bool = False
    LOG_FILE: str = "app.log"

settings = Settings()


class GenerationConfig(BaseModel):
    """Tunables handed to one generation session."""

    high_value_mrp: float = 10000.0
    dust_qty: float = 0.001
    min_usable_remainder: float = 50.0
    fraction_rule: Literal["original", "current"] = "original"
    # (failures strictly above, multiplier), checked in order
    effort_schedule: tuple[tuple[int, float], ...] = ((50, 0.5), (500, 0.2), (2000, 0.02))
    yield_every_attempts: int = Field(50, gt=0)

    # above the last effort threshold so the deepest cut is reached
    failure_ceiling: int = 2500
    strict_halt_on_critical: bool = False
    cash_min_bill_floor: float = 10.0
    cash_max_bill_cap: float = 10000.0
    single_shot_margin: float = 5.0
    daily_exact_margin: float = 50.0
    range_margin: float = 5.0
    day_done_threshold: float = 5.0
    anti_repeat_window: int = 3
    anti_repeat_escape: int = 50
    relax_floor_after: int = 20
    yield_every_failures: int = Field(20, gt=0)

    @classmethod
    def from_settings(cls, s: Optional[Settings] = None, **overrides) -> "GenerationConfig":
        s = s or settings
        values = dict(
            high_value_mrp=s.HIGH_VALUE_MRP,
            dust_qty=s.DUST_QTY,
            min_usable_remainder=s.MIN_USABLE_REMAINDER,
            fraction_rule=s.FRACTION_RULE,
            yield_every_attempts=s.YIELD_EVERY_ATTEMPTS,
            failure_ceiling=s.FAILURE_CEILING,
            strict_halt_on_critical=s.STRICT_HALT_ON_CRITICAL,
            cash_min_bill_floor=s.CASH_MIN_BILL_FLOOR,
            cash_max_bill_cap=s.CASH_MAX_BILL_CAP,
            single_shot_margin=s.SINGLE_SHOT_MARGIN,
            daily_exact_margin=s.DAILY_EXACT_MARGIN,
            day_done_threshold=s.DAY_DONE_THRESHOLD,
            anti_repeat_window=s.ANTI_REPEAT_WINDOW,
            anti_repeat_escape=s.ANTI_REPEAT_ESCAPE,
            yield_every_failures=s.YIELD_EVERY_FAILURES,
        )
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
