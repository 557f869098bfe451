from datetime import date, datetime, timedelta
from typing import Dict, List, Optional


def format_display_date(date_str: Optional[str]) -> Optional[str]:
    """ISO YYYY-MM-DD -> DD/MM/YYYY. Anything else is returned untouched."""
    if not date_str or len(date_str) != 10:
        return date_str
    parts = date_str.split("-")
    if len(parts) != 3:
        return date_str
    return f"{parts[2]}/{parts[1]}/{parts[0]}"


def generate_bill_number(index: int, prefix: str = "BILL", pad_length: int = 4) -> str:
    return f"{prefix}{str(index).zfill(pad_length)}"


def export_timestamp(moment: Optional[datetime] = None) -> str:
    """Filename-safe stamp, e.g. 16-10-2026T14-05."""
    moment = moment or datetime.now()
    return moment.strftime("%d-%m-%YT%H-%M")


def business_dates(start: date, end: date, off_day: int = 6) -> List[str]:
    """
    Every date in [start, end] except the weekly off-day
    (Python weekday numbering, 6 = Sunday).
    """
    dates = []
    current = start
    while current <= end:
        if current.weekday() != off_day:
            dates.append(current.isoformat())
        current += timedelta(days=1)
    return dates


def build_target_calendar(
    start: date,
    end: date,
    existing: Optional[Dict[str, float]] = None,
    off_day: int = 6,
) -> tuple[List[Dict], float]:
    """
    Pair each business date with its target. Targets already entered for a
    date survive a change of range; new dates start at 0.
    Returns (rows, total_sum).
    """
    existing = existing or {}
    rows = []
    total_sum = 0.0
    for date_str in business_dates(start, end, off_day):
        amount = float(existing.get(date_str, 0.0))
        rows.append({"date": date_str, "target_amount": amount})
        total_sum += amount
    return rows, round(total_sum, 2)
