import enum
import logging
import math
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from billsynth.services.bill_composer import BillComposer, ComposeMode
from billsynth.services.bill_formatter import Bill
from billsynth.services.purchaser import NO_PURCHASER, PurchaserAssigner
from billsynth.services.session import GenerationCancelled, GenerationSession
from billsynth.utils.dates import format_display_date

logger = logging.getLogger(__name__)


class RunStatus(str, enum.Enum):
    COMPLETE = "complete"
    PARTIAL = "partial"
    ABORTED = "aborted"


class SkipKind(str, enum.Enum):
    PARTIAL = "partial"
    CRITICAL = "critical"
    INVALID = "invalid"
    UNFILLED = "unfilled"


@dataclass(frozen=True)
class DailyTarget:
    date: str
    target_amount: float


@dataclass(frozen=True)
class SkipLogEntry:
    date: str | None
    kind: SkipKind
    percent_skipped: float
    remaining: float
    message: str

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind.value
        return data


@dataclass
class RunOutcome:
    status: RunStatus
    bills: List[Bill] = field(default_factory=list)
    skip_log: List[SkipLogEntry] = field(default_factory=list)
    message: str = ""


class DayScheduler:
    """
    Drives the composer across a schedule of targets.

    `run_daily` spreads each day's target over many bills (cash batches);
    `run_single_shot` makes exactly one bill per target row (UPI batches).
    """

    def __init__(self, session: GenerationSession, purchaser_names: Sequence[str] = ()):
        self.session = session
        self.config = session.config
        self.ledger = session.ledger
        self.composer = BillComposer(session)
        self.assigner = PurchaserAssigner(purchaser_names, session.rng)

    # --- Cash: cumulative daily targets ---
    async def run_daily(
        self,
        targets: Iterable[DailyTarget],
        min_bill: float,
        max_bill: float,
        rejected_rows: Sequence[SkipLogEntry] = (),
    ) -> RunOutcome:
        """`rejected_rows` are entries for input rows already found invalid; they open the skip log."""
        min_bill = max(min_bill, self.config.cash_min_bill_floor)
        max_bill = min(max_bill, self.config.cash_max_bill_cap)
        if min_bill > max_bill:
            raise ValueError(f"Minimum bill ({min_bill}) exceeds maximum bill ({max_bill}).")

        bills: List[Bill] = []
        skip_log: List[SkipLogEntry] = list(rejected_rows)
        day_bills: List[Bill] = []

        try:
            for target in targets:
                if target.target_amount <= 0:
                    continue

                day_bills = []
                entry = await self._fill_day(target, min_bill, max_bill, bills, day_bills)
                bills.extend(self.assigner.assign_day(day_bills))
                day_bills = []

                if entry is not None:
                    skip_log.append(entry)
                    if entry.kind == SkipKind.CRITICAL and self.config.strict_halt_on_critical:
                        logger.error(f"Halting run after critical failure on {target.date}.")
                        return RunOutcome(RunStatus.ABORTED, bills, skip_log,
                                          f"Aborted: no bills possible on {format_display_date(target.date)}.")
        except GenerationCancelled:
            logger.warning("Cash generation cancelled; keeping bills committed so far.")
            bills.extend(self.assigner.assign_day(day_bills))
            return RunOutcome(RunStatus.ABORTED, bills, skip_log, "Cancelled.")

        return self._finish(bills, skip_log)

    async def _fill_day(
        self,
        target: DailyTarget,
        min_bill: float,
        max_bill: float,
        earlier_bills: List[Bill],
        day_bills: List[Bill],
    ) -> Optional[SkipLogEntry]:
        """Compose bills for one day into `day_bills`; a log entry if the day was abandoned."""
        cfg = self.config
        rng = self.session.rng
        target_amount = target.target_amount
        accumulated = 0.0
        failures = 0
        used_today: Set[str] = set()

        logger.info(f"Processing date {target.date} | target {target_amount}")

        while accumulated < target_amount:
            remaining = target_amount - accumulated
            if remaining <= cfg.day_done_threshold:
                break

            if failures % cfg.yield_every_failures == 0:
                await self.session.checkpoint(
                    date=target.date,
                    percent=round(accumulated / target_amount * 100),
                    failures=failures,
                    bills=len(earlier_bills) + len(day_bills),
                )

            bill_target = rng.uniform(min_bill, max_bill)
            lo = max(min_bill, bill_target * 0.95)
            hi = min(max_bill, bill_target * 1.05)
            if failures > cfg.relax_floor_after:
                lo = cfg.cash_min_bill_floor

            if remaining <= max_bill:
                mode = ComposeMode.EXACT
                lo = hi = remaining
                margin = cfg.daily_exact_margin
            else:
                mode = ComposeMode.RANGE
                hi = min(hi, remaining)
                margin = cfg.range_margin

            guard = None
            if mode == ComposeMode.RANGE and failures < cfg.anti_repeat_escape:
                recent = [b.total for b in (earlier_bills + day_bills)[-cfg.anti_repeat_window:]]
                guard = lambda bill, recent=recent: bill.total not in recent

            result = await self.composer.compose(
                self.ledger, lo, hi, remaining, target.date,
                margin=margin, mode=mode, failure_count=failures,
                used_today=used_today, guard=guard,
            )

            if result.success:
                used_today.update(result.consumed)
                day_bills.append(result.bill)
                accumulated += result.bill.total
                failures = 0
                continue

            failures += 1
            if failures > cfg.failure_ceiling:
                return self._abandon_day(target, accumulated, remaining)

        logger.info(f"Finished {target.date}: {len(day_bills)} bills, {round(accumulated, 2)} of {target_amount}")
        return None

    def _abandon_day(self, target: DailyTarget, accumulated: float, remaining: float) -> SkipLogEntry:
        display = format_display_date(target.date)
        if accumulated == 0:
            message = f"FAILURE: {display} Skipped 100% (No valid bills generated). Moving to next day."
            logger.error(message)
            return SkipLogEntry(target.date, SkipKind.CRITICAL, 100.0, round(remaining, 2), message)

        percent = round(remaining / target.target_amount * 100, 1)
        message = f"Date: {display} - Skipped {percent}% (₹{remaining:.2f} remaining)"
        logger.warning(message)
        return SkipLogEntry(target.date, SkipKind.PARTIAL, percent, round(remaining, 2), message)

    # --- UPI: one exact bill per target row ---
    async def run_single_shot(self, rows: Iterable[Mapping[str, Any]]) -> RunOutcome:
        bills: List[Bill] = []
        skip_log: List[SkipLogEntry] = []
        used_items: Set[str] = set()

        try:
            for position, row in enumerate(rows, start=1):
                target = parse_target_row(row)
                if target is None:
                    skip_log.append(invalid_row_entry(position, row))
                    continue

                result = await self.composer.compose(
                    self.ledger, target.target_amount, target.target_amount, target.target_amount,
                    target.date, margin=self.config.single_shot_margin, mode=ComposeMode.EXACT,
                    failure_count=0, used_today=used_items,
                )
                if result.success:
                    used_items.update(result.consumed)
                    bills.append(result.bill.with_purchaser(NO_PURCHASER))
                else:
                    message = (f"Row {position}: no bill found for {target.target_amount} "
                               f"on {format_display_date(target.date)}.")
                    logger.warning(message)
                    skip_log.append(SkipLogEntry(target.date, SkipKind.UNFILLED, 100.0,
                                                 target.target_amount, message))
        except GenerationCancelled:
            logger.warning("UPI generation cancelled; keeping bills committed so far.")
            return RunOutcome(RunStatus.ABORTED, bills, skip_log, "Cancelled.")

        return self._finish(bills, skip_log)

    @staticmethod
    def _finish(bills: List[Bill], skip_log: List[SkipLogEntry]) -> RunOutcome:
        if skip_log:
            return RunOutcome(RunStatus.PARTIAL, bills, skip_log, "Completed with some skipped days. Check the log.")
        return RunOutcome(RunStatus.COMPLETE, bills, skip_log, "Bills generated successfully for ALL days!")


def parse_target_row(row: Mapping[str, Any]) -> Optional[DailyTarget]:
    """None when the amount is not a finite, non-negative number or the date is missing."""
    raw_amount = row.get("target_amount")
    date = row.get("date")
    if raw_amount is None or raw_amount == "" or not date:
        return None
    try:
        amount = float(raw_amount)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(amount) or amount < 0:
        return None
    return DailyTarget(date=str(date), target_amount=amount)


def invalid_row_entry(position: int, row: Mapping[str, Any]) -> SkipLogEntry:
    message = f"Row {position}: invalid target or missing date, skipped."
    logger.warning(message)
    return SkipLogEntry(row.get("date") or None, SkipKind.INVALID, 100.0, 0.0, message)


def split_target_rows(rows: Iterable[Mapping[str, Any]]) -> Tuple[List[DailyTarget], List[SkipLogEntry]]:
    """Parse raw daily rows into targets, logging each unusable row as invalid."""
    targets: List[DailyTarget] = []
    rejected: List[SkipLogEntry] = []
    for position, row in enumerate(rows, start=1):
        target = parse_target_row(row)
        if target is None:
            rejected.append(invalid_row_entry(position, row))
        else:
            targets.append(target)
    return targets, rejected
