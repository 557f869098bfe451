import enum
import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Set

from billsynth.services.bill_formatter import AttemptLine, Bill, format_result
from billsynth.services.fraction_policy import FractionPolicy
from billsynth.services.inventory import InventoryLedger, Item
from billsynth.services.session import GenerationSession
from billsynth.utils.tax_utils import line_total, money, round_qty

logger = logging.getLogger(__name__)

# (minimum distinct items, base attempt budget), most variety first
VARIETY_TIERS = ((4, 50), (3, 50), (2, 100), (1, 20))

DETERMINISTIC_FACTOR = 0.9
QTY_DUST = 0.01


class ComposeMode(str, enum.Enum):
    RANGE = "RANGE"
    EXACT = "EXACT"


@dataclass
class ComposeResult:
    success: bool
    bill: Optional[Bill] = None
    consumed: Dict[str, float] = field(default_factory=dict)
    reason: str | None = None
    tier_min_items: int | None = None
    attempts: int = 0


@dataclass
class AllocationAttempt:
    lines: List[AttemptLine] = field(default_factory=list)
    total: float = 0.0
    consumed: Dict[str, float] = field(default_factory=dict)

    def remaining_of(self, item: Item) -> float:
        return max(0.0, item.remaining_qty - self.consumed.get(item.name, 0.0))

    def add(self, item: Item, qty: float, cost: float) -> None:
        self.lines.append(AttemptLine(item=item, qty=qty, cost=cost))
        self.total += cost
        self.consumed[item.name] = self.consumed.get(item.name, 0.0) + qty

    @property
    def picked(self) -> int:
        return len(self.lines)


class BillComposer:
    """
    Randomized constructive search for one bill.

    Reads the ledger while searching and writes to it only when an attempt
    is accepted, so a failed compose leaves stock exactly as it found it.
    """

    def __init__(self, session: GenerationSession):
        self.session = session
        self.config = session.config
        self.rng = session.rng
        self.policy = FractionPolicy(session.config)

    def effort_multiplier(self, failure_count: int) -> float:
        multiplier = 1.0
        for threshold, value in self.config.effort_schedule:
            if failure_count > threshold:
                multiplier = value
        return multiplier

    async def compose(
        self,
        ledger: InventoryLedger,
        target_min: float,
        target_max: float,
        day_budget_remaining: float,
        date: str,
        margin: float = 5.0,
        mode: ComposeMode = ComposeMode.RANGE,
        failure_count: int = 0,
        used_today: Optional[Set[str]] = None,
        guard: Optional[Callable[[Bill], bool]] = None,
    ) -> ComposeResult:
        used_today = used_today or set()

        available = sorted(ledger.available(self.config.dust_qty), key=lambda i: i.single_unit_cost)
        if not available:
            return ComposeResult(success=False, reason="no_stock")

        fresh = [item for item in available if item.name not in used_today]
        expensive_all = sorted(available, key=lambda i: i.single_unit_cost, reverse=True)
        expensive_fresh = sorted(fresh, key=lambda i: i.single_unit_cost, reverse=True)

        multiplier = self.effort_multiplier(failure_count)
        total_attempts = 0

        for min_items, base_attempts in VARIETY_TIERS:
            if len(available) < min_items:
                continue
            max_attempts = max(1, math.floor(base_attempts * multiplier))

            for attempt_no in range(max_attempts):
                if attempt_no % self.config.yield_every_attempts == 0:
                    await self.session.checkpoint()
                total_attempts += 1

                pool = self._selection_pool(attempt_no, min_items, available, fresh,
                                            expensive_all, expensive_fresh)
                deterministic = attempt_no in (0, 2)
                attempt = self._build_attempt(pool, target_min, target_max, min_items, deterministic)

                if not self._is_acceptable(attempt, target_min, target_max, margin, mode, min_items):
                    continue

                future_remaining = day_budget_remaining - attempt.total
                if not (future_remaining <= margin or future_remaining > self.config.min_usable_remainder):
                    continue

                bill = format_result(attempt.lines, attempt.total, target_max, date)
                if guard is not None and not guard(bill):
                    logger.debug(f"Bill of {bill.total} rejected by guard for {date}.")
                    return ComposeResult(success=False, reason="guard_rejected",
                                         tier_min_items=min_items, attempts=total_attempts)

                ledger.commit(attempt.consumed)
                logger.debug(
                    f"Composed {mode.value} bill for {date}: {bill.total} "
                    f"({bill.item_count} items, tier {min_items}, attempt {total_attempts})"
                )
                return ComposeResult(success=True, bill=bill, consumed=dict(attempt.consumed),
                                     tier_min_items=min_items, attempts=total_attempts)

        return ComposeResult(success=False, reason="exhausted", attempts=total_attempts)

    def _selection_pool(
        self,
        attempt_no: int,
        min_items: int,
        available: List[Item],
        fresh: List[Item],
        expensive_all: List[Item],
        expensive_fresh: List[Item],
    ) -> List[Item]:
        # First two tries favour items not yet sold today
        if attempt_no < 2 and len(fresh) >= min_items:
            if attempt_no == 0:
                return expensive_fresh
            pool = list(fresh)
            self.rng.shuffle(pool)
            return pool
        if attempt_no == 2:
            return expensive_all
        pool = list(available)
        self.rng.shuffle(pool)
        return pool

    def _build_attempt(
        self,
        pool: Iterable[Item],
        target_min: float,
        target_max: float,
        min_items: int,
        deterministic: bool,
    ) -> AllocationAttempt:
        attempt = AllocationAttempt()

        for item in pool:
            if attempt.total >= target_min and attempt.picked >= min_items:
                if deterministic or self.rng.random() > 0.5:
                    break

            stock = attempt.remaining_of(item)
            if stock <= self.config.dust_qty:
                continue

            room_left = target_max - attempt.total
            if room_left < 1:
                continue

            abs_max = min(stock, room_left / item.single_unit_cost) if item.single_unit_cost > 0 else stock
            needs_variety = attempt.picked < min_items

            if self.policy.allows_fraction(item, room_left):
                if abs_max < QTY_DUST:
                    continue
                factor = DETERMINISTIC_FACTOR if deterministic else self.rng.uniform(0.2, 1.0)
                qty = round_qty(abs_max * factor)
                if needs_variety and qty > abs_max / 2:
                    qty = round_qty(abs_max / 2)
            else:
                int_max = math.floor(abs_max)
                if int_max < 1:
                    continue
                if needs_variety:
                    int_max = min(int_max, 2)
                qty = self.rng.randint(1, int_max)

            if qty <= 0:
                continue

            cost = line_total(item.unit_price, qty, item.gst_percent, item.cess_percent, item.mrp)
            attempt.add(item, qty, cost)

        attempt.total = money(attempt.total)
        return attempt

    @staticmethod
    def _is_acceptable(
        attempt: AllocationAttempt,
        target_min: float,
        target_max: float,
        margin: float,
        mode: ComposeMode,
        min_items: int,
    ) -> bool:
        if attempt.picked < min_items or attempt.total <= 0:
            return False
        if mode == ComposeMode.RANGE:
            return target_min <= attempt.total <= target_max
        return abs(target_max - attempt.total) <= margin
