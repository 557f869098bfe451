import logging
import random
from typing import Dict, List, Sequence

from billsynth.services.bill_formatter import Bill

logger = logging.getLogger(__name__)

NO_PURCHASER = "N/A"


class PurchaserAssigner:
    """
    Hands out purchaser names so that one name is not attached to two
    bills of (nearly) the same total back to back. Best effort only.
    """

    def __init__(self, names: Sequence[str], rng: random.Random, min_gap: float = 1.0):
        self.names = [str(n) for n in names if n]
        self.rng = rng
        self.min_gap = min_gap
        self.history: Dict[str, float] = {}

    @property
    def enabled(self) -> bool:
        return bool(self.names) and self.names != [NO_PURCHASER]

    def assign_day(self, bills: Sequence[Bill]) -> List[Bill]:
        if not self.enabled:
            return [bill.with_purchaser(NO_PURCHASER) for bill in bills]

        pool = list(self.names)
        if len(pool) > 1:
            self.rng.shuffle(pool)

        assigned = []
        idx = 0
        for bill in bills:
            chosen = None
            for _ in range(len(pool)):
                candidate = pool[idx % len(pool)]
                idx += 1
                if abs(self.history.get(candidate, 0.0) - bill.total) > self.min_gap:
                    chosen = candidate
                    break

            if chosen is None:
                chosen = pool[idx % len(pool)]
                idx += 1

            self.history[chosen] = bill.total
            assigned.append(bill.with_purchaser(chosen))
        return assigned
