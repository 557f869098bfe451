from dataclasses import dataclass, replace
from typing import Sequence, Tuple

from billsynth.services.inventory import Item
from billsynth.utils.tax_utils import cess_amount, money


@dataclass(frozen=True)
class AttemptLine:
    item: Item
    qty: float
    cost: float


@dataclass(frozen=True)
class BillLine:
    name: str
    qty: float
    unit_price: float
    gst_percent: float
    cess_percent: float
    mrp: float
    cess_amount: float
    line_total: float
    date: str


@dataclass(frozen=True)
class Bill:
    lines: Tuple[BillLine, ...]
    total: float
    target_amount: float
    date: str
    purchaser_name: str | None = None

    @property
    def item_count(self) -> int:
        return len(self.lines)

    def with_purchaser(self, name: str) -> "Bill":
        return replace(self, purchaser_name=name)


def format_result(lines: Sequence[AttemptLine], total: float, target: float, date: str) -> Bill:
    """Package an accepted attempt as a Bill. Deterministic."""
    bill_lines = tuple(
        BillLine(
            name=entry.item.name,
            qty=entry.qty,
            unit_price=entry.item.unit_price,
            gst_percent=entry.item.gst_percent,
            cess_percent=entry.item.cess_percent,
            mrp=entry.item.mrp,
            cess_amount=cess_amount(entry.qty, entry.item.cess_percent, entry.item.mrp),
            line_total=entry.cost,
            date=date,
        )
        for entry in lines
    )
    return Bill(lines=bill_lines, total=money(total), target_amount=target, date=date)
