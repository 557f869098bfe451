import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Mapping

from billsynth.utils.tax_utils import line_total, money, round_stock

logger = logging.getLogger(__name__)

FRACTION_EPSILON = 0.0001


def to_number(value: Any) -> float:
    """Lenient numeric read: blanks, junk and NaN become 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(result) or math.isinf(result):
        return 0.0
    return result


def has_fraction(qty: float) -> bool:
    return abs(qty % 1) > FRACTION_EPSILON


@dataclass
class Item:
    name: str
    unit_price: float
    gst_percent: float
    cess_percent: float
    mrp: float
    remaining_qty: float
    unit: str | None = None
    originally_fractional: bool = field(init=False)
    single_unit_cost: float = field(init=False)

    def __post_init__(self):
        self.originally_fractional = has_fraction(self.remaining_qty)
        self.single_unit_cost = line_total(
            self.unit_price, 1, self.gst_percent, self.cess_percent, self.mrp
        )

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Item":
        return cls(
            name=str(row.get("name", "")).strip(),
            unit_price=to_number(row.get("unit_price")),
            gst_percent=to_number(row.get("gst_percent")),
            cess_percent=to_number(row.get("cess_percent")),
            mrp=to_number(row.get("mrp")),
            remaining_qty=max(0.0, to_number(row.get("quantity"))),
            unit=row.get("unit"),
        )


class InventoryLedger:
    """
    Remaining stock for one generation session, keyed by item name.

    Only `commit()` changes quantities after construction, and it only
    ever subtracts.
    """

    def __init__(self, items: Iterable[Item] = ()):
        self._items: Dict[str, Item] = {}
        for item in items:
            if not item.name:
                logger.warning("Skipping inventory row without an item name.")
                continue
            if item.name in self._items:
                logger.warning(f"Duplicate inventory row for '{item.name}'; keeping the last one.")
            self._items[item.name] = item

    @classmethod
    def from_rows(cls, rows: Iterable[Mapping[str, Any]]) -> "InventoryLedger":
        ledger = cls(Item.from_row(row) for row in rows)
        logger.info(f"Inventory ledger built with {len(ledger)} items.")
        return ledger

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Item]:
        return iter(self._items.values())

    def __contains__(self, name: str) -> bool:
        return name in self._items

    def get(self, name: str) -> Item:
        return self._items[name]

    def available(self, dust: float = 0.001) -> List[Item]:
        return [item for item in self._items.values() if item.remaining_qty > dust]

    def commit(self, consumed: Mapping[str, float]) -> None:
        """Subtract an accepted attempt's consumption from stock."""
        for name, qty in consumed.items():
            item = self._items[name]
            item.remaining_qty = max(0.0, round_stock(item.remaining_qty - qty))

    def remaining(self) -> Dict[str, float]:
        return {name: item.remaining_qty for name, item in self._items.items()}

    def total_value(self) -> float:
        """Pre-tax value of the remaining stock (qty x price)."""
        return money(sum(item.remaining_qty * item.unit_price for item in self._items.values()))
