"""
Tax and rounding helpers for synthetic bill generation.

Pure math with no dependency on the ledger or the search: every budget
comparison downstream works on amounts rounded by `money()`, so this
module is the single source of rounding rules.
"""
import math
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP
from typing import Optional


def money(x: float) -> float:
    """Round to 2 decimal places using ROUND_HALF_UP (banker-safe for INR)."""
    return float(Decimal(str(x)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def round_stock(x: float) -> float:
    """Round a stock quantity to 3 decimals so repeated commits don't drift."""
    return float(Decimal(str(x)).quantize(Decimal("0.001"), rounding=ROUND_HALF_UP))


def round_qty(x: float, places: int = 2) -> float:
    """Truncate a picked quantity; never rounds above the amount it came from."""
    step = Decimal(1).scaleb(-places)
    return float(Decimal(str(x)).quantize(step, rounding=ROUND_DOWN))


def round_half_away(x: float) -> int:
    """Nearest whole rupee, halves away from zero (cash round-off)."""
    return int(math.copysign(math.floor(abs(x) + 0.5), x))


def _num(value: Optional[float]) -> float:
    if value is None:
        return 0.0
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(result) else result


def cess_amount(qty: float, cess_percent: Optional[float], mrp: Optional[float]) -> float:
    """CESS is levied on MRP, not on the selling price. Unrounded."""
    return (_num(mrp) * qty * _num(cess_percent)) / 100


def line_total(
    unit_price: float,
    qty: float,
    gst_percent: Optional[float] = 0.0,
    cess_percent: Optional[float] = 0.0,
    mrp: Optional[float] = 0.0,
) -> float:
    """
    Taxed total for one bill line:
        price*qty*(1 + gst/100) + mrp*qty*(cess/100), rounded to 2 dp.
    Missing rates count as zero.
    """
    base = _num(unit_price) * qty
    gst_tax = (base * _num(gst_percent)) / 100
    return money(base + gst_tax + cess_amount(qty, cess_percent, mrp))


def split_gst(tax_amount: float, gst_percent: Optional[float]) -> dict:
    """
    Intra-state supply: GST splits evenly into CGST and SGST.
    Amounts are rounded here; rates are kept as-is.
    """
    rate = _num(gst_percent)
    return {
        "cgst_percent": rate / 2,
        "sgst_percent": rate / 2,
        "cgst_amount": money(tax_amount / 2),
        "sgst_amount": money(tax_amount / 2),
    }
