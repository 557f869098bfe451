"""
Row builders for the bill and stock exports.

The spreadsheet writer lives outside this service; these functions only
produce the row dicts it consumes, keyed by the sheet's column headers.
"""
import enum
from typing import Dict, List, Sequence

from billsynth.services.bill_formatter import Bill
from billsynth.services.inventory import InventoryLedger
from billsynth.services.purchaser import NO_PURCHASER
from billsynth.utils.dates import format_display_date, generate_bill_number
from billsynth.utils.tax_utils import money, round_half_away, split_gst


class PaymentMethod(str, enum.Enum):
    UPI = "UPI"
    CASH = "Cash"


def bill_rounding(total: float, method: PaymentMethod) -> tuple[float, float]:
    """(round_off, final_total). Only cash bills are rounded to the rupee."""
    if method == PaymentMethod.CASH:
        rounded = round_half_away(total)
        return money(rounded - total), float(rounded)
    return 0.0, total


def build_bill_rows(
    bills: Sequence[Bill],
    method: PaymentMethod,
    prefix: str = "BILL",
    start_index: int = 1,
) -> List[Dict]:
    """One row per line item per bill."""
    rows = []
    for index, bill in enumerate(bills):
        bill_no = generate_bill_number(index + start_index, prefix)
        purchaser = bill.purchaser_name or NO_PURCHASER
        round_off, final_total = bill_rounding(bill.total, method)

        for line in bill.lines:
            item_price = line.unit_price * line.qty
            tax_amount = line.line_total - item_price - line.cess_amount
            gst = split_gst(tax_amount, line.gst_percent)

            rows.append({
                "Bill No": bill_no,
                "Purchaser Name": purchaser,
                "Payment Method": method.value,
                "Item Name": line.name,
                "Quantity": line.qty,
                "Unit Price": line.unit_price,
                "Item Price": money(item_price),
                "GST %": line.gst_percent,
                "CGST %": gst["cgst_percent"],
                "CGST Amount": gst["cgst_amount"],
                "SGST %": gst["sgst_percent"],
                "SGST Amount": gst["sgst_amount"],
                "Total Tax Amount": money(tax_amount),
                "CESS Tax Amount": money(line.cess_amount),
                "Date": format_display_date(line.date),
                "Item Total": line.line_total,
                "Bill Total (Unrounded)": bill.total,
                "Round off": round_off,
                "Bill Total (Final)": final_total,
            })
    return rows


def build_stock_rows(ledger: InventoryLedger) -> List[Dict]:
    return [
        {
            "Item Details": item.name,
            "Qty.": item.remaining_qty,
            "Unit": item.unit,
            "Price": item.unit_price,
            "GST PERCENT": item.gst_percent,
            "MRP": item.mrp,
            "Amount": money(item.remaining_qty * item.unit_price),
        }
        for item in ledger
    ]
