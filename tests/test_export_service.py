import pytest

from billsynth.services.bill_formatter import Bill, BillLine
from billsynth.services.export_service import (
    PaymentMethod, bill_rounding, build_bill_rows, build_stock_rows,
)
from billsynth.services.inventory import InventoryLedger

from conftest import item_row


def line(name, qty, unit_price, gst=0.0, cess=0.0, mrp=0.0, cess_amount=0.0, total=0.0, date="2026-10-12"):
    return BillLine(
        name=name, qty=qty, unit_price=unit_price, gst_percent=gst, cess_percent=cess,
        mrp=mrp, cess_amount=cess_amount, line_total=total, date=date,
    )


@pytest.fixture
def soap_bill():
    return Bill(
        lines=(line("Soap", 2, 100, gst=18, total=236.0),),
        total=236.0, target_amount=240.0, date="2026-10-12", purchaser_name="Ravi",
    )


class TestBillRows:
    def test_gst_split_evenly(self, soap_bill):
        [row] = build_bill_rows([soap_bill], PaymentMethod.UPI)
        assert row["Item Price"] == 200.0
        assert row["Total Tax Amount"] == 36.0
        assert row["CGST %"] == 9.0
        assert row["SGST %"] == 9.0
        assert row["CGST Amount"] == 18.0
        assert row["SGST Amount"] == 18.0
        assert row["CESS Tax Amount"] == 0.0
        assert row["Item Total"] == 236.0

    def test_cess_kept_out_of_gst(self):
        bill = Bill(
            lines=(line("Pan Masala", 1, 100, gst=28, cess=12, mrp=150, cess_amount=18.0, total=146.0),),
            total=146.0, target_amount=150.0, date="2026-10-12",
        )
        [row] = build_bill_rows([bill], PaymentMethod.UPI)
        assert row["Total Tax Amount"] == 28.0
        assert row["CESS Tax Amount"] == 18.0
        assert row["CGST Amount"] == 14.0

    def test_numbering_prefix_and_date(self, soap_bill):
        rows = build_bill_rows([soap_bill, soap_bill], PaymentMethod.UPI, prefix="INV", start_index=7)
        assert [r["Bill No"] for r in rows] == ["INV0007", "INV0008"]
        assert rows[0]["Date"] == "12/10/2026"
        assert rows[0]["Purchaser Name"] == "Ravi"
        assert rows[0]["Payment Method"] == "UPI"

    def test_missing_purchaser_written_as_not_applicable(self):
        bill = Bill(lines=(line("Tea", 1, 10, total=10.0),), total=10.0, target_amount=10.0, date="2026-10-12")
        [row] = build_bill_rows([bill], PaymentMethod.CASH)
        assert row["Purchaser Name"] == "N/A"
        assert row["Payment Method"] == "Cash"

    def test_every_line_repeats_bill_totals(self):
        bill = Bill(
            lines=(line("Tea", 1, 10, total=10.0), line("Sugar", 0.5, 0.5, total=0.25)),
            total=10.25, target_amount=10.0, date="2026-10-12",
        )
        rows = build_bill_rows([bill], PaymentMethod.CASH)
        assert len(rows) == 2
        assert {r["Bill Total (Unrounded)"] for r in rows} == {10.25}
        assert {r["Bill Total (Final)"] for r in rows} == {10.0}
        assert {r["Round off"] for r in rows} == {-0.25}


class TestRounding:
    def test_cash_rounds_to_rupee(self):
        assert bill_rounding(10.25, PaymentMethod.CASH) == (-0.25, 10.0)
        assert bill_rounding(10.5, PaymentMethod.CASH) == (0.5, 11.0)
        assert bill_rounding(99.75, PaymentMethod.CASH) == (0.25, 100.0)

    def test_upi_not_rounded(self):
        assert bill_rounding(10.25, PaymentMethod.UPI) == (0.0, 10.25)


def test_stock_rows():
    ledger = InventoryLedger.from_rows([item_row("Rice", 12.5, 40, gst_percent=5, unit="KG")])
    ledger.commit({"Rice": 2.5})
    [row] = build_stock_rows(ledger)
    assert row == {
        "Item Details": "Rice",
        "Qty.": 10.0,
        "Unit": "KG",
        "Price": 40.0,
        "GST PERCENT": 5.0,
        "MRP": 0.0,
        "Amount": 400.0,
    }
