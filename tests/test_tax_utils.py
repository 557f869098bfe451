from billsynth.utils.tax_utils import (
    cess_amount, line_total, money, round_half_away, round_qty, round_stock, split_gst,
)


class TestLineTotal:
    def test_gst_only(self):
        assert line_total(100, 2, 18, 0, 0) == 236.00

    def test_gst_and_cess_on_mrp(self):
        # 50*1*1.05 + 200*1*0.02
        assert line_total(50, 1, 5, 2, 200) == 56.50

    def test_missing_rates_count_as_zero(self):
        assert line_total(10, 3, None, None, None) == 30.0
        assert line_total(10, 3) == 30.0

    def test_fractional_quantity_is_rounded_to_paise(self):
        assert line_total(500, 0.33, 0, 0, 0) == 165.0
        assert line_total(99.99, 0.37, 18, 0, 0) == 43.66


class TestRounding:
    def test_money_rounds_half_up(self):
        assert money(2.675) == 2.68
        assert money(2.665) == 2.67
        assert money(-1.005) == -1.01

    def test_round_qty_truncates(self):
        assert round_qty(0.379) == 0.37
        assert round_qty(0.999) == 0.99
        assert round_qty(2.0) == 2.0

    def test_round_stock_three_places(self):
        assert round_stock(1.23456) == 1.235
        assert round_stock(3.0004) == 3.0

    def test_round_half_away(self):
        assert round_half_away(2.5) == 3
        assert round_half_away(2.49) == 2
        assert round_half_away(-2.5) == -3


class TestTaxBreakdown:
    def test_split_gst_halves(self):
        split = split_gst(36.0, 18)
        assert split["cgst_percent"] == 9
        assert split["sgst_percent"] == 9
        assert split["cgst_amount"] == 18.0
        assert split["sgst_amount"] == 18.0

    def test_cess_on_mrp(self):
        assert cess_amount(2, 10, 300) == 60.0
        assert cess_amount(2, None, 300) == 0.0
