from datetime import date, datetime

from billsynth.utils.dates import (
    build_target_calendar, business_dates, export_timestamp,
    format_display_date, generate_bill_number,
)


class TestDisplayDate:
    def test_iso_to_display(self):
        assert format_display_date("2026-10-12") == "12/10/2026"

    def test_non_iso_is_untouched(self):
        assert format_display_date("12/10/2026x") == "12/10/2026x"
        assert format_display_date("") == ""
        assert format_display_date(None) is None


class TestBillNumber:
    def test_zero_padded(self):
        assert generate_bill_number(7, "INV") == "INV0007"
        assert generate_bill_number(12345, "INV") == "INV12345"

    def test_default_prefix(self):
        assert generate_bill_number(1) == "BILL0001"


class TestCalendar:
    def test_sundays_excluded(self):
        # 2026-10-12 is a Monday, 2026-10-18 a Sunday
        dates = business_dates(date(2026, 10, 12), date(2026, 10, 18))
        assert dates == [
            "2026-10-12", "2026-10-13", "2026-10-14",
            "2026-10-15", "2026-10-16", "2026-10-17",
        ]

    def test_custom_off_day(self):
        dates = business_dates(date(2026, 10, 12), date(2026, 10, 18), off_day=0)
        assert "2026-10-12" not in dates
        assert "2026-10-18" in dates

    def test_targets_carry_over(self):
        rows, total = build_target_calendar(
            date(2026, 10, 12), date(2026, 10, 18),
            {"2026-10-13": 500.0, "2026-10-18": 999.0, "2026-09-01": 10.0},
        )
        assert len(rows) == 6
        assert rows[1] == {"date": "2026-10-13", "target_amount": 500.0}
        assert all(r["target_amount"] == 0.0 for r in rows if r["date"] != "2026-10-13")
        assert total == 500.0

    def test_empty_range(self):
        rows, total = build_target_calendar(date(2026, 10, 18), date(2026, 10, 18))
        assert rows == []
        assert total == 0.0


def test_export_timestamp():
    assert export_timestamp(datetime(2026, 10, 16, 14, 5)) == "16-10-2026T14-05"
