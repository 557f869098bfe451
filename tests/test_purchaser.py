import random

import pytest

from billsynth.services.bill_formatter import Bill
from billsynth.services.purchaser import NO_PURCHASER, PurchaserAssigner


def bill(total):
    return Bill(lines=(), total=total, target_amount=total, date="2026-10-12")


@pytest.mark.parametrize("names", [[], ["N/A"], ["", None]])
def test_disabled_pool_marks_not_applicable(names):
    assigner = PurchaserAssigner(names, random.Random(1))
    assert not assigner.enabled
    assigned = assigner.assign_day([bill(100), bill(250)])
    assert [b.purchaser_name for b in assigned] == [NO_PURCHASER, NO_PURCHASER]


def test_single_name_is_reused_even_on_equal_totals():
    assigner = PurchaserAssigner(["Ravi"], random.Random(1))
    assigned = assigner.assign_day([bill(100), bill(100), bill(240)])
    assert {b.purchaser_name for b in assigned} == {"Ravi"}


def test_equal_totals_go_to_different_names():
    assigner = PurchaserAssigner(["Ravi", "Asha"], random.Random(1))
    first, second = assigner.assign_day([bill(100), bill(100.5)])
    assert first.purchaser_name != second.purchaser_name


def test_history_carries_across_days():
    assigner = PurchaserAssigner(["Ravi", "Asha"], random.Random(3))
    [monday] = assigner.assign_day([bill(420)])
    [tuesday] = assigner.assign_day([bill(420)])
    assert monday.purchaser_name != tuesday.purchaser_name


def test_assignment_keeps_bill_contents():
    assigner = PurchaserAssigner(["Ravi", "Asha", "Meena"], random.Random(5))
    original = [bill(110), bill(220), bill(330)]
    assigned = assigner.assign_day(original)
    assert [b.total for b in assigned] == [110, 220, 330]
    assert all(b.purchaser_name in {"Ravi", "Asha", "Meena"} for b in assigned)
    assert all(b.purchaser_name is None for b in original)
