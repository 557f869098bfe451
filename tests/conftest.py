"""
Shared fixtures for the bill generator test suite.

Environment is pinned before any billsynth module is imported: a throwaway
SQLite database, a temp log file and no Redis.
"""
import asyncio
import os
import random
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="billsynth-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["LOG_FILE"] = os.path.join(_TMP_DIR, "test.log")
os.environ["REDIS_HOST"] = ""

import pytest

from billsynth.core.config import GenerationConfig
from billsynth.services.inventory import InventoryLedger
from billsynth.services.session import GenerationSession


def run(coro):
    return asyncio.run(coro)


def item_row(name, quantity, unit_price, gst_percent=0, cess_percent=0, mrp=0, unit="PCS"):
    return {
        "name": name,
        "quantity": quantity,
        "unit_price": unit_price,
        "gst_percent": gst_percent,
        "cess_percent": cess_percent,
        "mrp": mrp,
        "unit": unit,
    }


@pytest.fixture
def make_session():
    def _make(rows, seed=42, **config):
        ledger = InventoryLedger.from_rows(rows)
        return GenerationSession(ledger, GenerationConfig(**config), rng=random.Random(seed))
    return _make


@pytest.fixture
def grocery_rows():
    """Plenty of cheap, whole-unit stock."""
    return [
        item_row(f"Item {i:02d}", 200, price, gst)
        for i, (price, gst) in enumerate(
            [(12, 5), (18, 5), (25, 12), (32, 12), (40, 18), (48, 18), (55, 5), (64, 12),
             (75, 18), (88, 5), (95, 12), (110, 18), (125, 5), (140, 12), (160, 18), (185, 5)]
        )
    ]


@pytest.fixture
def scenario_rows():
    """A: 100/unit, 10 in stock. B: 500/unit, high MRP so it may be sliced."""
    return [
        item_row("A", 10, 100),
        item_row("B", 1, 500, mrp=12000),
    ]
