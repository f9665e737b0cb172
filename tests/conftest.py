from datetime import datetime
from decimal import Decimal

import pytest

from pos_terminal import config
from pos_terminal.models import Product, UserRole
from pos_terminal.persistence import SqliteStore
from pos_terminal.session import PinAuthorizer, TerminalContext

ACCESS_PIN = "1234"
SUPERVISOR_PIN = "9876"


@pytest.fixture(autouse=True)
def debug_log_in_tmp(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "DEBUG_LOG_PATH", str(tmp_path / "debug.log"))


@pytest.fixture
def store(tmp_path):
    store = SqliteStore(tmp_path / "pos.db")
    store.bootstrap_schema()
    return store


@pytest.fixture
def receipts():
    return []


def start_context(store, receipts, role=UserRole.STAFF, cashier="Budi Santoso"):
    result = TerminalContext.start(
        cashier,
        store,
        receipts.append,
        role=role,
        now=datetime(2026, 10, 19, 8, 30),
        access_authorizer=PinAuthorizer(ACCESS_PIN),
        auth_authorizer=PinAuthorizer(SUPERVISOR_PIN),
    )
    assert result.ok
    return result.value


@pytest.fixture
def context(store, receipts):
    return start_context(store, receipts)


@pytest.fixture
def product_a():
    return Product(sku="A", name="Indomie Goreng", price=Decimal("1000"))


@pytest.fixture
def product_b():
    return Product(sku="B", name="Teh Botol", price=Decimal("500"))


@pytest.fixture
def product_c():
    return Product(sku="C", name="Aqua 600ml", price=Decimal("4000"))


@pytest.fixture
def make_context(store, receipts):
    def _make(role=UserRole.STAFF, cashier="Budi Santoso"):
        return start_context(store, receipts, role=role, cashier=cashier)

    return _make
