# -*- coding: utf-8 -*-
"""
Fixtures compartidas: stores temporales (JSON y SQLite) y ledger con reloj fijo.
"""
from datetime import datetime, timezone

import pytest

from stock_ledger.app_container import AppContainer
from stock_ledger.performance_logger import configure_profiling, reset_stats
from stock_ledger.repositories import JsonInventoryStore, SqliteInventoryStore
from stock_ledger.services import InventoryLedger

FIXED_NOW = datetime(2024, 3, 15, 12, 0, 0, tzinfo=timezone.utc)


def fixed_clock():
    return FIXED_NOW


@pytest.fixture
def json_store(tmp_path):
    return JsonInventoryStore(str(tmp_path / 'data'), lock_timeout=5)


@pytest.fixture
def sqlite_store(tmp_path):
    return SqliteInventoryStore(tmp_path / 'inventory.db', timeout=5)


@pytest.fixture(params=['json', 'sqlite'])
def store(request, tmp_path):
    """Cada test que lo usa corre contra ambos backends."""
    if request.param == 'json':
        return JsonInventoryStore(str(tmp_path / 'data'), lock_timeout=5)
    return SqliteInventoryStore(tmp_path / 'inventory.db', timeout=5)


@pytest.fixture
def ledger(store):
    return InventoryLedger(store, clock=fixed_clock)


@pytest.fixture
def picanha_id(ledger):
    """Artículo con stock 10 y precio de venta 10.00."""
    return ledger.add_item('Picanha', 10, '7.50', '10.00', 3, 'kg').unwrap()


@pytest.fixture(autouse=True)
def _clean_singletons():
    AppContainer.reset_instance()
    configure_profiling(True, warning_ms=300)
    reset_stats()
    yield
    AppContainer.reset_instance()
