# -*- coding: utf-8 -*-
"""
Contrato de los stores (JSON y SQLite): orden, rangos, cascada y transacciones.
"""
import json
import os
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from stock_ledger.models import Item, Sale
from stock_ledger.repositories import (
    ConstraintViolationError,
    IInventoryStore,
    JsonInventoryStore,
    RecordNotFoundError,
    StoreError,
)

BASE = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


def _item(name='Picanha', quantity=10, minimum_stock=3):
    return Item(name=name, quantity=quantity, cost_price=Decimal('7.50'),
                selling_price=Decimal('10.00'), minimum_stock=minimum_stock, unit='kg')


def test_store_implements_interface(store):
    assert isinstance(store, IInventoryStore)


def test_items_sorted_by_name_and_low_stock(store):
    store.items.insert(_item('Vacío', quantity=2))
    store.items.insert(_item('Asado', quantity=20))
    store.items.insert(_item('Matambre', quantity=3))

    assert [i.name for i in store.items.get_all()] == ['Asado', 'Matambre', 'Vacío']
    assert [i.name for i in store.items.get_low_stock()] == ['Matambre', 'Vacío']


def test_item_insert_assigns_ids_and_replaces(store):
    first = store.items.insert(_item('Asado'))
    second = store.items.insert(_item('Vacío'))
    assert second != first

    store.items.insert(_item('Asado premium').with_id(first))
    assert store.items.get_by_id(first).name == 'Asado premium'
    assert len(store.items.get_all()) == 2


def test_deleted_ids_are_never_reissued(store):
    store.items.insert(_item('Asado'))
    newest = store.items.insert(_item('Vacío'))
    store.items.delete(newest)
    assert store.items.insert(_item('Matambre')) > newest

    keeper = store.items.insert(_item('Chorizo'))
    store.sales.insert(Sale(item_id=keeper, quantity=1, total_value=Decimal('10.00'),
                            sale_date=BASE))
    last_sale = store.sales.insert(Sale(item_id=keeper, quantity=2, total_value=Decimal('20.00'),
                                        sale_date=BASE))
    store.sales.delete(last_sale)
    assert store.sales.insert(Sale(item_id=keeper, quantity=1, total_value=Decimal('10.00'),
                                   sale_date=BASE)) > last_sale


def test_item_update_missing_returns_false(store):
    assert store.items.update(_item().with_id(999)) is False
    assert store.items.get_by_id(999) is None


def test_decrement_quantity(store):
    item_id = store.items.insert(_item(quantity=5))
    store.items.decrement_quantity(item_id, 2)
    assert store.items.get_quantity(item_id) == 3

    with pytest.raises(ConstraintViolationError):
        store.items.decrement_quantity(item_id, 4)
    assert store.items.get_quantity(item_id) == 3

    with pytest.raises(RecordNotFoundError):
        store.items.decrement_quantity(999, 1)


def test_sales_newest_first_and_ranges(store):
    item_id = store.items.insert(_item())
    for offset, total in ((0, '10.00'), (1, '20.00'), (2, '30.00')):
        store.sales.insert(Sale(item_id=item_id, quantity=1, total_value=Decimal(total),
                                sale_date=BASE + timedelta(days=offset)))

    assert [s.total_value for s in store.sales.get_all()] == [
        Decimal('30.00'), Decimal('20.00'), Decimal('10.00')
    ]

    start, end = BASE, BASE + timedelta(days=1)
    in_range = store.sales.get_by_date_range(start, end)
    assert [s.total_value for s in in_range] == [Decimal('20.00'), Decimal('10.00')]
    assert store.sales.get_total_in_range(start, end) == Decimal('30.00')
    assert store.sales.count_in_range(start, end) == 2

    empty_start = BASE + timedelta(days=10)
    assert store.sales.get_total_in_range(empty_start, empty_start) is None
    assert store.sales.count_in_range(empty_start, empty_start) == 0


def test_sales_by_item(store):
    a = store.items.insert(_item('Asado'))
    b = store.items.insert(_item('Vacío'))
    store.sales.insert(Sale(item_id=a, quantity=2, total_value=Decimal('20.00'), sale_date=BASE))
    store.sales.insert(Sale(item_id=a, quantity=3, total_value=Decimal('30.00'), sale_date=BASE))

    assert len(store.sales.get_by_item(a)) == 2
    assert store.sales.get_total_quantity_by_item(a) == 5
    assert store.sales.get_total_quantity_by_item(b) is None


def test_sale_round_trip_keeps_utc_timestamp(store):
    item_id = store.items.insert(_item())
    when = datetime(2024, 3, 15, 9, 30, 15, 123456, tzinfo=timezone.utc)
    sale_id = store.sales.insert(Sale(item_id=item_id, quantity=2, total_value=Decimal('20.00'),
                                      sale_date=when))
    assert store.sales.get_by_id(sale_id) == Sale(
        id=sale_id, item_id=item_id, quantity=2, total_value=Decimal('20.00'), sale_date=when
    )


def test_sale_update_and_delete(store):
    item_id = store.items.insert(_item())
    sale_id = store.sales.insert(Sale(item_id=item_id, quantity=1, total_value=Decimal('10.00'),
                                      sale_date=BASE))

    changed = Sale(id=sale_id, item_id=item_id, quantity=2, total_value=Decimal('20.00'),
                   sale_date=BASE)
    assert store.sales.update(changed) is True
    assert store.sales.get_by_id(sale_id).quantity == 2
    assert store.sales.update(Sale(id=999, item_id=item_id, quantity=1,
                                   total_value=Decimal('1.00'), sale_date=BASE)) is False

    assert store.sales.delete(sale_id) is True
    assert store.sales.delete(sale_id) is False


def test_transaction_rolls_back_both_tables(store):
    item_id = store.items.insert(_item(quantity=10))

    with pytest.raises(RuntimeError):
        with store.transaction() as tx:
            tx.sales.insert(Sale(item_id=item_id, quantity=3, total_value=Decimal('30.00'),
                                 sale_date=BASE))
            tx.items.decrement_quantity(item_id, 3)
            raise RuntimeError('falla simulada')

    assert store.items.get_quantity(item_id) == 10
    assert store.sales.get_all() == []


def test_transaction_commits(store):
    item_id = store.items.insert(_item(quantity=10))
    with store.transaction() as tx:
        tx.sales.insert(Sale(item_id=item_id, quantity=3, total_value=Decimal('30.00'),
                             sale_date=BASE))
        tx.items.decrement_quantity(item_id, 3)

    assert store.items.get_quantity(item_id) == 7
    assert len(store.sales.get_all()) == 1


# =========================================================================
# ESPECÍFICOS DE CADA BACKEND
# =========================================================================

def test_sqlite_cascade_deletes_sales(sqlite_store):
    item_id = sqlite_store.items.insert(_item())
    sqlite_store.sales.insert(Sale(item_id=item_id, quantity=1, total_value=Decimal('10.00'),
                                   sale_date=BASE))
    assert sqlite_store.items.delete(item_id) is True
    assert sqlite_store.sales.get_by_item(item_id) == []


def test_sqlite_rejects_sale_for_missing_item(sqlite_store):
    with pytest.raises(ConstraintViolationError):
        sqlite_store.sales.insert(Sale(item_id=42, quantity=1, total_value=Decimal('10.00'),
                                       sale_date=BASE))


def test_sqlite_integer_overflow_is_a_constraint_violation(sqlite_store):
    with pytest.raises(ConstraintViolationError):
        sqlite_store.items.insert(_item(quantity=10 ** 20))
    assert sqlite_store.items.get_all() == []


def test_sqlite_upsert_keeps_existing_sales(sqlite_store):
    item_id = sqlite_store.items.insert(_item())
    sqlite_store.sales.insert(Sale(item_id=item_id, quantity=1, total_value=Decimal('10.00'),
                                   sale_date=BASE))
    sqlite_store.items.insert(_item('Picanha madurada').with_id(item_id))
    assert len(sqlite_store.sales.get_by_item(item_id)) == 1


def test_sqlite_schema_is_reopened_without_migrating_again(tmp_path):
    from stock_ledger.repositories import SqliteInventoryStore
    path = tmp_path / 'inventory.db'
    first = SqliteInventoryStore(path)
    item_id = first.items.insert(_item())
    second = SqliteInventoryStore(path)
    assert second.items.get_by_id(item_id).name == 'Picanha'


def test_json_files_layout(json_store):
    item_id = json_store.items.insert(_item())
    json_store.sales.insert(Sale(item_id=item_id, quantity=1, total_value=Decimal('10.00'),
                                 sale_date=BASE))

    with open(os.path.join(json_store.base_path, 'items.json'), encoding='utf-8') as f:
        items = json.load(f)
    with open(os.path.join(json_store.base_path, 'sales.json'), encoding='utf-8') as f:
        sales = json.load(f)

    assert items[str(item_id)]['selling_price'] == '10.00'
    assert sales[0]['sale_date'] == '2024-03-15T12:00:00.000000Z'


def test_json_corrupt_file_raises_store_error(tmp_path):
    data_dir = tmp_path / 'data'
    data_dir.mkdir()
    (data_dir / 'sales.json').write_text('{no es json', encoding='utf-8')
    store = JsonInventoryStore(str(data_dir))
    with pytest.raises(StoreError):
        store.sales.get_all()


def test_json_lock_timeout(json_store):
    import threading
    from stock_ledger.repositories import BaseRepository

    quick = JsonInventoryStore(json_store.base_path, lock_timeout=0.05)
    acquired = threading.Event()
    release = threading.Event()

    def hold_lock():
        with BaseRepository._file_lock:
            acquired.set()
            release.wait(5)

    holder = threading.Thread(target=hold_lock)
    holder.start()
    acquired.wait(5)
    try:
        with pytest.raises(StoreError):
            with quick.transaction():
                pass
    finally:
        release.set()
        holder.join()


def test_json_id_sequence_survives_reopening(json_store):
    item_id = json_store.items.insert(_item())
    json_store.items.delete(item_id)

    reopened = JsonInventoryStore(json_store.base_path)
    assert reopened.items.insert(_item('Asado')) == item_id + 1
    with open(os.path.join(json_store.base_path, 'items_seq.json'), encoding='utf-8') as f:
        assert json.load(f) == {'last_id': item_id + 1}
