# -*- coding: utf-8 -*-
"""
Entidades: derivados de Item y serialización de Sale.
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from stock_ledger.models import Item, Sale, SalesStats


def test_item_derived_values():
    item = Item(name='Picanha', quantity=3, cost_price=9, selling_price=12.005,
                minimum_stock=3, unit='kg')
    assert item.selling_price == Decimal('12.00')
    assert item.is_low_stock
    assert item.unit_profit == Decimal('3.00')
    assert item.profit_margin == Decimal('25.0')
    assert item.markup == Decimal('33.3')


def test_item_dict_round_trip():
    item = Item(name='Vacío', quantity=8, cost_price=Decimal('4.10'),
                selling_price=Decimal('6.20'), minimum_stock=2, unit='kg', id=4)
    data = item.to_dict()
    assert data['cost_price'] == '4.10'
    assert Item.from_dict(data) == item


def test_sale_normalizes_date_to_utc():
    local = datetime(2024, 3, 15, 9, 0, tzinfo=timezone(timedelta(hours=-3)))
    sale = Sale(item_id=1, quantity=3, total_value=Decimal('30.00'), sale_date=local)
    assert sale.sale_date == datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)
    assert sale.unit_price == Decimal('10.00')
    assert sale.to_dict()['sale_date'] == '2024-03-15T12:00:00.000000Z'
    assert Sale.from_dict(sale.with_id(7).to_dict()).id == 7


def test_sales_stats_defaults():
    assert SalesStats().to_dict() == {'total': 0.0, 'count': 0}
