# -*- coding: utf-8 -*-
"""
Servicio de estadísticas: períodos, comparación y desgloses.
"""
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from stock_ledger.models import Item, Sale
from stock_ledger.services import StatsService

# Viernes
NOW = datetime(2024, 3, 15, 18, 0, tzinfo=timezone.utc)


def _at(*args):
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def stats(store):
    asado = store.items.insert(Item(name='Asado', quantity=50, cost_price=Decimal('6.00'),
                                    selling_price=Decimal('10.00'), minimum_stock=5, unit='kg'))
    vacio = store.items.insert(Item(name='Vacío', quantity=50, cost_price=Decimal('4.00'),
                                    selling_price=Decimal('5.00'), minimum_stock=5, unit='kg'))
    for item_id, quantity, total, when in (
        (asado, 2, '20.00', _at(2024, 3, 15, 9)),     # hoy
        (vacio, 4, '20.00', _at(2024, 3, 15, 10)),    # hoy
        (asado, 1, '10.00', _at(2024, 3, 14, 12)),    # ayer
        (asado, 3, '30.00', _at(2024, 3, 11, 8)),     # lunes de esta semana
        (vacio, 2, '10.00', _at(2024, 3, 8, 8)),      # semana anterior
        (asado, 5, '50.00', _at(2024, 2, 20, 8)),     # mes anterior
    ):
        store.sales.insert(Sale(item_id=item_id, quantity=quantity,
                                total_value=Decimal(total), sale_date=when))
    return StatsService(store, clock=lambda: NOW)


def test_compute_stats_inclusive_bounds(stats):
    result = stats.compute_stats(_at(2024, 3, 15, 9), _at(2024, 3, 15, 10))
    assert (result.total, result.count) == (Decimal('40.00'), 2)


def test_compute_stats_empty_range(stats):
    result = stats.compute_stats('2023-01-01', '2023-01-31')
    assert (result.total, result.count) == (Decimal('0.00'), 0)


@pytest.mark.parametrize('period, total, count', [
    ('today', 40.0, 2),
    ('week', 80.0, 4),
    ('month', 90.0, 5),
])
def test_period_stats(stats, period, total, count):
    summary = stats.get_period_stats(period)['summary']
    assert (summary['total'], summary['count']) == (total, count)


def test_custom_period_and_daily_average(stats):
    data = stats.get_period_stats('custom', '2024-03-14', '2024-03-15')
    assert data['date_range'] == {'start': '2024-03-14', 'end': '2024-03-15'}
    assert data['summary'] == {'total': 50.0, 'count': 3, 'daily_average': 25.0}


def test_unknown_period_raises(stats):
    with pytest.raises(ValueError):
        stats.get_date_range('year')
    with pytest.raises(ValueError):
        stats.get_date_range('custom')


def test_period_comparison(stats):
    today = stats.get_period_comparison('today')
    assert today['current'] == {'total': 40.0, 'count': 2}
    assert today['previous'] == {'total': 10.0, 'count': 1}
    assert today['change'] == {'total': 300.0, 'count': 100.0}

    month = stats.get_period_comparison('month')
    assert month['previous'] == {'total': 50.0, 'count': 1}
    assert month['change']['total'] == 80.0


def test_daily_breakdown(stats):
    assert stats.get_daily_breakdown('2024-03-14', '2024-03-15') == [
        {'date': '2024-03-14', 'total': 10.0, 'count': 1},
        {'date': '2024-03-15', 'total': 40.0, 'count': 2},
    ]


def test_item_quantity_summary(stats):
    summary = stats.get_item_quantity_summary('2024-03-01', '2024-03-31')
    assert [(row['name'], row['quantity'], row['total']) for row in summary] == [
        ('Asado', 6, 60.0),
        ('Vacío', 6, 30.0),
    ]
    assert len(stats.get_item_quantity_summary('2024-03-01', '2024-03-31', limit=1)) == 1
