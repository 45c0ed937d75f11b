# -*- coding: utf-8 -*-
"""
Adaptador HTTP: códigos de estado y formato JSON de las respuestas.
"""
import pytest

from stock_ledger.api import create_app
from stock_ledger.app_container import AppContainer
from stock_ledger.config import Settings


@pytest.fixture(params=['json', 'sqlite'])
def client(request, tmp_path):
    settings = Settings(data_dir=str(tmp_path / 'data'), backend=request.param,
                        db_file=str(tmp_path / 'api.db'), lock_timeout=5)
    app = create_app(AppContainer(settings))
    app.config['TESTING'] = True
    with app.test_client() as c:
        yield c


def _create_item(client, **overrides):
    payload = {
        'name': 'Picanha', 'quantity': 10, 'cost_price': '7.50',
        'selling_price': '10.00', 'minimum_stock': 3, 'unit': 'kg',
    }
    payload.update(overrides)
    return client.post('/api/items', json=payload)


def test_create_and_get_item(client):
    r = _create_item(client)
    assert r.status_code == 201
    item_id = r.get_json()['value']

    r = client.get(f'/api/items/{item_id}')
    assert r.status_code == 200
    body = r.get_json()
    assert body['ok'] is True
    assert body['value']['name'] == 'Picanha'
    assert body['value']['selling_price'] == '10.00'


def test_create_item_validation_error(client):
    r = _create_item(client, selling_price='7.00')
    assert r.status_code == 422
    body = r.get_json()
    assert body['ok'] is False
    assert body['code'] == 'VALIDATION_ERROR'
    assert body['errors'] == ['SELLING_PRICE_TOO_LOW']


def test_missing_item_is_404(client):
    r = client.get('/api/items/999')
    assert r.status_code == 404
    assert r.get_json()['code'] == 'NOT_FOUND'


def test_register_sale_flow(client):
    item_id = _create_item(client).get_json()['value']

    r = client.post('/api/sales', json={'item_id': item_id, 'quantity': 3, 'total_value': '30.00'})
    assert r.status_code == 201
    sale_id = r.get_json()['value']

    r = client.post('/api/sales', json={'item_id': item_id, 'quantity': 8, 'total_value': '80.00'})
    assert r.status_code == 409
    assert r.get_json()['code'] == 'INSUFFICIENT_STOCK'

    assert client.get(f'/api/items/{item_id}').get_json()['value']['quantity'] == 7
    assert client.get(f'/api/items/{item_id}/sold').get_json()['value'] == 3
    assert client.get(f'/api/sales/{sale_id}').get_json()['value']['quantity'] == 3
    assert len(client.get('/api/sales').get_json()['value']) == 1
    assert len(client.get(f'/api/items/{item_id}/sales').get_json()['value']) == 1


def test_update_and_delete_item(client):
    item_id = _create_item(client).get_json()['value']
    r = client.put(f'/api/items/{item_id}', json={
        'name': 'Picanha madurada', 'quantity': 4, 'cost_price': '7.50',
        'selling_price': '11.00', 'minimum_stock': 5, 'unit': 'kg',
    })
    assert r.status_code == 200

    low = client.get('/api/items/low-stock').get_json()['value']
    assert [i['name'] for i in low] == ['Picanha madurada']

    r = client.put(f'/api/items/{item_id}', json={'name': 'Sin precio'})
    assert r.status_code == 422

    assert client.delete(f'/api/items/{item_id}').status_code == 200
    assert client.delete(f'/api/items/{item_id}').status_code == 404


def test_correct_and_delete_sale(client):
    item_id = _create_item(client).get_json()['value']
    sale_id = client.post('/api/sales', json={
        'item_id': item_id, 'quantity': 2, 'total_value': '20.00'
    }).get_json()['value']

    r = client.put(f'/api/sales/{sale_id}', json={'quantity': 1, 'total_value': '10.00'})
    assert r.status_code == 200
    assert client.get(f'/api/sales/{sale_id}').get_json()['value']['total_value'] == '10.00'

    assert client.delete(f'/api/sales/{sale_id}').status_code == 200
    assert client.put(f'/api/sales/{sale_id}', json={'quantity': 1}).status_code == 404


def test_stats_endpoints(client):
    item_id = _create_item(client).get_json()['value']
    client.post('/api/sales', json={'item_id': item_id, 'quantity': 1, 'total_value': '10.00'})
    client.post('/api/sales', json={'item_id': item_id, 'quantity': 2, 'total_value': '20.00'})

    r = client.get('/api/stats', query_string={'start': '2000-01-01', 'end': '2100-01-01'})
    assert r.status_code == 200
    assert r.get_json()['value'] == {'total': 30.0, 'count': 2}

    r = client.get('/api/stats', query_string={'start': '2000-01-01', 'end': '2000-01-02'})
    assert r.get_json()['value'] == {'total': 0.0, 'count': 0}

    assert client.get('/api/stats').status_code == 422
    assert client.get('/api/stats/period', query_string={'period': 'today'}).status_code == 200
    assert client.get('/api/stats/period', query_string={'period': 'siglo'}).status_code == 422
    assert client.get('/api/stats/comparison').status_code == 200
    assert client.get('/api/stats/daily').status_code == 422

    r = client.get('/api/stats/items', query_string={'start': '2000-01-01', 'end': '2100-01-01'})
    assert r.get_json()['value'][0]['quantity'] == 3


def test_unknown_route_returns_json(client):
    r = client.get('/api/no-existe')
    assert r.status_code == 404
    assert r.get_json()['ok'] is False


def test_routes_are_timed_by_rule(client):
    from stock_ledger.performance_logger import get_route_stats

    client.get('/api/items/1')
    client.get('/api/items/2')

    stats = get_route_stats()
    assert stats['GET /api/items/<int:item_id>']['calls'] == 2
    assert stats['GET /api/items/<int:item_id>']['errors'] == 0


def test_oversized_amounts_answer_422(client):
    r = _create_item(client, cost_price=1e30, selling_price=2e30)
    assert r.status_code == 422
    assert r.get_json()['errors'] == ['INVALID_COST_PRICE', 'INVALID_SELLING_PRICE']

    item_id = _create_item(client).get_json()['value']
    r = client.post('/api/sales', json={'item_id': item_id, 'quantity': 1, 'total_value': 1e30})
    assert r.status_code == 422
    assert r.get_json()['errors'] == ['INVALID_TOTAL_VALUE']

    r = client.put(f'/api/items/{item_id}', json={
        'name': 'Picanha', 'quantity': 10 ** 20, 'cost_price': '7.50',
        'selling_price': 1e30, 'minimum_stock': 3, 'unit': 'kg',
    })
    assert r.status_code == 422
    assert r.get_json()['errors'] == [
        'INVALID_QUANTITY', 'INVALID_SELLING_PRICE', 'SELLING_PRICE_TOO_LOW'
    ]
