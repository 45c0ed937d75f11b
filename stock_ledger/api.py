# ==============================================================================
# API HTTP (Flask) - Adaptador delgado sobre el ledger
# ==============================================================================
# Sin lógica de negocio: parsea JSON / query string, llama al ledger y
# convierte el resultado en respuesta.
#
#   Success              → 200 (201 al crear)
#   ValidationFailure    → 422
#   NotFound             → 404
#   InsufficientStock    → 409
#   InfrastructureFailure→ 500
# ==============================================================================

import logging
from typing import Any, Dict, Optional, Tuple

from flask import Flask, request
from werkzeug.exceptions import HTTPException

from stock_ledger.app_container import AppContainer, get_container
from stock_ledger.models.entities import Item, Sale
from stock_ledger.performance_logger import init_profiling
from stock_ledger.repositories.errors import RecordNotFoundError, StoreError
from stock_ledger.services.results import (
    InfrastructureFailure,
    InsufficientStock,
    NotFound,
    Result,
    ValidationFailure,
)
from stock_ledger.services.stats_service import PERIODS
from stock_ledger.services.validation import ValidationError
from stock_ledger.utils.calculations import ZERO, parse_money
from stock_ledger.utils.dates import parse_timestamp

logger = logging.getLogger(__name__)

STATUS_BY_FAILURE = {
    ValidationFailure: 422,
    NotFound: 404,
    InsufficientStock: 409,
    InfrastructureFailure: 500,
}


def _serialize(value: Any) -> Any:
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_serialize(v) for v in value]
    return value


def _respond(result: Result, success_status: int = 200) -> Tuple[Dict[str, Any], int]:
    if result.ok:
        return {'ok': True, 'value': _serialize(result.value)}, success_status
    return result.to_dict(), STATUS_BY_FAILURE.get(type(result), 500)


def _money(value: Any):
    # Un monto ilegible se envía como 0 para que la validación lo reporte
    parsed = parse_money(value)
    return parsed if parsed is not None else ZERO


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def create_app(container: Optional[AppContainer] = None) -> Flask:
    """
    Crea la app Flask.

    Args:
        container: Contenedor ya configurado (por defecto, el global)
    """
    app = Flask(__name__)
    container = container or get_container()
    app.config['STOCK_CONTAINER'] = container
    init_profiling(app)

    @app.errorhandler(HTTPException)
    def _http_error(error):
        # 404/405/400 de Flask también responden JSON
        return {'ok': False, 'code': 'HTTP_ERROR', 'error': error.description}, error.code

    def ledger():
        return container.ledger

    # =========================================================================
    # ARTÍCULOS
    # =========================================================================

    @app.route('/api/items', methods=['GET'])
    def api_list_items():
        return _respond(ledger().list_items())

    @app.route('/api/items/low-stock', methods=['GET'])
    def api_low_stock_items():
        return _respond(ledger().list_low_stock_items())

    @app.route('/api/items', methods=['POST'])
    def api_add_item():
        data = _json_body()
        result = ledger().add_item(
            name=data.get('name'),
            quantity=data.get('quantity'),
            cost_price=data.get('cost_price'),
            selling_price=data.get('selling_price'),
            minimum_stock=data.get('minimum_stock'),
            unit=data.get('unit'),
        )
        return _respond(result, 201)

    @app.route('/api/items/<int:item_id>', methods=['GET'])
    def api_get_item(item_id):
        return _respond(ledger().get_item_by_id(item_id))

    @app.route('/api/items/<int:item_id>', methods=['PUT'])
    def api_update_item(item_id):
        data = _json_body()
        item = Item(
            id=item_id,
            name=data.get('name') or '',
            quantity=data.get('quantity'),
            cost_price=_money(data.get('cost_price')),
            selling_price=_money(data.get('selling_price')),
            minimum_stock=data.get('minimum_stock'),
            unit=data.get('unit') or '',
        )
        return _respond(ledger().update_item(item))

    @app.route('/api/items/<int:item_id>', methods=['DELETE'])
    def api_delete_item(item_id):
        return _respond(ledger().delete_item(item_id))

    @app.route('/api/items/<int:item_id>/sales', methods=['GET'])
    def api_item_sales(item_id):
        return _respond(ledger().list_sales_for_item(item_id))

    @app.route('/api/items/<int:item_id>/sold', methods=['GET'])
    def api_item_sold(item_id):
        return _respond(ledger().get_total_quantity_sold(item_id))

    # =========================================================================
    # VENTAS
    # =========================================================================

    @app.route('/api/sales', methods=['POST'])
    def api_register_sale():
        data = _json_body()
        result = ledger().register_sale(
            item_id=data.get('item_id'),
            quantity=data.get('quantity'),
            total_value=data.get('total_value'),
        )
        return _respond(result, 201)

    @app.route('/api/sales', methods=['GET'])
    def api_list_sales():
        start = request.args.get('start')
        end = request.args.get('end')
        if start or end:
            if not (start and end):
                return ValidationFailure([ValidationError.INVALID_DATE]).to_dict(), 422
            return _respond(ledger().list_sales_in_range(start, end))
        return _respond(ledger().list_sales())

    @app.route('/api/sales/<int:sale_id>', methods=['GET'])
    def api_get_sale(sale_id):
        return _respond(ledger().get_sale_by_id(sale_id))

    @app.route('/api/sales/<int:sale_id>', methods=['PUT'])
    def api_update_sale(sale_id):
        data = _json_body()
        current = ledger().get_sale_by_id(sale_id)
        if not current.ok:
            return _respond(current)
        try:
            sale_date = parse_timestamp(data['sale_date']) if data.get('sale_date') else current.value.sale_date
        except (TypeError, ValueError):
            return ValidationFailure([ValidationError.INVALID_DATE]).to_dict(), 422
        sale = Sale(
            id=sale_id,
            item_id=data.get('item_id', current.value.item_id),
            quantity=data.get('quantity', current.value.quantity),
            total_value=_money(data.get('total_value', current.value.total_value)),
            sale_date=sale_date,
        )
        return _respond(ledger().update_sale(sale))

    @app.route('/api/sales/<int:sale_id>', methods=['DELETE'])
    def api_delete_sale(sale_id):
        return _respond(ledger().delete_sale(sale_id))

    # =========================================================================
    # ESTADÍSTICAS
    # =========================================================================

    @app.route('/api/stats', methods=['GET'])
    def api_sales_stats():
        start = request.args.get('start')
        end = request.args.get('end')
        if not (start and end):
            return ValidationFailure([ValidationError.INVALID_DATE]).to_dict(), 422
        return _respond(ledger().get_sales_stats(start, end))

    def _stats_call(fn, *args):
        try:
            return {'ok': True, 'value': fn(*args)}, 200
        except (TypeError, ValueError):
            return ValidationFailure([ValidationError.INVALID_DATE]).to_dict(), 422
        except (StoreError, RecordNotFoundError) as e:
            logger.error('Falla del store en estadísticas: %s', e)
            return InfrastructureFailure(str(e)).to_dict(), 500

    @app.route('/api/stats/period', methods=['GET'])
    def api_period_stats():
        period = request.args.get('period', 'today')
        if period not in PERIODS:
            return {'ok': False, 'code': 'VALIDATION_ERROR', 'error': f'Período inválido: {period}'}, 422
        return _stats_call(
            container.stats_service.get_period_stats,
            period, request.args.get('start'), request.args.get('end')
        )

    @app.route('/api/stats/comparison', methods=['GET'])
    def api_period_comparison():
        period = request.args.get('period', 'month')
        if period not in ('today', 'week', 'month'):
            return {'ok': False, 'code': 'VALIDATION_ERROR', 'error': f'Período inválido: {period}'}, 422
        return _stats_call(container.stats_service.get_period_comparison, period)

    @app.route('/api/stats/daily', methods=['GET'])
    def api_daily_breakdown():
        return _stats_call(
            container.stats_service.get_daily_breakdown,
            request.args.get('start'), request.args.get('end')
        )

    @app.route('/api/stats/items', methods=['GET'])
    def api_item_summary():
        return _stats_call(
            container.stats_service.get_item_quantity_summary,
            request.args.get('start'), request.args.get('end')
        )

    return app
