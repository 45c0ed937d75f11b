# ==============================================================================
# SERVICIO DE ESTADÍSTICAS DE VENTAS
# ==============================================================================
# Agregados de solo lectura sobre el store de ventas.
#
# REGLA PRINCIPAL: los rangos son inclusivos en ambos extremos y en UTC.
# - Sin ventas en el rango → total 0.00 y cantidad 0 (nunca None)
# - date como extremo → día completo
# ==============================================================================

import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Tuple

from stock_ledger.models.entities import SalesStats
from stock_ledger.performance_logger import profile_function
from stock_ledger.repositories.interfaces import IInventoryStore
from stock_ledger.utils.calculations import (
    ZERO,
    calculate_daily_average,
    calculate_growth_rate,
    round_currency,
)
from stock_ledger.utils.dates import (
    DateLike,
    days_between,
    normalize_range,
    start_of_day,
    start_of_month,
    start_of_previous_month,
    start_of_week,
    utc_now,
)

logger = logging.getLogger(__name__)

PERIODS = ('today', 'week', 'month', 'custom')


class StatsService:
    """
    Servicio para cálculo de estadísticas de ventas.

    Responsabilidades:
    - Total y cantidad de ventas en un rango
    - Rangos por período (hoy / semana / mes / custom)
    - Comparación contra el período anterior
    - Desglose diario y cantidades vendidas por artículo

    No escribe nunca en el store.
    """

    def __init__(self, store: IInventoryStore, clock: Callable[[], datetime] = utc_now):
        """
        Args:
            store: Store de inventario (JSON o SQLite)
            clock: Función que retorna la hora actual (inyectable para tests)
        """
        self._store = store
        self._clock = clock

    # =========================================================================
    # AGREGADO BÁSICO
    # =========================================================================

    @profile_function(name='Calcular estadísticas de ventas')
    def compute_stats(self, start: DateLike, end: DateLike) -> SalesStats:
        """
        Total y cantidad de ventas con sale_date en [start, end].

        Raises:
            StoreError: Si el store falla
        """
        start, end = normalize_range(start, end)
        total = self._store.sales.get_total_in_range(start, end)
        count = self._store.sales.count_in_range(start, end)
        logger.debug('Estadísticas %s → %s: total=%s count=%s', start, end, total, count)
        return SalesStats(
            total=total if total is not None else round_currency(ZERO),
            count=count,
        )

    # =========================================================================
    # PERÍODOS
    # =========================================================================

    def get_date_range(
        self,
        period: str,
        custom_start: Optional[DateLike] = None,
        custom_end: Optional[DateLike] = None
    ) -> Tuple[datetime, datetime]:
        """
        Calcula el rango de fechas según el período solicitado.

        Args:
            period: 'today', 'week', 'month', 'custom'
            custom_start: Inicio para período custom (date, datetime o 'YYYY-MM-DD')
            custom_end: Fin para período custom

        Returns:
            Tupla (inicio, fin) en UTC

        Raises:
            ValueError: Si el período no existe o el custom está incompleto
        """
        now = self._clock()

        if period == 'today':
            return start_of_day(now), now
        if period == 'week':
            return start_of_week(now), now
        if period == 'month':
            return start_of_month(now), now
        if period == 'custom':
            if custom_start is None or custom_end is None:
                raise ValueError('El período custom requiere inicio y fin')
            return normalize_range(custom_start, custom_end)
        raise ValueError(f'Período desconocido: {period}')

    def _previous_range(self, period: str) -> Tuple[datetime, datetime]:
        now = self._clock()
        if period == 'month':
            current_start = start_of_month(now)
            prev_start = start_of_previous_month(now)
        elif period == 'week':
            current_start = start_of_week(now)
            prev_start = current_start - timedelta(days=7)
        elif period == 'today':
            current_start = start_of_day(now)
            prev_start = current_start - timedelta(days=1)
        else:
            raise ValueError(f'Período sin comparación: {period}')
        return prev_start, current_start - timedelta(microseconds=1)

    def get_period_stats(
        self,
        period: str = 'today',
        custom_start: Optional[DateLike] = None,
        custom_end: Optional[DateLike] = None
    ) -> Dict[str, Any]:
        """
        Resumen de un período.

        Returns:
            {
                'period': str,
                'date_range': {'start': str, 'end': str},
                'summary': {'total': float, 'count': int, 'daily_average': float}
            }
        """
        start, end = self.get_date_range(period, custom_start, custom_end)
        stats = self.compute_stats(start, end)
        daily_average = calculate_daily_average(stats.total, days_between(start, end))
        return {
            'period': period,
            'date_range': {
                'start': start.strftime('%Y-%m-%d'),
                'end': end.strftime('%Y-%m-%d'),
            },
            'summary': {
                'total': float(stats.total),
                'count': stats.count,
                'daily_average': float(daily_average),
            },
        }

    def get_period_comparison(self, current_period: str = 'month') -> Dict[str, Any]:
        """
        Compara el período actual con el anterior completo.

        Returns:
            {
                'current': {'total': float, 'count': int},
                'previous': {'total': float, 'count': int},
                'change': {'total': float, 'count': float}   # porcentajes
            }
        """
        current = self.compute_stats(*self.get_date_range(current_period))
        previous = self.compute_stats(*self._previous_range(current_period))

        return {
            'period': current_period,
            'current': current.to_dict(),
            'previous': previous.to_dict(),
            'change': {
                'total': float(calculate_growth_rate(current.total, previous.total)),
                'count': float(calculate_growth_rate(current.count, previous.count)),
            },
        }

    # =========================================================================
    # DESGLOSES
    # =========================================================================

    def get_daily_breakdown(self, start: DateLike, end: DateLike) -> List[Dict[str, Any]]:
        """
        Ventas agrupadas por día (UTC), ordenadas por fecha.

        Returns:
            [{'date': 'YYYY-MM-DD', 'total': float, 'count': int}, ...]
        """
        start, end = normalize_range(start, end)
        daily: Dict[str, Dict[str, Any]] = defaultdict(lambda: {'total': ZERO, 'count': 0})

        for sale in self._store.sales.get_by_date_range(start, end):
            day_key = sale.sale_date.strftime('%Y-%m-%d')
            daily[day_key]['total'] += sale.total_value
            daily[day_key]['count'] += 1

        return [
            {
                'date': day,
                'total': float(round_currency(data['total'])),
                'count': data['count'],
            }
            for day, data in sorted(daily.items())
        ]

    def get_item_quantity_summary(
        self,
        start: DateLike,
        end: DateLike,
        limit: Optional[int] = 10
    ) -> List[Dict[str, Any]]:
        """
        Unidades e ingresos por artículo en el rango, de mayor a menor.

        Los artículos que ya no existen no aparecen (sus ventas se borran en
        cascada).

        Returns:
            [{'item_id': int, 'name': str, 'quantity': int, 'total': float}, ...]
        """
        start, end = normalize_range(start, end)
        per_item: Dict[int, Dict[str, Any]] = defaultdict(
            lambda: {'quantity': 0, 'total': ZERO}
        )
        for sale in self._store.sales.get_by_date_range(start, end):
            per_item[sale.item_id]['quantity'] += sale.quantity
            per_item[sale.item_id]['total'] += sale.total_value

        names = {item.id: item.name for item in self._store.items.get_all()}
        summary = [
            {
                'item_id': item_id,
                'name': names.get(item_id, ''),
                'quantity': data['quantity'],
                'total': float(round_currency(data['total'])),
            }
            for item_id, data in per_item.items()
            if item_id in names
        ]
        summary.sort(key=lambda x: (-x['quantity'], x['name']))
        return summary[:limit] if limit else summary

