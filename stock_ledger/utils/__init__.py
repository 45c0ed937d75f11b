# ==============================================================================
# UTILIDADES - Cálculos monetarios y manejo de fechas
# ==============================================================================

from .calculations import (
    round_currency,
    round_percentage,
    round_to_scale,
    parse_money,
    calculate_total,
    calculate_profit,
    calculate_profit_margin,
    calculate_markup,
    calculate_growth_rate,
    calculate_daily_average,
    calculate_average,
    calculate_stock_turnover,
)
from .dates import utc_now, to_utc, format_timestamp, parse_timestamp, normalize_range

__all__ = [
    'round_currency',
    'round_percentage',
    'round_to_scale',
    'parse_money',
    'calculate_total',
    'calculate_profit',
    'calculate_profit_margin',
    'calculate_markup',
    'calculate_growth_rate',
    'calculate_daily_average',
    'calculate_average',
    'calculate_stock_turnover',
    'utc_now',
    'to_utc',
    'format_timestamp',
    'parse_timestamp',
    'normalize_range',
]
