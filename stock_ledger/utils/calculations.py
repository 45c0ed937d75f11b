# ==============================================================================
# CÁLCULOS MONETARIOS Y PORCENTUALES
# ==============================================================================
# Redondeo de moneda (2 decimales) y porcentajes (1 decimal) con
# ROUND_HALF_EVEN sobre Decimal: 2.345 → 2.34, 2.355 → 2.36.
#
# Cualquier razón con denominador cero devuelve 0 (nunca error ni infinito).
# ==============================================================================

from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN
from typing import Any, Iterable, Optional, Union

Number = Union[int, float, Decimal, str]

CURRENCY_SCALE = 2
PERCENTAGE_SCALE = 1
HUNDRED = Decimal('100')
ZERO = Decimal('0')

# Tolerancia para comparar total vs cantidad × precio unitario
CALCULATION_TOLERANCE = Decimal('0.01')

# Mayor monto aceptado en precios y totales
MAX_AMOUNT = Decimal('999999999999.99')


def to_decimal(value: Number) -> Decimal:
    """
    Convierte un valor numérico a Decimal.

    Los float pasan por str() para respetar su representación decimal
    (Decimal(2.355) sería 2.35499999...).

    Raises:
        InvalidOperation: Si el valor no es numérico
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise InvalidOperation(f'Valor no numérico: {value!r}')
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(str(value).strip())


def parse_money(value: Any) -> Optional[Decimal]:
    """
    Intenta interpretar un valor como monto.

    Returns:
        Decimal redondeado a moneda, o None si no es un número finito
        o su valor absoluto supera MAX_AMOUNT
    """
    if value is None:
        return None
    try:
        amount = to_decimal(value)
        if not amount.is_finite() or abs(amount) > MAX_AMOUNT:
            return None
        return round_currency(amount)
    except (InvalidOperation, ValueError, TypeError):
        return None


def round_to_scale(value: Number, scale: int) -> Decimal:
    """Redondea half-even a `scale` decimales."""
    exponent = Decimal(1).scaleb(-scale)
    return to_decimal(value).quantize(exponent, rounding=ROUND_HALF_EVEN)


def round_currency(value: Number) -> Decimal:
    return round_to_scale(value, CURRENCY_SCALE)


def round_percentage(value: Number) -> Decimal:
    return round_to_scale(value, PERCENTAGE_SCALE)


def _ratio(numerator: Decimal, denominator: Decimal) -> Decimal:
    if denominator == 0:
        return ZERO
    return numerator / denominator


# =========================================================================
# MONEDA
# =========================================================================

def calculate_total(quantity: Number, unit_price: Number) -> Decimal:
    """Total de una línea: cantidad × precio unitario."""
    return round_currency(to_decimal(quantity) * to_decimal(unit_price))


def calculate_profit(selling_price: Number, cost_price: Number) -> Decimal:
    """Ganancia unitaria."""
    return round_currency(to_decimal(selling_price) - to_decimal(cost_price))


def totals_match(quantity: Number, unit_price: Number, total_value: Number) -> bool:
    """Verifica que el total coincida con cantidad × precio (tolerancia 0.01)."""
    expected = to_decimal(quantity) * to_decimal(unit_price)
    return abs(to_decimal(total_value) - expected) <= CALCULATION_TOLERANCE


# =========================================================================
# PORCENTAJES
# =========================================================================

def calculate_profit_margin(selling_price: Number, cost_price: Number) -> Decimal:
    """
    Margen sobre el precio de venta: (venta - costo) / venta × 100.
    """
    selling = to_decimal(selling_price)
    profit = selling - to_decimal(cost_price)
    return round_percentage(_ratio(profit, selling) * HUNDRED)


def calculate_markup(selling_price: Number, cost_price: Number) -> Decimal:
    """
    Recargo sobre el costo: (venta - costo) / costo × 100.
    """
    cost = to_decimal(cost_price)
    profit = to_decimal(selling_price) - cost
    return round_percentage(_ratio(profit, cost) * HUNDRED)


def calculate_growth_rate(current_value: Number, previous_value: Number) -> Decimal:
    """Variación porcentual entre dos períodos. Período anterior en 0 → 0."""
    previous = to_decimal(previous_value)
    change = to_decimal(current_value) - previous
    return round_percentage(_ratio(change, previous) * HUNDRED)


# =========================================================================
# PROMEDIOS Y ROTACIÓN
# =========================================================================

def calculate_daily_average(total_sales: Number, number_of_days: int) -> Decimal:
    return round_currency(_ratio(to_decimal(total_sales), Decimal(number_of_days)))


def calculate_average(values: Iterable[Number]) -> Decimal:
    values = [to_decimal(v) for v in values]
    return round_currency(_ratio(sum(values, ZERO), Decimal(len(values))))


def calculate_stock_turnover(total_sold: Number, average_inventory: Number) -> Decimal:
    """Rotación de inventario (1 decimal)."""
    return round_to_scale(
        _ratio(to_decimal(total_sold), to_decimal(average_inventory)), 1
    )
