# ==============================================================================
# REGLAS DE VALIDACIÓN
# ==============================================================================
# Funciones puras (sin I/O). Evalúan TODAS las reglas y devuelven la lista
# ordenada de códigos violados, sin cortar en el primero, para que quien
# llama pueda mostrar todos los problemas a la vez.
# ==============================================================================

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional

from stock_ledger.utils.calculations import parse_money, totals_match

# Límites de enteros aceptados (iguales en ambos stores)
MAX_QUANTITY = 2_147_483_647
MAX_RECORD_ID = 2 ** 63 - 1


class ValidationError(str, Enum):
    """Códigos de reglas de negocio violadas."""
    EMPTY_NAME = 'EMPTY_NAME'
    INVALID_QUANTITY = 'INVALID_QUANTITY'
    INVALID_COST_PRICE = 'INVALID_COST_PRICE'
    INVALID_SELLING_PRICE = 'INVALID_SELLING_PRICE'
    SELLING_PRICE_TOO_LOW = 'SELLING_PRICE_TOO_LOW'
    INVALID_MINIMUM_STOCK = 'INVALID_MINIMUM_STOCK'
    EMPTY_UNIT = 'EMPTY_UNIT'
    INVALID_ITEM = 'INVALID_ITEM'
    INSUFFICIENT_STOCK = 'INSUFFICIENT_STOCK'
    INVALID_UNIT_PRICE = 'INVALID_UNIT_PRICE'
    INVALID_TOTAL_VALUE = 'INVALID_TOTAL_VALUE'
    INVALID_CALCULATION = 'INVALID_CALCULATION'
    INVALID_DATE = 'INVALID_DATE'

    @property
    def message(self) -> str:
        return ERROR_MESSAGES[self]


ERROR_MESSAGES = {
    ValidationError.EMPTY_NAME: 'El nombre es obligatorio',
    ValidationError.INVALID_QUANTITY: 'Cantidad inválida',
    ValidationError.INVALID_COST_PRICE: 'Precio de costo inválido',
    ValidationError.INVALID_SELLING_PRICE: 'Precio de venta inválido',
    ValidationError.SELLING_PRICE_TOO_LOW: 'El precio de venta debe ser mayor que el precio de costo',
    ValidationError.INVALID_MINIMUM_STOCK: 'Stock mínimo inválido',
    ValidationError.EMPTY_UNIT: 'La unidad es obligatoria',
    ValidationError.INVALID_ITEM: 'Seleccione un artículo',
    ValidationError.INSUFFICIENT_STOCK: 'Cantidad mayor que el stock disponible',
    ValidationError.INVALID_UNIT_PRICE: 'Precio unitario inválido',
    ValidationError.INVALID_TOTAL_VALUE: 'Valor total inválido',
    ValidationError.INVALID_CALCULATION: 'Error en el cálculo del valor total',
    ValidationError.INVALID_DATE: 'Fecha inválida',
}


@dataclass(frozen=True)
class ValidationResult:
    """Resultado de validar una entrada: ok si no hay errores."""
    errors: List[ValidationError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def messages(self) -> List[str]:
        return [e.message for e in self.errors]

    @property
    def first_message(self) -> str:
        return self.errors[0].message if self.errors else ''


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_count(value: Any, minimum: int) -> bool:
    return _is_int(value) and minimum <= value <= MAX_QUANTITY


def _is_record_id(value: Any) -> bool:
    return _is_int(value) and 0 < value <= MAX_RECORD_ID


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def _collect(errors: List[ValidationError]) -> ValidationResult:
    # Sin duplicados, conservando el orden de evaluación
    return ValidationResult(list(dict.fromkeys(errors)))


# =========================================================================
# ARTÍCULOS
# =========================================================================

def validate_item_input(
    name: Any,
    quantity: Any,
    cost_price: Any,
    selling_price: Any,
    minimum_stock: Any,
    unit: Any
) -> ValidationResult:
    """
    Valida los datos de un artículo.

    Reglas: nombre no vacío; cantidad >= 0; costo > 0; venta > 0;
    venta > costo; stock mínimo >= 0; unidad no vacía. Cantidades hasta
    MAX_QUANTITY y montos hasta MAX_AMOUNT.

    Returns:
        ValidationResult con todos los códigos violados
    """
    errors = []

    if _is_blank(name):
        errors.append(ValidationError.EMPTY_NAME)

    if not _is_count(quantity, 0):
        errors.append(ValidationError.INVALID_QUANTITY)

    cost = parse_money(cost_price)
    selling = parse_money(selling_price)
    if cost is None or cost <= 0:
        errors.append(ValidationError.INVALID_COST_PRICE)
    if selling is None or selling <= 0:
        errors.append(ValidationError.INVALID_SELLING_PRICE)
    if cost is not None and selling is not None and selling <= cost:
        errors.append(ValidationError.SELLING_PRICE_TOO_LOW)

    if not _is_count(minimum_stock, 0):
        errors.append(ValidationError.INVALID_MINIMUM_STOCK)

    if _is_blank(unit):
        errors.append(ValidationError.EMPTY_UNIT)

    return _collect(errors)


# =========================================================================
# VENTAS
# =========================================================================

def validate_sale_input(
    item_id: Any,
    quantity: Any,
    available_quantity: int,
    unit_price: Any,
    total_value: Any
) -> ValidationResult:
    """
    Valida los datos de una venta contra el stock disponible.

    La cantidad inválida (<= 0) y el stock insuficiente son excluyentes:
    solo se compara contra el stock si la cantidad es positiva.

    Returns:
        ValidationResult con todos los códigos violados
    """
    errors = []

    if not _is_record_id(item_id):
        errors.append(ValidationError.INVALID_ITEM)

    quantity_ok = _is_count(quantity, 1)
    if not quantity_ok:
        errors.append(ValidationError.INVALID_QUANTITY)
    elif quantity > available_quantity:
        errors.append(ValidationError.INSUFFICIENT_STOCK)

    price = parse_money(unit_price)
    total = parse_money(total_value)
    if price is None or price <= 0:
        errors.append(ValidationError.INVALID_UNIT_PRICE)
    if total is None or total <= 0:
        errors.append(ValidationError.INVALID_TOTAL_VALUE)

    if _calculation_mismatch(quantity if quantity_ok else None, price, total):
        errors.append(ValidationError.INVALID_CALCULATION)

    return _collect(errors)


def _calculation_mismatch(
    quantity: Optional[int],
    unit_price: Optional[Decimal],
    total_value: Optional[Decimal]
) -> bool:
    # Solo se puede verificar el cálculo con los tres valores interpretables
    if quantity is None or unit_price is None or total_value is None:
        return False
    return not totals_match(quantity, unit_price, total_value)


def validate_sale_shape(item_id: Any, quantity: Any, total_value: Any) -> ValidationResult:
    """
    Reglas de una venta que no dependen del store (artículo, cantidad,
    total). Se usa antes de abrir la transacción y en las correcciones
    administrativas, que no tocan stock.
    """
    errors = []
    if not _is_record_id(item_id):
        errors.append(ValidationError.INVALID_ITEM)
    if not _is_count(quantity, 1):
        errors.append(ValidationError.INVALID_QUANTITY)
    total = parse_money(total_value)
    if total is None or total <= 0:
        errors.append(ValidationError.INVALID_TOTAL_VALUE)
    return _collect(errors)
