# ==============================================================================
# ENTIDADES DEL DOMINIO - Definiciones de dataclasses
# ==============================================================================
# Registros planos, sin anotaciones de persistencia. Los repositorios
# (JSON o SQLite) se encargan de convertirlos con to_dict/from_dict.
# ==============================================================================

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from stock_ledger.utils.calculations import (
    ZERO,
    calculate_markup,
    calculate_profit,
    calculate_profit_margin,
    round_currency,
    to_decimal,
)
from stock_ledger.utils.dates import format_timestamp, parse_timestamp, to_utc, utc_now


# ==============================================================================
# ITEM
# ==============================================================================

@dataclass
class Item:
    """
    Artículo vendible (SKU).

    Attributes:
        name: Nombre del artículo
        quantity: Stock disponible (nunca negativo)
        cost_price: Precio de costo (> 0)
        selling_price: Precio de venta (> cost_price)
        minimum_stock: Umbral de reposición
        unit: Unidad de venta ("kg", "un", ...)
        id: Asignado por el store al crear; None si aún no existe
    """
    name: str
    quantity: int
    cost_price: Decimal
    selling_price: Decimal
    minimum_stock: int
    unit: str
    id: Optional[int] = None

    def __post_init__(self):
        self.cost_price = round_currency(self.cost_price)
        self.selling_price = round_currency(self.selling_price)

    @property
    def is_low_stock(self) -> bool:
        """True si el stock está en o bajo el mínimo."""
        return self.quantity <= self.minimum_stock

    @property
    def unit_profit(self) -> Decimal:
        return calculate_profit(self.selling_price, self.cost_price)

    @property
    def profit_margin(self) -> Decimal:
        return calculate_profit_margin(self.selling_price, self.cost_price)

    @property
    def markup(self) -> Decimal:
        return calculate_markup(self.selling_price, self.cost_price)

    def with_id(self, item_id: int) -> 'Item':
        return replace(self, id=item_id)

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia (montos como string)."""
        return {
            'id': self.id,
            'name': self.name,
            'quantity': self.quantity,
            'cost_price': str(self.cost_price),
            'selling_price': str(self.selling_price),
            'minimum_stock': self.minimum_stock,
            'unit': self.unit,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Item':
        """Crea instancia desde diccionario."""
        return cls(
            id=data.get('id'),
            name=data.get('name', ''),
            quantity=int(data.get('quantity', 0)),
            cost_price=to_decimal(data.get('cost_price', 0)),
            selling_price=to_decimal(data.get('selling_price', 0)),
            minimum_stock=int(data.get('minimum_stock', 0)),
            unit=data.get('unit', ''),
        )


# ==============================================================================
# VENTA
# ==============================================================================

@dataclass
class Sale:
    """
    Registro inmutable de una venta completada.

    Attributes:
        item_id: Artículo vendido (FK, borrado en cascada)
        quantity: Unidades vendidas (> 0)
        total_value: Monto cobrado (> 0)
        sale_date: Momento de la venta (UTC)
        id: Asignado por el store al crear
    """
    item_id: int
    quantity: int
    total_value: Decimal
    sale_date: datetime = field(default_factory=utc_now)
    id: Optional[int] = None

    def __post_init__(self):
        self.total_value = round_currency(self.total_value)
        self.sale_date = to_utc(self.sale_date)

    @property
    def unit_price(self) -> Decimal:
        """Precio unitario efectivo de la venta."""
        if not self.quantity:
            return ZERO
        return round_currency(self.total_value / self.quantity)

    def with_id(self, sale_id: int) -> 'Sale':
        return replace(self, id=sale_id)

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia."""
        return {
            'id': self.id,
            'item_id': self.item_id,
            'quantity': self.quantity,
            'total_value': str(self.total_value),
            'sale_date': format_timestamp(self.sale_date),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Sale':
        """Crea instancia desde diccionario."""
        sale_date = data.get('sale_date')
        if isinstance(sale_date, str):
            sale_date = parse_timestamp(sale_date)
        return cls(
            id=data.get('id'),
            item_id=int(data.get('item_id', 0)),
            quantity=int(data.get('quantity', 0)),
            total_value=to_decimal(data.get('total_value', 0)),
            sale_date=sale_date or utc_now(),
        )


# ==============================================================================
# ESTADÍSTICAS (no persistidas)
# ==============================================================================

@dataclass(frozen=True)
class SalesStats:
    """Suma y cantidad de ventas dentro de un rango de fechas."""
    total: Decimal = ZERO
    count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {'total': float(self.total), 'count': self.count}
