# ==============================================================================
# INTERFACES DE REPOSITORIOS
# ==============================================================================
#
# Este archivo define las interfaces (protocolos) que todos los stores deben
# implementar. Esto permite:
#
# 1. INDEPENDENCIA DE ALMACENAMIENTO
#    - El ledger depende de interfaces, NO de implementaciones concretas
#    - JSON y SQLite implementan el mismo contrato
#
# 2. TESTING
#    - Fácil crear stores falsos o inyectar fallas en medio de una transacción
#
# 3. ATOMICIDAD
#    - IInventoryStore.transaction() entrega repositorios ligados a UNA unidad
#      atómica: o se aplican todas las escrituras o ninguna
#
# ERRORES:
#    Las implementaciones lanzan StoreError / ConstraintViolationError
#    (ver errors.py). Nunca devuelven datos parciales.
#
# ==============================================================================

from contextlib import AbstractContextManager
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Protocol, runtime_checkable

from stock_ledger.models.entities import Item, Sale


@runtime_checkable
class IItemRepository(Protocol):
    """
    Interfaz para el repositorio de artículos.
    """

    def get_all(self) -> List[Item]:
        """Todos los artículos ordenados por nombre."""
        ...

    def get_low_stock(self) -> List[Item]:
        """Artículos con cantidad <= stock mínimo."""
        ...

    def get_by_id(self, item_id: int) -> Optional[Item]:
        """Obtiene un artículo por ID."""
        ...

    def insert(self, item: Item) -> int:
        """Inserta o reemplaza; retorna el ID asignado."""
        ...

    def update(self, item: Item) -> bool:
        """Actualiza un artículo existente. False si no existe."""
        ...

    def delete(self, item_id: int) -> bool:
        """Elimina un artículo. False si no existía."""
        ...

    def decrement_quantity(self, item_id: int, amount: int) -> None:
        """Descuenta `amount` unidades del stock."""
        ...

    def get_quantity(self, item_id: int) -> Optional[int]:
        """Cantidad actual, o None si el artículo no existe."""
        ...


@runtime_checkable
class ISaleRepository(Protocol):
    """
    Interfaz para el repositorio de ventas.
    Los rangos de fechas son inclusivos en ambos extremos.
    """

    def get_all(self) -> List[Sale]:
        """Todas las ventas, más recientes primero."""
        ...

    def get_by_id(self, sale_id: int) -> Optional[Sale]:
        """Obtiene una venta por ID."""
        ...

    def get_by_date_range(self, start: datetime, end: datetime) -> List[Sale]:
        """Ventas dentro del rango."""
        ...

    def get_total_in_range(self, start: datetime, end: datetime) -> Optional[Decimal]:
        """Suma de total_value en el rango (None si no hay ventas)."""
        ...

    def count_in_range(self, start: datetime, end: datetime) -> int:
        """Cantidad de ventas en el rango."""
        ...

    def get_by_item(self, item_id: int) -> List[Sale]:
        """Ventas de un artículo."""
        ...

    def get_total_quantity_by_item(self, item_id: int) -> Optional[int]:
        """Unidades vendidas de un artículo (None si no hay ventas)."""
        ...

    def insert(self, sale: Sale) -> int:
        """Inserta o reemplaza; retorna el ID asignado."""
        ...

    def update(self, sale: Sale) -> bool:
        """Actualiza una venta existente. False si no existe."""
        ...

    def delete(self, sale_id: int) -> bool:
        """Elimina una venta. False si no existía."""
        ...

    def delete_by_item(self, item_id: int) -> int:
        """Elimina las ventas de un artículo; retorna cuántas borró."""
        ...


@runtime_checkable
class ITransaction(Protocol):
    """Repositorios ligados a una transacción abierta."""

    items: IItemRepository
    sales: ISaleRepository


@runtime_checkable
class IInventoryStore(Protocol):
    """
    Punto de entrada al almacenamiento.

    Uso:
        with store.transaction() as tx:
            tx.sales.insert(sale)
            tx.items.decrement_quantity(item_id, qty)

    Si el bloque lanza una excepción, el store queda en el estado previo.
    Los lectores concurrentes nunca ven escrituras sin confirmar.
    """

    items: IItemRepository
    sales: ISaleRepository

    def transaction(self) -> AbstractContextManager:
        ...
