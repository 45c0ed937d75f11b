# ==============================================================================
# SERVICIO DE LEDGER DE INVENTARIO
# ==============================================================================
# Único punto que modifica artículos y ventas. Valida, abre transacciones en
# el store y traduce cualquier falla a un resultado tipado (ver results.py).
#
# REGISTRO DE VENTA (atómico):
#   1. Leer artículo            → NotFound si no existe
#   2. Comparar stock           → InsufficientStock (nada se modifica)
#   3. Validar total            → ValidationFailure
#   4. Insertar venta + descontar stock en LA MISMA transacción
#   5. Falla del store          → rollback + InfrastructureFailure
#
# El ledger nunca reintenta operaciones de escritura.
# ==============================================================================

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional, Union

from stock_ledger.models.entities import Item, Sale, SalesStats
from stock_ledger.performance_logger import profile_function
from stock_ledger.repositories.errors import RecordNotFoundError, StoreError
from stock_ledger.repositories.interfaces import IInventoryStore
from stock_ledger.services.results import (
    InfrastructureFailure,
    InsufficientStock,
    NotFound,
    Result,
    Success,
    ValidationFailure,
)
from stock_ledger.services.stats_service import StatsService
from stock_ledger.services.validation import (
    MAX_RECORD_ID,
    ValidationError,
    validate_item_input,
    validate_sale_input,
    validate_sale_shape,
)
from stock_ledger.utils.calculations import parse_money
from stock_ledger.utils.dates import DateLike, normalize_range, utc_now

logger = logging.getLogger(__name__)

# Errores del store que el ledger convierte en InfrastructureFailure
STORE_ERRORS = (StoreError, RecordNotFoundError)


def _in_id_range(record_id) -> bool:
    # Un ID fuera de rango no puede existir en ningún store
    if isinstance(record_id, bool) or not isinstance(record_id, int):
        return False
    return 0 < record_id <= MAX_RECORD_ID


class InventoryLedger:
    """
    Servicio coordinador de stock y ventas.

    Responsabilidades:
    - CRUD validado de artículos
    - Registro atómico de ventas (sin sobreventa, sin huérfanos)
    - Corrección administrativa de ventas (sin tocar stock)
    - Consultas y estadísticas
    """

    def __init__(
        self,
        store: IInventoryStore,
        stats_service: Optional[StatsService] = None,
        clock: Callable[[], datetime] = utc_now,
        enforce_total_check: bool = True
    ):
        """
        Args:
            store: Store de inventario (JSON o SQLite)
            stats_service: Agregador de estadísticas (se crea si no se pasa)
            clock: Reloj para la fecha de las ventas
            enforce_total_check: Rechazar ventas cuyo total no coincide con
                                 cantidad × precio de venta (tolerancia 0.01)
        """
        self._store = store
        self._clock = clock
        self.stats_service = stats_service or StatsService(store, clock=clock)
        self.enforce_total_check = enforce_total_check

    def _infrastructure(self, operation: str, error: Exception) -> InfrastructureFailure:
        logger.error('Falla del store en %s: %s', operation, error)
        return InfrastructureFailure(str(error))

    # =========================================================================
    # ARTÍCULOS
    # =========================================================================

    @profile_function(name='Crear artículo')
    def add_item(
        self,
        name: str,
        quantity: int,
        cost_price,
        selling_price,
        minimum_stock: int,
        unit: str
    ) -> Result:
        """
        Crea un artículo.

        Returns:
            Success(id) o ValidationFailure con todas las reglas violadas
        """
        validation = validate_item_input(name, quantity, cost_price, selling_price, minimum_stock, unit)
        if not validation.ok:
            logger.info('Artículo rechazado: %s', ', '.join(e.value for e in validation.errors))
            return ValidationFailure(validation.errors)

        item = Item(
            name=name.strip(),
            quantity=quantity,
            cost_price=parse_money(cost_price),
            selling_price=parse_money(selling_price),
            minimum_stock=minimum_stock,
            unit=unit.strip(),
        )
        try:
            with self._store.transaction() as tx:
                item_id = tx.items.insert(item)
        except STORE_ERRORS as e:
            return self._infrastructure('add_item', e)

        logger.info('Artículo %s creado: %s (stock %s)', item_id, item.name, item.quantity)
        return Success(item_id)

    @profile_function(name='Editar artículo')
    def update_item(self, item: Item) -> Result:
        """
        Reemplaza todos los datos de un artículo existente.

        Returns:
            Success(id), ValidationFailure o NotFound
        """
        validation = validate_item_input(
            item.name, item.quantity, item.cost_price, item.selling_price,
            item.minimum_stock, item.unit
        )
        if not validation.ok:
            return ValidationFailure(validation.errors)
        if not _in_id_range(item.id):
            return NotFound('item', item.id)
        item = replace(item, name=item.name.strip(), unit=item.unit.strip())

        try:
            with self._store.transaction() as tx:
                updated = tx.items.update(item)
        except STORE_ERRORS as e:
            return self._infrastructure('update_item', e)

        if not updated:
            return NotFound('item', item.id)
        logger.info('Artículo %s actualizado', item.id)
        return Success(item.id)

    @profile_function(name='Eliminar artículo')
    def delete_item(self, item: Union[Item, int]) -> Result:
        """
        Elimina un artículo y, en la misma transacción, todas sus ventas.

        Returns:
            Success(cantidad de ventas eliminadas) o NotFound
        """
        item_id = item.id if isinstance(item, Item) else item
        try:
            with self._store.transaction() as tx:
                if not _in_id_range(item_id) or tx.items.get_by_id(item_id) is None:
                    return NotFound('item', item_id)
                removed_sales = tx.sales.delete_by_item(item_id)
                tx.items.delete(item_id)
        except STORE_ERRORS as e:
            return self._infrastructure('delete_item', e)

        logger.info('Artículo %s eliminado junto con %s venta(s)', item_id, removed_sales)
        return Success(removed_sales)

    def get_item_by_id(self, item_id: int) -> Result:
        if not _in_id_range(item_id):
            return NotFound('item', item_id)
        try:
            item = self._store.items.get_by_id(item_id)
        except STORE_ERRORS as e:
            return self._infrastructure('get_item_by_id', e)
        if item is None:
            return NotFound('item', item_id)
        return Success(item)

    def list_items(self) -> Result:
        """Todos los artículos ordenados por nombre."""
        try:
            return Success(self._store.items.get_all())
        except STORE_ERRORS as e:
            return self._infrastructure('list_items', e)

    def list_low_stock_items(self) -> Result:
        try:
            return Success(self._store.items.get_low_stock())
        except STORE_ERRORS as e:
            return self._infrastructure('list_low_stock_items', e)

    # =========================================================================
    # VENTAS
    # =========================================================================

    @profile_function(name='Registrar venta')
    def register_sale(self, item_id: int, quantity: int, total_value) -> Result:
        """
        Registra una venta descontando stock de forma atómica.

        Args:
            item_id: Artículo vendido
            quantity: Unidades (> 0)
            total_value: Monto total cobrado

        Returns:
            Success(sale_id), NotFound, InsufficientStock, ValidationFailure
            o InfrastructureFailure. En cualquier falla el stock y las
            ventas quedan como estaban.
        """
        shape = validate_sale_shape(item_id, quantity, total_value)
        if not shape.ok:
            return ValidationFailure(shape.errors)

        try:
            with self._store.transaction() as tx:
                item = tx.items.get_by_id(item_id)
                if item is None:
                    return NotFound('item', item_id)

                if quantity > item.quantity:
                    logger.info(
                        'Venta rechazada por stock: artículo %s, solicitado %s, disponible %s',
                        item_id, quantity, item.quantity
                    )
                    return InsufficientStock(item_id, quantity, item.quantity)

                if self.enforce_total_check:
                    validation = validate_sale_input(
                        item_id, quantity, item.quantity, item.selling_price, total_value
                    )
                    if not validation.ok:
                        return ValidationFailure(validation.errors)

                sale = Sale(
                    item_id=item_id,
                    quantity=quantity,
                    total_value=parse_money(total_value),
                    sale_date=self._clock(),
                )
                sale_id = tx.sales.insert(sale)
                tx.items.decrement_quantity(item_id, quantity)
        except STORE_ERRORS as e:
            return self._infrastructure('register_sale', e)

        logger.info(
            'Venta %s registrada: artículo %s x%s = %s', sale_id, item_id, quantity, sale.total_value
        )
        return Success(sale_id)

    @profile_function(name='Corregir venta')
    def update_sale(self, sale: Sale) -> Result:
        """
        Corrección administrativa de una venta. NO ajusta stock.

        Returns:
            Success(id), ValidationFailure o NotFound (venta o artículo)
        """
        shape = validate_sale_shape(sale.item_id, sale.quantity, sale.total_value)
        if not shape.ok:
            return ValidationFailure(shape.errors)

        try:
            with self._store.transaction() as tx:
                if not _in_id_range(sale.id) or tx.sales.get_by_id(sale.id) is None:
                    return NotFound('sale', sale.id)
                if tx.items.get_by_id(sale.item_id) is None:
                    return NotFound('item', sale.item_id)
                tx.sales.update(sale)
        except STORE_ERRORS as e:
            return self._infrastructure('update_sale', e)

        logger.warning('Venta %s corregida manualmente (stock sin cambios)', sale.id)
        return Success(sale.id)

    @profile_function(name='Anular venta')
    def delete_sale(self, sale: Union[Sale, int]) -> Result:
        """Elimina una venta. NO devuelve stock."""
        sale_id = sale.id if isinstance(sale, Sale) else sale
        try:
            with self._store.transaction() as tx:
                deleted = _in_id_range(sale_id) and tx.sales.delete(sale_id)
        except STORE_ERRORS as e:
            return self._infrastructure('delete_sale', e)

        if not deleted:
            return NotFound('sale', sale_id)
        logger.warning('Venta %s eliminada manualmente (stock sin cambios)', sale_id)
        return Success(sale_id)

    def get_sale_by_id(self, sale_id: int) -> Result:
        if not _in_id_range(sale_id):
            return NotFound('sale', sale_id)
        try:
            sale = self._store.sales.get_by_id(sale_id)
        except STORE_ERRORS as e:
            return self._infrastructure('get_sale_by_id', e)
        if sale is None:
            return NotFound('sale', sale_id)
        return Success(sale)

    def list_sales(self) -> Result:
        """Todas las ventas, más recientes primero."""
        try:
            return Success(self._store.sales.get_all())
        except STORE_ERRORS as e:
            return self._infrastructure('list_sales', e)

    def list_sales_in_range(self, start: DateLike, end: DateLike) -> Result:
        try:
            start, end = normalize_range(start, end)
        except (TypeError, ValueError):
            return ValidationFailure([ValidationError.INVALID_DATE])
        try:
            return Success(self._store.sales.get_by_date_range(start, end))
        except STORE_ERRORS as e:
            return self._infrastructure('list_sales_in_range', e)

    def list_sales_for_item(self, item_id: int) -> Result:
        if not _in_id_range(item_id):
            return Success([])
        try:
            return Success(self._store.sales.get_by_item(item_id))
        except STORE_ERRORS as e:
            return self._infrastructure('list_sales_for_item', e)

    def get_total_quantity_sold(self, item_id: int) -> Result:
        """Unidades vendidas de un artículo (0 si no tiene ventas)."""
        if not _in_id_range(item_id):
            return Success(0)
        try:
            total = self._store.sales.get_total_quantity_by_item(item_id)
        except STORE_ERRORS as e:
            return self._infrastructure('get_total_quantity_sold', e)
        return Success(total or 0)

    # =========================================================================
    # ESTADÍSTICAS
    # =========================================================================

    def get_sales_stats(self, start: DateLike, end: DateLike) -> Result:
        """
        Total y cantidad de ventas en [start, end].

        Returns:
            Success(SalesStats); un rango sin ventas da total 0.00 y count 0
        """
        try:
            start, end = normalize_range(start, end)
        except (TypeError, ValueError):
            return ValidationFailure([ValidationError.INVALID_DATE])
        try:
            stats: SalesStats = self.stats_service.compute_stats(start, end)
        except STORE_ERRORS as e:
            return self._infrastructure('get_sales_stats', e)
        return Success(stats)

