# ==============================================================================
# STORE JSON - items.json + sales.json con transacciones por snapshot
# ==============================================================================
# Modelo de escritor único:
#   1. transaction() toma el lock global de BaseRepository
#   2. guarda un snapshot de ambos archivos
#   3. si el bloque falla, restaura ambos snapshots y relanza la excepción
#
# Mientras la transacción está abierta ningún otro hilo puede leer ni
# escribir (todas las operaciones toman el mismo lock), así que los
# lectores solo ven estados confirmados.
# ==============================================================================

import logging
import os
from contextlib import contextmanager
from typing import Iterator, Optional

from stock_ledger.repositories.base import BaseRepository
from stock_ledger.repositories.errors import StoreError
from stock_ledger.repositories.item_repository import ItemRepository
from stock_ledger.repositories.sale_repository import SaleRepository

logger = logging.getLogger(__name__)


class JsonInventoryStore:
    """
    Store de inventario sobre archivos JSON.

    Uso:
        store = JsonInventoryStore('/ruta/datos')
        with store.transaction() as tx:
            tx.sales.insert(sale)
            tx.items.decrement_quantity(sale.item_id, sale.quantity)
    """

    def __init__(self, base_path: str, lock_timeout: Optional[float] = None):
        """
        Args:
            base_path: Directorio donde viven items.json y sales.json
            lock_timeout: Segundos máximos esperando el lock (None = sin límite)
        """
        os.makedirs(base_path, exist_ok=True)
        self.base_path = base_path
        self.lock_timeout = lock_timeout
        self.items = ItemRepository(base_path)
        self.sales = SaleRepository(base_path)

    def _acquire(self) -> None:
        lock = BaseRepository._file_lock
        acquired = lock.acquire(timeout=self.lock_timeout) if self.lock_timeout else lock.acquire()
        if not acquired:
            raise StoreError(
                f'No se obtuvo el lock del store en {self.lock_timeout} s'
            )

    @contextmanager
    def transaction(self) -> Iterator['JsonInventoryStore']:
        """
        Abre una unidad atómica sobre ambos archivos.

        Raises:
            StoreError: Si no se obtiene el lock o falla la restauración
        """
        self._acquire()
        try:
            snapshots = [(repo, repo.snapshot()) for repo in (self.items, self.sales)]
            try:
                yield self
            except BaseException:
                logger.warning('Transacción JSON abortada, restaurando snapshot')
                for repo, data in snapshots:
                    repo.restore(data)
                raise
        finally:
            BaseRepository._file_lock.release()

    def reload(self) -> None:
        """Descarta cachés (útil si los archivos cambiaron desde afuera)."""
        self.items.reload()
        self.sales.reload()
