# ==============================================================================
# REPOSITORIO DE VENTAS (JSON)
# ==============================================================================
# Encapsula todo el acceso a sales.json
# Las ventas se almacenan como lista: [{venta1}, {venta2}, ...]
# ==============================================================================

import os
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from stock_ledger.models.entities import Sale
from stock_ledger.repositories.base import ListRepository
from stock_ledger.utils.calculations import round_currency, to_decimal
from stock_ledger.utils.dates import format_timestamp


class SaleRepository(ListRepository):
    """
    Repositorio para gestión de ventas.

    Formato de datos en sales.json:
    [
        {
            "id": 1,
            "item_id": 3,
            "quantity": 2,
            "total_value": "24.00",
            "sale_date": "2024-01-01T10:00:00.000000Z"
        }
    ]

    sale_date usa un formato fijo, así que los rangos se filtran comparando
    strings.
    """

    FILE_NAME = 'sales.json'

    def __init__(self, base_path: str):
        """
        Inicializa el repositorio de ventas.

        Args:
            base_path: Directorio de datos
        """
        super().__init__(os.path.join(base_path, self.FILE_NAME))

    @staticmethod
    def _newest_first(records: List[Dict[str, Any]]) -> List[Sale]:
        ordered = sorted(
            records,
            key=lambda r: (r.get('sale_date', ''), int(r.get('id') or 0)),
            reverse=True
        )
        return [Sale.from_dict(r) for r in ordered]

    def _in_range(self, start: datetime, end: datetime) -> List[Dict[str, Any]]:
        start_key = format_timestamp(start)
        end_key = format_timestamp(end)
        return self.find_all(lambda r: start_key <= r.get('sale_date', '') <= end_key)

    # =========================================================================
    # CONSULTAS
    # =========================================================================

    def get_all(self) -> List[Sale]:
        """Todas las ventas, más recientes primero."""
        return self._newest_first(self.get_records())

    def get_by_id(self, sale_id: int) -> Optional[Sale]:
        record = self.find_by('id', sale_id)
        return Sale.from_dict(record) if record else None

    def get_by_date_range(self, start: datetime, end: datetime) -> List[Sale]:
        """
        Ventas en un rango de fechas (inclusivo).

        Args:
            start: Fecha inicio
            end: Fecha fin
        """
        return self._newest_first(self._in_range(start, end))

    def get_total_in_range(self, start: datetime, end: datetime) -> Optional[Decimal]:
        records = self._in_range(start, end)
        if not records:
            return None
        return round_currency(sum(to_decimal(r['total_value']) for r in records))

    def count_in_range(self, start: datetime, end: datetime) -> int:
        return len(self._in_range(start, end))

    def get_by_item(self, item_id: int) -> List[Sale]:
        return self._newest_first(self.find_all(lambda r: r.get('item_id') == item_id))

    def get_total_quantity_by_item(self, item_id: int) -> Optional[int]:
        records = self.find_all(lambda r: r.get('item_id') == item_id)
        if not records:
            return None
        return sum(int(r['quantity']) for r in records)

    # =========================================================================
    # ESCRITURA
    # =========================================================================

    def insert(self, sale: Sale) -> int:
        """
        Inserta una venta nueva o reemplaza la que tenga el mismo ID.

        Returns:
            ID asignado
        """
        with self._file_lock:
            sale_id = self.issue_id(sale.id)
            record = sale.with_id(sale_id).to_dict()
            records = [r for r in self.get_records() if r.get('id') != sale_id]
            records.append(record)
            self.save_records(records)
            return sale_id

    def update(self, sale: Sale) -> bool:
        """
        Reemplaza una venta existente.

        Returns:
            True si se actualizó
        """
        with self._file_lock:
            if sale.id is None or self.find_by('id', sale.id) is None:
                return False
            self.insert(sale)
            return True

    def delete(self, sale_id: int) -> bool:
        return self.delete_where('id', sale_id) > 0

    def delete_by_item(self, item_id: int) -> int:
        return self.delete_where('item_id', item_id)
