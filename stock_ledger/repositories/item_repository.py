# ==============================================================================
# REPOSITORIO DE ARTÍCULOS (JSON)
# ==============================================================================
# Encapsula todo el acceso a items.json
# Los artículos se almacenan como diccionario: {item_id: {datos_articulo}}
# ==============================================================================

import os
from typing import List, Optional

from stock_ledger.models.entities import Item
from stock_ledger.repositories.base import DictRepository
from stock_ledger.repositories.errors import ConstraintViolationError, RecordNotFoundError


class ItemRepository(DictRepository):
    """
    Repositorio para gestión de artículos y su stock.

    Formato de datos en items.json:
    {
        "1": {
            "name": "Picanha",
            "quantity": 12,
            "cost_price": "8.50",
            "selling_price": "12.00",
            "minimum_stock": 5,
            "unit": "un"
        },
        "2": {...}
    }
    """

    FILE_NAME = 'items.json'

    def __init__(self, base_path: str):
        """
        Inicializa el repositorio de artículos.

        Args:
            base_path: Directorio de datos
        """
        super().__init__(os.path.join(base_path, self.FILE_NAME))

    def _to_item(self, item_id: int, data: dict) -> Item:
        record = dict(data)
        record['id'] = item_id
        return Item.from_dict(record)

    def get_all(self) -> List[Item]:
        """
        Obtiene todos los artículos ordenados por nombre.
        """
        with self._file_lock:
            items = [self._to_item(k, v) for k, v in self.load().items()]
        return sorted(items, key=lambda i: (i.name, i.id))

    def get_low_stock(self) -> List[Item]:
        """
        Artículos con stock en o bajo el mínimo.
        """
        return [item for item in self.get_all() if item.is_low_stock]

    def get_by_id(self, item_id: int) -> Optional[Item]:
        with self._file_lock:
            data = self.load().get(item_id)
            return self._to_item(item_id, data) if data is not None else None

    def insert(self, item: Item) -> int:
        """
        Inserta un artículo nuevo o reemplaza uno existente con el mismo ID.

        Returns:
            ID asignado
        """
        with self._file_lock:
            item_id = self.issue_id(item.id)
            record = item.to_dict()
            record.pop('id')
            self.put_record(item_id, record)
            return item_id

    def update(self, item: Item) -> bool:
        """
        Reemplaza los datos de un artículo existente.

        Returns:
            True si se actualizó, False si no existía
        """
        with self._file_lock:
            if item.id is None or item.id not in self.load():
                return False
            self.insert(item)
            return True

    def delete(self, item_id: int) -> bool:
        return self.pop_record(item_id) is not None

    def get_quantity(self, item_id: int) -> Optional[int]:
        with self._file_lock:
            data = self.load().get(item_id)
            return int(data['quantity']) if data is not None else None

    def decrement_quantity(self, item_id: int, amount: int) -> None:
        """
        Descuenta stock de un artículo.

        Raises:
            RecordNotFoundError: Si el artículo no existe
            ConstraintViolationError: Si el stock quedaría negativo
        """
        with self._file_lock:
            data = self.get_record(item_id)
            if data is None:
                raise RecordNotFoundError('item', item_id)
            new_quantity = int(data['quantity']) - amount
            if new_quantity < 0:
                raise ConstraintViolationError(
                    f'El stock del artículo {item_id} no puede quedar negativo'
                )
            data['quantity'] = new_quantity
            self.put_record(item_id, data)
