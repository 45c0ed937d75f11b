# ==============================================================================
# CAPA DE REPOSITORIOS - Acceso a datos
# ==============================================================================
# Esta capa encapsula todo el acceso a la persistencia.
# Hay dos backends con la misma interfaz (IInventoryStore):
#
# ESTRUCTURA:
# ├── interfaces.py        → Protocolos (contratos de los stores)
# ├── errors.py            → StoreError, ConstraintViolationError, RecordNotFoundError
# ├── base.py              → Clases base para JSON (DictRepository, ListRepository)
# ├── item_repository.py   → Acceso a items.json
# ├── sale_repository.py   → Acceso a sales.json
# ├── json_store.py        → Unidad atómica sobre ambos archivos JSON
# └── sqlite_store.py      → Backend SQLite (FK en cascada, BEGIN IMMEDIATE)
#
# CAMBIO DE BACKEND:
# 1. STOCK_BACKEND=json|sqlite (ver config.py)
# 2. app_container.py construye el store correspondiente
# 3. Los services NO requieren cambios (dependen de interfaces)
# ==============================================================================

# Interfaces
from .interfaces import (
    IItemRepository,
    ISaleRepository,
    ITransaction,
    IInventoryStore,
)

# Errores
from .errors import StoreError, ConstraintViolationError, RecordNotFoundError

# Implementaciones JSON
from .base import BaseRepository, DictRepository, ListRepository
from .item_repository import ItemRepository
from .sale_repository import SaleRepository
from .json_store import JsonInventoryStore

# Implementación SQLite
from .sqlite_store import SqliteInventoryStore, SqliteItemRepository, SqliteSaleRepository

__all__ = [
    # Interfaces
    'IItemRepository',
    'ISaleRepository',
    'ITransaction',
    'IInventoryStore',

    # Errores
    'StoreError',
    'ConstraintViolationError',
    'RecordNotFoundError',

    # Clases base
    'BaseRepository',
    'DictRepository',
    'ListRepository',

    # Implementaciones JSON
    'ItemRepository',
    'SaleRepository',
    'JsonInventoryStore',

    # Implementación SQLite
    'SqliteInventoryStore',
    'SqliteItemRepository',
    'SqliteSaleRepository',
]
