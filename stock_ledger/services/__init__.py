# ==============================================================================
# CAPA DE SERVICIOS - Lógica de negocio
# ==============================================================================
# ├── validation.py      → Reglas puras de artículos y ventas
# ├── results.py         → Success / fallas tipadas
# ├── stats_service.py   → Agregados de ventas por rango y período
# └── ledger_service.py  → InventoryLedger (único punto de escritura)
# ==============================================================================

from .validation import (
    ValidationError,
    ValidationResult,
    validate_item_input,
    validate_sale_input,
    validate_sale_shape,
)
from .results import (
    Success,
    Failure,
    ValidationFailure,
    NotFound,
    InsufficientStock,
    InfrastructureFailure,
    OperationFailed,
    Result,
)
from .stats_service import StatsService
from .ledger_service import InventoryLedger

__all__ = [
    'ValidationError',
    'ValidationResult',
    'validate_item_input',
    'validate_sale_input',
    'validate_sale_shape',
    'Success',
    'Failure',
    'ValidationFailure',
    'NotFound',
    'InsufficientStock',
    'InfrastructureFailure',
    'OperationFailed',
    'Result',
    'StatsService',
    'InventoryLedger',
]
