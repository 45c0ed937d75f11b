# ==============================================================================
# CAPA DE MODELOS - Estructuras de datos del sistema
# ==============================================================================
# Entidades del dominio como dataclasses planas:
#   - Independientes del mecanismo de persistencia (JSON o SQLite)
#   - Montos como Decimal redondeados a 2 decimales
#   - Fechas en UTC
# ==============================================================================

from .entities import (
    Item,
    Sale,
    SalesStats,
)

__all__ = [
    'Item',
    'Sale',
    'SalesStats',
]
