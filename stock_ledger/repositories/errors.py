# ==============================================================================
# ERRORES DE ALMACENAMIENTO
# ==============================================================================
# Todos los stores (JSON, SQLite) lanzan estas excepciones para que los
# servicios puedan distinguir:
#   - RecordNotFoundError       → el registro no existe (dominio)
#   - ConstraintViolationError  → FK/unique/check rechazado por el store
#   - StoreError                → cualquier otra falla de infraestructura
# ==============================================================================


class StoreError(Exception):
    """Falla de infraestructura del store (I/O, transacción abortada, etc.)."""


class ConstraintViolationError(StoreError):
    """El store rechazó la escritura por una restricción de integridad."""


class RecordNotFoundError(LookupError):
    """El registro referenciado no existe."""

    def __init__(self, entity: str, record_id):
        super().__init__(f'{entity} {record_id} no existe')
        self.entity = entity
        self.record_id = record_id
