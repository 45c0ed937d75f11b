# ==============================================================================
# RESULTADOS DE OPERACIONES
# ==============================================================================
# El ledger nunca deja escapar excepciones: cada operación devuelve un
# Success o una falla tipada. Todas exponen `ok` y `to_dict()` con el mismo
# formato {'ok': ..., 'error': ...} que usan las rutas.
#
#   Success               → valor de la operación
#   ValidationFailure     → reglas violadas (lista completa)
#   NotFound              → artículo/venta inexistente
#   InsufficientStock     → venta rechazada, stock intacto
#   InfrastructureFailure → falla del store (I/O, constraint, abort)
# ==============================================================================

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union

from stock_ledger.services.validation import ValidationError

T = TypeVar('T')


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T = None
    ok = True

    def unwrap(self) -> T:
        return self.value

    def to_dict(self) -> Dict[str, Any]:
        return {'ok': True, 'value': self.value}


class Failure(ABC):
    """Base de todas las fallas tipadas."""
    ok = False
    code = 'ERROR'

    @property
    @abstractmethod
    def message(self) -> str:
        """Descripción legible de la falla."""

    def unwrap(self):
        raise OperationFailed(self)

    def to_dict(self) -> Dict[str, Any]:
        return {'ok': False, 'code': self.code, 'error': self.message}


@dataclass(frozen=True)
class ValidationFailure(Failure):
    errors: List[ValidationError] = field(default_factory=list)
    code = 'VALIDATION_ERROR'

    @property
    def message(self) -> str:
        return '; '.join(e.message for e in self.errors)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data['errors'] = [e.value for e in self.errors]
        return data


@dataclass(frozen=True)
class NotFound(Failure):
    entity: str = 'item'
    record_id: Optional[int] = None
    code = 'NOT_FOUND'

    @property
    def message(self) -> str:
        if self.entity == 'item':
            return f'Artículo {self.record_id} no encontrado'
        return f'Venta {self.record_id} no encontrada'


@dataclass(frozen=True)
class InsufficientStock(Failure):
    item_id: int = 0
    requested: int = 0
    available: int = 0
    code = 'INSUFFICIENT_STOCK'

    @property
    def message(self) -> str:
        return (
            f'Stock insuficiente para el artículo {self.item_id}. '
            f'Solicitado: {self.requested}, Disponible: {self.available}'
        )


@dataclass(frozen=True)
class InfrastructureFailure(Failure):
    detail: str = ''
    code = 'INFRASTRUCTURE_ERROR'

    @property
    def message(self) -> str:
        return f'Error al acceder al almacenamiento: {self.detail}'


class OperationFailed(Exception):
    """Se lanza al hacer unwrap() de una falla."""

    def __init__(self, failure: Failure):
        super().__init__(failure.message)
        self.failure = failure


Result = Union[Success, ValidationFailure, NotFound, InsufficientStock, InfrastructureFailure]
