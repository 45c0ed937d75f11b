# ==============================================================================
# PERSISTENCIA JSON - Archivos de artículos y ventas
# ==============================================================================
# Cada repositorio es dueño de un archivo. Todos comparten UN lock re-entrante
# de proceso: una transacción del store lo retiene durante todo el bloque y
# las operaciones internas lo vuelven a tomar sin bloquearse. Otro hilo
# espera a que la transacción termine y nunca ve datos a medio confirmar.
#
# Escritura: <archivo>.tmp + os.replace → el archivo nunca queda truncado.
# ==============================================================================

import json
import os
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

from stock_ledger.repositories.errors import StoreError


class BaseRepository(ABC):
    """Un archivo JSON con lectura tolerante y escritura atómica."""

    _file_lock = threading.RLock()

    def __init__(self, file_path: str):
        """
        Args:
            file_path: Archivo de datos; se crea vacío si no existe
        """
        self.file_path = file_path
        with self._file_lock:
            if not os.path.exists(file_path):
                self._write_raw(self._empty_data())

    @property
    def file_name(self) -> str:
        return os.path.basename(self.file_path)

    @abstractmethod
    def _empty_data(self) -> Any:
        """Contenido de un archivo recién creado."""

    def _read_raw(self) -> Any:
        """
        Contenido parseado del archivo.

        Raises:
            StoreError: JSON inválido o archivo ilegible
        """
        with self._file_lock:
            try:
                with open(self.file_path, encoding='utf-8') as fh:
                    content = json.load(fh)
            except FileNotFoundError:
                content = self._empty_data()
            except json.JSONDecodeError as e:
                raise StoreError(f'{self.file_name} corrupto: {e}') from e
            except OSError as e:
                raise StoreError(f'No se pudo leer {self.file_name}: {e}') from e
            return content

    def _write_raw(self, data: Any) -> None:
        """
        Reemplaza el archivo completo.

        Raises:
            StoreError: Datos no serializables o error de disco
        """
        self._dump(self.file_path, data)

    def _dump(self, path: str, data: Any) -> None:
        with self._file_lock:
            staging = f'{path}.tmp'
            try:
                with open(staging, 'w', encoding='utf-8') as fh:
                    json.dump(data, fh, indent=2, ensure_ascii=False)
                os.replace(staging, path)
            except (OSError, TypeError, ValueError) as e:
                if os.path.exists(staging):
                    os.remove(staging)
                raise StoreError(f'No se pudo escribir {os.path.basename(path)}: {e}') from e

    # =========================================================================
    # SECUENCIA DE IDs
    # =========================================================================
    # <archivo>_seq.json guarda el último ID emitido, así un ID borrado no se
    # vuelve a asignar (igual que AUTOINCREMENT en SQLite).

    @property
    def sequence_path(self) -> str:
        root, ext = os.path.splitext(self.file_path)
        return f'{root}_seq{ext}'

    def _last_issued_id(self) -> int:
        try:
            with open(self.sequence_path, encoding='utf-8') as fh:
                return int(json.load(fh)['last_id'])
        except FileNotFoundError:
            return 0
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise StoreError(f'Secuencia de {self.file_name} ilegible: {e}') from e

    @abstractmethod
    def _highest_stored_id(self) -> int:
        """Mayor ID presente en el archivo (0 si está vacío)."""

    def issue_id(self, requested: Optional[int] = None) -> int:
        """
        Emite el ID de un registro nuevo.

        Args:
            requested: ID explícito; si es mayor que el último emitido,
                       la secuencia avanza hasta él

        Returns:
            `requested`, o el siguiente ID nunca usado
        """
        with self._file_lock:
            last = max(self._last_issued_id(), self._highest_stored_id())
            record_id = requested or last + 1
            if record_id > last:
                self._dump(self.sequence_path, {'last_id': record_id})
            return record_id

    def snapshot(self) -> Any:
        """Copia del contenido actual (para restaurar si la transacción falla)."""
        return self._read_raw()

    def restore(self, data: Any) -> None:
        """Vuelve al contenido de un snapshot."""
        self._write_raw(data)
        self.reload()

    def reload(self) -> None:
        """Descarta cachés en memoria; las subclases con caché lo sobrescriben."""


class DictRepository(BaseRepository):
    """
    Registros indexados por ID entero: {"1": {...}, "2": {...}}.

    JSON solo admite claves string; en memoria se usan ints. El contenido
    se cachea hasta la próxima escritura o reload().
    """

    def __init__(self, file_path: str):
        self._cache: Dict[int, Dict[str, Any]] = {}
        self._cache_loaded = False
        super().__init__(file_path)

    def _empty_data(self) -> Dict:
        return {}

    def load(self) -> Dict[int, Dict[str, Any]]:
        """Todos los registros como {id: datos} (cacheado)."""
        with self._file_lock:
            if not self._cache_loaded:
                raw = self._read_raw()
                if not isinstance(raw, dict):
                    raise StoreError(f'{self.file_name} no contiene un objeto')
                self._cache = {int(k): v for k, v in raw.items()}
                self._cache_loaded = True
            return self._cache

    def save(self, data: Dict[int, Dict[str, Any]]) -> None:
        """Guarda todos los registros (reemplazo completo)."""
        with self._file_lock:
            # Si la escritura falla, el caché no debe quedar adelantado
            self._cache_loaded = False
            self._write_raw({str(k): v for k, v in data.items()})
            self._cache = data
            self._cache_loaded = True

    def reload(self) -> None:
        with self._file_lock:
            self._cache = {}
            self._cache_loaded = False

    def get_record(self, record_id: int) -> Optional[Dict[str, Any]]:
        with self._file_lock:
            record = self.load().get(record_id)
            return dict(record) if record is not None else None

    def put_record(self, record_id: int, record: Dict[str, Any]) -> None:
        with self._file_lock:
            data = dict(self.load())
            data[record_id] = record
            self.save(data)

    def pop_record(self, record_id: int) -> Optional[Dict[str, Any]]:
        """Elimina un registro; retorna sus datos o None si no existía."""
        with self._file_lock:
            data = dict(self.load())
            removed = data.pop(record_id, None)
            if removed is not None:
                self.save(data)
            return removed

    def _highest_stored_id(self) -> int:
        return max(self.load(), default=0)


class ListRepository(BaseRepository):
    """Registros en una lista JSON: [{...}, {...}]. Sin caché."""

    def _empty_data(self) -> List:
        return []

    def get_records(self) -> List[Dict[str, Any]]:
        with self._file_lock:
            data = self._read_raw()
            if not isinstance(data, list):
                raise StoreError(f'{self.file_name} no contiene una lista')
            return data

    def save_records(self, data: List[Dict[str, Any]]) -> None:
        self._write_raw(data)

    def find_all(self, predicate: Callable[[Dict[str, Any]], bool]) -> List[Dict[str, Any]]:
        return [r for r in self.get_records() if predicate(r)]

    def find_by(self, field: str, value: Any) -> Optional[Dict[str, Any]]:
        """Primer registro cuyo campo coincide, o None."""
        for record in self.get_records():
            if record.get(field) == value:
                return record
        return None

    def delete_where(self, field: str, value: Any) -> int:
        """Elimina los registros que coinciden; retorna cuántos borró."""
        with self._file_lock:
            data = self.get_records()
            kept = [r for r in data if r.get(field) != value]
            removed = len(data) - len(kept)
            if removed:
                self.save_records(kept)
            return removed

    def _highest_stored_id(self) -> int:
        return max((int(r.get('id') or 0) for r in self.get_records()), default=0)
