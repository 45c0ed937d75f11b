# ==============================================================================
# CONFIGURACIÓN - Variables de entorno
# ==============================================================================
# STOCK_DATA_DIR            → Directorio de datos (default: ./data)
# STOCK_BACKEND             → 'json' o 'sqlite' (default: json)
# STOCK_DB_FILE             → Archivo SQLite (default: <data_dir>/inventory.db)
# STOCK_LOCK_TIMEOUT        → Segundos esperando el lock de escritura (default: 30)
# STOCK_ENFORCE_TOTAL_CHECK → Exigir total == cantidad × precio (default: 1)
# STOCK_LOG_LEVEL           → Nivel de logging (default: INFO)
# STOCK_LOG_DIR             → Si se define, también se escribe <dir>/stock_ledger.log
# STOCK_ENABLE_PROFILING    → Medir operaciones y rutas (default: 1)
# STOCK_SLOW_THRESHOLD_MS   → Umbral de advertencia del profiling (default: 300)
# ==============================================================================

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

BACKENDS = ('json', 'sqlite')

_TRUE_VALUES = ('1', 'true', 'yes', 'on', 'si', 'sí')


def _env_bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None or raw.strip() == '':
        return default
    return raw.strip().lower() in _TRUE_VALUES


def _env_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw.strip() == '':
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f'{key} debe ser numérico, se recibió {raw!r}') from e


@dataclass
class Settings:
    data_dir: str = field(default_factory=lambda: os.path.join(os.getcwd(), 'data'))
    backend: str = 'json'
    db_file: Optional[str] = None
    lock_timeout: float = 30.0
    enforce_total_check: bool = True
    log_level: str = 'INFO'
    log_dir: Optional[str] = None
    enable_profiling: bool = True
    slow_threshold_ms: float = 300.0

    def __post_init__(self):
        self.backend = self.backend.strip().lower()
        if self.backend not in BACKENDS:
            raise ValueError(
                f'STOCK_BACKEND inválido: {self.backend!r} (opciones: {", ".join(BACKENDS)})'
            )

    @property
    def sqlite_path(self) -> str:
        return self.db_file or os.path.join(self.data_dir, 'inventory.db')

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> 'Settings':
        """
        Construye la configuración desde variables de entorno.

        Args:
            env: Mapeo a usar en vez de os.environ (útil en tests)

        Raises:
            ValueError: Si algún valor no es válido
        """
        env = os.environ if env is None else env
        defaults = cls()
        return cls(
            data_dir=env.get('STOCK_DATA_DIR') or defaults.data_dir,
            backend=env.get('STOCK_BACKEND') or defaults.backend,
            db_file=env.get('STOCK_DB_FILE') or None,
            lock_timeout=_env_float(env, 'STOCK_LOCK_TIMEOUT', defaults.lock_timeout),
            enforce_total_check=_env_bool(env, 'STOCK_ENFORCE_TOTAL_CHECK', True),
            log_level=(env.get('STOCK_LOG_LEVEL') or defaults.log_level).upper(),
            log_dir=env.get('STOCK_LOG_DIR') or None,
            enable_profiling=_env_bool(env, 'STOCK_ENABLE_PROFILING', True),
            slow_threshold_ms=_env_float(env, 'STOCK_SLOW_THRESHOLD_MS', defaults.slow_threshold_ms),
        )
