# ==============================================================================
# CONTENEDOR DE DEPENDENCIAS - Inyección de servicios
# ==============================================================================
# Este módulo proporciona una forma centralizada de obtener el store y los
# servicios ya conectados entre sí. Facilita:
#   - Inyección de dependencias
#   - Testing (se puede pasar otro Settings o un store propio)
#   - Elegir backend (JSON o SQLite) sin tocar los servicios
#
# ═══════════════════════════════════════════════════════════════════════════════
# CAMBIO DE BACKEND
# ═══════════════════════════════════════════════════════════════════════════════
#
#    STOCK_BACKEND=json    → JsonInventoryStore(STOCK_DATA_DIR)
#    STOCK_BACKEND=sqlite  → SqliteInventoryStore(STOCK_DB_FILE)
#
# Los servicios NO requieren cambios porque dependen de IInventoryStore.
# ==============================================================================

import logging
from typing import Optional

from stock_ledger.config import Settings
from stock_ledger.performance_logger import configure_profiling

# ═══════════════════════════════════════════════════════════════════════════════
# REPOSITORIOS - Capa de persistencia
# ═══════════════════════════════════════════════════════════════════════════════
from stock_ledger.repositories import (
    IInventoryStore,
    JsonInventoryStore,
    SqliteInventoryStore,
)

# ═══════════════════════════════════════════════════════════════════════════════
# SERVICIOS - Capa de lógica de negocio
# ═══════════════════════════════════════════════════════════════════════════════
from stock_ledger.services import InventoryLedger, StatsService

logger = logging.getLogger(__name__)


class AppContainer:
    """
    Contenedor de dependencias de la aplicación.

    Implementa el patrón Singleton para asegurar una única instancia
    del store y de cada servicio.

    Uso:
        container = AppContainer(Settings.from_env())
        ledger = container.ledger
        stats = container.stats_service
    """

    _instance: Optional['AppContainer'] = None

    def __new__(cls, settings: Settings = None):
        """Singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, settings: Settings = None):
        """
        Inicializa el contenedor.

        Args:
            settings: Configuración (por defecto, desde variables de entorno)
        """
        if self._initialized:
            return

        self.settings = settings or Settings.from_env()
        configure_profiling(self.settings.enable_profiling, self.settings.slow_threshold_ms)

        # Lazy loading
        self._store: Optional[IInventoryStore] = None
        self._stats_service: Optional[StatsService] = None
        self._ledger: Optional[InventoryLedger] = None

        self._initialized = True

    # =========================================================================
    # STORE
    # =========================================================================

    @property
    def store(self) -> IInventoryStore:
        """Store de inventario según STOCK_BACKEND (singleton)."""
        if self._store is None:
            if self.settings.backend == 'sqlite':
                self._store = SqliteInventoryStore(
                    self.settings.sqlite_path,
                    timeout=self.settings.lock_timeout
                )
                logger.info('Store SQLite en %s', self.settings.sqlite_path)
            else:
                self._store = JsonInventoryStore(
                    self.settings.data_dir,
                    lock_timeout=self.settings.lock_timeout
                )
                logger.info('Store JSON en %s', self.settings.data_dir)
        return self._store

    # =========================================================================
    # SERVICIOS
    # =========================================================================

    @property
    def stats_service(self) -> StatsService:
        """Servicio de estadísticas (singleton)."""
        if self._stats_service is None:
            self._stats_service = StatsService(self.store)
        return self._stats_service

    @property
    def ledger(self) -> InventoryLedger:
        """Ledger de inventario (singleton)."""
        if self._ledger is None:
            self._ledger = InventoryLedger(
                self.store,
                stats_service=self.stats_service,
                enforce_total_check=self.settings.enforce_total_check
            )
        return self._ledger

    # =========================================================================
    # UTILIDADES
    # =========================================================================

    def reset(self) -> None:
        """
        Reinicia todas las instancias.
        Útil para testing o para recargar datos.
        """
        self._store = None
        self._stats_service = None
        self._ledger = None

    @classmethod
    def get_instance(cls, settings: Settings = None) -> 'AppContainer':
        """
        Obtiene la instancia singleton del contenedor.

        Args:
            settings: Configuración (solo se usa en primera llamada)
        """
        if cls._instance is None:
            return cls(settings)
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Elimina la instancia singleton (útil para tests)."""
        if cls._instance is not None:
            cls._instance.reset()
            cls._instance = None


# Función helper para obtener el contenedor global
def get_container(settings: Settings = None) -> AppContainer:
    """
    Obtiene el contenedor de dependencias global.

    Args:
        settings: Configuración (solo se usa en primera llamada)
    """
    return AppContainer.get_instance(settings)
