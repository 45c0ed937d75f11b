# ==============================================================================
# STOCK LEDGER - Inventario y ventas con registro atómico
# ==============================================================================
# ├── config.py            → Settings desde variables de entorno
# ├── logger.py            → configure_logging()
# ├── performance_logger.py→ Profiling de operaciones y rutas
# ├── app_container.py     → Contenedor de dependencias (singleton)
# ├── api.py               → Adaptador HTTP (Flask)
# ├── models/              → Item, Sale, SalesStats
# ├── repositories/        → Stores JSON y SQLite
# ├── services/            → Ledger, validación, estadísticas
# └── utils/               → Cálculos monetarios y fechas
# ==============================================================================

__version__ = '1.0.0'
