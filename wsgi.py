# ==============================================================================
# WSGI Entry Point - Para Gunicorn en producción
# ==============================================================================
# USO:
#   STOCK_BACKEND=sqlite STOCK_DATA_DIR=/srv/stock gunicorn wsgi:app
#
# ESTRUCTURA DEL PROYECTO:
#   repo_root/           <- Directorio de trabajo (en sys.path automáticamente)
#   ├── wsgi.py          <- Este archivo
#   ├── pyproject.toml
#   └── stock_ledger/    <- Paquete Python
# ==============================================================================

from stock_ledger.api import create_app
from stock_ledger.app_container import get_container
from stock_ledger.logger import configure_logging

container = get_container()
configure_logging(container.settings.log_level, container.settings.log_dir)

app = create_app(container)

# ==============================================================================
# PUNTO DE ENTRADA
# ==============================================================================
# Para desarrollo local:
#   python wsgi.py
# ==============================================================================

if __name__ == '__main__':
    app.run(debug=True, host='0.0.0.0', port=5000)
