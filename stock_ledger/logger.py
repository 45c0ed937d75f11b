# ==============================================================================
# LOGGING
# ==============================================================================
# Cada módulo usa logging.getLogger(__name__); aquí solo se configuran los
# handlers del logger raíz del paquete ('stock_ledger').
# ==============================================================================

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

PACKAGE_LOGGER = 'stock_ledger'

FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
CONSOLE_FORMAT = '%(levelname)s %(name)s: %(message)s'


def configure_logging(
    level: Union[int, str] = logging.INFO,
    log_dir: Optional[str] = None
) -> logging.Logger:
    """
    Configura consola (stderr) y, si hay log_dir, un archivo rotativo.

    Llamarlo más de una vez reemplaza los handlers anteriores.

    Returns:
        Logger del paquete
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path / 'stock_ledger.log', maxBytes=5 * 1024 * 1024, backupCount=3, encoding='utf-8'
        )
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger
