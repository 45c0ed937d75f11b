# ==============================================================================
# PROFILING DE RUTAS Y OPERACIONES DEL LEDGER
# ==============================================================================
# Acumula tiempos en memoria (por operación y por ruta HTTP) y avisa por
# logging cuando algo supera los umbrales. No altera resultados ni excepciones.
#
#   logger 'stock_ledger.performance'
#     DEBUG   → cada request
#     WARNING → supera STOCK_SLOW_THRESHOLD_MS
#     ERROR   → supera ~2.3x ese umbral
#
# ACTIVAR/DESACTIVAR: STOCK_ENABLE_PROFILING
# ==============================================================================

import logging
import threading
import time
from functools import wraps
from typing import Dict

logger = logging.getLogger('stock_ledger.performance')

ENABLE_PROFILING = True
THRESHOLD_WARNING = 300.0
THRESHOLD_CRITICAL = 700.0


def configure_profiling(enabled: bool = True, warning_ms: float = 300) -> None:
    """Ajusta switch y umbrales; el crítico queda en 7/3 del de advertencia."""
    global ENABLE_PROFILING, THRESHOLD_WARNING, THRESHOLD_CRITICAL
    ENABLE_PROFILING = enabled
    THRESHOLD_WARNING = float(warning_ms)
    THRESHOLD_CRITICAL = float(warning_ms) * 7 / 3


# ═══════════════════════════════════════════════════════════════════════════
# ACUMULADOR DE TIEMPOS
# ═══════════════════════════════════════════════════════════════════════════

class TimingRegistry:
    """
    Tiempos acumulados por nombre, seguro entre hilos.

    Por cada nombre guarda llamadas, llamadas que terminaron en excepción,
    tiempo total, mínimo y máximo (ms).
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: Dict[str, dict] = {}

    def record(self, name: str, elapsed_ms: float, failed: bool = False) -> None:
        with self._lock:
            entry = self._entries.get(name)
            if entry is None:
                entry = self._entries[name] = {
                    'calls': 0, 'errors': 0, 'total': 0.0,
                    'min': elapsed_ms, 'max': elapsed_ms,
                }
            entry['calls'] += 1
            entry['total'] += elapsed_ms
            entry['min'] = min(entry['min'], elapsed_ms)
            entry['max'] = max(entry['max'], elapsed_ms)
            if failed:
                entry['errors'] += 1

    def snapshot(self) -> Dict[str, dict]:
        """
        Copia de los acumulados con promedio calculado.

        Returns:
            {nombre: {calls, errors, avg_time, min_time, max_time}}
        """
        with self._lock:
            return {
                name: {
                    'calls': e['calls'],
                    'errors': e['errors'],
                    'avg_time': round(e['total'] / e['calls'], 2) if e['calls'] else 0,
                    'min_time': round(e['min'], 2),
                    'max_time': round(e['max'], 2),
                }
                for name, e in self._entries.items()
            }

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


_operations = TimingRegistry()
_routes = TimingRegistry()


def _warn_if_slow(kind: str, name: str, elapsed_ms: float) -> None:
    if elapsed_ms >= THRESHOLD_CRITICAL:
        logger.error('[MUY LENTA] %s %s: %.0f ms (umbral %.0f ms)',
                     kind, name, elapsed_ms, THRESHOLD_CRITICAL)
    elif elapsed_ms >= THRESHOLD_WARNING:
        logger.warning('[LENTA] %s %s: %.0f ms (umbral %.0f ms)',
                       kind, name, elapsed_ms, THRESHOLD_WARNING)


# ═══════════════════════════════════════════════════════════════════════════
# FLASK
# ═══════════════════════════════════════════════════════════════════════════

def init_profiling(app):
    """
    Registra hooks before/after request que miden cada ruta.

    Las rutas se agrupan por regla ('GET /api/items/<int:item_id>'),
    no por URL concreta.
    """
    from flask import g, request

    @app.before_request
    def _mark_request_start():
        g.profiling_started = time.perf_counter()

    @app.after_request
    def _measure_request(response):
        started = g.pop('profiling_started', None)
        if not ENABLE_PROFILING or started is None:
            return response

        elapsed_ms = (time.perf_counter() - started) * 1000
        rule = request.url_rule.rule if request.url_rule else request.path
        route = f'{request.method} {rule}'

        _routes.record(route, elapsed_ms, failed=response.status_code >= 500)
        logger.debug('%s → %s en %.0f ms', route, response.status_code, elapsed_ms)
        _warn_if_slow('Ruta', route, elapsed_ms)
        return response


# ═══════════════════════════════════════════════════════════════════════════
# DECORADOR
# ═══════════════════════════════════════════════════════════════════════════

def profile_function(func=None, name=None):
    """
    Mide una operación del ledger o del servicio de estadísticas.

    Se usa con o sin argumentos:

        @profile_function
        def compute_stats(...): ...

        @profile_function(name='Registrar venta')
        def register_sale(...): ...

    Una excepción se cuenta en 'errors' y se vuelve a lanzar sin cambios.
    """
    def decorator(fn):
        label = name or fn.__name__

        @wraps(fn)
        def timed(*args, **kwargs):
            if not ENABLE_PROFILING:
                return fn(*args, **kwargs)

            failed = True
            started = time.perf_counter()
            try:
                result = fn(*args, **kwargs)
                failed = False
                return result
            finally:
                elapsed_ms = (time.perf_counter() - started) * 1000
                _operations.record(label, elapsed_ms, failed=failed)
                _warn_if_slow('Operación', label, elapsed_ms)

        return timed

    if func is not None:
        return decorator(func)
    return decorator


# ═══════════════════════════════════════════════════════════════════════════
# CONSULTA
# ═══════════════════════════════════════════════════════════════════════════

def get_function_stats():
    """Acumulados por operación decorada con profile_function."""
    return _operations.snapshot()


def get_route_stats():
    """Acumulados por ruta HTTP."""
    return _routes.snapshot()


def log_function_stats_report():
    """Vuelca al log un renglón por operación, la más lenta primero."""
    ranking = sorted(get_function_stats().items(), key=lambda kv: kv[1]['avg_time'], reverse=True)
    for label, data in ranking:
        logger.info(
            'FUNCIÓN: %s | llamadas: %d | errores: %d | promedio: %.0f ms | máximo: %.0f ms',
            label, data['calls'], data['errors'], data['avg_time'], data['max_time']
        )


def reset_stats():
    _operations.clear()
    _routes.clear()
