# ==============================================================================
# SISTEMA DE PROFILING INTERNO
# ==============================================================================
# Mide rendimiento de rutas y funciones sin afectar la respuesta.
# Escribe con el módulo logging:
#   mystery_shop.performance              → cada request
#   mystery_shop.performance.slow_routes  → requests lentos
#   mystery_shop.performance.slow_functions → funciones lentas
#
# ACTIVAR/DESACTIVAR: Config.ENABLE_PROFILING / set_profiling_enabled()
# ==============================================================================

import logging
import os
import threading
import time
from collections import defaultdict
from functools import wraps
from logging.handlers import RotatingFileHandler

# ═══════════════════════════════════════════════════════════════════════════
# CONFIGURACIÓN
# ═══════════════════════════════════════════════════════════════════════════

ENABLE_PROFILING = True

# Umbrales de tiempo (en milisegundos)
THRESHOLD_WARNING = 300   # Advertencia si supera 300ms
THRESHOLD_CRITICAL = 700  # Crítico si supera 700ms

performance_logger = logging.getLogger('mystery_shop.performance')
slow_routes_logger = logging.getLogger('mystery_shop.performance.slow_routes')
slow_functions_logger = logging.getLogger('mystery_shop.performance.slow_functions')

# Mapeo de endpoints a nombres legibles (para logs más humanos)
ROUTE_NAMES = {
    'GET /api/healthcheck': 'Healthcheck',

    # Catálogo
    'POST /api/createSurpriseBox': 'Crear caja',
    'GET /api/getSurpriseBoxes': 'Listar cajas',
    'GET /api/getSurpriseBoxById': 'Ver caja',
    'POST /api/updateSurpriseBox': 'Editar caja',
    'POST /api/deleteSurpriseBox': 'Eliminar caja',

    # Usuarios
    'POST /api/createUser': 'Registrar usuario',
    'POST /api/loginUser': 'Iniciar sesión',

    # Pedidos
    'POST /api/createOrder': 'Crear pedido',
    'GET /api/getOrders': 'Listar pedidos',
    'GET /api/getUserOrders': 'Pedidos del usuario',
    'POST /api/updateOrderStatus': 'Cambiar estado de pedido',
}


def set_profiling_enabled(enabled: bool) -> None:
    global ENABLE_PROFILING
    ENABLE_PROFILING = bool(enabled)


def attach_file_handlers(log_dir: str) -> None:
    """
    Envía los logs de rendimiento a archivos dentro de log_dir.
    Se llama una sola vez al crear la app.
    """
    os.makedirs(log_dir, exist_ok=True)
    formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(message)s')
    for logger, filename in (
        (performance_logger, 'performance.log'),
        (slow_routes_logger, 'slow_routes.log'),
        (slow_functions_logger, 'slow_functions.log'),
    ):
        path = os.path.join(log_dir, filename)
        if any(getattr(h, 'baseFilename', None) == os.path.abspath(path) for h in logger.handlers):
            continue
        handler = RotatingFileHandler(path, maxBytes=1024 * 1024, backupCount=3, encoding='utf-8')
        handler.setFormatter(formatter)
        logger.addHandler(handler)


# ═══════════════════════════════════════════════════════════════════════════
# ESTADÍSTICAS DE FUNCIONES (en memoria)
# ═══════════════════════════════════════════════════════════════════════════

# Estructura: {nombre_funcion: {calls: int, total_time: float, max_time: float}}
_function_stats = defaultdict(lambda: {'calls': 0, 'total_time': 0.0, 'max_time': 0.0})
_stats_lock = threading.Lock()


def _get_route_name(method, path, rule=None):
    """
    Obtiene nombre legible para una ruta.
    Si no está en ROUTE_NAMES devuelve la ruta raw.
    """
    key = f"{method} {path}"
    if key in ROUTE_NAMES:
        return ROUTE_NAMES[key]
    if rule:
        rule_key = f"{method} {rule}"
        if rule_key in ROUTE_NAMES:
            return ROUTE_NAMES[rule_key]
    return key


# ═══════════════════════════════════════════════════════════════════════════
# 1️⃣ PROFILING DE RUTAS (hooks Flask)
# ═══════════════════════════════════════════════════════════════════════════

def log_route_performance(method, path, rule, time_ms, status_code, user=None):
    action_name = _get_route_name(method, path, rule)
    performance_logger.info(
        "%s | %s %s | %s | usuario=%s | %.0f ms",
        action_name, method, path, status_code, user or 'anónimo', time_ms,
    )

    if time_ms >= THRESHOLD_CRITICAL:
        slow_routes_logger.critical(
            "Ruta MUY LENTA: %s (%s %s) %.0f ms (umbral: %d ms)",
            action_name, method, path, time_ms, THRESHOLD_CRITICAL,
        )
    elif time_ms >= THRESHOLD_WARNING:
        slow_routes_logger.warning(
            "Ruta LENTA: %s (%s %s) %.0f ms (umbral: %d ms)",
            action_name, method, path, time_ms, THRESHOLD_WARNING,
        )


def init_profiling(app):
    """
    Inicializa el sistema de profiling en una app Flask.
    Registra hooks before_request y after_request.
    """
    from flask import g, request, session

    @app.before_request
    def _start_timer():
        g.start_time = time.perf_counter()

    @app.after_request
    def _log_request(response):
        if not ENABLE_PROFILING or not hasattr(g, 'start_time'):
            return response

        elapsed = (time.perf_counter() - g.start_time) * 1000  # ms
        rule = str(request.url_rule) if request.url_rule else request.path
        log_route_performance(
            request.method, request.path, rule, elapsed,
            response.status_code, session.get('user_id'),
        )
        return response


# ═══════════════════════════════════════════════════════════════════════════
# 2️⃣ DECORADOR PARA FUNCIONES CLAVE
# ═══════════════════════════════════════════════════════════════════════════

def profile_function(func=None, name=None):
    """
    Decorador para medir rendimiento de funciones críticas.

    Uso:
        @profile_function
        def mi_funcion():
            ...

        @profile_function(name="Crear pedido")
        def create_order():
            ...

    Registra cantidad de llamadas, tiempo promedio y tiempo máximo.
    """
    def decorator(fn):
        func_name = name or fn.__name__

        @wraps(fn)
        def wrapper(*args, **kwargs):
            if not ENABLE_PROFILING:
                return fn(*args, **kwargs)
            start = time.perf_counter()
            try:
                return fn(*args, **kwargs)
            finally:
                elapsed_ms = (time.perf_counter() - start) * 1000

                with _stats_lock:
                    stats = _function_stats[func_name]
                    stats['calls'] += 1
                    stats['total_time'] += elapsed_ms
                    if elapsed_ms > stats['max_time']:
                        stats['max_time'] = elapsed_ms

                if elapsed_ms >= THRESHOLD_WARNING:
                    _log_slow_function_call(func_name, elapsed_ms)

        return wrapper

    # Permitir uso sin paréntesis: @profile_function
    if func is not None:
        return decorator(func)
    return decorator


def _log_slow_function_call(func_name, time_ms):
    if time_ms >= THRESHOLD_CRITICAL:
        slow_functions_logger.critical("Función CRÍTICA: %s %.0f ms", func_name, time_ms)
    else:
        slow_functions_logger.warning("Función LENTA: %s %.0f ms", func_name, time_ms)


# ═══════════════════════════════════════════════════════════════════════════
# 3️⃣ REPORTE DE ESTADÍSTICAS
# ═══════════════════════════════════════════════════════════════════════════

def get_function_stats():
    """
    Obtiene estadísticas de todas las funciones perfiladas.

    Returns:
        dict: {nombre: {calls, avg_time, max_time}}
    """
    with _stats_lock:
        result = {}
        for func_name, stats in _function_stats.items():
            calls = stats['calls']
            avg = stats['total_time'] / calls if calls > 0 else 0
            result[func_name] = {
                'calls': calls,
                'avg_time': round(avg, 2),
                'max_time': round(stats['max_time'], 2)
            }
        return result


def reset_stats():
    """Reinicia todas las estadísticas (útil para testing)"""
    with _stats_lock:
        _function_stats.clear()


__all__ = [
    'ENABLE_PROFILING',
    'set_profiling_enabled',
    'attach_file_handlers',
    'init_profiling',
    'profile_function',
    'get_function_stats',
    'reset_stats',
]
