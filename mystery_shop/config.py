# ==============================================================================
# CONFIGURACIÓN
# ==============================================================================
# Todo se lee de variables de entorno con valores por defecto para desarrollo.
#
# Variables:
#   SHOP_DATABASE_URL      URL de SQLAlchemy (default: sqlite:///mystery_shop.db)
#   SHOP_SECRET_KEY        Clave de sesiones Flask (OBLIGATORIA en producción)
#   SHOP_PRODUCTION_MODE   1 = producción
#   SHOP_LOG_LEVEL         DEBUG, INFO, WARNING...
#   SHOP_LOG_DIR           Carpeta para logs de rendimiento (vacío = solo consola)
#   SHOP_ENABLE_PROFILING  1 = medir tiempos de rutas y funciones
#   SHOP_SQL_ECHO          1 = loguear SQL
#   FLASK_HOST / FLASK_PORT / FLASK_DEBUG
# ==============================================================================

import os


def _env_flag(name: str, default: str = '0') -> bool:
    return os.environ.get(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


_DEFAULT_SECRET = "mystery_shop_dev_secret_key_change_in_production"


class Config:
    """Configuración de la aplicación (se carga con app.config.from_object)."""

    PRODUCTION_MODE = _env_flag('SHOP_PRODUCTION_MODE')

    DATABASE_URL = os.environ.get('SHOP_DATABASE_URL', 'sqlite:///mystery_shop.db')
    SQL_ECHO = _env_flag('SHOP_SQL_ECHO')

    SECRET_KEY = os.environ.get('SHOP_SECRET_KEY') or _DEFAULT_SECRET
    SECRET_KEY_FROM_ENV = bool(os.environ.get('SHOP_SECRET_KEY'))

    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    PERMANENT_SESSION_LIFETIME = 86400  # 24 horas

    LOG_LEVEL = os.environ.get('SHOP_LOG_LEVEL', 'INFO').upper()
    LOG_DIR = os.environ.get('SHOP_LOG_DIR', '')

    ENABLE_PROFILING = _env_flag('SHOP_ENABLE_PROFILING', '1')

    # Crear tablas al arrancar la app
    AUTO_CREATE_SCHEMA = _env_flag('SHOP_AUTO_CREATE_SCHEMA', '1')

    HOST = os.environ.get('FLASK_HOST', '0.0.0.0')
    PORT = int(os.environ.get('FLASK_PORT', 5000))
    DEBUG = _env_flag('FLASK_DEBUG')
