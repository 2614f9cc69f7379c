# ==============================================================================
# MYSTERY SHOP - Tienda de cajas sorpresa
# ==============================================================================
# Estructura:
#   main.py            → Aplicación Flask (endpoints JSON)
#   app_container.py   → Contenedor de dependencias
#   config.py          → Configuración por variables de entorno
#   models/            → Entidades del dominio (dataclasses)
#   repositories/      → Acceso a datos (SQLAlchemy)
#   services/          → Lógica de negocio
# ==============================================================================

__version__ = '1.0.0'
