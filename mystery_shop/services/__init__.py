# ==============================================================================
# CAPA DE SERVICIOS - Lógica de negocio
# ==============================================================================
# Esta capa contiene TODA la lógica de negocio de la aplicación.
#
# PRINCIPIOS:
# 1. Los servicios orquestan operaciones entre repositorios
# 2. Aplican reglas de negocio y validaciones
# 3. Las rutas (controllers) solo llaman a servicios
# 4. Los errores se comunican con excepciones de services/errors.py
#
# ESTRUCTURA:
# ├── catalog_service.py → Cajas sorpresa (alta, filtros, edición, baja)
# ├── user_service.py    → Registro y login
# ├── order_service.py   → Pedidos (creación atómica, consultas, estados)
# ├── validators.py      → Validación de entrada
# └── errors.py          → Taxonomía de errores
# ==============================================================================

from mystery_shop.services.errors import (
    ShopError,
    ValidationError,
    NotFoundError,
    InsufficientStockError,
    DuplicateEmailError,
    ConflictError,
)
from mystery_shop.services.catalog_service import CatalogService
from mystery_shop.services.user_service import UserService
from mystery_shop.services.order_service import OrderService

__all__ = [
    'CatalogService',
    'UserService',
    'OrderService',
    'ShopError',
    'ValidationError',
    'NotFoundError',
    'InsufficientStockError',
    'DuplicateEmailError',
    'ConflictError',
]
