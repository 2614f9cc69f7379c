# ==============================================================================
# CAPA DE REPOSITORIOS - Acceso a datos
# ==============================================================================
# Esta capa encapsula todo el acceso a la base de datos (SQLAlchemy).
# Los servicios solo ven entidades de mystery_shop.models.
#
# ESTRUCTURA:
# ├── interfaces.py         → Protocolos (contratos)
# ├── base.py               → Database (engine + transacciones) y BaseRepository
# ├── tables.py             → Esquema: products, users, orders, order_items
# ├── box_repository.py     → Catálogo de cajas sorpresa
# ├── user_repository.py    → Usuarios
# └── order_repository.py   → Pedidos y líneas
# ==============================================================================

from mystery_shop.repositories.interfaces import (
    ITransactionManager,
    ISurpriseBoxRepository,
    IUserRepository,
    IOrderRepository,
)

from mystery_shop.repositories.base import BaseRepository, Database
from mystery_shop.repositories.box_repository import SurpriseBoxRepository
from mystery_shop.repositories.user_repository import EmailTakenError, UserRepository
from mystery_shop.repositories.order_repository import OrderRepository

__all__ = [
    # Interfaces
    'ITransactionManager',
    'ISurpriseBoxRepository',
    'IUserRepository',
    'IOrderRepository',

    # Base
    'BaseRepository',
    'Database',

    # Implementaciones SQLAlchemy
    'SurpriseBoxRepository',
    'UserRepository',
    'EmailTakenError',
    'OrderRepository',
]
