# ==============================================================================
# CAPA DE MODELOS - Estructuras de datos del sistema
# ==============================================================================
# Este módulo define todas las entidades del dominio usando dataclasses.
# Son independientes de SQLAlchemy: los repositorios convierten filas
# de la base de datos en estas entidades.
# ==============================================================================

from .entities import (
    # Catálogo
    SurpriseBox,
    Category,

    # Usuarios
    User,

    # Pedidos
    Order,
    OrderItem,
    OrderLine,
    OrderStatus,

    # Dinero
    to_money,
)

__all__ = [
    'SurpriseBox',
    'Category',
    'User',
    'Order',
    'OrderItem',
    'OrderLine',
    'OrderStatus',
    'to_money',
]
