# ==============================================================================
# ENTIDADES DEL DOMINIO - Definiciones de dataclasses
# ==============================================================================
# Cada entidad representa un concepto del negocio.
# Diseñadas para ser independientes del mecanismo de persistencia.
# Los montos se manejan SIEMPRE como Decimal con 2 decimales.
# ==============================================================================

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, List, Optional


CENTS = Decimal('0.01')


def to_money(value: Any) -> Decimal:
    """Convierte un valor a Decimal con 2 decimales (punto fijo)."""
    if isinstance(value, Decimal):
        amount = value
    else:
        # str() evita arrastrar el error binario de un float (29.99 -> 29.989999...)
        amount = Decimal(str(value))
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


# ==============================================================================
# ENUMERACIONES - Estados y tipos válidos
# ==============================================================================

class Category(str, Enum):
    """Categorías de cajas sorpresa."""
    HARDWARE = "Hardware"
    SOFTWARE = "Software"
    BOOKS = "Books"
    GADGETS = "Gadgets"
    APPAREL = "Apparel"
    PRODUCTIVITY = "Productivity"


class OrderStatus(str, Enum):
    """Estados posibles de un pedido."""
    PENDING = "Pending"          # Recién creado
    PROCESSING = "Processing"    # En preparación
    SHIPPED = "Shipped"          # Enviado
    DELIVERED = "Delivered"      # Entregado al cliente
    CANCELLED = "Cancelled"      # Pedido anulado


# ==============================================================================
# CATÁLOGO
# ==============================================================================

@dataclass
class SurpriseBox:
    """
    Caja sorpresa (producto del catálogo).

    Attributes:
        id: Identificador único (UUID)
        name: Nombre comercial
        tagline: Frase corta de venta
        description: Descripción larga
        price: Precio unitario (Decimal, siempre > 0)
        image_url: URL de la imagen
        category: Categoría del catálogo
        contents_description: Qué puede traer la caja
        stock: Unidades disponibles (nunca negativo)
        is_active: Si aparece en el listado por defecto
    """
    id: str
    name: str
    tagline: str
    description: str
    price: Decimal
    image_url: str
    category: Category
    contents_description: str
    stock: int
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def can_fulfill(self, quantity: int) -> bool:
        """Verifica si hay stock suficiente para la cantidad pedida."""
        return self.stock >= quantity

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para la respuesta JSON."""
        return {
            'id': self.id,
            'name': self.name,
            'tagline': self.tagline,
            'description': self.description,
            'price': str(to_money(self.price)),
            'imageUrl': self.image_url,
            'category': self.category.value,
            'contentsDescription': self.contents_description,
            'stock': self.stock,
            'isActive': self.is_active,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }


# ==============================================================================
# USUARIOS
# ==============================================================================

@dataclass
class User:
    """
    Cuenta de cliente.

    Attributes:
        password_hash: Hash de la contraseña (nunca almacenar en texto plano)
    """
    id: str
    email: str
    password_hash: str
    first_name: str
    last_name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario. El hash NUNCA sale del backend."""
        return {
            'id': self.id,
            'email': self.email,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }


# ==============================================================================
# PEDIDOS
# ==============================================================================

@dataclass
class OrderLine:
    """Línea solicitada por el cliente (entrada del pedido, aún sin precio)."""
    surprise_box_id: str
    quantity: int


@dataclass
class OrderItem:
    """
    Línea de un pedido ya persistido.
    El precio es una foto del precio del producto al momento de la compra.
    """
    id: str
    order_id: str
    surprise_box_id: str
    quantity: int
    price_at_purchase: Decimal
    created_at: Optional[datetime] = None

    @property
    def line_total(self) -> Decimal:
        return to_money(self.price_at_purchase * self.quantity)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'orderId': self.order_id,
            'surpriseBoxId': self.surprise_box_id,
            'quantity': self.quantity,
            'priceAtPurchase': str(to_money(self.price_at_purchase)),
            'createdAt': _iso(self.created_at),
        }


@dataclass
class Order:
    """
    Pedido de un cliente o de un invitado.

    Attributes:
        user_id: Dueño del pedido; None = pedido de invitado
        total_amount: Calculado en el backend, nunca enviado por el cliente
        items: Líneas del pedido
    """
    id: str
    user_id: Optional[str]
    status: OrderStatus
    total_amount: Decimal
    shipping_address: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[OrderItem] = field(default_factory=list)

    @property
    def is_guest(self) -> bool:
        return self.user_id is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'userId': self.user_id,
            'status': self.status.value,
            'totalAmount': str(to_money(self.total_amount)),
            'shippingAddress': self.shipping_address,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
            'items': [item.to_dict() for item in self.items],
        }
