# ==============================================================================
# INTERFACES DE REPOSITORIOS
# ==============================================================================
#
# Contratos que deben cumplir los repositorios. Los servicios dependen de
# estas interfaces, NO de las implementaciones SQLAlchemy. Así:
#
# 1. Se puede cambiar de motor (SQLite → PostgreSQL) sin tocar servicios
# 2. Los tests pueden inyectar repositorios falsos
#
# ==============================================================================

from decimal import Decimal
from typing import Any, ContextManager, Dict, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from sqlalchemy.orm import Session

from mystery_shop.models import Category, Order, OrderStatus, SurpriseBox, User


@runtime_checkable
class ITransactionManager(Protocol):
    """Abre transacciones todo-o-nada."""

    def transaction(self) -> ContextManager[Session]:
        ...


@runtime_checkable
class ISurpriseBoxRepository(Protocol):

    def create(self, data: Dict[str, Any], session: Optional[Session] = None) -> SurpriseBox:
        """Inserta una caja."""
        ...

    def get_by_id(self, box_id: str, session: Optional[Session] = None) -> Optional[SurpriseBox]:
        """Obtiene una caja por ID."""
        ...

    def get_for_update(self, box_id: str, session: Session) -> Optional[SurpriseBox]:
        """Obtiene una caja bloqueando su fila."""
        ...

    def list(
        self,
        category: Optional[Category] = None,
        search: Optional[str] = None,
        active_only: bool = True,
        session: Optional[Session] = None,
    ) -> List[SurpriseBox]:
        """Lista cajas filtradas."""
        ...

    def update(self, box_id: str, fields: Dict[str, Any], session: Optional[Session] = None) -> Optional[SurpriseBox]:
        """Actualización parcial."""
        ...

    def delete(self, box_id: str, session: Optional[Session] = None) -> bool:
        """Elimina una caja."""
        ...

    def has_order_items(self, box_id: str, session: Optional[Session] = None) -> bool:
        ...

    def decrement_stock(self, box_id: str, quantity: int, session: Session) -> bool:
        """Descuento atómico condicional."""
        ...


@runtime_checkable
class IUserRepository(Protocol):

    def create_user(
        self,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        session: Optional[Session] = None,
    ) -> User:
        """Crea un usuario. Lanza EmailTakenError si el email existe."""
        ...

    def get_user(self, user_id: str, session: Optional[Session] = None) -> Optional[User]:
        ...

    def get_by_email(self, email: str, session: Optional[Session] = None) -> Optional[User]:
        ...


@runtime_checkable
class IOrderRepository(Protocol):

    def create_order(
        self,
        session: Session,
        user_id: Optional[str],
        total_amount: Decimal,
        shipping_address: str,
        lines: Sequence[Tuple[str, int, Decimal]],
    ) -> Order:
        """Inserta pedido + líneas dentro de la transacción del llamador."""
        ...

    def get_order(self, order_id: str, session: Optional[Session] = None) -> Optional[Order]:
        ...

    def list_orders(self, session: Optional[Session] = None) -> List[Order]:
        ...

    def list_by_user(self, user_id: str, session: Optional[Session] = None) -> List[Order]:
        ...

    def update_status(self, order_id: str, status: OrderStatus, session: Optional[Session] = None) -> Optional[Order]:
        ...
