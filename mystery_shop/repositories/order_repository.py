# ==============================================================================
# REPOSITORIO DE PEDIDOS
# ==============================================================================
# Encapsula el acceso a las tablas orders y order_items.
# Un pedido y sus líneas se crean SIEMPRE en la misma sesión (transacción).
# ==============================================================================

from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from mystery_shop.models import Order, OrderItem, OrderStatus, to_money
from mystery_shop.repositories.base import BaseRepository
from mystery_shop.repositories.tables import OrderItemRow, OrderRow, utcnow


def row_to_item(row: OrderItemRow) -> OrderItem:
    return OrderItem(
        id=row.id,
        order_id=row.order_id,
        surprise_box_id=row.product_id,
        quantity=row.quantity,
        price_at_purchase=to_money(row.price_at_purchase),
        created_at=row.created_at,
    )


def row_to_order(row: OrderRow) -> Order:
    return Order(
        id=row.id,
        user_id=row.user_id,
        status=row.status,
        total_amount=to_money(row.total_amount),
        shipping_address=row.shipping_address,
        created_at=row.created_at,
        updated_at=row.updated_at,
        items=[row_to_item(item) for item in row.items],
    )


class OrderRepository(BaseRepository):
    """Repositorio para pedidos y sus líneas."""

    def create_order(
        self,
        session: Session,
        user_id: Optional[str],
        total_amount: Decimal,
        shipping_address: str,
        lines: Sequence[Tuple[str, int, Decimal]],
    ) -> Order:
        """
        Inserta un pedido Pending con sus líneas.
        Requiere la sesión del llamador: no hace commit.

        Args:
            session: Transacción abierta del motor de pedidos
            user_id: Dueño del pedido o None (invitado)
            total_amount: Total ya calculado
            shipping_address: Dirección de envío
            lines: Tuplas (box_id, cantidad, precio_al_comprar)
        """
        row = OrderRow(
            user_id=user_id,
            status=OrderStatus.PENDING,
            total_amount=total_amount,
            shipping_address=shipping_address,
        )
        for box_id, quantity, price in lines:
            row.items.append(OrderItemRow(
                product_id=box_id,
                quantity=quantity,
                price_at_purchase=price,
            ))
        session.add(row)
        session.flush()
        return row_to_order(row)

    def get_order(self, order_id: str, session: Optional[Session] = None) -> Optional[Order]:
        with self._session(session) as s:
            stmt = (
                select(OrderRow)
                .where(OrderRow.id == order_id)
                .options(selectinload(OrderRow.items))
            )
            row = s.execute(stmt).scalar_one_or_none()
            return row_to_order(row) if row is not None else None

    def list_orders(self, session: Optional[Session] = None) -> List[Order]:
        """Todos los pedidos, más recientes primero."""
        stmt = (
            select(OrderRow)
            .options(selectinload(OrderRow.items))
            .order_by(OrderRow.created_at.desc())
        )
        with self._session(session) as s:
            return [row_to_order(row) for row in s.execute(stmt).scalars()]

    def list_by_user(self, user_id: str, session: Optional[Session] = None) -> List[Order]:
        """Pedidos de un usuario. Los de invitado (user_id NULL) nunca coinciden."""
        stmt = (
            select(OrderRow)
            .where(OrderRow.user_id == user_id)
            .options(selectinload(OrderRow.items))
            .order_by(OrderRow.created_at.desc())
        )
        with self._session(session) as s:
            return [row_to_order(row) for row in s.execute(stmt).scalars()]

    def update_status(
        self,
        order_id: str,
        status: OrderStatus,
        session: Optional[Session] = None,
    ) -> Optional[Order]:
        """
        Cambia el estado de un pedido.

        Returns:
            Pedido actualizado o None si no existe
        """
        with self._session(session) as s:
            row = s.get(OrderRow, order_id)
            if row is None:
                return None
            row.status = status
            row.updated_at = utcnow()
            s.flush()
            return row_to_order(row)

    def count_orders(self, session: Optional[Session] = None) -> int:
        with self._session(session) as s:
            return s.execute(select(func.count()).select_from(OrderRow)).scalar_one()

    def count_items(self, session: Optional[Session] = None) -> int:
        with self._session(session) as s:
            return s.execute(select(func.count()).select_from(OrderItemRow)).scalar_one()
