# ==============================================================================
# SERVICIO DE PEDIDOS
# ==============================================================================
# Centraliza toda la lógica de negocio de pedidos:
# - Creación de pedidos (ÚNICA función que crea pedidos y descuenta stock)
# - Consultas (todos, por usuario, por ID)
# - Cambio de estado
#
# REGLA CRÍTICA - ATOMICIDAD:
# Validar stock, crear el pedido, crear sus líneas y descontar stock ocurre
# en UNA sola transacción. Si cualquier paso falla se hace ROLLBACK y no
# queda ni pedido, ni líneas, ni stock descontado.
# ==============================================================================

import logging
from decimal import Decimal
from typing import Any, List, Optional, Sequence, Tuple

from mystery_shop.models import Order, OrderLine, OrderStatus, to_money
from mystery_shop.performance_logger import profile_function
from mystery_shop.repositories.interfaces import (
    IOrderRepository,
    ISurpriseBoxRepository,
    ITransactionManager,
    IUserRepository,
)
from mystery_shop.services import validators
from mystery_shop.services.errors import (
    InsufficientStockError,
    NotFoundError,
    ShopError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def parse_order_lines(items: Any) -> List[OrderLine]:
    """
    Convierte la lista recibida [{surpriseBoxId, quantity}, ...] en OrderLine.

    Raises:
        ValidationError: Lista vacía, ID vacío o cantidad no positiva
    """
    if not isinstance(items, (list, tuple)) or not items:
        raise ValidationError('El pedido debe tener al menos un producto')

    lines = []
    for index, item in enumerate(items):
        if isinstance(item, OrderLine):
            box_id, quantity = item.surprise_box_id, item.quantity
        elif isinstance(item, dict):
            box_id, quantity = item.get('surpriseBoxId'), item.get('quantity')
        else:
            raise ValidationError(f'Item {index} inválido')
        lines.append(OrderLine(
            surprise_box_id=validators.require_text(box_id, f'items[{index}].surpriseBoxId'),
            quantity=validators.require_int(quantity, f'items[{index}].quantity', minimum=1),
        ))
    return lines


class OrderService:
    """
    Servicio para gestión de pedidos.

    Responsabilidades:
    - Crear pedidos con validación de stock y descuento atómico
    - Calcular totales con Decimal (nunca float)
    - Listar pedidos (todos o por usuario)
    - Cambiar el estado de un pedido
    """

    def __init__(
        self,
        db: ITransactionManager,
        order_repo: IOrderRepository,
        box_repo: ISurpriseBoxRepository,
        user_repo: IUserRepository,
    ):
        """
        Args:
            db: Handle de base de datos (abre las transacciones)
            order_repo: Repositorio de pedidos
            box_repo: Repositorio de cajas (precio y stock)
            user_repo: Repositorio de usuarios (validar el comprador)
        """
        self.db = db
        self.order_repo = order_repo
        self.box_repo = box_repo
        self.user_repo = user_repo

    # =========================================================================
    # CREACIÓN DE PEDIDOS
    # =========================================================================

    @profile_function(name="Crear pedido")
    def create_order(
        self,
        shipping_address: str,
        items: Sequence[Any],
        user_id: Optional[str] = None,
    ) -> Order:
        """
        Crea un pedido y descuenta el stock de cada caja.

        Pasos (todos dentro de la misma transacción):
        1. Leer cada caja (con bloqueo de fila si el motor lo soporta)
           y validar existencia y stock.
        2. Calcular total = Σ precio × cantidad.
        3. Insertar el pedido (Pending) y sus líneas con el precio leído en 1.
        4. Descontar stock con UPDATE condicional (stock >= cantidad).
           Si alguna fila no se actualiza, el stock cambió desde el paso 1:
           se aborta todo.

        Args:
            shipping_address: Dirección de envío (obligatoria)
            items: [{surpriseBoxId, quantity}, ...] u OrderLine
            user_id: Comprador; None = pedido de invitado

        Returns:
            El pedido persistido con sus líneas

        Raises:
            ValidationError: Datos de entrada inválidos
            NotFoundError: Caja o usuario inexistente
            InsufficientStockError: Stock insuficiente para alguna línea
        """
        shipping_address = validators.require_text(shipping_address, 'shippingAddress')
        lines = parse_order_lines(items)
        if user_id is not None:
            user_id = validators.require_text(user_id, 'userId')

        try:
            with self.db.transaction() as session:
                if user_id is not None and self.user_repo.get_user(user_id, session=session) is None:
                    raise NotFoundError('Usuario', user_id)

                priced_lines = self._price_lines(lines, session)
                total = to_money(sum(
                    (price * quantity for _, quantity, price in priced_lines),
                    Decimal('0'),
                ))

                order = self.order_repo.create_order(
                    session, user_id, total, shipping_address, priced_lines,
                )

                for line in lines:
                    if not self.box_repo.decrement_stock(line.surprise_box_id, line.quantity, session):
                        raise InsufficientStockError(line.surprise_box_id, line.quantity)
        except ShopError as exc:
            logger.warning("Pedido rechazado: %s", exc.message)
            raise
        except Exception:
            logger.exception("Error inesperado al crear pedido")
            raise

        logger.info(
            "Pedido %s creado: %d líneas, total %s, usuario %s",
            order.id, len(order.items), order.total_amount, order.user_id or 'invitado',
        )
        return order

    def _price_lines(self, lines: List[OrderLine], session) -> List[Tuple[str, int, Decimal]]:
        """
        Valida cada línea contra el stock actual y toma la foto del precio.

        Returns:
            Tuplas (box_id, cantidad, precio_unitario)
        """
        priced = []
        for line in lines:
            box = self.box_repo.get_for_update(line.surprise_box_id, session)
            if box is None:
                raise NotFoundError('Caja', line.surprise_box_id)
            if not box.can_fulfill(line.quantity):
                raise InsufficientStockError(box.id, line.quantity, box.stock)
            priced.append((box.id, line.quantity, box.price))
        return priced

    # =========================================================================
    # CONSULTAS
    # =========================================================================

    def list_orders(self) -> List[Order]:
        """Todos los pedidos, de cualquier estado y dueño."""
        return self.order_repo.list_orders()

    def list_user_orders(self, user_id: str) -> List[Order]:
        """Pedidos de un usuario. Los pedidos de invitado no se incluyen."""
        user_id = validators.require_text(user_id, 'userId')
        return self.order_repo.list_by_user(user_id)

    def get_order(self, order_id: str) -> Optional[Order]:
        return self.order_repo.get_order(order_id)

    # =========================================================================
    # ESTADOS
    # =========================================================================

    def update_status(self, order_id: str, status: Any) -> Optional[Order]:
        """
        Cambia el estado de un pedido.

        Returns:
            Pedido actualizado o None si no existe

        Raises:
            ValidationError: Estado inválido
        """
        new_status = validators.require_enum(status, OrderStatus, 'status')
        order = self.order_repo.update_status(order_id, new_status)
        if order is not None:
            logger.info("Pedido %s → %s", order_id, new_status.value)
        return order

