# ==============================================================================
# REPOSITORIO DE CAJAS SORPRESA
# ==============================================================================
# Encapsula todo el acceso a la tabla products.
# Devuelve entidades SurpriseBox, nunca filas de SQLAlchemy.
# ==============================================================================

from typing import Any, Dict, List, Optional

from sqlalchemy import and_, delete, exists, or_, select, update
from sqlalchemy.orm import Session

from mystery_shop.models import Category, SurpriseBox, to_money
from mystery_shop.repositories.base import BaseRepository
from mystery_shop.repositories.tables import OrderItemRow, SurpriseBoxRow, utcnow


# Columnas que se pueden modificar con update_box
UPDATABLE_FIELDS = frozenset([
    'name',
    'tagline',
    'description',
    'price',
    'image_url',
    'category',
    'contents_description',
    'stock',
    'is_active',
])


def row_to_box(row: SurpriseBoxRow) -> SurpriseBox:
    return SurpriseBox(
        id=row.id,
        name=row.name,
        tagline=row.tagline,
        description=row.description,
        price=to_money(row.price),
        image_url=row.image_url,
        category=row.category,
        contents_description=row.contents_description,
        stock=row.stock,
        is_active=row.is_active,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SurpriseBoxRepository(BaseRepository):
    """Repositorio para el catálogo de cajas sorpresa."""

    def create(self, data: Dict[str, Any], session: Optional[Session] = None) -> SurpriseBox:
        """
        Inserta una caja nueva.

        Args:
            data: Campos ya validados (nombres de columna)

        Returns:
            La caja persistida, con id y timestamps
        """
        with self._session(session) as s:
            row = SurpriseBoxRow(**data)
            s.add(row)
            s.flush()
            return row_to_box(row)

    def get_by_id(self, box_id: str, session: Optional[Session] = None) -> Optional[SurpriseBox]:
        with self._session(session) as s:
            row = s.get(SurpriseBoxRow, box_id)
            return row_to_box(row) if row is not None else None

    def get_for_update(self, box_id: str, session: Session) -> Optional[SurpriseBox]:
        """
        Lee una caja bloqueando su fila hasta el fin de la transacción.
        En motores sin SELECT ... FOR UPDATE (SQLite) es una lectura normal.
        """
        stmt = select(SurpriseBoxRow).where(SurpriseBoxRow.id == box_id).with_for_update()
        row = session.execute(stmt).scalar_one_or_none()
        return row_to_box(row) if row is not None else None

    def list(
        self,
        category: Optional[Category] = None,
        search: Optional[str] = None,
        active_only: bool = True,
        session: Optional[Session] = None,
    ) -> List[SurpriseBox]:
        """
        Lista cajas aplicando los filtros indicados (combinados con AND).

        Args:
            category: Igualdad exacta de categoría
            search: Subcadena sin distinguir mayúsculas en name/tagline/description
            active_only: Solo cajas activas
        """
        conditions = []
        if active_only:
            conditions.append(SurpriseBoxRow.is_active.is_(True))
        if category is not None:
            conditions.append(SurpriseBoxRow.category == category)
        if search:
            conditions.append(or_(
                SurpriseBoxRow.name.icontains(search, autoescape=True),
                SurpriseBoxRow.tagline.icontains(search, autoescape=True),
                SurpriseBoxRow.description.icontains(search, autoescape=True),
            ))

        stmt = select(SurpriseBoxRow)
        if conditions:
            stmt = stmt.where(and_(*conditions))
        stmt = stmt.order_by(SurpriseBoxRow.created_at, SurpriseBoxRow.name)

        with self._session(session) as s:
            return [row_to_box(row) for row in s.execute(stmt).scalars()]

    def update(
        self,
        box_id: str,
        fields: Dict[str, Any],
        session: Optional[Session] = None,
    ) -> Optional[SurpriseBox]:
        """
        Actualiza solo los campos indicados y refresca updated_at.

        Returns:
            La caja actualizada o None si no existe
        """
        with self._session(session) as s:
            row = s.get(SurpriseBoxRow, box_id)
            if row is None:
                return None
            for name, value in fields.items():
                setattr(row, name, value)
            row.updated_at = utcnow()
            s.flush()
            return row_to_box(row)

    def delete(self, box_id: str, session: Optional[Session] = None) -> bool:
        """
        Elimina una caja.

        Returns:
            True si se eliminó, False si no existía
        """
        with self._session(session) as s:
            result = s.execute(delete(SurpriseBoxRow).where(SurpriseBoxRow.id == box_id))
            return result.rowcount > 0

    def has_order_items(self, box_id: str, session: Optional[Session] = None) -> bool:
        """Verifica si alguna línea de pedido referencia a la caja."""
        with self._session(session) as s:
            stmt = select(exists().where(OrderItemRow.product_id == box_id))
            return bool(s.execute(stmt).scalar())

    def decrement_stock(self, box_id: str, quantity: int, session: Session) -> bool:
        """
        Descuenta stock de forma atómica y condicional:
        UPDATE ... SET stock = stock - q WHERE id = ? AND stock >= q

        Returns:
            True si se descontó, False si el stock ya no alcanzaba
        """
        stmt = (
            update(SurpriseBoxRow)
            .where(SurpriseBoxRow.id == box_id, SurpriseBoxRow.stock >= quantity)
            .values(stock=SurpriseBoxRow.stock - quantity, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = session.execute(stmt)
        return result.rowcount == 1
