# ==============================================================================
# SERVICIO DE CATÁLOGO
# ==============================================================================
# Centraliza la lógica de negocio de las cajas sorpresa: alta, listado con
# filtros, edición parcial y baja. Las validaciones viven AQUÍ, no en rutas.
# ==============================================================================

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError

from mystery_shop.models import Category, SurpriseBox
from mystery_shop.repositories.interfaces import ISurpriseBoxRepository
from mystery_shop.services import validators
from mystery_shop.services.errors import ConflictError, ValidationError

logger = logging.getLogger(__name__)


# Nombre en la API (camelCase) → (columna, validador)
BOX_FIELDS: Dict[str, tuple] = {
    'name': ('name', lambda v: validators.require_text(v, 'name')),
    'tagline': ('tagline', lambda v: validators.require_text(v, 'tagline')),
    'description': ('description', lambda v: validators.require_text(v, 'description')),
    'price': ('price', lambda v: validators.require_price(v, 'price')),
    'imageUrl': ('image_url', lambda v: validators.require_url(v, 'imageUrl')),
    'category': ('category', lambda v: validators.require_enum(v, Category, 'category')),
    'contentsDescription': (
        'contents_description',
        lambda v: validators.require_text(v, 'contentsDescription'),
    ),
    'stock': ('stock', lambda v: validators.require_int(v, 'stock', minimum=0)),
    'isActive': ('is_active', lambda v: validators.require_bool(v, 'isActive')),
}

REQUIRED_ON_CREATE = (
    'name', 'tagline', 'description', 'price', 'imageUrl',
    'category', 'contentsDescription', 'stock',
)


class CatalogService:
    """
    Servicio para gestión del catálogo.

    Responsabilidades:
    - Alta de cajas con validación completa
    - Listado con filtros (categoría, búsqueda, solo activas)
    - Edición parcial (solo los campos enviados)
    - Baja idempotente
    """

    def __init__(self, box_repo: ISurpriseBoxRepository):
        """
        Args:
            box_repo: Repositorio de cajas
        """
        self.box_repo = box_repo

    # =========================================================================
    # VALIDACIÓN
    # =========================================================================

    def _validate_fields(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Valida los campos enviados y los traduce a nombres de columna.

        Raises:
            ValidationError: Campo desconocido o valor inválido
        """
        unknown = sorted(set(data) - set(BOX_FIELDS))
        if unknown:
            raise ValidationError(f"Campos desconocidos: {', '.join(unknown)}")

        clean = {}
        for api_name, value in data.items():
            column, validate = BOX_FIELDS[api_name]
            clean[column] = validate(value)
        return clean

    # =========================================================================
    # OPERACIONES
    # =========================================================================

    def create_box(self, data: Dict[str, Any]) -> SurpriseBox:
        """
        Crea una caja sorpresa.

        Args:
            data: Campos en formato API (name, tagline, price, imageUrl...).
                  isActive es opcional (por defecto True).

        Returns:
            La caja creada
        """
        missing = [name for name in REQUIRED_ON_CREATE if name not in data]
        if missing:
            raise ValidationError(f"Faltan campos obligatorios: {', '.join(missing)}")

        clean = self._validate_fields(data)
        clean.setdefault('is_active', True)

        box = self.box_repo.create(clean)
        logger.info("Caja creada %s (%s) stock=%d", box.id, box.name, box.stock)
        return box

    def list_boxes(
        self,
        category: Any = None,
        search: Optional[str] = None,
        active_only: bool = True,
    ) -> List[SurpriseBox]:
        """
        Lista cajas del catálogo.

        Args:
            category: Categoría exacta (opcional)
            search: Texto a buscar en name/tagline/description (opcional)
            active_only: Solo activas (por defecto True)
        """
        if category is not None:
            category = validators.require_enum(category, Category, 'category')
        if search is not None and not isinstance(search, str):
            raise ValidationError('El campo search debe ser texto')
        active_only = validators.require_bool(active_only, 'activeOnly')

        return self.box_repo.list(category=category, search=search or None, active_only=active_only)

    def get_box(self, box_id: str) -> Optional[SurpriseBox]:
        """Obtiene una caja por ID o None si no existe."""
        return self.box_repo.get_by_id(box_id)

    def update_box(self, box_id: str, data: Dict[str, Any]) -> Optional[SurpriseBox]:
        """
        Actualiza solo los campos enviados.

        Returns:
            La caja actualizada o None si el ID no existe

        Raises:
            ValidationError: Sin campos para actualizar o valores inválidos
        """
        if not data:
            raise ValidationError('No se indicaron campos para actualizar')

        clean = self._validate_fields(data)
        box = self.box_repo.update(box_id, clean)
        if box is None:
            logger.info("Edición ignorada: caja %s no existe", box_id)
        else:
            logger.info("Caja %s actualizada: %s", box_id, ', '.join(sorted(clean)))
        return box

    def delete_box(self, box_id: str) -> bool:
        """
        Elimina una caja.

        Returns:
            True si se eliminó, False si no existía

        Raises:
            ConflictError: Si hay pedidos que referencian la caja
        """
        if self.box_repo.has_order_items(box_id):
            raise ConflictError(f'La caja {box_id} tiene pedidos asociados y no puede eliminarse')
        try:
            removed = self.box_repo.delete(box_id)
        except IntegrityError as exc:
            # Un pedido la referenció entre la verificación y el DELETE
            raise ConflictError(
                f'La caja {box_id} tiene pedidos asociados y no puede eliminarse'
            ) from exc
        if removed:
            logger.info("Caja %s eliminada", box_id)
        return removed
