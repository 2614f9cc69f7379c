# ==============================================================================
# ERRORES DE NEGOCIO
# ==============================================================================
# Todas las operaciones de los servicios fallan con una de estas excepciones.
# La capa web las traduce a JSON con el código HTTP de cada clase.
# ==============================================================================


class ShopError(Exception):
    """Excepción base de la tienda."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {
            'ok': False,
            'error': self.message,
            'code': type(self).__name__,
        }


class ValidationError(ShopError):
    """Entrada mal formada (texto vacío, precio o cantidad no positivos, enum inválido)."""

    status_code = 400


class NotFoundError(ShopError):
    """La entidad referenciada no existe."""

    status_code = 404

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f'{entity} {entity_id} no encontrado')
        self.entity = entity
        self.entity_id = entity_id


class InsufficientStockError(ShopError):
    """La cantidad pedida supera el stock disponible."""

    status_code = 409

    def __init__(self, box_id: str, requested: int, available: int = None):
        if available is None:
            message = f'Stock insuficiente para la caja {box_id}. Solicitado: {requested}'
        else:
            message = (
                f'Stock insuficiente para la caja {box_id}. '
                f'Solicitado: {requested}, Disponible: {available}'
            )
        super().__init__(message)
        self.box_id = box_id
        self.requested = requested
        self.available = available


class DuplicateEmailError(ShopError):
    """Ya existe un usuario con ese email."""

    status_code = 409

    def __init__(self, email: str):
        super().__init__(f'El email {email} ya está registrado')
        self.email = email


class ConflictError(ShopError):
    """La operación choca con datos existentes (ej: caja con pedidos asociados)."""

    status_code = 409
