# ==============================================================================
# VALIDADORES DE ENTRADA
# ==============================================================================
# Se ejecutan en los servicios ANTES de tocar la base de datos.
# Cada función devuelve el valor normalizado o lanza ValidationError.
# ==============================================================================

import re
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Type, TypeVar
from urllib.parse import urlparse

from mystery_shop.models import to_money
from mystery_shop.services.errors import ValidationError


EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$")
MIN_PASSWORD_LENGTH = 8

# NUMERIC(10, 2): 8 dígitos enteros como máximo
MAX_PRICE = Decimal('99999999.99')

# Columnas Integer: rango de 32 bits con signo
MAX_INT = 2 ** 31 - 1

E = TypeVar('E', bound=Enum)


def require_text(value: Any, field_name: str) -> str:
    """Texto obligatorio, no vacío."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f'El campo {field_name} es obligatorio')
    return value


def require_email(value: Any) -> str:
    email = require_text(value, 'email')
    if not EMAIL_PATTERN.match(email):
        raise ValidationError(f'Email inválido: {email}')
    return email


def require_password(value: Any) -> str:
    if not isinstance(value, str) or len(value) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f'La contraseña debe tener al menos {MIN_PASSWORD_LENGTH} caracteres'
        )
    return value


def require_url(value: Any, field_name: str) -> str:
    url = require_text(value, field_name)
    parsed = urlparse(url)
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        raise ValidationError(f'El campo {field_name} debe ser una URL válida')
    return url


def require_price(value: Any, field_name: str = 'price') -> Decimal:
    """Precio positivo, convertido a Decimal con 2 decimales."""
    if isinstance(value, bool) or value is None:
        raise ValidationError(f'El campo {field_name} debe ser un número')
    try:
        price = to_money(value)
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f'El campo {field_name} debe ser un número')
    if not price.is_finite() or price <= 0:
        raise ValidationError(f'El campo {field_name} debe ser positivo')
    if price > MAX_PRICE:
        raise ValidationError(f'El campo {field_name} excede el máximo permitido')
    return price


def require_int(value: Any, field_name: str, minimum: int, maximum: int = MAX_INT) -> int:
    """Entero entre minimum y maximum. Los booleanos no cuentan como enteros."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f'El campo {field_name} debe ser un entero')
    if value < minimum:
        raise ValidationError(f'El campo {field_name} debe ser mayor o igual a {minimum}')
    if value > maximum:
        raise ValidationError(f'El campo {field_name} excede el máximo permitido ({maximum})')
    return value


def require_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f'El campo {field_name} debe ser booleano')
    return value


def require_enum(value: Any, enum_cls: Type[E], field_name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        valid = ', '.join(member.value for member in enum_cls)
        raise ValidationError(f'Valor inválido para {field_name}: {value!r} (válidos: {valid})')
