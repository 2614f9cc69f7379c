# ==============================================================================
# SERVICIO DE USUARIOS
# ==============================================================================
# Registro y autenticación de clientes.
#
# - Las contraseñas se guardan SIEMPRE como hash (Werkzeug, scrypt con salt).
# - El login nunca revela si falló el email o la contraseña: ambos casos
#   devuelven None.
# ==============================================================================

import logging
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from mystery_shop.models import User
from mystery_shop.repositories.interfaces import IUserRepository
from mystery_shop.repositories.user_repository import EmailTakenError
from mystery_shop.services import validators
from mystery_shop.services.errors import DuplicateEmailError

logger = logging.getLogger(__name__)


class UserService:
    """
    Servicio para gestión de usuarios.

    Responsabilidades:
    - Registro con validación y hash de contraseña
    - Autenticación (email + contraseña)
    """

    def __init__(self, user_repo: IUserRepository):
        self.user_repo = user_repo

    # =========================================================================
    # REGISTRO
    # =========================================================================

    def register(self, email: str, password: str, first_name: str, last_name: str) -> User:
        """
        Registra un usuario nuevo.

        Args:
            email: Email único
            password: Contraseña en texto plano (mínimo 8 caracteres)
            first_name: Nombre
            last_name: Apellido

        Returns:
            El usuario creado

        Raises:
            ValidationError: Datos inválidos
            DuplicateEmailError: El email ya está registrado
        """
        email = validators.require_email(email)
        password = validators.require_password(password)
        first_name = validators.require_text(first_name, 'firstName')
        last_name = validators.require_text(last_name, 'lastName')

        password_hash = generate_password_hash(password)

        try:
            user = self.user_repo.create_user(email, password_hash, first_name, last_name)
        except EmailTakenError as exc:
            logger.warning("Registro rechazado: email duplicado %s", email)
            raise DuplicateEmailError(email) from exc

        logger.info("Usuario registrado %s (%s)", user.id, user.email)
        return user

    # =========================================================================
    # AUTENTICACIÓN
    # =========================================================================

    def authenticate(self, email: str, password: str) -> Optional[User]:
        """
        Autentica un usuario.

        Args:
            email: Email exacto (distingue mayúsculas)
            password: Contraseña en texto plano

        Returns:
            El usuario si las credenciales son válidas, None si no
        """
        if not isinstance(email, str) or not isinstance(password, str):
            return None

        user = self.user_repo.get_by_email(email)
        if user is None:
            return None

        if not check_password_hash(user.password_hash, password):
            return None

        return user

    def get_user(self, user_id: str) -> Optional[User]:
        """Obtiene un usuario por ID."""
        return self.user_repo.get_user(user_id)
