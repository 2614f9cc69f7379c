# ==============================================================================
# REPOSITORIO DE USUARIOS
# ==============================================================================
# Encapsula todo el acceso a la tabla users.
# La unicidad del email la garantiza la restricción UNIQUE de la tabla.
# ==============================================================================

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mystery_shop.models import User
from mystery_shop.repositories.base import BaseRepository
from mystery_shop.repositories.tables import UserRow


class EmailTakenError(Exception):
    """Violación de la restricción UNIQUE sobre users.email."""

    def __init__(self, email: str):
        super().__init__(email)
        self.email = email


def row_to_user(row: UserRow) -> User:
    return User(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        first_name=row.first_name,
        last_name=row.last_name,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class UserRepository(BaseRepository):
    """Repositorio para gestión de usuarios."""

    def create_user(
        self,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        session: Optional[Session] = None,
    ) -> User:
        """
        Crea un nuevo usuario.

        Raises:
            EmailTakenError: Si el email ya existe
        """
        try:
            with self._session(session) as s:
                row = UserRow(
                    email=email,
                    password_hash=password_hash,
                    first_name=first_name,
                    last_name=last_name,
                )
                s.add(row)
                s.flush()
                return row_to_user(row)
        except IntegrityError as exc:
            raise EmailTakenError(email) from exc

    def get_user(self, user_id: str, session: Optional[Session] = None) -> Optional[User]:
        with self._session(session) as s:
            row = s.get(UserRow, user_id)
            return row_to_user(row) if row is not None else None

    def get_by_email(self, email: str, session: Optional[Session] = None) -> Optional[User]:
        """Búsqueda exacta (distingue mayúsculas)."""
        with self._session(session) as s:
            row = s.execute(select(UserRow).where(UserRow.email == email)).scalar_one_or_none()
            return row_to_user(row) if row is not None else None

    def user_exists(self, user_id: str, session: Optional[Session] = None) -> bool:
        return self.get_user(user_id, session=session) is not None
