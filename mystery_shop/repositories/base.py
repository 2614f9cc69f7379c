# ==============================================================================
# REPOSITORIO BASE - Conexión y transacciones de base de datos
# ==============================================================================
# Database es el ÚNICO punto de acceso a la persistencia.
# Se construye una vez (AppContainer) y se inyecta en cada repositorio.
# No hay locks en memoria: la consistencia la dan las transacciones de BD.
# ==============================================================================

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from mystery_shop.repositories.tables import Base

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignora las foreign keys si no se activan por conexión
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Handle de persistencia: engine + fábrica de sesiones.

    Uso:
        db = Database('sqlite:///mystery_shop.db')
        db.create_all()
        with db.transaction() as session:
            ...
    """

    def __init__(self, url: str, echo: bool = False):
        """
        Args:
            url: URL de SQLAlchemy (sqlite, postgresql, mysql...)
            echo: Si True, loguea cada sentencia SQL
        """
        self.url = url
        self.engine = self._build_engine(url, echo)
        self.session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    @staticmethod
    def _build_engine(url: str, echo: bool) -> Engine:
        if url.startswith('sqlite'):
            kwargs = {'connect_args': {'check_same_thread': False}}
            if url in ('sqlite://', 'sqlite:///:memory:'):
                # Una sola conexión compartida, si no cada sesión vería una BD vacía
                kwargs['poolclass'] = StaticPool
            engine = create_engine(url, echo=echo, **kwargs)
            event.listen(engine, 'connect', _enable_sqlite_foreign_keys)
            return engine
        return create_engine(url, echo=echo, pool_pre_ping=True)

    def create_all(self) -> None:
        """Crea las tablas que no existan."""
        Base.metadata.create_all(self.engine)
        logger.info("Esquema verificado en %s", self.engine.url.render_as_string(hide_password=True))

    def dispose(self) -> None:
        self.engine.dispose()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Abre una sesión dentro de una transacción.
        COMMIT si el bloque termina bien, ROLLBACK ante cualquier excepción.
        """
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


class BaseRepository:
    """
    Clase base para todos los repositorios.

    Cada método público acepta una sesión opcional:
    - Sin sesión: la operación corre en su propia transacción.
    - Con sesión: se une a la transacción del llamador (ej: creación de pedidos).
    """

    def __init__(self, db: Database):
        self.db = db

    @contextmanager
    def _session(self, session: Optional[Session] = None) -> Iterator[Session]:
        if session is not None:
            yield session
            return
        with self.db.transaction() as own_session:
            yield own_session
