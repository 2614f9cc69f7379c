# ==============================================================================
# CONTENEDOR DE DEPENDENCIAS - Inyección de servicios
# ==============================================================================
# Este módulo construye y conecta la base de datos, los repositorios y los
# servicios. Facilita:
#   - Inyección de dependencias (nada de estado global de módulo)
#   - Testing (cada test crea su propio contenedor con su propia BD)
#   - Cambiar de motor de base de datos sin tocar servicios
#
# Uso:
#   container = AppContainer({'DATABASE_URL': 'sqlite:///shop.db'})
#   container.order_service.create_order(...)
# ==============================================================================

from typing import Any, Mapping, Optional

from mystery_shop.config import Config
from mystery_shop.repositories import (
    Database,
    OrderRepository,
    SurpriseBoxRepository,
    UserRepository,
)
from mystery_shop.services import CatalogService, OrderService, UserService


class AppContainer:
    """
    Contenedor de dependencias de la aplicación.

    Cada instancia tiene su propia base de datos; las piezas se crean de forma
    perezosa y se reutilizan dentro del contenedor.
    """

    def __init__(self, settings: Optional[Mapping[str, Any]] = None):
        """
        Args:
            settings: Configuración (DATABASE_URL, SQL_ECHO). Lo que falte se
                      toma de Config.
        """
        settings = dict(settings or {})
        self.database_url = settings.get('DATABASE_URL', Config.DATABASE_URL)
        self.sql_echo = bool(settings.get('SQL_ECHO', Config.SQL_ECHO))

        self._db: Optional[Database] = None

        # Repositorios (lazy loading)
        self._box_repo: Optional[SurpriseBoxRepository] = None
        self._user_repo: Optional[UserRepository] = None
        self._order_repo: Optional[OrderRepository] = None

        # Servicios (lazy loading)
        self._catalog_service: Optional[CatalogService] = None
        self._user_service: Optional[UserService] = None
        self._order_service: Optional[OrderService] = None

    # =========================================================================
    # BASE DE DATOS
    # =========================================================================

    @property
    def db(self) -> Database:
        if self._db is None:
            self._db = Database(self.database_url, echo=self.sql_echo)
        return self._db

    # =========================================================================
    # REPOSITORIOS
    # =========================================================================

    @property
    def box_repo(self) -> SurpriseBoxRepository:
        if self._box_repo is None:
            self._box_repo = SurpriseBoxRepository(self.db)
        return self._box_repo

    @property
    def user_repo(self) -> UserRepository:
        if self._user_repo is None:
            self._user_repo = UserRepository(self.db)
        return self._user_repo

    @property
    def order_repo(self) -> OrderRepository:
        if self._order_repo is None:
            self._order_repo = OrderRepository(self.db)
        return self._order_repo

    # =========================================================================
    # SERVICIOS
    # =========================================================================

    @property
    def catalog_service(self) -> CatalogService:
        if self._catalog_service is None:
            self._catalog_service = CatalogService(self.box_repo)
        return self._catalog_service

    @property
    def user_service(self) -> UserService:
        if self._user_service is None:
            self._user_service = UserService(self.user_repo)
        return self._user_service

    @property
    def order_service(self) -> OrderService:
        if self._order_service is None:
            self._order_service = OrderService(
                self.db,
                self.order_repo,
                self.box_repo,
                self.user_repo,
            )
        return self._order_service

    # =========================================================================
    # UTILIDADES
    # =========================================================================

    def init_schema(self) -> None:
        """Crea las tablas si no existen."""
        self.db.create_all()

    def close(self) -> None:
        """Libera las conexiones y reinicia todas las instancias."""
        if self._db is not None:
            self._db.dispose()
        self._db = None
        self._box_repo = None
        self._user_repo = None
        self._order_repo = None
        self._catalog_service = None
        self._user_service = None
        self._order_service = None
