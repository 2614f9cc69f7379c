# ==============================================================================
# APLICACIÓN FLASK - Endpoints JSON de la tienda
# ==============================================================================
# Cada procedimiento de la API es un endpoint /api/<procedimiento>:
#   - Consultas  → GET  (parámetros en el query string)
#   - Mutaciones → POST (cuerpo JSON)
#
# Las rutas SOLO orquestan request → servicio → response.
# Toda la lógica de negocio está en services/.
# ==============================================================================

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

import click
from flask import Flask, current_app, jsonify, request, session
from werkzeug.exceptions import BadRequest, HTTPException

from mystery_shop.app_container import AppContainer
from mystery_shop.config import Config
from mystery_shop.performance_logger import (
    attach_file_handlers,
    get_function_stats,
    init_profiling,
    set_profiling_enabled,
)
from mystery_shop.services import ShopError, ValidationError

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# LOGGING
# ═══════════════════════════════════════════════════════════════════════════════

def configure_logging(level: str = 'INFO', log_dir: str = '') -> None:
    """Configura el logger raíz del paquete (consola + archivos opcionales)."""
    package_logger = logging.getLogger('mystery_shop')
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not any(getattr(h, '_mystery_shop_console', False) for h in package_logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
        ))
        handler._mystery_shop_console = True
        package_logger.addHandler(handler)

    if log_dir:
        attach_file_handlers(log_dir)


# ═══════════════════════════════════════════════════════════════════════════════
# HELPERS DE REQUEST / RESPONSE
# ═══════════════════════════════════════════════════════════════════════════════

def _container() -> AppContainer:
    return current_app.extensions['mystery_shop']


def _json_body() -> Dict[str, Any]:
    """Cuerpo JSON de la petición; debe ser un objeto."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('El cuerpo debe ser un objeto JSON')
    return data


def _query_bool(name: str, default: bool) -> bool:
    raw = request.args.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in ('1', 'true', 'yes'):
        return True
    if value in ('0', 'false', 'no'):
        return False
    raise ValidationError(f'El parámetro {name} debe ser true o false')


def _required_arg(name: str) -> str:
    value = request.args.get(name)
    if not value:
        raise ValidationError(f'Falta el parámetro {name}')
    return value


def _dump(entity) -> Any:
    """Serializa una entidad, una lista de entidades o None."""
    if entity is None:
        return None
    if isinstance(entity, list):
        return [item.to_dict() for item in entity]
    return entity.to_dict()


# ═══════════════════════════════════════════════════════════════════════════════
# RUTAS
# ═══════════════════════════════════════════════════════════════════════════════

def register_routes(app: Flask) -> None:

    @app.route('/api/healthcheck', methods=['GET'])
    def healthcheck():
        return jsonify({
            'status': 'ok',
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'profiling': get_function_stats(),
        })

    # ── Catálogo ────────────────────────────────────────────────────────────

    @app.route('/api/createSurpriseBox', methods=['POST'])
    def create_surprise_box():
        box = _container().catalog_service.create_box(_json_body())
        return jsonify(_dump(box)), 201

    @app.route('/api/getSurpriseBoxes', methods=['GET'])
    def get_surprise_boxes():
        boxes = _container().catalog_service.list_boxes(
            category=request.args.get('category') or None,
            search=request.args.get('search') or None,
            active_only=_query_bool('activeOnly', True),
        )
        return jsonify(_dump(boxes))

    @app.route('/api/getSurpriseBoxById', methods=['GET'])
    def get_surprise_box_by_id():
        box = _container().catalog_service.get_box(_required_arg('id'))
        return jsonify(_dump(box))

    @app.route('/api/updateSurpriseBox', methods=['POST'])
    def update_surprise_box():
        data = _json_body()
        box_id = data.pop('id', None)
        if not isinstance(box_id, str) or not box_id:
            raise ValidationError('Falta el campo id')
        box = _container().catalog_service.update_box(box_id, data)
        return jsonify(_dump(box))

    @app.route('/api/deleteSurpriseBox', methods=['POST'])
    def delete_surprise_box():
        box_id = _json_body().get('id')
        if not isinstance(box_id, str) or not box_id:
            raise ValidationError('Falta el campo id')
        return jsonify(_container().catalog_service.delete_box(box_id))

    # ── Usuarios ────────────────────────────────────────────────────────────

    @app.route('/api/createUser', methods=['POST'])
    def create_user():
        data = _json_body()
        user = _container().user_service.register(
            data.get('email'),
            data.get('password'),
            data.get('firstName'),
            data.get('lastName'),
        )
        return jsonify(_dump(user)), 201

    @app.route('/api/loginUser', methods=['POST'])
    def login_user():
        data = _json_body()
        user = _container().user_service.authenticate(data.get('email'), data.get('password'))
        if user is None:
            session.pop('user_id', None)
            return jsonify(None)
        session['user_id'] = user.id
        return jsonify(_dump(user))

    # ── Pedidos ─────────────────────────────────────────────────────────────

    @app.route('/api/createOrder', methods=['POST'])
    def create_order():
        data = _json_body()
        order = _container().order_service.create_order(
            shipping_address=data.get('shippingAddress'),
            items=data.get('items'),
            user_id=data.get('userId'),
        )
        return jsonify(_dump(order)), 201

    @app.route('/api/getOrders', methods=['GET'])
    def get_orders():
        return jsonify(_dump(_container().order_service.list_orders()))

    @app.route('/api/getUserOrders', methods=['GET'])
    def get_user_orders():
        orders = _container().order_service.list_user_orders(_required_arg('userId'))
        return jsonify(_dump(orders))

    @app.route('/api/updateOrderStatus', methods=['POST'])
    def update_order_status():
        data = _json_body()
        order_id = data.get('id')
        if not isinstance(order_id, str) or not order_id:
            raise ValidationError('Falta el campo id')
        order = _container().order_service.update_status(order_id, data.get('status'))
        return jsonify(_dump(order))


# ═══════════════════════════════════════════════════════════════════════════════
# MANEJO DE ERRORES
# ═══════════════════════════════════════════════════════════════════════════════

def register_error_handlers(app: Flask) -> None:

    @app.errorhandler(ShopError)
    def handle_shop_error(error: ShopError):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        code = 'BadRequest' if isinstance(error, BadRequest) else type(error).__name__
        return jsonify({'ok': False, 'error': error.description, 'code': code}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        logger.exception("Error no controlado en %s %s", request.method, request.path)
        return jsonify({'ok': False, 'error': 'Error interno del servidor', 'code': 'InternalError'}), 500


# ═══════════════════════════════════════════════════════════════════════════════
# FACTORY
# ═══════════════════════════════════════════════════════════════════════════════

def create_app(
    config: Optional[Mapping[str, Any]] = None,
    container: Optional[AppContainer] = None,
) -> Flask:
    """
    Crea la aplicación Flask.

    Args:
        config: Claves que sobrescriben Config (ej: DATABASE_URL en tests)
        container: Contenedor ya construido; si es None se crea uno con config
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    if config:
        app.config.update(config)

    configure_logging(app.config['LOG_LEVEL'], app.config['LOG_DIR'])

    if app.config['PRODUCTION_MODE'] and not app.config['SECRET_KEY_FROM_ENV']:
        logger.warning("PRODUCTION_MODE activo sin SHOP_SECRET_KEY definida")

    if container is None:
        container = AppContainer(app.config)
    app.extensions['mystery_shop'] = container

    if app.config['AUTO_CREATE_SCHEMA']:
        container.init_schema()

    set_profiling_enabled(app.config['ENABLE_PROFILING'])
    init_profiling(app)

    register_routes(app)
    register_error_handlers(app)

    @app.cli.command('init-db')
    def init_db_command():
        """Crea las tablas de la base de datos."""
        container.init_schema()
        click.echo(f'Base de datos lista: {container.database_url}')

    return app
