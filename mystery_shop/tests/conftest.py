import os
import pytest

from mystery_shop.app_container import AppContainer
from mystery_shop.main import create_app
from mystery_shop.performance_logger import reset_stats


def make_box_data(**overrides):
    data = {
        'name': 'Hardware Mystery Box',
        'tagline': 'Amazing tech surprises',
        'description': 'A box full of amazing hardware surprises',
        'price': 29.99,
        'imageUrl': 'https://example.com/hardware.jpg',
        'category': 'Hardware',
        'contentsDescription': 'Contains various hardware items',
        'stock': 10,
        'isActive': True,
    }
    data.update(overrides)
    return data


@pytest.fixture
def container(tmp_path):
    c = AppContainer({'DATABASE_URL': 'sqlite:///' + os.path.join(str(tmp_path), 'shop.db')})
    c.init_schema()
    yield c
    c.close()


@pytest.fixture
def catalog(container):
    return container.catalog_service


@pytest.fixture
def users(container):
    return container.user_service


@pytest.fixture
def orders(container):
    return container.order_service


@pytest.fixture
def make_box(catalog):
    def _make(**overrides):
        return catalog.create_box(make_box_data(**overrides))
    return _make


@pytest.fixture
def app(container):
    reset_stats()
    application = create_app(
        {'TESTING': True, 'SECRET_KEY': 'test-secret', 'LOG_DIR': ''},
        container=container,
    )
    yield application
    reset_stats()


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture
def stock_of(container):
    def _stock(box_id):
        return container.box_repo.get_by_id(box_id).stock
    return _stock


@pytest.fixture
def box_data():
    return make_box_data
