import logging

import pytest

from mystery_shop import performance_logger
from mystery_shop.performance_logger import get_function_stats, profile_function, reset_stats


@pytest.fixture(autouse=True)
def clean_stats(monkeypatch):
    monkeypatch.setattr(performance_logger, 'ENABLE_PROFILING', True)
    reset_stats()
    yield
    reset_stats()


def test_profile_function_counts_calls():
    @profile_function
    def add(a, b):
        return a + b

    assert add(1, 2) == 3
    assert add(2, 2) == 4

    stats = get_function_stats()['add']
    assert stats['calls'] == 2
    assert stats['max_time'] >= stats['avg_time'] >= 0


def test_profile_function_with_custom_name_records_failures():
    @profile_function(name='Operación fallida')
    def boom():
        raise RuntimeError('boom')

    with pytest.raises(RuntimeError):
        boom()

    assert get_function_stats()['Operación fallida']['calls'] == 1


def test_profiling_disabled_records_nothing(monkeypatch):
    monkeypatch.setattr(performance_logger, 'ENABLE_PROFILING', False)

    @profile_function
    def noop():
        return None

    noop()
    assert get_function_stats() == {}


def test_slow_function_is_logged(monkeypatch, caplog):
    monkeypatch.setattr(performance_logger, 'THRESHOLD_WARNING', 0)

    @profile_function(name='lenta')
    def slow():
        return 'ok'

    with caplog.at_level(logging.WARNING, logger='mystery_shop.performance.slow_functions'):
        slow()

    assert any('lenta' in record.getMessage() for record in caplog.records)


def test_route_names():
    assert performance_logger._get_route_name('POST', '/api/createOrder') == 'Crear pedido'
    assert performance_logger._get_route_name('GET', '/otra') == 'GET /otra'


def test_order_creation_shows_in_healthcheck(client, make_box):
    box = make_box(stock=5)
    client.post('/api/createOrder', json={
        'shippingAddress': 'Calle 1',
        'items': [{'surpriseBoxId': box.id, 'quantity': 1}],
    })

    profiling = client.get('/api/healthcheck').get_json()['profiling']
    assert profiling['Crear pedido']['calls'] == 1
