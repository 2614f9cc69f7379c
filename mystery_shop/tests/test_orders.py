import dataclasses
from decimal import Decimal

import pytest

from mystery_shop.models import OrderLine, OrderStatus
from mystery_shop.services import InsufficientStockError, NotFoundError, ValidationError


# ---------------------------------------------------------------------------
# Creación de pedidos
# ---------------------------------------------------------------------------

def test_single_line_order_totals_and_decrements_stock(orders, make_box, stock_of):
    box = make_box(price=29.99, stock=10)

    order = orders.create_order('Av. Siempre Viva 742', [{'surpriseBoxId': box.id, 'quantity': 2}])

    assert order.total_amount == Decimal('59.98')
    assert order.status == OrderStatus.PENDING
    assert order.user_id is None
    assert order.is_guest
    assert len(order.items) == 1
    assert order.items[0].price_at_purchase == Decimal('29.99')
    assert order.items[0].quantity == 2
    assert stock_of(box.id) == 8


def test_two_line_order(orders, make_box, stock_of, container):
    first = make_box(name='Box A', price=29.99, stock=10)
    second = make_box(name='Box B', price=19.99, stock=5)

    order = orders.create_order('Calle 1', [
        {'surpriseBoxId': first.id, 'quantity': 2},
        {'surpriseBoxId': second.id, 'quantity': 1},
    ])

    assert order.total_amount == Decimal('79.97')
    assert len(order.items) == 2
    assert container.order_repo.count_items() == 2
    assert order.total_amount == sum(item.line_total for item in order.items)
    assert stock_of(first.id) == 8
    assert stock_of(second.id) == 4


def test_accepts_order_line_objects(orders, make_box):
    box = make_box(stock=3)
    order = orders.create_order('Calle 2', [OrderLine(surprise_box_id=box.id, quantity=3)])
    assert order.items[0].surprise_box_id == box.id


def test_order_for_registered_user(orders, users, make_box):
    user = users.register('ana@example.com', 'password123', 'Ana', 'Pérez')
    box = make_box()

    order = orders.create_order('Calle 3', [{'surpriseBoxId': box.id, 'quantity': 1}], user_id=user.id)

    assert order.user_id == user.id
    assert not order.is_guest


def test_price_snapshot_survives_price_change(orders, catalog, make_box):
    box = make_box(price=10, stock=5)
    order = orders.create_order('Calle 4', [{'surpriseBoxId': box.id, 'quantity': 1}])

    catalog.update_box(box.id, {'price': 99.5})

    stored = orders.get_order(order.id)
    assert stored.items[0].price_at_purchase == Decimal('10.00')
    assert stored.total_amount == Decimal('10.00')


# ---------------------------------------------------------------------------
# Atomicidad
# ---------------------------------------------------------------------------

def test_insufficient_stock_changes_nothing(orders, make_box, stock_of, container):
    box = make_box(stock=10)

    with pytest.raises(InsufficientStockError) as excinfo:
        orders.create_order('Calle 5', [{'surpriseBoxId': box.id, 'quantity': 15}])

    assert excinfo.value.box_id == box.id
    assert excinfo.value.available == 10
    assert stock_of(box.id) == 10
    assert container.order_repo.count_orders() == 0
    assert container.order_repo.count_items() == 0


def test_one_bad_line_aborts_whole_order(orders, make_box, stock_of, container):
    ok_box = make_box(name='Plenty', stock=10)
    short_box = make_box(name='Scarce', stock=1)

    with pytest.raises(InsufficientStockError):
        orders.create_order('Calle 6', [
            {'surpriseBoxId': ok_box.id, 'quantity': 2},
            {'surpriseBoxId': short_box.id, 'quantity': 2},
        ])

    assert stock_of(ok_box.id) == 10
    assert stock_of(short_box.id) == 1
    assert container.order_repo.count_orders() == 0


def test_unknown_product_changes_nothing(orders, make_box, stock_of, container):
    box = make_box(stock=10)

    with pytest.raises(NotFoundError):
        orders.create_order('Calle 7', [
            {'surpriseBoxId': box.id, 'quantity': 1},
            {'surpriseBoxId': '00000000-0000-0000-0000-000000000000', 'quantity': 1},
        ])

    assert stock_of(box.id) == 10
    assert container.order_repo.count_orders() == 0
    assert container.order_repo.count_items() == 0


def test_repeated_box_exceeding_stock_is_rolled_back(orders, make_box, stock_of, container):
    # Cada línea por separado cabe en el stock, la suma no
    box = make_box(stock=3)

    with pytest.raises(InsufficientStockError):
        orders.create_order('Calle 8', [
            {'surpriseBoxId': box.id, 'quantity': 2},
            {'surpriseBoxId': box.id, 'quantity': 2},
        ])

    assert stock_of(box.id) == 3
    assert container.order_repo.count_orders() == 0


def test_stale_stock_read_is_caught_by_conditional_decrement(orders, make_box, stock_of, container, monkeypatch):
    box = make_box(stock=2)
    real_read = container.box_repo.get_for_update

    def stale_read(box_id, session):
        # Simula otra compra concurrente: la lectura ve más stock del real
        current = real_read(box_id, session)
        return dataclasses.replace(current, stock=100)

    monkeypatch.setattr(container.box_repo, 'get_for_update', stale_read)

    with pytest.raises(InsufficientStockError):
        orders.create_order('Calle 9', [{'surpriseBoxId': box.id, 'quantity': 5}])

    assert stock_of(box.id) == 2
    assert container.order_repo.count_orders() == 0
    assert container.order_repo.count_items() == 0


def test_unknown_user_is_rejected(orders, make_box, stock_of, container):
    box = make_box(stock=5)

    with pytest.raises(NotFoundError):
        orders.create_order('Calle 10', [{'surpriseBoxId': box.id, 'quantity': 1}], user_id='nobody')

    assert stock_of(box.id) == 5
    assert container.order_repo.count_orders() == 0


# ---------------------------------------------------------------------------
# Validación de entrada
# ---------------------------------------------------------------------------

@pytest.mark.parametrize('items', [
    [],
    None,
    [{'surpriseBoxId': 'x', 'quantity': 0}],
    [{'surpriseBoxId': 'x', 'quantity': -1}],
    [{'surpriseBoxId': 'x', 'quantity': 1.5}],
    [{'surpriseBoxId': 'x', 'quantity': True}],
    [{'surpriseBoxId': 'x', 'quantity': 2 ** 31}],
    [{'surpriseBoxId': '', 'quantity': 1}],
    ['not-a-dict'],
])
def test_invalid_items_are_rejected(orders, items):
    with pytest.raises(ValidationError):
        orders.create_order('Calle 11', items)


def test_empty_address_is_rejected(orders, make_box, stock_of):
    box = make_box(stock=5)
    with pytest.raises(ValidationError):
        orders.create_order('   ', [{'surpriseBoxId': box.id, 'quantity': 1}])
    assert stock_of(box.id) == 5


# ---------------------------------------------------------------------------
# Consultas y estados
# ---------------------------------------------------------------------------

def test_list_orders_and_user_orders(orders, users, make_box):
    box = make_box(stock=10)
    ana = users.register('ana@example.com', 'password123', 'Ana', 'Pérez')
    luis = users.register('luis@example.com', 'password123', 'Luis', 'Gómez')

    ana_order = orders.create_order('A', [{'surpriseBoxId': box.id, 'quantity': 1}], user_id=ana.id)
    orders.create_order('B', [{'surpriseBoxId': box.id, 'quantity': 1}], user_id=luis.id)
    guest_order = orders.create_order('C', [{'surpriseBoxId': box.id, 'quantity': 1}])

    all_ids = {o.id for o in orders.list_orders()}
    assert len(all_ids) == 3
    assert guest_order.id in all_ids

    ana_orders = orders.list_user_orders(ana.id)
    assert [o.id for o in ana_orders] == [ana_order.id]
    assert all(o.user_id == ana.id for o in ana_orders)
    assert len(ana_orders[0].items) == 1


def test_user_orders_for_unknown_user_is_empty(orders):
    assert orders.list_user_orders('nobody') == []


def test_update_status(orders, make_box):
    box = make_box()
    order = orders.create_order('Calle 12', [{'surpriseBoxId': box.id, 'quantity': 1}])

    updated = orders.update_status(order.id, 'Shipped')

    assert updated.status == OrderStatus.SHIPPED
    assert orders.get_order(order.id).status == OrderStatus.SHIPPED
    assert updated.items[0].surprise_box_id == box.id


def test_update_status_unknown_order_returns_none(orders):
    assert orders.update_status('missing', OrderStatus.CANCELLED) is None


def test_update_status_rejects_invalid_value(orders, make_box):
    box = make_box()
    order = orders.create_order('Calle 13', [{'surpriseBoxId': box.id, 'quantity': 1}])
    with pytest.raises(ValidationError):
        orders.update_status(order.id, 'Lost')
