from datetime import datetime

from stallpos.services.queue_service import build_orders, employee_queue, server_queue
from stallpos.snapshots import OrderItemSnapshot, SaleSnapshot


COOK = 1
RUNNER = 2


def _line(item_id, employee_id, status):
    return OrderItemSnapshot(item_id=item_id, item_name=f"item-{item_id}", qty=1, price_cents=100,
                             employee_id=employee_id, status=status)


def _sale(sale_id, minute, *lines):
    return SaleSnapshot(id=sale_id, occurred_at=datetime(2024, 5, 1, 12, minute), token_number=sale_id,
                        items=tuple(lines))


SALES = [
    _sale(1, 0, _line(10, COOK, "done"), _line(20, RUNNER, "pending")),
    _sale(2, 5, _line(10, COOK, "pending")),
    _sale(3, 10, _line(20, RUNNER, "done")),
    _sale(4, 15, _line(10, COOK, "pending"), _line(20, RUNNER, "done")),
]


def test_employee_scope_only_sees_own_lines():
    orders = build_orders(SALES, COOK)
    assert [o.sale_id for o in orders] == [1, 2, 4]
    assert all(item.item_id == 10 for o in orders for item in o.items)


def test_order_status_is_per_scope():
    cook_view = {o.sale_id: o.status for o in build_orders(SALES, COOK)}
    everyone = {o.sale_id: o.status for o in build_orders(SALES)}
    assert cook_view[1] == "done"
    assert everyone[1] == "pending"


def test_employee_queue_orders_pending_fifo_and_completed_newest_first():
    view = employee_queue(SALES, RUNNER)
    assert [o.sale_id for o in view.pending] == [1]
    assert [o.sale_id for o in view.completed] == [4, 3]
    assert view.completed_total == 2


def test_completed_bucket_is_capped():
    view = employee_queue(SALES, RUNNER, completed_limit=1)
    assert [o.sale_id for o in view.completed] == [4]
    assert view.completed_total == 2


def test_server_queue_newest_first():
    view = server_queue(SALES)
    assert [o.sale_id for o in view.pending] == [4, 2, 1]
    assert [o.sale_id for o in view.completed] == [3]


def test_unknown_employee_has_empty_queue():
    view = employee_queue(SALES, 99)
    assert view.pending == () and view.completed == ()
    assert view.to_dict()["pending_count"] == 0
