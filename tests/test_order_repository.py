"""Storage round trips for the Order aggregate against SQLite."""

from datetime import timedelta
from decimal import Decimal

import pytest

from retail_service.db.order_repository import OrderRepository
from retail_service.domain.order import LineItem, Order, OrderStatus, utcnow
from retail_service.errors import NotFound, PersistenceFailure
from retail_service.models.order import LineItemRecord, OrderRecord
from retail_service.models.payment import Payment, PaymentMethod


def _order(customer, products) -> Order:
    pen, pad = products
    order = Order(customer_id=customer.id, notes="first order")
    order.add_line_item(LineItem.for_product(pen, 2))
    order.add_line_item(LineItem.for_product(pad, 3))
    order.tax_amount = Decimal("3.65")
    order.discount_amount = Decimal("5.00")
    return order


class TestSave:

    def test_insert_assigns_ids(self, db_session, customer, products):
        order = OrderRepository.save(db_session, _order(customer, products))

        assert order.order_id is not None
        assert all(item.order_id == order.order_id for item in order.line_items)
        assert all(item.line_item_id is not None for item in order.line_items)

    def test_reload_matches(self, db_session, customer, products):
        saved = OrderRepository.save(db_session, _order(customer, products))
        db_session.expire_all()

        loaded = OrderRepository.find_by_id(db_session, saved.order_id)

        assert loaded.subtotal == Decimal("36.50")
        assert loaded.total_amount == Decimal("35.15")
        assert loaded.status == OrderStatus.PENDING
        assert loaded.notes == "first order"
        assert [i.quantity for i in loaded.line_items] == [2, 3]
        assert [i.unit_price for i in loaded.line_items] == [Decimal("10.00"), Decimal("5.50")]
        assert loaded.line_items[0].product.name == "Pen"

    def test_update_keeps_line_item_ids(self, db_session, customer, products):
        order = OrderRepository.save(db_session, _order(customer, products))
        first_id = order.line_items[0].line_item_id

        order.line_items[0].set_quantity(5)
        order.remove_line_item(order.line_items[1])
        OrderRepository.save(db_session, order)

        loaded = OrderRepository.find_by_id(db_session, order.order_id)
        assert [i.line_item_id for i in loaded.line_items] == [first_id]
        assert loaded.subtotal == Decimal("50.00")
        assert db_session.query(LineItemRecord).count() == 1

    def test_same_entry_twice_survives_repeated_saves(self, db_session, customer, products):
        pen, _ = products
        order = Order(customer_id=customer.id)
        item = LineItem.for_product(pen, 1)
        order.add_line_item(item)
        order.add_line_item(item)

        OrderRepository.save(db_session, order)
        OrderRepository.save(db_session, order)
        db_session.expire_all()

        loaded = OrderRepository.find_by_id(db_session, order.order_id)
        assert len(loaded.line_items) == 2
        assert loaded.subtotal == order.subtotal == Decimal("20.00")
        assert db_session.query(LineItemRecord).count() == 2

    def test_stored_price_survives_product_price_change(self, db_session, customer, products):
        pen, _ = products
        order = OrderRepository.save(db_session, _order(customer, products))

        pen.price = Decimal("99.00")
        db_session.commit()

        loaded = OrderRepository.find_by_id(db_session, order.order_id)
        assert loaded.line_items[0].unit_price == Decimal("10.00")

    def test_failed_save_writes_nothing(self, db_session, customer):
        order = Order(customer_id=customer.id)
        order.add_line_item(LineItem(product_id=None, quantity=1, unit_price="1.00"))

        with pytest.raises(PersistenceFailure):
            OrderRepository.save(db_session, order)

        assert order.order_id is None
        assert db_session.query(OrderRecord).count() == 0
        assert db_session.query(LineItemRecord).count() == 0

    def test_save_unknown_id(self, db_session, customer):
        with pytest.raises(NotFound):
            OrderRepository.save(db_session, Order(customer_id=customer.id, order_id=999))


class TestQueries:

    def test_find_all_filters(self, db_session, customer, products):
        first = OrderRepository.save(db_session, _order(customer, products))
        second = _order(customer, products)
        second.status = OrderStatus.SHIPPED
        OrderRepository.save(db_session, second)

        orders, total = OrderRepository.find_all(db_session, status=OrderStatus.SHIPPED)
        assert total == 1
        assert orders[0].order_id == second.order_id

        orders, total = OrderRepository.find_all(db_session, customer_id=customer.id)
        assert total == 2
        assert {o.order_id for o in orders} == {first.order_id, second.order_id}

    def test_find_by_date_range(self, db_session, customer, products):
        old = _order(customer, products)
        old.order_date = utcnow() - timedelta(days=30)
        OrderRepository.save(db_session, old)
        recent = OrderRepository.save(db_session, _order(customer, products))

        found = OrderRepository.find_by_date_range(
            db_session, utcnow() - timedelta(days=1), utcnow() + timedelta(days=1)
        )
        assert [o.order_id for o in found] == [recent.order_id]

    def test_update_status(self, db_session, customer, products):
        order = OrderRepository.save(db_session, _order(customer, products))
        assert OrderRepository.update_status(db_session, order.order_id, OrderStatus.CONFIRMED)
        assert not OrderRepository.update_status(db_session, 12345, OrderStatus.CONFIRMED)

        db_session.expire_all()
        assert OrderRepository.find_by_id(db_session, order.order_id).status == OrderStatus.CONFIRMED


class TestDelete:

    def test_delete_cascades(self, db_session, customer, products):
        order = OrderRepository.save(db_session, _order(customer, products))
        db_session.add(Payment(order_id=order.order_id, payment_method=PaymentMethod.CASH,
                               amount=Decimal("35.15")))
        db_session.commit()

        assert OrderRepository.delete(db_session, order.order_id)
        assert db_session.query(OrderRecord).count() == 0
        assert db_session.query(LineItemRecord).count() == 0
        assert db_session.query(Payment).count() == 0

    def test_delete_missing(self, db_session):
        assert OrderRepository.delete(db_session, 1) is False
