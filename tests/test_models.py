"""Tests for the payment and product record helpers."""

from decimal import Decimal

import pytest

from retail_service.errors import InvalidQuantity, InvalidRefundAmount, InvalidStateTransition
from retail_service.models.catalog import Product
from retail_service.models.payment import Payment, PaymentMethod, PaymentStatus


def _completed_payment(amount: str = "50.00") -> Payment:
    payment = Payment(order_id=1, payment_method=PaymentMethod.CASH, amount=Decimal(amount),
                      status=PaymentStatus.PENDING)
    payment.mark_as_completed("TXN-1")
    return payment


class TestPaymentRefund:

    def test_full_refund(self):
        payment = _completed_payment()
        assert payment.refund(Decimal("50.00")) == PaymentStatus.REFUNDED
        assert payment.status == PaymentStatus.REFUNDED

    def test_partial_refund(self):
        payment = _completed_payment()
        assert payment.refund("20") == PaymentStatus.PARTIAL_REFUND

    def test_refund_above_amount_rejected(self):
        payment = _completed_payment()
        with pytest.raises(InvalidRefundAmount) as exc_info:
            payment.refund(Decimal("50.01"))
        assert exc_info.value.limit == Decimal("50.00")
        assert payment.status == PaymentStatus.COMPLETED

    def test_refund_requires_completed_payment(self):
        payment = Payment(order_id=1, payment_method=PaymentMethod.PAYPAL, amount=Decimal("10.00"),
                          status=PaymentStatus.PENDING)
        with pytest.raises(InvalidStateTransition):
            payment.refund(Decimal("10.00"))


class TestPaymentStatusHelpers:

    def test_completed(self):
        payment = _completed_payment()
        assert payment.is_successful()
        assert payment.transaction_id == "TXN-1"
        assert payment.payment_date is not None

    def test_failed(self):
        payment = Payment(order_id=1, payment_method=PaymentMethod.STRIPE, amount=Decimal("1.00"),
                          status=PaymentStatus.PROCESSING)
        assert payment.is_pending()
        payment.mark_as_failed("card declined")
        assert payment.is_failed()
        assert payment.notes == "card declined"


class TestProductHelpers:

    def _product(self, **overrides) -> Product:
        fields = dict(name="Mug", sku="MUG-1", price=Decimal("15.00"), cost_price=Decimal("10.00"),
                      stock_quantity=5, min_stock_level=2)
        fields.update(overrides)
        return Product(**fields)

    def test_profit(self):
        product = self._product()
        assert product.profit_margin() == Decimal("5.00")
        assert product.profit_percentage() == Decimal("50.0000")

    def test_profit_without_cost_is_zero(self):
        product = self._product(cost_price=None)
        assert product.profit_margin() == Decimal("0")
        assert product.profit_percentage() == Decimal("0")

    def test_stock_levels(self):
        product = self._product()
        assert product.is_in_stock()
        assert not product.is_low_stock()
        product.reduce_stock(3)
        assert product.is_low_stock()

    def test_reduce_more_than_available(self):
        product = self._product(stock_quantity=1)
        with pytest.raises(InvalidQuantity):
            product.reduce_stock(2)
        assert product.stock_quantity == 1
