"""Unit tests for the Sale aggregate."""

from decimal import Decimal

import pytest

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.sale import PaymentStatus, Sale, SaleLineItem
from stockledger.domain.model.value_objects import Money


def _line(qty="5", price="100", cost="60", discount="0", product_id="p1") -> SaleLineItem:
    return SaleLineItem(
        product_id=product_id,
        product_name="Widget",
        quantity=Decimal(qty),
        unit_price=Money.of(price),
        unit_cost=Money.of(cost),
        discount=Money.of(discount),
    )


def _sale(items=None, **kwargs) -> Sale:
    return Sale.create(
        sale_id="s1",
        invoice_number="INV26100001",
        items=items or [_line()],
        **kwargs,
    )


class TestSaleLineItem:

    def test_totals(self):
        line = _line(discount="20")
        assert line.total_price == Money.of("500")
        assert line.net_price == Money.of("480")
        assert line.profit == Decimal("180")

    def test_discount_above_line_total_rejected(self):
        with pytest.raises(ValidationError, match="exceeds line total"):
            _line(qty="1", price="10", discount="11")

    def test_non_positive_quantity_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            _line(qty="0")


class TestSaleCreate:

    def test_total_includes_tax_and_discount(self):
        sale = _sale(tax_amount=Money.of("10"), discount_amount=Money.of("5"))
        assert sale.subtotal == Money.of("500")
        assert sale.total_amount == Money.of("505")

    def test_subtotal_sums_net_line_prices(self):
        sale = _sale(items=[_line(discount="50"), _line(qty="1", price="30", product_id="p2")])
        assert sale.subtotal == Money.of("480")

    def test_empty_sale_rejected(self):
        with pytest.raises(ValidationError, match="at least one item"):
            Sale.create(sale_id="s1", invoice_number="INV26100001", items=[])

    def test_sale_discount_above_total_rejected(self):
        with pytest.raises(ValidationError, match="exceeds sale total"):
            _sale(discount_amount=Money.of("501"))

    def test_customer_email_normalised(self):
        assert _sale(customer_email=" Bob@Example.COM ").customer_email == "bob@example.com"

    def test_long_notes_rejected(self):
        with pytest.raises(ValidationError, match="500 characters"):
            _sale(notes="x" * 501)


class TestSalePayment:

    def test_partial_payment_leaves_balance(self):
        sale = _sale()
        sale.update_payment(PaymentStatus.PARTIAL, Money.of("200"))
        assert sale.balance_due == Money.of("300")

    def test_overpayment_rejected(self):
        sale = _sale()
        with pytest.raises(ValidationError, match="cannot exceed total"):
            sale.update_payment(PaymentStatus.PAID, Money.of("500.01"))

    def test_profit_sums_lines(self):
        sale = _sale(items=[_line(), _line(qty="2", price="50", cost="40", product_id="p2")])
        assert sale.profit == Decimal("220")
