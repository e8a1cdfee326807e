"""Unit tests for the OrderFactory domain service."""

import uuid
from decimal import Decimal

import pytest

from orderflow.domain.exceptions import ValidationError
from orderflow.domain.model.status import OrderStatus
from orderflow.domain.model.value_objects import Money
from orderflow.domain.service.order_factory import OrderFactory
from tests.fakes import SequentialIds, SteppingClock


class TestCreateLineItem:

    def test_builds_validated_item(self):
        item = OrderFactory().create_line_item("SKU-1", 2, "10.00")
        assert item.product_id == "SKU-1"
        assert item.quantity.value == 2
        assert item.unit_price == Money(Decimal("10.00"))

    def test_strips_product_id(self):
        assert OrderFactory().create_line_item("  SKU-1 ", 1, 1).product_id == "SKU-1"

    @pytest.mark.parametrize(
        "product_id, quantity, price, message",
        [
            ("", 1, "1.00", "Product ID"),
            ("SKU-1", 0, "1.00", "must be positive"),
            ("SKU-1", -2, "1.00", "must be positive"),
            ("SKU-1", 1, "0", "greater than zero"),
            ("SKU-1", 1, "-5", "cannot be negative"),
            ("SKU-1", 1, "abc", "Invalid money amount"),
        ],
    )
    def test_rejects_invalid_values(self, product_id, quantity, price, message):
        with pytest.raises(ValidationError, match=message):
            OrderFactory().create_line_item(product_id, quantity, price)


class TestCreateOrder:

    def test_uses_injected_id_and_clock(self):
        clock = SteppingClock()
        factory = OrderFactory(id_factory=SequentialIds(), clock=clock)
        item = factory.create_line_item("SKU-1", 1, "3.00")

        first = factory.create_order([item])
        second = factory.create_order([item])

        assert (first.id, second.id) == ("order-1", "order-2")
        assert second.created_at > first.created_at
        assert first.status is OrderStatus.PENDING

    def test_default_ids_are_uuids(self):
        factory = OrderFactory()
        order = factory.create_order([factory.create_line_item("SKU-1", 1, "1")])
        assert str(uuid.UUID(order.id)) == order.id
