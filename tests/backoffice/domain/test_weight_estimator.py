"""Tests for package weight estimation."""

import pytest

from backoffice.order.order import OrderItem
from backoffice.shipping.weight import (
    DEFAULT_ITEM_WEIGHT_OZ,
    PACKAGING_WEIGHT_OZ,
    WeightSource,
    estimate_weight,
    format_weight,
)


def _item(quantity=1, weight=None, product_id="p"):
    return OrderItem(product_id=product_id, quantity=quantity, weight=weight)


class TestEstimateWeight:
    def test_no_items_is_packaging_only(self):
        estimate = estimate_weight([])
        assert estimate.weight_oz == PACKAGING_WEIGHT_OZ
        assert estimate.source == WeightSource.PRODUCT_DATA
        assert estimate.has_unknown_weights is False

    def test_known_weights(self):
        estimate = estimate_weight([_item(quantity=2, weight=10.0), _item(quantity=1, weight=3.5)])
        assert estimate.weight_oz == PACKAGING_WEIGHT_OZ + 20.0 + 3.5
        assert estimate.source == WeightSource.PRODUCT_DATA
        assert estimate.source.value == "from product data"
        assert estimate.item_count == 3

    def test_unknown_weight_uses_default_and_flags_order(self):
        estimate = estimate_weight([_item(quantity=2, weight=10.0), _item(quantity=3)])
        assert estimate.weight_oz == PACKAGING_WEIGHT_OZ + 20.0 + 3 * DEFAULT_ITEM_WEIGHT_OZ
        assert estimate.has_unknown_weights is True
        assert estimate.source.value == "estimated"

    def test_zero_weight_is_known(self):
        estimate = estimate_weight([_item(weight=0.0)])
        assert estimate.weight_oz == PACKAGING_WEIGHT_OZ
        assert estimate.has_unknown_weights is False

    def test_never_below_packaging(self):
        estimate = estimate_weight([_item(weight=0.0), _item(quantity=5, weight=1.0)])
        assert estimate.weight_oz >= PACKAGING_WEIGHT_OZ

    def test_pounds(self):
        estimate = estimate_weight([_item(weight=28.0)])
        assert estimate.weight_lb == 2.0
        assert estimate.label == "2.00 lb"


class TestFormatWeight:
    def test_auto_under_a_pound_in_ounces(self):
        assert format_weight(12) == "12.0 oz"

    def test_auto_pound_and_over_in_pounds(self):
        assert format_weight(24) == "1.50 lb"

    def test_forced_units(self):
        assert format_weight(24, unit="oz") == "24.0 oz"
        assert format_weight(8, unit="lb") == "0.50 lb"

    def test_unknown_unit(self):
        with pytest.raises(ValueError):
            format_weight(8, unit="kg")
