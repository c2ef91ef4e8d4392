from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from grocery_pricing.engine.canonical.models import Product
from grocery_pricing.engine.pricing.adjust import ApplyResult, RangeAdjustmentEngine
from grocery_pricing.engine.pricing.pricing import discount_price
from grocery_pricing.engine.pricing.ranges import DISCOUNT, RangeAdjustment


class DiscountEngine(RangeAdjustmentEngine):
    """Takes a per-band percentage off the current selling price.

    Band membership is still decided by original price. Each run discounts the
    price it finds, so consecutive runs compound.
    """

    context = DISCOUNT
    applied_event = "discount_range_applied"

    def basis(self, product: Product) -> Decimal:
        return product.current_price

    def transform(self, basis: Decimal, percentage: Decimal) -> Decimal:
        return discount_price(basis, percentage, self.rounding)

    def apply_discount(self, adjustments: Iterable[RangeAdjustment]) -> ApplyResult:
        return self._apply(adjustments)
