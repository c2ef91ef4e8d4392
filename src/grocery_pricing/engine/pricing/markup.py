from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from grocery_pricing.engine.canonical.models import Product
from grocery_pricing.engine.pricing.adjust import ApplyResult, RangeAdjustmentEngine
from grocery_pricing.engine.pricing.pricing import markup_price
from grocery_pricing.engine.pricing.ranges import MARKUP, RangeAdjustment


class MarkupEngine(RangeAdjustmentEngine):
    """Sets the selling price to the original price plus a per-band markup.

    The original price never changes, so re-running the same markup is a no-op.
    """

    context = MARKUP
    applied_event = "markup_range_applied"

    def basis(self, product: Product) -> Decimal:
        return product.original_price

    def transform(self, basis: Decimal, percentage: Decimal) -> Decimal:
        return markup_price(basis, percentage, self.rounding)

    def apply_markup(self, adjustments: Iterable[RangeAdjustment]) -> ApplyResult:
        return self._apply(adjustments)
