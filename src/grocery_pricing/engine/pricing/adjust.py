from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Tuple

from grocery_pricing.engine.canonical.models import Product
from grocery_pricing.engine.pricing.pricing import CURRENCY_ROUNDING, RoundingRule
from grocery_pricing.engine.pricing.ranges import RangeAdjustment
from grocery_pricing.persistence.stores import ProductStore
from grocery_pricing.util.errors import CatalogUnavailable, PartialApplyFailure
from grocery_pricing.util.logging import get_logger, log_event


@dataclass
class ApplyResult:
    updated_count: int


class RangeAdjustmentEngine:
    """Reprices catalog products band by band.

    Every adjustment is validated before the first read. Bands are then
    processed in the order given, each with one read followed by its row
    writes. A product matched by several bands ends up with the price from the
    last one, always computed from the basis it had when the run first saw it.
    """

    context = ""
    applied_event = ""

    def __init__(self, catalog: ProductStore, *, rounding: RoundingRule = CURRENCY_ROUNDING) -> None:
        self.catalog = catalog
        self.rounding = rounding
        self.logger = get_logger(self.__class__.__name__)

    def basis(self, product: Product) -> Decimal:
        raise NotImplementedError

    def transform(self, basis: Decimal, percentage: Decimal) -> Decimal:
        raise NotImplementedError

    def _apply(self, adjustments: Iterable[RangeAdjustment]) -> ApplyResult:
        adjustments = list(adjustments)
        for adjustment in adjustments:
            adjustment.validate(self.context)

        basis_by_id: Dict[str, Decimal] = {}
        completed: List[int] = []
        updated_count = 0
        for index, adjustment in enumerate(adjustments):
            price_range = adjustment.range
            range_count = 0
            try:
                products = self.catalog.list_products_in_price_range(price_range.min_value, price_range.max_value)
                updates: List[Tuple[str, Decimal]] = []
                for product in products:
                    if not price_range.contains(product.original_price):
                        continue
                    basis = basis_by_id.setdefault(product.id, self.basis(product))
                    updates.append((product.id, self.transform(basis, adjustment.percentage)))
                for product_id, new_price in updates:
                    self.catalog.update_product_price(product_id, new_price)
                    updated_count += 1
                    range_count += 1
            except CatalogUnavailable as exc:
                log_event(
                    self.logger,
                    "pricing_run_failed",
                    level=logging.ERROR,
                    operation=self.context,
                    failed_range=price_range.label,
                    completed_ranges=len(completed),
                    updated_count=updated_count,
                    error=str(exc),
                )
                raise PartialApplyFailure(
                    operation=self.context,
                    completed=completed,
                    failed=index,
                    cause=exc,
                    updated_count=updated_count,
                ) from exc
            completed.append(index)
            log_event(
                self.logger,
                self.applied_event,
                range=price_range.label,
                percentage=adjustment.percentage,
                updated_count=range_count,
            )
        return ApplyResult(updated_count=updated_count)
