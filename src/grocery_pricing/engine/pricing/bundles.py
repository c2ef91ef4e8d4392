from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from grocery_pricing.engine.canonical.models import Bundle, Product
from grocery_pricing.engine.pricing.pricing import CURRENCY_ROUNDING, RoundingRule, markup_price, round_price
from grocery_pricing.engine.pricing.ranges import MARKUP, parse_percentage, validate_percentage
from grocery_pricing.persistence.stores import BundleStore, ProductStore
from grocery_pricing.util.errors import BundleStoreUnavailable, PartialApplyFailure
from grocery_pricing.util.logging import get_logger, log_event


@dataclass
class BundlePricing:
    original_price: Decimal
    current_price: Decimal
    savings: Decimal
    discount_percentage: Decimal = Decimal("0")


@dataclass
class BundleMarkupResult:
    updated_count: int
    skipped_bundle_ids: List[str] = field(default_factory=list)


def price_bundle(
    member_prices: Sequence[Decimal],
    percentage: Decimal,
    rounding: RoundingRule = CURRENCY_ROUNDING,
) -> BundlePricing:
    original_sum = sum(member_prices, Decimal("0"))
    current_price = markup_price(original_sum, percentage, rounding)
    return BundlePricing(
        original_price=original_sum,
        current_price=current_price,
        savings=round_price(current_price - original_sum, rounding),
    )


class BundleMarkupEngine:
    """Reprices every active bundle from the sum of its members' original prices."""

    operation = "bundle_markup"

    def __init__(
        self,
        bundles: BundleStore,
        catalog: ProductStore,
        *,
        rounding: RoundingRule = CURRENCY_ROUNDING,
    ) -> None:
        self.bundles = bundles
        self.catalog = catalog
        self.rounding = rounding
        self.logger = get_logger(self.__class__.__name__)

    def _resolve_member_prices(self, bundle: Bundle, products: Dict[str, Product]) -> List[Decimal]:
        prices: List[Decimal] = []
        for product_id in bundle.product_ids:
            product = products.get(product_id)
            if product is None:
                log_event(
                    self.logger,
                    "bundle_member_missing",
                    level=logging.WARNING,
                    bundle_id=bundle.id,
                    product_id=product_id,
                )
                continue
            prices.append(product.original_price)
        return prices

    def _price(self, bundle: Bundle, products: Dict[str, Product], percentage: Decimal) -> Optional[BundlePricing]:
        prices = self._resolve_member_prices(bundle, products)
        if not prices:
            return None
        pricing = price_bundle(prices, percentage, self.rounding)
        if pricing.original_price <= 0:
            return None
        return pricing

    def apply_bundle_markup(self, percentage: Any) -> BundleMarkupResult:
        percentage = parse_percentage(percentage)
        validate_percentage(percentage, MARKUP)

        bundles = self.bundles.list_bundles()
        member_ids = {product_id for bundle in bundles for product_id in bundle.product_ids}
        products = self.catalog.get_products(member_ids) if member_ids else {}

        updated: List[str] = []
        skipped: List[str] = []
        for bundle in bundles:
            pricing = self._price(bundle, products, percentage)
            if pricing is None:
                skipped.append(bundle.id)
                log_event(self.logger, "bundle_skipped", level=logging.WARNING, bundle_id=bundle.id)
                continue
            try:
                self.bundles.update_bundle_pricing(
                    bundle.id,
                    original_price=pricing.original_price,
                    current_price=pricing.current_price,
                    savings=pricing.savings,
                    discount_percentage=pricing.discount_percentage,
                )
            except BundleStoreUnavailable as exc:
                log_event(
                    self.logger,
                    "pricing_run_failed",
                    level=logging.ERROR,
                    operation=self.operation,
                    failed_bundle=bundle.id,
                    updated_count=len(updated),
                    error=str(exc),
                )
                raise PartialApplyFailure(
                    operation=self.operation,
                    completed=updated,
                    failed=bundle.id,
                    cause=exc,
                    updated_count=len(updated),
                ) from exc
            updated.append(bundle.id)

        log_event(
            self.logger,
            "bundle_markup_applied",
            percentage=percentage,
            updated_count=len(updated),
            skipped_bundle_ids=skipped,
        )
        return BundleMarkupResult(updated_count=len(updated), skipped_bundle_ids=skipped)
