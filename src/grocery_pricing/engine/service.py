from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar

from grocery_pricing.app.models.config import PricingConfig, RangeConfig
from grocery_pricing.engine.pricing.adjust import ApplyResult
from grocery_pricing.engine.pricing.bundles import BundleMarkupEngine, BundleMarkupResult
from grocery_pricing.engine.pricing.discount import DiscountEngine
from grocery_pricing.engine.pricing.markup import MarkupEngine
from grocery_pricing.engine.pricing.populations import PriceRangeCatalog, RangePopulations
from grocery_pricing.engine.pricing.pricing import RoundingRule
from grocery_pricing.engine.pricing.ranges import PriceRangeDefinition, RangeAdjustment
from grocery_pricing.persistence.stores import BundleStore, ProductStore, RangeSettingsStore
from grocery_pricing.util.errors import NonRetryableError, RetryableError
from grocery_pricing.util.logging import get_logger, log_event
from grocery_pricing.util.metrics import CloudWatchMetrics

ResultT = TypeVar("ResultT")


@dataclass
class RangeSummary:
    id: str
    min_value: Decimal
    max_value: Decimal
    label: str
    percentage: Decimal
    product_count: int


@dataclass
class RangeOverview:
    total_products: int
    ranges: List[RangeSummary] = field(default_factory=list)


def range_definition(config: RangeConfig) -> PriceRangeDefinition:
    return PriceRangeDefinition(
        min_value=config.min_value,
        max_value=config.max_value,
        label=config.label,
        include_max=config.include_max,
    )


class PricingService:
    """Admin pricing operations over injected product, bundle and settings stores."""

    def __init__(
        self,
        *,
        catalog: ProductStore,
        bundles: BundleStore,
        range_settings: RangeSettingsStore,
        config: Optional[PricingConfig] = None,
        metrics: Optional[CloudWatchMetrics] = None,
    ) -> None:
        self.config = config or PricingConfig()
        self.rounding = RoundingRule(
            mode=self.config.rounding.mode,
            increment=self.config.rounding.increment,
        )
        self.range_settings = range_settings
        self.populations = PriceRangeCatalog(catalog)
        self.markup = MarkupEngine(catalog, rounding=self.rounding)
        self.discount = DiscountEngine(catalog, rounding=self.rounding)
        self.bundle_markup = BundleMarkupEngine(bundles, catalog, rounding=self.rounding)
        self.metrics = metrics or CloudWatchMetrics.from_env()
        self.logger = get_logger(self.__class__.__name__)

    def _range_id(self, price_range: PriceRangeDefinition) -> str:
        for configured in self.config.ranges:
            if configured.min_value == price_range.min_value and configured.max_value == price_range.max_value:
                return configured.id
        return price_range.range_id

    def _measured(self, operation: str, run: Callable[[], ResultT]) -> ResultT:
        try:
            result = run()
        except (NonRetryableError, RetryableError) as exc:
            self.metrics.record_pricing_failure(operation=operation, error_type=type(exc).__name__)
            raise
        if hasattr(result, "updated_count"):
            self.metrics.record_pricing_run(operation=operation, updated_count=result.updated_count)
        return result

    def _count(self, operation: str, ranges: List[PriceRangeDefinition]) -> RangePopulations:
        populations = self._measured(operation, lambda: self.populations.compute_range_populations(ranges))
        log_event(
            self.logger,
            "range_populations_computed",
            operation=operation,
            range_count=len(ranges),
            total_products=populations.total_products,
        )
        return populations

    def get_ranges(self) -> RangeOverview:
        definitions = [range_definition(configured) for configured in self.config.ranges]
        populations = self._count("get_ranges", definitions)
        range_ids = [configured.id for configured in self.config.ranges]
        try:
            percentages: Dict[str, Decimal] = self.range_settings.get_percentages(range_ids)
        except RetryableError as exc:
            log_event(self.logger, "range_settings_unavailable", level=logging.WARNING, error=str(exc))
            percentages = {}
        summaries = [
            RangeSummary(
                id=configured.id,
                min_value=configured.min_value,
                max_value=configured.max_value,
                label=configured.label,
                percentage=percentages.get(configured.id, Decimal("0")),
                product_count=populations.populations[index],
            )
            for index, configured in enumerate(self.config.ranges)
        ]
        return RangeOverview(total_products=populations.total_products, ranges=summaries)

    def compute_range_populations(self, ranges: Iterable[PriceRangeDefinition]) -> RangePopulations:
        return self._count("range_populations", list(ranges))

    def apply_markup(self, adjustments: Iterable[RangeAdjustment]) -> ApplyResult:
        adjustments = list(adjustments)
        result = self._measured("markup", lambda: self.markup.apply_markup(adjustments))
        for adjustment in adjustments:
            range_id = self._range_id(adjustment.range)
            try:
                self.range_settings.save_percentage(range_id, adjustment.percentage)
            except RetryableError as exc:
                log_event(
                    self.logger,
                    "range_setting_persist_failed",
                    level=logging.WARNING,
                    range_id=range_id,
                    error=str(exc),
                )
        return result

    def apply_discount(self, adjustments: Iterable[RangeAdjustment]) -> ApplyResult:
        adjustments = list(adjustments)
        return self._measured("discount", lambda: self.discount.apply_discount(adjustments))

    def apply_bundle_markup(self, percentage: Any) -> BundleMarkupResult:
        return self._measured("bundle_markup", lambda: self.bundle_markup.apply_bundle_markup(percentage))
