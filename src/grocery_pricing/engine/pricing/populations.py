from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable

from grocery_pricing.engine.pricing.ranges import PriceRangeDefinition
from grocery_pricing.persistence.stores import ProductStore


@dataclass
class RangePopulations:
    total_products: int
    populations: Dict[int, int] = field(default_factory=dict)


class PriceRangeCatalog:
    def __init__(self, catalog: ProductStore) -> None:
        self.catalog = catalog

    def compute_range_populations(self, ranges: Iterable[PriceRangeDefinition]) -> RangePopulations:
        # Counts are per range, not a partition: overlapping ranges both count
        # a product, which lets callers spot overlap when the sum exceeds the total.
        ranges = list(ranges)
        products = self.catalog.list_products()
        populations = {index: 0 for index in range(len(ranges))}
        for product in products:
            for index, price_range in enumerate(ranges):
                if price_range.contains(product.original_price):
                    populations[index] += 1
        return RangePopulations(total_products=len(products), populations=populations)
