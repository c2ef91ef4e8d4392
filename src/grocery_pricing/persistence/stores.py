from __future__ import annotations

from decimal import Decimal
from typing import Dict, Iterable, List, Protocol

from grocery_pricing.engine.canonical.models import Bundle, Product


class ProductStore(Protocol):
    def list_products(self) -> List[Product]: ...

    def list_products_in_price_range(self, min_value: Decimal, max_value: Decimal) -> List[Product]: ...

    def get_products(self, product_ids: Iterable[str]) -> Dict[str, Product]: ...

    def update_product_price(self, product_id: str, new_current_price: Decimal) -> None: ...


class BundleStore(Protocol):
    def list_bundles(self) -> List[Bundle]: ...

    def update_bundle_pricing(
        self,
        bundle_id: str,
        *,
        original_price: Decimal,
        current_price: Decimal,
        savings: Decimal,
        discount_percentage: Decimal,
    ) -> None: ...


class RangeSettingsStore(Protocol):
    def get_percentages(self, range_ids: Iterable[str]) -> Dict[str, Decimal]: ...

    def save_percentage(self, range_id: str, percentage: Decimal) -> None: ...
