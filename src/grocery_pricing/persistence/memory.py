from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from grocery_pricing.engine.canonical.models import Bundle, Product
from grocery_pricing.util.errors import BundleStoreUnavailable, CatalogUnavailable


class InMemoryProducts:
    def __init__(self, products: Iterable[Product] = ()) -> None:
        self._data: Dict[str, Product] = {product.id: product for product in products}

    def put(self, product: Product) -> None:
        self._data[product.id] = product

    def get(self, product_id: str) -> Optional[Product]:
        return self._data.get(product_id)

    def list_products(self) -> List[Product]:
        return list(self._data.values())

    def list_products_in_price_range(self, min_value: Decimal, max_value: Decimal) -> List[Product]:
        return [
            product
            for product in self._data.values()
            if min_value <= product.original_price <= max_value
        ]

    def get_products(self, product_ids: Iterable[str]) -> Dict[str, Product]:
        return {
            product_id: self._data[product_id]
            for product_id in set(product_ids)
            if product_id in self._data
        }

    def update_product_price(self, product_id: str, new_current_price: Decimal) -> None:
        product = self._data.get(product_id)
        if product is None:
            raise CatalogUnavailable(f"product {product_id} not found")
        self._data[product_id] = product.model_copy(update={"current_price": new_current_price})


class InMemoryBundles:
    def __init__(self, bundles: Iterable[Bundle] = ()) -> None:
        self._data: Dict[str, Bundle] = {bundle.id: bundle for bundle in bundles}

    def put(self, bundle: Bundle) -> None:
        self._data[bundle.id] = bundle

    def get(self, bundle_id: str) -> Optional[Bundle]:
        return self._data.get(bundle_id)

    def list_bundles(self) -> List[Bundle]:
        return [bundle for bundle in self._data.values() if bundle.is_active]

    def update_bundle_pricing(
        self,
        bundle_id: str,
        *,
        original_price: Decimal,
        current_price: Decimal,
        savings: Decimal,
        discount_percentage: Decimal,
    ) -> None:
        bundle = self._data.get(bundle_id)
        if bundle is None:
            raise BundleStoreUnavailable(f"bundle {bundle_id} not found")
        self._data[bundle_id] = bundle.model_copy(
            update={
                "original_price": original_price,
                "current_price": current_price,
                "savings": savings,
                "discount_percentage": discount_percentage,
            }
        )


class InMemoryRangeSettings:
    def __init__(self) -> None:
        self._data: Dict[str, Decimal] = {}
        self.updated_at: Dict[str, str] = {}

    def get_percentages(self, range_ids: Iterable[str]) -> Dict[str, Decimal]:
        return {range_id: self._data[range_id] for range_id in range_ids if range_id in self._data}

    def save_percentage(self, range_id: str, percentage: Decimal) -> None:
        self._data[range_id] = percentage
        self.updated_at[range_id] = datetime.now(timezone.utc).isoformat()
