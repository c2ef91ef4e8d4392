from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import BotoCoreError, ClientError

from grocery_pricing.engine.canonical.models import Product
from grocery_pricing.util.errors import CatalogUnavailable

BATCH_GET_LIMIT = 100
MAX_UNPROCESSED_ROUNDS = 5


def _item_to_product(item: Dict[str, Any]) -> Optional[Product]:
    # Rows created before original_price existed were backfilled from price.
    current = item.get("price")
    original = item.get("original_price", current)
    if original is None or current is None:
        return None
    original = Decimal(str(original))
    current = Decimal(str(current))
    if original < 0 or current < 0:
        return None
    return Product(id=item["id"], original_price=original, current_price=current)


class DynamoProducts:
    def __init__(self, table_name: str) -> None:
        self.resource = boto3.resource("dynamodb")
        self.table = self.resource.Table(table_name)

    def _scan(self, **kwargs: Any) -> List[Dict[str, Any]]:
        items: List[Dict[str, Any]] = []
        try:
            while True:
                response = self.table.scan(**kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    return items
                kwargs["ExclusiveStartKey"] = last_key
        except (BotoCoreError, ClientError) as exc:
            raise CatalogUnavailable(str(exc)) from exc

    def list_products(self) -> List[Product]:
        products = [_item_to_product(item) for item in self._scan()]
        return [product for product in products if product is not None]

    def list_products_in_price_range(self, min_value: Decimal, max_value: Decimal) -> List[Product]:
        in_range = Attr("original_price").between(min_value, max_value) | (
            Attr("original_price").not_exists() & Attr("price").between(min_value, max_value)
        )
        products = [_item_to_product(item) for item in self._scan(FilterExpression=in_range)]
        return [product for product in products if product is not None]

    def get_products(self, product_ids: Iterable[str]) -> Dict[str, Product]:
        ids = list(dict.fromkeys(product_ids))
        found: Dict[str, Product] = {}
        try:
            for start in range(0, len(ids), BATCH_GET_LIMIT):
                request = {self.table.name: {"Keys": [{"id": product_id} for product_id in ids[start : start + BATCH_GET_LIMIT]]}}
                for _ in range(MAX_UNPROCESSED_ROUNDS):
                    response = self.resource.batch_get_item(RequestItems=request)
                    for item in response.get("Responses", {}).get(self.table.name, []):
                        product = _item_to_product(item)
                        if product is not None:
                            found[product.id] = product
                    request = response.get("UnprocessedKeys") or {}
                    if not request:
                        break
                else:
                    raise CatalogUnavailable(
                        f"batch_get_item left keys unprocessed after {MAX_UNPROCESSED_ROUNDS} rounds"
                    )
        except (BotoCoreError, ClientError) as exc:
            raise CatalogUnavailable(str(exc)) from exc
        return found

    def update_product_price(self, product_id: str, new_current_price: Decimal) -> None:
        try:
            self.table.update_item(
                Key={"id": product_id},
                UpdateExpression="SET #price = :price, updated_at = :updated_at",
                ConditionExpression="attribute_exists(#id)",
                ExpressionAttributeNames={"#price": "price", "#id": "id"},
                ExpressionAttributeValues={
                    ":price": new_current_price,
                    ":updated_at": datetime.now(timezone.utc).isoformat(),
                },
            )
        except (BotoCoreError, ClientError) as exc:
            raise CatalogUnavailable(str(exc)) from exc
