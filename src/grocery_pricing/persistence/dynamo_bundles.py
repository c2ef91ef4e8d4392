from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from grocery_pricing.engine.canonical.models import Bundle
from grocery_pricing.util.errors import BundleStoreUnavailable


def _item_to_bundle(item: Dict[str, Any]) -> Bundle:
    return Bundle(
        id=item["id"],
        product_ids=list(item.get("product_ids") or []),
        original_price=item.get("original_price", Decimal("0")),
        current_price=item.get("current_price", Decimal("0")),
        savings=item.get("savings", Decimal("0")),
        discount_percentage=item.get("discount_percentage", Decimal("0")),
        is_active=item.get("is_active", True),
    )


class DynamoBundles:
    def __init__(self, table_name: str) -> None:
        self.table = boto3.resource("dynamodb").Table(table_name)

    def put(self, bundle: Bundle) -> None:
        self.table.put_item(Item=bundle.model_dump())

    def get(self, bundle_id: str) -> Bundle | None:
        response = self.table.get_item(Key={"id": bundle_id})
        item = response.get("Item")
        if not item:
            return None
        return _item_to_bundle(item)

    def list_bundles(self) -> List[Bundle]:
        bundles: List[Bundle] = []
        kwargs: Dict[str, Any] = {}
        try:
            while True:
                response = self.table.scan(**kwargs)
                bundles.extend(_item_to_bundle(item) for item in response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                kwargs["ExclusiveStartKey"] = last_key
        except (BotoCoreError, ClientError) as exc:
            raise BundleStoreUnavailable(str(exc)) from exc
        return [bundle for bundle in bundles if bundle.is_active]

    def update_bundle_pricing(
        self,
        bundle_id: str,
        *,
        original_price: Decimal,
        current_price: Decimal,
        savings: Decimal,
        discount_percentage: Decimal,
    ) -> None:
        try:
            self.table.update_item(
                Key={"id": bundle_id},
                UpdateExpression=(
                    "SET #original_price = :original_price, #current_price = :current_price, "
                    "#savings = :savings, #discount_percentage = :discount_percentage, "
                    "#updated_at = :updated_at"
                ),
                ConditionExpression="attribute_exists(#id)",
                ExpressionAttributeNames={
                    "#id": "id",
                    "#original_price": "original_price",
                    "#current_price": "current_price",
                    "#savings": "savings",
                    "#discount_percentage": "discount_percentage",
                    "#updated_at": "updated_at",
                },
                ExpressionAttributeValues={
                    ":original_price": original_price,
                    ":current_price": current_price,
                    ":savings": savings,
                    ":discount_percentage": discount_percentage,
                    ":updated_at": datetime.now(timezone.utc).isoformat(),
                },
            )
        except (BotoCoreError, ClientError) as exc:
            raise BundleStoreUnavailable(str(exc)) from exc
