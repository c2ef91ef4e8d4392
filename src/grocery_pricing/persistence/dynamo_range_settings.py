from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Iterable

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from grocery_pricing.util.errors import RetryableError


class DynamoRangeSettings:
    """Last applied markup percentage per price range id."""

    def __init__(self, table_name: str) -> None:
        self.table = boto3.resource("dynamodb").Table(table_name)

    def get_percentages(self, range_ids: Iterable[str]) -> Dict[str, Decimal]:
        percentages: Dict[str, Decimal] = {}
        try:
            for range_id in range_ids:
                response = self.table.get_item(Key={"range_id": range_id})
                item = response.get("Item")
                if item:
                    percentages[range_id] = Decimal(str(item.get("percentage", 0)))
        except (BotoCoreError, ClientError) as exc:
            raise RetryableError(str(exc)) from exc
        return percentages

    def save_percentage(self, range_id: str, percentage: Decimal) -> None:
        try:
            self.table.put_item(
                Item={
                    "range_id": range_id,
                    "percentage": percentage,
                    "updated_at": datetime.now(timezone.utc).isoformat(),
                }
            )
        except (BotoCoreError, ClientError) as exc:
            raise RetryableError(str(exc)) from exc
