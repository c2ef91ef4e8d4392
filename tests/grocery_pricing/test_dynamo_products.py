from decimal import Decimal

import boto3
import pytest
from moto import mock_aws

from grocery_pricing.engine.pricing.markup import MarkupEngine
from grocery_pricing.engine.pricing.ranges import PriceRangeDefinition, RangeAdjustment
from grocery_pricing.persistence.dynamo_products import MAX_UNPROCESSED_ROUNDS, DynamoProducts
from grocery_pricing.util.errors import CatalogUnavailable


@pytest.fixture()
def products_table_name() -> str:
    return "products"


@pytest.fixture()
def products_table(products_table_name: str, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    with mock_aws():
        resource = boto3.resource("dynamodb", region_name="us-east-1")
        table = resource.create_table(
            TableName=products_table_name,
            KeySchema=[{"AttributeName": "id", "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": "id", "AttributeType": "S"}],
            ProvisionedThroughput={"ReadCapacityUnits": 5, "WriteCapacityUnits": 5},
        )
        table.meta.client.get_waiter("table_exists").wait(TableName=products_table_name)
        table.put_item(Item={"id": "A", "original_price": Decimal("5"), "price": Decimal("5")})
        table.put_item(Item={"id": "B", "original_price": Decimal("50"), "price": Decimal("55")})
        table.put_item(Item={"id": "legacy", "price": Decimal("8.5")})
        yield table


def test_list_products_falls_back_to_price(products_table_name: str, products_table):
    catalog = DynamoProducts(products_table_name)

    products = {product.id: product for product in catalog.list_products()}

    assert set(products) == {"A", "B", "legacy"}
    assert products["legacy"].original_price == Decimal("8.5")
    assert products["B"].current_price == Decimal("55")


def test_list_products_in_price_range_is_inclusive(products_table_name: str, products_table):
    catalog = DynamoProducts(products_table_name)

    ids = sorted(product.id for product in catalog.list_products_in_price_range(Decimal("5"), Decimal("10")))

    assert ids == ["A", "legacy"]


def test_get_products_skips_unknown_ids(products_table_name: str, products_table):
    catalog = DynamoProducts(products_table_name)

    found = catalog.get_products(["A", "deleted", "A"])

    assert list(found) == ["A"]
    assert found["A"].original_price == Decimal("5")


def test_get_products_retries_unprocessed_keys(products_table_name: str, products_table, monkeypatch):
    catalog = DynamoProducts(products_table_name)
    real_batch_get = catalog.resource.batch_get_item
    calls = []

    def throttled_once(RequestItems):
        calls.append(RequestItems)
        if len(calls) == 1:
            return {"Responses": {}, "UnprocessedKeys": RequestItems}
        return real_batch_get(RequestItems=RequestItems)

    monkeypatch.setattr(catalog.resource, "batch_get_item", throttled_once)

    found = catalog.get_products(["A", "B"])

    assert set(found) == {"A", "B"}
    assert len(calls) == 2


def test_get_products_gives_up_on_persistent_unprocessed_keys(products_table_name: str, products_table, monkeypatch):
    catalog = DynamoProducts(products_table_name)
    calls = []

    def always_throttled(RequestItems):
        calls.append(RequestItems)
        return {"Responses": {}, "UnprocessedKeys": RequestItems}

    monkeypatch.setattr(catalog.resource, "batch_get_item", always_throttled)

    with pytest.raises(CatalogUnavailable):
        catalog.get_products(["A"])

    assert len(calls) == MAX_UNPROCESSED_ROUNDS


def test_update_product_price(products_table_name: str, products_table):
    catalog = DynamoProducts(products_table_name)

    catalog.update_product_price("B", Decimal("60.00"))

    item = products_table.get_item(Key={"id": "B"})["Item"]
    assert item["price"] == Decimal("60.00")
    assert item["original_price"] == Decimal("50")
    assert "updated_at" in item


def test_update_missing_product_raises(products_table_name: str, products_table):
    catalog = DynamoProducts(products_table_name)

    with pytest.raises(CatalogUnavailable):
        catalog.update_product_price("deleted", Decimal("1.00"))


def test_missing_table_is_catalog_unavailable(products_table):
    catalog = DynamoProducts("no-such-table")

    with pytest.raises(CatalogUnavailable):
        catalog.list_products()


def test_markup_engine_against_dynamo(products_table_name: str, products_table):
    engine = MarkupEngine(DynamoProducts(products_table_name))

    result = engine.apply_markup(
        [
            RangeAdjustment(range=PriceRangeDefinition(min_value=0, max_value=10), percentage=Decimal("20")),
            RangeAdjustment(range=PriceRangeDefinition(min_value=40, max_value=60), percentage=Decimal("10")),
        ]
    )

    assert result.updated_count == 3
    assert products_table.get_item(Key={"id": "A"})["Item"]["price"] == Decimal("6")
    assert products_table.get_item(Key={"id": "B"})["Item"]["price"] == Decimal("55")
    assert products_table.get_item(Key={"id": "legacy"})["Item"]["price"] == Decimal("10.2")
