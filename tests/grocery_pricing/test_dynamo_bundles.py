from decimal import Decimal

import boto3
import pytest
from moto import mock_aws

from grocery_pricing.engine.canonical.models import Bundle
from grocery_pricing.engine.pricing.bundles import BundleMarkupEngine
from grocery_pricing.persistence.dynamo_bundles import DynamoBundles
from grocery_pricing.persistence.dynamo_products import DynamoProducts
from grocery_pricing.util.errors import BundleStoreUnavailable


@pytest.fixture()
def dynamodb_tables(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    with mock_aws():
        resource = boto3.resource("dynamodb", region_name="us-east-1")
        products_table = resource.create_table(
            TableName="products",
            KeySchema=[{"AttributeName": "id", "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": "id", "AttributeType": "S"}],
            ProvisionedThroughput={"ReadCapacityUnits": 5, "WriteCapacityUnits": 5},
        )
        bundles_table = resource.create_table(
            TableName="bundles",
            KeySchema=[{"AttributeName": "id", "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": "id", "AttributeType": "S"}],
            ProvisionedThroughput={"ReadCapacityUnits": 5, "WriteCapacityUnits": 5},
        )
        products_table.meta.client.get_waiter("table_exists").wait(TableName="products")
        bundles_table.meta.client.get_waiter("table_exists").wait(TableName="bundles")
        for product_id, original in (("p10", "10"), ("p20", "20"), ("p30", "30")):
            products_table.put_item(
                Item={"id": product_id, "original_price": Decimal(original), "price": Decimal(original)}
            )
        yield {"products": products_table.name, "bundles": bundles_table.name}


def test_list_bundles_returns_active_only(dynamodb_tables):
    store = DynamoBundles(dynamodb_tables["bundles"])
    store.put(Bundle(id="live", product_ids=["p10"]))
    store.put(Bundle(id="retired", product_ids=["p20"], is_active=False))

    assert [bundle.id for bundle in store.list_bundles()] == ["live"]


def test_update_bundle_pricing(dynamodb_tables):
    store = DynamoBundles(dynamodb_tables["bundles"])
    store.put(Bundle(id="trio", product_ids=["p10", "p20", "p30"]))

    store.update_bundle_pricing(
        "trio",
        original_price=Decimal("60"),
        current_price=Decimal("69.00"),
        savings=Decimal("9.00"),
        discount_percentage=Decimal("0"),
    )

    bundle = store.get("trio")
    assert bundle is not None
    assert bundle.original_price == Decimal("60")
    assert bundle.current_price == Decimal("69.00")
    assert bundle.product_ids == ["p10", "p20", "p30"]


def test_update_missing_bundle_raises(dynamodb_tables):
    store = DynamoBundles(dynamodb_tables["bundles"])

    with pytest.raises(BundleStoreUnavailable):
        store.update_bundle_pricing(
            "ghost",
            original_price=Decimal("1"),
            current_price=Decimal("1"),
            savings=Decimal("0"),
            discount_percentage=Decimal("0"),
        )


def test_bundle_markup_against_dynamo(dynamodb_tables):
    store = DynamoBundles(dynamodb_tables["bundles"])
    store.put(Bundle(id="trio", product_ids=["p10", "p20", "p30"]))
    store.put(Bundle(id="orphan", product_ids=["gone"], current_price=Decimal("4.99")))
    engine = BundleMarkupEngine(store, DynamoProducts(dynamodb_tables["products"]))

    result = engine.apply_bundle_markup(Decimal("15"))

    assert result.updated_count == 1
    assert result.skipped_bundle_ids == ["orphan"]
    assert store.get("trio").current_price == Decimal("69")
    assert store.get("orphan").current_price == Decimal("4.99")
