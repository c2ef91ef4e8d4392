import boto3
from moto import mock_aws

from grocery_pricing.util.metrics import CloudWatchMetrics


def test_disabled_metrics_create_no_client() -> None:
    metrics = CloudWatchMetrics.from_env()

    assert metrics.enabled is False
    assert metrics.client is None
    metrics.record_pricing_run(operation="markup", updated_count=3)


@mock_aws
def test_enabled_metrics_publish(monkeypatch) -> None:
    monkeypatch.setenv("CLOUDWATCH_METRICS_ENABLED", "true")
    monkeypatch.setenv("CLOUDWATCH_METRICS_NAMESPACE", "GroceryPricingTest")
    metrics = CloudWatchMetrics.from_env()

    metrics.record_pricing_run(operation="markup", updated_count=3)
    metrics.record_pricing_failure(operation="discount", error_type="InvalidPercentage")

    client = boto3.client("cloudwatch", region_name="us-east-1")
    names = {metric["MetricName"] for metric in client.list_metrics(Namespace="GroceryPricingTest")["Metrics"]}
    assert names == {"PricingRunUpdated", "PricingRunFailed"}
