from __future__ import annotations

import logging
import os
from dataclasses import asdict
from typing import List

from fastapi import FastAPI, HTTPException

from grocery_pricing.app.config.loader import load_pricing_config_from_env
from grocery_pricing.app.models.pricing import (
    AdjustRangeInput,
    AdjustRequest,
    AdjustResponse,
    BundleMarkupRequest,
    BundleMarkupResponse,
    PopulationRequest,
    PopulationResponse,
    RangePopulation,
    RangesResponse,
    RangeSetting,
)
from grocery_pricing.engine.pricing.ranges import PriceRangeDefinition, RangeAdjustment
from grocery_pricing.engine.service import PricingService
from grocery_pricing.persistence.dynamo_bundles import DynamoBundles
from grocery_pricing.persistence.dynamo_products import DynamoProducts
from grocery_pricing.persistence.dynamo_range_settings import DynamoRangeSettings
from grocery_pricing.persistence.memory import InMemoryBundles, InMemoryProducts, InMemoryRangeSettings
from grocery_pricing.util.errors import (
    BundleStoreUnavailable,
    CatalogUnavailable,
    InvalidPercentage,
    InvalidRange,
    PartialApplyFailure,
)

products_table = os.getenv("PRODUCTS_TABLE")
bundles_table = os.getenv("BUNDLES_TABLE")
range_settings_table = os.getenv("RANGE_SETTINGS_TABLE")

pricing_service = PricingService(
    catalog=DynamoProducts(products_table) if products_table else InMemoryProducts(),
    bundles=DynamoBundles(bundles_table) if bundles_table else InMemoryBundles(),
    range_settings=DynamoRangeSettings(range_settings_table) if range_settings_table else InMemoryRangeSettings(),
    config=load_pricing_config_from_env(),
)

logger = logging.getLogger("grocery_pricing.api")

app = FastAPI()


def _adjustments(ranges: List[AdjustRangeInput]) -> List[RangeAdjustment]:
    return [
        RangeAdjustment(
            range=PriceRangeDefinition(
                min_value=item.min_value,
                max_value=item.max_value,
                label=item.label,
                include_max=item.include_max,
            ),
            percentage=item.percentage,
        )
        for item in ranges
    ]


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, (InvalidRange, InvalidPercentage)):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, (CatalogUnavailable, BundleStoreUnavailable)):
        logger.exception("pricing_store_unavailable")
        return HTTPException(status_code=503, detail="Pricing store unavailable")
    if isinstance(exc, PartialApplyFailure):
        logger.exception("pricing_partial_apply")
        return HTTPException(
            status_code=500,
            detail={
                "message": str(exc),
                "operation": exc.operation,
                "completed": exc.completed,
                "failed": exc.failed,
                "updated_count": exc.updated_count,
            },
        )
    return HTTPException(status_code=500, detail="Pricing operation failed")


@app.get("/v1/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/v1/pricing/ranges")
def get_ranges() -> RangesResponse:
    try:
        overview = pricing_service.get_ranges()
    except CatalogUnavailable as exc:
        raise _http_error(exc) from exc
    return RangesResponse(
        total_products=overview.total_products,
        ranges=[RangeSetting(**asdict(summary)) for summary in overview.ranges],
    )


@app.post("/v1/pricing/ranges/populations")
def get_range_populations(request: PopulationRequest) -> PopulationResponse:
    try:
        definitions = [
            PriceRangeDefinition(
                min_value=item.min_value,
                max_value=item.max_value,
                label=item.label,
                include_max=item.include_max,
            )
            for item in request.ranges
        ]
        result = pricing_service.compute_range_populations(definitions)
    except (InvalidRange, CatalogUnavailable) as exc:
        raise _http_error(exc) from exc
    return PopulationResponse(
        total_products=result.total_products,
        ranges=[
            RangePopulation(**item.model_dump(), product_count=result.populations[index])
            for index, item in enumerate(request.ranges)
        ],
    )


@app.post("/v1/pricing/markup")
def apply_markup(request: AdjustRequest) -> AdjustResponse:
    try:
        result = pricing_service.apply_markup(_adjustments(request.ranges))
    except (InvalidRange, InvalidPercentage, CatalogUnavailable, PartialApplyFailure) as exc:
        raise _http_error(exc) from exc
    return AdjustResponse(updated_count=result.updated_count)


@app.post("/v1/pricing/discount")
def apply_discount(request: AdjustRequest) -> AdjustResponse:
    try:
        result = pricing_service.apply_discount(_adjustments(request.ranges))
    except (InvalidRange, InvalidPercentage, CatalogUnavailable, PartialApplyFailure) as exc:
        raise _http_error(exc) from exc
    return AdjustResponse(updated_count=result.updated_count)


@app.post("/v1/pricing/bundles/markup")
def apply_bundle_markup(request: BundleMarkupRequest) -> BundleMarkupResponse:
    try:
        result = pricing_service.apply_bundle_markup(request.percentage)
    except (InvalidPercentage, CatalogUnavailable, BundleStoreUnavailable, PartialApplyFailure) as exc:
        raise _http_error(exc) from exc
    return BundleMarkupResponse(
        updated_count=result.updated_count,
        skipped_bundle_ids=result.skipped_bundle_ids,
    )
