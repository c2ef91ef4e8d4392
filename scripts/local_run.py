#!/usr/bin/env python
from __future__ import annotations

import argparse
import csv
from pathlib import Path
from typing import Any, Dict, List

import yaml

from grocery_pricing.app.config.loader import load_pricing_config
from grocery_pricing.app.models.config import PricingConfig
from grocery_pricing.engine.canonical.models import Bundle, Product
from grocery_pricing.engine.pricing.ranges import PriceRangeDefinition, RangeAdjustment
from grocery_pricing.engine.service import PricingService
from grocery_pricing.persistence.memory import InMemoryBundles, InMemoryProducts, InMemoryRangeSettings

PRODUCT_COLUMNS = ["id", "original_price", "current_price"]
BUNDLE_COLUMNS = ["id", "product_ids", "original_price", "current_price", "savings", "discount_percentage"]


def parse_adjustments(values: list[str]) -> list[RangeAdjustment]:
    adjustments: list[RangeAdjustment] = []
    for value in values:
        parts = value.split(":")
        if len(parts) != 3:
            raise ValueError("range adjustment must be min:max:percentage")
        min_value, max_value, percentage = parts
        adjustments.append(
            RangeAdjustment(
                range=PriceRangeDefinition(min_value=min_value, max_value=max_value),
                percentage=percentage,
            )
        )
    return adjustments


def load_catalog(path: Path) -> tuple[InMemoryProducts, InMemoryBundles]:
    with path.open("r", encoding="utf-8") as handle:
        data: Dict[str, Any] = yaml.safe_load(handle) or {}
    products = InMemoryProducts(Product.model_validate(item) for item in data.get("products", []))
    bundles = InMemoryBundles(Bundle.model_validate(item) for item in data.get("bundles", []))
    return products, bundles


def write_csv(path: Path, rows: List[Dict[str, object]], columns: list[str]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=columns, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(rows)


def main() -> None:
    parser = argparse.ArgumentParser(description="Run pricing operations against a local catalog fixture")
    parser.add_argument("--config", help="Path to pricing config YAML")
    parser.add_argument("--catalog", required=True, help="Path to catalog YAML with products and bundles")
    parser.add_argument("--markup", action="append", default=[], help="Markup range (min:max:percentage)")
    parser.add_argument("--discount", action="append", default=[], help="Discount range (min:max:percentage)")
    parser.add_argument("--bundle-markup", help="Markup percentage applied to every bundle total")
    parser.add_argument("--output-dir", default="outputs")
    args = parser.parse_args()

    config = load_pricing_config(args.config) if args.config else PricingConfig()
    products, bundles = load_catalog(Path(args.catalog))
    service = PricingService(
        catalog=products,
        bundles=bundles,
        range_settings=InMemoryRangeSettings(),
        config=config,
    )

    overview = service.get_ranges()
    for summary in overview.ranges:
        print(f"{summary.label}: {summary.product_count} of {overview.total_products}")

    if args.markup:
        result = service.apply_markup(parse_adjustments(args.markup))
        print(f"markup updated {result.updated_count} product(s)")
    if args.discount:
        result = service.apply_discount(parse_adjustments(args.discount))
        print(f"discount updated {result.updated_count} product(s)")
    if args.bundle_markup is not None:
        bundle_result = service.apply_bundle_markup(args.bundle_markup)
        print(
            f"bundle markup updated {bundle_result.updated_count} bundle(s), "
            f"skipped {bundle_result.skipped_bundle_ids}"
        )

    output_dir = Path(args.output_dir)
    write_csv(output_dir / "products.csv", [item.model_dump() for item in products.list_products()], PRODUCT_COLUMNS)
    write_csv(
        output_dir / "bundles.csv",
        [{**item.model_dump(), "product_ids": "|".join(item.product_ids)} for item in bundles.list_bundles()],
        BUNDLE_COLUMNS,
    )


if __name__ == "__main__":
    main()
