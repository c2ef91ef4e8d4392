from __future__ import annotations

from decimal import Decimal
from typing import List

from pydantic import BaseModel, Field


class RoundingConfig(BaseModel):
    mode: str = "half_up"
    increment: Decimal = Decimal("0.01")


class RangeConfig(BaseModel):
    id: str
    min_value: Decimal
    max_value: Decimal
    label: str
    include_max: bool = False


def default_ranges() -> List[RangeConfig]:
    return [
        RangeConfig(id="0-10", min_value=Decimal("0"), max_value=Decimal("10"), label="0 - 10"),
        RangeConfig(id="10-50", min_value=Decimal("10"), max_value=Decimal("50"), label="10 - 50"),
        RangeConfig(id="50-100", min_value=Decimal("50"), max_value=Decimal("100"), label="50 - 100"),
        RangeConfig(id="100-500", min_value=Decimal("100"), max_value=Decimal("500"), label="100 - 500"),
        RangeConfig(id="500+", min_value=Decimal("500"), max_value=Decimal("999999"), label="500+"),
    ]


class PricingConfig(BaseModel):
    schema_version: int = 1
    currency: str = "USD"
    rounding: RoundingConfig = Field(default_factory=RoundingConfig)
    ranges: List[RangeConfig] = Field(default_factory=default_ranges)
