from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class RangeInput(BaseModel):
    min_value: Decimal
    max_value: Decimal
    label: Optional[str] = None
    include_max: bool = True


class AdjustRangeInput(BaseModel):
    min_value: Decimal
    max_value: Decimal
    percentage: Decimal
    label: Optional[str] = None
    include_max: bool = True


class PopulationRequest(BaseModel):
    ranges: List[RangeInput] = Field(min_length=1)


class AdjustRequest(BaseModel):
    ranges: List[AdjustRangeInput] = Field(min_length=1)


class BundleMarkupRequest(BaseModel):
    percentage: Decimal


class RangePopulation(RangeInput):
    product_count: int


class PopulationResponse(BaseModel):
    total_products: int
    ranges: List[RangePopulation]


class RangeSetting(BaseModel):
    id: str
    min_value: Decimal
    max_value: Decimal
    label: str
    percentage: Decimal
    product_count: int


class RangesResponse(BaseModel):
    total_products: int
    ranges: List[RangeSetting]


class AdjustResponse(BaseModel):
    updated_count: int


class BundleMarkupResponse(BaseModel):
    updated_count: int
    skipped_bundle_ids: List[str] = Field(default_factory=list)
