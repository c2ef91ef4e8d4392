from __future__ import annotations

from decimal import Decimal
from typing import List

from pydantic import BaseModel, Field, field_validator


class Product(BaseModel):
    id: str
    original_price: Decimal
    current_price: Decimal

    @field_validator("id")
    @classmethod
    def required_stripped(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("value is required")
        return value.strip()

    @field_validator("original_price", "current_price")
    @classmethod
    def non_negative_price(cls, value: Decimal) -> Decimal:
        if value < 0:
            raise ValueError("price must be >= 0")
        return value


class Bundle(BaseModel):
    id: str
    product_ids: List[str] = Field(default_factory=list)
    original_price: Decimal = Decimal("0")
    current_price: Decimal = Decimal("0")
    savings: Decimal = Decimal("0")
    discount_percentage: Decimal = Decimal("0")
    is_active: bool = True

    @field_validator("id")
    @classmethod
    def required_stripped(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("value is required")
        return value.strip()
