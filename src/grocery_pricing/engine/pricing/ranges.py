"""Price range value types shared by the range-based pricing engines."""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from grocery_pricing.util.errors import InvalidPercentage, InvalidRange

MARKUP = "markup"
DISCOUNT = "discount"
CONTEXTS = {MARKUP, DISCOUNT}


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"invalid decimal: {value}") from exc


def parse_percentage(value: Any) -> Decimal:
    try:
        return to_decimal(value)
    except ValueError as exc:
        raise InvalidPercentage(f"percentage is not a number: {value!r}") from exc


def parse_bound(value: Any) -> Decimal:
    try:
        return to_decimal(value)
    except ValueError as exc:
        raise InvalidRange(f"range bound is not a number: {value!r}") from exc


def validate_bounds(min_value: Decimal, max_value: Decimal) -> None:
    if not (min_value.is_finite() and max_value.is_finite()):
        raise InvalidRange(f"range bounds must be finite, got {min_value} - {max_value}")
    if min_value < 0:
        raise InvalidRange(f"min_value must be >= 0, got {min_value}")
    if max_value < min_value:
        raise InvalidRange(f"max_value {max_value} is below min_value {min_value}")


def validate_percentage(percentage: Decimal, context: str) -> None:
    if context not in CONTEXTS:
        raise ValueError(f"unknown pricing context '{context}'")
    if not percentage.is_finite():
        raise InvalidPercentage(f"{context} percentage must be finite, got {percentage}")
    if percentage < 0:
        raise InvalidPercentage(f"{context} percentage must be >= 0, got {percentage}")
    if context == DISCOUNT and percentage > 100:
        raise InvalidPercentage(f"discount percentage must be <= 100, got {percentage}")


def validate(min_value: Decimal, max_value: Decimal, percentage: Decimal, context: str) -> None:
    """Check a range and its percentage for the given context.

    Markup percentages have no upper bound; discounts are capped at 100.
    """
    validate_bounds(min_value, max_value)
    validate_percentage(percentage, context)


@dataclass(frozen=True)
class PriceRangeDefinition:
    """A band of original prices. Both bounds are inclusive unless ``include_max`` is off."""

    min_value: Decimal
    max_value: Decimal
    label: Optional[str] = None
    include_max: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "min_value", parse_bound(self.min_value))
        object.__setattr__(self, "max_value", parse_bound(self.max_value))
        validate_bounds(self.min_value, self.max_value)
        if self.label is None:
            object.__setattr__(self, "label", f"{self.min_value} - {self.max_value}")

    def contains(self, price: Decimal) -> bool:
        if price < self.min_value:
            return False
        if self.include_max:
            return price <= self.max_value
        return price < self.max_value

    @property
    def range_id(self) -> str:
        return f"{self.min_value}-{self.max_value}"


@dataclass(frozen=True)
class RangeAdjustment:
    range: PriceRangeDefinition
    percentage: Decimal = field(default=Decimal("0"))

    def __post_init__(self) -> None:
        object.__setattr__(self, "percentage", parse_percentage(self.percentage))

    def validate(self, context: str) -> None:
        validate(self.range.min_value, self.range.max_value, self.percentage, context)
