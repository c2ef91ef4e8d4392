from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_DOWN, ROUND_HALF_EVEN, ROUND_HALF_UP, ROUND_UP, Decimal

HUNDRED = Decimal("100")

ROUNDING_MODES = {
    "half_up": ROUND_HALF_UP,
    "nearest": ROUND_HALF_UP,
    "half_even": ROUND_HALF_EVEN,
    "down": ROUND_DOWN,
    "up": ROUND_UP,
}


@dataclass(frozen=True)
class RoundingRule:
    mode: str = "half_up"
    increment: Decimal = Decimal("0.01")

    def __post_init__(self) -> None:
        if self.mode not in ROUNDING_MODES:
            raise ValueError(f"unsupported rounding mode '{self.mode}'")


CURRENCY_ROUNDING = RoundingRule()


def round_price(value: Decimal, rounding: RoundingRule = CURRENCY_ROUNDING) -> Decimal:
    if rounding.increment <= 0:
        return value
    increments = (value / rounding.increment).quantize(Decimal("1"), rounding=ROUNDING_MODES[rounding.mode])
    return increments * rounding.increment


def markup_price(original_price: Decimal, percentage: Decimal, rounding: RoundingRule = CURRENCY_ROUNDING) -> Decimal:
    return round_price(original_price * (Decimal("1") + percentage / HUNDRED), rounding)


def discount_price(current_price: Decimal, percentage: Decimal, rounding: RoundingRule = CURRENCY_ROUNDING) -> Decimal:
    return round_price(current_price * (Decimal("1") - percentage / HUNDRED), rounding)
