"""Price display and family quotes for listed activities."""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from activity_calendar.schemas.pricing import PriceUnit, SiblingDiscountType
from activity_calendar.schemas.schedule import (
    ActivityKind,
    OngoingWeekly,
    ScheduleModel,
)

MONEY_PLACES = Decimal("0.01")

_NON_MONEY = re.compile(r"[^0-9.]")


@dataclass(slots=True)
class PricingLine:
    """Individual component contributing to a family quote."""

    description: str
    amount: Decimal


@dataclass(slots=True)
class SiblingQuote:
    """Aggregate pricing output for registering several children."""

    items: list[PricingLine]
    subtotal: Decimal
    discount_total: Decimal
    total: Decimal

    def to_dict(self) -> dict[str, Any]:
        """Serialize the quote to plain types for responses."""
        return {
            "items": [
                {"description": line.description, "amount": _to_str(line.amount)}
                for line in self.items
            ],
            "subtotal": _to_str(self.subtotal),
            "discount_total": _to_str(self.discount_total),
            "total": _to_str(self.total),
        }


def _to_money(value: Decimal | int | str) -> Decimal:
    return Decimal(value).quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


def _to_str(value: Decimal) -> str:
    return f"{value.quantize(MONEY_PLACES, rounding=ROUND_HALF_UP):.2f}"


def parse_money_to_cents(raw: str | None) -> int | None:
    """Parse host-entered money text such as ``450``, ``450.5`` or ``$450.00``."""
    if raw is None:
        return None
    cleaned = _NON_MONEY.sub("", raw)
    if not any(char.isdigit() for char in cleaned):
        return None
    dollars_part, _, rest = cleaned.partition(".")
    decimals = rest.replace(".", "")[:2].ljust(2, "0")
    return int(dollars_part or "0") * 100 + int(decimals)


def format_cents(cents: int) -> str:
    """Render cents as host-facing money text, dropping a zero fraction."""
    dollars, remainder = divmod(cents, 100)
    if remainder == 0:
        return f"{dollars}"
    return f"{dollars}.{remainder:02d}"


def derive_price_unit(model: ScheduleModel) -> PriceUnit:
    """Unit shown next to the price of ``model``."""
    if model.pricing.price_unit is not None:
        return model.pricing.price_unit
    if model.activity_kind is ActivityKind.CLASS:
        return PriceUnit.PER_CLASS
    schedule = model.schedule
    if isinstance(schedule, OngoingWeekly):
        days_with_hours = [
            day
            for day, hours in schedule.weekly.items()
            if hours.start is not None or hours.end is not None
        ]
        if len(days_with_hours) >= 2:
            return PriceUnit.PER_WEEK
    return PriceUnit.PER_SESSION


def _sibling_discount(model: ScheduleModel, base: Decimal) -> Decimal:
    discount = model.add_ons.sibling_discount
    if not discount.enabled or discount.value is None:
        return Decimal("0.00")
    if discount.type is SiblingDiscountType.PERCENT:
        try:
            percent = Decimal(_NON_MONEY.sub("", discount.value) or "0")
        except InvalidOperation:
            return Decimal("0.00")
        return _to_money(base * min(percent, Decimal(100)) / Decimal(100))
    if discount.type is SiblingDiscountType.AMOUNT:
        cents = parse_money_to_cents(discount.value)
        return _to_money(Decimal(cents or 0) / 100)
    return Decimal("0.00")


def quote_siblings(model: ScheduleModel, children: int) -> SiblingQuote:
    """Price a registration for ``children`` kids from one family.

    The first child pays the listed price; each additional child gets the
    sibling discount, never going below zero.
    """
    if children < 1:
        raise ValueError("At least one child is required")
    if model.pricing.price_cents is None:
        raise ValueError("Activity has no listed price")

    base = _to_money(Decimal(model.pricing.price_cents) / 100)
    discount = _sibling_discount(model, base)
    items = [PricingLine(description="Child 1", amount=base)]
    for index in range(2, children + 1):
        items.append(
            PricingLine(
                description=f"Child {index}", amount=max(base - discount, Decimal("0.00"))
            )
        )

    subtotal = base * children
    total = sum((line.amount for line in items), Decimal("0.00"))
    return SiblingQuote(
        items=items,
        subtotal=_to_money(subtotal),
        discount_total=_to_money(subtotal - total),
        total=_to_money(total),
    )
