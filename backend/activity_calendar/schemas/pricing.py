"""Pricing and add-on schema definitions."""

from __future__ import annotations

import enum
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from activity_calendar.schemas.common import OptionalText


class PriceUnit(str, enum.Enum):
    """Unit a listed price applies to."""

    PER_SESSION = "per session"
    PER_WEEK = "per week"
    PER_CLASS = "per class"
    PER_DAY = "per day"


class Pricing(BaseModel):
    """Listed price for one child."""

    price_cents: int | None = Field(default=None, ge=0)
    display: OptionalText = None
    currency: str = "USD"
    price_unit: PriceUnit | None = None

    model_config = ConfigDict(frozen=True)


class ExtendedCare(BaseModel):
    """Early drop-off or extended-day option; ``price`` is the host's money text."""

    enabled: bool = False
    price: OptionalText = None
    start: OptionalText = None
    end: OptionalText = None

    model_config = ConfigDict(frozen=True)


class SiblingDiscountType(str, enum.Enum):
    NONE = "none"
    PERCENT = "percent"
    AMOUNT = "amount"


class SiblingDiscount(BaseModel):
    """Discount applied to each additional child in a family registration.

    ``value`` holds percentage points for ``percent`` and money text for
    ``amount``.
    """

    enabled: bool = False
    type: SiblingDiscountType = SiblingDiscountType.NONE
    value: OptionalText = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _migrate_legacy_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        migrated = {key: value for key, value in data.items() if key != "price"}
        if migrated.get("value") in (None, "") and data.get("price") not in (None, ""):
            migrated["value"] = str(data["price"])
        if not migrated.get("enabled"):
            migrated["type"] = SiblingDiscountType.NONE
            migrated["value"] = None
        elif not migrated.get("type"):
            migrated["type"] = SiblingDiscountType.AMOUNT
        return migrated


class AddOns(BaseModel):
    """Optional extras offered alongside a camp."""

    early_dropoff: ExtendedCare = Field(default_factory=ExtendedCare)
    extended_day: ExtendedCare = Field(default_factory=ExtendedCare)
    sibling_discount: SiblingDiscount = Field(default_factory=SiblingDiscount)

    model_config = ConfigDict(frozen=True)


class PricingLineRead(BaseModel):
    """Individual line item within a family quote."""

    description: str
    amount: Decimal

    model_config = ConfigDict(from_attributes=True)


class SiblingQuoteRead(BaseModel):
    """Listed price, its unit, and the quote for a family registration."""

    price_unit: PriceUnit
    display: str | None
    items: list[PricingLineRead]
    subtotal: Decimal
    discount_total: Decimal
    total: Decimal
