"""Age range selection attached to an activity."""

from __future__ import annotations

import enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)


class AgeBucket(str, enum.Enum):
    """Discrete age groups a host can target."""

    ALL = "all"
    AGES_3_5 = "3-5"
    AGES_6_8 = "6-8"
    AGES_9_12 = "9-12"
    AGES_13_PLUS = "13+"


AGE_BUCKET_ORDER: tuple[AgeBucket, ...] = tuple(AgeBucket)

AGE_BUCKET_LABELS: dict[AgeBucket, str] = {
    AgeBucket.ALL: "All ages",
    AgeBucket.AGES_3_5: "3–5",
    AgeBucket.AGES_6_8: "6–8",
    AgeBucket.AGES_9_12: "9–12",
    AgeBucket.AGES_13_PLUS: "13+",
}

_BUCKET_BOUNDS: dict[AgeBucket, tuple[int | None, int | None]] = {
    AgeBucket.ALL: (None, None),
    AgeBucket.AGES_3_5: (3, 5),
    AgeBucket.AGES_6_8: (6, 8),
    AgeBucket.AGES_9_12: (9, 12),
    AgeBucket.AGES_13_PLUS: (13, None),
}


def normalize_buckets(buckets: Any) -> tuple[AgeBucket, ...]:
    """Return buckets deduplicated in canonical order; ``all`` absorbs the rest."""
    selected = {AgeBucket(value) for value in buckets or ()}
    if AgeBucket.ALL in selected:
        return (AgeBucket.ALL,)
    return tuple(bucket for bucket in AGE_BUCKET_ORDER if bucket in selected)


def derive_min_max(buckets: tuple[AgeBucket, ...]) -> tuple[int | None, int | None]:
    """Collapse a bucket selection into an inclusive ``(min, max)`` age pair."""
    if not buckets or AgeBucket.ALL in buckets:
        return None, None
    mins = [_BUCKET_BOUNDS[b][0] for b in buckets if _BUCKET_BOUNDS[b][0] is not None]
    maxs = [_BUCKET_BOUNDS[b][1] for b in buckets]
    minimum = min(mins) if mins else None
    if any(value is None for value in maxs):
        return minimum, None
    return minimum, max(value for value in maxs if value is not None)


def _buckets_from_legacy(data: dict[str, Any]) -> list[str]:
    legacy = data.get("age_bucket")
    if legacy:
        return [] if legacy == AgeBucket.ALL.value else [legacy]
    bounds = (data.get("min_age"), data.get("max_age"))
    for bucket, bucket_bounds in _BUCKET_BOUNDS.items():
        if bucket is not AgeBucket.ALL and bucket_bounds == bounds:
            return [bucket.value]
    return []


class AgeRange(BaseModel):
    """Selected age buckets; numeric bounds are always derived from them."""

    buckets: tuple[AgeBucket, ...] = Field(default_factory=tuple)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _migrate_legacy_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "buckets" in data:
            return data
        migrated = {
            key: value
            for key, value in data.items()
            if key not in {"age_buckets", "age_bucket", "min_age", "max_age"}
        }
        if data.get("age_buckets"):
            migrated["buckets"] = data["age_buckets"]
        else:
            migrated["buckets"] = _buckets_from_legacy(data)
        return migrated

    @field_validator("buckets", mode="after")
    @classmethod
    def _normalize_buckets(cls, value: tuple[AgeBucket, ...]) -> tuple[AgeBucket, ...]:
        return normalize_buckets(value)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def min_age(self) -> int | None:
        return derive_min_max(self.buckets)[0]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def max_age(self) -> int | None:
        return derive_min_max(self.buckets)[1]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def age_bucket(self) -> AgeBucket:
        """Single-bucket mirror kept for older readers of the document."""
        if len(self.buckets) == 1:
            return self.buckets[0]
        return AgeBucket.ALL

    def toggle(self, bucket: AgeBucket) -> "AgeRange":
        """Return the selection after the host clicks ``bucket``."""
        if bucket is AgeBucket.ALL:
            return AgeRange(buckets=() if AgeBucket.ALL in self.buckets else (AgeBucket.ALL,))
        remaining = [b for b in self.buckets if b is not AgeBucket.ALL]
        if bucket in remaining:
            remaining.remove(bucket)
        else:
            remaining.append(bucket)
        return AgeRange(buckets=tuple(remaining))

    def labels(self) -> list[str]:
        return [AGE_BUCKET_LABELS[bucket] for bucket in self.buckets]
