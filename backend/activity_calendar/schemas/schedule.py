"""Schedule document schemas.

An activity is timed by exactly one schedule variant. Variants are frozen
pydantic models discriminated on ``type``; every date and time field keeps the
host's raw text (``YYYY-MM-DD`` / ``HH:MM``) and is parsed later by the time
resolver.
"""

from __future__ import annotations

import enum
from datetime import date
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from activity_calendar.schemas.age import AgeRange
from activity_calendar.schemas.common import OptionalText, new_element_id
from activity_calendar.schemas.pricing import AddOns, Pricing


class Weekday(str, enum.Enum):
    """Day keys used by weekly schedules."""

    SUN = "sun"
    MON = "mon"
    TUE = "tue"
    WED = "wed"
    THU = "thu"
    FRI = "fri"
    SAT = "sat"


WEEKDAY_ORDER: tuple[Weekday, ...] = tuple(Weekday)

# ``date.weekday()`` numbering: Monday is 0.
_PY_WEEKDAYS: tuple[Weekday, ...] = (
    Weekday.MON,
    Weekday.TUE,
    Weekday.WED,
    Weekday.THU,
    Weekday.FRI,
    Weekday.SAT,
    Weekday.SUN,
)


def weekday_of(day: date) -> Weekday:
    return _PY_WEEKDAYS[day.weekday()]


class ActivityKind(str, enum.Enum):
    CAMP = "camp"
    CLASS = "class"


class ClassFrequency(str, enum.Enum):
    """How often an ongoing class meets."""

    ONCE_WEEK = "once_week"
    TWICE_WEEK = "twice_week"
    THREE_WEEK = "three_week"
    MULTIPLE_WEEK = "multiple_week"
    DAILY = "daily"
    FLEXIBLE = "flexible"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Fixed(_Frozen):
    """A single date range, optionally all day."""

    type: Literal["fixed"] = "fixed"
    start_date: OptionalText = None
    end_date: OptionalText = None
    start_time: OptionalText = None
    end_time: OptionalText = None
    all_day: bool = False
    repeat_rule: str = "none"


class WeeklyHours(_Frozen):
    start: OptionalText = None
    end: OptionalText = None


class OngoingWeekly(_Frozen):
    """Open-ended weekly hours, one block per weekday."""

    type: Literal["ongoing_weekly"] = "ongoing_weekly"
    start_date: OptionalText = None
    end_date: OptionalText = None
    weekly: dict[Weekday, WeeklyHours] = Field(default_factory=dict)


class CampSession(_Frozen):
    id: str = Field(default_factory=new_element_id)
    start_date: OptionalText = None
    end_date: OptionalText = None
    start_time: OptionalText = None
    end_time: OptionalText = None
    capacity: int | None = Field(default=None, ge=0)
    waitlist_enabled: bool = False


def _one_session() -> tuple[CampSession, ...]:
    return (CampSession(),)


class CampSessions(_Frozen):
    """Discrete camp sessions in authoring order."""

    type: Literal["camp_sessions"] = "camp_sessions"
    sessions: tuple[CampSession, ...] = Field(default_factory=_one_session, min_length=1)


class TimeBlock(_Frozen):
    id: str = Field(default_factory=new_element_id)
    start: OptionalText = None
    end: OptionalText = None


class DayAvailability(_Frozen):
    """Whether a class meets on a weekday, and during which blocks."""

    available: bool = False
    blocks: tuple[TimeBlock, ...] = ()

    @model_validator(mode="after")
    def _unavailable_has_no_blocks(self) -> "DayAvailability":
        if not self.available and self.blocks:
            raise ValueError("An unavailable day cannot hold time blocks")
        return self


def default_class_weekly() -> dict[Weekday, DayAvailability]:
    """Weekdays open with one empty block each; the weekend closed."""
    weekly: dict[Weekday, DayAvailability] = {}
    for day in WEEKDAY_ORDER:
        if day in (Weekday.SAT, Weekday.SUN):
            weekly[day] = DayAvailability(available=False)
        else:
            weekly[day] = DayAvailability(available=True, blocks=(TimeBlock(),))
    return weekly


class ClassOngoing(_Frozen):
    """A class that meets on a repeating weekly pattern."""

    type: Literal["class_ongoing"] = "class_ongoing"
    weekly: dict[Weekday, DayAvailability] = Field(default_factory=default_class_weekly)
    start_date: OptionalText = None
    duration_minutes: int | None = Field(default=None, gt=0)
    students_per_class: int | None = Field(default=None, ge=1)
    frequency: ClassFrequency | None = None


class Section(_Frozen):
    id: str = Field(default_factory=new_element_id)
    day: Weekday | None = None
    capacity: int | None = Field(default=None, ge=0)
    start_time: OptionalText = None
    end_time: OptionalText = None


def _one_section() -> tuple[Section, ...]:
    return (Section(),)


class ClassSessions(_Frozen):
    """A class sold as fixed-length sections."""

    type: Literal["class_sessions"] = "class_sessions"
    sections: tuple[Section, ...] = Field(default_factory=_one_section, min_length=1)
    start_date: OptionalText = None
    session_length_weeks: int | None = Field(default=None, gt=0)
    meeting_length_minutes: int | None = Field(default=None, gt=0)


ScheduleKind = Annotated[
    Union[Fixed, OngoingWeekly, CampSessions, ClassOngoing, ClassSessions],
    Field(discriminator="type"),
]

ScheduleType = Literal[
    "fixed", "ongoing_weekly", "camp_sessions", "class_ongoing", "class_sessions"
]

_VARIANTS: dict[str, type[BaseModel]] = {
    "fixed": Fixed,
    "ongoing_weekly": OngoingWeekly,
    "camp_sessions": CampSessions,
    "class_ongoing": ClassOngoing,
    "class_sessions": ClassSessions,
}

LEGAL_SCHEDULE_TYPES: dict[ActivityKind, tuple[str, ...]] = {
    ActivityKind.CAMP: ("fixed", "ongoing_weekly", "camp_sessions"),
    ActivityKind.CLASS: ("class_ongoing", "class_sessions"),
}

DEFAULT_SCHEDULE_TYPE: dict[ActivityKind, str] = {
    ActivityKind.CAMP: "fixed",
    ActivityKind.CLASS: "class_ongoing",
}


def empty_schedule(schedule_type: str) -> ScheduleKind:
    """Return a freshly seeded variant of ``schedule_type``."""
    try:
        variant = _VARIANTS[schedule_type]
    except KeyError as exc:
        raise ValueError(f"Unknown schedule type {schedule_type!r}") from exc
    return variant()  # type: ignore[return-value]


class ScheduleModel(_Frozen):
    """The persisted schedule document of one activity."""

    activity_kind: ActivityKind
    schedule: ScheduleKind
    age: AgeRange = Field(default_factory=AgeRange)
    pricing: Pricing = Field(default_factory=Pricing)
    add_ons: AddOns = Field(default_factory=AddOns)

    @model_validator(mode="after")
    def _schedule_matches_kind(self) -> "ScheduleModel":
        if self.schedule.type not in LEGAL_SCHEDULE_TYPES[self.activity_kind]:
            raise ValueError(
                f"A {self.activity_kind.value} cannot use a "
                f"{self.schedule.type} schedule"
            )
        return self

    @classmethod
    def new(cls, activity_kind: ActivityKind) -> "ScheduleModel":
        """Return an empty document seeded with the kind's default variant."""
        return cls(
            activity_kind=activity_kind,
            schedule=empty_schedule(DEFAULT_SCHEDULE_TYPE[activity_kind]),
        )
