"""Serialized schedule builder operations."""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from activity_calendar.schemas.age import AgeBucket
from activity_calendar.schemas.schedule import ScheduleModel


class _Op(BaseModel):
    model_config = ConfigDict(frozen=True)


class AddSession(_Op):
    op: Literal["add_session"] = "add_session"


class RemoveSession(_Op):
    op: Literal["remove_session"] = "remove_session"
    id: str


class DuplicateSession(_Op):
    op: Literal["duplicate_session"] = "duplicate_session"
    id: str


class UpdateSession(_Op):
    op: Literal["update_session"] = "update_session"
    id: str
    fields: dict[str, Any] = Field(default_factory=dict)


class AddSection(_Op):
    op: Literal["add_section"] = "add_section"


class RemoveSection(_Op):
    op: Literal["remove_section"] = "remove_section"
    id: str


class DuplicateSection(_Op):
    op: Literal["duplicate_section"] = "duplicate_section"
    id: str


class UpdateSection(_Op):
    op: Literal["update_section"] = "update_section"
    id: str
    fields: dict[str, Any] = Field(default_factory=dict)


# Day keys stay plain strings so a bad key reaches the editor as a 400.
class AddTimeBlock(_Op):
    op: Literal["add_time_block"] = "add_time_block"
    day: str


class RemoveTimeBlock(_Op):
    op: Literal["remove_time_block"] = "remove_time_block"
    day: str
    id: str


class DuplicateTimeBlock(_Op):
    op: Literal["duplicate_time_block"] = "duplicate_time_block"
    day: str
    id: str


class UpdateTimeBlock(_Op):
    op: Literal["update_time_block"] = "update_time_block"
    day: str
    id: str
    start: str | None = None
    end: str | None = None


class ToggleDayAvailable(_Op):
    op: Literal["toggle_day_available"] = "toggle_day_available"
    day: str


class SetWeeklyHours(_Op):
    op: Literal["set_weekly_hours"] = "set_weekly_hours"
    day: str
    start: str | None = None
    end: str | None = None


class UpdateFixed(_Op):
    op: Literal["update_fixed"] = "update_fixed"
    fields: dict[str, Any] = Field(default_factory=dict)


class SwitchSchedule(_Op):
    op: Literal["switch_schedule"] = "switch_schedule"
    schedule_type: str


class ToggleAgeBucket(_Op):
    op: Literal["toggle_age_bucket"] = "toggle_age_bucket"
    bucket: AgeBucket


BuilderOp = Annotated[
    Union[
        AddSession,
        RemoveSession,
        DuplicateSession,
        UpdateSession,
        AddSection,
        RemoveSection,
        DuplicateSection,
        UpdateSection,
        AddTimeBlock,
        RemoveTimeBlock,
        DuplicateTimeBlock,
        UpdateTimeBlock,
        ToggleDayAvailable,
        SetWeeklyHours,
        UpdateFixed,
        SwitchSchedule,
        ToggleAgeBucket,
    ],
    Field(discriminator="op"),
]


class ScheduleEditRequest(BaseModel):
    """One builder operation against the stored version it was made from."""

    op: BuilderOp
    expected_version: int = Field(ge=0)


class ScheduleSubmitRequest(BaseModel):
    model: ScheduleModel
    expected_version: int = Field(ge=0)


class StoredScheduleRead(BaseModel):
    """A schedule document together with its stored version."""

    model: ScheduleModel
    version: int

    model_config = ConfigDict(from_attributes=True)


class ScheduleConflictRead(BaseModel):
    """Returned with HTTP 409 when a save raced another writer."""

    detail: str
    current_version: int
    snapshot: ScheduleModel
