"""Structural edits on a schedule document.

:class:`ScheduleEditor` holds the latest :class:`ScheduleModel` snapshot. Every
operation checks its preconditions first, builds the next snapshot from frozen
models and only then replaces ``snapshot``; a failed operation leaves it as it
was.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from activity_calendar.schemas.age import AgeBucket
from activity_calendar.schemas.common import new_element_id
from activity_calendar.schemas.schedule import (
    LEGAL_SCHEDULE_TYPES,
    CampSession,
    CampSessions,
    ClassOngoing,
    ClassSessions,
    DayAvailability,
    Fixed,
    OngoingWeekly,
    ScheduleModel,
    Section,
    TimeBlock,
    Weekday,
    WeeklyHours,
    empty_schedule,
)
from activity_calendar.schemas.schedule_edit import BuilderOp

logger = logging.getLogger(__name__)

_Variant = TypeVar("_Variant", bound=BaseModel)
_Element = TypeVar("_Element", CampSession, Section, TimeBlock)


class InvalidEditorOperation(ValueError):
    """Raised when an edit does not apply to the current snapshot."""


def _parse_day(day: str | Weekday) -> Weekday:
    try:
        return Weekday(day)
    except ValueError as exc:
        raise InvalidEditorOperation(f"Unknown day {day!r}") from exc


def _index_of(items: tuple[_Element, ...], element_id: str, noun: str) -> int:
    for index, item in enumerate(items):
        if item.id == element_id:
            return index
    raise InvalidEditorOperation(f"Unknown {noun} {element_id!r}")


def _without(items: tuple[_Element, ...], index: int) -> tuple[_Element, ...]:
    # Collections never shrink below one element.
    if len(items) <= 1:
        return items
    return items[:index] + items[index + 1 :]


def _with_copy(items: tuple[_Element, ...], index: int) -> tuple[_Element, ...]:
    copy = items[index].model_copy(update={"id": new_element_id()})
    return items[: index + 1] + (copy,) + items[index + 1 :]


def _rebuild(
    model_cls: type[_Variant], current: BaseModel, fields: Mapping[str, Any]
) -> _Variant:
    unknown = (set(fields) - set(model_cls.model_fields)) | ({"id", "type"} & set(fields))
    if unknown:
        raise InvalidEditorOperation(
            f"Cannot set {', '.join(sorted(unknown))} on {model_cls.__name__}"
        )
    try:
        return model_cls.model_validate({**current.model_dump(), **fields})
    except ValidationError as exc:
        raise InvalidEditorOperation(str(exc)) from exc


class ScheduleEditor:
    """Mutable builder returning an immutable snapshot after each operation."""

    def __init__(self, model: ScheduleModel) -> None:
        self._snapshot = model

    @property
    def snapshot(self) -> ScheduleModel:
        return self._snapshot

    def _variant(self, variant_cls: type[_Variant]) -> _Variant:
        schedule = self._snapshot.schedule
        if not isinstance(schedule, variant_cls):
            raise InvalidEditorOperation(
                f"Operation needs a {variant_cls.__name__} schedule, "
                f"not {schedule.type}"
            )
        return schedule

    def _commit(self, **update: Any) -> ScheduleModel:
        self._snapshot = self._snapshot.model_copy(update=update)
        return self._snapshot

    def _commit_schedule(self, schedule: BaseModel) -> ScheduleModel:
        return self._commit(schedule=schedule)

    # Camp sessions

    def add_session(self) -> ScheduleModel:
        schedule = self._variant(CampSessions)
        return self._commit_schedule(
            schedule.model_copy(update={"sessions": schedule.sessions + (CampSession(),)})
        )

    def remove_session(self, element_id: str) -> ScheduleModel:
        schedule = self._variant(CampSessions)
        index = _index_of(schedule.sessions, element_id, "session")
        return self._commit_schedule(
            schedule.model_copy(update={"sessions": _without(schedule.sessions, index)})
        )

    def duplicate_session(self, element_id: str) -> ScheduleModel:
        schedule = self._variant(CampSessions)
        index = _index_of(schedule.sessions, element_id, "session")
        return self._commit_schedule(
            schedule.model_copy(update={"sessions": _with_copy(schedule.sessions, index)})
        )

    def update_session(self, element_id: str, fields: Mapping[str, Any]) -> ScheduleModel:
        schedule = self._variant(CampSessions)
        index = _index_of(schedule.sessions, element_id, "session")
        updated = _rebuild(CampSession, schedule.sessions[index], fields)
        sessions = schedule.sessions[:index] + (updated,) + schedule.sessions[index + 1 :]
        return self._commit_schedule(schedule.model_copy(update={"sessions": sessions}))

    # Class sections

    def add_section(self) -> ScheduleModel:
        schedule = self._variant(ClassSessions)
        return self._commit_schedule(
            schedule.model_copy(update={"sections": schedule.sections + (Section(),)})
        )

    def remove_section(self, element_id: str) -> ScheduleModel:
        schedule = self._variant(ClassSessions)
        index = _index_of(schedule.sections, element_id, "section")
        return self._commit_schedule(
            schedule.model_copy(update={"sections": _without(schedule.sections, index)})
        )

    def duplicate_section(self, element_id: str) -> ScheduleModel:
        schedule = self._variant(ClassSessions)
        index = _index_of(schedule.sections, element_id, "section")
        return self._commit_schedule(
            schedule.model_copy(update={"sections": _with_copy(schedule.sections, index)})
        )

    def update_section(self, element_id: str, fields: Mapping[str, Any]) -> ScheduleModel:
        schedule = self._variant(ClassSessions)
        index = _index_of(schedule.sections, element_id, "section")
        updated = _rebuild(Section, schedule.sections[index], fields)
        sections = schedule.sections[:index] + (updated,) + schedule.sections[index + 1 :]
        return self._commit_schedule(schedule.model_copy(update={"sections": sections}))

    # Class weekly time blocks

    def _available_day(self, day: str | Weekday) -> tuple[ClassOngoing, Weekday, DayAvailability]:
        schedule = self._variant(ClassOngoing)
        key = _parse_day(day)
        availability = schedule.weekly.get(key)
        if availability is None or not availability.available:
            raise InvalidEditorOperation(f"{key.value} is not available")
        return schedule, key, availability

    def _commit_day(
        self, schedule: ClassOngoing, key: Weekday, availability: DayAvailability
    ) -> ScheduleModel:
        weekly = {**schedule.weekly, key: availability}
        return self._commit_schedule(schedule.model_copy(update={"weekly": weekly}))

    def add_time_block(self, day: str | Weekday) -> ScheduleModel:
        schedule, key, availability = self._available_day(day)
        blocks = availability.blocks + (TimeBlock(),)
        return self._commit_day(
            schedule, key, availability.model_copy(update={"blocks": blocks})
        )

    def remove_time_block(self, day: str | Weekday, element_id: str) -> ScheduleModel:
        schedule, key, availability = self._available_day(day)
        index = _index_of(availability.blocks, element_id, "time block")
        blocks = _without(availability.blocks, index)
        return self._commit_day(
            schedule, key, availability.model_copy(update={"blocks": blocks})
        )

    def duplicate_time_block(self, day: str | Weekday, element_id: str) -> ScheduleModel:
        schedule, key, availability = self._available_day(day)
        index = _index_of(availability.blocks, element_id, "time block")
        blocks = _with_copy(availability.blocks, index)
        return self._commit_day(
            schedule, key, availability.model_copy(update={"blocks": blocks})
        )

    def update_time_block(
        self,
        day: str | Weekday,
        element_id: str,
        start: str | None = None,
        end: str | None = None,
    ) -> ScheduleModel:
        schedule, key, availability = self._available_day(day)
        index = _index_of(availability.blocks, element_id, "time block")
        updated = TimeBlock(id=element_id, start=start, end=end)
        blocks = availability.blocks[:index] + (updated,) + availability.blocks[index + 1 :]
        return self._commit_day(
            schedule, key, availability.model_copy(update={"blocks": blocks})
        )

    def toggle_day_available(self, day: str | Weekday) -> ScheduleModel:
        """Closing a day drops its blocks; opening one seeds a single empty block."""
        schedule = self._variant(ClassOngoing)
        key = _parse_day(day)
        current = schedule.weekly.get(key)
        if current is not None and current.available:
            toggled = DayAvailability(available=False)
        else:
            toggled = DayAvailability(available=True, blocks=(TimeBlock(),))
        return self._commit_day(schedule, key, toggled)

    # Ongoing weekly hours and fixed dates

    def set_weekly_hours(
        self, day: str | Weekday, start: str | None = None, end: str | None = None
    ) -> ScheduleModel:
        schedule = self._variant(OngoingWeekly)
        key = _parse_day(day)
        hours = WeeklyHours(start=start, end=end)
        weekly = {k: v for k, v in schedule.weekly.items() if k is not key}
        if hours.start is not None or hours.end is not None:
            weekly[key] = hours
        return self._commit_schedule(schedule.model_copy(update={"weekly": weekly}))

    def update_fixed(self, fields: Mapping[str, Any]) -> ScheduleModel:
        schedule = self._variant(Fixed)
        return self._commit_schedule(_rebuild(Fixed, schedule, fields))

    # Whole-document operations

    def switch_schedule(self, schedule_type: str) -> ScheduleModel:
        """Replace the variant with a freshly seeded one of ``schedule_type``."""
        kind = self._snapshot.activity_kind
        if schedule_type not in LEGAL_SCHEDULE_TYPES[kind]:
            raise InvalidEditorOperation(
                f"A {kind.value} cannot use a {schedule_type} schedule"
            )
        if self._snapshot.schedule.type == schedule_type:
            return self._snapshot
        return self._commit_schedule(empty_schedule(schedule_type))

    def toggle_age_bucket(self, bucket: str | AgeBucket) -> ScheduleModel:
        try:
            selected = AgeBucket(bucket)
        except ValueError as exc:
            raise InvalidEditorOperation(f"Unknown age bucket {bucket!r}") from exc
        return self._commit(age=self._snapshot.age.toggle(selected))

    def apply(self, op: BuilderOp) -> ScheduleModel:
        """Dispatch a serialized builder operation."""
        # Keyword names come from the op schema only; ``fields`` stays one mapping.
        kwargs = op.model_dump(exclude={"op"})
        if "id" in kwargs:
            kwargs["element_id"] = kwargs.pop("id")
        logger.debug("Applying schedule edit %s", op.op)
        return getattr(self, op.op)(**kwargs)
