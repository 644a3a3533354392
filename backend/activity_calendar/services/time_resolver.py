"""Resolve a schedule variant into one concrete time range."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta

from activity_calendar.core.settings import ResolverConfig
from activity_calendar.schemas.schedule import (
    CampSessions,
    ClassOngoing,
    ClassSessions,
    Fixed,
    OngoingWeekly,
    ScheduleKind,
    weekday_of,
)

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")

_WALK_DAYS = 7


@dataclass(slots=True, frozen=True)
class TimeRange:
    """Zone-aware ``[start, end]`` pair with ``end >= start``."""

    start: datetime
    end: datetime


def parse_date(text: str | None) -> date | None:
    """Parse ``YYYY-MM-DD``; anything else yields ``None``."""
    if not text or not _DATE_PATTERN.match(text):
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def parse_time(text: str | None) -> time | None:
    """Parse ``HH:MM`` (seconds optional); anything else yields ``None``."""
    if not text:
        return None
    match = _TIME_PATTERN.match(text)
    if match is None:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    second = int(match.group(3) or 0)
    if hour > 23 or minute > 59 or second > 59:
        return None
    return time(hour, minute, second)


def _at(day: date, clock: time, config: ResolverConfig) -> datetime:
    return datetime.combine(day, clock, tzinfo=config.timezone)


def _checked(start: datetime, end: datetime) -> TimeRange | None:
    # Same-zone datetimes compare by wall clock; compare instants instead.
    if end.astimezone(UTC) < start.astimezone(UTC):
        return None
    return TimeRange(start=start, end=end)


def _after(start: datetime, duration: timedelta) -> datetime:
    """Elapsed-time addition, so a DST shift does not stretch the duration."""
    return (start.astimezone(UTC) + duration).astimezone(start.tzinfo)


def _end_date(end_text: str | None, fallback: date) -> date | None:
    # A present but unparseable end date poisons the range.
    if end_text is None:
        return fallback
    return parse_date(end_text)


def _fixed_range(
    *,
    start_date: str | None,
    end_date: str | None,
    start_time: str | None,
    end_time: str | None,
    all_day: bool,
    config: ResolverConfig,
) -> TimeRange | None:
    first_day = parse_date(start_date)
    if first_day is None:
        return None
    last_day = _end_date(end_date, first_day)
    if last_day is None or last_day < first_day:
        return None

    if all_day:
        start = _at(first_day, time.min, config)
        end = _at(last_day + timedelta(days=1), time.min, config)
        return _checked(start, end)

    start_clock = parse_time(start_time)
    if start_clock is None:
        return None
    start = _at(first_day, start_clock, config)
    if end_time is None:
        return _checked(start, _after(start, config.default_duration))
    end_clock = parse_time(end_time)
    if end_clock is None:
        return None
    return _checked(start, _at(last_day, end_clock, config))


def _walk(start_date: str | None) -> Iterator[date]:
    first_day = parse_date(start_date)
    if first_day is None:
        return
    for offset in range(_WALK_DAYS):
        yield first_day + timedelta(days=offset)


def _block_range(
    day: date,
    start_clock: time,
    end_text: str | None,
    fallback: timedelta,
    config: ResolverConfig,
) -> TimeRange | None:
    start = _at(day, start_clock, config)
    if end_text is None:
        return _checked(start, _after(start, fallback))
    end_clock = parse_time(end_text)
    if end_clock is None:
        return None
    return _checked(start, _at(day, end_clock, config))


def _minutes_or(minutes: int | None, default: timedelta) -> timedelta:
    return timedelta(minutes=minutes) if minutes else default


def _resolve_fixed(schedule: Fixed, config: ResolverConfig) -> TimeRange | None:
    return _fixed_range(
        start_date=schedule.start_date,
        end_date=schedule.end_date,
        start_time=schedule.start_time,
        end_time=schedule.end_time,
        all_day=schedule.all_day,
        config=config,
    )


def _resolve_ongoing_weekly(
    schedule: OngoingWeekly, config: ResolverConfig
) -> TimeRange | None:
    for day in _walk(schedule.start_date):
        hours = schedule.weekly.get(weekday_of(day))
        if hours is None:
            continue
        start_clock = parse_time(hours.start)
        if start_clock is None:
            continue
        if schedule.end_date is not None:
            last_day = parse_date(schedule.end_date)
            if last_day is None or day > last_day:
                return None
        return _block_range(day, start_clock, hours.end, config.default_duration, config)
    return None


def _resolve_class_ongoing(
    schedule: ClassOngoing, config: ResolverConfig
) -> TimeRange | None:
    fallback = _minutes_or(schedule.duration_minutes, config.default_duration)
    for day in _walk(schedule.start_date):
        availability = schedule.weekly.get(weekday_of(day))
        if availability is None or not availability.available or not availability.blocks:
            continue
        block = availability.blocks[0]
        start_clock = parse_time(block.start)
        if start_clock is None:
            continue
        return _block_range(day, start_clock, block.end, fallback, config)
    return None


def _resolve_class_sessions(
    schedule: ClassSessions, config: ResolverConfig
) -> TimeRange | None:
    fallback = _minutes_or(schedule.meeting_length_minutes, config.default_duration)
    days = list(_walk(schedule.start_date))
    for section in schedule.sections:
        if section.day is None:
            continue
        start_clock = parse_time(section.start_time)
        if start_clock is None:
            continue
        for day in days:
            if weekday_of(day) is section.day:
                return _block_range(day, start_clock, section.end_time, fallback, config)
    return None


def _resolve_camp_sessions(
    schedule: CampSessions, config: ResolverConfig
) -> TimeRange | None:
    for session in schedule.sessions:
        resolved = _fixed_range(
            start_date=session.start_date,
            end_date=session.end_date,
            start_time=session.start_time,
            end_time=session.end_time,
            all_day=False,
            config=config,
        )
        if resolved is not None:
            return resolved
    return None


def resolve(schedule: ScheduleKind, config: ResolverConfig) -> TimeRange | None:
    """Return the concrete range ``schedule`` describes, or ``None``.

    Total over well-typed input: malformed dates and times, missing anchors and
    inverted ranges all yield ``None`` instead of raising.
    """
    if isinstance(schedule, Fixed):
        return _resolve_fixed(schedule, config)
    if isinstance(schedule, OngoingWeekly):
        return _resolve_ongoing_weekly(schedule, config)
    if isinstance(schedule, ClassOngoing):
        return _resolve_class_ongoing(schedule, config)
    if isinstance(schedule, ClassSessions):
        return _resolve_class_sessions(schedule, config)
    if isinstance(schedule, CampSessions):
        return _resolve_camp_sessions(schedule, config)
    return None
