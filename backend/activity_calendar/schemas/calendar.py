"""Calendar view schema definitions."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from activity_calendar.models.booking import BookingStatus


class EventOccurrenceRead(BaseModel):
    """One booking placed on the calendar."""

    id: str
    activity_id: uuid.UUID
    booking_id: uuid.UUID
    source_id: str
    start: datetime
    end: datetime
    title: str
    location: str | None
    booking_status: BookingStatus
    guest_count: int
    image_url: str | None = None

    model_config = ConfigDict(from_attributes=True)


class UnscheduledBookingRead(BaseModel):
    """Own booking listed under "No date confirmed yet"."""

    booking_id: uuid.UUID
    activity_id: uuid.UUID
    title: str
    location: str | None
    booking_status: BookingStatus
    guest_count: int

    model_config = ConfigDict(from_attributes=True)


class DayBucketRead(BaseModel):
    date_key: str
    label: str | None = None
    occurrences: list[EventOccurrenceRead]

    model_config = ConfigDict(from_attributes=True)


class UpcomingRead(BaseModel):
    """Upcoming occurrences for the viewer."""

    occurrences: list[EventOccurrenceRead]
    unscheduled: list[UnscheduledBookingRead]
    failed_sources: list[str]
    fetched_at: datetime


class MonthRead(BaseModel):
    month_start: str
    days: list[DayBucketRead]
    failed_sources: list[str]


class AgendaRead(BaseModel):
    days: list[DayBucketRead]
    unscheduled: list[UnscheduledBookingRead]
    failed_sources: list[str]


class NextEventRead(BaseModel):
    occurrence: EventOccurrenceRead | None


class CalendarSourceRead(BaseModel):
    """A calendar source and whether the viewer shows it."""

    source_id: str
    label: str
    visible: bool
    unavailable: bool


class SourceVisibilityUpdate(BaseModel):
    visible: bool
