"""Project raw booking rows into calendar occurrences."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from activity_calendar.core.settings import ResolverConfig
from activity_calendar.models.booking import BookingStatus
from activity_calendar.schemas.schedule import ScheduleModel
from activity_calendar.services.schedule_documents import document_to_model
from activity_calendar.services.time_resolver import resolve

logger = logging.getLogger(__name__)

SELF_SOURCE_ID = "self"

PROJECTED_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})


@dataclass(slots=True, frozen=True)
class RawBookingRow:
    """One booking joined with its activity, as read from storage.

    ``schedule`` is the stored document, possibly in the earlier listing
    format, and has not been validated.
    """

    booking_id: UUID
    activity_id: UUID
    user_id: UUID
    status: BookingStatus
    guests_count: int
    activity_name: str
    location: str | None = None
    image_url: str | None = None
    schedule: dict[str, Any] | None = None


@dataclass(slots=True, frozen=True)
class EventOccurrence:
    """A booking placed on the timeline."""

    id: str
    activity_id: UUID
    booking_id: UUID
    source_id: str
    start: datetime
    end: datetime
    title: str
    location: str | None
    booking_status: BookingStatus
    guest_count: int
    image_url: str | None = None


@dataclass(slots=True, frozen=True)
class UnscheduledBooking:
    """An own booking whose activity has no usable date yet."""

    booking_id: UUID
    activity_id: UUID
    title: str
    location: str | None
    booking_status: BookingStatus
    guest_count: int


@dataclass(slots=True, frozen=True)
class Projection:
    occurrences: tuple[EventOccurrence, ...]
    unscheduled: tuple[UnscheduledBooking, ...]


def occurrence_id(source_id: str, booking_id: UUID) -> str:
    """Own occurrences keep the booking id; shared ones are namespaced."""
    if source_id == SELF_SOURCE_ID:
        return str(booking_id)
    return f"{source_id}:{booking_id}"


def _load_schedule(row: RawBookingRow) -> ScheduleModel | None:
    if not row.schedule:
        return None
    try:
        return document_to_model(row.schedule)
    except ValueError:
        logger.debug("Ignoring unreadable schedule for activity %s", row.activity_id)
        return None


def project(
    row: RawBookingRow, *, source_id: str, config: ResolverConfig
) -> EventOccurrence | None:
    """Return the occurrence for ``row`` or ``None`` when it cannot be placed."""
    if row.status not in PROJECTED_STATUSES:
        return None
    model = _load_schedule(row)
    if model is None:
        return None
    resolved = resolve(model.schedule, config)
    if resolved is None:
        return None
    return EventOccurrence(
        id=occurrence_id(source_id, row.booking_id),
        activity_id=row.activity_id,
        booking_id=row.booking_id,
        source_id=source_id,
        start=resolved.start,
        end=resolved.end,
        title=row.activity_name,
        location=row.location,
        booking_status=row.status,
        guest_count=row.guests_count,
        image_url=row.image_url,
    )


def project_rows(
    rows: Iterable[RawBookingRow], *, source_id: str, config: ResolverConfig
) -> Projection:
    """Project every row, keeping the viewer's own undated bookings aside."""
    occurrences: list[EventOccurrence] = []
    unscheduled: list[UnscheduledBooking] = []
    for row in rows:
        occurrence = project(row, source_id=source_id, config=config)
        if occurrence is not None:
            occurrences.append(occurrence)
            continue
        if source_id == SELF_SOURCE_ID and row.status in PROJECTED_STATUSES:
            unscheduled.append(
                UnscheduledBooking(
                    booking_id=row.booking_id,
                    activity_id=row.activity_id,
                    title=row.activity_name,
                    location=row.location,
                    booking_status=row.status,
                    guest_count=row.guests_count,
                )
            )
    return Projection(occurrences=tuple(occurrences), unscheduled=tuple(unscheduled))
