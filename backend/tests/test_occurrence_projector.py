"""Tests for projecting booking rows onto the timeline."""

from __future__ import annotations

import uuid
from datetime import timedelta
from zoneinfo import ZoneInfo

from activity_calendar.core.settings import ResolverConfig
from activity_calendar.models import BookingStatus
from activity_calendar.schemas.schedule import ActivityKind, Fixed, ScheduleModel
from activity_calendar.services.occurrence_service import (
    SELF_SOURCE_ID,
    RawBookingRow,
    project,
    project_rows,
)

CONFIG = ResolverConfig(timezone=ZoneInfo("America/Chicago"), default_duration=timedelta(hours=2))

DATED = ScheduleModel(
    activity_kind=ActivityKind.CAMP,
    schedule=Fixed(start_date="2025-06-02", start_time="09:00", end_time="12:00"),
).model_dump(mode="json")

UNDATED = ScheduleModel(activity_kind=ActivityKind.CAMP, schedule=Fixed()).model_dump(
    mode="json"
)


def _row(
    schedule: dict | None = DATED,
    status: BookingStatus = BookingStatus.CONFIRMED,
    **overrides: object,
) -> RawBookingRow:
    fields: dict[str, object] = {
        "booking_id": uuid.uuid4(),
        "activity_id": uuid.uuid4(),
        "user_id": uuid.uuid4(),
        "status": status,
        "guests_count": 1,
        "activity_name": "Robotics Day Camp",
        "location": "Cedar Rapids",
        "schedule": schedule,
    }
    fields.update(overrides)
    return RawBookingRow(**fields)  # type: ignore[arg-type]


def test_own_occurrence_keeps_booking_id() -> None:
    row = _row()
    occurrence = project(row, source_id=SELF_SOURCE_ID, config=CONFIG)
    assert occurrence is not None
    assert occurrence.id == str(row.booking_id)
    assert occurrence.source_id == SELF_SOURCE_ID
    assert occurrence.title == "Robotics Day Camp"
    assert occurrence.start.hour == 9


def test_shared_occurrence_id_is_namespaced() -> None:
    row = _row()
    occurrence = project(row, source_id="friend-1", config=CONFIG)
    assert occurrence is not None
    assert occurrence.id == f"friend-1:{row.booking_id}"


def test_only_pending_and_confirmed_project() -> None:
    for status in BookingStatus:
        occurrence = project(_row(status=status), source_id=SELF_SOURCE_ID, config=CONFIG)
        expected = status in (BookingStatus.PENDING, BookingStatus.CONFIRMED)
        assert (occurrence is not None) is expected


def test_missing_or_unreadable_schedule_is_skipped() -> None:
    assert project(_row(schedule=None), source_id=SELF_SOURCE_ID, config=CONFIG) is None
    broken = {"activity_kind": "camp", "schedule": {"type": "class_sessions"}}
    assert project(_row(schedule=broken), source_id=SELF_SOURCE_ID, config=CONFIG) is None
    assert project(_row(schedule=UNDATED), source_id=SELF_SOURCE_ID, config=CONFIG) is None


def test_own_undated_bookings_are_listed_as_unscheduled() -> None:
    dated, undated, declined = (
        _row(),
        _row(schedule=UNDATED, status=BookingStatus.PENDING, activity_name="Piano"),
        _row(schedule=UNDATED, status=BookingStatus.DECLINED),
    )
    projection = project_rows([dated, undated, declined], source_id=SELF_SOURCE_ID, config=CONFIG)
    assert [o.booking_id for o in projection.occurrences] == [dated.booking_id]
    assert [u.booking_id for u in projection.unscheduled] == [undated.booking_id]
    assert projection.unscheduled[0].title == "Piano"


def test_shared_sources_never_report_unscheduled() -> None:
    projection = project_rows(
        [_row(schedule=UNDATED), _row(schedule=None)], source_id="friend-1", config=CONFIG
    )
    assert projection.occurrences == ()
    assert projection.unscheduled == ()


def test_earlier_listing_documents_project_like_current_ones() -> None:
    legacy = {
        "activityKind": "camp",
        "fixedSchedule": {"startDate": "2025-06-02", "startTime": "09:00", "endTime": "12:00"},
    }
    row = _row(schedule=legacy)
    occurrence = project(row, source_id=SELF_SOURCE_ID, config=CONFIG)
    assert occurrence is not None
    assert (occurrence.start.hour, occurrence.end.hour) == (9, 12)
    assert occurrence.start == project(_row(), source_id=SELF_SOURCE_ID, config=CONFIG).start

    projection = project_rows([row], source_id=SELF_SOURCE_ID, config=CONFIG)
    assert len(projection.occurrences) == 1
    assert projection.unscheduled == ()


def test_unreadable_earlier_listing_document_is_skipped() -> None:
    garbage = {"activityKind": "gym", "fixedSchedule": "soon"}
    row = _row(schedule=garbage)
    assert project(row, source_id=SELF_SOURCE_ID, config=CONFIG) is None
    projection = project_rows([row], source_id=SELF_SOURCE_ID, config=CONFIG)
    assert projection.occurrences == ()
    assert [u.booking_id for u in projection.unscheduled] == [row.booking_id]
