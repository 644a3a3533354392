"""Tests for loading, validating and storing schedule documents."""

from __future__ import annotations

import uuid

import pytest

from activity_calendar.models import Activity
from activity_calendar.schemas.age import AgeBucket
from activity_calendar.schemas.pricing import (
    AddOns,
    ExtendedCare,
    SiblingDiscount,
    SiblingDiscountType,
)
from activity_calendar.schemas.schedule import (
    ActivityKind,
    CampSession,
    CampSessions,
    ClassFrequency,
    ClassOngoing,
    ClassSessions,
    Fixed,
    OngoingWeekly,
    ScheduleModel,
    Section,
    Weekday,
    WeeklyHours,
)
from activity_calendar.schemas.schedule_edit import AddSession, RemoveSession
from activity_calendar.services.schedule_editor import ScheduleEditor
from activity_calendar.services.schedule_service import (
    END_BEFORE_START_MESSAGE,
    HALF_TIMED_MESSAGE,
    PersistenceConflict,
    ScheduleValidationError,
    ensure_can_edit,
    load_schedule_model,
    persist_schedule_model,
    save_schedule_edit,
    submit_schedule,
    validate_for_submit,
)

pytestmark = pytest.mark.asyncio


def _fixed(**fields: object) -> ScheduleModel:
    return ScheduleModel(activity_kind=ActivityKind.CAMP, schedule=Fixed(**fields))


async def test_validate_for_submit_collects_every_message() -> None:
    with pytest.raises(ScheduleValidationError) as excinfo:
        validate_for_submit(
            _fixed(start_date="2025-06-05", end_date="2025-06-01", start_time="09:00")
        )
    assert excinfo.value.messages == [END_BEFORE_START_MESSAGE, HALF_TIMED_MESSAGE]


async def test_validate_for_submit_accepts_complete_or_all_day() -> None:
    validate_for_submit(_fixed(start_date="2025-06-05", start_time="09:00", end_time="10:00"))
    validate_for_submit(_fixed(start_date="2025-06-05", start_time="09:00", all_day=True))
    validate_for_submit(_fixed())


async def test_round_trip_bumps_version(app_context: dict[str, object]) -> None:
    sessionmaker = app_context["sessionmaker"]
    activity_id = app_context["hosted_activity_id"]

    async with sessionmaker() as session:
        stored = await load_schedule_model(session, activity_id)
    assert stored.version == 0
    assert isinstance(stored.model.schedule, CampSessions)

    editor = ScheduleEditor(stored.model)
    async with sessionmaker() as session:
        saved = await save_schedule_edit(
            session, activity_id, AddSession(), expected_version=0, editor=editor
        )
    assert saved.version == 1

    async with sessionmaker() as session:
        reloaded = await load_schedule_model(session, activity_id)
    assert reloaded.version == 1
    assert reloaded.model == saved.model
    assert len(reloaded.model.schedule.sessions) == 3


_ADD_ONS = AddOns(
    early_dropoff=ExtendedCare(enabled=True, price="15", start="07:30", end="09:00"),
    extended_day=ExtendedCare(enabled=True, price="$20.50", start="15:00", end="17:30"),
    sibling_discount=SiblingDiscount(enabled=True, type=SiblingDiscountType.PERCENT, value="10"),
)


@pytest.mark.parametrize(
    ("kind", "schedule"),
    [
        (
            ActivityKind.CAMP,
            Fixed(
                start_date="2030-07-01",
                end_date="2030-07-05",
                start_time="09:00",
                end_time="15:00",
                repeat_rule="weekly",
            ),
        ),
        (
            ActivityKind.CAMP,
            OngoingWeekly(
                start_date="2030-07-01",
                weekly={
                    Weekday.MON: WeeklyHours(start="09:00", end="12:00"),
                    Weekday.THU: WeeklyHours(start="13:00"),
                },
            ),
        ),
        (
            ActivityKind.CAMP,
            CampSessions(
                sessions=(
                    CampSession(id="june", start_date="2030-06-03", capacity=12),
                    CampSession(id="july", start_date="2030-07-08", waitlist_enabled=True),
                )
            ),
        ),
        (
            ActivityKind.CLASS,
            ClassOngoing(
                start_date="2030-09-02",
                duration_minutes=45,
                students_per_class=8,
                frequency=ClassFrequency.TWICE_WEEK,
            ),
        ),
        (
            ActivityKind.CLASS,
            ClassSessions(
                start_date="2030-09-02",
                session_length_weeks=6,
                meeting_length_minutes=50,
                sections=(Section(id="tue", day=Weekday.TUE, capacity=10, start_time="16:00"),),
            ),
        ),
    ],
)
async def test_every_variant_survives_storage(
    app_context: dict[str, object], kind: ActivityKind, schedule: object
) -> None:
    sessionmaker = app_context["sessionmaker"]
    activity_id = app_context["soon_activity_id"]
    model = ScheduleModel(
        activity_kind=kind,
        schedule=schedule,
        age={"buckets": ["9-12", "6-8"]},
        pricing={"price_cents": 12550, "display": "125.50", "price_unit": "per day"},
        add_ons=_ADD_ONS,
    )

    async with sessionmaker() as session:
        version = await persist_schedule_model(session, activity_id, model, 0)
    async with sessionmaker() as session:
        stored = await load_schedule_model(session, activity_id)
        activity = await session.get(Activity, activity_id)

    assert (version, stored.version) == (1, 1)
    assert stored.model == model
    assert stored.model.age.buckets == (AgeBucket.AGES_6_8, AgeBucket.AGES_9_12)
    assert (stored.model.age.min_age, stored.model.age.max_age) == (6, 12)
    assert activity.activity_kind == kind.value


async def test_stale_version_conflicts_and_editor_keeps_edit(
    app_context: dict[str, object],
) -> None:
    sessionmaker = app_context["sessionmaker"]
    activity_id = app_context["hosted_activity_id"]

    async with sessionmaker() as session:
        stored = await load_schedule_model(session, activity_id)
        await persist_schedule_model(session, activity_id, stored.model, 0)

    editor = ScheduleEditor(stored.model)
    async with sessionmaker() as session:
        with pytest.raises(PersistenceConflict) as excinfo:
            await save_schedule_edit(
                session,
                activity_id,
                RemoveSession(id="s1"),
                expected_version=0,
                editor=editor,
            )

    conflict = excinfo.value
    assert conflict.current_version == 1
    assert conflict.expected_version == 0
    assert [s.id for s in conflict.snapshot.schedule.sessions] == ["s2"]
    assert editor.snapshot == conflict.snapshot

    async with sessionmaker() as session:
        current = await load_schedule_model(session, activity_id)
    assert current.version == 1
    assert [s.id for s in current.model.schedule.sessions] == ["s1", "s2"]


async def test_submit_rejects_invalid_document_without_writing(
    app_context: dict[str, object],
) -> None:
    sessionmaker = app_context["sessionmaker"]
    activity_id = app_context["soon_activity_id"]

    async with sessionmaker() as session:
        with pytest.raises(ScheduleValidationError):
            await submit_schedule(
                session, activity_id, _fixed(start_date="2025-06-05", end_time="10:00"), 0
            )
        stored = await load_schedule_model(session, activity_id)
    assert stored.version == 0


async def test_missing_activity(app_context: dict[str, object]) -> None:
    sessionmaker = app_context["sessionmaker"]
    async with sessionmaker() as session:
        with pytest.raises(LookupError):
            await load_schedule_model(session, uuid.uuid4())
        with pytest.raises(LookupError):
            await persist_schedule_model(session, uuid.uuid4(), _fixed(), 0)


async def test_only_host_can_edit(app_context: dict[str, object]) -> None:
    sessionmaker = app_context["sessionmaker"]
    async with sessionmaker() as session:
        await ensure_can_edit(
            session, app_context["hosted_activity_id"], app_context["host_id"]
        )
        await ensure_can_edit(
            session, app_context["soon_activity_id"], app_context["viewer_id"]
        )
        with pytest.raises(PermissionError):
            await ensure_can_edit(
                session, app_context["hosted_activity_id"], app_context["viewer_id"]
            )


async def test_empty_document_loads_default_for_kind(
    app_context: dict[str, object],
) -> None:
    sessionmaker = app_context["sessionmaker"]
    async with sessionmaker() as session:
        activity = Activity(name="Draft Class", activity_kind="class", schedule=None)
        session.add(activity)
        await session.commit()
        stored = await load_schedule_model(session, activity.id)
    assert isinstance(stored.model.schedule, ClassOngoing)


async def test_legacy_document_is_migrated_on_load(
    app_context: dict[str, object],
) -> None:
    sessionmaker = app_context["sessionmaker"]
    legacy = {
        "activityKind": "camp",
        "activityType": "ongoing",
        "ongoingSchedule": {"startDate": "2025-06-02"},
        "weeklySchedule": {"mon": {"start": "09:00", "end": "12:00"}},
        "age_bucket": "9-12",
    }
    async with sessionmaker() as session:
        activity = Activity(name="Legacy Camp", schedule=legacy)
        session.add(activity)
        await session.commit()
        stored = await load_schedule_model(session, activity.id)

    assert isinstance(stored.model.schedule, OngoingWeekly)
    assert stored.model.schedule.weekly[Weekday.MON].end == "12:00"
    assert stored.model.age.buckets == (AgeBucket.AGES_9_12,)

