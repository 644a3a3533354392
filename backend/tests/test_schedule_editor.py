"""Tests for structural schedule edits."""

from __future__ import annotations

import pytest
from pydantic import TypeAdapter

from activity_calendar.schemas.age import AgeBucket
from activity_calendar.schemas.schedule import (
    ActivityKind,
    CampSession,
    CampSessions,
    ClassOngoing,
    ClassSessions,
    DayAvailability,
    OngoingWeekly,
    ScheduleModel,
    Section,
    TimeBlock,
    Weekday,
)
from activity_calendar.schemas.schedule_edit import BuilderOp
from activity_calendar.services.schedule_editor import (
    InvalidEditorOperation,
    ScheduleEditor,
)

OPS = TypeAdapter(BuilderOp)


def _camp_editor(*sessions: CampSession) -> ScheduleEditor:
    sessions = sessions or (CampSession(id="s1", start_date="2025-06-02"),)
    return ScheduleEditor(
        ScheduleModel(activity_kind=ActivityKind.CAMP, schedule=CampSessions(sessions=sessions))
    )


def _class_editor(schedule: ClassOngoing | ClassSessions | None = None) -> ScheduleEditor:
    return ScheduleEditor(
        ScheduleModel(activity_kind=ActivityKind.CLASS, schedule=schedule or ClassOngoing())
    )


def test_default_class_weekly_opens_weekdays_only() -> None:
    weekly = ClassOngoing().weekly
    for day in (Weekday.MON, Weekday.TUE, Weekday.WED, Weekday.THU, Weekday.FRI):
        assert weekly[day].available and len(weekly[day].blocks) == 1
    for day in (Weekday.SAT, Weekday.SUN):
        assert not weekly[day].available and weekly[day].blocks == ()


def test_unavailable_day_cannot_hold_blocks() -> None:
    with pytest.raises(ValueError):
        DayAvailability(available=False, blocks=(TimeBlock(),))


def test_add_and_remove_sessions() -> None:
    editor = _camp_editor()
    snapshot = editor.add_session()
    assert len(snapshot.schedule.sessions) == 2
    new_id = snapshot.schedule.sessions[1].id

    snapshot = editor.remove_session("s1")
    assert [s.id for s in snapshot.schedule.sessions] == [new_id]


def test_removing_last_session_is_a_no_op() -> None:
    editor = _camp_editor()
    before = editor.snapshot
    after = editor.remove_session("s1")
    assert after == before
    assert len(after.schedule.sessions) == 1


def test_duplicate_session_inserts_copy_after_source() -> None:
    editor = _camp_editor(
        CampSession(id="a", start_date="2025-06-02", start_time="09:00", capacity=12),
        CampSession(id="b", start_date="2025-06-09"),
    )
    sessions = editor.duplicate_session("a").schedule.sessions
    assert [s.id for s in sessions][0::2] == ["a", "b"]
    copy = sessions[1]
    assert copy.id not in {"a", "b"}
    assert copy.model_dump(exclude={"id"}) == sessions[0].model_dump(exclude={"id"})


def test_update_session_validates_fields() -> None:
    editor = _camp_editor()
    snapshot = editor.update_session("s1", {"start_time": "08:30", "capacity": 20})
    assert snapshot.schedule.sessions[0].start_time == "08:30"
    assert snapshot.schedule.sessions[0].capacity == 20

    with pytest.raises(InvalidEditorOperation):
        editor.update_session("s1", {"colour": "red"})
    with pytest.raises(InvalidEditorOperation):
        editor.update_session("s1", {"capacity": -1})
    assert editor.snapshot == snapshot


def test_unknown_id_raises_and_leaves_snapshot() -> None:
    editor = _camp_editor()
    before = editor.snapshot
    with pytest.raises(InvalidEditorOperation):
        editor.remove_session("missing")
    with pytest.raises(InvalidEditorOperation):
        editor.duplicate_session("missing")
    assert editor.snapshot is before


def test_operation_must_match_variant() -> None:
    editor = _camp_editor()
    with pytest.raises(InvalidEditorOperation):
        editor.add_section()
    with pytest.raises(InvalidEditorOperation):
        editor.toggle_day_available("mon")


def test_section_operations() -> None:
    editor = _class_editor(ClassSessions(sections=(Section(id="x", day=Weekday.TUE),)))
    assert editor.remove_section("x").schedule.sections[0].id == "x"
    sections = editor.duplicate_section("x").schedule.sections
    assert len(sections) == 2 and sections[1].day is Weekday.TUE
    sections = editor.update_section(sections[1].id, {"day": "thu"}).schedule.sections
    assert sections[1].day is Weekday.THU
    assert len(editor.add_section().schedule.sections) == 3


def test_toggle_day_available() -> None:
    editor = _class_editor()
    closed = editor.toggle_day_available("mon").schedule.weekly[Weekday.MON]
    assert closed == DayAvailability(available=False)

    reopened = editor.toggle_day_available("mon").schedule.weekly[Weekday.MON]
    assert reopened.available and len(reopened.blocks) == 1
    assert reopened.blocks[0].start is None


def test_missing_day_counts_as_unavailable() -> None:
    editor = _class_editor(ClassOngoing(weekly={}))
    opened = editor.toggle_day_available(Weekday.SAT).schedule.weekly[Weekday.SAT]
    assert opened.available and len(opened.blocks) == 1


def test_time_block_operations() -> None:
    editor = _class_editor()
    block_id = editor.snapshot.schedule.weekly[Weekday.MON].blocks[0].id

    assert editor.remove_time_block("mon", block_id).schedule.weekly[Weekday.MON].blocks[0].id == block_id

    blocks = editor.update_time_block("mon", block_id, "16:00", "17:00").schedule.weekly[Weekday.MON].blocks
    assert (blocks[0].start, blocks[0].end) == ("16:00", "17:00")

    blocks = editor.duplicate_time_block("mon", block_id).schedule.weekly[Weekday.MON].blocks
    assert len(blocks) == 2 and blocks[1].start == "16:00" and blocks[1].id != block_id

    blocks = editor.add_time_block("mon").schedule.weekly[Weekday.MON].blocks
    assert len(blocks) == 3

    with pytest.raises(InvalidEditorOperation):
        editor.add_time_block("sat")


def test_malformed_day_is_rejected() -> None:
    editor = _class_editor()
    before = editor.snapshot
    with pytest.raises(InvalidEditorOperation):
        editor.toggle_day_available("funday")
    assert editor.snapshot is before


def test_set_weekly_hours() -> None:
    editor = ScheduleEditor(
        ScheduleModel(activity_kind=ActivityKind.CAMP, schedule=OngoingWeekly())
    )
    weekly = editor.set_weekly_hours("wed", "09:00", "15:00").schedule.weekly
    assert weekly[Weekday.WED].start == "09:00"
    assert Weekday.WED not in editor.set_weekly_hours("wed", "", None).schedule.weekly


def test_update_fixed() -> None:
    editor = ScheduleEditor(ScheduleModel.new(ActivityKind.CAMP))
    snapshot = editor.update_fixed({"start_date": "2025-06-02", "all_day": True})
    assert snapshot.schedule.start_date == "2025-06-02"
    assert snapshot.schedule.all_day is True
    with pytest.raises(InvalidEditorOperation):
        editor.update_fixed({"type": "camp_sessions"})


def test_switch_schedule_respects_activity_kind() -> None:
    editor = ScheduleEditor(ScheduleModel.new(ActivityKind.CAMP))
    assert editor.switch_schedule("camp_sessions").schedule.type == "camp_sessions"
    with pytest.raises(InvalidEditorOperation):
        editor.switch_schedule("class_ongoing")
    with pytest.raises(InvalidEditorOperation):
        editor.switch_schedule("nonsense")
    assert editor.snapshot.schedule.type == "camp_sessions"


def test_toggle_age_bucket() -> None:
    editor = ScheduleEditor(ScheduleModel.new(ActivityKind.CAMP))
    editor.toggle_age_bucket("6-8")
    snapshot = editor.toggle_age_bucket(AgeBucket.AGES_9_12)
    assert snapshot.age.buckets == (AgeBucket.AGES_6_8, AgeBucket.AGES_9_12)
    with pytest.raises(InvalidEditorOperation):
        editor.toggle_age_bucket("toddlers")


def test_apply_dispatches_serialized_ops() -> None:
    editor = _camp_editor()
    editor.apply(OPS.validate_python({"op": "add_session"}))
    editor.apply(
        OPS.validate_python(
            {"op": "update_session", "id": "s1", "fields": {"start_time": "07:45"}}
        )
    )
    snapshot = editor.apply(OPS.validate_python({"op": "duplicate_session", "id": "s1"}))
    assert len(snapshot.schedule.sessions) == 3
    assert snapshot.schedule.sessions[1].start_time == "07:45"

    with pytest.raises(InvalidEditorOperation):
        editor.apply(
            OPS.validate_python(
                {"op": "update_session", "id": "s1", "fields": {"element_id": "x"}}
            )
        )


def test_every_snapshot_is_immutable() -> None:
    snapshot = _camp_editor().add_session()
    with pytest.raises(ValueError):
        snapshot.activity_kind = ActivityKind.CLASS  # type: ignore[misc]


@pytest.mark.parametrize(
    ("editor", "payload"),
    [
        (
            ScheduleEditor(ScheduleModel.new(ActivityKind.CAMP)),
            {"op": "update_fixed", "fields": {"self": "x"}},
        ),
        (
            ScheduleEditor(ScheduleModel.new(ActivityKind.CAMP)),
            {"op": "update_fixed", "fields": {"fields": {"all_day": True}}},
        ),
        (_camp_editor(), {"op": "update_session", "id": "s1", "fields": {"self": "x"}}),
        (
            _class_editor(ClassSessions(sections=(Section(id="x"),))),
            {"op": "update_section", "id": "x", "fields": {"element_id": "y"}},
        ),
    ],
)
def test_apply_rejects_field_names_that_are_not_model_fields(
    editor: ScheduleEditor, payload: dict
) -> None:
    before = editor.snapshot
    with pytest.raises(InvalidEditorOperation):
        editor.apply(OPS.validate_python(payload))
    assert editor.snapshot is before
