"""Submit validation and persistence for activity schedule documents."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from activity_calendar.models import Activity
from activity_calendar.schemas.schedule import ActivityKind, Fixed, ScheduleModel
from activity_calendar.schemas.schedule_edit import BuilderOp
from activity_calendar.services.schedule_documents import document_to_model
from activity_calendar.services.schedule_editor import ScheduleEditor
from activity_calendar.services.time_resolver import parse_date

logger = logging.getLogger(__name__)

END_BEFORE_START_MESSAGE = "End date must be on or after the start date."
HALF_TIMED_MESSAGE = "Please set both a start time and end time, or choose All day."


class ScheduleValidationError(ValueError):
    """Raised when a schedule is not ready to publish."""

    def __init__(self, messages: list[str]) -> None:
        super().__init__(" ".join(messages))
        self.messages = messages


class PersistenceConflict(RuntimeError):
    """Raised when the stored version moved on since the caller loaded it."""

    def __init__(
        self,
        *,
        activity_id: UUID,
        expected_version: int,
        current_version: int,
        snapshot: ScheduleModel,
    ) -> None:
        super().__init__(
            f"Schedule for activity {activity_id} is at version {current_version}, "
            f"not {expected_version}"
        )
        self.activity_id = activity_id
        self.expected_version = expected_version
        self.current_version = current_version
        self.snapshot = snapshot


@dataclass(slots=True, frozen=True)
class StoredSchedule:
    model: ScheduleModel
    version: int


def validate_for_submit(model: ScheduleModel) -> None:
    """Raise :class:`ScheduleValidationError` listing every publish blocker."""
    messages: list[str] = []
    schedule = model.schedule
    if isinstance(schedule, Fixed):
        start_day = parse_date(schedule.start_date)
        end_day = parse_date(schedule.end_date)
        if start_day is not None and end_day is not None and end_day < start_day:
            messages.append(END_BEFORE_START_MESSAGE)
        if not schedule.all_day and (schedule.start_time is None) != (
            schedule.end_time is None
        ):
            messages.append(HALF_TIMED_MESSAGE)
    if messages:
        raise ScheduleValidationError(messages)


async def load_schedule_model(session: AsyncSession, activity_id: UUID) -> StoredSchedule:
    """Return the stored schedule of an activity; ``LookupError`` if missing."""
    activity = await session.get(Activity, activity_id)
    if activity is None:
        raise LookupError(f"Activity {activity_id} not found")
    return StoredSchedule(
        model=document_to_model(activity.schedule, ActivityKind(activity.activity_kind)),
        version=activity.version,
    )


async def persist_schedule_model(
    session: AsyncSession,
    activity_id: UUID,
    model: ScheduleModel,
    expected_version: int,
) -> int:
    """Write ``model`` if the stored version is still ``expected_version``.

    Returns the new version. Raises :class:`PersistenceConflict` on a stale
    version and ``LookupError`` when the activity is gone.
    """
    new_version = expected_version + 1
    result = await session.execute(
        update(Activity)
        .where(Activity.id == activity_id, Activity.version == expected_version)
        .values(
            schedule=model.model_dump(mode="json"),
            activity_kind=model.activity_kind.value,
            version=new_version,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        current_version = await session.scalar(
            select(Activity.version).where(Activity.id == activity_id)
        )
        await session.rollback()
        if current_version is None:
            raise LookupError(f"Activity {activity_id} not found")
        logger.info(
            "Schedule save for activity %s lost a race (expected %s, stored %s)",
            activity_id,
            expected_version,
            current_version,
        )
        raise PersistenceConflict(
            activity_id=activity_id,
            expected_version=expected_version,
            current_version=current_version,
            snapshot=model,
        )
    await session.commit()
    return new_version


async def submit_schedule(
    session: AsyncSession,
    activity_id: UUID,
    model: ScheduleModel,
    expected_version: int,
) -> StoredSchedule:
    """Validate a complete document and store it."""
    validate_for_submit(model)
    version = await persist_schedule_model(session, activity_id, model, expected_version)
    return StoredSchedule(model=model, version=version)


async def save_schedule_edit(
    session: AsyncSession,
    activity_id: UUID,
    op: BuilderOp,
    *,
    expected_version: int,
    editor: ScheduleEditor | None = None,
) -> StoredSchedule:
    """Apply one builder operation and store the resulting snapshot.

    A caller-held ``editor`` keeps the applied edit when the save conflicts.
    """
    if editor is None:
        stored = await load_schedule_model(session, activity_id)
        editor = ScheduleEditor(stored.model)
    snapshot = editor.apply(op)
    version = await persist_schedule_model(session, activity_id, snapshot, expected_version)
    return StoredSchedule(model=snapshot, version=version)


async def ensure_can_edit(session: AsyncSession, activity_id: UUID, viewer_id: UUID) -> None:
    """Only the host of an activity may change its schedule.

    Activities without a host are open to any authenticated caller.
    """
    activity = await session.get(Activity, activity_id)
    if activity is None:
        raise LookupError(f"Activity {activity_id} not found")
    if activity.host_id is not None and activity.host_id != viewer_id:
        raise PermissionError("Only the host can edit this schedule")
