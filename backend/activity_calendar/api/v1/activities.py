"""Activity schedule editing API."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from activity_calendar.api import deps
from activity_calendar.schemas.pricing import SiblingQuoteRead
from activity_calendar.schemas.schedule_edit import (
    ScheduleConflictRead,
    ScheduleEditRequest,
    ScheduleSubmitRequest,
    StoredScheduleRead,
)
from activity_calendar.services import (
    calendar_view_store,
    pricing_service,
    schedule_service,
)
from activity_calendar.services.schedule_service import (
    PersistenceConflict,
    ScheduleValidationError,
)

router = APIRouter()


def _not_found(exc: LookupError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


def _conflict(exc: PersistenceConflict) -> HTTPException:
    body = ScheduleConflictRead(
        detail=str(exc), current_version=exc.current_version, snapshot=exc.snapshot
    )
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT, detail=body.model_dump(mode="json")
    )


async def _ensure_can_edit(
    session: AsyncSession, activity_id: uuid.UUID, viewer_id: uuid.UUID
) -> None:
    try:
        await schedule_service.ensure_can_edit(session, activity_id, viewer_id)
    except LookupError as exc:
        raise _not_found(exc) from exc
    except PermissionError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc


@router.get(
    "/{activity_id}/schedule",
    response_model=StoredScheduleRead,
    summary="Get activity schedule",
)
async def get_schedule(
    activity_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    _viewer_id: Annotated[uuid.UUID, Depends(deps.get_viewer_id)],
) -> StoredScheduleRead:
    try:
        stored = await schedule_service.load_schedule_model(session, activity_id)
    except LookupError as exc:
        raise _not_found(exc) from exc
    return StoredScheduleRead.model_validate(stored)


@router.put(
    "/{activity_id}/schedule",
    response_model=StoredScheduleRead,
    summary="Submit a complete schedule",
)
async def submit_schedule(
    activity_id: uuid.UUID,
    payload: ScheduleSubmitRequest,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    viewer_id: Annotated[uuid.UUID, Depends(deps.get_viewer_id)],
) -> StoredScheduleRead:
    await _ensure_can_edit(session, activity_id, viewer_id)
    try:
        stored = await schedule_service.submit_schedule(
            session, activity_id, payload.model, payload.expected_version
        )
    except ScheduleValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail={"messages": exc.messages}
        ) from exc
    except PersistenceConflict as exc:
        raise _conflict(exc) from exc
    except LookupError as exc:
        raise _not_found(exc) from exc
    # Every viewer booked on this activity may hold the old times.
    calendar_view_store.expire_all()
    return StoredScheduleRead.model_validate(stored)


@router.post(
    "/{activity_id}/schedule/edits",
    response_model=StoredScheduleRead,
    summary="Apply one schedule edit",
)
async def save_schedule_edit(
    activity_id: uuid.UUID,
    payload: ScheduleEditRequest,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    viewer_id: Annotated[uuid.UUID, Depends(deps.get_viewer_id)],
) -> StoredScheduleRead:
    await _ensure_can_edit(session, activity_id, viewer_id)
    try:
        stored = await schedule_service.save_schedule_edit(
            session, activity_id, payload.op, expected_version=payload.expected_version
        )
    except PersistenceConflict as exc:
        raise _conflict(exc) from exc
    except LookupError as exc:
        raise _not_found(exc) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    calendar_view_store.expire_all()
    return StoredScheduleRead.model_validate(stored)


@router.get(
    "/{activity_id}/pricing",
    response_model=SiblingQuoteRead,
    summary="Quote a family registration",
)
async def quote_activity(
    activity_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    _viewer_id: Annotated[uuid.UUID, Depends(deps.get_viewer_id)],
    children: Annotated[int, Query(ge=1, le=20)] = 1,
) -> SiblingQuoteRead:
    try:
        stored = await schedule_service.load_schedule_model(session, activity_id)
    except LookupError as exc:
        raise _not_found(exc) from exc
    try:
        quote = pricing_service.quote_siblings(stored.model, children)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return SiblingQuoteRead(
        price_unit=pricing_service.derive_price_unit(stored.model),
        display=stored.model.pricing.display,
        **quote.to_dict(),
    )
