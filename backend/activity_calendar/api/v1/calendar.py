"""Calendar views over the viewer's own and shared bookings."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from activity_calendar.api import deps
from activity_calendar.core.settings import (
    get_calendar_view_ttl,
    get_resolver_config,
    get_source_fetch_timeout,
)
from activity_calendar.db.session import get_sessionmaker
from activity_calendar.schemas.calendar import (
    AgendaRead,
    CalendarSourceRead,
    DayBucketRead,
    EventOccurrenceRead,
    MonthRead,
    NextEventRead,
    SourceVisibilityUpdate,
    UnscheduledBookingRead,
    UpcomingRead,
)
from activity_calendar.services import (
    calendar_service,
    calendar_source_service,
    calendar_view_store,
)
from activity_calendar.services.calendar_view_store import CalendarView

router = APIRouter()


async def _load_view(viewer_id: uuid.UUID, refresh: bool = False) -> CalendarView:
    """Return the viewer's view, aggregating again once it is stale or on refresh."""
    view = calendar_view_store.get_view(str(viewer_id))
    if refresh or not view.is_fresh(datetime.now(UTC), get_calendar_view_ttl()):
        self_fetch, shared = await calendar_source_service.build_source_fetches(
            get_sessionmaker(), viewer_id
        )
        result = await calendar_service.aggregate(
            self_fetch,
            shared,
            config=get_resolver_config(),
            timeout=get_source_fetch_timeout(),
        )
        view = calendar_view_store.store_result(str(viewer_id), result)
    return view


def _source_read(view: CalendarView, source: calendar_service.SourceInfo) -> CalendarSourceRead:
    return CalendarSourceRead(
        source_id=source.source_id,
        label=source.label,
        visible=view.is_visible(source.source_id),
        unavailable=not source.available,
    )


@router.get("/upcoming", response_model=UpcomingRead, summary="Upcoming bookings")
async def get_upcoming(
    viewer_id: Annotated[uuid.UUID, Depends(deps.get_viewer_id)],
    refresh: bool = False,
) -> UpcomingRead:
    view = await _load_view(viewer_id, refresh)
    result = view.result
    now = datetime.now(UTC)
    return UpcomingRead(
        occurrences=[
            EventOccurrenceRead.model_validate(item)
            for item in result.upcoming(now, view.visible_sources())
        ],
        unscheduled=[UnscheduledBookingRead.model_validate(item) for item in result.unscheduled],
        failed_sources=list(result.failed_sources),
        fetched_at=result.fetched_at,
    )


@router.get("/month", response_model=MonthRead, summary="Bookings in one month")
async def get_month(
    viewer_id: Annotated[uuid.UUID, Depends(deps.get_viewer_id)],
    month_start: Annotated[date, Query(description="Any date in the month to show")],
    refresh: bool = False,
) -> MonthRead:
    view = await _load_view(viewer_id, refresh)
    result = view.result
    buckets = result.in_month(month_start, view.visible_sources())
    return MonthRead(
        month_start=month_start.replace(day=1).isoformat(),
        days=[DayBucketRead.model_validate(bucket) for bucket in buckets],
        failed_sources=list(result.failed_sources),
    )


@router.get("/agenda", response_model=AgendaRead, summary="Upcoming bookings by day")
async def get_agenda(
    viewer_id: Annotated[uuid.UUID, Depends(deps.get_viewer_id)],
    refresh: bool = False,
) -> AgendaRead:
    view = await _load_view(viewer_id, refresh)
    result = view.result
    buckets = result.agenda(datetime.now(UTC), view.visible_sources())
    return AgendaRead(
        days=[DayBucketRead.model_validate(bucket) for bucket in buckets],
        unscheduled=[UnscheduledBookingRead.model_validate(item) for item in result.unscheduled],
        failed_sources=list(result.failed_sources),
    )


@router.get("/next", response_model=NextEventRead, summary="Next booking")
async def get_next_event(
    viewer_id: Annotated[uuid.UUID, Depends(deps.get_viewer_id)],
    refresh: bool = False,
) -> NextEventRead:
    view = await _load_view(viewer_id, refresh)
    occurrence = view.result.next_event(datetime.now(UTC), view.visible_sources())
    return NextEventRead(
        occurrence=EventOccurrenceRead.model_validate(occurrence) if occurrence else None
    )


@router.get(
    "/sources", response_model=list[CalendarSourceRead], summary="Calendar sources"
)
async def list_sources(
    viewer_id: Annotated[uuid.UUID, Depends(deps.get_viewer_id)],
    refresh: bool = False,
) -> list[CalendarSourceRead]:
    view = await _load_view(viewer_id, refresh)
    return [_source_read(view, source) for source in view.result.sources]


@router.put(
    "/sources/{source_id}/visibility",
    response_model=CalendarSourceRead,
    summary="Show or hide a calendar source",
)
async def set_source_visibility(
    source_id: str,
    payload: SourceVisibilityUpdate,
    viewer_id: Annotated[uuid.UUID, Depends(deps.get_viewer_id)],
) -> CalendarSourceRead:
    await _load_view(viewer_id)
    try:
        view = calendar_view_store.set_source_visible(
            str(viewer_id), source_id, payload.visible
        )
    except LookupError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Calendar source not found"
        ) from exc
    source = next(item for item in view.result.sources if item.source_id == source_id)
    return _source_read(view, source)
