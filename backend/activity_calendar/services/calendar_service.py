"""Calendar aggregation across the viewer's own and shared sources."""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable, Collection, Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta, tzinfo

from activity_calendar.core.settings import ResolverConfig
from activity_calendar.services.occurrence_service import (
    SELF_SOURCE_ID,
    EventOccurrence,
    RawBookingRow,
    UnscheduledBooking,
    project_rows,
)

logger = logging.getLogger(__name__)

SourceRows = Callable[[], Awaitable[list[RawBookingRow]]]


class AggregatorState(str, enum.Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    MERGED = "merged"


@dataclass(slots=True, frozen=True)
class SourceFetch:
    """A calendar source and the coroutine factory that loads its rows."""

    source_id: str
    label: str
    fetch: SourceRows


@dataclass(slots=True, frozen=True)
class SourceInfo:
    source_id: str
    label: str
    available: bool


@dataclass(slots=True, frozen=True)
class DayBucket:
    """Occurrences starting on one local date, keyed ``YYYY-MM-DD``."""

    date_key: str
    occurrences: tuple[EventOccurrence, ...]
    label: str | None = None


def sort_key(occurrence: EventOccurrence) -> str:
    # UTC ISO strings sort lexicographically in chronological order.
    return occurrence.start.astimezone(UTC).isoformat()


def local_date(moment: datetime, zone: tzinfo) -> date:
    return moment.astimezone(zone).date()


def format_date_label(day: date, today: date) -> str:
    """Human label for an agenda day: ``Today``, ``Tomorrow`` or a long date."""
    if day == today:
        return "Today"
    if day == today + timedelta(days=1):
        return "Tomorrow"
    return f"{day:%A}, {day:%B} {day.day}"


def merge(per_source: Iterable[Sequence[EventOccurrence]]) -> tuple[EventOccurrence, ...]:
    """Concatenate in source order, then stable-sort by UTC start."""
    combined: list[EventOccurrence] = []
    for occurrences in per_source:
        combined.extend(occurrences)
    return tuple(sorted(combined, key=sort_key))


def bucket_by_date(
    occurrences: Iterable[EventOccurrence], zone: tzinfo
) -> tuple[DayBucket, ...]:
    """Group by local start date; dates ascend and empty days are absent."""
    grouped: dict[date, list[EventOccurrence]] = {}
    for occurrence in occurrences:
        grouped.setdefault(local_date(occurrence.start, zone), []).append(occurrence)
    return tuple(
        DayBucket(date_key=day.isoformat(), occurrences=tuple(grouped[day]))
        for day in sorted(grouped)
    )


@dataclass(slots=True, frozen=True)
class AggregateResult:
    """Merged output of one aggregation pass.

    Every view below is a read-time filter over ``occurrences``; none of them
    fetch, re-sort or mutate.
    """

    occurrences: tuple[EventOccurrence, ...]
    unscheduled: tuple[UnscheduledBooking, ...]
    sources: tuple[SourceInfo, ...]
    failed_sources: tuple[str, ...]
    timezone: tzinfo
    fetched_at: datetime

    def visible(
        self, visible_sources: Collection[str] | None = None
    ) -> tuple[EventOccurrence, ...]:
        if visible_sources is None:
            return self.occurrences
        return tuple(o for o in self.occurrences if o.source_id in visible_sources)

    def bucket_by_date(
        self, visible_sources: Collection[str] | None = None
    ) -> tuple[DayBucket, ...]:
        return bucket_by_date(self.visible(visible_sources), self.timezone)

    def upcoming(
        self, now: datetime, visible_sources: Collection[str] | None = None
    ) -> tuple[EventOccurrence, ...]:
        """Occurrences that have not ended yet."""
        return tuple(o for o in self.visible(visible_sources) if o.end >= now)

    def in_month(
        self, month_start: date, visible_sources: Collection[str] | None = None
    ) -> tuple[DayBucket, ...]:
        """Buckets for the local month containing ``month_start``."""
        month = (month_start.year, month_start.month)
        in_range = []
        for occurrence in self.visible(visible_sources):
            day = local_date(occurrence.start, self.timezone)
            if (day.year, day.month) == month:
                in_range.append(occurrence)
        return bucket_by_date(in_range, self.timezone)

    def next_event(
        self, now: datetime, visible_sources: Collection[str] | None = None
    ) -> EventOccurrence | None:
        """First occurrence starting at or after ``now``, else the first overall."""
        candidates = self.visible(visible_sources)
        for occurrence in candidates:
            if occurrence.start >= now:
                return occurrence
        return candidates[0] if candidates else None

    def agenda(
        self, now: datetime, visible_sources: Collection[str] | None = None
    ) -> tuple[DayBucket, ...]:
        """Upcoming buckets labelled relative to the local date of ``now``."""
        today = local_date(now, self.timezone)
        return tuple(
            DayBucket(
                date_key=bucket.date_key,
                occurrences=bucket.occurrences,
                label=format_date_label(date.fromisoformat(bucket.date_key), today),
            )
            for bucket in bucket_by_date(self.upcoming(now, visible_sources), self.timezone)
        )


class CalendarAggregator:
    """Fan out to every source, then merge what came back.

    ``state`` moves ``IDLE -> FETCHING -> MERGED`` on each call. A source that
    raises or times out contributes nothing and is listed in
    ``failed_sources``.
    """

    def __init__(self, *, config: ResolverConfig, timeout: float) -> None:
        self.config = config
        self.timeout = timeout
        self.state = AggregatorState.IDLE

    async def _fetch(self, source: SourceFetch) -> list[RawBookingRow] | None:
        try:
            return await asyncio.wait_for(source.fetch(), timeout=self.timeout)
        except TimeoutError:
            logger.warning(
                "Calendar source %s timed out after %.1fs", source.source_id, self.timeout
            )
        except Exception as exc:
            logger.warning("Calendar source %s failed: %s", source.source_id, exc)
        return None

    async def aggregate(
        self,
        self_fetch: SourceFetch,
        shared: Sequence[SourceFetch],
        *,
        now: datetime | None = None,
    ) -> AggregateResult:
        self.state = AggregatorState.IDLE
        sources: list[SourceFetch] = [self_fetch]
        seen = {self_fetch.source_id}
        for source in shared:
            if source.source_id in seen:
                logger.debug("Skipping duplicate calendar source %s", source.source_id)
                continue
            seen.add(source.source_id)
            sources.append(source)

        self.state = AggregatorState.FETCHING
        outcomes = await asyncio.gather(*(self._fetch(source) for source in sources))

        per_source: list[tuple[EventOccurrence, ...]] = []
        unscheduled: tuple[UnscheduledBooking, ...] = ()
        infos: list[SourceInfo] = []
        failed: list[str] = []
        for source, rows in zip(sources, outcomes):
            infos.append(
                SourceInfo(
                    source_id=source.source_id, label=source.label, available=rows is not None
                )
            )
            if rows is None:
                failed.append(source.source_id)
                continue
            projection = project_rows(rows, source_id=source.source_id, config=self.config)
            per_source.append(projection.occurrences)
            if source.source_id == SELF_SOURCE_ID:
                unscheduled = projection.unscheduled

        result = AggregateResult(
            occurrences=merge(per_source),
            unscheduled=unscheduled,
            sources=tuple(infos),
            failed_sources=tuple(failed),
            timezone=self.config.timezone,
            fetched_at=now or datetime.now(UTC),
        )
        self.state = AggregatorState.MERGED
        return result


async def aggregate(
    self_fetch: SourceFetch,
    shared: Sequence[SourceFetch],
    *,
    config: ResolverConfig,
    timeout: float,
) -> AggregateResult:
    """Run one aggregation pass with a throwaway aggregator."""
    return await CalendarAggregator(config=config, timeout=timeout).aggregate(
        self_fetch, shared
    )
