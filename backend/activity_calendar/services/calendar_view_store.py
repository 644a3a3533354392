"""In-memory calendar view state per viewer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from activity_calendar.services.calendar_service import AggregateResult


@dataclass(slots=True)
class CalendarView:
    """Latest aggregation for a viewer plus the sources they have hidden.

    Hiding a source never touches ``result``; views filter at read time.
    """

    result: AggregateResult | None = None
    hidden_sources: set[str] = field(default_factory=set)

    def visible_sources(self) -> frozenset[str]:
        if self.result is None:
            return frozenset()
        return frozenset(
            source.source_id
            for source in self.result.sources
            if source.source_id not in self.hidden_sources
        )

    def is_visible(self, source_id: str) -> bool:
        return source_id not in self.hidden_sources

    def is_fresh(self, now: datetime, max_age: timedelta) -> bool:
        """A zero ``max_age`` never counts as fresh."""
        return self.result is not None and now - self.result.fetched_at < max_age


_VIEWS: dict[str, CalendarView] = {}


def get_view(viewer_id: str) -> CalendarView:
    """Return the view for ``viewer_id``, creating an empty one on first use."""
    view = _VIEWS.get(viewer_id)
    if view is None:
        view = CalendarView()
        _VIEWS[viewer_id] = view
    return view


def store_result(viewer_id: str, result: AggregateResult) -> CalendarView:
    view = get_view(viewer_id)
    view.result = result
    return view


def set_source_visible(viewer_id: str, source_id: str, visible: bool) -> CalendarView:
    """Show or hide one source; raises ``LookupError`` for an unknown source."""
    view = get_view(viewer_id)
    known = {source.source_id for source in view.result.sources} if view.result else set()
    if source_id not in known:
        raise LookupError(f"Unknown calendar source {source_id}")
    if visible:
        view.hidden_sources.discard(source_id)
    else:
        view.hidden_sources.add(source_id)
    return view


def expire_all() -> None:
    """Drop every cached aggregation; hidden sources are kept."""
    for view in _VIEWS.values():
        view.result = None


def clear() -> None:
    """Forget every viewer's state (mainly for tests)."""
    _VIEWS.clear()
