"""View projections of the (filtered) schedule.

Every projection is a pure function of the event list it is given, recomputed
on each render. Three shapes are produced:

  - group_by_day_chronological: day -> events sorted by start time
  - group_by_fixed_slot:        half-hour grid row -> events starting then
  - group_by_entity:            broker/assignee id -> events grouped by day

Plus the summaries built on them (broker, team member, company coverage, next
upcoming event).
"""

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import NamedTuple

from src.itinerary.models import Broker, Catalog, ScheduleEvent, TeamMember
from src.itinerary.timeparse import (
    canonical_time,
    event_datetime,
    parse_time_to_minutes,
)

# 8:00 AM through 4:00 PM in half-hour steps
DEFAULT_TIME_SLOTS: tuple[str, ...] = (
    "8:00 AM", "8:30 AM", "9:00 AM", "9:30 AM", "10:00 AM", "10:30 AM",
    "11:00 AM", "11:30 AM", "12:00 PM", "12:30 PM", "1:00 PM", "1:30 PM",
    "2:00 PM", "2:30 PM", "3:00 PM", "3:30 PM", "4:00 PM",
)


class DayGroup(NamedTuple):
    day: str
    events: list[ScheduleEvent]


class SlotGroup(NamedTuple):
    slot: str
    events: list[ScheduleEvent]


def sort_chronologically(events: Iterable[ScheduleEvent]) -> list[ScheduleEvent]:
    """Stable sort by start time; TBD/unparseable times go last."""
    return sorted(events, key=lambda e: parse_time_to_minutes(e.time))


def group_by_day_chronological(events: Iterable[ScheduleEvent]) -> list[DayGroup]:
    """Partition by day (first-seen order), each day sorted by start time.

    Events sharing a start time keep their input order.
    """
    by_day: dict[str, list[ScheduleEvent]] = {}
    for event in events:
        by_day.setdefault(event.day, []).append(event)
    return [DayGroup(day, sort_chronologically(items)) for day, items in by_day.items()]


def scheduled_for_day(events: Iterable[ScheduleEvent], day: str) -> list[ScheduleEvent]:
    """Scheduled events on one day, sorted by start time (calendar view input)."""
    return sort_chronologically(e for e in events if e.day == day and e.is_scheduled)


def group_by_fixed_slot(
    events: Iterable[ScheduleEvent], slot_labels: Sequence[str] = DEFAULT_TIME_SLOTS
) -> list[SlotGroup]:
    """Bucket events into grid rows by exact (normalised) start time.

    Slots without events are left out, as are unscheduled events and events
    whose start matches no slot label.
    """
    by_time: dict[str, list[ScheduleEvent]] = {}
    for event in events:
        if not event.is_scheduled:
            continue
        key = canonical_time(event.time)
        if key is not None:
            by_time.setdefault(key, []).append(event)

    groups: list[SlotGroup] = []
    for slot in slot_labels:
        slot_events = by_time.get(canonical_time(slot) or "")
        if slot_events:
            groups.append(SlotGroup(slot, slot_events))
    return groups


def group_by_entity(
    events: Iterable[ScheduleEvent],
    key_fn: Callable[[ScheduleEvent], str | None],
) -> dict[str, list[DayGroup]]:
    """Group events by an entity key, then by day in chronological order.

    Used with ``lambda e: e.broker`` for broker pages and
    ``lambda e: e.assigned_to`` for team pages. Events whose key is empty or
    None are not listed under any entity.
    """
    by_entity: dict[str, list[ScheduleEvent]] = {}
    for event in events:
        key = key_fn(event)
        if key:
            by_entity.setdefault(key, []).append(event)
    return {
        key: group_by_day_chronological(items) for key, items in by_entity.items()
    }


def _flatten(days: list[DayGroup]) -> list[ScheduleEvent]:
    return [event for group in days for event in group.events]


def _unique(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(v for v in values if v))


@dataclass
class BrokerSummary:
    broker_id: str
    broker: Broker | None
    days: list[DayGroup] = field(default_factory=list)

    @property
    def events(self) -> list[ScheduleEvent]:
        return _flatten(self.days)

    @property
    def tickers(self) -> list[str]:
        return _unique(e.ticker for e in self.events)

    @property
    def team_size(self) -> int:
        return self.broker.team_size if self.broker else 0

    @property
    def assigned_count(self) -> int:
        return sum(1 for e in self.events if e.assigned_to)


@dataclass
class MemberSummary:
    member_id: str
    member: TeamMember | None
    days: list[DayGroup] = field(default_factory=list)

    @property
    def events(self) -> list[ScheduleEvent]:
        return _flatten(self.days)

    @property
    def broker_ids(self) -> list[str]:
        return _unique(e.broker for e in self.events)


def broker_summary(
    events: Iterable[ScheduleEvent], catalog: Catalog, broker_id: str
) -> BrokerSummary:
    grouped = group_by_entity(events, lambda e: e.broker)
    return BrokerSummary(broker_id, catalog.broker(broker_id), grouped.get(broker_id, []))


def member_summary(
    events: Iterable[ScheduleEvent], catalog: Catalog, member_id: str
) -> MemberSummary:
    grouped = group_by_entity(events, lambda e: e.assigned_to)
    return MemberSummary(member_id, catalog.member(member_id), grouped.get(member_id, []))


def unique_tickers(events: Iterable[ScheduleEvent]) -> list[str]:
    return sorted({e.ticker for e in events if e.ticker})


@dataclass
class CoverageMatrix:
    """Which brokers host meetings with which companies."""

    coverage: dict[str, list[str]]  # ticker -> broker ids

    @property
    def exclusive(self) -> list[str]:
        return [t for t, brokers in self.coverage.items() if len(brokers) == 1]

    @property
    def overlaps(self) -> list[str]:
        return [t for t, brokers in self.coverage.items() if len(brokers) > 1]

    @property
    def total_meetings(self) -> int:
        return sum(len(brokers) for brokers in self.coverage.values())


def company_coverage(events: Iterable[ScheduleEvent]) -> CoverageMatrix:
    by_ticker: dict[str, list[str]] = {}
    for event in events:
        if not event.ticker:
            continue
        brokers = by_ticker.setdefault(event.ticker, [])
        if event.broker and event.broker not in brokers:
            brokers.append(event.broker)
    return CoverageMatrix(dict(sorted(by_ticker.items())))


def next_event(
    events: Iterable[ScheduleEvent],
    now: datetime,
    day_dates: dict[str, date] | None = None,
) -> ScheduleEvent | None:
    """The earliest scheduled event starting strictly after ``now``."""
    upcoming: list[tuple[datetime, ScheduleEvent]] = []
    for event in events:
        start = event_datetime(event.day, event.time, day_dates)
        if start is not None and start > now:
            upcoming.append((start, event))
    if not upcoming:
        return None
    return min(upcoming, key=lambda pair: pair[0])[1]
