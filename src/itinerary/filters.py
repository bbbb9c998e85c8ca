"""Schedule filtering by day, broker, company and assignee.

Each criterion is independent; "all" means no restriction on that dimension.
Set criteria are ANDed together, and the output keeps input order.
"""

from collections.abc import Iterable

from pydantic import BaseModel

from src.itinerary.models import ScheduleEvent

ALL = "all"
UNASSIGNED = "unassigned"


class FilterCriteria(BaseModel):
    """Current filter selection of the schedule views."""

    day: str = ALL
    broker: str = ALL
    company: str = ALL  # ticker
    team: str = ALL  # team member id, or UNASSIGNED

    def is_default(self) -> bool:
        return self.day == self.broker == self.company == self.team == ALL


def matches(event: ScheduleEvent, criteria: FilterCriteria) -> bool:
    if criteria.day != ALL and event.day != criteria.day:
        return False
    if criteria.broker != ALL and event.broker != criteria.broker:
        return False
    if criteria.company != ALL and event.ticker != criteria.company:
        return False
    if criteria.team == UNASSIGNED:
        return event.assigned_to is None
    if criteria.team != ALL and event.assigned_to != criteria.team:
        return False
    return True


def apply_filters(
    events: Iterable[ScheduleEvent], criteria: FilterCriteria | None = None
) -> list[ScheduleEvent]:
    """Return the events matching every set criterion, in input order."""
    if criteria is None or criteria.is_default():
        return list(events)
    return [event for event in events if matches(event, criteria)]
