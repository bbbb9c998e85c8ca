"""Conference itinerary core for the AHR Expo planner.

Parses schedule times, filters and groups the schedule into timeline, grid and
summary views, persists assignment/note edits, and exports iCalendar files.
"""

from src.itinerary.calendar_export import CalendarExporter
from src.itinerary.filters import FilterCriteria, apply_filters
from src.itinerary.models import ItineraryData, ScheduleEvent
from src.itinerary.projector import (
    DEFAULT_TIME_SLOTS,
    group_by_day_chronological,
    group_by_entity,
    group_by_fixed_slot,
)
from src.itinerary.session import ItinerarySession, SessionState
from src.itinerary.storage import AssignmentStore, NotesStore
from src.itinerary.timeparse import parse_time_to_minutes, to_absolute_timestamp

__all__ = [
    "ItinerarySession",
    "SessionState",
    "ItineraryData",
    "ScheduleEvent",
    "FilterCriteria",
    "apply_filters",
    "DEFAULT_TIME_SLOTS",
    "group_by_day_chronological",
    "group_by_fixed_slot",
    "group_by_entity",
    "AssignmentStore",
    "NotesStore",
    "CalendarExporter",
    "parse_time_to_minutes",
    "to_absolute_timestamp",
]
