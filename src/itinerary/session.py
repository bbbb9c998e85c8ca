"""Session state: one dataset load plus the user's edits layered on top.

ItinerarySession owns the event list for one browsing session. It starts in
NOT_LOADED, moves to READY once the dataset is fetched, or to UNAVAILABLE if
the fetch fails. Calling load() again is the (only) retry.
"""

from collections.abc import Sequence
from datetime import date, datetime
from enum import Enum
from pathlib import Path

from src.itinerary.calendar_export import (
    DEFAULT_LOCATION,
    DEFAULT_PRODUCT_ID,
    CalendarExporter,
)
from src.itinerary.dataset import load_dataset
from src.itinerary.errors import (
    DatasetUnavailableError,
    SessionNotReadyError,
    UnknownEntityError,
)
from src.itinerary.filters import FilterCriteria, apply_filters
from src.itinerary.logging import get_logger
from src.itinerary.models import Catalog, ItineraryData, ScheduleEvent
from src.itinerary.projector import (
    DEFAULT_TIME_SLOTS,
    BrokerSummary,
    CoverageMatrix,
    DayGroup,
    MemberSummary,
    SlotGroup,
    broker_summary,
    company_coverage,
    group_by_day_chronological,
    group_by_fixed_slot,
    member_summary,
    next_event,
    scheduled_for_day,
    unique_tickers,
)
from src.itinerary.storage import AssignmentStore, KeyValueStore, NotesStore
from src.itinerary.timeparse import DEFAULT_DAY_DATES

logger = get_logger(__name__)


class SessionState(str, Enum):
    NOT_LOADED = "not_loaded"
    READY = "ready"
    UNAVAILABLE = "unavailable"


class ItinerarySession:
    """Holds the loaded dataset, the user's edits, and derives every view."""

    def __init__(
        self,
        source: str | Path,
        backend: KeyValueStore,
        *,
        timeout: float = 30,
        assignments_key: str = "ahr-assignments",
        notes_key: str = "ahr-company-notes",
        day_dates: dict[str, date] | None = None,
        product_id: str = DEFAULT_PRODUCT_ID,
        default_location: str = DEFAULT_LOCATION,
    ) -> None:
        self.source = source
        self.timeout = timeout
        self.assignments = AssignmentStore(backend, assignments_key)
        self.notes = NotesStore(backend, notes_key)
        self.day_dates = day_dates or DEFAULT_DAY_DATES
        self.product_id = product_id
        self.default_location = default_location

        self.state = SessionState.NOT_LOADED
        self.last_error: DatasetUnavailableError | None = None
        self._data: ItineraryData | None = None
        self._catalog: Catalog | None = None
        self._schedule: list[ScheduleEvent] = []

    @classmethod
    def from_config(cls, config, backend: KeyValueStore) -> "ItinerarySession":
        """Build a session from an ItineraryConfig."""
        return cls(
            config.dataset_source,
            backend,
            timeout=config.fetch_timeout_seconds,
            assignments_key=config.assignments_key,
            notes_key=config.notes_key,
            day_dates=config.event_day_dates,
            product_id=config.calendar_product_id,
            default_location=config.default_location,
        )

    def load(self) -> SessionState:
        """Fetch the dataset and hydrate persisted edits.

        Dataset failures do not raise; the session becomes UNAVAILABLE and the
        error is kept in ``last_error``.

        Returns:
            The resulting session state.
        """
        try:
            data = load_dataset(self.source, timeout=self.timeout)
        except DatasetUnavailableError as e:
            logger.error("dataset_unavailable", source=str(self.source), error=str(e))
            self.state = SessionState.UNAVAILABLE
            self.last_error = e
            return self.state

        self.assignments.load()
        self.notes.load()
        self._data = data
        self._catalog = Catalog(data)
        self._schedule = self.assignments.overlay(data.schedule)
        self.state = SessionState.READY
        self.last_error = None
        logger.info("session_ready", events=len(self._schedule))
        return self.state

    @property
    def ready(self) -> bool:
        return self.state is SessionState.READY

    def _require_ready(self) -> None:
        if not self.ready:
            raise SessionNotReadyError(f"Itinerary is not available (state={self.state.value})")

    @property
    def data(self) -> ItineraryData:
        self._require_ready()
        return self._data

    @property
    def catalog(self) -> Catalog:
        self._require_ready()
        return self._catalog

    @property
    def schedule(self) -> list[ScheduleEvent]:
        self._require_ready()
        return list(self._schedule)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------
    def filtered(self, criteria: FilterCriteria | None = None) -> list[ScheduleEvent]:
        return apply_filters(self.schedule, criteria)

    def timeline(self, criteria: FilterCriteria | None = None) -> list[DayGroup]:
        return group_by_day_chronological(self.filtered(criteria))

    def calendar_events(self, day: str) -> list[ScheduleEvent]:
        return scheduled_for_day(self.schedule, day)

    def calendar_grid(
        self, day: str, slot_labels: Sequence[str] = DEFAULT_TIME_SLOTS
    ) -> list[SlotGroup]:
        return group_by_fixed_slot(self.calendar_events(day), slot_labels)

    def broker_summary(self, broker_id: str) -> BrokerSummary:
        return broker_summary(self.schedule, self.catalog, broker_id)

    def member_summary(self, member_id: str) -> MemberSummary:
        return member_summary(self.schedule, self.catalog, member_id)

    def companies(self) -> list[str]:
        return unique_tickers(self.schedule)

    def events_for_company(self, ticker: str) -> list[ScheduleEvent]:
        return apply_filters(self.schedule, FilterCriteria(company=ticker))

    def coverage(self) -> CoverageMatrix:
        return company_coverage(self.schedule)

    def next_event(self, now: datetime | None = None) -> ScheduleEvent | None:
        return next_event(self.schedule, now or datetime.now(), self.day_dates)

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------
    def assign(self, event_id: str, member_id: str | None) -> ScheduleEvent:
        """Assign (or with None, unassign) an event and persist the map.

        Raises:
            UnknownEntityError: If the event id is not on the schedule.
            StatePersistenceError: If the assignment could not be saved; the
                schedule keeps its previous assignment.
        """
        self._require_ready()
        for index, event in enumerate(self._schedule):
            if event.id == event_id:
                break
        else:
            raise UnknownEntityError(f"Unknown event id {event_id!r}")

        self.assignments.assign(event_id, member_id)
        updated = event.model_copy(update={"assigned_to": member_id})
        self._schedule[index] = updated
        return updated

    def set_note(self, ticker: str, note: str) -> None:
        self._require_ready()
        self.notes.set(ticker, note)
        logger.info("note_set", ticker=ticker, length=len(note))

    def note_for(self, ticker: str) -> str:
        return self.notes.note_for(ticker)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------
    def exporter(self) -> CalendarExporter:
        return CalendarExporter(
            self.catalog,
            day_dates=self.day_dates,
            product_id=self.product_id,
            default_location=self.default_location,
        )

    def export_calendar(self, events: Sequence[ScheduleEvent] | None = None) -> str:
        """Export ``events`` (default: the whole schedule) as iCalendar text."""
        if events is None:
            events = self.schedule
        return self.exporter().export(events)
