"""iCalendar (RFC 5545) export of schedule events.

Produces a VCALENDAR document with one VEVENT per scheduled event. Times are
floating local times (no TZID/UTC suffix). An event without an end time is
exported with DTEND equal to DTSTART; the ``duration`` field is not used.
"""

from collections.abc import Iterable
from datetime import date
from pathlib import Path

from src.itinerary.logging import get_logger
from src.itinerary.models import Catalog, ScheduleEvent
from src.itinerary.timeparse import DEFAULT_DAY_DATES, to_absolute_timestamp

log = get_logger(__name__)

CRLF = "\r\n"
MAX_LINE_OCTETS = 75

DEFAULT_PRODUCT_ID = "-//AHR Expo 2026//EN"
DEFAULT_LOCATION = "Las Vegas Convention Center"


def escape_text(value: str) -> str:
    """Escape a TEXT property value (backslash, semicolon, comma, newline)."""
    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
    )


def fold_line(line: str) -> str:
    """Fold a content line at 75 octets without splitting UTF-8 sequences."""
    if len(line.encode("utf-8")) <= MAX_LINE_OCTETS:
        return line
    parts: list[str] = []
    current = ""
    current_octets = 0
    # Continuation lines start with a space, which counts toward the limit
    limit = MAX_LINE_OCTETS
    for char in line:
        size = len(char.encode("utf-8"))
        if current_octets + size > limit:
            parts.append(current)
            current, current_octets = "", 0
            limit = MAX_LINE_OCTETS - 1
        current += char
        current_octets += size
    parts.append(current)
    return (CRLF + " ").join(parts)


class CalendarExporter:
    """Serialises events into an .ics document."""

    def __init__(
        self,
        catalog: Catalog | None = None,
        *,
        day_dates: dict[str, date] | None = None,
        product_id: str = DEFAULT_PRODUCT_ID,
        default_location: str = DEFAULT_LOCATION,
    ) -> None:
        self.catalog = catalog
        self.day_dates = day_dates or DEFAULT_DAY_DATES
        self.product_id = product_id
        self.default_location = default_location

    def _broker_name(self, broker_id: str) -> str:
        return self.catalog.broker_name(broker_id) if self.catalog else broker_id

    def summary(self, event: ScheduleEvent) -> str:
        return f"{event.ticker} - {self._broker_name(event.broker)}"

    def description(self, event: ScheduleEvent) -> str:
        text = event.company
        if event.host:
            text += f" | Host: {event.host}"
        if event.notes:
            text += f" | {event.notes}"
        return text

    def location(self, event: ScheduleEvent) -> str:
        if event.booth:
            return f"Booth {event.booth}"
        return event.location or self.default_location

    def event_lines(self, event: ScheduleEvent) -> list[str]:
        """VEVENT lines for one event, or [] if its start time does not parse."""
        if not event.is_scheduled:
            log.debug("export_skipped", event_id=event.id, reason="unscheduled")
            return []
        start = to_absolute_timestamp(event.day, event.time, self.day_dates)
        if start is None:
            log.debug("export_skipped", event_id=event.id, reason="unparseable_time", time=event.time)
            return []
        end = None
        if event.end_time:
            end = to_absolute_timestamp(event.day, event.end_time, self.day_dates)
        return [
            "BEGIN:VEVENT",
            f"DTSTART:{start}",
            f"DTEND:{end or start}",
            f"SUMMARY:{escape_text(self.summary(event))}",
            f"DESCRIPTION:{escape_text(self.description(event))}",
            f"LOCATION:{escape_text(self.location(event))}",
            "END:VEVENT",
        ]

    def export(self, events: Iterable[ScheduleEvent]) -> str:
        """Build the full VCALENDAR document.

        Args:
            events: Events to export, in the order they should appear.

        Returns:
            CRLF-delimited calendar text ending with a line break.
        """
        lines = [
            "BEGIN:VCALENDAR",
            "VERSION:2.0",
            f"PRODID:{self.product_id}",
            "CALSCALE:GREGORIAN",
            "METHOD:PUBLISH",
        ]
        exported = 0
        for event in events:
            block = self.event_lines(event)
            if block:
                lines.extend(block)
                exported += 1
        lines.append("END:VCALENDAR")
        log.debug("calendar_exported", events=exported)
        return "".join(fold_line(line) + CRLF for line in lines)

    def write(self, events: Iterable[ScheduleEvent], path: str | Path) -> Path:
        """Export ``events`` and write the document to ``path``."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        # newline="" keeps the CRLF line endings intact on every platform
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(self.export(events))
        log.info("calendar_written", path=str(path))
        return path
