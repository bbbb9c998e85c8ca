"""
Browse the AHR Expo itinerary from the command line.

Loads the itinerary dataset, overlays saved team assignments and company
notes, and prints the requested view. Assignments and notes are saved to the
state file (ITINERARY_STATE_FILE) immediately.

Usage:
    python scripts/itinerary.py timeline                      # full schedule by day
    python scripts/itinerary.py timeline --day monday --team unassigned
    python scripts/itinerary.py grid --day tuesday            # half-hour grid
    python scripts/itinerary.py broker keybanc                # broker summary
    python scripts/itinerary.py member alice                  # team member summary
    python scripts/itinerary.py companies                     # company directory
    python scripts/itinerary.py next                          # next upcoming event
    python scripts/itinerary.py assign e1 alice               # assign an event
    python scripts/itinerary.py assign e1 --clear             # unassign
    python scripts/itinerary.py note TT "Ask about backlog"
    python scripts/itinerary.py export --day monday --output ahr-expo-monday.ics

Exit codes:
  0 = success
  1 = dataset unavailable, unknown id or state file not writable (message on stderr)
"""

import argparse
import os
import sys

from dotenv import load_dotenv

load_dotenv()

# Add project root to path for src imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from src.itinerary.config import get_config  # noqa: E402
from src.itinerary.errors import StatePersistenceError, UnknownEntityError  # noqa: E402
from src.itinerary.filters import ALL, FilterCriteria  # noqa: E402
from src.itinerary.logging import setup_logging_from_config  # noqa: E402
from src.itinerary.models import ScheduleEvent  # noqa: E402
from src.itinerary.projector import DayGroup  # noqa: E402
from src.itinerary.session import ItinerarySession, SessionState  # noqa: E402
from src.itinerary.storage import JsonFileKeyValueStore  # noqa: E402


def _log(msg: str) -> None:
    """Write diagnostic messages to stderr so stdout stays clean."""
    print(msg, file=sys.stderr)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Browse the conference itinerary.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--source",
        help="Dataset path or URL (default: ITINERARY_DATASET_SOURCE).",
    )
    parser.add_argument(
        "--state-file",
        help="Key-value state file (default: ITINERARY_STATE_FILE).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    timeline = sub.add_parser("timeline", help="Schedule grouped by day.")
    timeline.add_argument("--day", default=ALL)
    timeline.add_argument("--broker", default=ALL)
    timeline.add_argument("--company", default=ALL, help="Ticker.")
    timeline.add_argument(
        "--team", default=ALL, help="Team member id, or 'unassigned'."
    )

    grid = sub.add_parser("grid", help="Half-hour calendar grid for one day.")
    grid.add_argument("--day", default="monday")

    broker = sub.add_parser("broker", help="Broker summary.")
    broker.add_argument("broker_id")

    member = sub.add_parser("member", help="Team member summary.")
    member.add_argument("member_id")

    sub.add_parser("companies", help="Company directory with broker coverage.")
    sub.add_parser("next", help="Next upcoming event.")

    assign = sub.add_parser("assign", help="Assign an event to a team member.")
    assign.add_argument("event_id")
    assign.add_argument("member_id", nargs="?")
    assign.add_argument("--clear", action="store_true", help="Unassign the event.")

    note = sub.add_parser("note", help="Set the note for a company.")
    note.add_argument("ticker")
    note.add_argument("text")

    export = sub.add_parser("export", help="Export events as an .ics calendar.")
    export.add_argument("--day", help="Only this day's scheduled events.")
    export.add_argument("--output", help="Write to this file instead of stdout.")

    args = parser.parse_args(argv)
    if args.command == "assign" and not args.clear and not args.member_id:
        parser.error("assign needs a member id or --clear")
    return args


def _format_event(session: ItinerarySession, evt: ScheduleEvent) -> str:
    catalog = session.catalog
    where = f"Booth {evt.booth}" if evt.booth else (evt.location or "")
    line = f"  {evt.time:<10} {evt.ticker:<6} {catalog.broker_name(evt.broker):<16} {where}"
    if evt.assigned_to:
        line += f"  [{catalog.member_name(evt.assigned_to)}]"
    return line


def _print_days(session: ItinerarySession, days: list[DayGroup]) -> None:
    if not days:
        print("No events match the current filters.")
        return
    for group in days:
        print(f"\n{group.day.upper()} ({len(group.events)} events)")
        for evt in group.events:
            print(_format_event(session, evt))


def cmd_timeline(session: ItinerarySession, args: argparse.Namespace) -> int:
    criteria = FilterCriteria(
        day=args.day, broker=args.broker, company=args.company, team=args.team
    )
    _print_days(session, session.timeline(criteria))
    return 0


def cmd_grid(session: ItinerarySession, args: argparse.Namespace) -> int:
    rows = session.calendar_grid(args.day)
    print(f"{args.day.upper()} - {len(session.calendar_events(args.day))} scheduled events")
    for row in rows:
        labels = ", ".join(
            f"{e.ticker} ({session.catalog.broker_name(e.broker)})" for e in row.events
        )
        print(f"  {row.slot:>8} | {labels}")
    return 0


def cmd_broker(session: ItinerarySession, args: argparse.Namespace) -> int:
    summary = session.broker_summary(args.broker_id)
    if summary.broker is None and not summary.events:
        raise UnknownEntityError(f"Unknown broker id {args.broker_id!r}")
    title = (summary.broker.full_name or summary.broker.name) if summary.broker else args.broker_id
    print("=" * 60)
    print(title)
    print("=" * 60)
    print(f"  Total events: {len(summary.events)}")
    print(f"  Companies:    {len(summary.tickers)}")
    print(f"  Team members: {summary.team_size}")
    print(f"  Assigned:     {summary.assigned_count}")
    _print_days(session, summary.days)
    return 0


def cmd_member(session: ItinerarySession, args: argparse.Namespace) -> int:
    summary = session.member_summary(args.member_id)
    if summary.member is None:
        raise UnknownEntityError(f"Unknown team member id {args.member_id!r}")
    print("=" * 60)
    print(summary.member.name)
    print("=" * 60)
    print(f"  Assigned events: {len(summary.events)}")
    print(f"  Brokers:         {len(summary.broker_ids)}")
    if not summary.events:
        print("\nNo events assigned yet.")
        return 0
    _print_days(session, summary.days)
    return 0


def cmd_companies(session: ItinerarySession, args: argparse.Namespace) -> int:
    coverage = session.coverage()
    for ticker in session.companies():
        events = session.events_for_company(ticker)
        brokers = ", ".join(session.catalog.broker_name(b) for b in coverage.coverage.get(ticker, []))
        marker = "*" if session.notes.has_note(ticker) else " "
        print(f" {marker}{ticker:<6} {session.catalog.company_name(ticker):<28} {len(events)} events  {brokers}")
    print(
        f"\nCoverage: {coverage.total_meetings} broker-company meetings, "
        f"{len(coverage.exclusive)} exclusive, {len(coverage.overlaps)} shared"
    )
    return 0


def cmd_next(session: ItinerarySession, args: argparse.Namespace) -> int:
    evt = session.next_event()
    if evt is None:
        print("No upcoming events.")
        return 0
    print(f"{evt.day.upper()}")
    print(_format_event(session, evt))
    return 0


def cmd_assign(session: ItinerarySession, args: argparse.Namespace) -> int:
    member_id = None if args.clear else args.member_id
    if member_id is not None and session.catalog.member(member_id) is None:
        raise UnknownEntityError(f"Unknown team member id {member_id!r}")
    evt = session.assign(args.event_id, member_id)
    who = session.catalog.member_name(member_id) if member_id else "unassigned"
    print(f"{evt.id}: {evt.ticker} {evt.day} {evt.time} -> {who}")
    return 0


def cmd_note(session: ItinerarySession, args: argparse.Namespace) -> int:
    session.set_note(args.ticker, args.text)
    print(f"Saved note for {args.ticker}")
    return 0


def cmd_export(session: ItinerarySession, args: argparse.Namespace) -> int:
    events = session.calendar_events(args.day) if args.day else session.schedule
    if args.output:
        path = session.exporter().write(events, args.output)
        _log(f"Wrote {path}")
    else:
        sys.stdout.write(session.export_calendar(events))
    return 0


COMMANDS = {
    "timeline": cmd_timeline,
    "grid": cmd_grid,
    "broker": cmd_broker,
    "member": cmd_member,
    "companies": cmd_companies,
    "next": cmd_next,
    "assign": cmd_assign,
    "note": cmd_note,
    "export": cmd_export,
}


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    config = get_config()
    setup_logging_from_config(config)

    if args.source:
        config = config.model_copy(update={"dataset_source": args.source})
    backend = JsonFileKeyValueStore(args.state_file or config.state_file)
    session = ItinerarySession.from_config(config, backend)

    if session.load() is not SessionState.READY:
        _log(f"Itinerary unavailable: {session.last_error}")
        _log("Check the dataset source and run the command again.")
        return 1

    try:
        return COMMANDS[args.command](session, args)
    except (UnknownEntityError, StatePersistenceError) as e:
        _log(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
