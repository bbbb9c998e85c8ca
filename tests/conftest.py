import json

import pytest

from src.itinerary.models import Catalog, ItineraryData, ScheduleEvent
from src.itinerary.session import ItinerarySession
from src.itinerary.storage import MemoryKeyValueStore


def make_event(event_id: str, day: str = "monday", time: str = "9:00 AM", **fields) -> ScheduleEvent:
    return ScheduleEvent(id=event_id, day=day, time=time, **fields)


@pytest.fixture
def raw_dataset() -> dict:
    return {
        "event": {"name": "AHR Expo 2026", "location": "Las Vegas, NV", "dates": "Feb 2-3, 2026"},
        "conestogaTeam": [
            {"id": "alice", "name": "Alice Moreau"},
            {"id": "ben", "name": "Ben Okafor"},
        ],
        "brokers": [
            {
                "id": "keybanc",
                "name": "KeyBanc",
                "fullName": "KeyBanc Capital Markets",
                "color": "#1f77b4",
                "analysts": ["Jeff Hammond"],
                "team": [{"name": "Pat Rooney", "role": "Sales"}],
            },
            {"id": "baird", "name": "Baird", "fullName": "Robert W. Baird", "color": "#2ca02c"},
        ],
        "schedule": [
            {"id": "e1", "day": "monday", "time": "10:00 AM", "endTime": "10:30 AM", "type": "meeting",
             "broker": "keybanc", "ticker": "TT", "company": "Trane Technologies", "booth": "C3201",
             "assignedTo": None},
            {"id": "e2", "day": "monday", "time": "9:00 AM", "type": "booth_tour", "broker": "baird",
             "ticker": "CARR", "company": "Carrier Global", "booth": "", "assignedTo": "ben"},
            {"id": "e3", "day": "monday", "time": "TBD", "type": "meeting", "broker": "keybanc",
             "ticker": "LII", "company": "Lennox International", "booth": "", "assignedTo": None},
            {"id": "e4", "day": "tuesday", "time": "1:30 PM", "type": "meeting", "broker": "baird",
             "ticker": "TT", "company": "Trane Technologies", "booth": "C3201", "assignedTo": None},
        ],
        "companies": [
            {"ticker": "TT", "name": "Trane Technologies", "booth": "C3201"},
            {"ticker": "CARR", "name": "Carrier Global", "booth": "C4501"},
            {"ticker": "LII", "name": "Lennox International"},
        ],
    }


@pytest.fixture
def dataset(raw_dataset) -> ItineraryData:
    return ItineraryData.model_validate(raw_dataset)


@pytest.fixture
def catalog(dataset) -> Catalog:
    return Catalog(dataset)


@pytest.fixture
def dataset_file(tmp_path, raw_dataset):
    path = tmp_path / "itinerary_data.json"
    path.write_text(json.dumps(raw_dataset), encoding="utf-8")
    return path


@pytest.fixture
def backend() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def session(dataset_file, backend) -> ItinerarySession:
    s = ItinerarySession(dataset_file, backend)
    s.load()
    return s
