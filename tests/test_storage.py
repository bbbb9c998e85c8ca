import json

import pytest

from src.itinerary.errors import StatePersistenceError
from src.itinerary.storage import (
    AssignmentStore,
    JsonFileKeyValueStore,
    MappingStore,
    MemoryKeyValueStore,
    NotesStore,
)

from tests.conftest import make_event


def test_assignment_round_trip_through_fresh_store() -> None:
    backend = MemoryKeyValueStore()
    AssignmentStore(backend).set("e1", "alice")
    assert AssignmentStore(backend).load() == {"e1": "alice"}


def test_unassign_persists_null() -> None:
    backend = MemoryKeyValueStore()
    store = AssignmentStore(backend)
    store.set("e1", "alice")
    store.set("e1", None)
    reloaded = AssignmentStore(backend)
    reloaded.load()
    assert reloaded.get("e1") is None


def test_whole_map_is_written_on_each_set() -> None:
    backend = MemoryKeyValueStore()
    store = AssignmentStore(backend)
    store.set("e1", "alice")
    store.set("e2", "ben")
    assert json.loads(backend.get("ahr-assignments")) == {"e1": "alice", "e2": "ben"}


def test_load_replaces_in_memory_map_last_write_wins() -> None:
    backend = MemoryKeyValueStore()
    first = AssignmentStore(backend)
    second = AssignmentStore(backend)
    first.set("e1", "alice")
    second.set("e2", "ben")
    # second never loaded, so its write drops e1
    assert AssignmentStore(backend).load() == {"e2": "ben"}


@pytest.mark.parametrize("raw", [None, "", "{not json", "[1, 2]", "42", "null"])
def test_missing_or_malformed_state_loads_empty(raw) -> None:
    backend = MemoryKeyValueStore()
    if raw is not None:
        backend.set("ahr-assignments", raw)
    assert AssignmentStore(backend).load() == {}


def test_invalid_entries_are_dropped() -> None:
    backend = MemoryKeyValueStore({"ahr-assignments": json.dumps({"e1": "alice", "e2": 7, "e3": None})})
    assert AssignmentStore(backend).load() == {"e1": "alice", "e3": None}


def test_overlay_applies_only_persisted_entries() -> None:
    backend = MemoryKeyValueStore()
    store = AssignmentStore(backend)
    store.set("e1", "alice")
    store.set("e2", None)
    events = [
        make_event("e1"),
        make_event("e2", assigned_to="ben"),
        make_event("e3", assigned_to="ben"),
    ]
    overlaid = store.overlay(events)
    assert [e.assigned_to for e in overlaid] == ["alice", None, "ben"]
    # originals untouched
    assert events[0].assigned_to is None


def test_notes_store() -> None:
    backend = MemoryKeyValueStore()
    notes = NotesStore(backend)
    notes.set("TT", "Ask about backlog")
    reloaded = NotesStore(backend)
    reloaded.load()
    assert reloaded.note_for("TT") == "Ask about backlog"
    assert reloaded.note_for("CARR") == ""
    assert reloaded.has_note("TT")
    assert not reloaded.has_note("CARR")


def test_notes_and_assignments_use_separate_keys() -> None:
    backend = MemoryKeyValueStore()
    AssignmentStore(backend).set("e1", "alice")
    NotesStore(backend).set("TT", "hello")
    assert set(backend.data) == {"ahr-assignments", "ahr-company-notes"}


def test_json_file_store_shared_between_instances(tmp_path) -> None:
    path = tmp_path / "state" / "itinerary_state.json"
    AssignmentStore(JsonFileKeyValueStore(path)).set("e1", "alice")
    NotesStore(JsonFileKeyValueStore(path)).set("TT", "café meeting")
    assert AssignmentStore(JsonFileKeyValueStore(path)).load() == {"e1": "alice"}
    assert NotesStore(JsonFileKeyValueStore(path)).load() == {"TT": "café meeting"}


def test_json_file_store_corrupt_file_reads_empty(tmp_path) -> None:
    path = tmp_path / "state.json"
    path.write_text("{{{", encoding="utf-8")
    store = JsonFileKeyValueStore(path)
    assert store.get("ahr-assignments") is None
    store.set("ahr-assignments", "{}")
    assert store.get("ahr-assignments") == "{}"


def test_json_file_store_clear(tmp_path) -> None:
    path = tmp_path / "state.json"
    store = JsonFileKeyValueStore(path)
    store.set("k", "v")
    store.clear()
    assert not path.exists()
    assert store.get("k") is None


class FailingBackend(MemoryKeyValueStore):
    def set(self, key: str, value: str) -> None:
        raise OSError("disk full")


def test_failed_write_keeps_previous_map() -> None:
    backend = FailingBackend({"ahr-assignments": json.dumps({"e1": "ben"})})
    store = AssignmentStore(backend)
    store.load()

    with pytest.raises(StatePersistenceError):
        store.set("e1", "alice")
    with pytest.raises(StatePersistenceError):
        store.set("e2", "alice")

    assert store.snapshot() == {"e1": "ben"}
    assert json.loads(backend.get("ahr-assignments")) == {"e1": "ben"}


def test_mapping_store_base_is_abstract() -> None:
    with pytest.raises(TypeError):
        MappingStore(MemoryKeyValueStore(), "k")
