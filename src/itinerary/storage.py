"""Persistence of the two user-editable maps.

AssignmentStore (event id -> team member id) and NotesStore (ticker -> note)
keep their map in memory and write the whole map back through a KeyValueStore
on every change. Last write wins; nothing is merged.

Persisted state that is missing or malformed is treated as empty, so a
corrupted state file never blocks the itinerary from loading.
"""

import json
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import Generic, Protocol, TypeVar

from src.itinerary.errors import StatePersistenceError
from src.itinerary.logging import get_logger
from src.itinerary.models import ScheduleEvent

logger = get_logger(__name__)

V = TypeVar("V")


class KeyValueStore(Protocol):
    """String key-value persistence port (browser localStorage equivalent)."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def clear(self) -> None: ...


class MemoryKeyValueStore:
    """In-process store, used in tests and for throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def clear(self) -> None:
        self.data.clear()


class JsonFileKeyValueStore:
    """Key-value store kept as a single JSON object on disk.

    The file is re-read on every get so that separate store instances over the
    same path observe each other's writes.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("state_file_unreadable", path=str(self.path), error=str(e))
            return {}
        if not isinstance(data, dict):
            logger.warning("state_file_unreadable", path=str(self.path), error="not an object")
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def get(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
            logger.info("state_cleared", path=str(self.path))


class MappingStore(ABC, Generic[V]):
    """A JSON-serialised dict persisted under one key of a KeyValueStore."""

    def __init__(self, backend: KeyValueStore, key: str) -> None:
        self.backend = backend
        self.key = key
        self._map: dict[str, V] = {}

    @abstractmethod
    def _valid_value(self, value: object) -> bool:
        """Whether a persisted value has the right type for this map."""

    def load(self) -> dict[str, V]:
        """Hydrate the in-memory map from the backend.

        Returns:
            A copy of the loaded map; empty if nothing usable was persisted.
        """
        raw = self.backend.get(self.key)
        loaded: dict[str, V] = {}
        if raw is not None:
            try:
                parsed = json.loads(raw)
            except ValueError:
                parsed = None
            if isinstance(parsed, dict):
                loaded = {k: v for k, v in parsed.items() if self._valid_value(v)}
                dropped = len(parsed) - len(loaded)
                if dropped:
                    logger.warning("persisted_entries_dropped", key=self.key, count=dropped)
            else:
                logger.warning("persisted_state_malformed", key=self.key)
        self._map = loaded
        logger.debug("store_loaded", key=self.key, entries=len(loaded))
        return dict(self._map)

    def get(self, key: str) -> V | None:
        return self._map.get(key)

    def set(self, key: str, value: V) -> None:
        """Update one entry and persist the entire map.

        The in-memory map only changes once the backend write succeeded.

        Raises:
            StatePersistenceError: If the backend could not be written.
        """
        updated = {**self._map, key: value}
        try:
            self.backend.set(self.key, json.dumps(updated, ensure_ascii=False))
        except OSError as e:
            logger.error("state_write_failed", key=self.key, error=str(e))
            raise StatePersistenceError(f"Could not save {self.key}: {e}") from e
        self._map = updated

    def snapshot(self) -> dict[str, V]:
        return dict(self._map)


class AssignmentStore(MappingStore[str | None]):
    """Event id -> assigned team member id (None means unassigned)."""

    def __init__(self, backend: KeyValueStore, key: str = "ahr-assignments") -> None:
        super().__init__(backend, key)

    def _valid_value(self, value: object) -> bool:
        return value is None or isinstance(value, str)

    def assign(self, event_id: str, member_id: str | None) -> None:
        self.set(event_id, member_id)
        logger.info("assignment_set", event_id=event_id, member_id=member_id)

    def overlay(self, events: Iterable[ScheduleEvent]) -> list[ScheduleEvent]:
        """Copies of ``events`` with persisted assignments applied.

        Events with no persisted entry keep the dataset's value.
        """
        return [
            event.model_copy(update={"assigned_to": self._map[event.id]})
            if event.id in self._map
            else event
            for event in events
        ]


class NotesStore(MappingStore[str]):
    """Company ticker -> free-text note."""

    def __init__(self, backend: KeyValueStore, key: str = "ahr-company-notes") -> None:
        super().__init__(backend, key)

    def _valid_value(self, value: object) -> bool:
        return isinstance(value, str)

    def note_for(self, ticker: str) -> str:
        return self.get(ticker) or ""

    def has_note(self, ticker: str) -> bool:
        return bool(self.get(ticker))
