import json

import pytest
import requests

from src.itinerary import dataset
from src.itinerary.dataset import load_dataset
from src.itinerary.errors import DatasetInvalidError, DatasetUnavailableError


class FakeResponse:
    def __init__(self, status_code: int, text: str) -> None:
        self.status_code = status_code
        self.text = text


def test_load_from_file(dataset_file) -> None:
    data = load_dataset(dataset_file)
    assert data.event.name == "AHR Expo 2026"
    assert [m.id for m in data.team] == ["alice", "ben"]
    first = data.schedule[0]
    assert first.end_time == "10:30 AM"
    assert first.assigned_to is None
    assert data.brokers[0].full_name == "KeyBanc Capital Markets"


def test_missing_file_is_unavailable(tmp_path) -> None:
    with pytest.raises(DatasetUnavailableError):
        load_dataset(tmp_path / "missing.json")


def test_not_json_is_invalid(tmp_path) -> None:
    path = tmp_path / "bad.json"
    path.write_text("<html>oops</html>", encoding="utf-8")
    with pytest.raises(DatasetInvalidError):
        load_dataset(path)


def test_wrong_shape_is_invalid(tmp_path) -> None:
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"schedule": [{"id": "e1"}]}), encoding="utf-8")
    with pytest.raises(DatasetInvalidError):
        load_dataset(path)


def test_load_from_url(monkeypatch, raw_dataset) -> None:
    calls = []

    def fake_get(url, timeout):
        calls.append((url, timeout))
        return FakeResponse(200, json.dumps(raw_dataset))

    monkeypatch.setattr(dataset.requests, "get", fake_get)
    data = load_dataset("https://example.com/itinerary_data.json", timeout=5)
    assert len(data.schedule) == 4
    assert calls == [("https://example.com/itinerary_data.json", 5)]


def test_url_http_error_is_unavailable(monkeypatch) -> None:
    monkeypatch.setattr(dataset.requests, "get", lambda url, timeout: FakeResponse(404, "not found"))
    with pytest.raises(DatasetUnavailableError, match="HTTP 404"):
        load_dataset("https://example.com/itinerary_data.json")


def test_url_connection_error_is_unavailable(monkeypatch) -> None:
    def fake_get(url, timeout):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(dataset.requests, "get", fake_get)
    with pytest.raises(DatasetUnavailableError) as excinfo:
        load_dataset("http://localhost:1/itinerary_data.json")
    assert not isinstance(excinfo.value, DatasetInvalidError)


def test_undecodable_file_is_invalid(tmp_path) -> None:
    path = tmp_path / "latin1.json"
    path.write_bytes(b'{"event": {"name": "\xff\xfe"}}')
    with pytest.raises(DatasetInvalidError, match="encoding"):
        load_dataset(path)
