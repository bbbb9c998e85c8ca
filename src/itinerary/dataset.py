"""Loading the static itinerary dataset from a file or URL."""

import json
from pathlib import Path

import requests
from pydantic import ValidationError

from src.itinerary.errors import DatasetInvalidError, DatasetUnavailableError
from src.itinerary.logging import get_logger
from src.itinerary.models import ItineraryData

log = get_logger(__name__)


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def _fetch_url(url: str, timeout: float) -> str:
    try:
        resp = requests.get(url, timeout=timeout)
    except requests.RequestException as e:
        raise DatasetUnavailableError(f"Failed to fetch {url}: {e}") from e
    if resp.status_code != 200:
        raise DatasetUnavailableError(f"Failed to fetch {url}: HTTP {resp.status_code}")
    return resp.text


def _read_file(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise DatasetInvalidError(f"Invalid itinerary dataset (encoding): {e}") from e
    except OSError as e:
        raise DatasetUnavailableError(f"Failed to read {path}: {e}") from e


def parse_dataset(raw: str) -> ItineraryData:
    """Validate raw dataset JSON.

    Raises:
        DatasetInvalidError: If the text is not JSON or fails validation.
    """
    try:
        return ItineraryData.model_validate(json.loads(raw))
    except ValueError as e:
        # ValidationError is a ValueError subclass
        kind = "validation" if isinstance(e, ValidationError) else "json"
        raise DatasetInvalidError(f"Invalid itinerary dataset ({kind}): {e}") from e


def load_dataset(source: str | Path, timeout: float = 30) -> ItineraryData:
    """Fetch and validate the itinerary dataset.

    Args:
        source: Local path or http(s) URL of the dataset JSON.
        timeout: HTTP timeout in seconds (ignored for local files).

    Returns:
        Validated ItineraryData.

    Raises:
        DatasetUnavailableError: If the dataset cannot be fetched.
        DatasetInvalidError: If it was fetched but is not a valid dataset.
    """
    source = str(source)
    log.info("dataset_fetch_started", source=source)
    raw = _fetch_url(source, timeout) if _is_url(source) else _read_file(Path(source))
    data = parse_dataset(raw)
    log.info(
        "dataset_loaded",
        source=source,
        events=len(data.schedule),
        brokers=len(data.brokers),
        companies=len(data.companies),
    )
    return data
