"""Error hierarchy for the itinerary core.

Only dataset failures are surfaced to the user. Everything else (unparseable
times, missing lookups, malformed persisted state) degrades silently and is
never raised from the core operations.

Example usage:
    try:
        data = load_dataset(source)
    except DatasetUnavailableError:
        show_retry_button()
"""


class ItineraryError(Exception):
    """Base exception for all itinerary errors."""

    pass


class DatasetError(ItineraryError):
    """Base for problems obtaining the itinerary dataset."""

    pass


class DatasetUnavailableError(DatasetError):
    """The dataset could not be fetched.

    Examples: file missing, connection refused, HTTP 404/500, request timeout.
    Terminal for the session's data view until the user asks to retry.
    """

    pass


class DatasetInvalidError(DatasetUnavailableError):
    """The dataset was fetched but is not usable.

    Examples: response body is not JSON, required keys missing, wrong types.
    Inherits from DatasetUnavailableError so callers can treat both alike.
    """

    pass


class SessionNotReadyError(ItineraryError):
    """A view was requested before the dataset finished loading (or after it failed)."""

    pass


class UnknownEntityError(ItineraryError, KeyError):
    """A mutating operation referenced an id that is not in the dataset."""

    def __str__(self) -> str:
        # KeyError quotes its message by default
        return Exception.__str__(self)


class StatePersistenceError(ItineraryError):
    """A user edit could not be written to the key-value store.

    The in-memory state is left as it was before the edit.
    """

    pass
