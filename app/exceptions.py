"""Exceptions raised by the household calendar backend."""


class HouseholdCalendarError(Exception):
    """Base exception for all household calendar errors."""


class RemoteExtractionError(HouseholdCalendarError):
    """The remote model could not produce a usable event extraction.

    Covers a missing API key, timeouts, API errors and malformed tool output.
    Always recovered by falling back to the deterministic extractor.
    """


class EventValidationError(HouseholdCalendarError):
    """An event failed the store's validation rules."""


class EventNotFoundError(HouseholdCalendarError):
    """The event does not exist in the caller's household."""


class PermissionDeniedError(HouseholdCalendarError):
    """The acting member may not write to this household calendar."""
