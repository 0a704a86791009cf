from __future__ import annotations


class SentidashError(Exception):
    """Base exception for sentidash errors."""
    pass


class ConfigurationError(SentidashError):
    """Required configuration (the API credential) is missing or invalid."""
    pass


class EmptyInputError(SentidashError):
    """Input contained no non-blank lines; no batch is attempted."""
    pass


class AnalysisServiceError(SentidashError):
    """The sentiment service call failed as a whole.

    Raised for transport errors, non-2xx responses and unusable payloads.
    No partial results accompany it.
    """
    pass


class MalformedResponseError(AnalysisServiceError):
    """The model payload did not parse as JSON or was not a JSON array."""
    pass


class ExportNoResultsWarning(UserWarning):
    """An export was requested with no results; nothing was written."""
    pass
