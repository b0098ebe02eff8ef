"""
Exception hierarchy shared by the ingestion service and the worker.
"""


class MessageRelayError(Exception):
    """Base class for all message relay errors."""


class MessageValidationError(MessageRelayError):
    """The submitted payload is unusable (e.g. empty after trimming)."""


class BackingStoreUnavailable(MessageRelayError):
    """The queue store failed, timed out, or returned an unexpected reply."""


class ResultSinkError(MessageRelayError):
    """Appending a processed record to the result sink failed."""
