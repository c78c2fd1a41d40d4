"""
Custom exceptions for the cloud service client.

Only failures that have no HTTP response behind them are modelled as
exceptions here. Retryable statuses and exhausted retries are outcomes of
the strategy chain (see ``RetryOutcome``), not errors: the final response
or the original error is handed back to the caller untouched apart from the
``cloud_client`` provenance attached to it.
"""


class CloudClientError(Exception):
    """
    Base exception for all client errors.

    All client-specific exceptions inherit from this to allow catching
    any client-related error with a single except clause.
    """
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class TransportError(CloudClientError):
    """
    Raised when the transport could not obtain an HTTP response.

    Includes connection failures, DNS failures, protocol errors and aborts.
    Carries no status, so the built-in NetworkError strategy retries it.
    """
    pass


class TransportTimeoutError(TransportError):
    """
    Raised when an attempt exceeded the configured timeout and was aborted.

    Separate from generic transport errors so callers can tell slow backends
    from unreachable ones once retries are exhausted.
    """
    pass
