"""Error taxonomy shared by the storage layer, the analytics engine and the API."""


class FinanceTrackerError(Exception):
    """Base exception for the finance tracker."""

    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__doc__ or ""


class ValidationError(FinanceTrackerError):
    """Input is malformed or violates a constraint."""

    status_code = 400


class NotFoundError(FinanceTrackerError):
    """Record does not exist or is not owned by the caller."""

    status_code = 404


class StoreUnavailable(FinanceTrackerError):
    """The backing store could not be reached."""

    # Retryable by the caller; nothing retries internally.
    status_code = 503
