"""
Custom exception hierarchy for Listora.

All application-specific exceptions inherit from ListoraError,
enabling catch-all handling at the API layer while allowing
fine-grained handling in the publishing pipeline.
"""


class ListoraError(Exception):
    """Base exception for all Listora application errors."""

    def __init__(self, message: str = "", details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# ─── Input Errors ─────────────────────────────────────────────


class PublishValidationError(ListoraError):
    """Required publish input is missing or invalid (no price, user or product data)."""

    def __init__(self, field: str, message: str = "", **kwargs):
        self.field = field
        super().__init__(message=message or f"{field} is required", **kwargs)


# ─── Marketplace Auth Errors ──────────────────────────────────


class MarketplaceAuthError(ListoraError):
    """OAuth error talking to the marketplace identity service."""

    pass


class AuthExpiredError(MarketplaceAuthError):
    """Seller token is expired and could not be refreshed; the user must reconnect."""

    pass


# ─── Classification Errors ────────────────────────────────────


class ClassificationError(ListoraError):
    """Taxonomy lookup failed. Always absorbed by the classifier's fallback table."""

    pass


# ─── Publishing Errors ────────────────────────────────────────


class TransportFailureError(ListoraError):
    """
    The marketplace could not be reached after all retry attempts.

    ``message`` is safe to show to end users; the underlying cause is kept
    in ``details`` and in the logs.
    """

    def __init__(self, attempts: int, cause: Exception | None = None, **kwargs):
        self.attempts = attempts
        self.cause = cause
        message = (
            "Could not reach the marketplace. Please try again in a few minutes."
        )
        details = kwargs.pop("details", None) or {}
        details.setdefault("attempts", attempts)
        if cause is not None:
            details.setdefault("cause", f"{type(cause).__name__}: {cause}")
        super().__init__(message=message, details=details, **kwargs)


class PlatformRejectedError(ListoraError):
    """The marketplace acknowledged the call with Ack=Failure."""

    def __init__(
        self,
        message: str,
        raw_response: str = "",
        missing_fields: list[str] | None = None,
        **kwargs,
    ):
        self.raw_response = raw_response
        self.missing_fields = missing_fields or []
        super().__init__(message=message, **kwargs)


# ─── Persistence Errors ───────────────────────────────────────


class PersistenceError(ListoraError):
    """A local database write failed after a successful remote publish."""

    pass
