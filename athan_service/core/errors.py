"""
Error taxonomy. Every error carries the HTTP status the API layer answers with;
the FastAPI handler in api/server.py renders {"error": <class name>, "detail": <message>}.
"""


class AthanServiceError(Exception):
    """Base class for all errors surfaced to callers."""
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.__class__.__name__, "detail": self.message}


class NoStrategyFound(AthanServiceError):
    """Implicit resolution found no strategy able to handle the parameters."""
    status_code = 400


class UnknownStrategy(AthanServiceError):
    """Explicit strategy name not recognized."""
    status_code = 404


class ParametersNotValid(AthanServiceError):
    """Explicitly selected strategy rejected the parameters."""
    status_code = 422


class StorageUnavailable(AthanServiceError):
    """Database not initialized (or already closed)."""
    status_code = 503


class NoDataForYear(AthanServiceError):
    """Upstream returned no Hijri calendar data for the requested year."""
    status_code = 404


class UpstreamCallFailed(AthanServiceError):
    """Network or HTTP error talking to the Aladhan API."""
    status_code = 502


class PersistenceWriteFailed(AthanServiceError):
    """A storage statement failed; the rest of the batch was not attempted."""
    status_code = 500
