"""Exception hierarchy for vhs."""


class VHSError(Exception):
    """Base exception for all vhs errors."""


class ValidationError(VHSError):
    """Caller input rejected before any remote call was made."""


class ConversationNotReadyError(ValidationError):
    """A question was asked before the conversation was set up for the video."""


class APIError(VHSError):
    """Remote API call failed."""

    def __init__(self, message: str, endpoint: str | None = None, status_code: int | None = None):
        self.endpoint = endpoint
        self.status_code = status_code
        super().__init__(message)


class StorageError(VHSError):
    """Durable cache operation failed."""
