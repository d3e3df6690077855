"""
Core domain exceptions.

These exceptions are transport-agnostic and should be caught by the server
layer to convert into appropriate HTTP responses or in-band error events.
"""


class CoreError(Exception):
    """Base exception for all core errors."""

    status_code: int = 500
    is_retryable: bool = True

    def __init__(self, message: str, provider: str | None = None):
        self.provider = provider
        super().__init__(message)


class AuthenticationError(CoreError):
    """Raised when a provider credential is missing or rejected."""

    status_code = 401
    is_retryable = False


class InvalidRequestError(CoreError):
    """Raised when a chat request body cannot be understood."""

    status_code = 400
    is_retryable = False


class ContextSelectionError(CoreError):
    """Raised when the summary or file selection sub-call yields nothing usable."""

    pass


class SegmentBudgetExceededError(CoreError):
    """Raised when a response needs more continuations than allowed."""

    is_retryable = False

    def __init__(self, max_segments: int, provider: str | None = None):
        self.max_segments = max_segments
        super().__init__("Cannot continue message: Maximum segments reached", provider)


class StreamingError(CoreError):
    """Raised when a model stream terminates abnormally."""

    pass
