from typing import Optional


class FeedError(Exception):
    """Base error for failures that end up in an error payload."""


class ConfigurationMissing(FeedError):
    """A required configuration property is not set."""


class FetchFailure(FeedError):
    """An outbound fetch failed (transport error or non-2xx status)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
