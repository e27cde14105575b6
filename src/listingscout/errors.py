from typing import Optional


class ListingError(Exception):
    """Base class for every error raised by listingscout."""


class FetchError(ListingError):
    """The listing page could not be retrieved (network failure or non-2xx)."""

    def __init__(self, identifier: str, message: str, status: Optional[int] = None):
        self.identifier = identifier
        self.status = status
        if status is not None:
            message = f"{message} (status {status})"
        super().__init__(message)


class NotFoundError(ListingError):
    """The page was retrieved but no listing could be identified on it."""

    def __init__(self, identifier: str, message: Optional[str] = None):
        self.identifier = identifier
        super().__init__(message or f"No listing found for {identifier}")


class ListingClientError(ListingError):
    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class ConfigError(ListingError):
    pass
