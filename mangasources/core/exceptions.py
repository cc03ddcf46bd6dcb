"""Custom exception classes for the sources library."""


class SourceException(Exception):
    """Base exception for all source errors."""

    def __init__(self, message: str = "An unexpected source error occurred"):
        self.message = message
        super().__init__(self.message)


class HttpError(SourceException):
    """Raised when a site answers with a non-successful status code."""

    def __init__(self, status_code: int, url: str):
        self.status_code = status_code
        self.url = url
        super().__init__(f"HTTP error {status_code} for {url}")


class ParseError(SourceException):
    """Raised when an expected element is missing from a page."""

    def __init__(self, source: str, message: str):
        super().__init__(f"Parse error for {source}: {message}")


class LoginRequiredError(SourceException):
    """Raised when the site redirected to its login form."""


class SourceNotFoundError(SourceException):
    """Raised when no source is registered under a key."""

    def __init__(self, key: str):
        super().__init__(f"Source with key '{key}' not found")
