"""Infrastructure exceptions for external channel operations.

They extend DirectoryException so the presentation layer maps them to HTTP
responses like any other directory error.
"""

from memberdir.domain.exceptions import DirectoryException


class LineApiException(DirectoryException):
    """LINE Messaging API returned a non-2xx status or could not be reached."""

    def __init__(self, endpoint: str, status_code: int | None, body: str = "") -> None:
        super().__init__(
            f"LINE API call to {endpoint} failed with status {status_code}",
            "LINE_API_ERROR",
            {"endpoint": endpoint, "status_code": status_code, "body": body[:500]},
        )
        self.status_code = status_code
