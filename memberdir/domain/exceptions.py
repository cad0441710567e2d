"""Domain exceptions for the member directory.

Defines domain-level exceptions for search, rendering and delivery. These
exceptions are independent of infrastructure concerns. The presentation
layer maps them to HTTP responses in exception handlers; the chat flow
converts them into reply messages.
"""

from typing import Any


class DirectoryException(Exception):
    """Base exception for all directory application errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. tenant_id, sub-query names).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON body used by the API exception handler."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(DirectoryException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class EmptyQueryException(DirectoryException):
    """Raised when a search has neither a term nor a category code.

    Distinct from "no results": the caller should prompt for input.
    """

    def __init__(self) -> None:
        super().__init__(
            "Search term is empty; provide a term or a category code",
            "EMPTY_QUERY",
        )


class TenantNotResolvableException(DirectoryException):
    """Raised when the trusted context does not map to a tenant."""

    def __init__(self, subject: str | None = None) -> None:
        """Initialize with the identifier that failed to resolve.

        Args:
            subject: What was looked up (e.g. a LINE user id).
        """
        super().__init__(
            "Tenant could not be resolved from the request context",
            "TENANT_NOT_RESOLVABLE",
            {"subject": subject} if subject else {},
        )


class SearchTimeoutException(DirectoryException):
    """Raised when no search sub-query completed within the timeout budget."""

    def __init__(self, timeout_seconds: float, sub_queries: list[str]) -> None:
        """Initialize with the budget and the sub-queries that did not finish.

        Args:
            timeout_seconds: Shared budget for all sub-queries.
            sub_queries: Names of the sub-queries that timed out or failed.
        """
        super().__init__(
            f"Search did not complete within {timeout_seconds} seconds",
            "SEARCH_HARD_TIMEOUT",
            {"timeout_seconds": timeout_seconds, "sub_queries": sub_queries},
        )


class RenderOverflowException(DirectoryException):
    """Raised when an assembled message exceeds the transport size budget."""

    def __init__(self, size_bytes: int, budget_bytes: int) -> None:
        super().__init__(
            f"Message is {size_bytes} bytes; budget is {budget_bytes}",
            "RENDER_OVERFLOW",
            {"size_bytes": size_bytes, "budget_bytes": budget_bytes},
        )


class DeliveryFailureException(DirectoryException):
    """Raised when the channel API rejects or fails to accept a message."""

    def __init__(self, message_kind: str, size_bytes: int, target: str, reason: str) -> None:
        super().__init__(
            f"Delivery of {message_kind} message failed",
            "DELIVERY_FAILURE",
            {
                "message_kind": message_kind,
                "size_bytes": size_bytes,
                "target": target,
                "reason": reason,
            },
        )


class SqlNotConfiguredException(DirectoryException):
    """Raised when an operation requires Postgres but DATABASE_URL is not usable."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
