"""Exception classes for update-transport interactions.

This module defines a hierarchy of exception classes for handling
the error conditions met while looking up and downloading releases.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class UpdateError(Exception):
    """Error during a release lookup or package download.

    Raised when the request fails due to network issues, a missing
    repository, rate limiting, or malformed response data. Includes the
    raw response details when available.
    """

    def __init__(
        self, code: int, message: str, response: Optional[Dict[str, Any]] = None
    ) -> None:
        """Initialize the exception.

        Args:
            code: HTTP status code or custom error code
            message: Human-readable error message
            response: Optional raw API response for debugging
        """
        super().__init__(f"[{code}] {message}")
        self.code: int = code
        self.message: str = message
        self.response: Optional[Dict[str, Any]] = response

    @property
    def is_client_error(self) -> bool:
        """Check if this is a client-side error (4xx).

        Returns:
            True for 400-499 status codes
        """
        return 400 <= self.code < 500

    @property
    def is_server_error(self) -> bool:
        """Check if this is a server-side error (5xx).

        Returns:
            True for 500-599 status codes
        """
        return self.code >= 500

    @classmethod
    def from_response(
        cls, response: Dict[str, Any], status_code: int = 0
    ) -> UpdateError:
        """Create an error from a release API response.

        Args:
            response: API response dictionary
            status_code: HTTP status code

        Returns:
            Appropriate UpdateError subclass
        """
        if status_code == 404:
            return ReleaseNotFoundError(
                status_code, response.get("message", "No published release"), response
            )
        if status_code in (403, 429):
            return RateLimitError(
                status_code, response.get("message", "Rate limit exceeded"), response
            )
        if status_code >= 500:
            return ServerError(
                status_code, response.get("message", "Server error"), response
            )
        return cls(status_code, response.get("message", "Unknown error"), response)


class UpdateConfigurationError(UpdateError):
    """Raised when the update repository locator cannot be used."""

    def __init__(self, message: str) -> None:
        super().__init__(0, message)


class NetworkError(UpdateError):
    """Raised when a network issue prevents reaching the release host."""

    def __init__(
        self, message: str, original_error: Optional[Exception] = None
    ) -> None:
        """Initialize with network error details.

        Args:
            message: Description of the network error
            original_error: The original exception that was caught
        """
        super().__init__(0, message)
        self.original_error = original_error


class ReleaseNotFoundError(UpdateError):
    """Raised when the repository has no published release."""

    pass


class RateLimitError(UpdateError):
    """Raised when the release API refuses further requests."""

    pass


class ServerError(UpdateError):
    """Raised for 5xx server errors."""

    pass


class ParseError(UpdateError):
    """Raised when a release response cannot be understood."""

    def __init__(
        self, message: str, original_error: Optional[Exception] = None
    ) -> None:
        """Initialize with parsing error details.

        Args:
            message: Description of the parsing error
            original_error: The original exception that was caught
        """
        super().__init__(0, message)
        self.original_error = original_error
