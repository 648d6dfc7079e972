"""Custom exception hierarchy for the session prep toolkit.

All exceptions inherit from PrepError, enabling unified error handling
at the application boundary (the Streamlit page and the mailing API)
while preserving domain-specific context in ``details``.

Example:
    >>> from tabletop_prep.core.exceptions import InvalidChoiceError
    >>> raise InvalidChoiceError("Not on offer", category="enemy")
"""

from __future__ import annotations

from typing import Any


class PrepError(Exception):
    """Base exception for all session prep errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        """Return a detailed string representation of the exception."""
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Configuration & Validation Exceptions
# =============================================================================


class ConfigurationError(PrepError):
    """Raised when application configuration is invalid."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with config key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


class ValidationError(PrepError):
    """Raised when data validation fails."""

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        invalid_value: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize validation error with field context.

        Args:
            message: Human-readable error description.
            field_name: Name of the field that failed validation.
            invalid_value: The value that failed validation.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if field_name:
            combined_details["field_name"] = field_name
        if invalid_value is not None:
            combined_details["invalid_value"] = invalid_value
        super().__init__(message, details=combined_details)


# =============================================================================
# Content Domain Exceptions
# =============================================================================


class ContentError(PrepError):
    """Base exception for reference data (monster and hook feed) errors."""

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize content error with source context.

        Args:
            message: Human-readable error description.
            source: Path or URL of the feed involved.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if source:
            combined_details["source"] = source
        super().__init__(message, details=combined_details)


class ContentLoadError(ContentError):
    """Raised when a feed cannot be fetched or decoded.

    The reference library catches this and substitutes built-in defaults.
    """


# =============================================================================
# Selection Domain Exceptions
# =============================================================================


class SelectionError(PrepError):
    """Base exception for session assembly errors."""


class InvalidChoiceError(SelectionError):
    """Raised when a choice does not fit the category it is placed in."""

    def __init__(
        self,
        message: str,
        *,
        category: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize invalid choice error with category context.

        Args:
            message: Human-readable error description.
            category: The category the choice was placed in.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if category:
            combined_details["category"] = category
        super().__init__(message, details=combined_details)


class PayloadDecodeError(SelectionError):
    """Raised when a drag-and-drop transfer payload cannot be decoded."""


class SessionIncompleteError(SelectionError):
    """Raised when a session record is requested before every category is filled."""

    def __init__(
        self,
        message: str,
        *,
        missing: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the categories still missing.

        Args:
            message: Human-readable error description.
            missing: Categories without a selection.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if missing:
            combined_details["missing"] = missing
        super().__init__(message, details=combined_details)


# =============================================================================
# Export Domain Exceptions
# =============================================================================


class ExportError(PrepError):
    """Base exception for document export errors."""


class ImageFetchError(ExportError):
    """Raised when an enemy image cannot be fetched or decoded.

    The exporter catches this and proceeds with a text-only document.
    """

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize image fetch error with URL context.

        Args:
            message: Human-readable error description.
            url: The image URL that failed.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if url:
            combined_details["url"] = url
        super().__init__(message, details=combined_details)


# =============================================================================
# Mailing Domain Exceptions
# =============================================================================


class MailingError(PrepError):
    """Base exception for the subscription backend."""


class SubscriberNotFoundError(MailingError):
    """Raised when a subscriber id does not exist."""

    def __init__(
        self,
        message: str,
        *,
        subscriber_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if subscriber_id:
            combined_details["subscriber_id"] = subscriber_id
        super().__init__(message, details=combined_details)


class AlreadySubscribedError(MailingError):
    """Raised when a verified address subscribes again."""


class AlreadyVerifiedError(MailingError):
    """Raised when a verification resend targets a verified subscriber."""


class InvalidTokenError(MailingError):
    """Raised when a verification token is unknown or expired."""


class AuthenticationError(MailingError):
    """Raised when admin credentials or bearer tokens are rejected."""


class RateLimitExceededError(MailingError):
    """Raised when a client exceeds the allowed requests for a window."""

    def __init__(
        self,
        message: str,
        *,
        retry_after_seconds: float | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize rate limit error with retry context.

        Args:
            message: Human-readable error description.
            retry_after_seconds: Seconds until the window resets.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if retry_after_seconds is not None:
            combined_details["retry_after_seconds"] = retry_after_seconds
        self.retry_after_seconds = retry_after_seconds
        super().__init__(message, details=combined_details)


class EmailDeliveryError(MailingError):
    """Raised when the outbound mail transport fails."""


__all__ = [
    # Base exception
    "PrepError",
    # Configuration exceptions
    "ConfigurationError",
    "ValidationError",
    # Content exceptions
    "ContentError",
    "ContentLoadError",
    # Selection exceptions
    "SelectionError",
    "InvalidChoiceError",
    "PayloadDecodeError",
    "SessionIncompleteError",
    # Export exceptions
    "ExportError",
    "ImageFetchError",
    # Mailing exceptions
    "MailingError",
    "SubscriberNotFoundError",
    "AlreadySubscribedError",
    "AlreadyVerifiedError",
    "InvalidTokenError",
    "AuthenticationError",
    "RateLimitExceededError",
    "EmailDeliveryError",
]
