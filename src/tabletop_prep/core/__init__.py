"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        PrepError: Base exception for all application errors.
        ConfigurationError: Configuration-related errors.
        ValidationError: Data validation errors.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        configure_from_settings: Set up logging from Settings.
        session_logger: Logger bound to one prep session.
        get_logger: Get a configured logger instance.
        bind_context: Add context to log entries.
        clear_context: Clear logging context.
"""

from __future__ import annotations

from tabletop_prep.core.config import (
    ContentSettings,
    ExportSettings,
    GeneratorSettings,
    MailingSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)
from tabletop_prep.core.exceptions import (
    AlreadySubscribedError,
    AlreadyVerifiedError,
    AuthenticationError,
    ConfigurationError,
    ContentError,
    ContentLoadError,
    EmailDeliveryError,
    ExportError,
    ImageFetchError,
    InvalidChoiceError,
    InvalidTokenError,
    MailingError,
    PayloadDecodeError,
    PrepError,
    RateLimitExceededError,
    SelectionError,
    SessionIncompleteError,
    SubscriberNotFoundError,
    ValidationError,
)
from tabletop_prep.core.logging import (
    bind_context,
    clear_context,
    configure_from_settings,
    configure_logging,
    get_logger,
    session_logger,
)


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
    # Configuration
    "Settings",
    "GeneratorSettings",
    "ContentSettings",
    "ExportSettings",
    "MailingSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "session_logger",
    "bind_context",
    "clear_context",
]
