"""Tests for the exception hierarchy."""

from __future__ import annotations

import pytest

from tabletop_prep.core.exceptions import (
    AlreadySubscribedError,
    AuthenticationError,
    ConfigurationError,
    ContentError,
    ContentLoadError,
    ExportError,
    ImageFetchError,
    InvalidChoiceError,
    MailingError,
    PayloadDecodeError,
    PrepError,
    RateLimitExceededError,
    SelectionError,
    SessionIncompleteError,
    SubscriberNotFoundError,
    ValidationError,
)


class TestPrepError:
    """Tests for the base PrepError exception."""

    def test_basic_message(self) -> None:
        """Test exception with basic message."""
        exc = PrepError("Test error message")
        assert exc.message == "Test error message"
        assert exc.details == {}
        assert str(exc) == "Test error message"

    def test_with_details(self) -> None:
        """Test exception with additional details."""
        exc = PrepError("Test error", details={"key": "value", "count": 42})
        assert exc.details == {"key": "value", "count": 42}
        assert "key='value'" in str(exc)
        assert "count=42" in str(exc)

    def test_repr(self) -> None:
        """Test exception repr output."""
        repr_str = repr(PrepError("Test", details={"x": 1}))
        assert "PrepError" in repr_str
        assert "Test" in repr_str
        assert "x" in repr_str


class TestContextualErrors:
    """Tests for keyword context folded into details."""

    def test_configuration_error_key(self) -> None:
        exc = ConfigurationError("Bad value", config_key="log_level")
        assert exc.details["config_key"] == "log_level"

    def test_validation_error_fields(self) -> None:
        exc = ValidationError("Invalid email", field_name="email", invalid_value="nope")
        assert exc.details == {"field_name": "email", "invalid_value": "nope"}

    def test_content_load_error_source(self) -> None:
        exc = ContentLoadError("Unreadable", source="monsters.json")
        assert exc.details["source"] == "monsters.json"

    def test_invalid_choice_category(self) -> None:
        exc = InvalidChoiceError("Not on offer", category="enemy")
        assert exc.details["category"] == "enemy"
        assert "category='enemy'" in str(exc)

    def test_session_incomplete_lists_missing(self) -> None:
        exc = SessionIncompleteError("Incomplete", missing=["hook", "npc"])
        assert exc.details["missing"] == ["hook", "npc"]

    def test_image_fetch_error_url(self) -> None:
        exc = ImageFetchError("Broken", url="https://example.com/x.png")
        assert exc.details["url"] == "https://example.com/x.png"

    def test_subscriber_not_found_id(self) -> None:
        exc = SubscriberNotFoundError("Missing", subscriber_id="abc")
        assert exc.details["subscriber_id"] == "abc"

    def test_rate_limit_retry_after(self) -> None:
        exc = RateLimitExceededError("Slow down", retry_after_seconds=12.5)
        assert exc.retry_after_seconds == 12.5
        assert exc.details["retry_after_seconds"] == 12.5

    def test_rate_limit_without_retry_after(self) -> None:
        exc = RateLimitExceededError("Slow down")
        assert exc.retry_after_seconds is None
        assert exc.details == {}


class TestExceptionHierarchy:
    """Tests for exception inheritance."""

    @pytest.mark.parametrize(
        ("exc_class", "parent"),
        [
            (ConfigurationError, PrepError),
            (ValidationError, PrepError),
            (ContentLoadError, ContentError),
            (InvalidChoiceError, SelectionError),
            (PayloadDecodeError, SelectionError),
            (SessionIncompleteError, SelectionError),
            (ImageFetchError, ExportError),
            (AlreadySubscribedError, MailingError),
            (AuthenticationError, MailingError),
            (RateLimitExceededError, MailingError),
        ],
    )
    def test_inheritance(self, exc_class: type[PrepError], parent: type[PrepError]) -> None:
        """Test that every error lands under its domain base."""
        assert issubclass(exc_class, parent)
        assert issubclass(exc_class, PrepError)

    def test_catch_all_with_base(self) -> None:
        """Test that all exceptions can be caught with PrepError."""
        for exc in (
            ContentLoadError("x"),
            PayloadDecodeError("x"),
            ImageFetchError("x"),
            SubscriberNotFoundError("x"),
        ):
            with pytest.raises(PrepError):
                raise exc
