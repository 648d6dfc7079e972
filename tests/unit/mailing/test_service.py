"""Tests for the subscription service."""

from __future__ import annotations

from datetime import timedelta
from typing import Any

import pytest

from tabletop_prep.core.exceptions import (
    AlreadySubscribedError,
    AlreadyVerifiedError,
    AuthenticationError,
    InvalidTokenError,
    SubscriberNotFoundError,
    ValidationError,
)
from tabletop_prep.mailing.security import hash_password, verify_password


class TestSubscribe:
    """Tests for subscribe()."""

    def test_creates_pending_subscriber(self, service: Any, outbox: Any, clock: Any) -> None:
        subscriber = service.subscribe("  Player@Example.COM ")

        assert subscriber.email == "player@example.com"
        assert subscriber.verified is False
        assert len(subscriber.verification_token) == 64
        assert subscriber.verification_expires == clock.now + timedelta(hours=24)
        assert len(outbox.outbox) == 1

    def test_email_contains_verification_link(self, service: Any, outbox: Any) -> None:
        subscriber = service.subscribe("player@example.com")

        message = outbox.outbox[0]
        text = message.get_body(preferencelist=("plain",)).get_content()
        html = message.get_body(preferencelist=("html",)).get_content()
        link = f"https://prep.example.com/verify/{subscriber.verification_token}"
        assert message["To"] == "player@example.com"
        assert message["Subject"] == "Verify your subscription"
        assert link in text
        assert link in html

    @pytest.mark.parametrize("email", ["", "not-an-email", "a@b", "two@@example.com"])
    def test_invalid_email(self, service: Any, outbox: Any, email: str) -> None:
        with pytest.raises(ValidationError):
            service.subscribe(email)

        assert outbox.outbox == []

    def test_resubscribe_refreshes_token(self, service: Any, database: Any, clock: Any) -> None:
        """Test that an unverified address gets a new token instead of a duplicate row."""
        first = service.subscribe("player@example.com")
        clock.now += timedelta(hours=1)

        second = service.subscribe("PLAYER@example.com")

        assert second.id == first.id
        assert second.verification_token != first.verification_token
        assert database.get_subscriber_count() == 1
        assert database.get_subscriber_by_token(first.verification_token) is None

    def test_verified_address_rejected(self, service: Any) -> None:
        subscriber = service.subscribe("player@example.com")
        service.verify(subscriber.verification_token)

        with pytest.raises(AlreadySubscribedError):
            service.subscribe("player@example.com")


class TestVerify:
    """Tests for verify()."""

    def test_verifies_and_clears_token(self, service: Any, database: Any) -> None:
        token = service.subscribe("player@example.com").verification_token

        service.verify(token)

        stored = database.get_subscriber_by_email("player@example.com")
        assert stored.verified is True
        assert stored.verification_token is None
        assert stored.verification_expires is None

    def test_token_single_use(self, service: Any) -> None:
        token = service.subscribe("player@example.com").verification_token
        service.verify(token)

        with pytest.raises(InvalidTokenError):
            service.verify(token)

    def test_expired_token(self, service: Any, clock: Any) -> None:
        token = service.subscribe("player@example.com").verification_token
        clock.now += timedelta(hours=25)

        with pytest.raises(InvalidTokenError):
            service.verify(token)

    @pytest.mark.parametrize("token", ["", "unknown"])
    def test_unknown_token(self, service: Any, token: str) -> None:
        with pytest.raises(InvalidTokenError):
            service.verify(token)


class TestAdminOperations:
    """Tests for listing, deleting and resending."""

    def test_list_newest_first(self, service: Any, clock: Any) -> None:
        service.subscribe("first@example.com")
        clock.now += timedelta(minutes=5)
        service.subscribe("second@example.com")

        emails = [s.email for s in service.list_subscribers()]

        assert emails == ["second@example.com", "first@example.com"]

    def test_delete_missing_is_not_an_error(self, service: Any) -> None:
        subscriber = service.subscribe("player@example.com")

        assert service.delete_subscriber(subscriber.id) is True
        assert service.delete_subscriber(subscriber.id) is False

    def test_resend_verification(self, service: Any, outbox: Any) -> None:
        subscriber = service.subscribe("player@example.com")

        resent = service.resend_verification(subscriber.id)

        assert resent.verification_token != subscriber.verification_token
        assert len(outbox.outbox) == 2

    def test_resend_unknown(self, service: Any) -> None:
        with pytest.raises(SubscriberNotFoundError):
            service.resend_verification("missing")

    def test_resend_verified(self, service: Any) -> None:
        subscriber = service.subscribe("player@example.com")
        service.verify(subscriber.verification_token)

        with pytest.raises(AlreadyVerifiedError):
            service.resend_verification(subscriber.id)


class TestAdminAuth:
    """Tests for admin seeding and bearer tokens."""

    def test_ensure_admin_is_idempotent(self, service: Any) -> None:
        first = service.ensure_admin()
        second = service.ensure_admin()

        assert first.id == second.id
        assert verify_password("correct horse", first.password_hash)

    def test_login_and_authenticate(self, service: Any) -> None:
        service.ensure_admin()

        token = service.login("admin", "correct horse")

        assert service.authenticate(token).username == "admin"

    @pytest.mark.parametrize(("username", "password"), [("admin", "wrong"), ("nobody", "correct horse")])
    def test_bad_credentials(self, service: Any, username: str, password: str) -> None:
        service.ensure_admin()

        with pytest.raises(AuthenticationError):
            service.login(username, password)

    def test_token_expires(self, service: Any, clock: Any) -> None:
        service.ensure_admin()
        token = service.login("admin", "correct horse")
        clock.now += timedelta(hours=25)

        with pytest.raises(AuthenticationError):
            service.authenticate(token)

    @pytest.mark.parametrize("token", [None, "", "forged"])
    def test_invalid_token(self, service: Any, token: str | None) -> None:
        with pytest.raises(AuthenticationError):
            service.authenticate(token)


class TestPasswordHashing:
    """Tests for bcrypt helpers."""

    def test_round_trip(self) -> None:
        hashed = hash_password("s3cret")

        assert hashed != "s3cret"
        assert verify_password("s3cret", hashed)
        assert not verify_password("other", hashed)

    def test_malformed_hash(self) -> None:
        assert verify_password("s3cret", "not-a-bcrypt-hash") is False
