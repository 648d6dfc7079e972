"""Subscription and admin operations.

Subscriber lifecycle: created unverified with a token that expires after
``verification_ttl_hours``; verified by redeeming the token (which clears
it); optionally deleted by an administrator. Subscribing again before
verifying refreshes the token and resends the email.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from tabletop_prep.core.config import MailingSettings, get_settings
from tabletop_prep.core.exceptions import (
    AlreadySubscribedError,
    AlreadyVerifiedError,
    AuthenticationError,
    InvalidTokenError,
    SubscriberNotFoundError,
)
from tabletop_prep.core.logging import get_logger
from tabletop_prep.mailing.database import AdminRecord, Database, SubscriberRecord
from tabletop_prep.mailing.mailer import Mailer, build_verification_email
from tabletop_prep.mailing.security import (
    hash_password,
    new_bearer_token,
    new_verification_token,
    normalize_email,
    verify_password,
)


logger = get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SubscriptionService:
    """Mailing list operations over a Database and a Mailer."""

    def __init__(
        self,
        database: Database,
        mailer: Mailer,
        settings: MailingSettings | None = None,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.database = database
        self.mailer = mailer
        self.settings = settings or get_settings().mailing
        self._clock = clock

    # -------------------------------------------------------------------------
    # Subscribers
    # -------------------------------------------------------------------------

    def subscribe(self, email: str) -> SubscriberRecord:
        """Create or refresh a pending subscription and send the verification email.

        Args:
            email: Address as entered by the user.

        Returns:
            The pending subscriber.

        Raises:
            ValidationError: If the address is invalid.
            AlreadySubscribedError: If the address is already verified.
            EmailDeliveryError: If the verification email cannot be sent.
        """
        address = normalize_email(email)
        now = self._clock()
        token, expires = self._fresh_token(now)

        subscriber = self.database.get_subscriber_by_email(address)
        if subscriber is None:
            subscriber = self.database.add_subscriber(address, token, expires, now)
            logger.info("Subscriber created", subscriber_id=subscriber.id)
        elif subscriber.verified:
            raise AlreadySubscribedError("Email already subscribed")
        else:
            subscriber.verification_token = token
            subscriber.verification_expires = expires
            self.database.save_subscriber(subscriber)
            logger.info("Verification token refreshed", subscriber_id=subscriber.id)

        self._send_verification(subscriber)
        return subscriber

    def verify(self, token: str) -> SubscriberRecord:
        """Redeem a verification token.

        Raises:
            InvalidTokenError: If the token is unknown or expired.
        """
        subscriber = self.database.get_subscriber_by_token(token) if token else None
        if (
            subscriber is None
            or subscriber.verification_expires is None
            or subscriber.verification_expires <= self._clock()
        ):
            raise InvalidTokenError("Invalid or expired verification token")

        subscriber.verified = True
        subscriber.verification_token = None
        subscriber.verification_expires = None
        self.database.save_subscriber(subscriber)
        logger.info("Subscriber verified", subscriber_id=subscriber.id)
        return subscriber

    def list_subscribers(self) -> list[SubscriberRecord]:
        return self.database.get_all_subscribers()

    def delete_subscriber(self, subscriber_id: str) -> bool:
        """Remove a subscriber; removing a missing one is not an error."""
        return self.database.delete_subscriber(subscriber_id)

    def resend_verification(self, subscriber_id: str) -> SubscriberRecord:
        """Issue a new token to an unverified subscriber and email it.

        Raises:
            SubscriberNotFoundError: If the id is unknown.
            AlreadyVerifiedError: If the subscriber is already verified.
        """
        subscriber = self.database.get_subscriber(subscriber_id)
        if subscriber is None:
            raise SubscriberNotFoundError("Subscriber not found", subscriber_id=subscriber_id)
        if subscriber.verified:
            raise AlreadyVerifiedError("Subscriber already verified")

        subscriber.verification_token, subscriber.verification_expires = self._fresh_token(self._clock())
        self.database.save_subscriber(subscriber)
        self._send_verification(subscriber)
        return subscriber

    def _fresh_token(self, now: datetime) -> tuple[str, datetime]:
        return new_verification_token(), now + timedelta(hours=self.settings.verification_ttl_hours)

    def _send_verification(self, subscriber: SubscriberRecord) -> None:
        if subscriber.verification_token is None:
            raise InvalidTokenError("Subscriber has no pending verification token")
        message = build_verification_email(
            self.settings, subscriber.email, subscriber.verification_token
        )
        self.mailer.send(message)

    # -------------------------------------------------------------------------
    # Admins
    # -------------------------------------------------------------------------

    def ensure_admin(self) -> AdminRecord | None:
        """Seed the configured admin account if it does not exist yet."""
        username = self.settings.admin_username
        password = self.settings.admin_password
        if not username or not password:
            return None
        existing = self.database.get_admin_by_username(username)
        if existing is not None:
            return existing
        return self.database.add_admin(
            username,
            hash_password(password.get_secret_value()),
            self.settings.admin_email,
        )

    def login(self, username: str, password: str) -> str:
        """Exchange admin credentials for a bearer token.

        Raises:
            AuthenticationError: If the credentials are wrong.
        """
        admin = self.database.get_admin_by_username(username or "")
        if admin is None or not verify_password(password or "", admin.password_hash):
            logger.warning("Admin login rejected", username=username)
            raise AuthenticationError("Invalid credentials")

        now = self._clock()
        self.database.purge_admin_tokens(now)
        token = new_bearer_token()
        self.database.add_admin_token(
            token, admin.id, now + timedelta(hours=self.settings.admin_token_ttl_hours)
        )
        logger.info("Admin logged in", username=admin.username)
        return token

    def authenticate(self, token: str | None) -> AdminRecord:
        """Resolve a bearer token to its admin.

        Raises:
            AuthenticationError: If the token is missing, unknown or expired.
        """
        if not token:
            raise AuthenticationError("Missing auth token")
        found = self.database.get_admin_token(token)
        if found is None or found[1] <= self._clock():
            raise AuthenticationError("Invalid auth token")
        admin = self.database.get_admin(found[0])
        if admin is None:
            raise AuthenticationError("Invalid auth token")
        return admin


__all__ = [
    "SubscriptionService",
    "utc_now",
]
