"""Mailing list backend: subscriptions, verification and admin access.

Submodules:
    database: SQLite persistence for subscribers, admins and tokens
    security: Password hashing, token generation and email validation
    ratelimit: Fixed-window limiter for public endpoints
    mailer: Verification email composition and SMTP delivery
    service: SubscriptionService business operations
    api: FastAPI application factory
"""

from __future__ import annotations

from tabletop_prep.mailing.database import AdminRecord, Database, SubscriberRecord
from tabletop_prep.mailing.mailer import (
    Mailer,
    OutboxMailer,
    SmtpMailer,
    build_verification_email,
    verification_url,
)
from tabletop_prep.mailing.ratelimit import RateLimiter
from tabletop_prep.mailing.service import SubscriptionService, utc_now


__all__ = [
    "AdminRecord",
    "Database",
    "Mailer",
    "OutboxMailer",
    "RateLimiter",
    "SmtpMailer",
    "SubscriberRecord",
    "SubscriptionService",
    "build_verification_email",
    "utc_now",
    "verification_url",
]
