"""SQLite persistence layer for the mailing list.

Stores:
- Subscribers (email, verification state, pending token)
- Admin accounts (bcrypt password hashes)
- Admin bearer tokens with their expiry

Storage location: ``MailingSettings.database_path`` (data/mailing.db).
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Generator
from uuid import uuid4

from tabletop_prep.core.logging import get_logger

logger = get_logger(__name__)


# =============================================================================
# Data Classes
# =============================================================================


def _parse_time(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


@dataclass
class SubscriberRecord:
    """A mailing list subscriber.

    Attributes:
        id: Unique identifier.
        email: Lower-cased, trimmed address.
        verified: Whether the address has been confirmed.
        verification_token: Pending token, cleared on verification.
        verification_expires: When the pending token stops working.
        subscribed_at: When the address first subscribed.
    """

    id: str
    email: str
    verified: bool
    verification_token: str | None
    verification_expires: datetime | None
    subscribed_at: datetime

    @classmethod
    def from_row(cls, row: tuple[Any, ...]) -> SubscriberRecord:
        """Create from database row."""
        return cls(
            id=row[0],
            email=row[1],
            verified=bool(row[2]),
            verification_token=row[3],
            verification_expires=_parse_time(row[4]),
            subscribed_at=datetime.fromisoformat(row[5]),
        )


@dataclass
class AdminRecord:
    """An administrator account."""

    id: str
    username: str
    password_hash: str
    email: str | None

    @classmethod
    def from_row(cls, row: tuple[Any, ...]) -> AdminRecord:
        """Create from database row."""
        return cls(id=row[0], username=row[1], password_hash=row[2], email=row[3])


_SUBSCRIBER_COLUMNS = (
    "id, email, verified, verification_token, verification_expires, subscribed_at"
)


# =============================================================================
# Database Class
# =============================================================================


class Database:
    """SQLite database for the mailing list backend."""

    SCHEMA_VERSION = 1

    def __init__(self, db_path: str | Path) -> None:
        """Initialize database.

        Args:
            db_path: Path to database file.
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()
        logger.info("Database initialized", path=str(self.db_path))

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection with proper cleanup."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS subscribers (
                    id TEXT PRIMARY KEY,
                    email TEXT NOT NULL UNIQUE,
                    verified INTEGER NOT NULL DEFAULT 0,
                    verification_token TEXT,
                    verification_expires TEXT,
                    subscribed_at TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS admins (
                    id TEXT PRIMARY KEY,
                    username TEXT NOT NULL UNIQUE,
                    password_hash TEXT NOT NULL,
                    email TEXT
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS admin_tokens (
                    token TEXT PRIMARY KEY,
                    admin_id TEXT NOT NULL,
                    expires_at TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_subscribers_token
                ON subscribers(verification_token)
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_subscribers_subscribed
                ON subscribers(subscribed_at DESC)
            """)

            cursor.execute(
                "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
                (self.SCHEMA_VERSION,),
            )

    # =========================================================================
    # Subscriber Operations
    # =========================================================================

    def add_subscriber(
        self,
        email: str,
        verification_token: str,
        verification_expires: datetime,
        subscribed_at: datetime,
    ) -> SubscriberRecord:
        """Insert an unverified subscriber.

        Args:
            email: Normalized address.
            verification_token: Pending token.
            verification_expires: Token expiry.
            subscribed_at: Subscription time.

        Returns:
            Created subscriber record.
        """
        record = SubscriberRecord(
            id=str(uuid4()),
            email=email,
            verified=False,
            verification_token=verification_token,
            verification_expires=verification_expires,
            subscribed_at=subscribed_at,
        )
        with self._get_connection() as conn:
            conn.execute(
                f"INSERT INTO subscribers ({_SUBSCRIBER_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)",
                (
                    record.id,
                    record.email,
                    0,
                    verification_token,
                    verification_expires.isoformat(),
                    subscribed_at.isoformat(),
                ),
            )
        return record

    def save_subscriber(self, record: SubscriberRecord) -> None:
        """Write back verification fields of an existing subscriber."""
        expires = record.verification_expires.isoformat() if record.verification_expires else None
        with self._get_connection() as conn:
            conn.execute(
                """
                UPDATE subscribers
                SET verified = ?, verification_token = ?, verification_expires = ?
                WHERE id = ?
                """,
                (int(record.verified), record.verification_token, expires, record.id),
            )

    def _fetch_subscriber(self, where: str, params: tuple[Any, ...]) -> SubscriberRecord | None:
        with self._get_connection() as conn:
            row = conn.execute(
                f"SELECT {_SUBSCRIBER_COLUMNS} FROM subscribers WHERE {where}",
                params,
            ).fetchone()
        return SubscriberRecord.from_row(tuple(row)) if row else None

    def get_subscriber(self, subscriber_id: str) -> SubscriberRecord | None:
        return self._fetch_subscriber("id = ?", (subscriber_id,))

    def get_subscriber_by_email(self, email: str) -> SubscriberRecord | None:
        return self._fetch_subscriber("email = ?", (email,))

    def get_subscriber_by_token(self, token: str) -> SubscriberRecord | None:
        return self._fetch_subscriber("verification_token = ?", (token,))

    def get_all_subscribers(self) -> list[SubscriberRecord]:
        """Get all subscribers, newest first."""
        with self._get_connection() as conn:
            rows = conn.execute(
                f"SELECT {_SUBSCRIBER_COLUMNS} FROM subscribers ORDER BY subscribed_at DESC"
            ).fetchall()
        return [SubscriberRecord.from_row(tuple(row)) for row in rows]

    def delete_subscriber(self, subscriber_id: str) -> bool:
        """Delete a subscriber.

        Returns:
            True if deleted, False if not found.
        """
        with self._get_connection() as conn:
            deleted = conn.execute(
                "DELETE FROM subscribers WHERE id = ?", (subscriber_id,)
            ).rowcount > 0
        if deleted:
            logger.info("Deleted subscriber", subscriber_id=subscriber_id)
        return deleted

    def get_subscriber_count(self) -> int:
        with self._get_connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM subscribers").fetchone()[0]

    # =========================================================================
    # Admin Operations
    # =========================================================================

    def add_admin(self, username: str, password_hash: str, email: str | None = None) -> AdminRecord:
        """Create an admin account."""
        record = AdminRecord(id=str(uuid4()), username=username, password_hash=password_hash, email=email)
        with self._get_connection() as conn:
            conn.execute(
                "INSERT INTO admins (id, username, password_hash, email) VALUES (?, ?, ?, ?)",
                (record.id, username, password_hash, email),
            )
        logger.info("Admin account created", username=username)
        return record

    def get_admin_by_username(self, username: str) -> AdminRecord | None:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT id, username, password_hash, email FROM admins WHERE username = ?",
                (username,),
            ).fetchone()
        return AdminRecord.from_row(tuple(row)) if row else None

    def get_admin(self, admin_id: str) -> AdminRecord | None:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT id, username, password_hash, email FROM admins WHERE id = ?",
                (admin_id,),
            ).fetchone()
        return AdminRecord.from_row(tuple(row)) if row else None

    def add_admin_token(self, token: str, admin_id: str, expires_at: datetime) -> None:
        with self._get_connection() as conn:
            conn.execute(
                "INSERT INTO admin_tokens (token, admin_id, expires_at) VALUES (?, ?, ?)",
                (token, admin_id, expires_at.isoformat()),
            )

    def get_admin_token(self, token: str) -> tuple[str, datetime] | None:
        """Look up a bearer token.

        Returns:
            ``(admin_id, expires_at)`` or None.
        """
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT admin_id, expires_at FROM admin_tokens WHERE token = ?",
                (token,),
            ).fetchone()
        return (row[0], datetime.fromisoformat(row[1])) if row else None

    def purge_admin_tokens(self, now: datetime) -> int:
        """Delete expired bearer tokens.

        Returns:
            Number of tokens removed.
        """
        with self._get_connection() as conn:
            return conn.execute(
                "DELETE FROM admin_tokens WHERE expires_at <= ?",
                (now.isoformat(),),
            ).rowcount


__all__ = [
    "AdminRecord",
    "Database",
    "SubscriberRecord",
]
