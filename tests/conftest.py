"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the Tabletop Prep test suite.
"""

from __future__ import annotations

import random
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest


if TYPE_CHECKING:
    from collections.abc import Generator


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from tabletop_prep.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set up mock environment variables for testing.

    Returns:
        Dictionary of environment variables that were set.
    """
    env_vars = {
        "TABLETOP_PREP_DEBUG": "true",
        "TABLETOP_PREP_LOG_LEVEL": "DEBUG",
        "TABLETOP_PREP_GENERATOR_MAX_PAIR_ATTEMPTS": "50",
        "TABLETOP_PREP_MAILING_SMTP_HOST": "smtp.example.com",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


# =============================================================================
# Random Source
# =============================================================================


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source for reproducible draws."""
    return random.Random(1234)


# =============================================================================
# Reference Data Fixtures
# =============================================================================


@pytest.fixture
def sample_monster_records() -> list[dict[str, Any]]:
    """Provide a small monster feed covering every tier and setting.

    Returns:
        List of monster records.
    """
    return [
        {
            "name": "Goblin",
            "Challenge": "1/4 (50 XP)",
            "Armor Class": "15 (Leather Armor, Shield)",
            "Hit Points": "7 (2d6)",
            "Speed": "30 ft.",
            "Actions": [{"name": "Scimitar"}, {"name": "Shortbow"}],
            "Environment": ["forest", "dungeon"],
        },
        {
            "name": "Bandit",
            "Challenge": "1/8 (25 XP)",
            "Hit Points": "11 (2d8 + 2)",
            "Environment": ["urban"],
        },
        {
            "name": "Ogre",
            "Challenge": "2 (450 XP)",
            "Hit Points": "59 (7d10 + 21)",
            "Environment": "forest",
        },
        {
            "name": "Wererat",
            "Challenge": "2 (450 XP)",
            "Hit Points": "33 (6d8 + 6)",
            "Environment": "urban",
        },
        {
            "name": "Beholder",
            "Challenge": "13 (10,000 XP)",
            "Hit Points": "180 (19d10 + 76)",
            "Environment": ["dungeon"],
        },
        {
            "name": "Vampire",
            "Challenge": "13 (10,000 XP)",
            "Hit Points": "144 (17d8 + 68)",
            "Environment": ["urban"],
        },
    ]


@pytest.fixture
def sample_monsters(sample_monster_records: list[dict[str, Any]]) -> list[Any]:
    """Sample records wrapped as Entity objects."""
    from tabletop_prep.models.entities import usable_entities

    return usable_entities(sample_monster_records)


@pytest.fixture
def sample_hooks() -> dict[str, Any]:
    """Provide a hook feed with defaults and custom templates."""
    return {
        "hooks": {
            "urban": ["A riot breaks out in the ", "A stranger arrives in the "],
            "forest": ["Wolves howl in the "],
        },
        "custom_hooks": {
            "forest": ["A shrine is desecrated in the {setting}"],
        },
    }


@pytest.fixture
def content_files(
    tmp_path: Path,
    sample_monster_records: list[dict[str, Any]],
    sample_hooks: dict[str, Any],
) -> tuple[Path, Path]:
    """Write the sample feeds to disk.

    Returns:
        Paths of the monster feed and the hook feed.
    """
    import json

    monsters = tmp_path / "monsters.json"
    hooks = tmp_path / "hooks.json"
    monsters.write_text(json.dumps(sample_monster_records), encoding="utf-8")
    hooks.write_text(json.dumps(sample_hooks), encoding="utf-8")
    return monsters, hooks


@pytest.fixture
def library(content_files: tuple[Path, Path]) -> Any:
    """ReferenceLibrary reading the sample feeds from disk."""
    from tabletop_prep.content.library import ReferenceLibrary
    from tabletop_prep.core.config import ContentSettings

    monsters, hooks = content_files
    return ReferenceLibrary(
        ContentSettings(monsters_source=str(monsters), hooks_source=str(hooks))
    )


# =============================================================================
# Mailing Fixtures
# =============================================================================


class FakeClock:
    """Settable UTC clock for expiry tests."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def mailing_settings(tmp_path: Path) -> Any:
    """Mailing settings pointing at a temporary database with a seeded admin."""
    from tabletop_prep.core.config import MailingSettings

    return MailingSettings(
        database_path=tmp_path / "mailing.db",
        frontend_url="https://prep.example.com",
        admin_username="admin",
        admin_password="correct horse",
        admin_email="admin@example.com",
    )


@pytest.fixture
def database(mailing_settings: Any) -> Any:
    """Temporary SQLite database."""
    from tabletop_prep.mailing.database import Database

    return Database(mailing_settings.database_path)


@pytest.fixture
def outbox() -> Any:
    from tabletop_prep.mailing.mailer import OutboxMailer

    return OutboxMailer()


@pytest.fixture
def service(database: Any, outbox: Any, mailing_settings: Any, clock: FakeClock) -> Any:
    """SubscriptionService over the temporary database and an in-memory outbox."""
    from tabletop_prep.mailing.service import SubscriptionService

    return SubscriptionService(database, outbox, mailing_settings, clock=clock)
