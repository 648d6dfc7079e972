"""Configuration management for the session prep toolkit.

Centralized configuration using pydantic-settings, supporting environment
variables, .env files, and runtime overrides. Sensitive values (SMTP and
admin passwords) are held in SecretStr.

Example:
    >>> from tabletop_prep.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.generator.max_pair_attempts
    100

Environment Variables:
    TABLETOP_PREP_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    TABLETOP_PREP_CONTENT_MONSTERS_SOURCE: Path or URL of the monster feed
    TABLETOP_PREP_CONTENT_HOOKS_SOURCE: Path or URL of the hook-text feed
    TABLETOP_PREP_MAILING_SMTP_HOST: Outbound mail server
    TABLETOP_PREP_MAILING_ADMIN_PASSWORD: Password seeded for the admin account
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tabletop_prep.core.exceptions import ConfigurationError


BUNDLED_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class GeneratorSettings(BaseSettings):
    """Configuration for the session generator.

    Attributes:
        settings: Setting names offered for the setting category.
        npc_names: Names NPC choices are drawn from.
        max_pair_attempts: Redraw cap when picking two distinct options.
        refresh_enemies_on_context_change: Re-derive enemy offers when the
            difficulty or setting is picked.
    """

    model_config = SettingsConfigDict(
        env_prefix="TABLETOP_PREP_GENERATOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    settings: list[str] = Field(
        default_factory=lambda: ["urban", "forest", "dungeon"],
        description="Settings offered to the user",
    )
    npc_names: list[str] = Field(
        default_factory=lambda: ["Guard", "Merchant", "Wizard", "Noble", "Thief", "Priest"],
        description="NPC names",
    )
    max_pair_attempts: int = Field(
        default=100,
        ge=1,
        le=10_000,
        description="Maximum redraws for a distinct second option",
    )
    refresh_enemies_on_context_change: bool = Field(
        default=True,
        description="Re-derive enemy offers after a difficulty or setting pick",
    )

    @field_validator("settings", "npc_names", mode="after")
    @classmethod
    def require_two_entries(cls, value: list[str]) -> list[str]:
        """Ensure at least two non-blank entries are configured.

        Args:
            value: The configured list.

        Returns:
            The list with blank entries removed.

        Raises:
            ConfigurationError: If fewer than two entries remain.
        """
        cleaned = [item.strip() for item in value if item and item.strip()]
        if len(cleaned) < 2:
            raise ConfigurationError(
                "At least two entries are required to offer a choice",
                details={"value": value},
            )
        return cleaned


class ContentSettings(BaseSettings):
    """Configuration for the reference data feeds.

    Attributes:
        monsters_source: Local path or http(s) URL of the monster feed.
        hooks_source: Local path or http(s) URL of the hook-text feed.
        timeout_seconds: Fetch timeout for remote feeds.
        max_retries: Fetch attempts for remote feeds.
    """

    model_config = SettingsConfigDict(
        env_prefix="TABLETOP_PREP_CONTENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    monsters_source: str = Field(
        default=str(BUNDLED_DATA_DIR / "monsters.json"),
        description="Monster feed location",
    )
    hooks_source: str = Field(
        default=str(BUNDLED_DATA_DIR / "hooks.json"),
        description="Hook-text feed location",
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Remote fetch timeout",
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Remote fetch attempts",
    )


class ExportSettings(BaseSettings):
    """Configuration for PDF export.

    Attributes:
        filename: Default download filename.
        page_size: Paper size.
        image_max_width: Maximum rendered image width in points.
        image_timeout_seconds: Timeout when fetching the enemy image.
        allow_local_images: Read non-URL image values as local file paths.
    """

    model_config = SettingsConfigDict(
        env_prefix="TABLETOP_PREP_EXPORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    filename: str = Field(default="Session.pdf", description="Download filename")
    page_size: Literal["A4", "letter"] = Field(default="A4", description="Paper size")
    image_max_width: float = Field(
        default=510.0,
        gt=0,
        description="Maximum image width in points",
    )
    image_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Image fetch timeout",
    )
    allow_local_images: bool = Field(
        default=False,
        description="Allow enemy images from local file paths",
    )


class MailingSettings(BaseSettings):
    """Configuration for the subscription backend.

    Attributes:
        database_path: SQLite database file.
        smtp_host: Outbound mail host.
        smtp_port: Outbound mail port.
        smtp_use_tls: Whether to use implicit TLS.
        smtp_user: SMTP login.
        smtp_password: SMTP password.
        from_name: Sender display name.
        from_email: Sender address.
        frontend_url: Base URL used in verification links.
        verification_ttl_hours: Lifetime of a verification token.
        admin_token_ttl_hours: Lifetime of an admin bearer token.
        admin_username: Seeded admin login.
        admin_password: Seeded admin password.
        admin_email: Seeded admin contact address.
        subscribe_limit: Subscribe attempts per window per client.
        subscribe_window_seconds: Subscribe window length.
        login_limit: Login attempts per window per client.
        login_window_seconds: Login window length.
    """

    model_config = SettingsConfigDict(
        env_prefix="TABLETOP_PREP_MAILING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_path: Path = Field(
        default=Path("data/mailing.db"),
        description="Path to SQLite database",
    )
    smtp_host: str = Field(default="localhost", description="SMTP host")
    smtp_port: int = Field(default=587, ge=1, le=65535, description="SMTP port")
    smtp_use_tls: bool = Field(default=False, description="Use implicit TLS")
    smtp_user: str | None = Field(default=None, description="SMTP user")
    smtp_password: SecretStr | None = Field(default=None, description="SMTP password")
    from_name: str = Field(default="TabletopTeacher", description="Sender name")
    from_email: str = Field(default="noreply@localhost", description="Sender address")
    frontend_url: str = Field(default="http://localhost:3000", description="Frontend base URL")
    verification_ttl_hours: int = Field(default=24, ge=1, le=720)
    admin_token_ttl_hours: int = Field(default=24, ge=1, le=720)
    admin_username: str | None = Field(default=None, description="Seeded admin login")
    admin_password: SecretStr | None = Field(default=None, description="Seeded admin password")
    admin_email: str | None = Field(default=None, description="Seeded admin email")
    subscribe_limit: int = Field(default=5, ge=1)
    subscribe_window_seconds: int = Field(default=60 * 60, ge=1)
    login_limit: int = Field(default=5, ge=1)
    login_window_seconds: int = Field(default=15 * 60, ge=1)

    @model_validator(mode="after")
    def validate_admin_seed(self) -> "MailingSettings":
        """Ensure the admin seed is either complete or absent.

        Returns:
            Self if validation passes.

        Raises:
            ConfigurationError: If only one of username/password is set.
        """
        if bool(self.admin_username) != bool(self.admin_password):
            raise ConfigurationError(
                "admin_username and admin_password must be configured together",
                config_key="admin_password" if self.admin_username else "admin_username",
            )
        return self


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        app_name: Application name.
        app_version: Application version string.
        debug: Enable debug mode.
        log_level: Application logging level.
        json_logs: Render logs as JSON.
        generator: Session generator settings.
        content: Reference data settings.
        export: PDF export settings.
        mailing: Subscription backend settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="TABLETOP_PREP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(default="Tabletop Session Prep", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    json_logs: bool = Field(default=False, description="Render logs as JSON")

    generator: GeneratorSettings = Field(default_factory=GeneratorSettings)
    content: ContentSettings = Field(default_factory=ContentSettings)
    export: ExportSettings = Field(default_factory=ExportSettings)
    mailing: MailingSettings = Field(default_factory=MailingSettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return not self.debug


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The application Settings instance.

    Raises:
        ConfigurationError: If required configuration is missing or invalid.
    """
    try:
        return Settings()
    except ConfigurationError:
        raise
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access."""
    get_settings.cache_clear()


__all__ = [
    "BUNDLED_DATA_DIR",
    "GeneratorSettings",
    "ContentSettings",
    "ExportSettings",
    "MailingSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
