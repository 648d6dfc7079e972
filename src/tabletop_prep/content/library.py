"""Reference data library: the monster feed and the hook-text feed.

A ReferenceLibrary is owned by one generator (one browser session) and
loads each feed lazily, once, caching it on the instance. Feeds may be
local JSON files or http(s) URLs. A feed that cannot be loaded is
replaced by a small built-in default and the failure is logged; it never
reaches the caller.

Every load is tagged with the library's generation. ``invalidate()``
advances the generation, and a load that finishes after that is
discarded instead of overwriting fresher state.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import httpx
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from tabletop_prep.core.config import ContentSettings, get_settings
from tabletop_prep.core.exceptions import ContentLoadError
from tabletop_prep.core.logging import get_logger
from tabletop_prep.models.entities import DEFAULT_MONSTER_RECORDS, Entity, usable_entities


logger = get_logger(__name__)


# =============================================================================
# Hooks
# =============================================================================

DEFAULT_HOOKS: dict[str, list[str]] = {
    "urban": ["A mysterious event occurs in the ", "A stranger arrives in the "],
    "forest": ["A mysterious event occurs in the ", "A stranger appears in the "],
    "dungeon": ["A mysterious event occurs in the ", "A secret is revealed in the "],
}

GENERIC_HOOKS: tuple[str, ...] = ("A mysterious event occurs in", "A stranger arrives in")


def render_hook(template: str, setting: str) -> str:
    """Produce hook text for a setting.

    ``{setting}`` placeholders are substituted; otherwise the setting is
    appended after a single space.

    Example:
        >>> render_hook("A stranger arrives in the ", "urban")
        'A stranger arrives in the urban'
    """
    if "{setting}" in template:
        return template.replace("{setting}", setting).strip()
    return f"{template.rstrip()} {setting}".strip()


class HookBook(BaseModel):
    """Hook templates per setting.

    Attributes:
        hooks: Default templates keyed by setting.
        custom_hooks: Site-specific templates merged after the defaults.
    """

    hooks: dict[str, list[str]] = Field(default_factory=dict)
    custom_hooks: dict[str, list[str]] = Field(default_factory=dict)

    @classmethod
    def defaults(cls) -> HookBook:
        return cls(hooks={key: list(value) for key, value in DEFAULT_HOOKS.items()})

    def templates_for(self, setting: str) -> list[str]:
        """Default then custom templates for a setting."""
        return [*self.hooks.get(setting, []), *self.custom_hooks.get(setting, [])]

    def hooks_for(self, setting: str) -> list[str]:
        """Rendered hook texts for a setting, never empty."""
        templates = [t for t in self.templates_for(setting) if t and t.strip()]
        if not templates:
            templates = list(GENERIC_HOOKS)
        return [render_hook(template, setting) for template in templates]


# =============================================================================
# Library
# =============================================================================


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


class ReferenceLibrary:
    """Session-scoped cache of reference data.

    Example:
        >>> library = ReferenceLibrary()
        >>> monsters = asyncio.run(library.monsters())
    """

    def __init__(
        self,
        settings: ContentSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the library.

        Args:
            settings: Feed locations and fetch tuning; application
                settings if omitted.
            client: Optional shared HTTP client for remote feeds.
        """
        self._settings = settings or get_settings().content
        self._client = client
        self._generation = 0
        self._monsters: list[Entity] | None = None
        self._hooks: HookBook | None = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_loaded(self) -> bool:
        return self._monsters is not None and self._hooks is not None

    def invalidate(self) -> int:
        """Drop cached feeds and advance the generation.

        Returns:
            The new generation.
        """
        self._generation += 1
        self._monsters = None
        self._hooks = None
        logger.debug("Reference data invalidated", generation=self._generation)
        return self._generation

    async def monsters(self) -> list[Entity]:
        """Usable monster entities, loading the feed on first use."""
        while self._monsters is None:
            generation = self._generation
            entities, cacheable = await self._load_monsters()
            if generation != self._generation:
                logger.info("Discarding stale monster feed", generation=generation)
                continue
            if not cacheable:
                return entities
            self._monsters = entities
        return self._monsters

    async def hooks(self) -> HookBook:
        """Hook templates, loading the feed on first use."""
        while self._hooks is None:
            generation = self._generation
            book, cacheable = await self._load_hooks()
            if generation != self._generation:
                logger.info("Discarding stale hook feed", generation=generation)
                continue
            if not cacheable:
                return book
            self._hooks = book
        return self._hooks

    async def load(self) -> None:
        """Load both feeds, monsters first."""
        await self.monsters()
        await self.hooks()

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def _load_monsters(self) -> tuple[list[Entity], bool]:
        source = self._settings.monsters_source
        try:
            data = await self._read_source(source)
            if not isinstance(data, list):
                raise ContentLoadError("Monster feed must be a JSON array", source=source)
        except ContentLoadError as exc:
            logger.warning("Failed to load monsters, using defaults", error=str(exc))
            return usable_entities(DEFAULT_MONSTER_RECORDS), False

        entities = usable_entities(data)
        logger.info(
            "Monsters loaded",
            source=source,
            records=len(data),
            usable=len(entities),
        )
        return entities, True

    async def _load_hooks(self) -> tuple[HookBook, bool]:
        source = self._settings.hooks_source
        try:
            data = await self._read_source(source)
            book = HookBook.model_validate(data)
        except (ContentLoadError, PydanticValidationError) as exc:
            logger.warning("Failed to load hooks, using defaults", error=str(exc))
            return HookBook.defaults(), False

        logger.info("Hooks loaded", source=source, settings=sorted(book.hooks))
        return book, True

    async def _read_source(self, source: str) -> Any:
        """Read and decode one JSON feed.

        Raises:
            ContentLoadError: If the feed cannot be read or decoded.
        """
        try:
            if _is_url(source):
                text = await self._fetch(source)
            else:
                text = await asyncio.to_thread(Path(source).read_text, encoding="utf-8")
            return json.loads(text)
        except (OSError, ValueError, httpx.HTTPError) as exc:
            raise ContentLoadError(f"Could not read feed: {exc}", source=source) from exc

    async def _fetch(self, url: str) -> str:
        if self._client is not None:
            return await self._fetch_with(self._client, url)
        async with httpx.AsyncClient(timeout=self._settings.timeout_seconds) as client:
            return await self._fetch_with(client, url)

    async def _fetch_with(self, client: httpx.AsyncClient, url: str) -> str:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._settings.max_retries),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        ):
            with attempt:
                response = await client.get(url)
                response.raise_for_status()
                return response.text
        raise ContentLoadError("Feed fetch gave up", source=url)


__all__ = [
    "DEFAULT_HOOKS",
    "GENERIC_HOOKS",
    "HookBook",
    "ReferenceLibrary",
    "render_hook",
]
