"""Session generator: offers two choices per category and assembles a session.

The generator owns everything one user session needs: its reference
library, its random source, the current offers and the SelectionState.
Nothing is shared between generators.

Flow:
    1. ``await render()`` loads reference data and draws two offers for
       each category. The enemy offers come from the pool for a tier
       picked at random among the two offered difficulties.
    2. ``select()`` (or ``drop()`` with a transfer payload) fills a slot.
       Picking a difficulty or setting re-derives the enemy offers for
       that context and clears any enemy already picked, so the user
       must pick the enemy again.
    3. When all five slots are filled a SessionRecord is compiled.

Example:
    >>> generator = SessionGenerator(rng=random.Random(7))
    >>> offers = asyncio.run(generator.render())
    >>> for category, (first, _second) in offers.items():
    ...     generator.select(category, first)
    >>> generator.session is not None
    True
"""

from __future__ import annotations

import random
from typing import Any
from uuid import uuid4

from tabletop_prep.content.library import ReferenceLibrary
from tabletop_prep.core.config import GeneratorSettings, get_settings
from tabletop_prep.core.exceptions import InvalidChoiceError, PayloadDecodeError, SelectionError
from tabletop_prep.core.logging import session_logger
from tabletop_prep.engine.payload import decode_choice
from tabletop_prep.engine.pool import resolve_pool
from tabletop_prep.engine.selector import pick_two, pick_two_distinct
from tabletop_prep.export.projection import enemy_details
from tabletop_prep.models.choices import EntityChoice, ScalarChoice, of_entity, scalar
from tabletop_prep.models.entities import Entity, make_npc
from tabletop_prep.models.enums import Category, DifficultyTier, SelectionPhase
from tabletop_prep.models.session import SelectionState, SessionRecord


Offer = tuple[ScalarChoice | EntityChoice, ScalarChoice | EntityChoice]


class SessionGenerator:
    """Drives one user's session prep from offers to a compiled session."""

    def __init__(
        self,
        library: ReferenceLibrary | None = None,
        *,
        rng: random.Random | None = None,
        settings: GeneratorSettings | None = None,
        session_id: str | None = None,
    ) -> None:
        """Initialize the generator.

        Args:
            library: Reference data; a fresh library per generator if omitted.
            rng: Random source for every draw.
            settings: Generator tuning; application settings if omitted.
            session_id: Identifier attached to log entries.
        """
        self.library = library or ReferenceLibrary()
        self.session_id = session_id or uuid4().hex[:12]
        self._rng = rng or random.Random()
        self._settings = settings or get_settings().generator
        self._log = session_logger(__name__, self.session_id)

        self._render_generation = 0
        self._monsters: list[Entity] = []
        self._offers: dict[Category, Offer] = {}
        self._state = SelectionState()
        self._title = ""
        self._record: SessionRecord | None = None

    # -------------------------------------------------------------------------
    # Offers
    # -------------------------------------------------------------------------

    async def render(self) -> dict[Category, Offer]:
        """Draw fresh offers for every category and reset the selection.

        A render that finishes after a newer render has started leaves the
        newer render's offers in place.

        Returns:
            The current offers keyed by category.
        """
        self._render_generation += 1
        generation = self._render_generation

        monsters = await self.library.monsters()
        hook_book = await self.library.hooks()

        if generation != self._render_generation:
            self._log.info("Discarding stale render", generation=generation)
            return self.offers()

        settings_pair = self._pair([scalar(name) for name in self._settings.settings])
        difficulty_pair = self._pair([scalar(tier.value) for tier in DifficultyTier])
        npc_pair = pick_two_distinct(self._settings.npc_names, self._rng)
        hook_pair = self._pair([scalar(text) for text in hook_book.hooks_for(settings_pair[0].label)])

        enemy_tier = DifficultyTier(self._rng.choice(difficulty_pair).label)
        pool = resolve_pool(monsters, enemy_tier)
        enemy_pair = self._pair([of_entity(entity) for entity in pool.candidates])

        self._monsters = monsters
        self._offers = {
            Category.SETTING: settings_pair,
            Category.HOOK: hook_pair,
            Category.NPC: (of_entity(make_npc(npc_pair[0])), of_entity(make_npc(npc_pair[1]))),
            Category.ENEMY: enemy_pair,
            Category.DIFFICULTY: difficulty_pair,
        }
        self._state = SelectionState()
        self._record = None

        self._log.info(
            "Offers rendered",
            generation=generation,
            enemy_tier=enemy_tier.value,
            enemy_pool=pool.source.value,
            pool_size=len(pool),
        )
        return self.offers()

    def offers(self, category: Category | str | None = None):
        """Current offers.

        Args:
            category: A single category, or None for all of them.

        Returns:
            The offered pair for ``category``, or a dict of every pair.
        """
        if category is None:
            return dict(self._offers)
        return self._offers_for(_category(category))

    def _pair(self, pool: list[ScalarChoice | EntityChoice]) -> Offer:
        return pick_two(pool, self._rng, max_attempts=self._settings.max_pair_attempts)

    def _offers_for(self, category: Category) -> Offer:
        if not self._offers:
            raise SelectionError("No offers yet, render the generator first")
        return self._offers[category]

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def select(
        self,
        category: Category | str,
        choice: ScalarChoice | EntityChoice,
    ) -> SelectionPhase:
        """Pick one of the offered choices for a category.

        Args:
            category: Slot being filled.
            choice: One of the two current offers for that slot.

        Returns:
            The selection phase after the pick.

        Raises:
            InvalidChoiceError: If the choice is not on offer.
            SelectionError: If nothing has been rendered yet.
        """
        category = _category(category)
        if choice not in self._offers_for(category):
            raise InvalidChoiceError(
                "Choice is not on offer",
                category=category,
                details={"choice": choice.label},
            )

        self._state.select(category, choice)
        self._log.debug("Choice selected", category=category.value, choice=choice.label)

        if category in (Category.DIFFICULTY, Category.SETTING) and (
            self._settings.refresh_enemies_on_context_change
        ):
            self._refresh_enemies()

        return self._sync_record()

    def drop(self, category: Category | str, payload: str | None) -> bool:
        """Select a choice carried by a drag-and-drop payload.

        Malformed payloads and choices that are not on offer are ignored,
        leaving the slot as it was.

        Returns:
            True if the drop was applied.
        """
        try:
            choice = decode_choice(payload)
            self.select(category, choice)
        except (PayloadDecodeError, InvalidChoiceError) as exc:
            self._log.warning("Ignoring drop", category=str(category), error=exc.message)
            return False
        return True

    def _refresh_enemies(self) -> None:
        difficulty = self._state.get(Category.DIFFICULTY)
        setting = self._state.get(Category.SETTING)
        tier = DifficultyTier.parse(difficulty.label) if difficulty else None
        setting_tag = setting.label if setting else None

        pool = resolve_pool(self._monsters, tier, setting_tag)
        self._offers[Category.ENEMY] = self._pair([of_entity(e) for e in pool.candidates])

        cleared = self._state.clear(Category.ENEMY)
        self._log.info(
            "Enemy offers refreshed",
            tier=tier.value if tier else None,
            setting=setting_tag,
            enemy_pool=pool.source.value,
            enemy_cleared=cleared,
        )

    def _sync_record(self) -> SelectionPhase:
        """Compile a record when complete; drop it when no longer complete."""
        phase = self._state.phase
        if phase is SelectionPhase.COMPLETE:
            self._record = self._state.compile(self._title)
            self._log.info(
                "Session compiled",
                enemy=self._record.enemy.label,
                difficulty=self._record.difficulty.value,
            )
        elif self._record is not None:
            self._log.info("Session invalidated", missing=[c.value for c in self._state.missing])
            self._record = None
        return phase

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def title(self) -> str:
        return self._title

    @title.setter
    def title(self, value: str | None) -> None:
        self._title = (value or "").strip()
        if self._state.is_complete:
            self._record = self._state.compile(self._title)

    @property
    def phase(self) -> SelectionPhase:
        return self._state.phase

    @property
    def selection(self) -> SelectionState:
        return self._state

    @property
    def session(self) -> SessionRecord | None:
        """The compiled session, or None until every slot is filled."""
        return self._record

    @staticmethod
    def describe_enemy(entity: Entity) -> dict[str, Any]:
        """Display data for an enemy: name, image URL and known stat-block fields."""
        return {
            "name": entity.name,
            "image_url": entity.image_url,
            "details": enemy_details(entity),
        }


def _category(value: Category | str) -> Category:
    try:
        return Category(value)
    except ValueError as exc:
        raise InvalidChoiceError("Unknown category", category=str(value)) from exc


__all__ = [
    "Offer",
    "SessionGenerator",
]
