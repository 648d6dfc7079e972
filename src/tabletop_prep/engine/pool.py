"""Candidate pool resolution for enemy choices.

Given the full monster list, a requested tier and an optional setting,
produce a pool of at least two named candidates. Each fallback in the
chain only fires when the previous step left fewer than two usable
candidates:

1. tier filter by challenge rating
2. tier filter by hit points, over the full list
3. setting filter over the tier pool, discarded if it narrows below two
4. the whole usable list, if the pool is empty
5. a single candidate is duplicated
6. the built-in Goblin/Orc pair if no usable monster exists

Resolution is deterministic; randomness only enters when a pair is drawn
from the pool.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from tabletop_prep.core.logging import get_logger
from tabletop_prep.engine.classifier import matches_tier, matches_tier_by_hit_points
from tabletop_prep.models.entities import ENVIRONMENT_FIELDS, Entity, default_pool, usable_entities
from tabletop_prep.models.enums import DifficultyTier


logger = get_logger(__name__)


class PoolSource(StrEnum):
    """Which step of the fallback chain produced a pool."""

    RATING = "rating"
    HIT_POINTS = "hit_points"
    SETTING = "setting"
    ALL = "all"
    DEFAULT = "default"


@dataclass(frozen=True)
class CandidatePool:
    """A resolved candidate pool.

    Attributes:
        candidates: At least two entities; may repeat one entity.
        source: The step that produced the candidates.
        duplicated: Whether a lone candidate was doubled.
    """

    candidates: tuple[Entity, ...]
    source: PoolSource
    duplicated: bool = False

    def __len__(self) -> int:
        return len(self.candidates)

    def __iter__(self):
        return iter(self.candidates)


def matches_setting(entity: Entity, setting: str) -> bool:
    """Case-insensitive substring match of a setting against habitat fields.

    Array-valued fields are joined with spaces before matching. Entities
    without any recognised habitat field never match.
    """
    needle = setting.strip().lower()
    if not needle:
        return False
    for key in ENVIRONMENT_FIELDS:
        value = entity.get(key)
        if not value:
            continue
        if isinstance(value, (list, tuple)):
            text = " ".join(str(item) for item in value)
        else:
            text = str(value)
        if needle in text.lower():
            return True
    return False


def filter_by_tier(entities: Sequence[Entity], tier: DifficultyTier) -> list[Entity]:
    """Primary tier filter (challenge rating)."""
    return [entity for entity in entities if matches_tier(entity, tier)]


def filter_by_hit_points(entities: Sequence[Entity], tier: DifficultyTier) -> list[Entity]:
    """Secondary tier filter (hit points)."""
    return [entity for entity in entities if matches_tier_by_hit_points(entity, tier)]


def resolve_pool(
    entities: Iterable[Entity | Any],
    tier: DifficultyTier | None = None,
    setting: str | None = None,
) -> CandidatePool:
    """Resolve the enemy candidate pool.

    Args:
        entities: Monster entities or raw feed records. Records without a
            name are ignored.
        tier: Requested difficulty tier, or None for no tier filter.
        setting: Optional setting tag to narrow by habitat.

    Returns:
        A pool of at least two candidates.
    """
    usable = usable_entities(entities)
    if not usable:
        logger.warning("No usable monsters, using built-in pool")
        return CandidatePool(tuple(default_pool()), PoolSource.DEFAULT)

    if tier is None:
        pool, source = list(usable), PoolSource.ALL
    else:
        pool, source = filter_by_tier(usable, tier), PoolSource.RATING
        if len(pool) < 2:
            by_hit_points = filter_by_hit_points(usable, tier)
            if len(by_hit_points) > len(pool):
                logger.debug(
                    "Rating filter too narrow, using hit points",
                    tier=tier.value,
                    by_rating=len(pool),
                    by_hit_points=len(by_hit_points),
                )
                pool, source = by_hit_points, PoolSource.HIT_POINTS

    if setting:
        narrowed = [entity for entity in pool if matches_setting(entity, setting)]
        if len(narrowed) >= 2:
            pool, source = narrowed, PoolSource.SETTING
        else:
            logger.debug("Setting filter too narrow, ignoring it", setting=setting, matched=len(narrowed))

    if not pool:
        logger.debug("No monsters match the tier, using the full list", tier=tier)
        pool, source = list(usable), PoolSource.ALL

    if len(pool) == 1:
        return CandidatePool((pool[0], pool[0]), source, duplicated=True)
    return CandidatePool(tuple(pool), source)


__all__ = [
    "CandidatePool",
    "PoolSource",
    "filter_by_hit_points",
    "filter_by_tier",
    "matches_setting",
    "resolve_pool",
]
