"""Selection engine for session prep.

Submodules:
    classifier: Difficulty classification by challenge rating or hit points
    pool: Candidate pool resolution with its fallback chain
    selector: Random pair selection with a capped redraw
    payload: Drag-and-drop transfer payload codec
    generator: SessionGenerator tying offers and selection together

Example:
    >>> from tabletop_prep.engine import resolve_pool, pick_two
    >>> pool = resolve_pool(monsters, DifficultyTier.HARD, "forest")
    >>> first, second = pick_two(pool.candidates)
"""

from __future__ import annotations

from tabletop_prep.engine.classifier import (
    challenge_rating,
    hit_points,
    matches_tier,
    matches_tier_by_hit_points,
    parse_rating,
    tier_for_rating,
)
from tabletop_prep.engine.generator import Offer, SessionGenerator
from tabletop_prep.engine.payload import decode_choice, encode_choice
from tabletop_prep.engine.pool import (
    CandidatePool,
    PoolSource,
    matches_setting,
    resolve_pool,
)
from tabletop_prep.engine.selector import DEFAULT_MAX_ATTEMPTS, pick_two, pick_two_distinct


__all__ = [
    # Classifier
    "challenge_rating",
    "hit_points",
    "matches_tier",
    "matches_tier_by_hit_points",
    "parse_rating",
    "tier_for_rating",
    # Pool
    "CandidatePool",
    "PoolSource",
    "matches_setting",
    "resolve_pool",
    # Selector
    "DEFAULT_MAX_ATTEMPTS",
    "pick_two",
    "pick_two_distinct",
    # Payload
    "decode_choice",
    "encode_choice",
    # Generator
    "Offer",
    "SessionGenerator",
]
