"""Difficulty classification of monsters.

The primary method reads the challenge rating. SRD records carry it as
text such as ``"1/4 (50 XP)"`` or ``"10 (5,900 XP)"``; the leading token is
parsed as a fraction or a decimal. Records whose rating is missing or
unparseable are indeterminate and never match a tier.

The secondary method buckets by hit points and is only used by the pool
resolver when rating-based filtering comes up short.
"""

from __future__ import annotations

import math
import re

from tabletop_prep.models.entities import HIT_POINTS_FIELD, RATING_FIELDS, Entity
from tabletop_prep.models.enums import DifficultyTier


_LEADING_TOKEN = re.compile(r"^([^\s(]+)")
_FIRST_INTEGER = re.compile(r"(\d+)")

# Inclusive hit point ranges for the secondary heuristic.
HIT_POINT_RANGES: dict[DifficultyTier, tuple[int, float]] = {
    DifficultyTier.EASY: (0, 50),
    DifficultyTier.MEDIUM: (51, 100),
    DifficultyTier.HARD: (101, math.inf),
}


def parse_rating(raw: object) -> float | None:
    """Parse a challenge rating value.

    Args:
        raw: Rating text such as '1/2', '5 (1,800 XP)', or a number.

    Returns:
        The numeric rating, or None when it cannot be parsed.

    Example:
        >>> parse_rating("1/4 (50 XP)")
        0.25
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return float(raw) if math.isfinite(raw) else None
    if not isinstance(raw, str):
        return None

    match = _LEADING_TOKEN.match(raw.strip())
    if not match:
        return None
    token = match.group(1)

    if "/" in token:
        numerator, _, denominator = token.partition("/")
        try:
            num = float(numerator)
            den = float(denominator)
        except ValueError:
            return None
        if den == 0 or not (math.isfinite(num) and math.isfinite(den)):
            return None
        return num / den

    try:
        value = float(token)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def challenge_rating(entity: Entity) -> float | None:
    """Numeric challenge rating of an entity, or None if indeterminate."""
    raw = entity.first_of(RATING_FIELDS)
    if raw is None:
        return None
    return parse_rating(raw)


def tier_for_rating(rating: float) -> DifficultyTier:
    """Bucket a rating: Easy <= 1 < Medium <= 8 < Hard."""
    if rating <= 1:
        return DifficultyTier.EASY
    if rating <= 8:
        return DifficultyTier.MEDIUM
    return DifficultyTier.HARD


def matches_tier(entity: Entity, tier: DifficultyTier) -> bool:
    """Primary, rating-based tier predicate.

    Indeterminate entities match no tier.
    """
    rating = challenge_rating(entity)
    if rating is None:
        return False
    return tier_for_rating(rating) is tier


def hit_points(entity: Entity) -> int:
    """First integer in the hit points field, 0 if absent or unparseable."""
    raw = entity.get(HIT_POINTS_FIELD)
    if isinstance(raw, bool):
        return 0
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if math.isfinite(raw) else 0
    if not isinstance(raw, str):
        return 0
    match = _FIRST_INTEGER.search(raw)
    return int(match.group(1)) if match else 0


def matches_tier_by_hit_points(entity: Entity, tier: DifficultyTier) -> bool:
    """Secondary, hit-point-based tier predicate."""
    low, high = HIT_POINT_RANGES[tier]
    return low <= hit_points(entity) <= high


__all__ = [
    "HIT_POINT_RANGES",
    "challenge_rating",
    "hit_points",
    "matches_tier",
    "matches_tier_by_hit_points",
    "parse_rating",
    "tier_for_rating",
]
