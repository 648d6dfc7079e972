"""Random pair selection.

Two options are offered per category. The second draw is repeated until
it differs from the first, up to a fixed cap; past the cap the duplicate
is accepted so a pool of identical values cannot hang the caller.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from typing import TypeVar

from tabletop_prep.core.exceptions import ValidationError


T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 100


def pick_two(
    pool: Sequence[T],
    rng: random.Random | None = None,
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> tuple[T, T]:
    """Draw an ordered pair of usually-distinct elements.

    Args:
        pool: Candidates, at least one.
        rng: Random source; the module-level generator if omitted.
        max_attempts: Redraws allowed for a distinct second element.

    Returns:
        ``(first, second)``. For a single-element pool both are the same
        element and no redraw happens.

    Raises:
        ValidationError: If the pool is empty.

    Example:
        >>> first, second = pick_two(["urban", "forest", "dungeon"])
    """
    if not pool:
        raise ValidationError("Cannot pick from an empty pool", field_name="pool")
    rng = rng or random.Random()

    first = rng.choice(pool)
    if len(pool) == 1:
        return first, first

    second = rng.choice(pool)
    attempts = 1
    while second == first and attempts < max_attempts:
        second = rng.choice(pool)
        attempts += 1
    return first, second


def pick_two_distinct(pool: Sequence[T], rng: random.Random | None = None) -> tuple[T, T]:
    """Sample two different positions without replacement.

    Used where the pool is known to hold distinct values, e.g. NPC names.
    """
    if len(pool) < 2:
        raise ValidationError("Need at least two values", field_name="pool", invalid_value=len(pool))
    rng = rng or random.Random()
    first, second = rng.sample(list(pool), 2)
    return first, second


__all__ = [
    "DEFAULT_MAX_ATTEMPTS",
    "pick_two",
    "pick_two_distinct",
]
