"""Tests for random pair selection."""

from __future__ import annotations

import random

import pytest

from tabletop_prep.core.exceptions import ValidationError
from tabletop_prep.engine.selector import pick_two, pick_two_distinct


class TestPickTwo:
    """Tests for pick_two."""

    def test_distinct_in_almost_every_trial(self, rng: random.Random) -> None:
        """Test that pairs from a pool of two or more are distinct."""
        pool = ["urban", "forest", "dungeon"]
        trials = 10_000

        distinct = sum(1 for _ in range(trials) if len(set(pick_two(pool, rng))) == 2)

        assert distinct / trials >= 0.999

    def test_both_elements_come_from_pool(self, rng: random.Random) -> None:
        pool = ["Easy", "Medium", "Hard"]

        for _ in range(100):
            first, second = pick_two(pool, rng)
            assert first in pool
            assert second in pool

    def test_single_element_pool_duplicates(self, rng: random.Random) -> None:
        """Test that a pool of one returns a duplicate pair immediately."""
        assert pick_two(["Goblin"], rng) == ("Goblin", "Goblin")

    def test_identical_values_terminate(self, rng: random.Random) -> None:
        """Test that a pool of equal values cannot loop forever."""
        assert pick_two(["Orc", "Orc", "Orc"], rng, max_attempts=5) == ("Orc", "Orc")

    def test_empty_pool_rejected(self) -> None:
        with pytest.raises(ValidationError):
            pick_two([])

    def test_order_varies(self, rng: random.Random) -> None:
        """Test that both orderings of a two-element pool occur."""
        pairs = {pick_two(["a", "b"], rng) for _ in range(200)}

        assert pairs == {("a", "b"), ("b", "a")}

    def test_seeded_rng_is_reproducible(self) -> None:
        pool = list(range(20))

        assert pick_two(pool, random.Random(5)) == pick_two(pool, random.Random(5))


class TestPickTwoDistinct:
    """Tests for pick_two_distinct."""

    def test_always_distinct(self, rng: random.Random) -> None:
        names = ["Guard", "Merchant", "Wizard"]

        for _ in range(500):
            first, second = pick_two_distinct(names, rng)
            assert first != second

    def test_requires_two_values(self) -> None:
        with pytest.raises(ValidationError):
            pick_two_distinct(["Guard"])
