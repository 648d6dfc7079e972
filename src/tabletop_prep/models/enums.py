"""Enumeration types for session prep.

Difficulty tiers, the five session categories, and the phases a
selection passes through on its way to a compiled session.
"""

from __future__ import annotations

from enum import StrEnum


class DifficultyTier(StrEnum):
    """Coarse difficulty classification of an encounter or monster."""

    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

    @classmethod
    def parse(cls, value: str) -> DifficultyTier | None:
        """Look up a tier by its display value, case-insensitively.

        Args:
            value: Tier text such as 'easy' or 'Hard'.

        Returns:
            The matching tier, or None when the text names no tier.
        """
        lowered = value.strip().lower()
        for tier in cls:
            if tier.value.lower() == lowered:
                return tier
        return None


class Category(StrEnum):
    """The five slots a session is assembled from."""

    SETTING = "setting"
    HOOK = "hook"
    NPC = "npc"
    ENEMY = "enemy"
    DIFFICULTY = "difficulty"

    @property
    def takes_entity(self) -> bool:
        """Whether choices for this category are structured entities.

        Returns:
            True for npc and enemy.
        """
        return self in (Category.NPC, Category.ENEMY)

    @property
    def label(self) -> str:
        """Human-readable category name."""
        return "NPC" if self is Category.NPC else self.value.capitalize()


class SelectionPhase(StrEnum):
    """How far a selection has progressed."""

    EMPTY = "empty"
    PARTIAL = "partial"
    COMPLETE = "complete"


__all__ = [
    "Category",
    "DifficultyTier",
    "SelectionPhase",
]
