"""Selection state and compiled session records.

SelectionState tracks one choice per category while the user is picking.
Once every category is filled it can be compiled into a SessionRecord,
an immutable snapshot that later picks never touch.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from tabletop_prep.core.exceptions import InvalidChoiceError, SessionIncompleteError
from tabletop_prep.models.choices import Choice, EntityChoice, ScalarChoice, choice_from_plain
from tabletop_prep.models.enums import Category, DifficultyTier, SelectionPhase


class SessionRecord(BaseModel):
    """A finished session.

    Attributes:
        title: Optional free-text title.
        setting: Chosen setting.
        hook: Chosen hook text.
        npc: Chosen NPC.
        enemy: Chosen enemy, a monster entity or a bare name.
        difficulty: Chosen difficulty tier text.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    title: str = Field(default="", description="Session title")
    setting: ScalarChoice
    hook: ScalarChoice
    npc: EntityChoice
    enemy: Choice
    difficulty: ScalarChoice

    @classmethod
    def from_plain(cls, data: Mapping[str, Any]) -> SessionRecord:
        """Build a record from plain strings and record mappings.

        Args:
            data: Mapping with the five category keys and an optional title.

        Returns:
            The compiled record.
        """
        values: dict[str, Any] = {
            category.value: choice_from_plain(data[category.value]) for category in Category
        }
        values["title"] = (data.get("title") or "").strip()
        return cls(**values)

    @property
    def tier(self) -> DifficultyTier | None:
        return DifficultyTier.parse(self.difficulty.value)


def check_fits(category: Category, choice: ScalarChoice | EntityChoice) -> None:
    """Validate that ``choice`` may fill ``category``.

    Setting, hook and difficulty take plain text; an NPC must be an
    entity; an enemy may be either. Difficulty text must name a tier.

    Raises:
        InvalidChoiceError: If the choice kind does not fit.
    """
    if category is Category.NPC and not isinstance(choice, EntityChoice):
        raise InvalidChoiceError("NPC choices must be entities", category=category)
    if category in (Category.SETTING, Category.HOOK, Category.DIFFICULTY) and not isinstance(
        choice, ScalarChoice
    ):
        raise InvalidChoiceError("Choice must be plain text", category=category)
    if category is Category.DIFFICULTY and DifficultyTier.parse(choice.label) is None:
        raise InvalidChoiceError(
            "Unknown difficulty",
            category=category,
            details={"value": choice.label},
        )


class SelectionState:
    """The user's in-progress choices across the five categories.

    Picking a category that is already filled overwrites it; no history
    is kept.

    Example:
        >>> state = SelectionState()
        >>> state.select(Category.SETTING, scalar("urban"))
        <SelectionPhase.PARTIAL: 'partial'>
    """

    def __init__(self) -> None:
        self._choices: dict[Category, ScalarChoice | EntityChoice] = {}

    def select(
        self,
        category: Category | str,
        choice: ScalarChoice | EntityChoice,
    ) -> SelectionPhase:
        """Set or overwrite the choice for a category.

        Args:
            category: The slot being filled.
            choice: The picked choice.

        Returns:
            The phase after the pick.

        Raises:
            InvalidChoiceError: If the category is unknown or the choice
                does not fit it.
        """
        category = _coerce_category(category)
        check_fits(category, choice)
        self._choices[category] = choice
        return self.phase

    def clear(self, category: Category | str) -> bool:
        """Empty a slot.

        Returns:
            True if the slot held a choice.
        """
        return self._choices.pop(_coerce_category(category), None) is not None

    def get(self, category: Category | str) -> ScalarChoice | EntityChoice | None:
        return self._choices.get(_coerce_category(category))

    @property
    def missing(self) -> list[Category]:
        """Categories without a choice, in canonical order."""
        return [category for category in Category if category not in self._choices]

    @property
    def phase(self) -> SelectionPhase:
        if not self._choices:
            return SelectionPhase.EMPTY
        if self.missing:
            return SelectionPhase.PARTIAL
        return SelectionPhase.COMPLETE

    @property
    def is_complete(self) -> bool:
        return self.phase is SelectionPhase.COMPLETE

    def compile(self, title: str = "") -> SessionRecord:
        """Snapshot the choices into an immutable record.

        Args:
            title: Optional session title.

        Returns:
            The compiled session.

        Raises:
            SessionIncompleteError: If any category is still empty.
        """
        missing = self.missing
        if missing:
            raise SessionIncompleteError(
                "Cannot compile a session before every category is chosen",
                missing=[category.value for category in missing],
            )
        # Records never share entity data with the live selection
        return SessionRecord(
            title=(title or "").strip(),
            **{
                category.value: choice.model_copy(deep=True)
                for category, choice in self._choices.items()
            },
        )

    def __len__(self) -> int:
        return len(self._choices)

    def __repr__(self) -> str:
        picked = ", ".join(f"{c.value}={v.label!r}" for c, v in self._choices.items())
        return f"SelectionState({picked})"


def _coerce_category(category: Category | str) -> Category:
    try:
        return Category(category)
    except ValueError as exc:
        raise InvalidChoiceError("Unknown category", category=str(category)) from exc


__all__ = [
    "SelectionState",
    "SessionRecord",
    "check_fits",
]
