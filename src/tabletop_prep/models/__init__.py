"""Pydantic V2 data model for session prep.

Submodules:
    enums: DifficultyTier, Category, SelectionPhase
    entities: Entity reference records, NPC construction, fallback data
    choices: The Choice tagged union (ScalarChoice | EntityChoice)
    session: SelectionState and the immutable SessionRecord

Example:
    >>> from tabletop_prep.models import SelectionState, Category, scalar
    >>> state = SelectionState()
    >>> state.select(Category.DIFFICULTY, scalar("Hard"))
    <SelectionPhase.PARTIAL: 'partial'>
"""

from __future__ import annotations

# =============================================================================
# Enumerations
# =============================================================================
from tabletop_prep.models.enums import Category, DifficultyTier, SelectionPhase

# =============================================================================
# Entities
# =============================================================================
from tabletop_prep.models.entities import (
    DEFAULT_MONSTER_RECORDS,
    DETAIL_FIELDS,
    ENVIRONMENT_FIELDS,
    IMAGE_FIELDS,
    Entity,
    default_pool,
    make_npc,
    usable_entities,
)

# =============================================================================
# Choices and Sessions
# =============================================================================
from tabletop_prep.models.choices import (
    Choice,
    EntityChoice,
    ScalarChoice,
    choice_from_plain,
    of_entity,
    scalar,
)
from tabletop_prep.models.session import SelectionState, SessionRecord, check_fits


__all__ = [
    # Enums
    "Category",
    "DifficultyTier",
    "SelectionPhase",
    # Entities
    "DEFAULT_MONSTER_RECORDS",
    "DETAIL_FIELDS",
    "ENVIRONMENT_FIELDS",
    "IMAGE_FIELDS",
    "Entity",
    "default_pool",
    "make_npc",
    "usable_entities",
    # Choices
    "Choice",
    "EntityChoice",
    "ScalarChoice",
    "choice_from_plain",
    "of_entity",
    "scalar",
    # Sessions
    "SelectionState",
    "SessionRecord",
    "check_fits",
]
