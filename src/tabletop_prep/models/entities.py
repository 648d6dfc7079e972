"""Reference entities: monsters and NPCs.

Monster records arrive as loosely-typed JSON objects (SRD stat blocks with
keys such as ``"Challenge"`` or ``"Hit Points"``). An Entity keeps the raw
record untouched alongside its required display name, so the classifier,
pool resolver and exporter can all read the same fields.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# Known Record Fields
# =============================================================================

RATING_FIELDS: tuple[str, ...] = ("Challenge", "CR")
HIT_POINTS_FIELD = "Hit Points"
ENVIRONMENT_FIELDS: tuple[str, ...] = (
    "Environment",
    "environment",
    "Habitat",
    "habitat",
    "environments",
    "habitats",
)
IMAGE_FIELDS: tuple[str, ...] = ("Image", "image", "ImageURL", "image_url", "img", "imageUrl")

# Stat-block fields shown for an enemy, in display order.
DETAIL_FIELDS: tuple[str, ...] = (
    "Challenge",
    "CR",
    "Armor Class",
    "Hit Points",
    "Speed",
    "Senses",
    "Languages",
    "Actions",
    "Special Abilities",
    "Legendary Actions",
)


class Entity(BaseModel):
    """A named, read-only reference record.

    Attributes:
        name: Display name. Records without one are unusable.
        record: The full source record, including ``name``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1, description="Display name")
    record: dict[str, Any] = Field(default_factory=dict, description="Source record")

    @field_validator("record", mode="after")
    @classmethod
    def own_record(cls, value: dict[str, Any]) -> dict[str, Any]:
        """Detach nested values from the caller's feed data."""
        return copy.deepcopy(value)

    @classmethod
    def from_record(cls, record: Any) -> Entity | None:
        """Build an entity from a raw feed record.

        Args:
            record: A decoded JSON value from the feed.

        Returns:
            The entity, or None if the record is not a mapping with a
            non-empty scalar name. Numeric names are kept as text.
        """
        if not isinstance(record, Mapping):
            return None
        name = record.get("name")
        if isinstance(name, bool) or not isinstance(name, (str, int, float)) or not name:
            return None
        if not str(name).strip():
            return None
        return cls(name=str(name), record=dict(record))

    def get(self, key: str, default: Any = None) -> Any:
        """Read a field from the source record."""
        return self.record.get(key, default)

    def first_of(self, keys: Iterable[str]) -> Any:
        """Return the first present value among ``keys``, or None.

        Missing keys, None, blank strings and empty collections count as
        absent; a numeric 0 is a real value.
        """
        for key in keys:
            value = self.record.get(key)
            if value is None:
                continue
            if isinstance(value, str) and not value.strip():
                continue
            if isinstance(value, (list, tuple, dict)) and not value:
                continue
            return value
        return None

    @property
    def image_url(self) -> str | None:
        """URL of the entity's artwork, if the record carries one."""
        value = self.first_of(IMAGE_FIELDS)
        return str(value) if value else None

    @property
    def role(self) -> str:
        return str(self.record.get("role", ""))

    @property
    def dialogue(self) -> str:
        return str(self.record.get("dialogue", ""))


def make_npc(name: str) -> Entity:
    """Create an NPC entity with placeholder role and dialogue.

    Args:
        name: NPC name, e.g. 'Guard'.

    Returns:
        Entity whose record holds name, role and dialogue.
    """
    return Entity(
        name=name,
        record={
            "name": name,
            "role": f"Role of {name}",
            "dialogue": f"Dialogue from {name}",
        },
    )


def usable_entities(records: Iterable[Any]) -> list[Entity]:
    """Convert raw records to entities, dropping unusable ones."""
    entities = []
    for record in records:
        entity = record if isinstance(record, Entity) else Entity.from_record(record)
        if entity is not None:
            entities.append(entity)
    return entities


# Substituted when the monster feed cannot be loaded.
DEFAULT_MONSTER_RECORDS: tuple[dict[str, Any], ...] = (
    {"name": "Goblin", "difficulty": "Easy"},
    {"name": "Orc", "difficulty": "Medium"},
    {"name": "Dragon", "difficulty": "Hard"},
)

# Last-resort pool when no usable monster exists at all.
DEFAULT_POOL_RECORDS: tuple[dict[str, Any], ...] = (
    {"name": "Goblin"},
    {"name": "Orc"},
)


def default_pool() -> list[Entity]:
    """Build the fixed two-entity fallback pool."""
    return usable_entities(DEFAULT_POOL_RECORDS)


__all__ = [
    "DEFAULT_MONSTER_RECORDS",
    "DEFAULT_POOL_RECORDS",
    "DETAIL_FIELDS",
    "ENVIRONMENT_FIELDS",
    "HIT_POINTS_FIELD",
    "IMAGE_FIELDS",
    "RATING_FIELDS",
    "Entity",
    "default_pool",
    "make_npc",
    "usable_entities",
]
