"""Choice values offered to the user for one category.

A choice is either a plain string (setting, hook, difficulty, or a bare
enemy name) or a structured entity (NPC, monster). The two cases are an
explicit tagged union discriminated by ``kind``, fixed at construction.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from tabletop_prep.core.exceptions import ValidationError
from tabletop_prep.models.entities import Entity


class ScalarChoice(BaseModel):
    """A plain-text choice such as 'urban' or 'Easy'."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["scalar"] = "scalar"
    value: str = Field(min_length=1)

    @property
    def label(self) -> str:
        return self.value


class EntityChoice(BaseModel):
    """A structured choice wrapping a reference entity."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["entity"] = "entity"
    entity: Entity

    @property
    def label(self) -> str:
        return self.entity.name


Choice = Annotated[Union[ScalarChoice, EntityChoice], Field(discriminator="kind")]


def scalar(value: str) -> ScalarChoice:
    """Shorthand for ``ScalarChoice(value=value)``."""
    return ScalarChoice(value=value)


def of_entity(entity: Entity) -> EntityChoice:
    """Shorthand for ``EntityChoice(entity=entity)``."""
    return EntityChoice(entity=entity)


def choice_from_plain(value: Any) -> ScalarChoice | EntityChoice:
    """Build a choice from a plain string or record mapping.

    Args:
        value: A non-empty string, a record mapping with a name, an
            Entity, or an existing choice.

    Returns:
        The corresponding choice.

    Raises:
        ValidationError: If the value cannot represent a choice.
    """
    if isinstance(value, (ScalarChoice, EntityChoice)):
        return value
    if isinstance(value, Entity):
        return of_entity(value)
    if isinstance(value, str) and value:
        return scalar(value)
    if isinstance(value, Mapping):
        entity = Entity.from_record(value)
        if entity is not None:
            return of_entity(entity)
    raise ValidationError("Value cannot be used as a choice", invalid_value=repr(value))


__all__ = [
    "Choice",
    "EntityChoice",
    "ScalarChoice",
    "choice_from_plain",
    "of_entity",
    "scalar",
]
