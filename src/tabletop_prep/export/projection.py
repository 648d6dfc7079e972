"""Text projection of a finished session.

Maps a SessionRecord to the ordered lines printed into the exported
document. Missing optional stat-block fields are skipped, never fatal.
"""

from __future__ import annotations

from typing import Any

from tabletop_prep.models.choices import EntityChoice
from tabletop_prep.models.entities import DETAIL_FIELDS, RATING_FIELDS, Entity
from tabletop_prep.models.session import SessionRecord


# (label, source fields) for the enemy block, in print order.
ENEMY_BLOCK_FIELDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("CR", RATING_FIELDS),
    ("Armor Class", ("Armor Class",)),
    ("Hit Points", ("Hit Points",)),
    ("Speed", ("Speed",)),
    ("Senses", ("Senses",)),
    ("Languages", ("Languages",)),
)


def item_label(item: Any) -> str:
    """Display text for one entry of an array field.

    Entries may be plain strings or objects with a ``name``.
    """
    if isinstance(item, dict):
        name = item.get("name")
        return str(name) if name else repr(item)
    return str(item)


def session_lines(record: SessionRecord) -> list[str]:
    """Project a session into printable lines.

    Args:
        record: The compiled session.

    Returns:
        Lines in fixed order: title, setting, hook, NPC, dialogue,
        difficulty, then the enemy block.
    """
    npc = record.npc.entity
    lines = [
        f"Title: {record.title}" if record.title else "Session",
        f"Setting: {record.setting.value}",
        f"Hook: {record.hook.value}",
        f"NPC: {npc.name} - {npc.role}",
        f"Dialogue: {npc.dialogue}",
        f"Difficulty: {record.difficulty.value}",
        "Enemy:",
    ]
    if isinstance(record.enemy, EntityChoice):
        lines.extend(enemy_block(record.enemy.entity))
    else:
        lines.append(f"  {record.enemy.value}")
    return lines


def enemy_block(monster: Entity) -> list[str]:
    """Indented stat-block lines for a structured enemy."""
    lines = [f"  Name: {monster.name}"]
    for label, keys in ENEMY_BLOCK_FIELDS:
        value = monster.first_of(keys)
        if value is not None:
            lines.append(f"  {label}: {value}")

    actions = monster.get("Actions")
    if actions:
        lines.append("  Actions:")
        if isinstance(actions, list):
            lines.extend(f"    - {item_label(action)}" for action in actions)
        else:
            lines.append(f"    - {actions}")
    return lines


def enemy_details(monster: Entity) -> list[tuple[str, str | list[str]]]:
    """Known stat-block fields for on-screen display.

    Array fields become lists of labels; absent fields are skipped.
    """
    details: list[tuple[str, str | list[str]]] = []
    for key in DETAIL_FIELDS:
        value = monster.first_of((key,))
        if value is None:
            continue
        if isinstance(value, list):
            details.append((key, [item_label(item) for item in value]))
        else:
            details.append((key, str(value)))
    return details


__all__ = [
    "ENEMY_BLOCK_FIELDS",
    "enemy_block",
    "enemy_details",
    "item_label",
    "session_lines",
]
