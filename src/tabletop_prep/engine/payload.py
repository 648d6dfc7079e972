"""Transfer payload codec for drag-and-drop.

Dragging a choice onto a slot carries the choice as text. This module is
the single encode/decode boundary for that text: JSON produced from the
Choice union, percent-encoded so it survives HTML attributes.
"""

from __future__ import annotations

from urllib.parse import quote, unquote

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from tabletop_prep.core.exceptions import PayloadDecodeError
from tabletop_prep.models.choices import Choice, EntityChoice, ScalarChoice


_CHOICE_ADAPTER: TypeAdapter[ScalarChoice | EntityChoice] = TypeAdapter(Choice)


def encode_choice(choice: ScalarChoice | EntityChoice) -> str:
    """Encode a choice as a transfer payload."""
    return quote(_CHOICE_ADAPTER.dump_json(choice).decode("utf-8"), safe="")


def decode_choice(payload: str | None) -> ScalarChoice | EntityChoice:
    """Decode a transfer payload.

    Args:
        payload: Text produced by :func:`encode_choice`.

    Returns:
        The decoded choice.

    Raises:
        PayloadDecodeError: If the payload is empty or malformed.
    """
    if not payload:
        raise PayloadDecodeError("Empty transfer payload")
    try:
        return _CHOICE_ADAPTER.validate_json(unquote(payload, errors="strict"))
    except (PydanticValidationError, UnicodeDecodeError) as exc:
        raise PayloadDecodeError(
            "Malformed transfer payload",
            details={"payload": payload[:80], "error": str(exc)},
        ) from exc


__all__ = [
    "decode_choice",
    "encode_choice",
]
