"""Reference data feeds (monsters and hook texts)."""

from __future__ import annotations

from tabletop_prep.content.library import (
    DEFAULT_HOOKS,
    GENERIC_HOOKS,
    HookBook,
    ReferenceLibrary,
    render_hook,
)

__all__ = [
    "DEFAULT_HOOKS",
    "GENERIC_HOOKS",
    "HookBook",
    "ReferenceLibrary",
    "render_hook",
]
