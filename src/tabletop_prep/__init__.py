"""Tabletop Prep - session assembly for tabletop game masters.

Offers two candidates for each part of a session (setting, hook, NPC,
enemy, difficulty), lets the user pick one of each, and exports the
finished session as a PDF. Enemies are drawn from a monster feed and
matched to the chosen difficulty by challenge rating, falling back to
hit points and to the chosen setting's environment tags.

Example:
    >>> import asyncio
    >>> from tabletop_prep import SessionGenerator
    >>>
    >>> generator = SessionGenerator()
    >>> offers = asyncio.run(generator.render())
    >>> for category, (first, _second) in offers.items():
    ...     generator.select(category, first)
    >>> pdf_bytes = asyncio.run(export_session(generator.session))

Modules:
    core: Configuration, logging, and base exceptions.
    models: Pydantic V2 schemas for entities, choices and sessions.
    engine: Difficulty classification, pool resolution, pair selection.
    content: Reference data loading (monsters and hook texts).
    export: Text projection and PDF rendering.
    mailing: Mailing list backend (FastAPI).
    ui: Streamlit interface.
"""

from __future__ import annotations

# Core
from tabletop_prep.core.config import Settings, get_settings
from tabletop_prep.core.exceptions import PrepError
from tabletop_prep.core.logging import configure_logging, get_logger

# Models
from tabletop_prep.models import (
    Category,
    DifficultyTier,
    Entity,
    EntityChoice,
    ScalarChoice,
    SelectionPhase,
    SelectionState,
    SessionRecord,
)

# Content and engine
from tabletop_prep.content.library import ReferenceLibrary
from tabletop_prep.engine import SessionGenerator, pick_two, resolve_pool
from tabletop_prep.export import export_session, render_session_pdf, session_lines


__version__ = "0.1.0"
__all__ = [
    # Version info
    "__version__",
    # Core
    "PrepError",
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    # Models
    "Category",
    "DifficultyTier",
    "Entity",
    "EntityChoice",
    "ScalarChoice",
    "SelectionPhase",
    "SelectionState",
    "SessionRecord",
    # Engine
    "ReferenceLibrary",
    "SessionGenerator",
    "pick_two",
    "resolve_pool",
    # Export
    "export_session",
    "render_session_pdf",
    "session_lines",
]
