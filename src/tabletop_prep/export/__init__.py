"""Session export: text projection and PDF rendering."""

from __future__ import annotations

from tabletop_prep.export.pdf import (
    export_session,
    export_session_to_file,
    fetch_image,
    render_session_pdf,
)
from tabletop_prep.export.projection import enemy_block, enemy_details, session_lines

__all__ = [
    "enemy_block",
    "enemy_details",
    "export_session",
    "export_session_to_file",
    "fetch_image",
    "render_session_pdf",
    "session_lines",
]
