"""PDF export of a finished session.

The document is the text projection of the session, optionally headed by
the enemy's artwork scaled down to fit the page width. Layout, wrapping
and pagination are left to reportlab's platypus engine.
"""

from __future__ import annotations

import asyncio
import io
from pathlib import Path
from xml.sax.saxutils import escape

import httpx
from reportlab.lib.pagesizes import A4, letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer

from tabletop_prep.core.config import ExportSettings, get_settings
from tabletop_prep.core.exceptions import ImageFetchError
from tabletop_prep.core.logging import get_logger
from tabletop_prep.export.projection import session_lines
from tabletop_prep.models.choices import EntityChoice
from tabletop_prep.models.session import SessionRecord


logger = get_logger(__name__)

PAGE_SIZES = {"A4": A4, "letter": letter}
INDENT_STEP = 6  # points per leading space


def _scaled_image(data: bytes, max_width: float) -> Image:
    """Build an image flowable no wider than ``max_width``.

    Raises:
        ImageFetchError: If the bytes are not a decodable image.
    """
    try:
        width, height = ImageReader(io.BytesIO(data)).getSize()
    except (OSError, ValueError) as exc:
        raise ImageFetchError("Enemy image could not be decoded", details={"error": str(exc)}) from exc
    if not width or not height:
        raise ImageFetchError("Enemy image has no size")
    scale = min(1.0, max_width / width)
    return Image(io.BytesIO(data), width=width * scale, height=height * scale)


def render_session_pdf(
    record: SessionRecord,
    *,
    image: bytes | None = None,
    settings: ExportSettings | None = None,
) -> bytes:
    """Render a session to PDF bytes.

    Args:
        record: The compiled session.
        image: Optional raw image bytes placed above the text.
        settings: Export tuning; application settings if omitted.

    Returns:
        PDF file contents.
    """
    settings = settings or get_settings().export
    buffer = io.BytesIO()

    doc = SimpleDocTemplate(
        buffer,
        pagesize=PAGE_SIZES[settings.page_size],
        rightMargin=10 * mm,
        leftMargin=10 * mm,
        topMargin=10 * mm,
        bottomMargin=10 * mm,
        title=record.title or "Session",
    )
    max_width = min(settings.image_max_width, doc.width)

    styles = getSampleStyleSheet()
    body = ParagraphStyle("SessionLine", parent=styles["Normal"], fontSize=11, leading=14)

    elements = []
    if image:
        try:
            elements.append(_scaled_image(image, max_width))
            elements.append(Spacer(1, 6))
        except ImageFetchError as exc:
            logger.warning("Skipping enemy image", error=exc.message)

    for line in session_lines(record):
        stripped = line.lstrip(" ")
        indent = (len(line) - len(stripped)) * INDENT_STEP
        style = body if not indent else ParagraphStyle(
            f"SessionLineIndent{indent}", parent=body, leftIndent=indent
        )
        elements.append(Paragraph(escape(stripped), style))

    doc.build(elements)
    pdf_bytes = buffer.getvalue()
    buffer.close()
    return pdf_bytes


async def fetch_image(
    url: str,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = 10.0,
    allow_local: bool = False,
) -> bytes:
    """Fetch image bytes from an http(s) URL, or a local path if allowed.

    Image values come from the monster feed, which may be remote, so
    local paths are refused unless ``allow_local`` is set.

    Raises:
        ImageFetchError: If the image cannot be retrieved or the location
            is not permitted.
    """
    remote = url.startswith(("http://", "https://"))
    if not remote and not allow_local:
        raise ImageFetchError("Image location must be an http(s) URL", url=url)
    try:
        if not remote:
            return await asyncio.to_thread(Path(url).read_bytes)
        if client is not None:
            response = await client.get(url)
        else:
            async with httpx.AsyncClient(timeout=timeout) as own_client:
                response = await own_client.get(url)
        response.raise_for_status()
        return response.content
    except (OSError, httpx.HTTPError) as exc:
        raise ImageFetchError(f"Could not fetch image: {exc}", url=url) from exc


async def export_session(
    record: SessionRecord,
    *,
    client: httpx.AsyncClient | None = None,
    settings: ExportSettings | None = None,
) -> bytes:
    """Export a session to PDF, embedding the enemy image when available.

    A missing or broken image never fails the export; it is logged and
    the document is produced text-only.
    """
    settings = settings or get_settings().export
    image: bytes | None = None

    if isinstance(record.enemy, EntityChoice) and record.enemy.entity.image_url:
        url = record.enemy.entity.image_url
        try:
            image = await fetch_image(
                url,
                client=client,
                timeout=settings.image_timeout_seconds,
                allow_local=settings.allow_local_images,
            )
        except ImageFetchError as exc:
            logger.warning("Exporting without enemy image", url=url, error=exc.message)

    pdf_bytes = render_session_pdf(record, image=image, settings=settings)
    logger.info("Session exported", size=len(pdf_bytes), with_image=image is not None)
    return pdf_bytes


def export_session_to_file(record: SessionRecord, filename: str | Path) -> Path:
    """Export a session to a PDF file.

    Args:
        record: The compiled session.
        filename: Destination path.

    Returns:
        The written path.
    """
    path = Path(filename)
    path.write_bytes(asyncio.run(export_session(record)))
    return path


__all__ = [
    "export_session",
    "export_session_to_file",
    "fetch_image",
    "render_session_pdf",
]
