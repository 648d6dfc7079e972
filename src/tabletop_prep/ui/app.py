"""Session prep page.

One SessionGenerator lives in ``st.session_state`` per browser session.
Each category shows its two offers as a radio group; picking one feeds
``SessionGenerator.select``. Once every slot is filled the compiled
session is shown with the enemy stat block and can be downloaded as PDF.
"""

from __future__ import annotations

import asyncio

import streamlit as st

from tabletop_prep.core.config import get_settings
from tabletop_prep.core.exceptions import PrepError
from tabletop_prep.core.logging import bind_context, configure_from_settings, get_logger
from tabletop_prep.engine.generator import SessionGenerator
from tabletop_prep.export.pdf import export_session
from tabletop_prep.export.projection import session_lines
from tabletop_prep.models.choices import EntityChoice
from tabletop_prep.models.enums import Category


logger = get_logger(__name__)


# =============================================================================
# Page Configuration
# =============================================================================


st.set_page_config(
    page_title="Tabletop Prep",
    page_icon="🎲",
    layout="wide",
)


# =============================================================================
# Session State
# =============================================================================


def get_generator() -> SessionGenerator:
    """Return this browser session's generator, rendering it on first use."""
    if "generator" not in st.session_state:
        settings = get_settings()
        configure_from_settings(settings)
        generator = SessionGenerator()
        bind_context(session_id=generator.session_id)
        asyncio.run(generator.render())
        st.session_state.generator = generator
        st.session_state.pdf = None
    return st.session_state.generator


def reroll() -> None:
    generator: SessionGenerator = st.session_state.generator
    asyncio.run(generator.render())
    st.session_state.pdf = None
    for category in Category:
        st.session_state.pop(f"pick_{category.value}", None)


def on_pick(category: Category) -> None:
    generator: SessionGenerator = st.session_state.generator
    label = st.session_state.get(f"pick_{category.value}")
    for choice in generator.offers(category):
        if choice.label == label:
            generator.select(category, choice)
            break
    st.session_state.pdf = None
    if category in (Category.DIFFICULTY, Category.SETTING):
        # Enemy offers were re-derived
        st.session_state.pop(f"pick_{Category.ENEMY.value}", None)


def on_title() -> None:
    st.session_state.generator.title = st.session_state.get("title_input", "")
    st.session_state.pdf = None


# =============================================================================
# Rendering
# =============================================================================


def render_offers(generator: SessionGenerator) -> None:
    columns = st.columns(len(Category))
    for column, category in zip(columns, Category):
        with column:
            labels = [choice.label for choice in generator.offers(category)]
            current = generator.selection.get(category)
            index = labels.index(current.label) if current and current.label in labels else None
            st.radio(
                category.label,
                labels,
                index=index,
                key=f"pick_{category.value}",
                on_change=on_pick,
                args=(category,),
            )


def render_session(generator: SessionGenerator) -> None:
    record = generator.session
    if record is None:
        missing = ", ".join(category.label for category in generator.selection.missing)
        st.info(f"Still to pick: {missing}")
        return

    st.subheader(record.title or "Session")
    st.text("\n".join(session_lines(record)[1:7]))

    if isinstance(record.enemy, EntityChoice):
        enemy = generator.describe_enemy(record.enemy.entity)
        with st.expander(f"Enemy: {enemy['name']}", expanded=True):
            if enemy["image_url"]:
                st.image(enemy["image_url"], width=240)
            for key, value in enemy["details"]:
                if isinstance(value, list):
                    st.markdown(f"**{key}:**")
                    for item in value:
                        st.markdown(f"- {item}")
                else:
                    st.markdown(f"**{key}:** {value}")
    else:
        st.markdown(f"**Enemy:** {record.enemy.value}")

    if st.session_state.get("pdf") is None:
        if st.button("Prepare PDF", use_container_width=True):
            try:
                st.session_state.pdf = asyncio.run(export_session(record))
            except PrepError as exc:
                logger.error("PDF export failed", error=exc.message)
                st.error(f"Export failed: {exc.message}")
            st.rerun()
    else:
        st.download_button(
            "Download PDF",
            data=st.session_state.pdf,
            file_name=get_settings().export.filename,
            mime="application/pdf",
            use_container_width=True,
        )


def main() -> None:
    """Render the session prep page."""
    generator = get_generator()

    st.title("🎲 Tabletop Prep")
    st.text_input("Session title", key="title_input", on_change=on_title)

    col1, _ = st.columns([1, 4])
    with col1:
        st.button("Reroll", on_click=reroll, use_container_width=True)

    st.divider()
    render_offers(generator)
    st.divider()
    render_session(generator)


main()
