"""Tests for the reference data library."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import httpx
import pytest

from tabletop_prep.content.library import HookBook, ReferenceLibrary, render_hook
from tabletop_prep.core.config import ContentSettings


MONSTERS_URL = "https://feeds.example.com/monsters.json"
HOOKS_URL = "https://feeds.example.com/hooks.json"


def remote_library(handler: Any, *, max_retries: int = 1) -> ReferenceLibrary:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    settings = ContentSettings(
        monsters_source=MONSTERS_URL,
        hooks_source=HOOKS_URL,
        max_retries=max_retries,
    )
    return ReferenceLibrary(settings, client=client)


class TestRenderHook:
    """Tests for hook text rendering."""

    def test_appends_setting(self) -> None:
        assert render_hook("A stranger arrives in the ", "urban") == "A stranger arrives in the urban"

    def test_substitutes_placeholder(self) -> None:
        assert render_hook("Smoke rises over the {setting} at dawn", "forest") == (
            "Smoke rises over the forest at dawn"
        )


class TestHookBook:
    """Tests for HookBook lookups."""

    def test_custom_hooks_are_merged_after_defaults(self, sample_hooks: dict[str, Any]) -> None:
        book = HookBook.model_validate(sample_hooks)

        assert book.hooks_for("forest") == [
            "Wolves howl in the forest",
            "A shrine is desecrated in the forest",
        ]

    def test_generic_hooks_for_unknown_setting(self, sample_hooks: dict[str, Any]) -> None:
        book = HookBook.model_validate(sample_hooks)

        assert book.hooks_for("dungeon") == [
            "A mysterious event occurs in dungeon",
            "A stranger arrives in dungeon",
        ]

    def test_defaults_cover_standard_settings(self) -> None:
        book = HookBook.defaults()

        for setting in ("urban", "forest", "dungeon"):
            assert len(book.hooks_for(setting)) == 2


class TestLocalFeeds:
    """Tests for feeds read from disk."""

    def test_loads_and_skips_unnamed_records(self, tmp_path: Path) -> None:
        monsters = tmp_path / "monsters.json"
        monsters.write_text(
            json.dumps([{"name": "Goblin"}, {"Challenge": "1"}, {"name": ""}, {"name": "Orc"}]),
            encoding="utf-8",
        )
        library = ReferenceLibrary(ContentSettings(monsters_source=str(monsters)))

        entities = asyncio.run(library.monsters())

        assert [entity.name for entity in entities] == ["Goblin", "Orc"]

    def test_caches_once_loaded(self, library: ReferenceLibrary) -> None:
        """Test that each feed is read once per library."""

        async def load_twice() -> tuple[Any, Any]:
            return await library.monsters(), await library.monsters()

        first, second = asyncio.run(load_twice())
        asyncio.run(library.hooks())

        assert first is second
        assert library.is_loaded

    def test_bundled_feeds_load(self) -> None:
        library = ReferenceLibrary(ContentSettings())

        asyncio.run(library.load())

        assert library.is_loaded
        assert len(asyncio.run(library.monsters())) >= 10

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        """Test that a failed load substitutes defaults without caching them."""
        monsters = tmp_path / "later.json"
        library = ReferenceLibrary(ContentSettings(monsters_source=str(monsters)))

        fallback = asyncio.run(library.monsters())

        assert [entity.name for entity in fallback] == ["Goblin", "Orc", "Dragon"]
        assert fallback[2].get("difficulty") == "Hard"

        monsters.write_text(json.dumps([{"name": "Owlbear"}]), encoding="utf-8")

        assert [entity.name for entity in asyncio.run(library.monsters())] == ["Owlbear"]

    @pytest.mark.parametrize("content", [b'{"name": "Goblin"}', b"not json", b"\xff\xfe"])
    def test_malformed_monster_feed_uses_defaults(self, tmp_path: Path, content: bytes) -> None:
        monsters = tmp_path / "monsters.json"
        monsters.write_bytes(content)
        library = ReferenceLibrary(ContentSettings(monsters_source=str(monsters)))

        entities = asyncio.run(library.monsters())

        assert [entity.name for entity in entities] == ["Goblin", "Orc", "Dragon"]

    def test_malformed_hook_feed_uses_defaults(self, tmp_path: Path) -> None:
        hooks = tmp_path / "hooks.json"
        hooks.write_text(json.dumps({"hooks": "everywhere"}), encoding="utf-8")
        library = ReferenceLibrary(ContentSettings(hooks_source=str(hooks)))

        book = asyncio.run(library.hooks())

        assert book == HookBook.defaults()


class TestRemoteFeeds:
    """Tests for feeds fetched over HTTP."""

    def test_fetches_json(self, sample_monster_records: list[dict[str, Any]]) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert str(request.url) == MONSTERS_URL
            return httpx.Response(200, json=sample_monster_records)

        library = remote_library(handler)

        entities = asyncio.run(library.monsters())

        assert len(entities) == len(sample_monster_records)

    def test_retries_transport_errors(self) -> None:
        calls: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(1)
            if len(calls) == 1:
                raise httpx.ConnectError("refused", request=request)
            return httpx.Response(200, json=[{"name": "Goblin"}, {"name": "Orc"}])

        library = remote_library(handler, max_retries=2)

        entities = asyncio.run(library.monsters())

        assert len(calls) == 2
        assert [entity.name for entity in entities] == ["Goblin", "Orc"]

    def test_http_error_uses_defaults(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        library = remote_library(handler)

        entities = asyncio.run(library.monsters())
        book = asyncio.run(library.hooks())

        assert [entity.name for entity in entities] == ["Goblin", "Orc", "Dragon"]
        assert book == HookBook.defaults()
        assert not library.is_loaded


class TestGenerations:
    """Tests for invalidation and stale-load handling."""

    def test_invalidate_clears_cache(self, library: ReferenceLibrary) -> None:
        asyncio.run(library.load())
        assert library.is_loaded

        generation = library.invalidate()

        assert generation == 1
        assert library.generation == 1
        assert not library.is_loaded

    def test_stale_load_is_discarded(self) -> None:
        """Test that a response arriving after invalidation is never cached."""
        responses = iter(
            [
                [{"name": "Stale Goblin"}, {"name": "Stale Orc"}],
                [{"name": "Fresh Goblin"}, {"name": "Fresh Orc"}],
            ]
        )
        library: ReferenceLibrary

        def handler(request: httpx.Request) -> httpx.Response:
            body = next(responses)
            if body[0]["name"].startswith("Stale"):
                library.invalidate()
            return httpx.Response(200, json=body)

        library = remote_library(handler)

        entities = asyncio.run(library.monsters())

        assert [entity.name for entity in entities] == ["Fresh Goblin", "Fresh Orc"]
        assert library.generation == 1
