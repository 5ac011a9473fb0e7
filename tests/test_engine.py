"""
tests.test_engine

Resolution and search behavior of `PreferenceResolutionEngine` against an in-memory store.
"""

from __future__ import annotations

import json

import pytest

from prefstore.preferences.defaults import DefaultTree
from prefstore.preferences.engine import PreferenceResolutionEngine, as_options, encode_value
from prefstore.preferences.store import FieldMatch, PreferenceFilter


def _stored(store, key: str):
    rec = store.by_key(key)
    assert rec is not None
    return json.loads(rec.value)


@pytest.mark.asyncio
async def test_first_resolve_creates_record_with_default(store, engine) -> None:
    assert await engine.resolve("theme.color") == "blue"

    rec = store.by_key("theme")
    assert rec.value == '{"color":"blue"}'
    assert (store.creates, store.updates) == (1, 0)


@pytest.mark.asyncio
async def test_missing_sub_path_is_merged_back(store, engine) -> None:
    await engine.resolve("theme.color")

    assert await engine.resolve("theme.size") == "m"

    assert _stored(store, "theme") == {"color": "blue", "size": "m"}
    assert (store.creates, store.updates) == (1, 1)


@pytest.mark.asyncio
async def test_unknown_path_without_default_resolves_to_none(store, engine) -> None:
    assert await engine.resolve("missing.key") is None

    assert _stored(store, "missing") == {"key": None}
    # Create, then the null leaf still reads as absent and is merged once more.
    assert (store.creates, store.updates) == (1, 1)


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["theme.color", "missing.key"])
async def test_repeated_resolve_is_stable_and_writes_less(store, engine, path) -> None:
    first = await engine.resolve(path)
    first_writes = store.writes

    second = await engine.resolve(path)
    second_writes = store.writes - first_writes

    assert first == second
    assert second_writes < first_writes


@pytest.mark.asyncio
async def test_populated_record_needs_no_writes(store, engine) -> None:
    store.seed("theme", {"color": "green"})

    assert await engine.resolve("theme.color") == "green"
    assert store.writes == 0


@pytest.mark.asyncio
async def test_created_record_holds_only_the_requested_branch(store) -> None:
    defaults = DefaultTree(
        {
            "theme": {
                "color": "blue",
                "size": "m",
                "fonts": {"body": "serif", "title": "sans"},
            }
        }
    )
    engine = PreferenceResolutionEngine(store=store, defaults=defaults)

    assert await engine.resolve("theme.fonts.body") == "serif"

    assert _stored(store, "theme") == {"fonts": {"body": "serif"}}


@pytest.mark.asyncio
async def test_merge_back_keeps_unrelated_top_level_keys(store) -> None:
    store.seed("theme", {"color": "red", "layout": {"density": "compact"}})
    defaults = DefaultTree({"theme": {"layout": {"sidebar": "left"}}})
    engine = PreferenceResolutionEngine(store=store, defaults=defaults)

    assert await engine.resolve("theme.layout.sidebar") == "left"

    # `color` survives; the colliding `layout` branch is replaced, not deep-merged.
    assert _stored(store, "theme") == {"color": "red", "layout": {"sidebar": "left"}}


@pytest.mark.asyncio
async def test_stored_falsy_value_is_overwritten_by_truthy_default(store) -> None:
    store.seed("notifications", {"push": {"enabled": False}, "email": {"enabled": True}})
    defaults = DefaultTree({"notifications": {"push": {"enabled": True}}})
    engine = PreferenceResolutionEngine(store=store, defaults=defaults)

    assert await engine.resolve("notifications.push.enabled") is True
    assert _stored(store, "notifications") == {
        "push": {"enabled": True},
        "email": {"enabled": True},
    }


@pytest.mark.asyncio
@pytest.mark.parametrize("falsy", [False, 0])
async def test_falsy_value_is_merged_back_on_every_read(store, falsy) -> None:
    store.seed("limits", {"retries": falsy})
    defaults = DefaultTree({"limits": {"retries": falsy}})
    engine = PreferenceResolutionEngine(store=store, defaults=defaults)

    for expected_updates in (1, 2, 3):
        assert await engine.resolve("limits.retries") == falsy
        assert store.updates == expected_updates

    assert store.creates == 0


@pytest.mark.asyncio
async def test_root_path_resolves_whole_record(store, engine) -> None:
    assert await engine.resolve("theme") == {"color": "blue", "size": "m"}
    assert _stored(store, "theme") == {"color": "blue", "size": "m"}

    assert await engine.resolve("theme") == {"color": "blue", "size": "m"}
    assert store.writes == 1


@pytest.mark.asyncio
async def test_root_path_without_default_creates_empty_object(store, engine) -> None:
    assert await engine.resolve("ghost") == {}
    assert store.by_key("ghost").value == "{}"


@pytest.mark.asyncio
async def test_empty_path_does_not_touch_the_store(store, engine) -> None:
    assert await engine.resolve("") is None
    assert store.lookups == []


@pytest.mark.asyncio
async def test_undecodable_record_is_repaired(store, engine) -> None:
    store.seed("theme", "{not json")

    assert await engine.resolve("theme.color") == "blue"
    assert _stored(store, "theme") == {"color": "blue"}


@pytest.mark.asyncio
async def test_resolve_looks_up_root_key_exactly(store, engine) -> None:
    await engine.resolve("theme.color")

    assert store.lookups[0] == PreferenceFilter(clauses=(FieldMatch("key", "theme", exact=True),))


# --- search ---------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.parametrize("coincidence", [False, True])
async def test_single_key_search_ignores_coincidence(store, engine, coincidence) -> None:
    rec = store.seed("theme", {})

    found = await engine.search({"key": "theme"}, coincidence=coincidence)

    assert found is rec
    assert store.lookups[-1] == PreferenceFilter.single("key", "theme")


@pytest.mark.asyncio
async def test_single_key_search_case_insensitive(store, engine) -> None:
    rec = store.seed("theme", {})

    assert await engine.search({"key": "THEME"}) is None
    assert await engine.search({"key": "THEME"}, exact_match=False) is rec
    assert store.lookups[-1] == PreferenceFilter.single("key", "THEME", exact=False)


@pytest.mark.asyncio
async def test_case_insensitive_search_is_anchored(store, engine) -> None:
    store.seed("theme", {})

    assert await engine.search({"key": "THE"}, exact_match=False) is None


@pytest.mark.asyncio
async def test_id_search_uses_direct_lookup(store, engine) -> None:
    rec = store.seed("theme", {})

    assert await engine.search({"id": rec.id}, coincidence=True) is rec
    assert store.lookups[-1] == ("id", rec.id)


@pytest.mark.asyncio
async def test_without_coincidence_only_first_field_is_used(store, engine) -> None:
    rec = store.seed("theme", {})

    found = await engine.search({"key": "theme", "value": "nope"})

    assert found is rec
    assert store.lookups[-1] == PreferenceFilter.single("key", "theme")


@pytest.mark.asyncio
async def test_coincidence_search_ors_all_fields(store, engine) -> None:
    rec = store.seed("theme", encode_value({"color": "blue"}))

    found = await engine.search(
        {"key": "nope", "value": encode_value({"COLOR": "BLUE"})},
        coincidence=True,
        exact_match=False,
    )

    assert found is rec
    criteria = store.lookups[-1]
    assert criteria.any_of is True
    assert [c.field for c in criteria.clauses] == ["key", "value"]
    assert all(not c.exact for c in criteria.clauses)


@pytest.mark.asyncio
@pytest.mark.parametrize("coincidence", [False, True])
async def test_empty_search_returns_none(store, engine, coincidence) -> None:
    assert await engine.search({}, coincidence=coincidence) is None
    assert store.lookups == []


def test_as_options_drops_unset_fields_and_keeps_order() -> None:
    assert as_options(id=None, key="theme", value=None) == {"key": "theme"}
    assert list(as_options(value="{}", key="theme")) == ["value", "key"]
