"""Tests for program models and pool resolution."""

import pytest
from pydantic import ValidationError

from channel_lineup.errors import InvalidScheduleError
from channel_lineup.programs import PoolResolver, Program, SlotSelector, coerce_programs, resolve


@pytest.fixture
def pool():
    return [
        Program(id="m1", duration_ms=100, kind="movie"),
        Program(id="m2", duration_ms=100, kind="movie.feature"),
        Program(id="x1", duration_ms=100, kind="movies"),
        Program(id="e1", duration_ms=100, kind="episode", group_key="bluey"),
        Program(id="c1", duration_ms=100, kind="custom", group_key="bluey"),
        Program(id="c2", duration_ms=100, kind="custom", group_key="favorites", index=2),
        Program(id="m1", duration_ms=100, kind="movie"),
    ]


def test_kind_prefix_matches_category_and_children(pool):
    """'movie.' matches movie and movie.* but not movies."""
    selector = SlotSelector.model_validate("movie.")

    ids = [p.id for p in resolve(pool, selector)]

    assert ids == ["m1", "m2", "m1"]


def test_show_selector_excludes_custom_shows(pool):
    selector = SlotSelector.model_validate("show.bluey")

    assert [p.id for p in resolve(pool, selector)] == ["e1"]


def test_custom_show_selector(pool):
    selector = SlotSelector.model_validate("custom-show.bluey")

    assert [p.id for p in resolve(pool, selector)] == ["c1"]


def test_flex_and_redirect_match_nothing(pool):
    assert resolve(pool, SlotSelector.model_validate("flex")) == []
    redirect = SlotSelector.model_validate("redirect.ch2")
    assert redirect.channel_id == "ch2"
    assert resolve(pool, redirect) == []


def test_no_match_is_empty_not_error(pool):
    selector = SlotSelector(type="show", value="missing")

    assert resolve(pool, selector) == []


def test_selector_accepts_camel_case():
    selector = SlotSelector.model_validate({"type": "redirect", "channelId": "ch9"})

    assert selector.channel_id == "ch9"


def test_selector_requires_value():
    with pytest.raises(ValidationError):
        SlotSelector(type="show")
    with pytest.raises(ValidationError):
        SlotSelector(type="redirect")


def test_resolver_deduplicates_and_caches(pool):
    resolver = PoolResolver(pool)
    selector = SlotSelector.model_validate("movie")

    first = resolver.candidates(selector)

    assert [p.id for p in first] == ["m1", "m2"]
    assert resolver.candidates(selector) is first


def test_program_camel_case_fields():
    program = Program.model_validate({"id": "a", "durationMs": 5, "groupKey": "g"})

    assert program.duration_ms == 5
    assert program.group_key == "g"


def test_order_key_sorts_by_season_then_episode():
    later = Program(id="b", duration_ms=1, season=1, episode=10)
    earlier = Program(id="a", duration_ms=1, season=1, episode=2)
    next_season = Program(id="c", duration_ms=1, season=2, episode=1)

    assert sorted([next_season, later, earlier], key=lambda p: p.order_key) == [earlier, later, next_season]


def test_coerce_programs_rejects_non_positive_duration():
    with pytest.raises(InvalidScheduleError) as exc_info:
        coerce_programs([{"id": "ok", "duration_ms": 10}, {"id": "bad", "duration_ms": 0}])

    assert "Program 1" in str(exc_info.value)
    assert exc_info.value.errors
