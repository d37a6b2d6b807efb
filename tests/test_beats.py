import random

import pytest

from conftest import ScriptedRandom
from ring_director.beats import FEUD_BEATS, SURPRISE_BEATS, pick_beat, weighted_choice


# ── weighted_choice ─────────────────────────────────────────


def test_zero_draw_picks_first_item():
    assert weighted_choice([("a", 1), ("b", 3)], ScriptedRandom([0.0])) == "a"


def test_draw_landing_exactly_on_boundary_picks_earlier_item():
    # 0.25 * 4 = 1.0, minus weight 1 leaves 0, which selects "a"
    assert weighted_choice([("a", 1), ("b", 3)], ScriptedRandom([0.25])) == "a"


def test_draw_past_boundary_picks_next_item():
    assert weighted_choice([("a", 1), ("b", 3)], ScriptedRandom([0.26])) == "b"
    assert weighted_choice([("a", 1), ("b", 3)], ScriptedRandom([0.999])) == "b"


def test_empty_items_raise():
    with pytest.raises(ValueError):
        weighted_choice([], random.Random(1))


def test_same_seed_same_sequence():
    items = [("x", 5), ("y", 2), ("z", 1)]
    a, b = random.Random(99), random.Random(99)
    assert [weighted_choice(items, a) for _ in range(50)] == [weighted_choice(items, b) for _ in range(50)]


def test_weights_shape_the_distribution():
    items = [("common", 9), ("rare", 1)]
    rng = random.Random(5)
    picks = [weighted_choice(items, rng) for _ in range(2000)]
    assert 1650 < picks.count("common") < 1950


# ── catalogs ────────────────────────────────────────────────


def test_feud_catalog_weights_sum_to_100():
    assert sum(w for _, _, w in FEUD_BEATS) == 100
    assert sum(w for _, _, w in SURPRISE_BEATS) == 100


def test_pick_beat_walks_catalog_in_order():
    assert pick_beat(FEUD_BEATS, ScriptedRandom([0.0])) == "trash-talk"
    assert pick_beat(FEUD_BEATS, ScriptedRandom([0.36])) == "challenge"
    assert pick_beat(FEUD_BEATS, ScriptedRandom([0.99])) == "mind-games"


def test_pick_surprise_beat():
    assert pick_beat(SURPRISE_BEATS, ScriptedRandom([0.0])) == "entrance"
    assert pick_beat(SURPRISE_BEATS, ScriptedRandom([0.99])) == "run-in"
