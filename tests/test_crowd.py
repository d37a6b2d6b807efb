import random

from conftest import ScriptedRandom

from ring_director.crowd import (
    BEAT_MOMENTS,
    CHARACTER_CHANTS,
    MOMENT_REACTIONS,
    character_chant,
    dueling_chant,
    moment_reaction,
    should_crowd_react,
)


def test_character_chant(rng):
    assert character_chant("triple-h", rng) in CHARACTER_CHANTS["heel"]["triple-h"]
    assert character_chant("undertaker", rng) in CHARACTER_CHANTS["tweener"]["undertaker"]
    assert character_chant("hulk-hogan", rng) is None


def test_moment_reaction(rng):
    assert moment_reaction("title-change", rng) in MOMENT_REACTIONS["title-change"]
    assert moment_reaction("halftime", rng) is None


def test_beat_moments_point_at_reactions():
    assert set(BEAT_MOMENTS.values()) <= set(MOMENT_REACTIONS)


def test_dueling_chant_formats_both_names():
    expected = {
        "🗣️ *Cena!* / *Rocky!* / *Cena!* / *Rocky!*",
        "🗣️ *LET'S GO CENA!* / *ROCKY SUCKS!*",
        "🗣️ *The crowd is SPLIT! Half chanting for Cena, half for Rocky!*",
    }
    rng = random.Random(0)
    seen = {dueling_chant("Cena", "Rocky", rng) for _ in range(100)}
    assert seen == expected


def test_should_crowd_react():
    rng = ScriptedRandom([0.94, 0.96, 0.29, 0.31])
    assert should_crowd_react("title-change", rng)
    assert not should_crowd_react("title-change", rng)
    assert should_crowd_react("halftime", rng)
    assert not should_crowd_react("halftime", rng)
