"""Weighted beat catalogs and the selection primitive used throughout the engine.

weighted_choice() draws a single uniform value in [0, total) and subtracts
weights in catalog order until the running value goes non-positive. The
same seeded ``random.Random`` therefore always yields the same beat.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")

# (beat type, description, weight)
FEUD_BEATS: tuple[tuple[str, str, int], ...] = (
    ("trash-talk", "Characters exchange insults", 35),
    ("challenge", "One character challenges another", 15),
    ("alliance-tease", "Hint at a possible team-up", 10),
    ("backstory", "Reference past matches or history", 15),
    ("escalation", "The feud gets more intense", 15),
    ("mind-games", "Psychological warfare", 10),
)

SURPRISE_BEATS: tuple[tuple[str, str, int], ...] = (
    ("entrance", "New character makes a dramatic entrance", 30),
    ("interruption", "Character interrupts a conversation", 30),
    ("save", "Character saves someone from a beatdown", 15),
    ("betrayal", "Character turns on an ally", 10),
    ("return", "Character returns after being absent", 10),
    ("run-in", "Character attacks from behind", 5),
)


def weighted_choice(items: Sequence[tuple[T, float]], rng: random.Random) -> T:
    """Pick an item from (item, weight) pairs by sequential subtraction."""
    if not items:
        raise ValueError("weighted_choice() needs at least one item")
    total = sum(weight for _, weight in items)
    remaining = rng.random() * total
    for item, weight in items:
        remaining -= weight
        if remaining <= 0:
            return item
    return items[-1][0]


def pick_beat(catalog: Sequence[tuple[str, str, int]], rng: random.Random) -> str:
    """Weighted pick of a beat type from one of the catalogs above."""
    return weighted_choice([(beat, weight) for beat, _, weight in catalog], rng)
