import random

import pytest

from ring_director.characters import CharacterRegistry
from ring_director.engine import Promotion


class ScriptedRandom(random.Random):
    """A Random whose random() replays queued values, then falls back to the seed."""

    def __init__(self, values=(), seed: int = 0) -> None:
        super().__init__(seed)
        self.queue = list(values)

    def push(self, *values: float) -> None:
        self.queue.extend(values)

    def random(self) -> float:
        if self.queue:
            return self.queue.pop(0)
        return super().random()

    # Defining getrandbits keeps choice()/randint()/sample() on the seeded
    # stream instead of the queue.
    def getrandbits(self, k: int) -> int:
        return super().getrandbits(k)


class FakeClock:
    """Epoch-millisecond clock that only moves when told to."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def registry():
    return CharacterRegistry()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def state_dir(tmp_path):
    return tmp_path / "storyline"


@pytest.fixture
def promotion(state_dir, registry, rng, clock):
    p = Promotion(state_dir=state_dir, registry=registry, rng=rng, clock=clock)
    yield p
    if p.writer is not None:
        p.writer.close()
