import random
from functools import partial

import pytest

from fair_random import FairRandom
from persistence import CookieStore, WheelStore


def fixed_source(*values):
    """Entropy source that replays `values` and fails loudly when exhausted."""
    it = iter(values)

    def draw():
        try:
            return next(it)
        except StopIteration:
            raise AssertionError("entropy source drawn more often than expected")
    return draw


@pytest.fixture
def seeded_rng():
    return FairRandom(partial(random.Random(20240611).getrandbits, 32))


@pytest.fixture
def store(tmp_path):
    return WheelStore(CookieStore(str(tmp_path / "jar.json")))


class FakeStore:
    """Records saved snapshots instead of writing anything."""

    def __init__(self):
        self.saved = []

    def save(self, state):
        state.normalize()
        self.saved.append(state.to_record())


@pytest.fixture
def fake_store():
    return FakeStore()
