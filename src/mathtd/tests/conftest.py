import random

import pytest

from mathtd.core.maths import MathsManager
from mathtd.core.model.state import GameState, new_game_state


@pytest.fixture
def state() -> GameState:
    return new_game_state(seed=7)


@pytest.fixture
def maths() -> MathsManager:
    return MathsManager(rng=random.Random(11))
