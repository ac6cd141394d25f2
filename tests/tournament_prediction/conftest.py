import pytest

from knockout_odds.core.constants import WORLD_CHAMPIONSHIP_BEST_OF
from knockout_odds.tournament_prediction.bracket import build_bracket


@pytest.fixture
def world_championship_field():
    """32 entrants rated 0.7 (P01) down to 0.3 (P32), paired in order."""
    names = [f"P{i:02d}" for i in range(1, 33)]
    ratings = {
        name: 0.3 + 0.4 * i / 31 for i, name in enumerate(reversed(names))
    }
    fixture = [(names[i], names[i + 1]) for i in range(0, 32, 2)]
    return ratings, fixture


@pytest.fixture
def world_championship_bracket():
    return build_bracket(32, WORLD_CHAMPIONSHIP_BEST_OF)
