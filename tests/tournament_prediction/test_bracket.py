"""Tests for single-elimination bracket construction."""

import dataclasses

import pytest

from knockout_odds.core.constants import WORLD_CHAMPIONSHIP_BEST_OF
from knockout_odds.core.exceptions import ConfigurationError
from knockout_odds.tournament_prediction.bracket import (
    Bracket,
    BracketBuilder,
    Match,
    Round,
    build_bracket,
)


class TestBracketBuilder:
    """Test bracket structure and winner propagation links."""

    def setup_method(self):
        self.bracket = build_bracket(32, WORLD_CHAMPIONSHIP_BEST_OF)

    def test_round_sizes(self):
        assert self.bracket.num_rounds == 5
        assert [len(r) for r in self.bracket.rounds] == [16, 8, 4, 2, 1]
        assert self.bracket.num_entrants == 32
        assert self.bracket.num_matches == 31

    def test_match_indices_are_contiguous(self):
        indices = [m.index for m in self.bracket.matches]
        assert indices == list(range(31))
        for round_ in self.bracket.rounds:
            for position, match in enumerate(round_.matches):
                assert match.round_index == round_.index
                assert match.position == position

    def test_first_round_has_no_feeders(self):
        assert all(m.is_first_round for m in self.bracket.rounds[0].matches)

    def test_every_previous_match_feeds_exactly_once(self):
        for previous, current in zip(
            self.bracket.rounds, self.bracket.rounds[1:]
        ):
            referenced = []
            for match in current.matches:
                first, second = match.feeders
                assert first != second
                referenced.extend(match.feeders)
            assert sorted(referenced) == [m.index for m in previous.matches]

    def test_feeders_consume_previous_round_in_order(self):
        second_round = self.bracket.round(2)
        assert [m.feeders for m in second_round.matches[:3]] == [
            (0, 1),
            (2, 3),
            (4, 5),
        ]
        assert self.bracket.round(5).matches[0].feeders == (28, 29)

    def test_best_of_schedule(self):
        assert self.bracket.best_of == WORLD_CHAMPIONSHIP_BEST_OF
        assert self.bracket.round(1).best_of == 19
        assert self.bracket.round(5).best_of == 35

    def test_single_best_of_applies_to_every_round(self):
        bracket = BracketBuilder(best_of=7).build(8)
        assert bracket.best_of == (7, 7, 7)

    def test_default_best_of(self):
        assert build_bracket(4).best_of == (1, 1)

    def test_two_entrants(self):
        bracket = build_bracket(2)
        assert bracket.num_rounds == 1
        assert bracket.round_labels() == ("Final",)

    def test_round_labels(self):
        assert self.bracket.round_labels() == (
            "Last 32",
            "Last 16",
            "Quarter-final",
            "Semi-final",
            "Final",
        )

    def test_paths(self):
        bracket = build_bracket(8)
        assert bracket.path(0) == (0, 4, 6)
        assert bracket.path(1) == (0, 4, 6)
        assert bracket.path(5) == (2, 5, 6)
        assert bracket.path(7) == (3, 5, 6)

    def test_meeting_rounds(self):
        bracket = build_bracket(8)
        assert bracket.meeting_round(0, 1) == 1
        assert bracket.meeting_round(0, 3) == 2
        assert bracket.meeting_round(6, 5) == 2
        assert bracket.meeting_round(3, 4) == 3
        assert self.bracket.meeting_round(0, 31) == 5

    def test_meeting_round_needs_two_slots(self):
        with pytest.raises(ValueError):
            self.bracket.meeting_round(4, 4)

    def test_halves_meet_only_in_final(self):
        top = set(self.bracket.path(0))
        bottom = set(self.bracket.path(31))
        assert top & bottom == {30}

    @pytest.mark.parametrize("n", [0, 1, 3, 6, 24, 33, -4, 2.0, True])
    def test_invalid_entrant_counts(self, n):
        with pytest.raises(ConfigurationError):
            build_bracket(n)

    def test_schedule_length_mismatch(self):
        with pytest.raises(ConfigurationError, match="5 entries for 4 rounds"):
            build_bracket(16, WORLD_CHAMPIONSHIP_BEST_OF)

    def test_even_best_of_in_schedule(self):
        with pytest.raises(ConfigurationError):
            build_bracket(4, [3, 4])

    def test_round_lookup_bounds(self):
        with pytest.raises(IndexError):
            self.bracket.round(0)
        with pytest.raises(IndexError):
            self.bracket.round(6)

    def test_bracket_is_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            self.bracket.rounds = ()


class TestBracketValidation:
    """Test invariants enforced on hand-built brackets."""

    def _first_round(self):
        return Round(
            index=1,
            matches=(Match(0, 1, 0), Match(1, 1, 1)),
            best_of=3,
        )

    def test_valid_hand_built_bracket(self):
        final = Round(index=2, matches=(Match(2, 2, 0, (0, 1)),), best_of=5)
        bracket = Bracket(rounds=(self._first_round(), final))
        assert bracket.num_entrants == 4

    def test_duplicate_feeder_rejected(self):
        final = Round(index=2, matches=(Match(2, 2, 0, (0, 0)),), best_of=5)
        with pytest.raises(ConfigurationError, match="fed twice"):
            Bracket(rounds=(self._first_round(), final))

    def test_feeder_outside_previous_round_rejected(self):
        final = Round(index=2, matches=(Match(2, 2, 0, (0, 2)),), best_of=5)
        with pytest.raises(ConfigurationError, match="not in round 1"):
            Bracket(rounds=(self._first_round(), final))

    def test_missing_feeders_rejected(self):
        final = Round(index=2, matches=(Match(2, 2, 0),), best_of=5)
        with pytest.raises(ConfigurationError, match="no feeders"):
            Bracket(rounds=(self._first_round(), final))

    def test_non_halving_round_rejected(self):
        semis = Round(
            index=2,
            matches=(Match(2, 2, 0, (0, 1)), Match(3, 2, 1, (0, 1))),
            best_of=5,
        )
        with pytest.raises(ConfigurationError):
            Bracket(rounds=(self._first_round(), semis))

    def test_even_best_of_rejected(self):
        final = Round(index=2, matches=(Match(2, 2, 0, (0, 1)),), best_of=4)
        with pytest.raises(ConfigurationError):
            Bracket(rounds=(self._first_round(), final))
