"""
Tests for the Round-Robin Generator
"""

from itertools import combinations

import pytest

from engine.errors import InvalidRosterSize
from engine.round_robin import generate_round_robin
from models.tournament import MatchStatus


class TestRoundRobinGenerator:
    """Tests for all-pairs schedule generation."""

    @pytest.mark.parametrize("size", [2, 3, 4, 7, 10])
    def test_every_pair_exactly_once(self, size):
        """n players produce n*(n-1)/2 matches covering each pair once."""
        players = [f"p{i}" for i in range(size)]
        matches = generate_round_robin(players)

        assert len(matches) == size * (size - 1) // 2
        pairs = {frozenset((m.player1_id, m.player2_id)) for m in matches}
        assert pairs == {frozenset(p) for p in combinations(players, 2)}

    def test_stable_order(self):
        """Pairs follow (i, j) order with i < j."""
        matches = generate_round_robin(["a", "b", "c", "d"])

        assert [(m.player1_id, m.player2_id) for m in matches] == [
            ("a", "b"), ("a", "c"), ("a", "d"),
            ("b", "c"), ("b", "d"),
            ("c", "d"),
        ]

    def test_matches_are_pending_without_bracket_fields(self):
        """Round-robin matches carry no round, link or group."""
        for match in generate_round_robin(["a", "b", "c"]):
            assert match.status == MatchStatus.PENDING
            assert match.result is None
            assert match.round is None
            assert match.next_match_id is None
            assert match.group_id is None

    def test_group_id_stamped(self):
        """A group id is stamped on every match and keeps ids distinct per group."""
        group_a = generate_round_robin(["a", "b", "c"], group_id="A")
        group_b = generate_round_robin(["d", "e", "f"], group_id="B")

        assert all(m.group_id == "A" for m in group_a)
        assert not {m.id for m in group_a} & {m.id for m in group_b}

    def test_unique_ids(self):
        matches = generate_round_robin([f"p{i}" for i in range(8)])
        assert len({m.id for m in matches}) == len(matches)

    @pytest.mark.parametrize("players", [[], ["solo"]])
    def test_too_few_players_raises(self, players):
        """The generator itself needs at least two players."""
        with pytest.raises(InvalidRosterSize):
            generate_round_robin(players)
