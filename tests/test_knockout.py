"""
Tests for the Knockout Bracket Builder

Tests seeding, bracket sizing, byes, round linking and slot parity.
"""

import random

import pytest

from engine.errors import InvalidRosterSize
from engine.knockout import (
    bracket_position,
    bracket_size_for,
    build_knockout_bracket,
    final_match,
    seed_participants,
    winner_slot,
)
from engine.structures import Participant
from models.tournament import MatchStatus, SeedingMethod


def roster(size: int) -> list[Participant]:
    """Players p1..pN with strictly decreasing averages (p1 is the best)."""
    return [Participant(id=f"p{i}", average=100 - i) for i in range(1, size + 1)]


def by_round(matches, round_number):
    return [m for m in matches if m.round == round_number]


class TestSeeding:
    """Tests for participant ordering."""

    def test_average_seeding_sorts_descending(self):
        players = [
            Participant("low", 50), Participant("high", 90), Participant("mid", 70),
        ]
        seeded = seed_participants(players, SeedingMethod.AVERAGE)

        assert [p.id for p in seeded] == ["high", "mid", "low"]

    def test_average_seeding_keeps_roster_order_on_ties(self):
        players = [Participant("a", 60), Participant("b", 60), Participant("c", 80)]
        seeded = seed_participants(players, SeedingMethod.AVERAGE)

        assert [p.id for p in seeded] == ["c", "a", "b"]

    def test_random_seeding_is_a_permutation(self):
        players = roster(9)
        seeded = seed_participants(players, SeedingMethod.RANDOM, random.Random(3))

        assert sorted(p.id for p in seeded) == sorted(p.id for p in players)

    def test_random_seeding_reproducible_with_seeded_rng(self):
        players = roster(9)
        first = seed_participants(players, SeedingMethod.RANDOM, random.Random(42))
        second = seed_participants(players, SeedingMethod.RANDOM, random.Random(42))

        assert first == second

    def test_seeding_does_not_mutate_input(self):
        players = roster(5)
        original = list(players)
        seed_participants(players, SeedingMethod.RANDOM, random.Random(1))

        assert players == original


class TestBracketStructure:
    """Tests for bracket sizing, byes and linking."""

    @pytest.mark.parametrize("size,expected", [(2, 2), (3, 4), (4, 4), (5, 8), (8, 8), (9, 16), (17, 32)])
    def test_bracket_size(self, size, expected):
        assert bracket_size_for(size) == expected

    @pytest.mark.parametrize("size", range(2, 20))
    def test_n_minus_one_matches(self, size):
        """Exactly n - 1 matches decide a single winner."""
        matches = build_knockout_bracket(roster(size), SeedingMethod.AVERAGE)

        assert len(matches) == size - 1
        assert all(m.status == MatchStatus.PENDING for m in matches)

    @pytest.mark.parametrize("size", range(2, 20))
    def test_links_point_to_next_round(self, size):
        """Every non-final match feeds a match exactly one round later."""
        matches = build_knockout_bracket(roster(size), SeedingMethod.AVERAGE)
        by_id = {m.id: m for m in matches}
        final = final_match(matches)

        for match in matches:
            if match is final:
                assert match.next_match_id is None
            else:
                target = by_id[match.next_match_id]
                assert target.round == match.round + 1

    @pytest.mark.parametrize("size", range(3, 20))
    def test_every_slot_fed_exactly_once(self, size):
        """Each later-round slot is filled either by a bye seed or by one feeder match."""
        matches = build_knockout_bracket(roster(size), SeedingMethod.AVERAGE)

        for target in [m for m in matches if m.round > 1]:
            feeders = [m for m in matches if m.next_match_id == target.id]
            slots = [winner_slot(matches, f) for f in feeders]
            assert len(slots) == len(set(slots))

            filled = [target.player1_id, target.player2_id]
            for slot in (0, 1):
                assert (filled[slot] is not None) != (slot in slots)

    def test_two_players_single_final(self):
        matches = build_knockout_bracket(roster(2), SeedingMethod.AVERAGE)

        assert len(matches) == 1
        assert matches[0].round == 1
        assert matches[0].next_match_id is None
        assert {matches[0].player1_id, matches[0].player2_id} == {"p1", "p2"}

    def test_power_of_two_has_no_byes(self):
        """8 players: round 1 pairs 1v8, 2v7, 3v6, 4v5 and later rounds are empty."""
        matches = build_knockout_bracket(roster(8), SeedingMethod.AVERAGE)
        round1 = by_round(matches, 1)

        assert [(m.player1_id, m.player2_id) for m in round1] == [
            ("p1", "p8"), ("p2", "p7"), ("p3", "p6"), ("p4", "p5"),
        ]
        for match in matches:
            if match.round > 1:
                assert match.player1_id is None and match.player2_id is None

    def test_five_players_example(self):
        """Bracket of 8 with 3 byes: seeds 1-3 skip round 1, seed 4 plays seed 5."""
        players = [Participant(f"s{i}", avg) for i, avg in enumerate([90, 80, 70, 60, 50], start=1)]
        matches = build_knockout_bracket(list(reversed(players)), SeedingMethod.AVERAGE)

        round1 = by_round(matches, 1)
        round2 = by_round(matches, 2)
        round3 = by_round(matches, 3)

        assert len(round1) == 1
        assert (round1[0].player1_id, round1[0].player2_id) == ("s4", "s5")
        assert len(round2) == 2
        assert (round2[0].player1_id, round2[0].player2_id) == ("s1", "s2")
        assert (round2[1].player1_id, round2[1].player2_id) == ("s3", None)
        assert len(round3) == 1

        # Winner of seed 4 vs seed 5 fills the open slot of the second round-2 match
        assert round1[0].next_match_id == round2[1].id
        assert bracket_position(matches, round1[0]) == 3
        assert winner_slot(matches, round1[0]) == 1

    def test_three_players_one_bye(self):
        matches = build_knockout_bracket(roster(3), SeedingMethod.AVERAGE)
        round1 = by_round(matches, 1)
        final = final_match(matches)

        assert (round1[0].player1_id, round1[0].player2_id) == ("p2", "p3")
        assert (final.player1_id, final.player2_id) == ("p1", None)
        assert winner_slot(matches, round1[0]) == 1

    def test_bye_seeds_never_play_round_one(self):
        matches = build_knockout_bracket(roster(6), SeedingMethod.AVERAGE)
        round1_players = {
            pid for m in by_round(matches, 1) for pid in (m.player1_id, m.player2_id)
        }

        assert round1_players == {"p3", "p4", "p5", "p6"}

    def test_match_ids_unique(self):
        matches = build_knockout_bracket(roster(13), SeedingMethod.AVERAGE)
        assert len({m.id for m in matches}) == len(matches)

    @pytest.mark.parametrize("size", [0, 1])
    def test_too_few_players_raises(self, size):
        with pytest.raises(InvalidRosterSize):
            build_knockout_bracket(roster(size), SeedingMethod.AVERAGE)
