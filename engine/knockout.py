"""
Knockout Bracket Builder

Seeds a roster, sizes a power-of-two bracket, hands byes to the top seeds
and links every round into a result-propagation tree.

Bracket positions:
    Round 1 has ``bracket_size / 2`` virtual positions. The first ``bye_count``
    positions belong to the bye seeds (they have no match), the rest hold the
    real round-1 matches. From round 2 on, a match's position is its index in
    the round. The match at position ``p`` feeds position ``p // 2`` of the
    next round, into player1 when ``p`` is even and player2 when odd.

Example with 5 players seeded 1-5 (bracket of 8, 3 byes):
    Round 1: pos 3 = seed 4 vs seed 5
    Round 2: pos 0 = seed 1 vs seed 2, pos 1 = seed 3 vs winner(4/5)
    Round 3: final
"""

import logging
import random
from typing import Optional, Sequence

from engine.errors import InvalidRosterSize
from engine.structures import Match, Participant
from models.tournament import SeedingMethod

logger = logging.getLogger(__name__)


def knockout_match_id(round_number: int, index: int) -> str:
    return f"ko-r{round_number}-{index}"


def seed_participants(
    participants: Sequence[Participant],
    seeding: SeedingMethod,
    rng: Optional[random.Random] = None,
) -> list[Participant]:
    """
    Order participants best seed first.

    RANDOM applies a Fisher-Yates shuffle; AVERAGE sorts by skill estimate,
    highest first, keeping roster order between equal averages.
    """
    players = list(participants)

    if seeding is SeedingMethod.RANDOM:
        rng = rng or random.Random()
        for i in range(len(players) - 1, 0, -1):
            j = rng.randint(0, i)
            players[i], players[j] = players[j], players[i]
    else:
        players.sort(key=lambda p: p.average, reverse=True)

    return players


def bracket_size_for(num_players: int) -> int:
    """Smallest power of two that holds ``num_players``."""
    return 1 << (num_players - 1).bit_length()


def build_knockout_bracket(
    participants: Sequence[Participant],
    seeding: SeedingMethod,
    rng: Optional[random.Random] = None,
) -> list[Match]:
    """
    Build the complete match tree for one knockout stage.

    Args:
        participants: Roster to seed
        seeding: RANDOM or AVERAGE
        rng: Random source for RANDOM seeding

    Returns:
        Matches ordered round by round, position by position
    """
    num_players = len(participants)
    if num_players < 2:
        raise InvalidRosterSize(f"Knockout needs at least 2 players, got {num_players}")

    seeded = seed_participants(participants, seeding, rng)
    bracket_size = bracket_size_for(num_players)
    bye_count = bracket_size - num_players
    total_rounds = bracket_size.bit_length() - 1

    bye_seeds = seeded[:bye_count]
    round1_players = seeded[bye_count:]

    # Pre-filled round-2 slots for the bye seeds: position k feeds match k // 2
    prefilled: dict[tuple[int, int], str] = {}
    for position, player in enumerate(bye_seeds):
        prefilled[(position // 2, position % 2)] = player.id

    matches: list[Match] = []

    # Round 1: high seed vs low seed among those without a bye
    for i in range(len(round1_players) // 2):
        position = bye_count + i
        matches.append(Match(
            id=knockout_match_id(1, i),
            player1_id=round1_players[i].id,
            player2_id=round1_players[-1 - i].id,
            round=1,
            next_match_id=(
                knockout_match_id(2, position // 2) if total_rounds > 1 else None
            ),
        ))

    for round_number in range(2, total_rounds + 1):
        for index in range(bracket_size >> round_number):
            matches.append(Match(
                id=knockout_match_id(round_number, index),
                player1_id=prefilled.get((index, 0)) if round_number == 2 else None,
                player2_id=prefilled.get((index, 1)) if round_number == 2 else None,
                round=round_number,
                next_match_id=(
                    knockout_match_id(round_number + 1, index // 2)
                    if round_number < total_rounds else None
                ),
            ))

    logger.debug(
        "Built knockout bracket: %d players, size %d, %d byes, %d rounds",
        num_players, bracket_size, bye_count, total_rounds,
    )
    return matches


def bracket_position(matches: Sequence[Match], match: Match) -> int:
    """
    Position of a knockout match within its round.

    Works from the schedule alone, so it holds for a reloaded tournament too.
    """
    same_round = [m.id for m in matches if m.round == match.round]
    index = same_round.index(match.id)

    if match.round == 1:
        round2_count = sum(1 for m in matches if m.round == 2)
        if round2_count:
            # Byes occupy the leading round-1 positions
            return 2 * round2_count - len(same_round) + index
    return index


def winner_slot(matches: Sequence[Match], match: Match) -> int:
    """Slot (0 = player1, 1 = player2) this match's winner takes in the next match."""
    return bracket_position(matches, match) % 2


def final_round(matches: Sequence[Match]) -> Optional[int]:
    rounds = [m.round for m in matches if m.round is not None]
    return max(rounds) if rounds else None


def final_match(matches: Sequence[Match]) -> Optional[Match]:
    last = final_round(matches)
    if last is None:
        return None
    return next(m for m in matches if m.round == last)
