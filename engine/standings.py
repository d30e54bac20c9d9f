"""
Standings calculator for round-robin pools.

The ranking decides knockout seeding and combined-format qualification, so
ties are always broken the same way: points, then score differential, then
wins, then pool order.
"""

from dataclasses import dataclass
from typing import Iterable, Sequence

from config import TOURNAMENT_RULES, TournamentRules
from engine.structures import Match, StandingRow
from models.tournament import MatchStatus


@dataclass
class _Tally:
    played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    points: int = 0
    score_differential: int = 0


def calculate_standings(
    matches: Iterable[Match],
    player_ids: Sequence[str],
    rules: TournamentRules = TOURNAMENT_RULES,
) -> list[StandingRow]:
    """
    Rank the participants of one pool.

    Args:
        matches: Matches of the pool; only completed ones count
        player_ids: Pool participants, in roster order
        rules: Points awarded per win and per draw

    Returns:
        StandingRow list, best first
    """
    tallies = {player_id: _Tally() for player_id in player_ids}

    for match in matches:
        if match.status is not MatchStatus.COMPLETED or match.result is None:
            continue
        if match.player1_id not in tallies or match.player2_id not in tallies:
            continue

        result = match.result
        home = tallies[match.player1_id]
        away = tallies[match.player2_id]

        home.played += 1
        away.played += 1
        home.score_differential += result.player1_score - result.player2_score
        away.score_differential += result.player2_score - result.player1_score

        if result.winner_id is None:
            for tally in (home, away):
                tally.draws += 1
                tally.points += rules.points_per_draw
        else:
            winner, loser = (home, away) if result.winner_id == match.player1_id else (away, home)
            winner.wins += 1
            winner.points += rules.points_per_win
            loser.losses += 1

    rows = [
        StandingRow(
            player_id=player_id,
            played=t.played,
            wins=t.wins,
            draws=t.draws,
            losses=t.losses,
            points=t.points,
            score_differential=t.score_differential,
        )
        for player_id, t in tallies.items()
    ]

    # sorted() is stable, so full ties keep pool order
    return sorted(
        rows,
        key=lambda r: (r.points, r.score_differential, r.wins),
        reverse=True,
    )
