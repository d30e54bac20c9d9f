"""Round-robin schedule generation: every participant meets every other once."""

from typing import Optional, Sequence

from engine.errors import InvalidRosterSize
from engine.structures import Match


def round_robin_match_id(i: int, j: int, group_id: Optional[str] = None) -> str:
    if group_id is None:
        return f"rr-{i}-{j}"
    return f"group-{group_id}-{i}-{j}"


def generate_round_robin(
    player_ids: Sequence[str],
    group_id: Optional[str] = None,
) -> list[Match]:
    """
    Generate one pending match per unordered pair of participants.

    Pairs are emitted in (i, j) order with i < j, so the schedule is
    reproducible for a given roster order. Format minimums are checked by
    the caller; any roster of two or more is accepted here.

    Args:
        player_ids: Participants in roster order
        group_id: Group tag stamped on every match (combined format)
    """
    if len(player_ids) < 2:
        raise InvalidRosterSize(
            f"Round-robin needs at least 2 players, got {len(player_ids)}"
        )

    matches = []
    for i, player1_id in enumerate(player_ids):
        for j in range(i + 1, len(player_ids)):
            matches.append(Match(
                id=round_robin_match_id(i, j, group_id),
                player1_id=player1_id,
                player2_id=player_ids[j],
                group_id=group_id,
            ))
    return matches
