"""
Group Allocator for the combined format.

Seeded players are spread across groups with serpentine seeding, then each
group gets its own round-robin schedule.
"""

from typing import Sequence

from engine.errors import InvalidSettings
from engine.round_robin import generate_round_robin
from engine.structures import Match


def group_names(num_groups: int) -> list[str]:
    """Group ids: A, B, C, ... then AA, AB, ... past Z."""
    names = []
    for i in range(num_groups):
        name = ""
        n = i
        while True:
            name = chr(ord("A") + n % 26) + name
            n = n // 26 - 1
            if n < 0:
                break
        names.append(name)
    return names


def allocate_groups(player_ids: Sequence[str], num_groups: int) -> dict[str, list[str]]:
    """
    Seed players into groups using serpentine seeding.

    Serpentine: top seeds spread across groups, then reverse direction
    for next row, creating balanced groups. Sizes differ by at most one.

    Example with 8 players, 2 groups:
    Group A: 1, 4, 5, 8
    Group B: 2, 3, 6, 7
    """
    if num_groups < 1:
        raise InvalidSettings(f"Need at least one group, got {num_groups}")

    names = group_names(num_groups)
    groups: dict[str, list[str]] = {name: [] for name in names}

    for start in range(0, len(player_ids), num_groups):
        row = start // num_groups
        order = names if row % 2 == 0 else list(reversed(names))
        for name, player_id in zip(order, player_ids[start:start + num_groups]):
            groups[name].append(player_id)

    return groups


def build_group_stage(groups: dict[str, list[str]]) -> list[Match]:
    """Round-robin matches for every group, tagged with the group id."""
    matches: list[Match] = []
    for group_id, members in groups.items():
        matches.extend(generate_round_robin(members, group_id=group_id))
    return matches
