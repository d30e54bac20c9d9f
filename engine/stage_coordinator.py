"""
Stage Coordinator for combined tournaments.

Stays passive until every group match is terminal, then ranks each group,
collects the qualifiers and builds the knockout stage. The transition
happens once per tournament.
"""

import logging
import random
from typing import Optional

from config import TOURNAMENT_RULES, TournamentRules
from engine.knockout import build_knockout_bracket
from engine.standings import calculate_standings
from engine.structures import Match, Participant, Tournament
from models.tournament import TournamentFormat, TournamentStage

logger = logging.getLogger(__name__)


def group_members(tournament: Tournament, group_id: str) -> list[str]:
    """Members of a group in allocation order, recovered from its matches."""
    members: dict[str, None] = {}
    for match in tournament.matches:
        if match.group_id != group_id:
            continue
        for player_id in (match.player1_id, match.player2_id):
            if player_id is not None:
                members.setdefault(player_id, None)
    return list(members)


class StageCoordinator:
    """Moves a combined tournament from its group stage to its knockout stage."""

    def __init__(self, rules: TournamentRules = TOURNAMENT_RULES,
                 rng: Optional[random.Random] = None):
        self.rules = rules
        self.rng = rng

    def is_group_stage_complete(self, tournament: Tournament) -> bool:
        """Check if all group stage matches are terminal."""
        return all(m.is_terminal for m in tournament.group_matches)

    def should_advance(self, tournament: Tournament) -> bool:
        return (
            tournament.format is TournamentFormat.COMBINED
            and tournament.stage is TournamentStage.GROUP
            and self.is_group_stage_complete(tournament)
        )

    def qualifiers(self, tournament: Tournament) -> list[str]:
        """
        Top ``players_advancing`` of every group.

        Ordered group by group, then rank by rank, so the bracket builder
        always receives the same input for the same results.
        """
        advancing = tournament.settings.players_advancing or 1
        qualified = []
        for group_id in tournament.group_ids():
            members = group_members(tournament, group_id)
            group_matches = [m for m in tournament.matches if m.group_id == group_id]
            standings = calculate_standings(group_matches, members, self.rules)
            qualified.extend(row.player_id for row in standings[:advancing])
        return qualified

    def build_knockout_stage(self, tournament: Tournament) -> list[Match]:
        """Knockout matches for the current qualifiers."""
        participants = [
            Participant(id=player_id, average=tournament.player_ratings.get(player_id, 0.0))
            for player_id in self.qualifiers(tournament)
        ]
        return build_knockout_bracket(participants, tournament.settings.seeding, self.rng)

    def advance(self, tournament: Tournament) -> bool:
        """
        Run the group-to-knockout transition if it is due.

        Returns:
            True if the knockout stage was created by this call
        """
        if not self.should_advance(tournament):
            return False

        knockout = self.build_knockout_stage(tournament)
        tournament.matches = tournament.matches + tuple(knockout)
        tournament.stage = TournamentStage.KNOCKOUT

        logger.info(
            "Tournament %s: group stage complete, %d knockout matches created",
            tournament.id, len(knockout),
        )
        return True
