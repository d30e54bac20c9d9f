"""
Tournament Engine

Owns one Tournament aggregate: generates its schedule at creation, applies
match results one at a time, moves combined tournaments from the group stage
to the knockout stage and reports standings.

Every check runs before anything is changed, so a call that raises leaves the
tournament untouched.
"""

import logging
import random
import uuid
from dataclasses import asdict, replace
from typing import Any, Optional, Sequence, Union

from pydantic import ValidationError
from PySide6.QtCore import QObject, Signal

from config import TOURNAMENT_RULES, TournamentRules
from engine.errors import (
    GroupNotFound,
    IncompletePairing,
    InvalidResult,
    InvalidRoster,
    InvalidRosterSize,
    InvalidSettings,
    MatchAlreadyCompleted,
    MatchNotFound,
    NotApplicable,
    TournamentError,
    TournamentNotFound,
)
from engine.groups import allocate_groups, build_group_stage
from engine.knockout import build_knockout_bracket, final_match, seed_participants, winner_slot
from engine.round_robin import generate_round_robin
from engine.stage_coordinator import StageCoordinator, group_members
from engine.standings import calculate_standings
from engine.structures import Match, MatchResult, Participant, StandingRow, Tournament
from models.schemas import MatchResultSchema, MatchSchema, TournamentSchema, TournamentSettings
from models.tournament import (
    MatchStatus,
    TournamentFormat,
    TournamentRecord,
    TournamentStage,
    TournamentStatus,
)

logger = logging.getLogger(__name__)


class TournamentEngine(QObject):
    """
    State machine for a single tournament.

    Usage:
        engine = TournamentEngine.create(roster, settings)
        engine.record_result(match_id, 7, 4)
        engine.standings(group_id="A")
    """

    # Signals
    match_completed = Signal(dict)  # match details
    stage_changed = Signal(str)  # new stage value
    tournament_completed = Signal(dict)  # final results
    bracket_updated = Signal()  # schedule changed

    def __init__(
        self,
        tournament: Tournament,
        rules: TournamentRules = TOURNAMENT_RULES,
        rng: Optional[random.Random] = None,
    ):
        super().__init__()
        self._tournament = tournament
        self.rules = rules
        self._coordinator = StageCoordinator(rules, rng)

    @property
    def tournament(self) -> Tournament:
        return self._tournament

    @property
    def tournament_id(self) -> str:
        return self._tournament.id

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        roster: Sequence[Participant],
        settings: Union[TournamentSettings, dict],
        name: str = "",
        tournament_id: Optional[str] = None,
        rules: TournamentRules = TOURNAMENT_RULES,
        rng: Optional[random.Random] = None,
    ) -> "TournamentEngine":
        """
        Validate the roster and settings and generate the initial schedule.

        Args:
            roster: Participants in roster order
            settings: TournamentSettings or its camelCase/snake_case dict form
            name: Display name
            tournament_id: Id to use; a fresh one is generated when omitted
            rules: Format minimums and standings points
            rng: Random source for RANDOM seeding

        Raises:
            InvalidSettings: settings are malformed or inconsistent with the roster
            InvalidRosterSize: roster too small or too large for the format
            InvalidRoster: duplicate participant ids
        """
        settings = cls._parse_settings(settings)
        cls._validate_roster(roster, settings, rules)

        rng = rng or random.Random()
        player_ids = tuple(p.id for p in roster)

        if settings.format is TournamentFormat.ROUND_ROBIN:
            matches = generate_round_robin(player_ids)
            stage = None
        elif settings.format is TournamentFormat.KNOCKOUT:
            matches = build_knockout_bracket(roster, settings.seeding, rng)
            stage = None
        else:
            seeded = seed_participants(roster, settings.seeding, rng)
            groups = allocate_groups([p.id for p in seeded], settings.num_groups)
            matches = build_group_stage(groups)
            stage = TournamentStage.GROUP

        tournament = Tournament(
            id=tournament_id or uuid.uuid4().hex,
            name=name,
            player_ids=player_ids,
            format=settings.format,
            settings=settings,
            matches=tuple(matches),
            stage=stage,
            player_ratings={p.id: p.average for p in roster},
        )

        logger.info(
            "Created %s tournament %s with %d players and %d matches",
            settings.format.value, tournament.id, len(player_ids), len(matches),
        )
        return cls(tournament, rules=rules, rng=rng)

    @staticmethod
    def _parse_settings(settings: Union[TournamentSettings, dict]) -> TournamentSettings:
        if isinstance(settings, TournamentSettings):
            return settings
        try:
            return TournamentSettings.model_validate(settings)
        except ValidationError as e:
            raise InvalidSettings(f"Invalid tournament settings: {e}") from e

    @staticmethod
    def _validate_roster(
        roster: Sequence[Participant],
        settings: TournamentSettings,
        rules: TournamentRules,
    ) -> None:
        num_players = len(roster)
        ids = [p.id for p in roster]
        if len(set(ids)) != num_players:
            raise InvalidRoster("Roster contains duplicate participant ids")

        if settings.format is TournamentFormat.ROUND_ROBIN:
            minimum = rules.min_round_robin_players
            maximum = rules.max_round_robin_players
        elif settings.format is TournamentFormat.KNOCKOUT:
            minimum = rules.min_knockout_players
            maximum = rules.max_knockout_players
        else:
            minimum = max(
                rules.min_combined_players,
                settings.num_groups * rules.min_players_per_group,
            )
            maximum = rules.max_combined_players

        if num_players < minimum:
            raise InvalidRosterSize(
                f"{settings.format.value} needs at least {minimum} players, got {num_players}"
            )
        if num_players > maximum:
            raise InvalidRosterSize(
                f"{settings.format.value} allows at most {maximum} players, got {num_players}"
            )

        if settings.format is TournamentFormat.COMBINED:
            smallest_group = num_players // settings.num_groups
            if settings.players_advancing >= smallest_group:
                raise InvalidSettings(
                    f"playersAdvancing ({settings.players_advancing}) must be less than "
                    f"the smallest group size ({smallest_group})"
                )

    # -------------------------------------------------------------------------
    # Results
    # -------------------------------------------------------------------------

    def record_result(self, match_id: str, score1: int, score2: int) -> Match:
        """
        Record the final score of a match.

        The winner moves into the next knockout match; a combined tournament
        whose group stage just finished gets its knockout bracket.

        Returns:
            The completed match

        Raises:
            MatchNotFound, MatchAlreadyCompleted, IncompletePairing, InvalidResult
        """
        tournament = self._tournament
        match = tournament.find_match(match_id)

        if match is None:
            raise self._rejected(MatchNotFound(f"Match not found: {match_id}"))
        if match.is_terminal:
            raise self._rejected(MatchAlreadyCompleted(
                f"Match {match_id} is already {match.status.value}"
            ))
        if not match.is_paired:
            raise self._rejected(IncompletePairing(
                f"Match {match_id} does not have both players yet"
            ))
        for score in (score1, score2):
            if isinstance(score, bool) or not isinstance(score, int) or score < 0:
                raise self._rejected(InvalidResult(
                    f"Scores must be non-negative integers, got {score1!r}-{score2!r}"
                ))
        if score1 == score2 and match.is_knockout:
            raise self._rejected(InvalidResult(
                f"Knockout match {match_id} cannot end in a draw"
            ))
        if match.next_match_id is not None and tournament.find_match(match.next_match_id) is None:
            raise self._rejected(MatchNotFound(
                f"Match {match_id} feeds unknown match {match.next_match_id}"
            ))

        if score1 > score2:
            winner_id = match.player1_id
        elif score2 > score1:
            winner_id = match.player2_id
        else:
            winner_id = None

        completed = replace(
            match,
            status=MatchStatus.COMPLETED,
            result=MatchResult(score1, score2, winner_id),
        )
        updates = {completed.id: completed}

        # Advance winner to next round
        if completed.next_match_id is not None and winner_id is not None:
            target = tournament.find_match(completed.next_match_id)
            slot = winner_slot(tournament.matches, match)
            updates[target.id] = target.with_slot(slot, winner_id)

        tournament.matches = tuple(updates.get(m.id, m) for m in tournament.matches)
        logger.debug("Tournament %s: %s finished %d-%d", tournament.id, match_id, score1, score2)

        self.match_completed.emit({
            "tournament_id": tournament.id,
            "match_id": match_id,
            "round": completed.round,
            "group_id": completed.group_id,
            "winner_id": winner_id,
            "loser_id": completed.loser_id,
            "player1_score": score1,
            "player2_score": score2,
        })

        if self._coordinator.advance(tournament):
            self.stage_changed.emit(tournament.stage.value)

        self._update_status()
        self.bracket_updated.emit()
        return completed

    def _rejected(self, error: TournamentError) -> TournamentError:
        logger.warning("Tournament %s: rejected operation: %s", self._tournament.id, error)
        return error

    def _update_status(self) -> None:
        tournament = self._tournament
        if tournament.status is TournamentStatus.COMPLETED:
            return

        if self._is_finished():
            tournament.status = TournamentStatus.COMPLETED
            logger.info("Tournament %s completed, winner %s", tournament.id, self.winner_id)
            self.tournament_completed.emit({
                "tournament_id": tournament.id,
                "winner_id": self.winner_id,
            })

    def _is_finished(self) -> bool:
        tournament = self._tournament
        if tournament.format is TournamentFormat.ROUND_ROBIN:
            return all(m.is_terminal for m in tournament.matches)

        if (tournament.format is TournamentFormat.COMBINED
                and tournament.stage is not TournamentStage.KNOCKOUT):
            return False

        final = final_match(tournament.knockout_matches)
        return final is not None and final.status is MatchStatus.COMPLETED

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def is_completed(self) -> bool:
        return self._tournament.status is TournamentStatus.COMPLETED

    @property
    def winner_id(self) -> Optional[str]:
        """
        Tournament winner once completed.

        Knockout and combined: the winner of the final.
        Round-robin: the top row of the standings.
        """
        tournament = self._tournament
        if tournament.format is TournamentFormat.ROUND_ROBIN:
            if not all(m.is_terminal for m in tournament.matches):
                return None
            return self.standings()[0].player_id

        final = final_match(tournament.knockout_matches)
        if final is None or final.result is None:
            return None
        return final.result.winner_id

    def get_match(self, match_id: str) -> Optional[Match]:
        """Get a specific match by ID."""
        return self._tournament.find_match(match_id)

    def upcoming_matches(self) -> list[Match]:
        """Pending matches whose two players are known."""
        return [m for m in self._tournament.matches if m.is_playable]

    def group_ids(self) -> list[str]:
        return self._tournament.group_ids()

    def standings(self, group_id: Optional[str] = None) -> list[StandingRow]:
        """
        Ranked standings of a round-robin pool.

        Args:
            group_id: Required for combined tournaments, must be None otherwise

        Raises:
            NotApplicable: knockout tournament, or combined without a group id
            GroupNotFound: unknown group id
        """
        tournament = self._tournament

        if tournament.format is TournamentFormat.KNOCKOUT:
            raise NotApplicable("Standings are not defined for a knockout tournament")

        if tournament.format is TournamentFormat.ROUND_ROBIN:
            if group_id is not None:
                raise GroupNotFound(f"Round-robin tournaments have no groups ({group_id})")
            return calculate_standings(tournament.matches, tournament.player_ids, self.rules)

        if group_id is None:
            raise NotApplicable("A group id is required for combined tournament standings")
        if group_id not in tournament.group_ids():
            raise GroupNotFound(f"Group not found: {group_id}")

        group_matches = [m for m in tournament.matches if m.group_id == group_id]
        return calculate_standings(
            group_matches, group_members(tournament, group_id), self.rules
        )

    def group_standings(self) -> dict[str, list[StandingRow]]:
        """Standings of every group of a combined tournament."""
        if self._tournament.format is not TournamentFormat.COMBINED:
            raise NotApplicable("Only combined tournaments have groups")
        return {group_id: self.standings(group_id) for group_id in self.group_ids()}

    def get_bracket_display(self) -> dict:
        """
        Get schedule data for visualization.

        Returns nested dict with pools (standings plus matches) and knockout
        matches keyed by round number.
        """
        tournament = self._tournament

        pools: dict[str, dict[str, Any]] = {}
        if tournament.format is TournamentFormat.ROUND_ROBIN:
            pools["all"] = {
                "standings": [asdict(r) for r in self.standings()],
                "matches": [self._match_to_dict(m) for m in tournament.matches],
            }
        elif tournament.format is TournamentFormat.COMBINED:
            for group_id in self.group_ids():
                pools[group_id] = {
                    "standings": [asdict(r) for r in self.standings(group_id)],
                    "matches": [
                        self._match_to_dict(m)
                        for m in tournament.matches
                        if m.group_id == group_id
                    ],
                }

        knockout: dict[int, list[dict]] = {}
        for match in tournament.knockout_matches:
            knockout.setdefault(match.round, []).append(self._match_to_dict(match))

        return {
            "tournament_id": tournament.id,
            "format": tournament.format.value,
            "status": tournament.status.value,
            "stage": tournament.stage.value if tournament.stage else None,
            "winner_id": self.winner_id,
            "pools": pools,
            "knockout": knockout,
        }

    @staticmethod
    def _match_to_dict(match: Match) -> dict:
        return _match_to_schema(match).to_json_dict()

    # -------------------------------------------------------------------------
    # Structured Record
    # -------------------------------------------------------------------------

    def export_state(self) -> dict:
        """
        Export the full tournament as a camelCase record.

        Returns:
            Record that can be used with from_state()
        """
        return self.to_schema().to_json_dict()

    def to_schema(self) -> TournamentSchema:
        t = self._tournament
        return TournamentSchema(
            id=t.id,
            name=t.name,
            player_ids=list(t.player_ids),
            format=t.format,
            settings=t.settings,
            matches=[_match_to_schema(m) for m in t.matches],
            status=t.status,
            stage=t.stage,
            created_at=t.created_at,
            player_ratings=dict(t.player_ratings),
        )

    @classmethod
    def from_state(
        cls,
        state: Union[dict, TournamentSchema],
        rules: TournamentRules = TOURNAMENT_RULES,
        rng: Optional[random.Random] = None,
    ) -> "TournamentEngine":
        """
        Rebuild an engine from an exported record.

        Raises:
            InvalidSettings: the record does not validate
        """
        if isinstance(state, TournamentSchema):
            schema = state
        else:
            try:
                schema = TournamentSchema.model_validate(state)
            except ValidationError as e:
                raise InvalidSettings(f"Invalid tournament record: {e}") from e

        tournament = Tournament(
            id=schema.id,
            name=schema.name,
            player_ids=tuple(schema.player_ids),
            format=schema.format,
            settings=schema.settings,
            matches=tuple(_match_from_schema(m) for m in schema.matches),
            status=schema.status,
            stage=schema.stage,
            created_at=schema.created_at,
            player_ratings=dict(schema.player_ratings),
        )
        return cls(tournament, rules=rules, rng=rng)

    # -------------------------------------------------------------------------
    # Database Persistence Methods
    # -------------------------------------------------------------------------

    def save_to_db(self, session) -> str:
        """
        Save tournament state to database.

        Args:
            session: SQLAlchemy session

        Returns:
            Tournament id
        """
        record = session.get(TournamentRecord, self.tournament_id)
        if record is None:
            record = TournamentRecord(
                id=self.tournament_id,
                created_at=self._tournament.created_at,
            )
            session.add(record)

        record.record = self.export_state()
        record.winner_id = self.winner_id if self.is_completed else None

        session.flush()
        return record.id

    @classmethod
    def load_from_db(cls, session, tournament_id: str, **kwargs) -> "TournamentEngine":
        """
        Load tournament state from database.

        Raises:
            TournamentNotFound: no stored tournament with this id
        """
        record = session.get(TournamentRecord, tournament_id)
        if record is None:
            raise TournamentNotFound(f"Tournament {tournament_id} not found")
        return cls.from_state(record.record, **kwargs)


def _match_to_schema(match: Match) -> MatchSchema:
    result = None
    if match.result is not None:
        result = MatchResultSchema(
            player1_score=match.result.player1_score,
            player2_score=match.result.player2_score,
            winner_id=match.result.winner_id,
        )
    return MatchSchema(
        id=match.id,
        player1_id=match.player1_id,
        player2_id=match.player2_id,
        status=match.status,
        result=result,
        round=match.round,
        next_match_id=match.next_match_id,
        group_id=match.group_id,
    )


def _match_from_schema(schema: MatchSchema) -> Match:
    result = None
    if schema.result is not None:
        result = MatchResult(
            player1_score=schema.result.player1_score,
            player2_score=schema.result.player2_score,
            winner_id=schema.result.winner_id,
        )
    return Match(
        id=schema.id,
        player1_id=schema.player1_id,
        player2_id=schema.player2_id,
        status=schema.status,
        result=result,
        round=schema.round,
        next_match_id=schema.next_match_id,
        group_id=schema.group_id,
    )
