"""
Tournament Registry

Keeps the tournaments a host application is running, keyed by id, and wires
each engine's signals into the shared EventBus. The host creates one registry
and passes it to whatever needs it.
"""

import logging
import random
from typing import Optional, Sequence, Union

from pydantic import ValidationError

from config import TOURNAMENT_RULES, TournamentRules
from engine.errors import InvalidRoster, TournamentError, TournamentNotFound
from engine.structures import Match, Participant, StandingRow
from engine.tournament_engine import TournamentEngine
from models.schemas import ParticipantCreate, TournamentSettings
from services.event_bus import EventBus

logger = logging.getLogger(__name__)


class TournamentRegistry:
    """
    In-memory collection of running tournaments.

    Usage:
        registry = TournamentRegistry(event_bus)
        engine = registry.create_tournament(roster, {"format": "knockout"})
        registry.record_result(engine.tournament_id, match_id, 7, 3)
        registry.standings(tournament_id, group_id="A")
    """

    def __init__(
        self,
        event_bus: Optional[EventBus] = None,
        rules: TournamentRules = TOURNAMENT_RULES,
        rng: Optional[random.Random] = None,
    ):
        self.event_bus = event_bus or EventBus()
        self.rules = rules
        self.rng = rng
        self._engines: dict[str, TournamentEngine] = {}

    def __len__(self) -> int:
        return len(self._engines)

    def __contains__(self, tournament_id: str) -> bool:
        return tournament_id in self._engines

    @staticmethod
    def parse_roster(
        roster: Sequence[Union[Participant, ParticipantCreate, dict]]
    ) -> list[Participant]:
        """
        Turn roster entries from the player-management side into Participants.

        Raises:
            InvalidRoster: an entry fails validation
        """
        participants = []
        for entry in roster:
            if isinstance(entry, Participant):
                participants.append(entry)
                continue
            try:
                if not isinstance(entry, ParticipantCreate):
                    entry = ParticipantCreate.model_validate(entry)
            except ValidationError as e:
                raise InvalidRoster(f"Invalid roster entry: {e}") from e
            participants.append(Participant(id=entry.id, average=entry.average))
        return participants

    def create_tournament(
        self,
        roster: Sequence[Union[Participant, ParticipantCreate, dict]],
        settings: Union[TournamentSettings, dict],
        name: str = "",
    ) -> TournamentEngine:
        """Create a tournament and register it."""
        engine = TournamentEngine.create(
            self.parse_roster(roster),
            settings,
            name=name,
            rules=self.rules,
            rng=self.rng,
        )
        self.add(engine)

        tournament = engine.tournament
        self.event_bus.tournament_created.emit({
            "tournament_id": tournament.id,
            "format": tournament.format.value,
            "players": list(tournament.player_ids),
        })
        return engine

    def add(self, engine: TournamentEngine) -> None:
        """Register an engine (e.g. one loaded from storage) and forward its signals."""
        tournament_id = engine.tournament_id
        if tournament_id in self._engines:
            raise TournamentError(f"Tournament {tournament_id} is already registered")

        bus = self.event_bus
        engine.match_completed.connect(bus.match_recorded.emit)
        engine.tournament_completed.connect(bus.tournament_completed.emit)
        engine.stage_changed.connect(lambda stage: bus.stage_changed.emit(tournament_id, stage))
        engine.bracket_updated.connect(lambda: bus.bracket_updated.emit(tournament_id))

        self._engines[tournament_id] = engine
        logger.debug("Registered tournament %s", tournament_id)

    def remove(self, tournament_id: str) -> TournamentEngine:
        engine = self.get(tournament_id)
        del self._engines[tournament_id]
        self.event_bus.tournament_removed.emit(tournament_id)
        return engine

    def get(self, tournament_id: str) -> TournamentEngine:
        """
        Raises:
            TournamentNotFound: unknown id
        """
        engine = self._engines.get(tournament_id)
        if engine is None:
            raise TournamentNotFound(f"Tournament {tournament_id} not found")
        return engine

    def tournaments(self) -> list[TournamentEngine]:
        """Registered tournaments, oldest first."""
        return sorted(self._engines.values(), key=lambda e: e.tournament.created_at)

    def ongoing(self) -> list[TournamentEngine]:
        return [e for e in self.tournaments() if not e.is_completed]

    def record_result(self, tournament_id: str, match_id: str,
                      score1: int, score2: int) -> Match:
        """
        Record a match result on a registered tournament.

        Failures are reported on the event bus and re-raised for the caller.
        """
        engine = self.get(tournament_id)
        try:
            return engine.record_result(match_id, score1, score2)
        except TournamentError as e:
            self.event_bus.emit_message("warning", str(e))
            raise

    def standings(self, tournament_id: str,
                  group_id: Optional[str] = None) -> list[StandingRow]:
        return self.get(tournament_id).standings(group_id)

    # -------------------------------------------------------------------------
    # Database Persistence Methods
    # -------------------------------------------------------------------------

    def save_all(self, session) -> list[str]:
        """Save every registered tournament. Returns the saved ids."""
        return [engine.save_to_db(session) for engine in self._engines.values()]

    def load(self, session, tournament_id: str) -> TournamentEngine:
        """Load a stored tournament and register it."""
        engine = TournamentEngine.load_from_db(
            session, tournament_id, rules=self.rules, rng=self.rng
        )
        self.add(engine)
        return engine
