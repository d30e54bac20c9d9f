"""
Tests for the TournamentRegistry and EventBus wiring
"""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.orm import sessionmaker

from engine.errors import (
    InvalidRoster,
    MatchNotFound,
    NotApplicable,
    TournamentError,
    TournamentNotFound,
)
from models.base import get_session, init_db, make_engine
from services.event_bus import EventBus
from services.tournament_registry import TournamentRegistry


ROSTER = [
    {"id": "ann", "name": "Ann", "average": 42.5},
    {"id": "bob", "name": "Bob", "average": 38.0},
    {"id": "cid", "name": "Cid", "average": 51.2},
    {"id": "dee", "name": "Dee", "average": 12.0},
]


class TestTournamentRegistry:
    """Tests for registration, lookup and delegation."""

    def setup_method(self):
        self.bus = EventBus()
        self.registry = TournamentRegistry(self.bus)

    def test_create_registers_tournament(self):
        created_mock = MagicMock()
        self.bus.tournament_created.connect(created_mock)

        engine = self.registry.create_tournament(ROSTER, {"format": "round-robin"})

        assert engine.tournament_id in self.registry
        assert len(self.registry) == 1
        assert self.registry.get(engine.tournament_id) is engine
        payload = created_mock.call_args[0][0]
        assert payload["players"] == ["ann", "bob", "cid", "dee"]

    def test_roster_entries_validated(self):
        with pytest.raises(InvalidRoster):
            self.registry.create_tournament(
                [{"id": "  "}, {"id": "b"}, {"id": "c"}], {"format": "knockout"}
            )
        assert len(self.registry) == 0

    def test_averages_used_for_seeding(self):
        engine = self.registry.create_tournament(ROSTER, {"format": "knockout"})
        round1 = [m for m in engine.tournament.matches if m.round == 1]

        # cid, ann, bob, dee by average
        assert [(m.player1_id, m.player2_id) for m in round1] == [("cid", "dee"), ("ann", "bob")]

    def test_unknown_tournament(self):
        with pytest.raises(TournamentNotFound):
            self.registry.get("nope")
        with pytest.raises(TournamentNotFound):
            self.registry.standings("nope")

    def test_standings_by_tournament_id(self):
        engine = self.registry.create_tournament(ROSTER, {"format": "round-robin"})
        match = engine.tournament.matches[0]
        self.registry.record_result(engine.tournament_id, match.id, 2, 5)

        rows = self.registry.standings(engine.tournament_id)
        assert rows[0].player_id == "bob"

    def test_standings_not_applicable_for_knockout(self):
        engine = self.registry.create_tournament(ROSTER, {"format": "knockout"})
        with pytest.raises(NotApplicable):
            self.registry.standings(engine.tournament_id)

    def test_failed_result_reported_on_bus(self):
        message_mock = MagicMock()
        self.bus.system_message.connect(message_mock)
        engine = self.registry.create_tournament(ROSTER, {"format": "round-robin"})

        with pytest.raises(MatchNotFound):
            self.registry.record_result(engine.tournament_id, "missing", 1, 0)

        level, message = message_mock.call_args[0]
        assert level == "warning"
        assert "missing" in message

    def test_engine_signals_forwarded(self):
        recorded_mock = MagicMock()
        completed_mock = MagicMock()
        bracket_mock = MagicMock()
        self.bus.match_recorded.connect(recorded_mock)
        self.bus.tournament_completed.connect(completed_mock)
        self.bus.bracket_updated.connect(bracket_mock)

        engine = self.registry.create_tournament(ROSTER[:3], {"format": "knockout"})
        while engine.upcoming_matches():
            match = engine.upcoming_matches()[0]
            self.registry.record_result(engine.tournament_id, match.id, 3, 1)

        assert recorded_mock.call_count == 2
        completed_mock.assert_called_once()
        assert completed_mock.call_args[0][0]["winner_id"] == "cid"
        bracket_mock.assert_called_with(engine.tournament_id)

    def test_stage_change_forwarded_with_id(self):
        stage_mock = MagicMock()
        self.bus.stage_changed.connect(stage_mock)
        settings = {"format": "combined", "numGroups": 2, "playersAdvancing": 1}

        engine = self.registry.create_tournament(ROSTER, settings)
        for match in list(engine.tournament.matches):
            self.registry.record_result(engine.tournament_id, match.id, 1, 0)

        stage_mock.assert_called_once_with(engine.tournament_id, "knockout")

    def test_ongoing_and_remove(self):
        first = self.registry.create_tournament(ROSTER[:3], {"format": "knockout"})
        second = self.registry.create_tournament(ROSTER, {"format": "round-robin"})
        while first.upcoming_matches():
            first.record_result(first.upcoming_matches()[0].id, 1, 0)

        assert self.registry.ongoing() == [second]

        self.registry.remove(first.tournament_id)
        assert self.registry.tournaments() == [second]

    def test_duplicate_registration_rejected(self):
        engine = self.registry.create_tournament(ROSTER, {"format": "knockout"})
        with pytest.raises(TournamentError):
            self.registry.add(engine)


class TestRegistryStorage:
    """Tests for saving and loading all tournaments."""

    def test_save_all_and_load(self):
        db = make_engine("sqlite://")
        init_db(db)
        factory = sessionmaker(bind=db, autocommit=False, autoflush=False)

        registry = TournamentRegistry()
        engine = registry.create_tournament(ROSTER, {"format": "round-robin"})
        engine.record_result(engine.tournament.matches[0].id, 4, 4)

        with get_session(factory) as session:
            assert registry.save_all(session) == [engine.tournament_id]

        fresh = TournamentRegistry()
        with get_session(factory) as session:
            loaded = fresh.load(session, engine.tournament_id)

        assert loaded.tournament.matches == engine.tournament.matches
        assert fresh.standings(engine.tournament_id) == registry.standings(engine.tournament_id)
