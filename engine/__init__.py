"""
CueTourney Tournament Engine

Schedule generation, result propagation and standings for round-robin,
knockout and combined (group + knockout) tournaments.
This package contains no GUI code; storage goes through the models package.
"""

from engine.errors import (
    TournamentError,
    InvalidRoster,
    InvalidRosterSize,
    InvalidSettings,
    MatchNotFound,
    MatchAlreadyCompleted,
    IncompletePairing,
    InvalidResult,
    NotApplicable,
    GroupNotFound,
    TournamentNotFound,
)
from engine.structures import Participant, Match, MatchResult, StandingRow, Tournament
from engine.standings import calculate_standings
from engine.round_robin import generate_round_robin
from engine.knockout import build_knockout_bracket, seed_participants
from engine.groups import allocate_groups, build_group_stage
from engine.stage_coordinator import StageCoordinator
from engine.tournament_engine import TournamentEngine

__all__ = [
    "TournamentError",
    "InvalidRoster",
    "InvalidRosterSize",
    "InvalidSettings",
    "MatchNotFound",
    "MatchAlreadyCompleted",
    "IncompletePairing",
    "InvalidResult",
    "NotApplicable",
    "GroupNotFound",
    "TournamentNotFound",
    "Participant",
    "Match",
    "MatchResult",
    "StandingRow",
    "Tournament",
    "calculate_standings",
    "generate_round_robin",
    "build_knockout_bracket",
    "seed_participants",
    "allocate_groups",
    "build_group_stage",
    "StageCoordinator",
    "TournamentEngine",
]
