"""
CueTourney Models

Enums, pydantic schemas and the SQLAlchemy storage model.
"""

from models.base import Base, engine, SessionLocal, get_session, init_db, make_engine
from models.tournament import (
    TournamentRecord,
    TournamentFormat,
    SeedingMethod,
    EndCondition,
    MatchStatus,
    TournamentStatus,
    TournamentStage,
)
from models.schemas import (
    TournamentSettings,
    ParticipantCreate,
    MatchResultSchema,
    MatchSchema,
    TournamentSchema,
)

__all__ = [
    "Base",
    "engine",
    "SessionLocal",
    "get_session",
    "init_db",
    "make_engine",
    "TournamentRecord",
    "TournamentFormat",
    "SeedingMethod",
    "EndCondition",
    "MatchStatus",
    "TournamentStatus",
    "TournamentStage",
    "TournamentSettings",
    "ParticipantCreate",
    "MatchResultSchema",
    "MatchSchema",
    "TournamentSchema",
]
