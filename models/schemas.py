"""
Pydantic schemas for data validation.

Field names are snake_case in Python and camelCase on the wire, so a stored
or exported tournament reads ``player1Id``, ``nextMatchId``, ``groupId`` and
so on.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from models.tournament import (
    EndCondition,
    MatchStatus,
    SeedingMethod,
    TournamentFormat,
    TournamentStage,
    TournamentStatus,
)


class CamelModel(BaseModel):
    """Base schema: camelCase aliases, construction by either name."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        """Dump with camelCase keys and JSON-safe values."""
        return self.model_dump(mode="json", by_alias=True)


# ============ Settings ============

class TournamentSettings(CamelModel):
    """
    Settings chosen when a tournament is created.

    ``game_type_key``, ``target_score`` and ``end_condition`` are passed through
    untouched to whatever plays the individual matches.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    format: TournamentFormat
    game_type_key: str = Field(default="8-ball", min_length=1)
    target_score: int = Field(default=1, ge=1)
    end_condition: EndCondition = EndCondition.EQUAL_INNINGS
    seeding: SeedingMethod = SeedingMethod.AVERAGE

    # Combined format only
    num_groups: Optional[int] = Field(default=None, ge=1)
    players_advancing: Optional[int] = Field(default=None, ge=1)

    @model_validator(mode="after")
    def combined_needs_groups(self) -> "TournamentSettings":
        if self.format is TournamentFormat.COMBINED:
            if self.num_groups is None or self.players_advancing is None:
                raise ValueError("Combined format requires numGroups and playersAdvancing")
            if self.num_groups * self.players_advancing < 2:
                raise ValueError("Combined format must send at least 2 players to the knockout stage")
        return self


# ============ Roster Schemas ============

class ParticipantCreate(CamelModel):
    """A roster entry supplied by the player-management side."""
    id: str = Field(..., min_length=1, max_length=64)
    name: str = Field(default="", max_length=200)
    average: float = Field(default=0.0, ge=0)

    @field_validator("id")
    @classmethod
    def id_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Participant id cannot be blank")
        return v.strip()


# ============ Match Schemas ============

class MatchResultSchema(CamelModel):
    player1_score: int = Field(..., ge=0)
    player2_score: int = Field(..., ge=0)
    winner_id: Optional[str] = None


class MatchSchema(CamelModel):
    """One scheduled match, as stored and exported."""
    id: str
    player1_id: Optional[str] = None
    player2_id: Optional[str] = None
    status: MatchStatus = MatchStatus.PENDING
    result: Optional[MatchResultSchema] = None
    round: Optional[int] = Field(default=None, ge=1)
    next_match_id: Optional[str] = None
    group_id: Optional[str] = None

    @model_validator(mode="after")
    def result_matches_status(self) -> "MatchSchema":
        if (self.status is MatchStatus.COMPLETED) != (self.result is not None):
            raise ValueError(f"Match {self.id}: result must be present exactly when completed")
        return self


# ============ Tournament Schema ============

class TournamentSchema(CamelModel):
    """
    The lossless structured record of a tournament.

    ``player_ratings`` keeps the skill estimates captured at creation so the
    knockout stage of a combined tournament can still be seeded by average
    after a reload.
    """
    id: str
    name: str = ""
    player_ids: list[str]
    format: TournamentFormat
    settings: TournamentSettings
    matches: list[MatchSchema]
    status: TournamentStatus = TournamentStatus.ONGOING
    stage: Optional[TournamentStage] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    player_ratings: dict[str, float] = Field(default_factory=dict)

    @model_validator(mode="after")
    def match_ids_unique(self) -> "TournamentSchema":
        ids = [m.id for m in self.matches]
        if len(ids) != len(set(ids)):
            raise ValueError("Match ids must be unique within a tournament")
        return self
