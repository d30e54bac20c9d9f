"""
Core tournament data structures.

Matches are frozen: generators build the full schedule in one pass, and the
only later change is the state machine swapping in an updated copy of a match
when a result is recorded.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional

from models.schemas import TournamentSettings
from models.tournament import (
    MatchStatus,
    TournamentFormat,
    TournamentStage,
    TournamentStatus,
)


@dataclass(frozen=True)
class Participant:
    """A roster entry. ``average`` is only used for seeding."""
    id: str
    average: float = 0.0


@dataclass(frozen=True)
class MatchResult:
    """Final score line. ``winner_id`` is None for a draw."""
    player1_score: int
    player2_score: int
    winner_id: Optional[str] = None

    @property
    def is_draw(self) -> bool:
        return self.winner_id is None


@dataclass(frozen=True)
class Match:
    """A schedulable match between two slots."""
    id: str
    player1_id: Optional[str] = None
    player2_id: Optional[str] = None
    status: MatchStatus = MatchStatus.PENDING
    result: Optional[MatchResult] = None
    round: Optional[int] = None  # Knockout only, 1-based
    next_match_id: Optional[str] = None  # Knockout only, None for the final
    group_id: Optional[str] = None  # Group stage only

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def is_knockout(self) -> bool:
        return self.round is not None

    @property
    def is_paired(self) -> bool:
        """Both participants are known."""
        return self.player1_id is not None and self.player2_id is not None

    @property
    def is_playable(self) -> bool:
        return self.status is MatchStatus.PENDING and self.is_paired

    @property
    def loser_id(self) -> Optional[str]:
        if self.result is None or self.result.winner_id is None:
            return None
        if self.result.winner_id == self.player1_id:
            return self.player2_id
        return self.player1_id

    def with_slot(self, slot: int, player_id: str) -> "Match":
        """Copy of this match with slot 0 (player1) or 1 (player2) filled."""
        if slot == 0:
            return replace(self, player1_id=player_id)
        return replace(self, player2_id=player_id)


@dataclass(frozen=True)
class StandingRow:
    """One ranked row of a round-robin pool."""
    player_id: str
    played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    points: int = 0
    score_differential: int = 0


@dataclass
class Tournament:
    """
    The tournament aggregate.

    ``player_ids`` is fixed at creation. ``matches`` is a tuple; it is only
    ever replaced wholesale by the owning TournamentEngine.
    """
    id: str
    player_ids: tuple[str, ...]
    format: TournamentFormat
    settings: TournamentSettings
    matches: tuple[Match, ...]
    name: str = ""
    status: TournamentStatus = TournamentStatus.ONGOING
    stage: Optional[TournamentStage] = None  # Combined format only
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    player_ratings: dict[str, float] = field(default_factory=dict)

    @property
    def group_matches(self) -> list[Match]:
        return [m for m in self.matches if m.group_id is not None]

    @property
    def knockout_matches(self) -> list[Match]:
        return [m for m in self.matches if m.round is not None]

    def group_ids(self) -> list[str]:
        """Group ids in first-appearance (allocation) order."""
        seen: dict[str, None] = {}
        for match in self.matches:
            if match.group_id is not None:
                seen.setdefault(match.group_id, None)
        return list(seen)

    def find_match(self, match_id: str) -> Optional[Match]:
        return next((m for m in self.matches if m.id == match_id), None)
