"""
Tournament enums and persistence model.

The full tournament (schedule, results, bracket links, group tags) is stored
as one JSON record so a tournament can be resumed exactly where it stopped.
"""

import enum
import json
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class TournamentFormat(enum.Enum):
    """The three supported tournament formats."""
    ROUND_ROBIN = "round-robin"
    KNOCKOUT = "knockout"
    COMBINED = "combined"


class SeedingMethod(enum.Enum):
    """How participants are ordered before building a knockout bracket."""
    RANDOM = "random"
    AVERAGE = "average"


class EndCondition(enum.Enum):
    """How a single match ends once a player reaches the target score."""
    SUDDEN_DEATH = "sudden-death"
    EQUAL_INNINGS = "equal-innings"


class MatchStatus(enum.Enum):
    """Match lifecycle states. COMPLETED and BYE are terminal."""
    PENDING = "pending"
    COMPLETED = "completed"
    BYE = "bye"

    @property
    def is_terminal(self) -> bool:
        return self is not MatchStatus.PENDING


class TournamentStatus(enum.Enum):
    ONGOING = "ongoing"
    COMPLETED = "completed"


class TournamentStage(enum.Enum):
    """Stages of a combined-format tournament."""
    GROUP = "group"
    KNOCKOUT = "knockout"


class TournamentRecord(Base):
    """
    A stored tournament.

    A few summary columns are kept alongside the JSON record so tournaments
    can be listed without deserializing every schedule.
    """
    __tablename__ = "tournaments"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False, default="")

    format: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=TournamentStatus.ONGOING.value, index=True
    )
    stage: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    winner_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Full structured record (camelCase, see models.schemas.TournamentSchema)
    record_json: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<TournamentRecord(id='{self.id}', format={self.format}, status={self.status})>"

    @property
    def record(self) -> dict:
        """Get the stored tournament record."""
        return json.loads(self.record_json)

    @record.setter
    def record(self, value: dict) -> None:
        """Set the stored tournament record and refresh the summary columns."""
        self.record_json = json.dumps(value)
        self.name = value.get("name", "")
        self.format = value["format"]
        self.status = value["status"]
        self.stage = value.get("stage")
        self.updated_at = datetime.now(timezone.utc)

        if self.status == TournamentStatus.COMPLETED.value and self.completed_at is None:
            self.completed_at = self.updated_at
