"""
Event Bus - Central signal hub for tournament events.

Every TournamentEngine registered with the TournamentRegistry has its signals
forwarded here, tagged with the tournament id, so display and export code
listens to one object instead of to each engine.
"""

from PySide6.QtCore import QObject, Signal


class EventBus(QObject):
    """
    Central signal hub for CueTourney.

    Usage:
        bus.match_recorded.connect(self._on_match_recorded)
        bus.stage_changed.connect(self._on_stage_changed)
    """

    # ============ Tournament Lifecycle ============
    tournament_created = Signal(dict)       # {tournament_id, format, players}
    tournament_completed = Signal(dict)     # {tournament_id, winner_id}
    tournament_removed = Signal(str)        # tournament_id

    # ============ Match Events ============
    match_recorded = Signal(dict)           # match_completed payload
    stage_changed = Signal(str, str)        # tournament_id, new stage
    bracket_updated = Signal(str)           # tournament_id

    # ============ System Events ============
    system_message = Signal(str, str)       # (level, message) - e.g., ("warning", "Match not found")

    def __init__(self):
        super().__init__()

    def emit_message(self, level: str, message: str) -> None:
        """Emit a system message (info, warning, error)."""
        self.system_message.emit(level, message)
