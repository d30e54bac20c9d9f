"""
CueTourney Services

Event hub, tournament registry and export.
"""

from services.event_bus import EventBus
from services.tournament_registry import TournamentRegistry
from services.export import (
    export_tournament,
    import_tournament,
    default_export_path,
    write_tournament_export,
    read_tournament_export,
    export_standings_csv,
)

__all__ = [
    "EventBus",
    "TournamentRegistry",
    "export_tournament",
    "import_tournament",
    "default_export_path",
    "write_tournament_export",
    "read_tournament_export",
    "export_standings_csv",
]
