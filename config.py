"""
CueTourney Configuration

Centralized settings, paths, and constants for the tournament engine.
"""

import logging
from pathlib import Path
from dataclasses import dataclass
import appdirs


# Application info
APP_NAME = "CueTourney"
APP_AUTHOR = "CueTourney"
APP_VERSION = "1.0.0"


@dataclass(frozen=True)
class Paths:
    """Application paths."""
    # Data directory (stores database, exports)
    data_dir: Path = Path(appdirs.user_data_dir(APP_NAME, APP_AUTHOR))

    # Config directory (stores user preferences)
    config_dir: Path = Path(appdirs.user_config_dir(APP_NAME, APP_AUTHOR))

    # Log directory
    log_dir: Path = Path(appdirs.user_log_dir(APP_NAME, APP_AUTHOR))

    @property
    def database(self) -> Path:
        return self.data_dir / "cuetourney.db"

    @property
    def exports(self) -> Path:
        return self.data_dir / "exports"

    @property
    def log_file(self) -> Path:
        return self.log_dir / "cuetourney.log"

    def ensure_directories(self) -> None:
        """Create all required directories."""
        for dir_path in [self.data_dir, self.config_dir, self.log_dir, self.exports]:
            dir_path.mkdir(parents=True, exist_ok=True)


@dataclass(frozen=True)
class TournamentRules:
    """Roster limits and standings points."""
    # Minimum roster per format
    min_round_robin_players: int = 3
    min_knockout_players: int = 3
    min_combined_players: int = 4

    # Maximum roster per format
    max_round_robin_players: int = 8
    max_knockout_players: int = 32
    max_combined_players: int = 32

    # Every group in a combined tournament needs at least this many players
    min_players_per_group: int = 2

    # Standings points
    points_per_win: int = 3
    points_per_draw: int = 1


@dataclass(frozen=True)
class LoggingSettings:
    """Logging setup."""
    level: int = logging.INFO
    format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
    log_to_file: bool = True


@dataclass(frozen=True)
class ExportSettings:
    """Export file format."""
    tournament_export_type: str = "ScoreCounterTournamentExport"
    tournament_export_version: int = 1


# Singleton instances
PATHS = Paths()
TOURNAMENT_RULES = TournamentRules()
LOGGING_SETTINGS = LoggingSettings()
EXPORT_SETTINGS = ExportSettings()


def configure_logging(settings: LoggingSettings = LOGGING_SETTINGS) -> None:
    """Attach console (and optionally file) handlers to the root logger."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if settings.log_to_file:
        handlers.append(logging.FileHandler(PATHS.log_file, encoding="utf-8"))

    logging.basicConfig(level=settings.level, format=settings.format, handlers=handlers)


def init_config() -> None:
    """Initialize configuration, create required directories and set up logging."""
    PATHS.ensure_directories()
    configure_logging()
