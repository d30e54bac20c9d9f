"""
Tournament Export

Single-tournament JSON export/import and CSV standings export.
"""

import csv
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional, Union

from config import EXPORT_SETTINGS, PATHS
from engine.errors import InvalidSettings
from engine.structures import StandingRow
from engine.tournament_engine import TournamentEngine

logger = logging.getLogger(__name__)

STANDINGS_COLUMNS = [
    "rank", "player_id", "played", "wins", "draws", "losses",
    "points", "score_differential",
]


def export_tournament(engine: TournamentEngine, players: Optional[list[dict]] = None) -> dict:
    """
    Build the export envelope for one tournament.

    Args:
        engine: Tournament to export
        players: Player profiles to bundle with it (owned by the caller)
    """
    return {
        "type": EXPORT_SETTINGS.tournament_export_type,
        "version": EXPORT_SETTINGS.tournament_export_version,
        "exportedAt": datetime.now(timezone.utc).isoformat(),
        "tournament": engine.export_state(),
        "players": players or [],
    }


def import_tournament(data: dict) -> TournamentEngine:
    """
    Rebuild a tournament from an export envelope.

    Raises:
        InvalidSettings: not a tournament export, or the record does not validate
    """
    if data.get("type") != EXPORT_SETTINGS.tournament_export_type:
        raise InvalidSettings(f"Not a tournament export: {data.get('type')!r}")
    if "tournament" not in data:
        raise InvalidSettings("Tournament export has no tournament record")
    return TournamentEngine.from_state(data["tournament"])


def default_export_path(engine: TournamentEngine, suffix: str = "json") -> Path:
    """File name under the exports directory, e.g. ``tournament-<id>-2026-10-19.json``."""
    stamp = datetime.now().strftime("%Y-%m-%d")
    return PATHS.exports / f"tournament-{engine.tournament_id}-{stamp}.{suffix}"


def write_tournament_export(
    engine: TournamentEngine,
    filepath: Optional[Union[str, Path]] = None,
    players: Optional[list[dict]] = None,
) -> bool:
    """
    Write a tournament export as JSON.

    Without a filepath the export goes to default_export_path() under the
    exports directory, which is created if missing.

    Returns:
        True if export successful, False otherwise
    """
    try:
        if filepath is None:
            filepath = default_export_path(engine)
            filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(export_tournament(engine, players), f, indent=2)
        logger.info("Exported tournament %s to %s", engine.tournament_id, filepath)
        return True
    except OSError as e:
        logger.error("Tournament export error: %s", e)
        return False


def read_tournament_export(filepath: Union[str, Path]) -> TournamentEngine:
    """
    Read a tournament export written by write_tournament_export().

    Raises:
        InvalidSettings: file is not valid JSON or not a tournament export
    """
    with open(filepath, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidSettings(f"Tournament export is not valid JSON: {e}") from e
    return import_tournament(data)


def export_standings_csv(rows: Iterable[StandingRow], filepath: Union[str, Path]) -> bool:
    """
    Export standings rows as CSV for data analysis.

    Returns:
        True if export successful, False otherwise
    """
    try:
        with open(filepath, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(STANDINGS_COLUMNS)
            for rank, row in enumerate(rows, start=1):
                writer.writerow([
                    rank,
                    row.player_id,
                    row.played,
                    row.wins,
                    row.draws,
                    row.losses,
                    row.points,
                    row.score_differential,
                ])
        return True
    except OSError as e:
        logger.error("CSV export error: %s", e)
        return False
