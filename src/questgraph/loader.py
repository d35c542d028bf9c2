"""
Load game data and team progress documents from JSON or YAML files.

Integrates:
- JSON / YAML parsing (by file suffix)
- Pydantic validation of the provider's camelCase documents
"""

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .progress import PlayerProgress, UserProgressRow
from .schema import GameData

logger = logging.getLogger(__name__)

# Keys that identify a stored row holding both game modes
ROW_KEYS = frozenset(
    {
        "pvp",
        "pve",
        "pvp_data",
        "pve_data",
        "pvpData",
        "pveData",
        "gameEdition",
        "game_edition",
        "currentGameMode",
        "current_game_mode",
    }
)


class GameDataError(Exception):
    """Raised when a game data or progress document cannot be loaded."""

    pass


def read_document(path: Path | str) -> Any:
    """Parse a JSON or YAML file.

    Raises:
        GameDataError: If the file cannot be parsed or is empty.
        FileNotFoundError: If the file doesn't exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    with open(path, encoding="utf-8") as f:
        try:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise GameDataError(f"Could not parse {path}: {e}") from e

    if not data:
        raise GameDataError(f"Empty document: {path}")
    return data


def load_game_data(path: Path | str) -> GameData:
    """Load tasks, hideout stations, editions and traders.

    Args:
        path: JSON or YAML document with `tasks` and `hideoutStations`, and
            optionally `editions` and `traders`. A `data` wrapper (as in a
            GraphQL response) is unwrapped.

    Returns:
        Validated GameData.

    Raises:
        GameDataError: If parsing or validation fails.
        FileNotFoundError: If the file doesn't exist.
    """
    logger.info(f"Loading game data from {path}")
    raw_data = read_document(path)
    if isinstance(raw_data, dict) and "tasks" not in raw_data and isinstance(raw_data.get("data"), dict):
        raw_data = raw_data["data"]
    if not isinstance(raw_data, dict):
        raise GameDataError(f"Game data must be a mapping, got {type(raw_data).__name__}")

    try:
        game_data = GameData.model_validate(raw_data)
    except ValidationError as e:
        raise GameDataError(f"Schema validation failed: {e}") from e

    logger.info(
        f"Loaded {len(game_data.tasks)} tasks, {len(game_data.hideout_stations)} hideout stations, "
        f"{len(game_data.editions)} editions"
    )
    return game_data


def parse_member(raw_member: Any, default_game_edition: int = 1) -> UserProgressRow:
    """Validate one team member entry.

    Entries holding per-mode data are stored rows. Anything else is a bare
    progress object, used for both game modes. Members without a recorded
    edition get `default_game_edition`.
    """
    if isinstance(raw_member, dict) and ROW_KEYS & raw_member.keys():
        row = UserProgressRow.model_validate(raw_member)
    else:
        progress = PlayerProgress.model_validate(raw_member or {})
        row = UserProgressRow(pvp=progress, pve=progress.model_copy(deep=True))
    if row.game_edition is None:
        row.game_edition = default_game_edition
    return row


def load_progress(path: Path | str, default_game_edition: int = 1) -> dict[str, UserProgressRow]:
    """Load a team progress document.

    Args:
        path: JSON or YAML document of the form `{members: {teamId: progress}}`.
        default_game_edition: Edition for members that do not record one.

    Returns:
        Map of team id -> stored progress row, in document order.

    Raises:
        GameDataError: If parsing or validation fails.
        FileNotFoundError: If the file doesn't exist.
    """
    logger.info(f"Loading team progress from {path}")
    raw_data = read_document(path)
    members = raw_data.get("members") if isinstance(raw_data, dict) else None
    if not isinstance(members, dict):
        raise GameDataError("Progress document must contain a 'members' mapping")

    team: dict[str, UserProgressRow] = {}
    for team_id, raw_member in members.items():
        try:
            team[str(team_id)] = parse_member(raw_member, default_game_edition)
        except ValidationError as e:
            raise GameDataError(f"Invalid progress for member {team_id}: {e}") from e

    logger.info(f"Loaded progress for {len(team)} team members")
    return team
