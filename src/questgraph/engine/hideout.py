"""
Hideout progress.

Station levels are derived from completed module records. The stash and
cultist circle stations are additionally granted levels by the player's
game edition.
"""

from dataclasses import dataclass
from enum import Enum

from ..progress import PlayerProgress
from ..schema import GameEdition, HideoutLevel, HideoutStation

STASH_NORMALIZED_NAME = "stash"
CULTIST_CIRCLE_NORMALIZED_NAME = "cultist-circle"
STASH_STATION_ID = "5d484fc0654e76006657e0ab"
CULTIST_CIRCLE_STATION_ID = "667298e75ea6b4493c08f266"

# Editions from this value up include the cultist circle
CULTIST_CIRCLE_EDITION = 5
# Granted level meaning "every level"; capped at the station maximum
ALL_LEVELS = 1_000_000


class StationStatus(str, Enum):
    MAXED = "maxed"
    AVAILABLE = "available"
    LOCKED = "locked"


@dataclass(frozen=True)
class EditionDefaults:
    """Hideout levels granted by a game edition."""

    stash_level: int = 0
    cultist_circle_level: int = 0


def is_stash(station: HideoutStation) -> bool:
    return station.normalized_name == STASH_NORMALIZED_NAME or station.id == STASH_STATION_ID


def is_cultist_circle(station: HideoutStation) -> bool:
    return (
        station.normalized_name == CULTIST_CIRCLE_NORMALIZED_NAME
        or station.id == CULTIST_CIRCLE_STATION_ID
    )


def edition_defaults(
    game_edition: int, editions: list[GameEdition] | None = None
) -> EditionDefaults:
    """Default stash and cultist circle levels for an edition value.

    Uses the edition catalogue when it has an entry for `game_edition`;
    otherwise the stash level equals the edition value and editions from 5
    up get the whole cultist circle.
    """
    for edition in editions or []:
        if edition.value == game_edition:
            return EditionDefaults(
                stash_level=edition.default_stash_level,
                cultist_circle_level=edition.default_cultist_circle_level,
            )
    return EditionDefaults(
        stash_level=game_edition,
        cultist_circle_level=ALL_LEVELS if game_edition >= CULTIST_CIRCLE_EDITION else 0,
    )


def granted_level(station: HideoutStation, defaults: EditionDefaults) -> int:
    if is_stash(station):
        return defaults.stash_level
    if is_cultist_circle(station):
        return defaults.cultist_circle_level
    return 0


def station_level(station: HideoutStation, progress: PlayerProgress, defaults: EditionDefaults) -> int:
    """Current display level of a station for one player."""
    max_level = station.max_level
    manual_level = 0
    for level in station.levels:
        record = progress.hideout_modules.get(level.id)
        if record is not None and record.complete:
            manual_level = max(manual_level, level.level)

    granted = min(granted_level(station, defaults), max_level)
    if granted and granted == max_level:
        return max_level
    return max(granted, manual_level)


def is_module_complete(
    station: HideoutStation,
    level: HideoutLevel,
    progress: PlayerProgress,
    defaults: EditionDefaults,
) -> bool:
    record = progress.hideout_modules.get(level.id)
    if record is not None and record.complete:
        return True
    return level.level <= granted_level(station, defaults)


def compute_station_levels(
    stations: list[HideoutStation],
    team: dict[str, PlayerProgress],
    game_editions: dict[str, int],
    editions: list[GameEdition] | None = None,
    default_game_edition: int = 1,
) -> dict[str, dict[str, int]]:
    """Station level map `station_id -> team_id -> level`.

    Args:
        stations: Hideout stations.
        team: Map of team id -> progress.
        game_editions: Map of team id -> game edition value.
        editions: Optional edition catalogue.
        default_game_edition: Edition for members missing from `game_editions`.
    """
    levels: dict[str, dict[str, int]] = {}
    defaults = {
        team_id: edition_defaults(game_editions.get(team_id, default_game_edition), editions)
        for team_id in team
    }
    for station in stations:
        levels[station.id] = {
            team_id: station_level(station, progress, defaults[team_id])
            for team_id, progress in team.items()
        }
    return levels


def compute_module_completions(
    stations: list[HideoutStation],
    team: dict[str, PlayerProgress],
    game_editions: dict[str, int],
    editions: list[GameEdition] | None = None,
    default_game_edition: int = 1,
) -> dict[str, dict[str, bool]]:
    """Module completion map `level_id -> team_id -> bool`."""
    completions: dict[str, dict[str, bool]] = {}
    defaults = {
        team_id: edition_defaults(game_editions.get(team_id, default_game_edition), editions)
        for team_id in team
    }
    for station in stations:
        for level in station.levels:
            completions[level.id] = {
                team_id: is_module_complete(station, level, progress, defaults[team_id])
                for team_id, progress in team.items()
            }
    return completions


def compute_part_completions(
    stations: list[HideoutStation], team: dict[str, PlayerProgress]
) -> dict[str, dict[str, bool]]:
    """Item hand-in completion map `requirement_id -> team_id -> bool`."""
    part_ids: dict[str, None] = {}
    for station in stations:
        for level in station.levels:
            for requirement in level.item_requirements:
                part_ids.setdefault(requirement.id, None)

    completions: dict[str, dict[str, bool]] = {}
    for part_id in part_ids:
        completions[part_id] = {}
        for team_id, progress in team.items():
            record = progress.hideout_parts.get(part_id)
            completions[part_id][team_id] = record is not None and record.complete
    return completions


def station_status(station: HideoutStation, station_levels: dict[str, int]) -> StationStatus:
    """Whether a station is maxed, ready for its next level, or locked.

    Args:
        station: The station to classify.
        station_levels: Map of station id -> current level for one player.
    """
    current = station_levels.get(station.id, 0)
    if current >= station.max_level:
        return StationStatus.MAXED
    next_level = station.level_by_number(current + 1)
    if next_level is None:
        return StationStatus.LOCKED
    for requirement in next_level.station_level_requirements:
        if requirement.station is None:
            continue
        if station_levels.get(requirement.station.id, 0) < requirement.level:
            return StationStatus.LOCKED
    return StationStatus.AVAILABLE
