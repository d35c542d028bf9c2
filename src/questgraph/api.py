"""
Read-only progress envelope for third-party API consumers.

Flattens one game mode of a stored progress row into lists of records,
annotating tasks and objectives with their invalidity and applying the
hideout levels granted by the player's game edition.
"""

import logging

from pydantic import Field

from .engine.hideout import edition_defaults, granted_level
from .engine.invalidation import compute_invalid_progress
from .progress import GameMode, PlayerProgress, UserProgressRow
from .schema import CamelModel, GameEdition, HideoutStation, Task

logger = logging.getLogger(__name__)

DEFAULT_PMC_FACTION = "USEC"


class TaskProgressEntry(CamelModel):
    id: str
    complete: bool
    invalid: bool = False
    failed: bool = False


class ObjectiveProgressEntry(CamelModel):
    id: str
    complete: bool
    count: int | None = None
    invalid: bool = False


class HideoutModuleProgressEntry(CamelModel):
    id: str
    complete: bool


class HideoutPartProgressEntry(CamelModel):
    id: str
    complete: bool
    count: int | None = None


class ProgressResponseData(CamelModel):
    tasks_progress: list[TaskProgressEntry] = Field(default_factory=list)
    task_objectives_progress: list[ObjectiveProgressEntry] = Field(default_factory=list)
    hideout_modules_progress: list[HideoutModuleProgressEntry] = Field(default_factory=list)
    hideout_parts_progress: list[HideoutPartProgressEntry] = Field(default_factory=list)
    display_name: str
    user_id: str
    player_level: int = 1
    game_edition: int = 1
    pmc_faction: str = DEFAULT_PMC_FACTION


class ProgressResponseMeta(CamelModel):
    self_id: str = Field(alias="self")
    game_mode: GameMode


class ProgressResponse(CamelModel):
    data: ProgressResponseData
    meta: ProgressResponseMeta


def _mark_module_complete(modules: list[HideoutModuleProgressEntry], module_id: str) -> None:
    for module in modules:
        if module.id == module_id:
            module.complete = True
            return
    modules.append(HideoutModuleProgressEntry(id=module_id, complete=True))


def _mark_part_complete(parts: list[HideoutPartProgressEntry], part_id: str, count: int) -> None:
    for part in parts:
        if part.id == part_id:
            part.complete = True
            part.count = count
            return
    parts.append(HideoutPartProgressEntry(id=part_id, complete=True, count=count))


def apply_hideout_auto_complete(
    modules: list[HideoutModuleProgressEntry],
    parts: list[HideoutPartProgressEntry],
    stations: list[HideoutStation],
    game_edition: int,
    editions: list[GameEdition] | None = None,
) -> None:
    """Complete the stash and cultist circle levels granted by `game_edition`.

    The granted levels' item requirements are completed with their full count.
    """
    defaults = edition_defaults(game_edition, editions)
    for station in stations:
        granted = granted_level(station, defaults)
        if not granted:
            continue
        for level in station.levels:
            if level.level > granted:
                continue
            _mark_module_complete(modules, level.id)
            for requirement in level.item_requirements:
                _mark_part_complete(parts, requirement.id, requirement.count)


def resolve_display_name(
    progress: PlayerProgress | None, user_id: str, fallback: str | None = None
) -> str:
    stored = progress.display_name.strip() if progress and progress.display_name else ""
    return stored or fallback or user_id[:6]


def transform_progress(
    progress: PlayerProgress | None,
    user_id: str,
    game_edition: int,
    tasks: list[Task],
    stations: list[HideoutStation],
    fallback_display_name: str | None = None,
    editions: list[GameEdition] | None = None,
) -> ProgressResponseData:
    """Build the API payload for one game mode of a user's progress.

    Args:
        progress: Progress for the requested game mode, or None if the user
            has none yet.
        user_id: Owner of the progress.
        game_edition: Purchased edition value (1 when unknown).
        tasks: Enriched task list (alternatives feed invalidation).
        stations: Hideout stations for edition auto-completion.
        fallback_display_name: Used when no display name is stored.
        editions: Optional edition catalogue.

    Returns:
        ProgressResponseData ready to serialize with `by_alias=True`.
    """
    progress = progress or PlayerProgress()
    pmc_faction = progress.pmc_faction or DEFAULT_PMC_FACTION
    invalid = compute_invalid_progress(tasks, progress.task_completions, pmc_faction)

    tasks_progress = [
        TaskProgressEntry(
            id=task_id,
            complete=record.is_completed,
            invalid=invalid.is_task_invalid(task_id),
            failed=record.failed,
        )
        for task_id, record in progress.task_completions.items()
    ]
    objectives_progress = [
        ObjectiveProgressEntry(
            id=objective_id,
            complete=record.complete,
            count=record.count,
            invalid=invalid.is_objective_invalid(objective_id),
        )
        for objective_id, record in progress.task_objectives.items()
    ]
    modules_progress = [
        HideoutModuleProgressEntry(id=module_id, complete=record.complete)
        for module_id, record in progress.hideout_modules.items()
    ]
    parts_progress = [
        HideoutPartProgressEntry(id=part_id, complete=record.complete, count=record.count)
        for part_id, record in progress.hideout_parts.items()
    ]
    apply_hideout_auto_complete(modules_progress, parts_progress, stations, game_edition, editions)

    return ProgressResponseData(
        tasks_progress=tasks_progress,
        task_objectives_progress=objectives_progress,
        hideout_modules_progress=modules_progress,
        hideout_parts_progress=parts_progress,
        display_name=resolve_display_name(progress, user_id, fallback_display_name),
        user_id=user_id,
        player_level=progress.player_level(),
        game_edition=game_edition,
        pmc_faction=pmc_faction,
    )


def build_progress_response(
    row: UserProgressRow | None,
    user_id: str,
    game_mode: GameMode | str,
    tasks: list[Task],
    stations: list[HideoutStation],
    editions: list[GameEdition] | None = None,
    default_game_edition: int = 1,
) -> ProgressResponse:
    """Select `game_mode` from a stored row and wrap it in the response envelope.

    Rows without a recorded edition, and missing rows, use `default_game_edition`.
    """
    mode = GameMode(game_mode)
    progress = row.for_mode(mode) if row else None
    game_edition = row.edition(default_game_edition) if row else default_game_edition

    data = transform_progress(progress, user_id, game_edition, tasks, stations, editions=editions)
    logger.debug(
        f"Built {mode.value} progress for {user_id}: {len(data.tasks_progress)} tasks, "
        f"{len(data.task_objectives_progress)} objectives"
    )
    return ProgressResponse(data=data, meta=ProgressResponseMeta(self_id=user_id, game_mode=mode))
