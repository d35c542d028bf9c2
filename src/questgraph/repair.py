"""
One-shot reconciliation of persisted progress.

Older progress rows can hold states the engine would never produce: a
completed task whose alternative was never marked failed, both sides of an
alternative pair completed, or a completed task with unfinished objectives.
These functions rewrite such rows in place. They are meant to run once
when a row is loaded, not on every resolution pass.
"""

import logging
import time
from dataclasses import dataclass

from .progress import CompletionRecord, GameMode, ObjectiveRecord, PlayerProgress, UserProgressRow
from .schema import Task
from .statuses import has_complete_status, is_failed_only

logger = logging.getLogger(__name__)


@dataclass
class RepairCounts:
    pvp: int = 0
    pve: int = 0

    @property
    def total(self) -> int:
        return self.pvp + self.pve


def _now_ms() -> int:
    return int(time.time() * 1000)


def fails_when_completed(task: Task | None, other_id: str) -> bool:
    """True if `task` fails by its own rules once `other_id` is completed."""
    if task is None:
        return False
    for requirement in task.task_requirements:
        if requirement.task_id == other_id and is_failed_only(requirement.status):
            return True
    for condition in task.fail_conditions:
        if condition.task_id == other_id and has_complete_status(condition.status):
            return True
    return False


def _reset_objectives(task: Task | None, progress: PlayerProgress) -> bool:
    """Reset every recorded objective of `task`. Returns whether anything changed."""
    if task is None:
        return False
    changed = False
    for objective in task.objectives:
        record = progress.task_objectives.get(objective.id)
        if record is None:
            continue
        if record.complete or (record.count or 0) > 0:
            changed = True
        record.complete = False
        if record.count is not None or objective.count > 0:
            record.count = 0
    return changed


def mark_task_failed(
    task_id: str,
    progress: PlayerProgress,
    tasks_by_id: dict[str, Task],
    now: int | None = None,
) -> None:
    """Record `task_id` as failed and reset its objectives.

    Args:
        task_id: Task to fail.
        progress: Progress to modify in place.
        tasks_by_id: Task lookup for the objective list.
        now: Timestamp (ms) used when the record has none.
    """
    record = progress.task_completions.setdefault(task_id, CompletionRecord())
    record.complete = True
    record.failed = True
    if record.timestamp is None:
        record.timestamp = now if now is not None else _now_ms()

    task = tasks_by_id.get(task_id)
    if task is None:
        return
    for objective in task.objectives:
        existing = progress.task_objectives.setdefault(objective.id, ObjectiveRecord())
        existing.complete = False
        if existing.count is not None or objective.count > 0:
            existing.count = 0


def _repair_mode_failed_tasks(
    progress: PlayerProgress, tasks_by_id: dict[str, Task], now: int | None
) -> int:
    repaired = 0
    processed_pairs: set[tuple[str, str]] = set()

    for task_id, completion in list(progress.task_completions.items()):
        if not completion.is_completed:
            continue
        task = tasks_by_id.get(task_id)
        if task is None or not task.alternatives:
            continue

        for alternative_id in task.alternatives:
            pair = tuple(sorted((task_id, alternative_id)))
            if pair in processed_pairs:
                continue
            processed_pairs.add(pair)  # type: ignore[arg-type]

            alternative = progress.task_completions.get(alternative_id)
            if alternative is not None and alternative.failed:
                continue

            if alternative is None or not alternative.complete:
                mark_task_failed(alternative_id, progress, tasks_by_id, now)
                repaired += 1
                continue

            # Both sides recorded as completed; keep the earlier completion
            task_ts = completion.timestamp or 0
            alternative_ts = alternative.timestamp or 0
            if task_ts == 0 and alternative_ts == 0:
                fail_alternative = fails_when_completed(tasks_by_id.get(alternative_id), task_id)
                fail_task = fails_when_completed(task, alternative_id)
                if fail_alternative and not fail_task:
                    loser = alternative_id
                elif fail_task and not fail_alternative:
                    loser = task_id
                else:
                    loser = max(task_id, alternative_id)
                    logger.warning(
                        f"Both {task_id} and alternative {alternative_id} are complete with no "
                        f"timestamps; failing {loser}"
                    )
            elif task_ts >= alternative_ts and alternative_ts > 0:
                loser = task_id
            else:
                loser = alternative_id

            mark_task_failed(loser, progress, tasks_by_id, now)
            repaired += 1
            if loser == task_id:
                # This task is no longer a clean completion
                break

    return repaired


def _clear_failed_task_objectives(progress: PlayerProgress, tasks_by_id: dict[str, Task]) -> int:
    cleared = 0
    for task_id, completion in progress.task_completions.items():
        if not completion.failed:
            continue
        if _reset_objectives(tasks_by_id.get(task_id), progress):
            cleared += 1
    return cleared


def repair_failed_task_states(
    tasks: list[Task], row: UserProgressRow, now: int | None = None
) -> RepairCounts:
    """Fail the losing side of every alternative pair, in both game modes.

    Args:
        tasks: Enriched task list (with `alternatives`).
        row: Persisted progress, modified in place.
        now: Timestamp (ms) stamped on records that have none.

    Returns:
        RepairCounts with the number of tasks marked failed per mode.
    """
    counts = RepairCounts()
    if not tasks:
        logger.debug("No tasks available for repair, skipping")
        return counts

    tasks_by_id = {task.id: task for task in tasks}
    cleared = RepairCounts()
    for mode in GameMode:
        progress = row.for_mode(mode)
        repaired = _repair_mode_failed_tasks(progress, tasks_by_id, now)
        setattr(counts, mode.value, repaired)
        setattr(cleared, mode.value, _clear_failed_task_objectives(progress, tasks_by_id))

    if counts.total:
        logger.info(f"Repaired failed task states - PvP: {counts.pvp}, PvE: {counts.pve}")
    if cleared.total:
        logger.info(f"Cleared objectives for failed tasks - PvP: {cleared.pvp}, PvE: {cleared.pve}")
    return counts


def repair_completed_task_objectives(
    tasks: list[Task], row: UserProgressRow, now: int | None = None
) -> RepairCounts:
    """Mark every objective of a cleanly completed task complete.

    Returns:
        RepairCounts with the number of objective records changed per mode.
    """
    counts = RepairCounts()
    if not tasks:
        logger.debug("No tasks available for objective repair, skipping")
        return counts

    tasks_by_id = {task.id: task for task in tasks}
    for mode in GameMode:
        progress = row.for_mode(mode)
        repaired = 0
        for task_id, completion in progress.task_completions.items():
            if not completion.is_completed:
                continue
            task = tasks_by_id.get(task_id)
            if task is None:
                continue
            for objective in task.objectives:
                record = progress.task_objectives.get(objective.id) or ObjectiveRecord()
                changed = False
                if not record.complete:
                    record.complete = True
                    changed = True
                if objective.count > 0 and (record.count or 0) < objective.count:
                    record.count = objective.count
                    changed = True
                if changed:
                    if not record.timestamp:
                        record.timestamp = completion.timestamp or (now if now is not None else _now_ms())
                    progress.task_objectives[objective.id] = record
                    repaired += 1
        setattr(counts, mode.value, repaired)

    if counts.total:
        logger.info(
            f"Repaired completed task objectives - PvP: {counts.pvp}, PvE: {counts.pve}"
        )
    return counts
