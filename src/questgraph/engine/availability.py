"""
Task availability resolution.

A task is *available* when a player can currently obtain it: prerequisites
satisfied, level and trader gates met, faction matching, and nothing it
depends on failed. Availability does not imply "not yet completed" when the
traversal runs in `allow_completed` mode.

Evaluation order (first failing check wins):
1. already completed (only when `allow_completed` is False)
2. a `failed_requirements` target has failed
3. player level below `min_player_level`
4. a trader loyalty requirement not met
5. a `task_requirements` entry not satisfied
6. faction mismatch

Resolution is a memoized recursive walk. Each AvailabilityResolver owns its
memo tables and visiting sets and must not be shared between team members
or reused across passes.
"""

import logging

from ..progress import CompletionRecord, PlayerProgress
from ..schema import Task, TaskRequirement
from ..statuses import (
    ACTIVE_STATUSES,
    COMPLETE_STATUSES,
    FAILED_STATUSES,
    normalize_statuses,
)

logger = logging.getLogger(__name__)


class AvailabilityResolver:
    """Computes task availability for one team member in one pass."""

    def __init__(
        self,
        tasks: list[Task],
        progress: PlayerProgress,
        default_faction: str = "USEC",
        default_player_level: int = 1,
    ):
        self.tasks_by_id: dict[str, Task] = {task.id: task for task in tasks}
        self.progress = progress
        self.faction = progress.faction(default_faction)
        self.default_player_level = default_player_level
        self.player_level = progress.player_level(default_player_level)

        # One memo table and one visiting set per traversal mode
        self._memo: dict[bool, dict[str, bool]] = {False: {}, True: {}}
        self._visiting: dict[bool, set[str]] = {False: set(), True: set()}
        self.cycle_edges: set[str] = set()

    def _record(self, task_id: str) -> CompletionRecord | None:
        return self.progress.task_completions.get(task_id)

    def is_available(self, task_id: str, allow_completed: bool = False) -> bool:
        """Whether `task_id` is obtainable right now.

        Args:
            task_id: Task to evaluate.
            allow_completed: Evaluate the task's gates even if the player
                already completed it ("could it be unlocked").

        Returns:
            Availability. Unknown tasks and tasks reached again while still
            being evaluated (a requirement cycle) are unavailable.
        """
        memo = self._memo[allow_completed]
        if task_id in memo:
            return memo[task_id]

        visiting = self._visiting[allow_completed]
        if task_id in visiting:
            if task_id not in self.cycle_edges:
                self.cycle_edges.add(task_id)
                logger.warning(f"Requirement cycle reached task {task_id}; treating edge as unmet")
            return False

        task = self.tasks_by_id.get(task_id)
        if task is None:
            return False

        visiting.add(task_id)
        try:
            result = self._evaluate(task, allow_completed)
        finally:
            visiting.discard(task_id)

        memo[task_id] = result
        return result

    def _evaluate(self, task: Task, allow_completed: bool) -> bool:
        record = self._record(task.id)
        if not allow_completed and record is not None and record.is_finished:
            return False

        for requirement in task.failed_requirements:
            if requirement.task_id and self.progress.is_task_failed(requirement.task_id):
                return False

        if task.min_player_level and self.player_level < task.min_player_level:
            return False

        for trader_requirement in task.trader_level_requirements:
            if (
                self.progress.trader_level(trader_requirement.trader.id, self.default_player_level)
                < trader_requirement.level
            ):
                return False

        for requirement in task.task_requirements:
            if not self.requirement_satisfied(requirement):
                return False

        if not task.matches_faction(self.faction):
            return False

        return True

    def requirement_satisfied(self, requirement: TaskRequirement) -> bool:
        """Whether a single requirement edge is satisfied.

        A requirement may accept several statuses; it is satisfied when any
        accepted status holds. "Active" is not persisted, so an untouched
        target counts as active when it could itself be unlocked.
        """
        target_id = requirement.task_id
        if not target_id or target_id not in self.tasks_by_id:
            return True

        statuses = normalize_statuses(requirement.status)
        accepts_complete = not statuses or bool(statuses & COMPLETE_STATUSES)
        accepts_failed = bool(statuses & FAILED_STATUSES)
        accepts_active = bool(statuses & ACTIVE_STATUSES)

        record = self._record(target_id)

        if accepts_complete and record is not None and record.is_completed:
            return True
        if accepts_failed and record is not None and record.is_failed:
            return True
        if accepts_active:
            if record is not None:
                return record.is_active or record.is_completed
            return self.is_available(target_id, allow_completed=True)
        return False

    def compute(self) -> dict[str, bool]:
        """Availability of every task for this member."""
        return {task_id: self.is_available(task_id) for task_id in self.tasks_by_id}


def compute_task_availability(
    tasks: list[Task],
    progress: PlayerProgress,
    default_faction: str = "USEC",
    default_player_level: int = 1,
) -> dict[str, bool]:
    """Availability map `task_id -> bool` for a single player.

    Args:
        tasks: Enriched task list.
        progress: The player's progress in the active game mode.
        default_faction: Faction assumed when the progress has none.
        default_player_level: Level assumed when the progress has none.

    Returns:
        Map of task id -> "is this task currently obtainable".
    """
    return AvailabilityResolver(tasks, progress, default_faction, default_player_level).compute()


def compute_team_availability(
    tasks: list[Task],
    team: dict[str, PlayerProgress],
    default_faction: str = "USEC",
    default_player_level: int = 1,
) -> dict[str, dict[str, bool]]:
    """Availability map `task_id -> team_id -> bool`.

    A fresh resolver (and memo tables) is allocated per team member.
    """
    available: dict[str, dict[str, bool]] = {task.id: {} for task in tasks}
    for team_id, progress in team.items():
        member_map = compute_task_availability(
            tasks, progress, default_faction, default_player_level
        )
        for task_id, is_available in member_map.items():
            available[task_id][team_id] = is_available
    return available
