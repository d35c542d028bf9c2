"""
Invalidation of tasks that can never be completed.

A task (with its objectives) is invalid for a player when:
1. it belongs to the other faction (not cascaded: faction questlines have
   equivalents, so dependents may still be reachable)
2. it requires another task to have failed, and that task was completed
3. it requires another task to be completed or active, and that task failed
   (lists that also accept `failed` are satisfied by the failure)
4. a mutually exclusive alternative was completed (either direction of the
   recorded relation)

Rules 2-4 cascade to every task that transitively requires the invalid one
through a completion/active edge that does not accept failure. Cleanly
completed tasks are never marked and stop the cascade. A failed task is a
terminal state, not an invalid one.
"""

import logging
from collections import deque
from dataclasses import dataclass, field

from ..graph.relationships import conflicts_of
from ..progress import CompletionRecord, PlayerProgress
from ..schema import Task
from ..statuses import is_failed_only, requires_completion_or_active

logger = logging.getLogger(__name__)


@dataclass
class InvalidationResult:
    invalid_tasks: dict[str, bool] = field(default_factory=dict)
    invalid_objectives: dict[str, bool] = field(default_factory=dict)

    def is_task_invalid(self, task_id: str) -> bool:
        return self.invalid_tasks.get(task_id, False)

    def is_objective_invalid(self, objective_id: str) -> bool:
        return self.invalid_objectives.get(objective_id, False)


def build_required_by(tasks: list[Task]) -> dict[str, set[str]]:
    """Reverse dependency index over completion/active edges.

    Returns:
        Map of required task id -> ids of tasks that require it.
    """
    required_by: dict[str, set[str]] = {}
    for task in tasks:
        for requirement in task.task_requirements:
            required_id = requirement.task_id
            if not required_id or not requires_completion_or_active(requirement.status):
                continue
            required_by.setdefault(required_id, set()).add(task.id)
    return required_by


class _InvalidationPass:
    """Mutable state for one invalidation pass over one player's records."""

    def __init__(
        self,
        tasks: list[Task],
        completions: dict[str, CompletionRecord],
        alternative_objective_cascade: bool,
    ):
        self.tasks_by_id = {task.id: task for task in tasks}
        self.completions = completions
        self.required_by = build_required_by(tasks)
        self.alternative_objective_cascade = alternative_objective_cascade
        self.result = InvalidationResult()
        self.visited: set[str] = set()

    def is_completed(self, task_id: str) -> bool:
        record = self.completions.get(task_id)
        return record is not None and record.is_completed

    def is_failed(self, task_id: str) -> bool:
        record = self.completions.get(task_id)
        return record is not None and record.is_failed

    def mark(self, task: Task, objectives: bool = True) -> None:
        self.result.invalid_tasks[task.id] = True
        if objectives:
            for objective_id in task.objective_ids:
                self.result.invalid_objectives[objective_id] = True

    def invalidate(self, root_id: str, cascade_objectives: bool = True) -> None:
        """Mark `root_id` invalid and cascade to its dependents.

        Args:
            root_id: Task that can no longer be completed.
            cascade_objectives: Whether dependents reached by the cascade
                also get their objectives invalidated. The root always does.
        """
        queue: deque[tuple[str, bool]] = deque([(root_id, True)])
        while queue:
            task_id, objectives = queue.popleft()
            task = self.tasks_by_id.get(task_id)
            if task is None:
                continue

            completed = self.is_completed(task_id)
            if not completed:
                self.mark(task, objectives=objectives)

            if task_id in self.visited:
                continue
            self.visited.add(task_id)

            # A historical completion stands; do not cascade through it
            if completed:
                continue

            for dependent_id in sorted(self.required_by.get(task_id, ())):
                queue.append((dependent_id, cascade_objectives))

    def run(self, pmc_faction: str) -> InvalidationResult:
        tasks = list(self.tasks_by_id.values())

        for task in tasks:
            if not task.matches_faction(pmc_faction):
                self.mark(task)

        for task in tasks:
            if any(
                requirement.task_id
                and is_failed_only(requirement.status)
                and self.is_completed(requirement.task_id)
                for requirement in task.task_requirements
            ):
                self.invalidate(task.id)

        for task in tasks:
            if any(
                requirement.task_id
                and requires_completion_or_active(requirement.status)
                and self.is_failed(requirement.task_id)
                for requirement in task.task_requirements
            ):
                self.invalidate(task.id)

        conflicts = conflicts_of(tasks)
        for task in tasks:
            if any(self.is_completed(other_id) for other_id in sorted(conflicts.get(task.id, ()))):
                self.invalidate(task.id, cascade_objectives=self.alternative_objective_cascade)

        logger.debug(
            f"Invalidation pass: {len(self.result.invalid_tasks)} tasks, "
            f"{len(self.result.invalid_objectives)} objectives invalid"
        )
        return self.result


def compute_invalid_progress(
    tasks: list[Task],
    task_completions: dict[str, CompletionRecord],
    pmc_faction: str,
    alternative_objective_cascade: bool = False,
) -> InvalidationResult:
    """Compute the invalid task and objective sets for one player.

    Args:
        tasks: Enriched task list (with `alternatives`).
        task_completions: The player's completion records.
        pmc_faction: The player's faction.
        alternative_objective_cascade: Invalidate objectives of tasks
            reached through a completed alternative's cascade, not only
            those of the alternative itself.

    Returns:
        InvalidationResult with `invalid_tasks` and `invalid_objectives`.
    """
    if not tasks:
        return InvalidationResult()
    return _InvalidationPass(tasks, task_completions, alternative_objective_cascade).run(pmc_faction)


def compute_team_invalidity(
    tasks: list[Task],
    team: dict[str, PlayerProgress],
    default_faction: str = "USEC",
    alternative_objective_cascade: bool = False,
) -> tuple[dict[str, dict[str, bool]], dict[str, dict[str, bool]]]:
    """Invalidity maps `task_id -> team_id -> bool` and `objective_id -> team_id -> bool`."""
    invalid_tasks: dict[str, dict[str, bool]] = {task.id: {} for task in tasks}
    invalid_objectives: dict[str, dict[str, bool]] = {
        objective_id: {} for task in tasks for objective_id in task.objective_ids
    }
    for team_id, progress in team.items():
        result = compute_invalid_progress(
            tasks,
            progress.task_completions,
            progress.faction(default_faction),
            alternative_objective_cascade,
        )
        for task_id in invalid_tasks:
            invalid_tasks[task_id][team_id] = result.is_task_invalid(task_id)
        for objective_id in invalid_objectives:
            invalid_objectives[objective_id][team_id] = result.is_objective_invalid(objective_id)
    return invalid_tasks, invalid_objectives

