"""
One full resolution pass over a team.

The resolver holds no state between passes. Hosts decide when to run a
pass (on every input change, on a debounce timer, or per request) and
discard stale results.
"""

import logging
import time

from ..config import EngineConfig
from ..progress import PlayerProgress
from ..schema import Task
from .availability import compute_task_availability
from .invalidation import InvalidationResult, compute_invalid_progress
from .team import AggregationPolicy, TeamResolution, aggregate_task_map

logger = logging.getLogger(__name__)


class ProgressResolver:
    """Runs availability and invalidation for every team member.

    Args:
        tasks: Enriched task list (see questgraph.graph.process_task_data).
        config: Engine settings; defaults when omitted.
    """

    def __init__(self, tasks: list[Task], config: EngineConfig | None = None):
        self.tasks = tasks
        self.config = config or EngineConfig()

    def resolve_invalidity(self, progress: PlayerProgress) -> InvalidationResult:
        return compute_invalid_progress(
            self.tasks,
            progress.task_completions,
            progress.faction(self.config.default_faction),
            alternative_objective_cascade=self.config.alternative_objective_cascade,
        )

    def resolve_availability(self, progress: PlayerProgress) -> dict[str, bool]:
        return compute_task_availability(
            self.tasks,
            progress,
            self.config.default_faction,
            self.config.default_player_level,
        )

    def resolve_team(self, team: dict[str, PlayerProgress]) -> TeamResolution:
        """Compute every per-member map for `team`.

        Args:
            team: Map of team id -> progress for each visible member.

        Returns:
            TeamResolution keyed `task_id -> team_id` (objectives:
            `objective_id -> team_id`).
        """
        start = time.perf_counter()
        resolution = TeamResolution(
            available={task.id: {} for task in self.tasks},
            completed={task.id: {} for task in self.tasks},
            failed={task.id: {} for task in self.tasks},
            invalid_tasks={task.id: {} for task in self.tasks},
            invalid_objectives={
                objective_id: {} for task in self.tasks for objective_id in task.objective_ids
            },
        )

        for team_id, progress in team.items():
            resolution.factions[team_id] = progress.faction(self.config.default_faction)
            available = self.resolve_availability(progress)
            invalid = self.resolve_invalidity(progress)

            for task in self.tasks:
                resolution.available[task.id][team_id] = available.get(task.id, False)
                resolution.completed[task.id][team_id] = progress.is_task_completed(task.id)
                resolution.failed[task.id][team_id] = progress.is_task_failed(task.id)
                resolution.invalid_tasks[task.id][team_id] = invalid.is_task_invalid(task.id)
            for objective_id in resolution.invalid_objectives:
                resolution.invalid_objectives[objective_id][team_id] = invalid.is_objective_invalid(
                    objective_id
                )

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"Resolved {len(self.tasks)} tasks for {len(team)} team members in {elapsed_ms:.1f}ms"
        )
        return resolution

    def aggregate(self, resolution: TeamResolution, policy: AggregationPolicy) -> dict[str, bool]:
        """Obtainable-now per task under `policy`: available and not invalid."""
        obtainable = {
            task_id: {
                team_id: value and not resolution.invalid_tasks.get(task_id, {}).get(team_id, False)
                for team_id, value in members.items()
            }
            for task_id, members in resolution.available.items()
        }
        return aggregate_task_map(obtainable, self.tasks, resolution.factions, policy)
