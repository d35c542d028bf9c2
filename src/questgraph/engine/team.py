"""
Team aggregation.

Collapses per-member maps (`task_id -> team_id -> bool`) into one answer
per task for "view all team members" displays:

- ANY: true if any relevant member satisfies the predicate
- ALL: true only if every relevant member satisfies it

A member is relevant for a task when the task's faction matches theirs.
Tasks with no relevant member aggregate to False under both policies.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from ..schema import Task

logger = logging.getLogger(__name__)

TeamMap = dict[str, dict[str, bool]]


class AggregationPolicy(str, Enum):
    ANY = "any"
    ALL = "all"


class TeamTaskStatus(str, Enum):
    """Status of a task in the combined team view."""

    FAILED = "failed"
    COMPLETED = "completed"
    AVAILABLE = "available"
    LOCKED = "locked"
    INVALID = "invalid"


@dataclass
class TeamResolution:
    """Per-member resolution maps for one pass over a team."""

    available: TeamMap = field(default_factory=dict)
    completed: TeamMap = field(default_factory=dict)
    failed: TeamMap = field(default_factory=dict)
    invalid_tasks: TeamMap = field(default_factory=dict)
    invalid_objectives: TeamMap = field(default_factory=dict)
    factions: dict[str, str] = field(default_factory=dict)

    @property
    def team_ids(self) -> list[str]:
        return list(self.factions)

    def member_state(self, task_id: str, team_id: str) -> dict[str, bool]:
        return {
            "unlocked": self.available.get(task_id, {}).get(team_id, False),
            "completed": self.completed.get(task_id, {}).get(team_id, False),
            "failed": self.failed.get(task_id, {}).get(team_id, False),
            "invalid": self.invalid_tasks.get(task_id, {}).get(team_id, False),
        }


def relevant_team_ids(task: Task, factions: dict[str, str]) -> list[str]:
    """Members whose faction can take `task`, in team order."""
    return [team_id for team_id, faction in factions.items() if task.matches_faction(faction)]


def aggregate(values: dict[str, bool], team_ids: list[str], policy: AggregationPolicy) -> bool:
    """Collapse one task's per-member values over `team_ids`."""
    if not team_ids:
        return False
    if policy == AggregationPolicy.ALL:
        return all(values.get(team_id, False) for team_id in team_ids)
    return any(values.get(team_id, False) for team_id in team_ids)


def aggregate_task_map(
    task_map: TeamMap,
    tasks: list[Task],
    factions: dict[str, str],
    policy: AggregationPolicy,
) -> dict[str, bool]:
    """Aggregate a `task_id -> team_id -> bool` map with `policy`.

    Args:
        task_map: Per-member values, e.g. availability or invalidity.
        tasks: Tasks to aggregate (their factions select relevant members).
        factions: Map of team id -> player faction for visible members.
        policy: ANY or ALL.

    Returns:
        Map of task id -> aggregated value.
    """
    return {
        task.id: aggregate(task_map.get(task.id, {}), relevant_team_ids(task, factions), policy)
        for task in tasks
    }


def is_invalid_for_all(task: Task, resolution: TeamResolution) -> bool:
    return aggregate(
        resolution.invalid_tasks.get(task.id, {}),
        relevant_team_ids(task, resolution.factions),
        AggregationPolicy.ALL,
    )


def needed_by(task: Task, resolution: TeamResolution) -> list[str]:
    """Relevant members who can take `task` now and have not finished it."""
    needed: list[str] = []
    for team_id in relevant_team_ids(task, resolution.factions):
        state = resolution.member_state(task.id, team_id)
        if state["unlocked"] and not state["completed"] and not state["failed"]:
            needed.append(team_id)
    return needed


def classify_team_task(task: Task, resolution: TeamResolution) -> TeamTaskStatus | None:
    """Status of `task` in the combined view, or None if no member is relevant.

    Precedence: failed for anyone, completed by everyone, available to
    anyone, locked; tasks invalid for every relevant member are neither
    available nor locked.
    """
    team_ids = relevant_team_ids(task, resolution.factions)
    if not team_ids:
        return None

    states = [resolution.member_state(task.id, team_id) for team_id in team_ids]
    invalid_for_all = all(state["invalid"] for state in states)

    if any(state["failed"] for state in states):
        return TeamTaskStatus.FAILED
    if all(state["completed"] and not state["failed"] for state in states):
        return TeamTaskStatus.COMPLETED
    if invalid_for_all:
        return TeamTaskStatus.INVALID
    if any(state["unlocked"] and not state["completed"] for state in states):
        return TeamTaskStatus.AVAILABLE
    return TeamTaskStatus.LOCKED


def count_team_statuses(tasks: list[Task], resolution: TeamResolution) -> dict[str, int]:
    """Count tasks per combined status; `all` counts tasks with a relevant member."""
    counts = {status.value: 0 for status in TeamTaskStatus}
    counts["all"] = 0
    for task in tasks:
        status = classify_team_task(task, resolution)
        if status is None:
            continue
        counts["all"] += 1
        counts[status.value] += 1
    logger.debug(f"Team status counts: {counts}")
    return counts
