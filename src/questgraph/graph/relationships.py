"""
Alternative task extraction.

Two tasks are alternatives when completing one permanently fails the
other. The relation is recorded one-directionally against the task whose
completion forecloses the other:

- task B requires task A to be *failed*    -> A's alternative is B
- task B fails when task A is *completed*  -> A's alternative is B

Consumers must treat the consequence as symmetric; use `conflicts_of`
rather than reading the map directly when both directions matter.
"""

import logging
from collections.abc import Iterable

from ..schema import Task
from ..statuses import has_complete_status, is_failed_only

logger = logging.getLogger(__name__)


def extract_alternatives(tasks: list[Task]) -> dict[str, list[str]]:
    """Derive the alternatives relation from requirements and fail conditions.

    Args:
        tasks: Full task list.

    Returns:
        Map of triggering task id -> deduplicated alternative task ids, in
        discovery order. Self references and unknown ids are skipped.
    """
    known_ids = {task.id for task in tasks}
    alternatives: dict[str, list[str]] = {}

    def add_alternative(source_id: str | None, alternative_id: str) -> None:
        if not source_id or source_id == alternative_id:
            return
        if source_id not in known_ids:
            logger.warning(
                f"Task {alternative_id} references unknown task {source_id} as an alternative trigger"
            )
            return
        targets = alternatives.setdefault(source_id, [])
        if alternative_id not in targets:
            targets.append(alternative_id)

    for task in tasks:
        for requirement in task.task_requirements:
            if requirement.task_id and is_failed_only(requirement.status):
                add_alternative(requirement.task_id, task.id)

        for condition in task.fail_conditions:
            if condition.task_id and has_complete_status(condition.status):
                add_alternative(condition.task_id, task.id)

    logger.debug(f"Extracted alternatives for {len(alternatives)} tasks")
    return alternatives


def alternative_pairs(tasks: Iterable[Task]) -> set[tuple[str, str]]:
    """All recorded alternative pairs as sorted (a, b) tuples."""
    pairs: set[tuple[str, str]] = set()
    for task in tasks:
        for alternative_id in task.alternatives:
            if alternative_id != task.id:
                pairs.add(tuple(sorted((task.id, alternative_id))))  # type: ignore[arg-type]
    return pairs


def conflicts_of(tasks: Iterable[Task]) -> dict[str, set[str]]:
    """Symmetric view of the alternatives relation.

    Returns:
        Map of task id -> every task id it is mutually exclusive with,
        regardless of which side the relation was recorded on.
    """
    conflicts: dict[str, set[str]] = {}
    for first, second in alternative_pairs(tasks):
        conflicts.setdefault(first, set()).add(second)
        conflicts.setdefault(second, set()).add(first)
    return conflicts
