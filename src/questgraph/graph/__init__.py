"""Task and hideout dependency graphs."""

from .builder import (
    HideoutGraphData,
    TaskGraphData,
    build_hideout_graph,
    build_task_graph,
    create_hideout_modules,
    enhance_tasks,
    find_requirement_cycles,
    process_hideout_data,
    process_task_data,
)
from .relationships import alternative_pairs, conflicts_of, extract_alternatives

__all__ = [
    "HideoutGraphData",
    "TaskGraphData",
    "alternative_pairs",
    "build_hideout_graph",
    "build_task_graph",
    "conflicts_of",
    "create_hideout_modules",
    "enhance_tasks",
    "extract_alternatives",
    "find_requirement_cycles",
    "process_hideout_data",
    "process_task_data",
]
