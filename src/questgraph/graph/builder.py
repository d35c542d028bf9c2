"""
Dependency graph construction for tasks and hideout levels.

Edges point from the prerequisite to the dependent:

    required_task -> task
    required_level -> level

Requirements that need a task to be *active* rather than completed do not
become direct edges. "B requires A active" is satisfied as soon as A can be
started, so B instead inherits edges from A's own predecessors.
"""

import logging
from dataclasses import dataclass, field

import networkx as nx

from ..schema import HideoutModule, HideoutStation, Task
from ..statuses import is_active_only
from .relationships import extract_alternatives

logger = logging.getLogger(__name__)


@dataclass
class TaskGraphData:
    """Enriched tasks plus the graph and relations they were derived from."""

    tasks: list[Task] = field(default_factory=list)
    graph: nx.DiGraph = field(default_factory=nx.DiGraph)
    alternatives: dict[str, list[str]] = field(default_factory=dict)
    cycles: list[list[str]] = field(default_factory=list)

    @property
    def tasks_by_id(self) -> dict[str, Task]:
        return {task.id: task for task in self.tasks}


@dataclass
class HideoutGraphData:
    modules: list[HideoutModule] = field(default_factory=list)
    graph: nx.DiGraph = field(default_factory=nx.DiGraph)

    @property
    def modules_by_id(self) -> dict[str, HideoutModule]:
        return {module.id: module for module in self.modules}


def _add_edge(graph: nx.DiGraph, source: str, target: str) -> None:
    if source == target:
        logger.debug(f"Ignoring self-referencing requirement on {source}")
        return
    graph.add_edge(source, target)


def build_task_graph(tasks: list[Task]) -> nx.DiGraph:
    """Build the task prerequisite graph.

    Args:
        tasks: Full task list.

    Returns:
        Directed graph with one node per task id. Requirements that
        reference tasks missing from the list are dropped with a warning.
    """
    graph = nx.DiGraph()
    known_ids = {task.id for task in tasks}
    deferred: list[tuple[Task, str]] = []

    for task in tasks:
        graph.add_node(task.id)

    for task in tasks:
        for requirement in task.task_requirements:
            required_id = requirement.task_id
            if not required_id:
                continue
            if required_id not in known_ids:
                logger.warning(f"Task {task.id} requires unknown task {required_id}; skipping edge")
                continue
            if is_active_only(requirement.status):
                deferred.append((task, required_id))
            else:
                _add_edge(graph, required_id, task.id)

    # Active-only requirements resolve to the required task's predecessors
    for task, required_id in deferred:
        for predecessor_id in list(graph.predecessors(required_id)):
            _add_edge(graph, predecessor_id, task.id)

    logger.debug(
        f"Built task graph: {graph.number_of_nodes()} nodes, {graph.number_of_edges()} edges "
        f"({len(deferred)} active-only requirements)"
    )
    return graph


def find_requirement_cycles(graph: nx.DiGraph) -> list[list[str]]:
    """Find requirement loops. Well-formed game data has none."""
    return [list(cycle) for cycle in nx.simple_cycles(graph)]


def enhance_tasks(
    tasks: list[Task], graph: nx.DiGraph, alternatives: dict[str, list[str]]
) -> list[Task]:
    """Return copies of `tasks` carrying graph neighbours and alternatives.

    Alternatives derived from the data take precedence; tasks without any
    keep whatever alternatives the provider already supplied.
    """
    enhanced: list[Task] = []
    for task in tasks:
        enhanced.append(
            task.model_copy(
                update={
                    "predecessors": list(graph.predecessors(task.id)),
                    "successors": list(graph.successors(task.id)),
                    "alternatives": list(alternatives.get(task.id, task.alternatives)),
                }
            )
        )
    return enhanced


def process_task_data(tasks: list[Task], warn_on_cycles: bool = True) -> TaskGraphData:
    """Build the task graph, derive alternatives and enrich the tasks.

    Args:
        tasks: Raw task list from the game-data provider.
        warn_on_cycles: Scan for requirement cycles and log each one.

    Returns:
        TaskGraphData with enriched task copies; the input is not modified.
    """
    if not tasks:
        return TaskGraphData()

    graph = build_task_graph(tasks)
    alternatives = extract_alternatives(tasks)

    cycles: list[list[str]] = []
    if warn_on_cycles:
        cycles = find_requirement_cycles(graph)
        for cycle in cycles:
            logger.warning(f"Requirement cycle in task data: {' -> '.join(cycle + cycle[:1])}")

    return TaskGraphData(
        tasks=enhance_tasks(tasks, graph, alternatives),
        graph=graph,
        alternatives=alternatives,
        cycles=cycles,
    )


# ==================== HIDEOUT ====================


def build_hideout_graph(stations: list[HideoutStation]) -> nx.DiGraph:
    """Build the hideout level graph from station level requirements.

    Every requirement becomes a direct edge from the required level to the
    dependent level. Requirements that cannot be resolved to a level id are
    skipped with a warning.
    """
    graph = nx.DiGraph()
    stations_by_id = {station.id: station for station in stations}

    for station in stations:
        for level in station.levels:
            graph.add_node(level.id)

    for station in stations:
        for level in station.levels:
            for requirement in level.station_level_requirements:
                if requirement.station is None:
                    continue
                required_station = stations_by_id.get(requirement.station.id)
                required_level = (
                    required_station.level_by_number(requirement.level) if required_station else None
                )
                if required_level is None:
                    logger.warning(
                        f"Could not find required level ID for station {requirement.station.id} "
                        f"level {requirement.level} needed by {level.id}"
                    )
                    continue
                _add_edge(graph, required_level.id, level.id)

    return graph


def create_hideout_modules(stations: list[HideoutStation], graph: nx.DiGraph) -> list[HideoutModule]:
    modules: list[HideoutModule] = []
    for station in stations:
        for level in station.levels:
            modules.append(
                HideoutModule(
                    **level.model_dump(),
                    station_id=station.id,
                    predecessors=list(graph.predecessors(level.id)),
                    successors=list(graph.successors(level.id)),
                )
            )
    return modules


def process_hideout_data(stations: list[HideoutStation]) -> HideoutGraphData:
    """Build the hideout graph and the modules annotated from it."""
    if not stations:
        return HideoutGraphData()

    graph = build_hideout_graph(stations)
    return HideoutGraphData(modules=create_hideout_modules(stations, graph), graph=graph)
