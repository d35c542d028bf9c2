"""Availability, invalidation and team aggregation."""

from .availability import AvailabilityResolver, compute_task_availability, compute_team_availability
from .hideout import (
    EditionDefaults,
    StationStatus,
    compute_module_completions,
    compute_part_completions,
    compute_station_levels,
    edition_defaults,
    station_status,
)
from .invalidation import (
    InvalidationResult,
    build_required_by,
    compute_invalid_progress,
    compute_team_invalidity,
)
from .resolver import ProgressResolver
from .team import (
    AggregationPolicy,
    TeamResolution,
    TeamTaskStatus,
    aggregate,
    aggregate_task_map,
    classify_team_task,
    count_team_statuses,
    is_invalid_for_all,
    needed_by,
    relevant_team_ids,
)

__all__ = [
    "AggregationPolicy",
    "AvailabilityResolver",
    "EditionDefaults",
    "InvalidationResult",
    "ProgressResolver",
    "StationStatus",
    "TeamResolution",
    "TeamTaskStatus",
    "aggregate",
    "aggregate_task_map",
    "build_required_by",
    "classify_team_task",
    "compute_invalid_progress",
    "compute_module_completions",
    "compute_part_completions",
    "compute_station_levels",
    "compute_task_availability",
    "compute_team_availability",
    "compute_team_invalidity",
    "count_team_statuses",
    "edition_defaults",
    "is_invalid_for_all",
    "needed_by",
    "relevant_team_ids",
    "station_status",
]
