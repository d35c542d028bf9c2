"""Tests for the full team resolution pass."""

import logging

import pytest

from questgraph.config import EngineConfig
from questgraph.engine import AggregationPolicy, ProgressResolver
from questgraph.graph import process_task_data
from questgraph.progress import PlayerProgress
from questgraph.schema import Task


@pytest.fixture
def tasks() -> list[Task]:
    """Small questline with an alternative pair and a BEAR-only task."""
    raw = [
        {"id": "intro", "objectives": [{"id": "intro-1"}]},
        {"id": "left", "taskRequirements": [{"task": {"id": "intro"}}], "objectives": [{"id": "left-1"}]},
        {
            "id": "right",
            "taskRequirements": [{"task": {"id": "intro"}}],
            "failConditions": [{"id": "right-fail", "task": {"id": "left"}, "status": ["complete"]}],
            "objectives": [{"id": "right-1"}],
        },
        {"id": "after-right", "taskRequirements": [{"task": {"id": "right"}}], "objectives": [{"id": "ar-1"}]},
        {"id": "bear-only", "factionName": "BEAR", "objectives": [{"id": "bear-1"}]},
    ]
    return process_task_data([Task.model_validate(task) for task in raw]).tasks


@pytest.fixture
def team() -> dict[str, PlayerProgress]:
    return {
        "me": PlayerProgress.model_validate(
            {"pmcFaction": "USEC", "taskCompletions": {"intro": {"complete": True}, "left": {"complete": True}}}
        ),
        "friend": PlayerProgress.model_validate({"pmcFaction": "BEAR"}),
    }


class TestProgressResolver:
    """Test one resolution pass over a team."""

    def test_maps_cover_every_task_and_member(self, tasks, team):
        """Every map is keyed by every task and then every member."""
        resolution = ProgressResolver(tasks).resolve_team(team)
        for task in tasks:
            assert set(resolution.available[task.id]) == {"me", "friend"}
            assert set(resolution.invalid_tasks[task.id]) == {"me", "friend"}
        assert set(resolution.invalid_objectives) == {"intro-1", "left-1", "right-1", "ar-1", "bear-1"}
        assert resolution.factions == {"me": "USEC", "friend": "BEAR"}

    def test_member_states(self, tasks, team):
        """Per-member completion, availability and invalidity."""
        resolution = ProgressResolver(tasks).resolve_team(team)
        assert resolution.completed["left"]["me"] is True
        assert resolution.invalid_tasks["right"] == {"me": True, "friend": False}
        assert resolution.invalid_tasks["after-right"]["me"] is True
        assert resolution.invalid_objectives["right-1"]["me"] is True
        assert resolution.invalid_objectives["ar-1"]["me"] is False
        assert resolution.invalid_tasks["bear-only"] == {"me": True, "friend": False}
        assert resolution.available["intro"] == {"me": False, "friend": True}

    def test_objective_cascade_config(self, tasks, team):
        """The engine config switches dependent objective invalidation on."""
        config = EngineConfig(alternative_objective_cascade=True)
        resolution = ProgressResolver(tasks, config).resolve_team(team)
        assert resolution.invalid_objectives["ar-1"]["me"] is True

    def test_aggregate_excludes_invalid(self, tasks, team):
        """Available-but-invalid members do not count as obtainable."""
        resolver = ProgressResolver(tasks)
        resolution = resolver.resolve_team(team)
        # right is unlocked for me (intro done) but invalid
        assert resolution.available["right"]["me"] is True
        assert resolver.aggregate(resolution, AggregationPolicy.ANY)["right"] is False

    def test_idempotent(self, tasks, team):
        """Two passes on identical inputs give identical maps."""
        resolver = ProgressResolver(tasks)
        assert resolver.resolve_team(team) == resolver.resolve_team(team)

    def test_empty_team(self, tasks):
        """A team with nobody visible aggregates to False everywhere."""
        resolver = ProgressResolver(tasks)
        resolution = resolver.resolve_team({})
        assert not any(resolver.aggregate(resolution, AggregationPolicy.ANY).values())

    def test_logs_summary(self, tasks, team, caplog):
        """Each pass logs one summary line."""
        with caplog.at_level(logging.INFO, logger="questgraph"):
            ProgressResolver(tasks).resolve_team(team)
        assert "Resolved 5 tasks for 2 team members" in caplog.text

    def test_failure_accepting_requirement_is_available_and_valid(self):
        """A task that accepts a failed prerequisite is both unlocked and valid."""
        tasks = process_task_data(
            [
                Task.model_validate({"id": "a"}),
                Task.model_validate(
                    {"id": "b", "taskRequirements": [{"task": {"id": "a"}, "status": ["complete", "failed"]}]}
                ),
            ]
        ).tasks
        progress = PlayerProgress.model_validate({"taskCompletions": {"a": {"complete": True, "failed": True}}})
        resolution = ProgressResolver(tasks).resolve_team({"me": progress})
        assert resolution.member_state("b", "me") == {
            "unlocked": True,
            "completed": False,
            "failed": False,
            "invalid": False,
        }
