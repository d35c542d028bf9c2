"""Tests for task availability resolution."""

import pytest

from questgraph.engine import AvailabilityResolver, compute_task_availability, compute_team_availability
from questgraph.graph import process_task_data
from questgraph.progress import PlayerProgress
from questgraph.schema import Task


def make_task(task_id: str, requires: dict[str, list[str]] | None = None, **fields) -> Task:
    return Task.model_validate(
        {
            "id": task_id,
            "taskRequirements": [
                {"task": {"id": required_id}, "status": statuses}
                for required_id, statuses in (requires or {}).items()
            ],
            **fields,
        }
    )


def make_progress(completions: dict[str, dict] | None = None, **fields) -> PlayerProgress:
    return PlayerProgress.model_validate({"taskCompletions": completions or {}, **fields})


# ==================== FIXTURES ====================


@pytest.fixture
def chain() -> list[Task]:
    """a -> b -> c, all completion requirements."""
    return process_task_data(
        [make_task("a"), make_task("b", requires={"a": []}), make_task("c", requires={"b": []})]
    ).tasks


# ==================== BASIC GATES ====================


class TestRequirements:
    """Test requirement satisfaction."""

    def test_root_task_available(self, chain):
        """A task with no requirements is available."""
        availability = compute_task_availability(chain, make_progress())
        assert availability == {"a": True, "b": False, "c": False}

    def test_completed_prerequisite_unlocks(self, chain):
        """Completing a unlocks b and hides a."""
        availability = compute_task_availability(chain, make_progress({"a": {"complete": True}}))
        assert availability["a"] is False
        assert availability["b"] is True
        assert availability["c"] is False

    def test_failed_prerequisite_not_a_completion(self, chain):
        """A failed target does not satisfy a completion requirement."""
        progress = make_progress({"a": {"complete": True, "failed": True}})
        assert compute_task_availability(chain, progress)["b"] is False

    def test_failed_flag_alone_is_authoritative(self, chain):
        """failed=True without complete still counts as failed and finished."""
        progress = make_progress({"a": {"failed": True}})
        availability = compute_task_availability(chain, progress)
        assert availability["a"] is False
        assert availability["b"] is False

    def test_failed_status_requirement(self):
        """A failed-only requirement is satisfied only by a failure."""
        tasks = [make_task("a"), make_task("b", requires={"a": ["failed"]})]
        assert compute_task_availability(tasks, make_progress({"a": {"complete": True}}))["b"] is False
        failed = make_progress({"a": {"complete": True, "failed": True}})
        assert compute_task_availability(tasks, failed)["b"] is True

    def test_mixed_status_any_accepted(self):
        """Any accepted status in a mixed list satisfies the requirement."""
        tasks = [make_task("a"), make_task("b", requires={"a": ["complete", "failed"]})]
        failed = make_progress({"a": {"complete": True, "failed": True}})
        assert compute_task_availability(tasks, failed)["b"] is True

    def test_unknown_requirement_ignored(self):
        """Requirements on tasks outside the list do not block."""
        tasks = [make_task("b", requires={"ghost": []})]
        assert compute_task_availability(tasks, make_progress())["b"] is True

    def test_failed_requirements_block(self):
        """A failedRequirements target that failed makes the task unavailable."""
        tasks = [
            make_task("a"),
            make_task("b", failedRequirements=[{"task": {"id": "a"}, "status": ["failed"]}]),
        ]
        assert compute_task_availability(tasks, make_progress())["b"] is True
        failed = make_progress({"a": {"complete": True, "failed": True}})
        assert compute_task_availability(tasks, failed)["b"] is False


class TestActiveRequirements:
    """Test active-status inference."""

    def test_active_requirement_on_root(self):
        """Scenario: B requires A active, A untouched with no predecessors."""
        tasks = process_task_data([make_task("a"), make_task("b", requires={"a": ["active"]})]).tasks
        availability = compute_task_availability(tasks, make_progress())
        assert availability["a"] is True
        assert availability["b"] is True

    def test_active_requirement_waits_for_target_prerequisites(self):
        """B requires A active and A is locked: B is locked too."""
        tasks = [
            make_task("root"),
            make_task("a", requires={"root": []}),
            make_task("b", requires={"a": ["active"]}),
        ]
        assert compute_task_availability(tasks, make_progress())["b"] is False
        progress = make_progress({"root": {"complete": True}})
        assert compute_task_availability(tasks, progress)["b"] is True

    def test_active_record_satisfies(self):
        """A touched-but-unfinished record counts as active."""
        tasks = [
            make_task("root"),
            make_task("a", requires={"root": []}),
            make_task("b", requires={"a": ["active"]}),
        ]
        progress = make_progress({"a": {"complete": False}})
        assert compute_task_availability(tasks, progress)["b"] is True

    def test_completed_target_satisfies_active(self):
        """An already completed target satisfies an active requirement."""
        tasks = [make_task("a"), make_task("b", requires={"a": ["accepted"]})]
        progress = make_progress({"a": {"complete": True}})
        assert compute_task_availability(tasks, progress)["b"] is True

    def test_failed_target_does_not_satisfy_active(self):
        """A failed target is neither active nor completed."""
        tasks = [make_task("a"), make_task("b", requires={"a": ["active"]})]
        progress = make_progress({"a": {"complete": True, "failed": True}})
        assert compute_task_availability(tasks, progress)["b"] is False


class TestPlayerGates:
    """Test level, trader and faction gates."""

    def test_min_player_level(self):
        """Level below minPlayerLevel blocks the task."""
        tasks = [make_task("a", minPlayerLevel=10)]
        assert compute_task_availability(tasks, make_progress(level=9))["a"] is False
        assert compute_task_availability(tasks, make_progress(level=10))["a"] is True

    def test_missing_level_uses_default(self):
        """Progress without a level uses the supplied default."""
        tasks = [make_task("a", minPlayerLevel=5)]
        assert compute_task_availability(tasks, make_progress())["a"] is False
        assert compute_task_availability(tasks, make_progress(), default_player_level=5)["a"] is True

    def test_trader_level_requirement(self):
        """Trader loyalty below the requirement blocks the task."""
        tasks = [
            make_task("a", traderLevelRequirements=[{"trader": {"id": "prapor"}, "level": 2}])
        ]
        low = make_progress(level=30, traders={"prapor": {"level": 1}})
        high = make_progress(level=1, traders={"prapor": {"level": 2}})
        assert compute_task_availability(tasks, low)["a"] is False
        assert compute_task_availability(tasks, high)["a"] is True

    def test_untracked_trader_falls_back_to_player_level(self):
        """Without trader standings the player level stands in."""
        tasks = [
            make_task("a", traderLevelRequirements=[{"trader": {"id": "prapor"}, "level": 2}])
        ]
        assert compute_task_availability(tasks, make_progress(level=2))["a"] is True
        assert compute_task_availability(tasks, make_progress(level=1))["a"] is False

    def test_faction_mismatch(self):
        """BEAR tasks are unavailable to USEC players."""
        tasks = [make_task("bear", factionName="BEAR"), make_task("any")]
        availability = compute_task_availability(tasks, make_progress(pmcFaction="USEC"))
        assert availability == {"bear": False, "any": True}

    def test_default_faction(self):
        """Progress without a faction uses the default."""
        tasks = [make_task("bear", factionName="BEAR")]
        assert compute_task_availability(tasks, make_progress())["bear"] is False
        assert compute_task_availability(tasks, make_progress(), default_faction="BEAR")["bear"] is True


class TestCycles:
    """Test termination on cyclic data."""

    def test_three_node_completion_cycle(self):
        """A -> B -> C -> A resolves to unavailable for all three."""
        tasks = [
            make_task("a", requires={"c": []}),
            make_task("b", requires={"a": []}),
            make_task("c", requires={"b": []}),
        ]
        availability = compute_task_availability(tasks, make_progress())
        assert availability == {"a": False, "b": False, "c": False}

    def test_three_node_active_cycle(self):
        """A cycle of active requirements recurses and terminates."""
        tasks = [
            make_task("a", requires={"c": ["active"]}),
            make_task("b", requires={"a": ["active"]}),
            make_task("c", requires={"b": ["active"]}),
        ]
        resolver = AvailabilityResolver(tasks, make_progress())
        assert resolver.compute() == {"a": False, "b": False, "c": False}
        assert resolver.cycle_edges


class TestTeamAvailability:
    """Test per-member maps."""

    def test_team_map_shape(self, chain):
        """Map is task -> team member -> bool."""
        team = {"me": make_progress({"a": {"complete": True}}), "friend": make_progress()}
        availability = compute_team_availability(chain, team)
        assert availability["b"] == {"me": True, "friend": False}
        assert availability["a"] == {"me": False, "friend": True}

    def test_idempotent(self, chain):
        """Two passes on identical input agree."""
        progress = make_progress({"a": {"complete": True}})
        assert compute_task_availability(chain, progress) == compute_task_availability(chain, progress)
