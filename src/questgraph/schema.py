"""
Pydantic models for game data supplied by the task/hideout data provider.

The provider speaks camelCase; models accept both the provider's field
names and their snake_case equivalents. Optional fields may be missing or
null and fall back to defaults:
- absent counts default to 1
- absent status lists mean "requires completion"
- absent faction means "Any"
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator
from pydantic.alias_generators import to_camel

ANY_FACTION = "Any"


def _drop_null_entries(v: Any) -> Any:
    if isinstance(v, list):
        return [entry for entry in v if entry is not None]
    return v


class CamelModel(BaseModel):
    """Base model accepting camelCase input and treating nulls as absent."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def drop_null_fields(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {
                key: _drop_null_entries(value)
                for key, value in data.items()
                if value is not None
            }
        return data


class EntityRef(CamelModel):
    """Reference to another entity (task, trader, station, item) by id."""

    id: str
    name: str | None = None


# ==================== TASKS ====================


class TaskRequirement(CamelModel):
    """Directed edge descriptor: the target task must reach one of `status`."""

    task: EntityRef | None = None
    status: list[str] = Field(default_factory=list)

    @property
    def task_id(self) -> str | None:
        return self.task.id if self.task else None


class TraderLevelRequirement(CamelModel):
    """Minimum loyalty level with a trader."""

    trader: EntityRef
    level: int = 1


class TaskObjective(CamelModel):
    """A sub-step of a task, also used to describe fail conditions.

    Fail-condition objectives reference another task and the status of that
    task which causes the owning task to fail.
    """

    id: str
    type: str | None = None
    description: str | None = None
    count: int = 1
    found_in_raid: bool = False
    optional: bool = False
    task: EntityRef | None = None
    status: list[str] = Field(default_factory=list)

    @property
    def task_id(self) -> str | None:
        return self.task.id if self.task else None


class Task(CamelModel):
    """A quest-like unit of progress.

    `predecessors`, `successors` and `alternatives` are derived by the graph
    builder. `parents` and `children` are read-only aliases of the first two.
    """

    id: str
    name: str | None = None
    faction_name: str = ANY_FACTION
    min_player_level: int = 0
    trader: EntityRef | None = None
    kappa_required: bool = False
    lightkeeper_required: bool = False
    experience: int = 0
    objectives: list[TaskObjective] = Field(default_factory=list)
    task_requirements: list[TaskRequirement] = Field(default_factory=list)
    failed_requirements: list[TaskRequirement] = Field(default_factory=list)
    trader_level_requirements: list[TraderLevelRequirement] = Field(default_factory=list)
    fail_conditions: list[TaskObjective] = Field(default_factory=list)

    # Derived by questgraph.graph
    predecessors: list[str] = Field(default_factory=list)
    successors: list[str] = Field(default_factory=list)
    alternatives: list[str] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def parents(self) -> list[str]:
        return self.predecessors

    @computed_field  # type: ignore[prop-decorator]
    @property
    def children(self) -> list[str]:
        return self.successors

    @property
    def objective_ids(self) -> list[str]:
        return [objective.id for objective in self.objectives]

    def is_faction_restricted(self) -> bool:
        return bool(self.faction_name) and self.faction_name != ANY_FACTION

    def matches_faction(self, faction: str | None) -> bool:
        """True if a player of `faction` can take this task."""
        return not self.is_faction_restricted() or self.faction_name == faction


# ==================== HIDEOUT ====================


class ItemRequirement(CamelModel):
    """Item hand-in needed to build a hideout level."""

    id: str
    item: EntityRef | None = None
    count: int = 1
    attributes: list[dict[str, Any]] = Field(default_factory=list)

    @property
    def found_in_raid(self) -> bool:
        for attribute in self.attributes:
            if attribute.get("type") == "foundInRaid" or attribute.get("name") == "foundInRaid":
                return attribute.get("value") == "true"
        return False


class StationLevelRequirement(CamelModel):
    """Another station must be at `level` or higher."""

    station: EntityRef | None = None
    level: int = 1


class HideoutTraderRequirement(CamelModel):
    trader: EntityRef
    level: int = 1


class SkillRequirement(CamelModel):
    name: str
    level: int = 1


class HideoutLevel(CamelModel):
    """One buildable level of a hideout station."""

    id: str
    level: int
    description: str | None = None
    construction_time: int = 0
    item_requirements: list[ItemRequirement] = Field(default_factory=list)
    station_level_requirements: list[StationLevelRequirement] = Field(default_factory=list)
    trader_requirements: list[HideoutTraderRequirement] = Field(default_factory=list)
    skill_requirements: list[SkillRequirement] = Field(default_factory=list)


class HideoutStation(CamelModel):
    id: str
    name: str | None = None
    normalized_name: str | None = None
    levels: list[HideoutLevel] = Field(default_factory=list)

    @property
    def max_level(self) -> int:
        return len(self.levels)

    def level_by_number(self, level: int) -> HideoutLevel | None:
        for candidate in self.levels:
            if candidate.level == level:
                return candidate
        return None


class HideoutModule(HideoutLevel):
    """A hideout level enriched with its station and graph neighbours."""

    station_id: str
    predecessors: list[str] = Field(default_factory=list)
    successors: list[str] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def parents(self) -> list[str]:
        return self.predecessors

    @computed_field  # type: ignore[prop-decorator]
    @property
    def children(self) -> list[str]:
        return self.successors


# ==================== CATALOGUES ====================


class Trader(CamelModel):
    id: str
    name: str | None = None
    normalized_name: str | None = None


class GameEdition(CamelModel):
    """Purchasable game edition; higher `value` grants more hideout defaults."""

    id: str
    value: int
    title: str | None = None
    default_stash_level: int = 0
    default_cultist_circle_level: int = 0
    trader_rep_bonus: dict[str, float] = Field(default_factory=dict)


class GameData(CamelModel):
    """Everything the engine consumes from the game-data provider."""

    tasks: list[Task] = Field(default_factory=list)
    hideout_stations: list[HideoutStation] = Field(default_factory=list)
    editions: list[GameEdition] = Field(default_factory=list)
    traders: list[Trader] = Field(default_factory=list)
