"""
Per-user progress records.

A completion record only persists `complete`/`failed` booleans. `failed`
implies the task is finished in the failed sense; a record with
`failed=True` is treated as failed even if `complete` was never set.
A missing record means the task was never touched.
"""

from enum import Enum

from pydantic import AliasChoices, Field

from .schema import CamelModel


class GameMode(str, Enum):
    """Parallel progress tracks kept per user."""

    PVP = "pvp"
    PVE = "pve"


class CompletionRecord(CamelModel):
    complete: bool = False
    failed: bool = False
    timestamp: int | None = None

    @property
    def is_completed(self) -> bool:
        """Completed cleanly (not in the failed sense)."""
        return self.complete and not self.failed

    @property
    def is_failed(self) -> bool:
        return self.failed

    @property
    def is_finished(self) -> bool:
        return self.complete or self.failed

    @property
    def is_active(self) -> bool:
        """Touched but neither completed nor failed."""
        return not self.complete and not self.failed


class ObjectiveRecord(CamelModel):
    complete: bool = False
    count: int | None = None
    timestamp: int | None = None


class HideoutModuleRecord(CamelModel):
    complete: bool = False
    timestamp: int | None = None


class HideoutPartRecord(CamelModel):
    complete: bool = False
    count: int | None = None
    timestamp: int | None = None


class TraderProgress(CamelModel):
    level: int = 1
    reputation: float = 0.0


class PlayerProgress(CamelModel):
    """One user's progress in a single game mode."""

    level: int | None = None
    pmc_faction: str | None = None
    display_name: str | None = None
    prestige_level: int = 0
    task_completions: dict[str, CompletionRecord] = Field(default_factory=dict)
    task_objectives: dict[str, ObjectiveRecord] = Field(default_factory=dict)
    hideout_modules: dict[str, HideoutModuleRecord] = Field(default_factory=dict)
    hideout_parts: dict[str, HideoutPartRecord] = Field(default_factory=dict)
    traders: dict[str, TraderProgress] = Field(default_factory=dict)

    def completion(self, task_id: str) -> CompletionRecord | None:
        return self.task_completions.get(task_id)

    def is_task_completed(self, task_id: str) -> bool:
        record = self.task_completions.get(task_id)
        return record is not None and record.is_completed

    def is_task_failed(self, task_id: str) -> bool:
        record = self.task_completions.get(task_id)
        return record is not None and record.is_failed

    def is_task_finished(self, task_id: str) -> bool:
        record = self.task_completions.get(task_id)
        return record is not None and record.is_finished

    def player_level(self, default: int = 1) -> int:
        return self.level if self.level is not None else default

    def trader_level(self, trader_id: str, default_level: int = 1) -> int:
        """Loyalty level with a trader.

        Trader standings are optional in stored progress; when a trader is
        not tracked the player level stands in for it.
        """
        trader = self.traders.get(trader_id)
        if trader is None:
            return self.player_level(default_level)
        return trader.level

    def faction(self, default: str = "USEC") -> str:
        return self.pmc_faction or default


class UserProgressRow(CamelModel):
    """Persisted progress for a user across both game modes."""

    # None when the stored row never recorded an edition
    game_edition: int | None = Field(
        default=None, validation_alias=AliasChoices("gameEdition", "game_edition")
    )
    current_game_mode: GameMode = Field(
        default=GameMode.PVP,
        validation_alias=AliasChoices("currentGameMode", "current_game_mode"),
    )
    pvp: PlayerProgress = Field(
        default_factory=PlayerProgress,
        validation_alias=AliasChoices("pvp", "pvp_data", "pvpData"),
    )
    pve: PlayerProgress = Field(
        default_factory=PlayerProgress,
        validation_alias=AliasChoices("pve", "pve_data", "pveData"),
    )

    def for_mode(self, mode: GameMode | str | None = None) -> PlayerProgress:
        mode = GameMode(mode) if mode else self.current_game_mode
        return self.pve if mode == GameMode.PVE else self.pvp

    def edition(self, default: int = 1) -> int:
        return self.game_edition if self.game_edition is not None else default
