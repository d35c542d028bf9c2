"""Configuration models with validation for questgraph."""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = Field(default="INFO")
    format: str = Field(default="%(asctime)s | %(name)s | %(levelname)s | %(message)s")
    json_mode: bool = Field(default=False)

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid}")
        return v.upper()


class EngineConfig(BaseModel):
    """Resolution engine settings."""

    default_faction: str = Field(default="USEC")
    default_player_level: int = Field(default=1, ge=1, le=100)
    # Scan the task graph for requirement cycles and log each one
    warn_on_cycles: bool = Field(default=True)
    # Also invalidate objectives of dependents reached through a completed alternative
    alternative_objective_cascade: bool = Field(default=False)

    @field_validator("default_faction")
    @classmethod
    def validate_faction(cls, v: str) -> str:
        valid = {"USEC", "BEAR"}
        if v.upper() not in valid:
            raise ValueError(f"Invalid faction: {v}. Must be one of {valid}")
        return v.upper()


class DataConfig(BaseModel):
    """Progress data selection settings."""

    game_mode: str = Field(default="pvp")
    default_game_edition: int = Field(default=1, ge=1, le=6)

    @field_validator("game_mode")
    @classmethod
    def validate_game_mode(cls, v: str) -> str:
        valid = {"pvp", "pve"}
        if v.lower() not in valid:
            raise ValueError(f"Invalid game mode: {v}. Must be one of {valid}")
        return v.lower()


class QuestgraphConfig(BaseSettings):
    """Root configuration for questgraph.

    Loads from config.yaml with environment variable overrides.
    Environment variables use QUESTGRAPH_ prefix (e.g., QUESTGRAPH_ENGINE__DEFAULT_FACTION).
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    data: DataConfig = Field(default_factory=DataConfig)

    model_config = {
        "env_prefix": "QUESTGRAPH_",
        "env_nested_delimiter": "__",
    }

    @classmethod
    def load(cls, config_path: Path | None = None) -> "QuestgraphConfig":
        """Load configuration from YAML file with env overrides.

        Args:
            config_path: Path to config.yaml. If None, uses defaults.

        Returns:
            Validated QuestgraphConfig instance.
        """
        import os

        import yaml

        config_data = {}

        if config_path and config_path.exists():
            with open(config_path) as f:
                config_data = yaml.safe_load(f) or {}

        if os.getenv("QUESTGRAPH_LOG_LEVEL"):
            config_data.setdefault("logging", {})["level"] = os.getenv("QUESTGRAPH_LOG_LEVEL")
        if os.getenv("QUESTGRAPH_GAME_MODE"):
            config_data.setdefault("data", {})["game_mode"] = os.getenv("QUESTGRAPH_GAME_MODE")

        return cls(**config_data)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # QUESTGRAPH_<SECTION>__<KEY> variables win over values read from the file
        return env_settings, init_settings, dotenv_settings, file_secret_settings
