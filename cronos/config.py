"""
Configuration management using Pydantic models loaded from YAML.
"""

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.exceptions import InvalidScheduleError
from .domain.intervals import TimeInterval, parse_time
from .domain.models import TenantContext


class FallbackWindowConfig(BaseModel):
    """Hours used by an active date exception that carries none of its own."""
    start: str = "09:00"
    end: str = "18:00"

    @field_validator("start", "end")
    @classmethod
    def validate_time(cls, value: str) -> str:
        """Validate HH:MM format."""
        try:
            parse_time(value)
        except InvalidScheduleError as exc:
            raise ValueError(str(exc)) from exc
        return value

    @model_validator(mode="after")
    def validate_window_order(self) -> "FallbackWindowConfig":
        """Ensure the window opens before it closes."""
        if parse_time(self.end) <= parse_time(self.start):
            raise ValueError("fallback_window end must be later than start")
        return self

    def to_interval(self) -> TimeInterval:
        return TimeInterval.parse(self.start, self.end)


class SchedulingConfig(BaseModel):
    """Scheduling defaults."""
    fallback_window: FallbackWindowConfig = Field(default_factory=FallbackWindowConfig)
    default_slot_interval: int = 60

    @field_validator("default_slot_interval")
    @classmethod
    def validate_slot_interval(cls, value: int) -> int:
        """Ensure the slot interval is positive."""
        if value <= 0:
            raise ValueError("default_slot_interval must be greater than zero")
        return value


class AppConfig(BaseModel):
    """Application configuration."""
    tenant_id: str
    actor_id: str = ""
    data_file: Path = Path("data.json")
    scheduling: SchedulingConfig = Field(default_factory=SchedulingConfig)
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Accept standard logging level names only."""
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return level

    def context(self, tenant_id: Optional[str] = None) -> TenantContext:
        """Build the explicit tenant context passed into store calls."""
        return TenantContext(tenant_id=tenant_id or self.tenant_id, actor_id=self.actor_id)

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        A relative ``data_file`` is resolved against the config file's folder.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        config = cls(**data)
        if not config.data_file.is_absolute():
            config.data_file = config_path.parent / config.data_file
        return config


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
