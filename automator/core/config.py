"""Configuration models and validation using Pydantic."""
from __future__ import annotations

import warnings
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator


class ProjectConfig(BaseModel):
    """Location of the Playwright project and its environment file."""
    automation_dir: str = Field(default="playwright-automation")
    env_file: str = Field(default=".env")

    @field_validator("automation_dir", "env_file")
    @classmethod
    def validate_relative(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("path must not be empty")
        return v.strip()


class PromptConfig(BaseModel):
    """Interactive prompt settings."""
    terminator: str = Field(default="END", min_length=1)


class TerminalConfig(BaseModel):
    """Terminal launcher settings."""
    shell: str = Field(default="bash", min_length=1, description="Shell used on Linux/Unix terminals")


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="WARNING")
    file: Optional[str] = Field(default=None, description="Write log events to this file instead of stderr")

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v):
        return v.upper() if isinstance(v, str) else v


class AutomatorConfig(BaseModel):
    """Main configuration model for the automator."""
    project: ProjectConfig = Field(default_factory=ProjectConfig)
    prompt: PromptConfig = Field(default_factory=PromptConfig)
    terminal: TerminalConfig = Field(default_factory=TerminalConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def env_path(self, project_root: Path) -> Path:
        """Absolute path of the ``.env`` file for ``project_root``."""
        return project_root / self.project.automation_dir / self.project.env_file

    @classmethod
    def from_yaml(cls, config_path: Path) -> AutomatorConfig:
        """Load configuration from YAML file."""
        import yaml

        if not config_path.exists():
            return cls()  # Return defaults

        try:
            with config_path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except Exception as e:
            # If loading fails, return defaults instead of crashing
            warnings.warn(f"Failed to load config file {config_path}: {e}. Using defaults.")
            return cls()

        if not data:
            return cls()  # Empty file, return defaults

        if not isinstance(data, dict):
            warnings.warn(f"Config file {config_path} must contain a mapping. Using defaults.")
            return cls()

        try:
            return cls(**data)
        except Exception as e:
            warnings.warn(f"Config validation failed: {e}. Using defaults with partial config.")
            partial = {}
            for name in cls.model_fields:
                if name not in data:
                    continue
                try:
                    cls(**{name: data[name]})
                except Exception:
                    continue
                partial[name] = data[name]
            return cls(**partial)
