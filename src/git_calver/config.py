"""Configuration management for git-calver."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import CalverError, ConfigError, UsageError

logger = logging.getLogger(__name__)


class VersionConfig(BaseModel):
    """Options controlling how a version is computed and rendered."""

    model_config = ConfigDict(extra="forbid")

    revision: str = Field(default="HEAD", description="Revision to version")
    year: Optional[str] = Field(
        default=None,
        description="Baseline year; defaults to the year of the oldest root commit",
    )
    prefix: str = Field(default="v", description="Prefix prepended to the version")
    separator: str = Field(default=".", description="Separator between fields")
    short: bool = Field(
        default=False, description="Drop the order field when it is zero"
    )
    inverse: Optional[str] = Field(
        default=None, description="Version string to map back to a commit"
    )
    full_scan: bool = Field(
        default=False,
        description="Scan all history when counting same-day commits instead of "
        "stopping at the first older commit",
    )

    @field_validator("year", mode="before")
    @classmethod
    def coerce_year(cls, v: Any) -> Any:
        """Accept integer years from JSON; parsing happens at resolution time."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("separator")
    @classmethod
    def validate_separator(cls, v: str) -> str:
        if not v:
            raise ValueError("separator must not be empty")
        return v

    @property
    def early_exit(self) -> bool:
        return not self.full_scan


class ConfigManager:
    """Loads options files and layers command line overrides on top."""

    DEFAULT_CONFIG_NAME = ".git-calver.json"

    def __init__(self, config_path: Optional[Path] = None, required: bool = False):
        self.config_path = config_path
        self.required = required
        self._config: Optional[VersionConfig] = None

    @classmethod
    def for_repository(cls, root: Path) -> "ConfigManager":
        """Manager for the default options file at a repository root."""
        return cls(Path(root) / cls.DEFAULT_CONFIG_NAME)

    def load(self) -> VersionConfig:
        """Load configuration from file, or defaults when there is no file.

        Raises:
            ConfigError: If the file is not valid JSON or holds invalid options
        """
        if self.required and (self.config_path is None or not self.config_path.exists()):
            raise ConfigError(f"Config file not found: {self.config_path}")

        if self.config_path is not None and self.config_path.exists():
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                raise ConfigError(f"Failed to load config from {self.config_path}: {e}")

            if not isinstance(data, dict):
                raise ConfigError(
                    f"Failed to load config from {self.config_path}: expected a JSON object"
                )

            self._config = self._validate(data, source=str(self.config_path))
            logger.debug("Loaded options from %s", self.config_path)
        else:
            self._config = VersionConfig()

        return self._config

    def merge(self, overrides: Dict[str, Any]) -> VersionConfig:
        """Apply explicitly given values (not None) on top of the loaded config."""
        base = self._config if self._config is not None else self.load()
        data = base.model_dump()
        data.update({key: value for key, value in overrides.items() if value is not None})
        self._config = self._validate(data, source="command line", error_cls=UsageError)
        return self._config

    @staticmethod
    def _validate(
        data: Dict[str, Any], source: str, error_cls: Type[CalverError] = ConfigError
    ) -> VersionConfig:
        try:
            return VersionConfig(**data)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            raise error_cls(f"Invalid options ({source}): {problems}")
