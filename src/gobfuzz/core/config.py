"""Configuration loading from .env and YAML."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from dotenv import dotenv_values
from pydantic import BaseModel, Field, ValidationError

from gobfuzz.core.exceptions import ConfigError

log = logging.getLogger(__name__)

#: Build tags that are always satisfied when building a fuzz archive.
BASELINE_TAGS = ["gofuzz", "gofuzz_libfuzzer", "libfuzzer"]


def _find_project_root(start: Path | None = None) -> Path:
    """Find project root by looking for go.mod upward."""
    current = Path(start or Path.cwd()).resolve()
    for _ in range(10):
        if (current / "go.mod").exists():
            return current
        parent = current.parent
        if parent == current:
            break
        current = parent
    return Path.cwd().resolve()


def split_list(value: str | list[str] | None) -> list[str]:
    """Split a comma-separated string (or list of them) into non-empty items."""
    if not value:
        return []
    if isinstance(value, str):
        value = [value]
    items: list[str] = []
    for entry in value:
        items.extend(p.strip() for p in str(entry).split(","))
    return [p for p in items if p]


class BuildSectionModel(BaseModel):
    """Build section of config."""

    cover_runtime: bool = False
    cover_main: bool = False
    typecheck: bool = False
    discover: bool = True


class AppConfig(BaseModel):
    """Full application configuration."""

    go_bin: str = "go"
    baseline_tags: list[str] = Field(default_factory=lambda: list(BASELINE_TAGS))
    default_func: str = "Fuzz"
    tags: str = ""
    preserve: list[str] = Field(default_factory=list)
    build: BuildSectionModel = Field(default_factory=BuildSectionModel)


class ConfigManager:
    """Load and merge configuration from .env and YAML."""

    def __init__(
        self,
        project_root: Path | None = None,
        env_path: Path | None = None,
        config_path: Path | None = None,
    ) -> None:
        self._root = Path(project_root or _find_project_root()).resolve()
        self._env_path = Path(env_path) if env_path else self._root / ".env"
        self._config_path = Path(config_path) if config_path else self._root / "config" / "gobfuzz.yaml"
        self._config: AppConfig | None = None

    def load_env(self) -> dict[str, str]:
        """Load .env file into a dict (without modifying os.environ)."""
        try:
            return {k: v for k, v in dotenv_values(self._env_path).items() if v is not None}
        except (OSError, PermissionError) as e:
            log.warning("Failed to read .env file %s: %s", self._env_path, e)
            return {}

    def load_yaml(self) -> dict[str, Any]:
        """Load YAML config file if it exists."""
        if not self._config_path.exists():
            return {}
        try:
            with open(self._config_path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, PermissionError) as e:
            log.warning("Failed to read config file %s: %s", self._config_path, e)
            return {}
        except yaml.YAMLError as e:
            log.warning("Malformed YAML in %s: %s", self._config_path, e)
            return {}
        if not isinstance(data, dict):
            log.warning("Ignoring %s: top level must be a mapping", self._config_path)
            return {}
        return data

    def load(self) -> AppConfig:
        """Load .env and YAML, merge with defaults, return AppConfig."""
        env = self.load_env()
        yaml_data = self.load_yaml()

        config_dict: dict[str, Any] = {
            key: yaml_data[key]
            for key in ("go_bin", "baseline_tags", "default_func", "tags", "preserve")
            if yaml_data.get(key) is not None
        }
        if "preserve" in config_dict:
            config_dict["preserve"] = split_list(config_dict["preserve"])
        if isinstance(config_dict.get("baseline_tags"), str):
            config_dict["baseline_tags"] = split_list(config_dict["baseline_tags"])

        # Environment variables override YAML values
        env_mapping = {
            "GO_BIN": "go_bin",
            "GOBFUZZ_TAGS": "tags",
            "GOBFUZZ_FUNC": "default_func",
        }
        for env_key, config_key in env_mapping.items():
            if env.get(env_key):
                config_dict[config_key] = env[env_key]
        if env.get("GOBFUZZ_PRESERVE"):
            config_dict["preserve"] = split_list(env["GOBFUZZ_PRESERVE"])

        if yaml_data.get("build"):
            config_dict["build"] = yaml_data["build"]

        try:
            self._config = AppConfig(**config_dict)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {self._config_path}: {e}") from e
        return self._config

    @property
    def config(self) -> AppConfig:
        """Return loaded config; load if not yet loaded."""
        if self._config is None:
            self.load()
        if self._config is None:
            raise RuntimeError("ConfigManager.load() failed to produce a config")
        return self._config
