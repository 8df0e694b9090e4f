"""Project configuration stored in ``.kit.yaml``."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigError

logger = logging.getLogger("kit.config")

CONFIG_FILENAME = ".kit.yaml"
PROGRESS_SUMMARY_PATH = Path("docs") / "PROJECT_PROGRESS_SUMMARY.md"


@dataclass(slots=True)
class BranchingConfig:
    enabled: bool = True
    base_branch: str = "main"
    name_template: str = "{numeric}-{slug}"

    def branch_name(self, numeric: str, slug: str) -> str:
        return self.name_template.replace("{numeric}", numeric).replace("{slug}", slug)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "base_branch": self.base_branch,
            "name_template": self.name_template,
        }


@dataclass(slots=True)
class FeatureNaming:
    numeric_width: int = 4
    separator: str = "-"

    def to_dict(self) -> Dict[str, Any]:
        return {"numeric_width": self.numeric_width, "separator": self.separator}


def _default_agents() -> List[str]:
    return ["AGENTS.md", "CLAUDE.md", "WARP.md"]


@dataclass(slots=True)
class Config:
    """Settings read from ``.kit.yaml``; missing keys keep their defaults."""

    goal_percentage: int = 95
    specs_dir: str = "docs/specs"
    constitution_path: str = "docs/CONSTITUTION.md"
    allow_out_of_order: bool = False
    agents: List[str] = field(default_factory=_default_agents)
    branching: BranchingConfig = field(default_factory=BranchingConfig)
    feature_naming: FeatureNaming = field(default_factory=FeatureNaming)

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def specs_path(self, project_root: Path | str) -> Path:
        return Path(project_root) / self.specs_dir

    def constitution_abs_path(self, project_root: Path | str) -> Path:
        return Path(project_root) / self.constitution_path

    def progress_summary_path(self, project_root: Path | str) -> Path:
        return Path(project_root) / PROGRESS_SUMMARY_PATH

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "goal_percentage": self.goal_percentage,
            "specs_dir": self.specs_dir,
            "constitution_path": self.constitution_path,
            "allow_out_of_order": self.allow_out_of_order,
            "agents": list(self.agents),
            "branching": self.branching.to_dict(),
            "feature_naming": self.feature_naming.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        config = cls()
        for key in ("goal_percentage", "specs_dir", "constitution_path", "allow_out_of_order"):
            if data.get(key) is not None:
                setattr(config, key, data[key])
        if data.get("agents") is not None:
            config.agents = [str(agent) for agent in data["agents"]]

        branching = data.get("branching") or {}
        for key in ("enabled", "base_branch", "name_template"):
            if branching.get(key) is not None:
                setattr(config.branching, key, branching[key])

        naming = data.get("feature_naming") or {}
        if naming.get("numeric_width") is not None:
            config.feature_naming.numeric_width = int(naming["numeric_width"])
        if naming.get("separator") is not None:
            config.feature_naming.separator = str(naming["separator"])
        return config


def config_path(project_root: Path | str) -> Path:
    return Path(project_root) / CONFIG_FILENAME


def exists(directory: Path | str) -> bool:
    return config_path(directory).is_file()


def find_project_root(start: Optional[Path | str] = None) -> Path:
    """Walk upward from ``start`` (default: cwd) to the directory holding ``.kit.yaml``."""
    current = Path(start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        if exists(directory):
            return directory
    raise ConfigError(f"{CONFIG_FILENAME} not found. Run 'kit init' to initialize a project")


def load(project_root: Path | str) -> Config:
    path = config_path(project_root)
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"failed to read {CONFIG_FILENAME}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"failed to parse {CONFIG_FILENAME}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"failed to parse {CONFIG_FILENAME}: expected a mapping")
    return Config.from_dict(data)


def load_or_default(project_root: Path | str) -> Config:
    try:
        return load(project_root)
    except ConfigError as e:
        logger.debug(f"Using default configuration: {e}")
        return Config()


def save(project_root: Path | str, config: Config) -> Path:
    path = config_path(project_root)
    try:
        path.write_text(yaml.safe_dump(config.to_dict(), sort_keys=False), encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"failed to write {CONFIG_FILENAME}: {e}") from e
    logger.info(f"Saved configuration to {path}")
    return path
