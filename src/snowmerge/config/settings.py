from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import List, Optional

import yaml
from platformdirs import PlatformDirs

from ..options import ALL_EXCEPT_GARAGE_CONTENTS, MergeOptions, parse_options
from ..save.models import check_slot

logger = logging.getLogger(__name__)

APP_NAME = "snowmerge"
ENV_LOG_LEVEL = "SNOWMERGE_LOG_LEVEL"
ENV_MAX_ARCHIVE_SIZE = "SNOWMERGE_MAX_ARCHIVE_SIZE"


def default_user_settings_path() -> Path:
    return Path(PlatformDirs(appname=APP_NAME, appauthor=False).user_config_dir) / "settings.yaml"


@dataclass
class MergeSettings:
    default_options: List[str] = field(default_factory=lambda: sorted(o.value for o in ALL_EXCEPT_GARAGE_CONTENTS))
    default_output_slot: int = 0


@dataclass
class ArchiveSettings:
    max_archive_size: int = 50 * 1024 * 1024
    min_map_files: int = 2


@dataclass
class LoggingSettings:
    level: str = "INFO"


@dataclass
class MergerSettings:
    merge: MergeSettings = field(default_factory=MergeSettings)
    archive: ArchiveSettings = field(default_factory=ArchiveSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @property
    def default_options(self) -> MergeOptions:
        return parse_options(self.merge.default_options)

    @property
    def log_level(self) -> int:
        return getattr(logging, self.logging.level.upper(), logging.INFO)

    @staticmethod
    def _load_yaml(path: Path) -> dict:
        with path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    @classmethod
    def _deep_merge(cls, base: dict, overlay: dict) -> dict:
        merged = dict(base)
        for k, v in (overlay or {}).items():
            if isinstance(v, dict) and isinstance(base.get(k), dict):
                merged[k] = cls._deep_merge(base[k], v)
            else:
                merged[k] = v
        return merged

    @classmethod
    def _from_dict(cls, data: dict) -> "MergerSettings":
        merge = MergeSettings(**data.get("merge", {}))
        archive = ArchiveSettings(**data.get("archive", {}))
        logging_ = LoggingSettings(**data.get("logging", {}))
        settings = cls(merge=merge, archive=archive, logging=logging_)
        settings.validate()
        return settings

    @staticmethod
    def _env_overrides() -> dict:
        overrides: dict = {}
        level = os.getenv(ENV_LOG_LEVEL)
        if level:
            overrides["logging"] = {"level": level}
        max_size = os.getenv(ENV_MAX_ARCHIVE_SIZE)
        if max_size:
            try:
                overrides["archive"] = {"max_archive_size": int(max_size)}
            except ValueError:
                logger.warning("Ignoring non-integer %s=%r", ENV_MAX_ARCHIVE_SIZE, max_size)
        return overrides

    def validate(self) -> None:
        parse_options(self.merge.default_options)
        check_slot(self.merge.default_output_slot)
        if self.archive.max_archive_size <= 0:
            raise ValueError("archive.max_archive_size must be positive")
        if self.archive.min_map_files < 0:
            raise ValueError("archive.min_map_files must not be negative")

    @classmethod
    def load(cls, user_path: Optional[Path] = None) -> "MergerSettings":
        """Load settings from built-in defaults, a user YAML file and the environment.

        Without ``user_path`` the platform user config directory is consulted
        and silently skipped when it has no settings file.
        """
        try:
            with resources.files("snowmerge.config").joinpath("default_settings.yaml").open("r", encoding="utf-8") as f:
                default_data = yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.warning("Default settings not found; falling back to dataclass defaults.")
            default_data = dataclasses.asdict(MergerSettings())

        user_data = {}
        if user_path is not None:
            if user_path.exists():
                user_data = cls._load_yaml(user_path)
                logger.info("Loaded user settings from %s", user_path)
            else:
                logger.warning("User settings file not found: %s", user_path)
        else:
            candidate = default_user_settings_path()
            if candidate.exists():
                user_data = cls._load_yaml(candidate)
                logger.info("Loaded user settings from %s", candidate)

        merged = cls._deep_merge(cls._deep_merge(default_data, user_data), cls._env_overrides())
        settings = cls._from_dict(merged)
        logger.debug("Settings merged: %s", settings)
        return settings

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(dataclasses.asdict(self), f, sort_keys=False)
        logger.info("Saved settings to %s", path)
