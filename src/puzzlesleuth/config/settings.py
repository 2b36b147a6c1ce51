"""Configuration model for PuzzleSleuth."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

from puzzlesleuth.engine.skills import Tier

CONFIG_DIR = Path.home() / ".puzzlesleuth"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class Settings(BaseModel):
    data_dir: Path = CONFIG_DIR
    batch_size: int = Field(default=5, ge=1)
    max_time_seconds: float = Field(default=60.0, gt=0)
    rng_seed: Optional[int] = None
    default_tier: Tier = Tier.DETECTIVE
    log_level: str = "WARNING"

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        config_path = config_path or CONFIG_DIR / "config.yaml"
        data: dict = {}
        if config_path.exists():
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
        env_level = os.environ.get("PUZZLESLEUTH_LOG_LEVEL")
        if env_level:
            data["log_level"] = env_level
        env_data_dir = os.environ.get("PUZZLESLEUTH_DATA_DIR")
        if env_data_dir:
            data["data_dir"] = env_data_dir
        return cls(**data)

    def save(self) -> Path:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        config_path = self.data_dir / "config.yaml"
        with open(config_path, "w") as f:
            yaml.dump(self.model_dump(mode="json"), f, default_flow_style=False)
        return config_path

    @property
    def db_path(self) -> Path:
        return self.data_dir / "profiles.db"


def configure_logging(level: str = "WARNING") -> None:
    """Send log records to stderr; stdout is reserved for command output."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )
