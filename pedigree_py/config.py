"""Configuration loader for pedigree_py.

Behavior:
- Load defaults.
- If a path is given, or `PEDIGREE_CONFIG` is set, load that JSON file and merge.
- Environment variables override file values (PEDIGREE_DATA_DIR,
  PEDIGREE_DEFAULT_GENERATIONS, PEDIGREE_DENSITY_THRESHOLD), but only when no
  explicit path was passed in.
"""
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import logging
import os
from typing import Optional

from .fs import json_load


@dataclass
class Config:
    data_dir: Path = Path("data")
    default_generations: int = 6
    density_threshold: int = 3


def _as_int(value, fallback: int, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        logging.warning("ignoring non-integer %s=%r", name, value)
        return fallback


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from (1) defaults, (2) JSON file, (3) env vars.

    :param config_path: optional path to a JSON config file. If not provided
                        `PEDIGREE_CONFIG` is used when set.
    """
    cfg = Config()

    cp = config_path or os.environ.get("PEDIGREE_CONFIG")
    if cp:
        data = json_load(Path(cp))
        if isinstance(data, dict):
            if data.get("data_dir"):
                cfg.data_dir = Path(data["data_dir"])
            if "default_generations" in data:
                cfg.default_generations = _as_int(data["default_generations"], cfg.default_generations, "default_generations")
            if "density_threshold" in data:
                cfg.density_threshold = _as_int(data["density_threshold"], cfg.density_threshold, "density_threshold")
        else:
            logging.warning("config file %s missing or not a JSON object; using defaults", cp)

    # an explicit config_path is authoritative over the environment
    if config_path is None:
        if os.environ.get("PEDIGREE_DATA_DIR"):
            cfg.data_dir = Path(os.environ["PEDIGREE_DATA_DIR"])
        if os.environ.get("PEDIGREE_DEFAULT_GENERATIONS"):
            cfg.default_generations = _as_int(os.environ["PEDIGREE_DEFAULT_GENERATIONS"], cfg.default_generations, "PEDIGREE_DEFAULT_GENERATIONS")
        if os.environ.get("PEDIGREE_DENSITY_THRESHOLD"):
            cfg.density_threshold = _as_int(os.environ["PEDIGREE_DENSITY_THRESHOLD"], cfg.density_threshold, "PEDIGREE_DENSITY_THRESHOLD")

    return cfg
