"""
Configuration management for the consensus engines
"""

import copy
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from consensus.errors import ConfigurationError


DEFAULT_CONFIG = {
    "consensus": {
        "inlier_threshold": 1.0,
        "confidence": 0.99,
        "max_trials": 1000,
        "min_inliers": None,
        "time_budget": None,
        "refine": False,
        "precision": "float64"
    },
    "multi_consensus": {
        "max_models": 10,
        "min_model_support": None
    },
    "parallel": {
        "workers": 1,
        "scoring_workers": 1,
        "scoring_chunk_size": 4096
    },
    "logging": {
        "level": "INFO",
        "log_file": None
    }
}

PRECISIONS = ("float32", "float64")


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Union[str, Path, None] = None) -> Dict[str, Any]:
    """
    Load a YAML configuration file on top of DEFAULT_CONFIG

    Args:
        path: YAML file path; None returns a copy of the defaults

    Returns:
        Merged configuration dictionary
    """
    if path is None:
        return copy.deepcopy(DEFAULT_CONFIG)

    with open(path, 'r') as f:
        loaded = yaml.safe_load(f) or {}

    if not isinstance(loaded, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")

    return _merge(DEFAULT_CONFIG, loaded)


def _from_section(cls, section: Optional[Dict[str, Any]]):
    names = {f.name for f in fields(cls)}
    section = section or {}
    unknown = set(section) - names
    if unknown:
        raise ConfigurationError(f"Unknown {cls.__name__} keys: {sorted(unknown)}")
    return cls(**section)


@dataclass
class ConsensusConfig:
    """Settings of the single-model search."""
    inlier_threshold: float = 1.0
    confidence: float = 0.99
    max_trials: int = 1000
    min_inliers: Optional[int] = None
    time_budget: Optional[float] = None
    refine: bool = False
    precision: str = "float64"

    def __post_init__(self):
        if self.inlier_threshold < 0:
            raise ConfigurationError("inlier_threshold must be non-negative")
        if not 0.0 < self.confidence < 1.0:
            raise ConfigurationError(f"confidence must be in (0, 1), got {self.confidence}")
        if self.max_trials < 1:
            raise ConfigurationError("max_trials must be at least 1")
        if self.min_inliers is not None and self.min_inliers < 0:
            raise ConfigurationError("min_inliers must be non-negative")
        if self.time_budget is not None and self.time_budget <= 0:
            raise ConfigurationError("time_budget must be positive")
        if self.precision not in PRECISIONS:
            raise ConfigurationError(f"precision must be one of {PRECISIONS}")

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'ConsensusConfig':
        """Build from a full config dict (reads the ``consensus`` section)."""
        return _from_section(cls, config.get("consensus"))


@dataclass
class MultiConsensusConfig:
    """Settings of the multi-model search."""
    max_models: int = 10
    min_model_support: Optional[int] = None

    def __post_init__(self):
        if self.max_models < 1:
            raise ConfigurationError("max_models must be at least 1")
        if self.min_model_support is not None and self.min_model_support < 1:
            raise ConfigurationError("min_model_support must be at least 1")

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'MultiConsensusConfig':
        return _from_section(cls, config.get("multi_consensus"))


@dataclass
class ParallelConfig:
    """Thread pool sizes for trial-level and scoring parallelism."""
    workers: int = 1
    scoring_workers: int = 1
    scoring_chunk_size: int = 4096

    def __post_init__(self):
        if self.workers < 1 or self.scoring_workers < 1:
            raise ConfigurationError("worker counts must be at least 1")
        if self.scoring_chunk_size < 1:
            raise ConfigurationError("scoring_chunk_size must be at least 1")

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'ParallelConfig':
        return _from_section(cls, config.get("parallel"))
