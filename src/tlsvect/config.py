"""
Configuration management for tlsvect.

Loads YAML configuration with sensible defaults for all vectorizer stages.
"""

import os
from dataclasses import asdict, dataclass, field

import yaml


@dataclass
class ExtractionConfig:
    """Configuration for the extractors."""
    sigma: float = 0.03  # max standard deviation of point distances
    max_size: int = 0  # expected point count, reserves buffers


@dataclass
class ContinuityConfig:
    """Configuration for the continuity optimizer."""
    delta: float = 0.2


@dataclass
class TotalErrorConfig:
    """Configuration for the total error optimizer."""
    simplex_shift: int = 1
    max_iterations: int = 10000


@dataclass
class TracingConfig:
    """Configuration for runtime tracing."""
    enabled: bool = False
    level: str = "INFO"
    file_path: str = None
    json_output: bool = False


@dataclass
class VectorizerConfig:
    """Complete vectorizer configuration."""
    preset: str = "aftls_polyline_2d"
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    continuity: ContinuityConfig = field(default_factory=ContinuityConfig)
    total_error: TotalErrorConfig = field(default_factory=TotalErrorConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)


_SECTIONS = ("extraction", "continuity", "total_error", "tracing")


def load_config(config_path=None):
    """
    Load configuration from YAML file.

    Falls back to defaults for any missing values.
    """
    config = VectorizerConfig()

    if config_path and os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}

        config = _merge_config(config, yaml_data)

    return config


def _merge_config(config, yaml_data):
    """Merge YAML data into config dataclass."""
    for section in _SECTIONS:
        values = yaml_data.get(section)
        if not isinstance(values, dict):
            continue
        target = getattr(config, section)
        for key, value in values.items():
            if hasattr(target, key):
                setattr(target, key, value)

    if "preset" in yaml_data:
        config.preset = yaml_data["preset"]

    return config


def config_to_dict(config):
    """Plain dict representation, as written to YAML."""
    return asdict(config)


def save_default_config(path):
    """Save default configuration to YAML file for reference."""
    yaml_data = config_to_dict(VectorizerConfig())
    # tracing to a file is a per-run decision
    del yaml_data["tracing"]["file_path"]

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(yaml_data, f, default_flow_style=False, sort_keys=False)
