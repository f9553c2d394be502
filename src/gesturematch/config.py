"""
Configuration management for gesturematch.

Loads YAML configuration with sensible defaults for curve fitting,
alignment, scoring and tracing.
"""

import os
from dataclasses import dataclass, field

import yaml


@dataclass
class CurveConfig:
    """Configuration for the three-point curve solver."""
    point_spacing: float = 0.02  # linear distance between generated points
    min_points: int = 3
    degenerate_epsilon: float = 1e-12
    plane_tolerance: float = 1e-6
    full_circle_gap: float = 1e-6  # radians left open at the end of a full circle


@dataclass
class AlignmentConfig:
    """Configuration for aligning templates to drawn figures."""
    refine_rotation: bool = True
    rotation_steps: int = 72
    refine_iterations: int = 10
    rotation_tolerance: float = 1e-12  # radians


@dataclass
class ScoringConfig:
    """Configuration for turning RMSD into scores."""
    exact_match_tolerance: float = 1e-9  # RMSD at or below this scores +inf


@dataclass
class TracingConfig:
    """Configuration for runtime tracing."""
    enabled: bool = False
    level: str = "INFO"
    file_path: str = None
    json_output: bool = False


@dataclass
class MatcherConfig:
    """Complete matcher configuration."""
    curves: CurveConfig = field(default_factory=CurveConfig)
    alignment: AlignmentConfig = field(default_factory=AlignmentConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)


def load_config(config_path=None):
    """
    Load configuration from YAML file.

    Falls back to defaults for any missing values.
    """
    config = MatcherConfig()

    if config_path and os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}

        config = _merge_config(config, yaml_data)

    return config


def _merge_config(config, yaml_data):
    """Merge YAML data into config dataclass."""
    if "curves" in yaml_data:
        for key, value in yaml_data["curves"].items():
            if hasattr(config.curves, key):
                setattr(config.curves, key, value)

    if "alignment" in yaml_data:
        for key, value in yaml_data["alignment"].items():
            if hasattr(config.alignment, key):
                setattr(config.alignment, key, value)

    if "scoring" in yaml_data:
        for key, value in yaml_data["scoring"].items():
            if hasattr(config.scoring, key):
                setattr(config.scoring, key, value)

    if "tracing" in yaml_data:
        for key, value in yaml_data["tracing"].items():
            if hasattr(config.tracing, key):
                setattr(config.tracing, key, value)

    return config


def save_default_config(path):
    """Save default configuration to YAML file for reference."""
    config = MatcherConfig()

    yaml_data = {
        "curves": {
            "point_spacing": config.curves.point_spacing,
            "min_points": config.curves.min_points,
            "degenerate_epsilon": config.curves.degenerate_epsilon,
            "plane_tolerance": config.curves.plane_tolerance,
            "full_circle_gap": config.curves.full_circle_gap,
        },
        "alignment": {
            "refine_rotation": config.alignment.refine_rotation,
            "rotation_steps": config.alignment.rotation_steps,
            "refine_iterations": config.alignment.refine_iterations,
            "rotation_tolerance": config.alignment.rotation_tolerance,
        },
        "scoring": {
            "exact_match_tolerance": config.scoring.exact_match_tolerance,
        },
        "tracing": {
            "enabled": config.tracing.enabled,
            "level": config.tracing.level,
        },
    }

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(yaml_data, f, default_flow_style=False, sort_keys=False)
