"""railpath/config — ViewerConfig and YAML loading."""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path

import yaml

from railpath.constants import (
    CIRCLE_RESOLUTION,
    CROSSING_DISTANCE,
    DEFAULT_BPM,
    MARKER_COUNT,
    ORBIT_RADIUS,
    TRAIL_LIFETIME_MS,
)


@dataclass
class ViewerConfig:
    orbit_radius: float = ORBIT_RADIUS
    crossing_distance: float = CROSSING_DISTANCE
    marker_count: int = MARKER_COUNT
    default_bpm: float = DEFAULT_BPM
    circle_resolution: int = CIRCLE_RESOLUTION
    trail_lifetime_ms: float = TRAIL_LIFETIME_MS


_FIELD_TYPES = {f.name: f.type for f in fields(ViewerConfig)}


def _parse_config(data: dict | None) -> ViewerConfig:
    """Parse a raw YAML dict into a ViewerConfig."""
    if data is None:
        return ViewerConfig()
    if not isinstance(data, dict):
        raise ValueError("Config must be a mapping")
    unknown = set(data) - set(_FIELD_TYPES)
    if unknown:
        raise ValueError(f"Unknown config keys: {sorted(unknown)}")
    config = ViewerConfig(**{
        key: int(value) if _FIELD_TYPES[key] == "int" else float(value)
        for key, value in data.items()
    })
    if config.marker_count < 2:
        raise ValueError("marker_count must be at least 2")
    if config.orbit_radius <= 0 or config.crossing_distance <= 0:
        raise ValueError("orbit_radius and crossing_distance must be positive")
    return config


def load_config(path: Path | str | None = None) -> ViewerConfig:
    """Load a ViewerConfig from YAML, or defaults when no path is given."""
    if path is None:
        return ViewerConfig()
    with open(path) as f:
        data = yaml.safe_load(f)
    return _parse_config(data)
