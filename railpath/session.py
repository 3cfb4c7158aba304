"""railpath/session.py — Query surface for a presentation layer.

Bundles a Level and its OrbitSimulator behind the handful of calls a
renderer needs. Floor edits stop playback first, since simulator state
refers to tile indices the edit may shift.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping, Optional

from railpath.config import ViewerConfig
from railpath.events import EventFilter, EventKind
from railpath.level import Level, load_level, load_level_file
from railpath.mesh import TrackMesh
from railpath.simulation import CrossingEvent, OrbitSimulator, PlaybackState
from railpath.track import Tile

logger = logging.getLogger(__name__)


class EditorSession:
    def __init__(self, level: Level, config: Optional[ViewerConfig] = None):
        self.config = config or ViewerConfig()
        self.level = level
        self.simulator = OrbitSimulator(level, self.config)

    @classmethod
    def load(cls, source: str | Mapping, config: Optional[ViewerConfig] = None) -> EditorSession:
        config = config or ViewerConfig()
        return cls(load_level(source, circle_resolution=config.circle_resolution), config)

    @classmethod
    def open(cls, path: Path | str, config: Optional[ViewerConfig] = None) -> EditorSession:
        config = config or ViewerConfig()
        return cls(load_level_file(path, circle_resolution=config.circle_resolution), config)

    # -- queries ------------------------------------------------------------

    def tile_at(self, index: int) -> Tile:
        return self.level.tile_at(index)

    def actions_at(self, kind: EventKind | str, index: int) -> list[dict]:
        return self.level.actions_at(kind, index)

    def position_of(self, index: int) -> tuple[float, float]:
        return self.level.position_of(index)

    def mesh_of(self, index: int) -> TrackMesh:
        return self.level.mesh_of(index)

    # -- playback -----------------------------------------------------------

    @property
    def playback(self) -> PlaybackState:
        return self.simulator.playback

    def set_playback(self, playback: PlaybackState) -> bool:
        return self.simulator.set_playback(playback)

    def step(self, dt_ms: float) -> list[CrossingEvent]:
        return self.simulator.step(dt_ms)

    # -- edits --------------------------------------------------------------

    def _hold(self) -> None:
        if self.simulator.playback is PlaybackState.PLAYING:
            logger.info("Stopping playback for edit")
            self.simulator.set_playback(PlaybackState.HOLDING)

    def append_floor(self, heading: float) -> Tile:
        self._hold()
        return self.level.append_floor(heading)

    def insert_floor(self, index: int, heading: float) -> Tile:
        self._hold()
        return self.level.insert_floor(index, heading)

    def delete_floor(self, index: int) -> Tile:
        self._hold()
        return self.level.delete_floor(index)

    def clear_events(self, event_filter: EventFilter) -> int:
        self._hold()
        return self.level.clear_events(event_filter)

    def clear_decorations(self) -> None:
        self._hold()
        self.level.clear_decorations()
