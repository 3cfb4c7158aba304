"""railpath/simulation.py — Orbiting-marker playback over a tile path.

One marker sits on the current tile; the others orbit it at a tempo-derived
angular velocity. When an orbiting marker comes close enough to the next
tile it becomes the new centre, the tile's gameplay actions fire once, and
every orbiting marker's angle is re-derived from the new centre. No timers,
no threads: the caller drives everything through ``step(dt_ms)``.
"""

from __future__ import annotations

import colorsys
import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Protocol, Sequence

from railpath.config import ViewerConfig
from railpath.constants import MS_PER_MINUTE
from railpath.events import EventKind
from railpath.track import Tile

logger = logging.getLogger(__name__)


class TrackSource(Protocol):
    """What the simulator reads from a level."""

    tiles: Sequence[Tile]

    @property
    def bpm(self) -> Optional[float]: ...

    def actions_at(self, kind: EventKind | str, index: int) -> list[dict]: ...


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class PlaybackState(Enum):
    HOLDING = "holding"
    PLAYING = "playing"


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass
class TrailPoint:
    x: float
    y: float
    time_ms: float


@dataclass
class OrbitMarker:
    """A marker: either the centre or orbiting the centre."""

    id: int
    angle: float  # radians, relative to the centre marker
    is_center: bool
    color: tuple[float, float, float]
    x: float = 0.0
    y: float = 0.0
    trail: list[TrailPoint] = field(default_factory=list)


@dataclass
class SimulationState:
    """Everything that exists only while playing."""

    spin_direction: int
    bpm: float
    center_tile_index: int
    center_marker_id: int
    markers: list[OrbitMarker]
    elapsed_ms: float = 0.0
    crossings: int = 0


@dataclass
class CrossingEvent:
    tile_index: int
    marker_id: int
    paused: bool = False
    speed_changed: bool = False
    twirled: bool = False


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def angular_velocity(bpm: float) -> float:
    """Radians per millisecond: one half-turn per beat."""
    return 2 * math.pi / (MS_PER_MINUTE / bpm)


def marker_color(index: int, total: int) -> tuple[float, float, float]:
    """Red, blue, then evenly spaced hues."""
    if index == 0:
        return (1.0, 0.0, 0.0)
    if index == 1:
        return (0.0, 0.0, 1.0)
    hue = (index * 360 / total) % 360
    return colorsys.hls_to_rgb(hue / 360, 0.5, 1.0)


# ---------------------------------------------------------------------------
# Simulator
# ---------------------------------------------------------------------------

class OrbitSimulator:
    """Holding/Playing state machine advancing markers over a track."""

    def __init__(self, track: TrackSource, config: Optional[ViewerConfig] = None):
        self.track = track
        self.config = config or ViewerConfig()
        self.playback = PlaybackState.HOLDING
        self.state: Optional[SimulationState] = None

    # -- transitions --------------------------------------------------------

    def set_playback(self, playback: PlaybackState) -> bool:
        """Switch state. Returns False if playback cannot start (< 2 tiles)."""
        if playback is PlaybackState.PLAYING:
            return self._start()
        if self.playback is PlaybackState.PLAYING:
            logger.info("Playback stopped after %.1fms", self.state.elapsed_ms)
        self.playback = PlaybackState.HOLDING
        self.state = None
        return True

    def _start(self) -> bool:
        tiles = self.track.tiles
        if len(tiles) < 2:
            logger.warning("Cannot play a level with %d tiles", len(tiles))
            return False
        count = self.config.marker_count
        markers = []
        for i in range(count):
            if i < 2:
                x, y = tiles[i].position
            else:
                x, y = 0.0, 0.0
            markers.append(OrbitMarker(
                id=i,
                angle=0.0 if i == 0 else math.pi,
                is_center=i == 0,
                color=marker_color(i, count),
                x=x,
                y=y,
            ))
        bpm = self.track.bpm or self.config.default_bpm
        self.state = SimulationState(
            spin_direction=1,
            bpm=bpm,
            center_tile_index=0,
            center_marker_id=0,
            markers=markers,
        )
        self.playback = PlaybackState.PLAYING
        logger.info("Playback started at %.1f bpm with %d markers", bpm, count)
        return True

    # -- queries ------------------------------------------------------------

    @property
    def center(self) -> OrbitMarker:
        return self.state.markers[self.state.center_marker_id]

    def orbiting(self) -> list[OrbitMarker]:
        return [m for m in self.state.markers if not m.is_center]

    def _tile_position(self, index: int) -> Optional[tuple[float, float]]:
        tiles = self.track.tiles
        if 0 <= index < len(tiles):
            return tiles[index].position
        return None

    # -- per tick -----------------------------------------------------------

    def step(self, dt_ms: float) -> list[CrossingEvent]:
        """Advance by ``dt_ms`` milliseconds. No-op while holding."""
        events: list[CrossingEvent] = []
        if self.playback is not PlaybackState.PLAYING:
            return events

        sim = self.state
        sim.elapsed_ms += dt_ms
        delta = angular_velocity(sim.bpm) * dt_ms * sim.spin_direction
        for marker in self.orbiting():
            marker.angle += delta
        self._place_orbiting()

        crossing = self._check_crossing()
        if crossing is not None:
            events.append(crossing)

        self._record_trails()
        return events

    def _place_orbiting(self) -> None:
        cx, cy = self.center.x, self.center.y
        radius = self.config.orbit_radius
        for marker in self.orbiting():
            marker.x = cx + radius * math.cos(marker.angle)
            marker.y = cy + radius * math.sin(marker.angle)

    def _check_crossing(self) -> Optional[CrossingEvent]:
        target = self._tile_position(self.state.center_tile_index + 1)
        if target is None:
            return None
        tx, ty = target
        for marker in self.orbiting():
            if math.hypot(marker.x - tx, marker.y - ty) < self.config.crossing_distance:
                return self._cross(marker)
        return None

    def _cross(self, marker: OrbitMarker) -> CrossingEvent:
        sim = self.state
        self.center.is_center = False
        marker.is_center = True
        sim.center_marker_id = marker.id
        sim.center_tile_index += 1
        sim.crossings += 1
        event = CrossingEvent(tile_index=sim.center_tile_index, marker_id=marker.id)

        self._apply_actions(sim.center_tile_index, event)

        # Re-derive every orbiting angle from the new centre, from scratch.
        for other in self.orbiting():
            dx = other.x - marker.x
            dy = other.y - marker.y
            other.angle = math.atan2(dy, dx)

        logger.debug(
            "Crossing onto tile %d by marker %d (bpm %.1f, spin %+d)",
            sim.center_tile_index, marker.id, sim.bpm, sim.spin_direction,
        )
        return event

    def _apply_actions(self, tile_index: int, event: CrossingEvent) -> None:
        """Pause, then tempo, then twirl."""
        sim = self.state

        pauses = self.track.actions_at(EventKind.PAUSE, tile_index)
        if pauses:
            duration = pauses[0].get("duration") or 0
            extra = (duration / 2) * 2 * math.pi * sim.spin_direction
            for marker in self.orbiting():
                marker.angle += extra
            event.paused = True

        speeds = self.track.actions_at(EventKind.SET_SPEED, tile_index)
        if speeds:
            action = speeds[0]
            speed_type = action.get("speedType")
            if speed_type == "Multiplier":
                sim.bpm *= action.get("bpmMultiplier") or 1
            elif speed_type == "Bpm":
                sim.bpm = action.get("beatsPerMinute") or sim.bpm
            event.speed_changed = True

        if self.track.actions_at(EventKind.TWIRL, tile_index):
            sim.spin_direction = -sim.spin_direction
            event.twirled = True

    def _record_trails(self) -> None:
        now = self.state.elapsed_ms
        cutoff = now - self.config.trail_lifetime_ms
        for marker in self.state.markers:
            marker.trail.append(TrailPoint(marker.x, marker.y, now))
            marker.trail = [p for p in marker.trail if p.time_ms > cutoff]
