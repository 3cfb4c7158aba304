"""railpath/level.py — Loaded level: tiles, action index, floor edits, export.

A Level owns the settings and the tile list. Tiles are rebuilt in bulk by
replaying the recurrence whenever the floor structure or the action lists
change; nothing edits a single tile in place.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from pathlib import Path
from typing import Mapping

from railpath.constants import RESERVED_HEADINGS
from railpath.events import (
    DECORATION_EVENTS,
    EventFilter,
    EventKind,
    event_type,
    filter_actions,
    kind_name,
)
from railpath.formatting import format_level
from railpath.mesh import TrackMesh, generate
from railpath.parser import RawLevel, parse_level_object, parse_level_text
from railpath.track import Joint, Tile, build_tiles, group_by_floor, joints

logger = logging.getLogger(__name__)


class StructuralError(IndexError):
    """A floor operation or query referenced an index outside the tile range."""


# ---------------------------------------------------------------------------
# Action index
# ---------------------------------------------------------------------------

class ActionIndex:
    """Read-only (eventType, tile index) → actions lookup over a tile list."""

    def __init__(self, tiles: list[Tile]):
        self._by_key: dict[tuple[str, int], list[dict]] = defaultdict(list)
        for tile in tiles:
            for action in tile.actions:
                self._by_key[(event_type(action), tile.index)].append(action)

    def actions_at(self, kind: EventKind | str, index: int) -> list[dict]:
        return list(self._by_key.get((kind_name(kind), index), ()))

    def count(self, kind: EventKind | str) -> int:
        name = kind_name(kind)
        return sum(len(v) for (k, _), v in self._by_key.items() if k == name)


# ---------------------------------------------------------------------------
# Level
# ---------------------------------------------------------------------------

class Level:
    """A parsed level with its resolved tile list."""

    def __init__(self, raw: RawLevel, *, circle_resolution: int | None = None):
        self.settings = raw.settings
        self.circle_resolution = circle_resolution
        n = len(raw.headings)
        self._replay(
            list(raw.headings),
            group_by_floor(raw.actions, n),
            group_by_floor(raw.decorations, n),
        )

    # -- recurrence ---------------------------------------------------------

    def _replay(
        self,
        headings: list[float],
        actions: list[list[dict]],
        decorations: list[list[dict]],
    ) -> None:
        """Rebuild every tile from tile 0 and drop cached meshes."""
        self.tiles: list[Tile] = build_tiles(headings, actions, decorations)
        self._joints: list[Joint] = joints(headings) if headings else []
        self._index = ActionIndex(self.tiles)
        self._meshes: dict[int, TrackMesh] = {}
        logger.debug("Replayed %d tiles", len(self.tiles))

    def _columns(self) -> tuple[list[float], list[list[dict]], list[list[dict]]]:
        return (
            [t.code for t in self.tiles],
            [list(t.actions) for t in self.tiles],
            [list(t.decorations) for t in self.tiles],
        )

    # -- queries ------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.tiles)

    @property
    def headings(self) -> list[float]:
        return [t.code for t in self.tiles]

    @property
    def bpm(self) -> float | None:
        """Base tempo from settings, or None when the level declares none."""
        bpm = self.settings.get("bpm")
        return float(bpm) if bpm else None

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.tiles):
            raise StructuralError(f"Tile {index} outside 0..{len(self.tiles) - 1}")

    def tile_at(self, index: int) -> Tile:
        self._check_index(index)
        return self.tiles[index]

    def position_of(self, index: int) -> tuple[float, float]:
        return self.tile_at(index).position

    def actions_at(self, kind: EventKind | str, index: int) -> list[dict]:
        """Actions of a kind at a tile; empty for indices past either end."""
        return self._index.actions_at(kind, index)

    def filter_actions(self, kind: EventKind | str) -> list[tuple[int, dict]]:
        """All actions of a kind as (tile index, action), in index order."""
        name = kind_name(kind)
        return [
            (tile.index, action)
            for tile in self.tiles
            for action in tile.actions
            if event_type(action) == name
        ]

    def action_count(self, kind: EventKind | str) -> int:
        return self._index.count(kind)

    def mesh_of(self, index: int) -> TrackMesh:
        """Geometry drawn at the tile's position, memoized until the next edit.

        Built from the rail arriving from the previous tile and the rail
        leaving toward the next one (the closing step for the last tile).
        """
        self._check_index(index)
        if index not in self._meshes:
            joint = self._joints[index + 1]
            nxt = index + 1
            midspin = nxt < len(self.tiles) and self.tiles[nxt].is_midspin
            kwargs = {}
            if self.circle_resolution is not None:
                kwargs["resolution"] = self.circle_resolution
            self._meshes[index] = generate(joint.incoming, joint.outgoing, midspin, **kwargs)
        return self._meshes[index]

    # -- floor operations ---------------------------------------------------

    def append_floor(self, heading: float) -> Tile:
        """Add a tile after the last one."""
        return self.insert_floor(len(self.tiles), heading)

    def insert_floor(self, index: int, heading: float) -> Tile:
        """Insert an empty tile before ``index`` (``len`` appends)."""
        if not 0 <= index <= len(self.tiles):
            raise StructuralError(f"Cannot insert at {index}; level has {len(self.tiles)} tiles")
        _check_heading(heading)
        headings, actions, decorations = self._columns()
        headings.insert(index, heading)
        actions.insert(index, [])
        decorations.insert(index, [])
        self._replay(headings, actions, decorations)
        logger.info("Inserted floor %d (heading %s)", index, heading)
        return self.tiles[index]

    def delete_floor(self, index: int) -> Tile:
        """Remove a tile together with its actions and decorations."""
        self._check_index(index)
        removed = self.tiles[index]
        headings, actions, decorations = self._columns()
        del headings[index], actions[index], decorations[index]
        self._replay(headings, actions, decorations)
        logger.info("Deleted floor %d", index)
        return removed

    # -- action editing -----------------------------------------------------

    def clear_events(self, event_filter: EventFilter) -> int:
        """Apply an include/exclude filter to every tile; return how many were dropped."""
        headings, actions, decorations = self._columns()
        before = sum(len(a) for a in actions)
        actions = [filter_actions(tile, event_filter) for tile in actions]
        dropped = before - sum(len(a) for a in actions)
        self._replay(headings, actions, decorations)
        logger.info("Filtered %d actions", dropped)
        return dropped

    def clear_decorations(self) -> None:
        """Drop every decoration and the actions that manipulate decorations."""
        headings, actions, decorations = self._columns()
        actions = [filter_actions(tile, DECORATION_EVENTS) for tile in actions]
        self._replay(headings, actions, [[] for _ in decorations])

    # -- export -------------------------------------------------------------

    def export(self) -> dict:
        """Flatten back into the file layout with floor fields reattached."""
        return {
            "angleData": [t.code for t in self.tiles],
            "settings": self.settings,
            "actions": [{"floor": t.index, **a} for t in self.tiles for a in t.actions],
            "decorations": [
                {"floor": t.index, **d} for t in self.tiles for d in t.decorations
            ],
        }

    def export_text(self) -> str:
        return format_level(self.export())


# ---------------------------------------------------------------------------
# Loading / saving
# ---------------------------------------------------------------------------

def _check_heading(heading: float) -> None:
    if isinstance(heading, bool) or not isinstance(heading, (int, float)):
        raise ValueError(f"Heading must be a number, got {heading!r}")
    if math.isnan(heading) or math.isinf(heading):
        raise ValueError("Heading must be finite")
    if heading in RESERVED_HEADINGS:
        raise ValueError(f"Heading {heading} is a reserved code")


def load_level(
    source: str | Mapping,
    *,
    circle_resolution: int | None = None,
) -> Level:
    """Parse level text or an already-decoded mapping.

    Raises:
        ParseError: If the source cannot be turned into a level.
    """
    if isinstance(source, str):
        raw = parse_level_text(source)
    else:
        raw = parse_level_object(source)
    level = Level(raw, circle_resolution=circle_resolution)
    midspins = sum(1 for t in level.tiles if t.is_midspin)
    logger.info(
        "Loaded level: %d tiles (%d midspins), %d actions",
        len(level.tiles), midspins, sum(len(t.actions) for t in level.tiles),
    )
    return level


def load_level_file(path: Path | str, **kwargs) -> Level:
    """Read and parse a level file (UTF-8, BOM tolerated)."""
    text = Path(path).read_text(encoding="utf-8")
    return load_level(text, **kwargs)


def save_level(level: Level, path: Path | str) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(level.export_text() + "\n", encoding="utf-8")
