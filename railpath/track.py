"""railpath/track.py — Tile recurrence and position pass.

Turns a raw heading list plus flat action/decoration lists into immutable
Tile records. Two passes:

1. Angle fold: an (angle_dir, twirl_count) state threaded through the
   headings in index order, yielding each tile's relative turning angle
   and twirl parity.
2. Position pass: walks the resolved headings with a 2D cursor, one
   extra closing step past the last tile.

Both passes are replayed from tile 0 after any structural edit; a tile's
relative angle depends on every tile before it.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass, replace
from typing import Iterator, NamedTuple

from railpath.constants import INITIAL_ANGLE_DIR, MIDSPIN, POSITION_DECIMALS
from railpath.events import EventKind, event_type, kind_name

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Tile:
    """One path segment.

    ``code`` is the heading as stored in the file (MIDSPIN for a midspin);
    ``direction`` is the heading the tile actually faces, which a midspin
    inherits from its predecessor.
    """

    index: int
    code: float
    direction: float
    relative_angle: float
    twirl_parity: int
    actions: tuple[dict, ...] = ()
    decorations: tuple[dict, ...] = ()
    position: tuple[float, float] = (0.0, 0.0)
    incoming_heading: float = 0.0
    outgoing_heading: float = 0.0
    closing_heading: float = 0.0

    @property
    def is_midspin(self) -> bool:
        return self.code == MIDSPIN

    def actions_of(self, kind: EventKind | str) -> list[dict]:
        name = kind_name(kind)
        return [a for a in self.actions if event_type(a) == name]


class AngleState(NamedTuple):
    """Accumulator carried through the angle fold."""

    angle_dir: float
    twirl_count: int


class AngleStep(NamedTuple):
    direction: float
    relative_angle: float
    twirl_parity: int


class Joint(NamedTuple):
    """Headings meeting at one step of the position pass."""

    incoming: float
    outgoing: float


# ---------------------------------------------------------------------------
# Angle fold
# ---------------------------------------------------------------------------

def angle_step(
    state: AngleState,
    heading: float,
    prev_heading: float,
    prev_direction: float,
    twirls: int,
) -> tuple[AngleStep, AngleState]:
    """Advance the fold by one tile.

    ``twirls`` is the number of Twirl actions on this tile; they are counted
    before the angle is taken, midspins included. A midspin has no turn of
    its own and takes the previous tile's raw heading as the new reference.
    """
    count = state.twirl_count + twirls
    if heading == MIDSPIN:
        step = AngleStep(prev_direction, 0, count % 2)
        return step, AngleState(prev_heading, count)


    diff = (state.angle_dir - heading) % 360
    relative = diff if count % 2 == 0 else 360 - diff
    if relative == 0:
        relative = 360
    return AngleStep(heading, relative, count % 2), AngleState(heading + 180, count)


def iter_angles(
    headings: list[float],
    twirl_counts: list[int],
) -> Iterator[AngleStep]:
    """Fold angle_step over the heading list from tile 0."""
    state = AngleState(INITIAL_ANGLE_DIR, 0)
    prev_heading = 0.0
    prev_direction = 0.0
    for heading, twirls in zip(headings, twirl_counts):
        step, state = angle_step(state, heading, prev_heading, prev_direction, twirls)
        prev_heading = heading
        prev_direction = step.direction
        yield step


# ---------------------------------------------------------------------------
# Tile construction
# ---------------------------------------------------------------------------

def group_by_floor(entries: list[dict], count: int) -> list[list[dict]]:
    """Split a flat floor-tagged list into per-tile lists without the floor key.

    Entries whose floor is missing or outside [0, count) are dropped.
    """
    grouped: dict[int, list[dict]] = defaultdict(list)
    for entry in entries:
        floor = entry.get("floor")
        if isinstance(floor, bool) or not isinstance(floor, int) or not 0 <= floor < count:
            logger.warning("Dropping %s with floor %r", event_type(entry) or "entry", floor)
            continue
        grouped[floor].append({k: v for k, v in entry.items() if k != "floor"})
    return [grouped.get(i, []) for i in range(count)]


def build_tiles(
    headings: list[float],
    actions: list[list[dict]],
    decorations: list[list[dict]],
) -> list[Tile]:
    """Run both passes over per-tile action and decoration lists."""
    twirl_counts = [
        sum(1 for a in tile_actions if event_type(a) == EventKind.TWIRL.value)
        for tile_actions in actions
    ]
    tiles = [
        Tile(
            index=i,
            code=headings[i],
            direction=step.direction,
            relative_angle=step.relative_angle,
            twirl_parity=step.twirl_parity,
            actions=tuple(actions[i]),
            decorations=tuple(decorations[i]),
        )
        for i, step in enumerate(iter_angles(headings, twirl_counts))
    ]
    return resolve_positions(tiles)


# ---------------------------------------------------------------------------
# Position pass
# ---------------------------------------------------------------------------

def resolved_headings(codes: list[float]) -> list[float]:
    """Replace each midspin with its predecessor's heading turned around."""
    out: list[float] = []
    for i, code in enumerate(codes):
        if code == MIDSPIN:
            out.append((out[i - 1] if i else 0) + 180)
        else:
            out.append(code)
    return out


def joints(codes: list[float]) -> list[Joint]:
    """Headings at each of the N+1 steps of the position pass.

    The final entry is the closing step, which reuses the last heading.
    """
    headings = resolved_headings(codes)
    n = len(headings)
    result = []
    for i in range(n + 1):
        incoming = headings[i] if i < n else headings[n - 1]
        outgoing = (headings[i - 1] if i else 0) - 180
        result.append(Joint(incoming, outgoing))
    return result


def resolve_positions(tiles: list[Tile]) -> list[Tile]:
    """Assign positions and joint headings to a fold-complete tile list."""
    n = len(tiles)
    if n == 0:
        return []
    steps = joints([t.code for t in tiles])
    closing = steps[n].incoming + 180
    x = y = 0.0
    out = []
    for i, joint in enumerate(steps):
        if i < n:
            dx, dy = position_offset(tiles[i])
            x += dx
            y += dy
        rad = math.radians(joint.incoming)
        x += math.cos(rad)
        y += math.sin(rad)
        if i < n:
            out.append(replace(
                tiles[i],
                position=(round(x, POSITION_DECIMALS), round(y, POSITION_DECIMALS)),
                incoming_heading=joint.incoming,
                outgoing_heading=joint.outgoing,
                closing_heading=closing,
            ))
    return out


def position_offset(tile: Tile) -> tuple[float, float]:
    """Offset declared by the tile's first PositionTrack action, if active."""
    moves = tile.actions_of(EventKind.POSITION_TRACK)
    if not moves:
        return 0.0, 0.0
    action = moves[0]
    offset = action.get("positionOffset")
    if offset is None or action.get("editorOnly") in (True, "Enabled"):
        return 0.0, 0.0
    ox = offset[0] if len(offset) > 0 and offset[0] is not None else 0.0
    oy = offset[1] if len(offset) > 1 and offset[1] is not None else 0.0
    return float(ox), float(oy)
