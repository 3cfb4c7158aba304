"""railpath/mesh.py — Flat outlined track geometry for one tile.

Every tile is drawn as two stacked flat shapes: a black outer layer and a
white inner layer shrunk by twice the outline thickness. The outline comes
from the layering, not from blending, so every vertex colour is pure black
or pure white.

Three shape families:

- midspin: a small diamond marker pushed slightly back along the
  incoming heading;
- curved (0 < Δ ≤ 120°): a chamfer circle fan, a bridging hex from the
  fan to both rails, and a pair of rectangular end caps;
- wide (Δ > 120°): a single wedge joining the two rails, plus end caps.

Buffers are flat numpy arrays: xyz triples, rgb triples, triangle
index triples.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

import numpy as np

from railpath.constants import (
    BLACK,
    CHAMFER_FLAT,
    CHAMFER_MID,
    CHAMFER_RIGHT,
    CHAMFER_SHARP,
    CIRCLE_RESOLUTION,
    CURVE_LIMIT,
    MIDSPIN_OFFSET,
    OUTLINE,
    TILE_LENGTH,
    TILE_WIDTH,
    WHITE,
)

logger = logging.getLogger(__name__)

Color = tuple[float, float, float]


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass
class TrackMesh:
    """Geometry buffers ready for upload."""

    vertices: np.ndarray  # float32, len % 3 == 0
    faces: np.ndarray  # uint32, len % 3 == 0
    colors: np.ndarray  # float32, same length as vertices

    @property
    def vertex_count(self) -> int:
        return len(self.vertices) // 3

    @property
    def triangle_count(self) -> int:
        return len(self.faces) // 3


@dataclass
class _MeshBuilder:
    vertices: list[float] = field(default_factory=list)
    faces: list[int] = field(default_factory=list)
    colors: list[float] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.vertices) // 3

    def add_shape(
        self,
        points: list[tuple[float, float]],
        triangles: list[tuple[int, int, int]],
        color: Color,
    ) -> None:
        """Append points (z=0) and triangles indexed relative to the shape."""
        base = self.count
        for x, y in points:
            self.vertices.extend((x, y, 0.0))
            self.colors.extend(color)
        for tri in triangles:
            self.faces.extend(base + i for i in tri)

    def build(self) -> TrackMesh:
        return TrackMesh(
            vertices=np.asarray(self.vertices, dtype=np.float32),
            faces=np.asarray(self.faces, dtype=np.uint32),
            colors=np.asarray(self.colors, dtype=np.float32),
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def chamfer_scale(angle: float) -> float:
    """Fraction of the rail width kept as chamfer radius for a swept angle.

    Piecewise over five breakpoints (5°, 30°, 45°, 90°, 120°), in radians.
    """
    if angle < CHAMFER_FLAT:
        return 1.0
    if angle < CHAMFER_SHARP:
        t = (angle - CHAMFER_FLAT) / (CHAMFER_SHARP - CHAMFER_FLAT)
        return lerp(1.0, 0.83, t ** 0.5)
    if angle < CHAMFER_MID:
        t = (angle - CHAMFER_SHARP) / (CHAMFER_MID - CHAMFER_SHARP)
        return lerp(0.83, 0.77, t)
    if angle < CHAMFER_RIGHT:
        t = (angle - CHAMFER_MID) / (CHAMFER_RIGHT - CHAMFER_MID)
        return lerp(0.77, 0.15, t ** 0.7)
    t = (angle - CHAMFER_RIGHT) / (CURVE_LIMIT - CHAMFER_RIGHT)
    return lerp(0.15, 0.0, max(t, 0.0) ** 0.5)


def swept_range(incoming: float, outgoing: float) -> tuple[float, float]:
    """Return (a0, a1) in radians spanning the smaller arc between headings."""
    forward = (outgoing - incoming) % 360
    backward = (incoming - outgoing) % 360
    if backward >= forward:
        a0 = math.radians(incoming % 360)
        return a0, a0 + math.radians(forward)
    a0 = math.radians(outgoing % 360)
    return a0, a0 + math.radians(backward)


def _add_circle(
    builder: _MeshBuilder,
    cx: float,
    cy: float,
    radius: float,
    color: Color,
    resolution: int,
) -> None:
    if resolution <= 0:
        resolution = CIRCLE_RESOLUTION
    points = [(cx, cy)]
    for i in range(resolution):
        theta = 2 * math.pi * i / resolution
        points.append((math.cos(theta) * radius + cx, math.sin(theta) * radius + cy))
    triangles = [(0, i, i + 1) for i in range(1, resolution)]
    triangles.append((0, resolution, 1))
    builder.add_shape(points, triangles, color)


def _add_bridge(
    builder: _MeshBuilder,
    cx: float,
    cy: float,
    radius: float,
    width: float,
    a0: float,
    a1: float,
    color: Color,
) -> None:
    """Hex joining the chamfer fan to the inner edges of both rails."""
    points = [
        (-radius * math.sin(a1) + cx, radius * math.cos(a1) + cy),
        (cx, cy),
        (radius * math.sin(a0) + cx, -radius * math.cos(a0) + cy),
        (width * math.sin(a0), -width * math.cos(a0)),
        (0.0, 0.0),
        (-width * math.sin(a1), width * math.cos(a1)),
    ]
    triangles = [(0, 1, 5), (4, 1, 5), (2, 3, 4), (1, 3, 4)]
    builder.add_shape(points, triangles, color)


def _add_wedge(
    builder: _MeshBuilder,
    width: float,
    a0: float,
    a1: float,
    mid: float,
    color: Color,
) -> None:
    reach = -width / math.sin((a1 - a0) / 2)
    points = [
        (reach * math.cos(mid), reach * math.sin(mid)),
        (width * math.sin(a0), -width * math.cos(a0)),
        (0.0, 0.0),
        (-width * math.sin(a1), width * math.cos(a1)),
    ]
    builder.add_shape(points, [(0, 1, 2), (2, 3, 0)], color)


def _add_end_caps(
    builder: _MeshBuilder,
    incoming: float,
    outgoing: float,
    length: float,
    width: float,
    color: Color,
) -> None:
    """Rectangle from the tile origin out along each heading."""
    points = []
    for heading in (incoming, outgoing):
        c = math.cos(math.radians(heading))
        s = math.sin(math.radians(heading))
        points.extend([
            (length * c + width * s, length * s - width * c),
            (length * c - width * s, length * s + width * c),
            (-width * s, width * c),
            (width * s, -width * c),
        ])
    triangles = [(0, 1, 2), (2, 3, 0), (4, 5, 6), (6, 7, 4)]
    builder.add_shape(points, triangles, color)


# ---------------------------------------------------------------------------
# Shape families
# ---------------------------------------------------------------------------

def _diamond_points(
    mx: float, my: float, c: float, s: float, length: float, width: float,
) -> list[tuple[float, float]]:
    return [
        (mx + length * c + width * s, my + length * s - width * c),
        (mx + length * c - width * s, my + length * s + width * c),
        (mx - width * s, my + width * c),
        (mx + width * s, my - width * c),
        (mx - width * c, my - width * s),
        (mx + width * s, my - width * c),
        (mx - width * s, my + width * c),
    ]


def midspin_mesh(
    heading: float,
    width: float = TILE_WIDTH,
    length: float = TILE_WIDTH,
    outline: float = OUTLINE,
) -> TrackMesh:
    """Diamond marker for a midspin tile."""
    c = math.cos(math.radians(heading))
    s = math.sin(math.radians(heading))
    mx, my = -c * MIDSPIN_OFFSET, -s * MIDSPIN_OFFSET
    triangles = [(0, 1, 2), (2, 3, 0), (4, 5, 6)]

    builder = _MeshBuilder()
    outer_width = width + outline
    outer_length = length + outline
    builder.add_shape(
        _diamond_points(mx, my, c, s, outer_length, outer_width), triangles, BLACK,
    )
    # Inner width shrinks from the base width, inner length from the outer one.
    inner_width = width - outline * 2
    inner_length = outer_length - outline * 2
    builder.add_shape(
        _diamond_points(mx, my, c, s, inner_length, inner_width), triangles, WHITE,
    )
    return builder.build()


def _curved_layers(
    builder: _MeshBuilder,
    incoming: float,
    outgoing: float,
    a0: float,
    a1: float,
    length: float,
    width: float,
    outline: float,
    resolution: int,
) -> None:
    angle = a1 - a0
    mid = a0 + angle / 2
    scale = chamfer_scale(angle)
    if scale == 1.0:
        distance = 0.0
        radius = width
    else:
        radius = lerp(0.0, width, scale)
        distance = (width - radius) / math.sin(angle / 2)
    cx = -distance * math.cos(mid)
    cy = -distance * math.sin(mid)

    width += outline
    length += outline
    radius += outline
    _add_circle(builder, cx, cy, radius, BLACK, resolution)
    _add_bridge(builder, cx, cy, radius, width, a0, a1, BLACK)
    _add_end_caps(builder, incoming, outgoing, length, width, BLACK)

    width -= outline * 2
    length -= outline * 2
    radius -= outline * 2
    if radius < 0:
        radius = 0.0
        reach = -width / math.sin(angle / 2)
        cx = reach * math.cos(mid)
        cy = reach * math.sin(mid)
    _add_circle(builder, cx, cy, radius, WHITE, resolution)
    _add_bridge(builder, cx, cy, radius, width, a0, a1, WHITE)
    _add_end_caps(builder, incoming, outgoing, length, width, WHITE)


def _wide_layers(
    builder: _MeshBuilder,
    incoming: float,
    outgoing: float,
    a0: float,
    a1: float,
    length: float,
    width: float,
    outline: float,
) -> None:
    mid = (a0 + a1) / 2

    width += outline
    length += outline
    _add_wedge(builder, width, a0, a1, mid, BLACK)
    _add_end_caps(builder, incoming, outgoing, length, width, BLACK)

    width -= outline * 2
    length -= outline * 2
    _add_wedge(builder, width, a0, a1, mid, WHITE)
    _add_end_caps(builder, incoming, outgoing, length, width, WHITE)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def generate(
    incoming: float,
    outgoing: float,
    is_midspin: bool = False,
    *,
    length: float = TILE_LENGTH,
    width: float = TILE_WIDTH,
    outline: float = OUTLINE,
    resolution: int = CIRCLE_RESOLUTION,
) -> TrackMesh:
    """Build the mesh for one tile from the headings of its two rails.

    Headings are in degrees. A zero swept angle (both rails on the same
    heading) has no visible joint and yields empty buffers.
    """
    if is_midspin:
        return midspin_mesh(incoming, outline=outline)

    a0, a1 = swept_range(incoming, outgoing)
    angle = a1 - a0
    builder = _MeshBuilder()
    if 0 < angle < CURVE_LIMIT:
        _curved_layers(
            builder, incoming, outgoing, a0, a1, length, width, outline, resolution,
        )
    elif angle > 0:
        _wide_layers(builder, incoming, outgoing, a0, a1, length, width, outline)
    else:
        logger.debug("Zero swept angle for headings %s/%s", incoming, outgoing)
    return builder.build()
