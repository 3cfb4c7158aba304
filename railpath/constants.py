"""railpath/constants.py — Fixed tuning constants.

Geometry constants must match the reference renderer exactly so meshes
line up with levels authored against it.
"""

# ---------------------------------------------------------------------------
# Headings
# ---------------------------------------------------------------------------

MIDSPIN = 999
RESERVED_HEADINGS = frozenset({555, 666, 777, 888})

INITIAL_ANGLE_DIR = 180
POSITION_DECIMALS = 8

# ---------------------------------------------------------------------------
# Track mesh
# ---------------------------------------------------------------------------

TILE_WIDTH = 0.275  # rail half-width
TILE_LENGTH = 0.5
OUTLINE = 0.025
MIDSPIN_OFFSET = 0.04
CIRCLE_RESOLUTION = 32

# Chamfer breakpoints, radians
CURVE_LIMIT = 2.0943952      # 120°
CHAMFER_FLAT = 0.08726646    # 5°
CHAMFER_SHARP = 0.5235988    # 30°
CHAMFER_MID = 0.7853982      # 45°
CHAMFER_RIGHT = 1.5707964    # 90°

BLACK = (0.0, 0.0, 0.0)
WHITE = (1.0, 1.0, 1.0)

# ---------------------------------------------------------------------------
# Orbit simulation
# ---------------------------------------------------------------------------

DEFAULT_BPM = 120.0
ORBIT_RADIUS = 3.0
CROSSING_DISTANCE = 0.5
MARKER_COUNT = 2
TRAIL_LIFETIME_MS = 500.0
MS_PER_MINUTE = 60000.0
