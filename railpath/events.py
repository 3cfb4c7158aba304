"""railpath/events.py — Event kinds, filter presets, and action filtering.

Actions are stored as plain dicts keyed the way the level file keys them
(``eventType`` plus event-specific fields). ``EventKind`` names the kinds
the core reacts to or that presets refer to; actions of any other kind
are carried through untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class EventKind(str, Enum):
    TWIRL = "Twirl"
    PAUSE = "Pause"
    SET_SPEED = "SetSpeed"
    POSITION_TRACK = "PositionTrack"
    HOLD = "Hold"
    SET_HOLD_SOUND = "SetHoldSound"
    MOVE_CAMERA = "MoveCamera"
    FLASH = "Flash"
    SET_FILTER = "SetFilter"
    SET_FILTER_ADVANCED = "SetFilterAdvanced"
    HALL_OF_MIRRORS = "HallOfMirrors"
    BLOOM = "Bloom"
    SCALE_PLANETS = "ScalePlanets"
    SCREEN_TILE = "ScreenTile"
    SCREEN_SCROLL = "ScreenScroll"
    SHAKE_SCREEN = "ShakeScreen"
    ADD_DECORATION = "AddDecoration"
    ADD_TEXT = "AddText"
    ADD_OBJECT = "AddObject"
    CHECKPOINT = "Checkpoint"
    SET_HITSOUND = "SetHitsound"
    PLAY_SOUND = "PlaySound"
    SET_PLANET_ROTATION = "SetPlanetRotation"
    COLOR_TRACK = "ColorTrack"
    ANIMATE_TRACK = "AnimateTrack"
    RECOLOR_TRACK = "RecolorTrack"
    MOVE_TRACK = "MoveTrack"
    MOVE_DECORATIONS = "MoveDecorations"
    SET_TEXT = "SetText"
    SET_OBJECT = "SetObject"
    SET_DEFAULT_TEXT = "SetDefaultText"
    CUSTOM_BACKGROUND = "CustomBackground"
    SET_FRAME_RATE = "SetFrameRate"
    REPEAT_EVENTS = "RepeatEvents"
    SET_CONDITIONAL_EVENTS = "SetConditionalEvents"
    EDITOR_COMMENT = "EditorComment"
    BOOKMARK = "Bookmark"
    HIDE = "Hide"
    SCALE_MARGIN = "ScaleMargin"
    SCALE_RADIUS = "ScaleRadius"


class FilterMode(Enum):
    INCLUDE = "include"
    EXCLUDE = "exclude"


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EventFilter:
    """Keep (INCLUDE) or drop (EXCLUDE) actions whose kind is in ``kinds``."""

    mode: FilterMode
    kinds: frozenset[EventKind]

    def keeps(self, action: dict) -> bool:
        hit = event_type(action) in self._names
        return hit if self.mode is FilterMode.INCLUDE else not hit

    @property
    def _names(self) -> frozenset[str]:
        return frozenset(k.value for k in self.kinds)


NO_EFFECTS = EventFilter(FilterMode.EXCLUDE, frozenset({
    EventKind.FLASH,
    EventKind.SET_FILTER,
    EventKind.SET_FILTER_ADVANCED,
    EventKind.HALL_OF_MIRRORS,
    EventKind.BLOOM,
    EventKind.SCALE_PLANETS,
    EventKind.SCREEN_TILE,
    EventKind.SCREEN_SCROLL,
    EventKind.SHAKE_SCREEN,
}))

NO_HOLDS = EventFilter(FilterMode.EXCLUDE, frozenset({EventKind.HOLD}))

NO_MOVE_CAMERA = EventFilter(FilterMode.EXCLUDE, frozenset({EventKind.MOVE_CAMERA}))

NO_EFFECTS_COMPLETELY = EventFilter(FilterMode.EXCLUDE, frozenset({
    EventKind.ADD_DECORATION,
    EventKind.ADD_TEXT,
    EventKind.ADD_OBJECT,
    EventKind.CHECKPOINT,
    EventKind.SET_HITSOUND,
    EventKind.PLAY_SOUND,
    EventKind.SET_PLANET_ROTATION,
    EventKind.SCALE_PLANETS,
    EventKind.COLOR_TRACK,
    EventKind.ANIMATE_TRACK,
    EventKind.RECOLOR_TRACK,
    EventKind.MOVE_TRACK,
    EventKind.POSITION_TRACK,
    EventKind.MOVE_DECORATIONS,
    EventKind.SET_TEXT,
    EventKind.SET_OBJECT,
    EventKind.SET_DEFAULT_TEXT,
    EventKind.CUSTOM_BACKGROUND,
    EventKind.FLASH,
    EventKind.MOVE_CAMERA,
    EventKind.SET_FILTER,
    EventKind.HALL_OF_MIRRORS,
    EventKind.SHAKE_SCREEN,
    EventKind.BLOOM,
    EventKind.SCREEN_TILE,
    EventKind.SCREEN_SCROLL,
    EventKind.SET_FRAME_RATE,
    EventKind.REPEAT_EVENTS,
    EventKind.SET_CONDITIONAL_EVENTS,
    EventKind.EDITOR_COMMENT,
    EventKind.BOOKMARK,
    EventKind.HOLD,
    EventKind.SET_HOLD_SOUND,
    EventKind.HIDE,
    EventKind.SCALE_MARGIN,
    EventKind.SCALE_RADIUS,
}))

# Actions that manipulate decorations; dropped along with the decorations.
DECORATION_EVENTS = EventFilter(FilterMode.EXCLUDE, frozenset({
    EventKind.MOVE_DECORATIONS,
    EventKind.SET_TEXT,
    EventKind.SET_OBJECT,
    EventKind.SET_DEFAULT_TEXT,
}))

PRESETS: dict[str, EventFilter] = {
    "noeffect": NO_EFFECTS,
    "noholds": NO_HOLDS,
    "nomovecamera": NO_MOVE_CAMERA,
    "noeffect_completely": NO_EFFECTS_COMPLETELY,
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def event_type(action: dict) -> str:
    return action.get("eventType", "")


def kind_name(kind: EventKind | str) -> str:
    """Accept either an EventKind or a raw eventType string."""
    return kind.value if isinstance(kind, EventKind) else kind


def filter_actions(actions: list[dict], event_filter: EventFilter) -> list[dict]:
    """Return the actions the filter keeps, preserving order."""
    return [a for a in actions if event_filter.keeps(a)]
