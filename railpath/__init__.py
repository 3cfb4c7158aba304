"""railpath — Rail-path level parsing, tile geometry, and orbit playback."""

from railpath.config import ViewerConfig, load_config
from railpath.events import EventFilter, EventKind, FilterMode
from railpath.level import Level, StructuralError, load_level, load_level_file, save_level
from railpath.mesh import TrackMesh, generate
from railpath.parser import ParseError, repair_text
from railpath.session import EditorSession
from railpath.simulation import CrossingEvent, OrbitSimulator, PlaybackState
from railpath.track import Tile

__all__ = [
    "ViewerConfig",
    "load_config",
    "EventFilter",
    "EventKind",
    "FilterMode",
    "Level",
    "StructuralError",
    "load_level",
    "load_level_file",
    "save_level",
    "TrackMesh",
    "generate",
    "ParseError",
    "repair_text",
    "EditorSession",
    "CrossingEvent",
    "OrbitSimulator",
    "PlaybackState",
    "Tile",
]
