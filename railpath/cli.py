"""railpath/cli — Command-line entry point.

Usage::

    railpath info level.adofai
    railpath export level.adofai -o fixed.adofai --preset noeffect
    railpath simulate level.adofai --duration 10000 --dt 16
    railpath mesh level.adofai 12
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from railpath.config import load_config
from railpath.events import PRESETS, EventKind
from railpath.level import StructuralError, save_level
from railpath.logging_config import setup_logging
from railpath.parser import ParseError
from railpath.pathcodes import encode_path
from railpath.session import EditorSession
from railpath.simulation import PlaybackState

_COUNTED_KINDS = (
    EventKind.TWIRL,
    EventKind.PAUSE,
    EventKind.SET_SPEED,
    EventKind.POSITION_TRACK,
)


def _cmd_info(session: EditorSession, args: argparse.Namespace) -> int:
    level = session.level
    midspins = sum(1 for t in level.tiles if t.is_midspin)
    print(f"tiles:     {len(level)}")
    print(f"midspins:  {midspins}")
    print(f"bpm:       {level.bpm if level.bpm is not None else 'unset'}")
    for kind in _COUNTED_KINDS:
        print(f"{kind.value + ':':<14s} {level.action_count(kind)}")
    code = encode_path(level.headings)
    if code is not None and args.path_code:
        print(f"pathData:  {code}")
    if level.tiles:
        x, y = level.tiles[-1].position
        print(f"end:       ({x:.3f}, {y:.3f})")
    return 0


def _cmd_export(session: EditorSession, args: argparse.Namespace) -> int:
    if args.preset:
        dropped = session.clear_events(PRESETS[args.preset])
        print(f"dropped {dropped} actions")
    if args.no_decorations:
        session.clear_decorations()
    if args.output:
        save_level(session.level, args.output)
        print(f"wrote {args.output}")
    else:
        print(session.level.export_text())
    return 0


def _cmd_simulate(session: EditorSession, args: argparse.Namespace) -> int:
    if not session.set_playback(PlaybackState.PLAYING):
        print("level needs at least two tiles to play", file=sys.stderr)
        return 1
    elapsed = 0.0
    while elapsed < args.duration:
        for event in session.step(args.dt):
            flags = [
                name for name, on in (
                    ("pause", event.paused),
                    ("speed", event.speed_changed),
                    ("twirl", event.twirled),
                ) if on
            ]
            suffix = f"  [{', '.join(flags)}]" if flags else ""
            print(f"{elapsed + args.dt:>9.1f}ms  tile {event.tile_index:>5d}  marker {event.marker_id}{suffix}")
        elapsed += args.dt
    state = session.simulator.state
    print(f"\n{state.crossings} crossings, reached tile {state.center_tile_index}, bpm {state.bpm:.1f}")
    session.set_playback(PlaybackState.HOLDING)
    return 0


def _cmd_mesh(session: EditorSession, args: argparse.Namespace) -> int:
    tile = session.tile_at(args.index)
    mesh = session.mesh_of(args.index)
    kind = "midspin" if args.index + 1 < len(session.level) and session.tile_at(args.index + 1).is_midspin else "rail"
    print(f"tile {tile.index} at ({tile.position[0]:.3f}, {tile.position[1]:.3f}) [{kind}]")
    print(f"vertices:  {mesh.vertex_count}")
    print(f"triangles: {mesh.triangle_count}")
    return 0


_COMMANDS = {
    "info": _cmd_info,
    "export": _cmd_export,
    "simulate": _cmd_simulate,
    "mesh": _cmd_mesh,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inspect and replay rail-path levels")
    parser.add_argument("--config", help="Viewer config YAML")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    info = sub.add_parser("info", help="Summarize a level")
    info.add_argument("level")
    info.add_argument("--path-code", action="store_true", help="Print pathData form")

    export = sub.add_parser("export", help="Repair and re-export a level")
    export.add_argument("level")
    export.add_argument("--output", "-o", help="Output file (default: stdout)")
    export.add_argument("--preset", choices=sorted(PRESETS), help="Drop actions by preset")
    export.add_argument("--no-decorations", action="store_true")

    simulate = sub.add_parser("simulate", help="Run orbit playback headlessly")
    simulate.add_argument("level")
    simulate.add_argument("--duration", type=float, default=5000.0, help="Milliseconds")
    simulate.add_argument("--dt", type=float, default=1000.0 / 60, help="Tick length, ms")

    mesh = sub.add_parser("mesh", help="Report mesh buffer sizes for a tile")
    mesh.add_argument("level")
    mesh.add_argument("index", type=int)
    return parser


def main(argv: list[str] | None = None) -> None:
    """Run a railpath command."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    try:
        config = load_config(args.config)
        session = EditorSession.open(Path(args.level), config)
        code = _COMMANDS[args.command](session, args)
    except (ParseError, StructuralError, ValueError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
