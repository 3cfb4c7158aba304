"""Shared fixtures: level texts and small tile paths."""

from __future__ import annotations

import pytest

from railpath.config import ViewerConfig
from railpath.level import Level, load_level


def make_level(
    headings: list[float],
    actions: list[dict] | None = None,
    decorations: list[dict] | None = None,
    bpm: float | None = 120,
) -> Level:
    """Build a Level straight from an angleData list."""
    settings = {} if bpm is None else {"bpm": bpm}
    return load_level({
        "angleData": headings,
        "settings": settings,
        "actions": actions or [],
        "decorations": decorations or [],
    })


QUIRKY_LEVEL = (
    "\ufeff{\n"
    '  "angleData": [0, 90, 0, 999, 180, 180,],\n'
    '  "settings": {\n'
    '    "version": 13,\n'
    '    "bpm": 150,\n'
    '    "artist": "Kézy",\n'
    "  },\n"
    '  "actions": [\n'
    '    {"floor": 2, "eventType": "Twirl"},\n'
    '    {"floor": 3, "eventType": "SetSpeed", "speedType": "Multiplier", "bpmMultiplier": 2},\n'
    '    {"floor": 4, "eventType": "Flash", "duration": 1},\n'
    "  ]\n"
    '  "decorations": [\n'
    '    {"floor": 1, "eventType": "AddDecoration", "tag": "lamp"},\n'
    "  ]\n"
    "}\n"
)


@pytest.fixture
def quirky_text() -> str:
    return QUIRKY_LEVEL


@pytest.fixture
def straight_level() -> Level:
    return make_level([0, 0, 0, 0, 0, 0, 0, 0])


@pytest.fixture
def near_config() -> ViewerConfig:
    """Orbit radius matching the unit tile spacing so crossings happen."""
    return ViewerConfig(orbit_radius=1.0)


@pytest.fixture
def build_level():
    return make_level
