"""railpath/parser.py — Text repair and level parsing.

Level files are hand-edited and frequently carry small syntax slips:
byte-order marks, trailing commas, a missing comma before the
``decorations`` key. ``repair_text`` fixes the known quirks in one pass and
the result goes through Hjson, which accepts the remaining JSON-superset
forms.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Mapping

import hjson

from railpath.constants import RESERVED_HEADINGS
from railpath.pathcodes import decode_path

logger = logging.getLogger(__name__)


class ParseError(ValueError):
    """Level text or object cannot be turned into a level."""


# ---------------------------------------------------------------------------
# Data class
# ---------------------------------------------------------------------------

@dataclass
class RawLevel:
    """Parsed level before the tile recurrence runs."""

    headings: list[float]
    settings: dict
    actions: list[dict] = field(default_factory=list)
    decorations: list[dict] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Text repair
# ---------------------------------------------------------------------------

_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_MISSING_DECO_COMMA = re.compile(r'([}\]"\w])(\s+)("decorations"\s*:)')


def repair_text(text: str) -> str:
    """Apply the fixed sequence of textual repairs, once each."""
    if text.startswith("\ufeff"):
        text = text[1:]
    text = text.replace("\n\\n", "\\n")
    text = _TRAILING_COMMA.sub(r"\1", text)
    text = _MISSING_DECO_COMMA.sub(r"\1,\2\3", text, count=1)
    text = text.replace(",,", ",")
    return text


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse_level_text(text: str) -> RawLevel:
    """Repair and parse level text.

    Raises:
        ParseError: If the text is unsalvageable or lacks required keys.
    """
    repaired = repair_text(text)
    try:
        obj = hjson.loads(repaired)
    except hjson.HjsonDecodeError as e:
        raise ParseError(f"Unreadable level text: {e}") from e
    if not isinstance(obj, Mapping):
        raise ParseError("Level text does not contain an object")
    return parse_level_object(obj)


def parse_level_object(obj: Mapping[str, Any]) -> RawLevel:
    """Build a RawLevel from an already-parsed mapping.

    ``pathData`` wins over ``angleData`` when both are present.
    """
    if "pathData" in obj:
        try:
            headings: list[float] = decode_path(str(obj["pathData"]))
        except KeyError as e:
            raise ParseError(str(e.args[0])) from e
    elif "angleData" in obj:
        headings = _coerce_headings(obj["angleData"])
    else:
        raise ParseError("Level has neither pathData nor angleData")

    if "settings" not in obj or not isinstance(obj["settings"], Mapping):
        raise ParseError("Level has no settings object")

    _check_headings(headings)

    actions = _coerce_entries(obj.get("actions", []), "actions")
    decorations = _coerce_entries(obj.get("decorations", []), "decorations")
    logger.debug(
        "Parsed level: %d headings, %d actions, %d decorations",
        len(headings), len(actions), len(decorations),
    )
    return RawLevel(
        headings=headings,
        settings=dict(obj["settings"]),
        actions=actions,
        decorations=decorations,
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _coerce_headings(raw: Any) -> list[float]:
    if not isinstance(raw, list):
        raise ParseError("angleData must be a list")
    headings = []
    for i, value in enumerate(raw):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ParseError(f"angleData[{i}] is not a number: {value!r}")
        headings.append(value)
    return headings


def _check_headings(headings: list[float]) -> None:
    for i, h in enumerate(headings):
        if math.isnan(h) or math.isinf(h):
            raise ParseError(f"Heading {i} is not finite")
        if h in RESERVED_HEADINGS:
            raise ParseError(f"Heading {i} uses reserved code {int(h)}")


def _coerce_entries(raw: Any, key: str) -> list[dict]:
    """Copy a flat action/decoration list."""
    if not isinstance(raw, list):
        raise ParseError(f"{key} must be a list")
    entries = []
    for i, entry in enumerate(raw):
        if not isinstance(entry, Mapping):
            raise ParseError(f"{key}[{i}] is not an object")
        entries.append(dict(entry))
    return entries
