"""railpath/formatting.py — Level-file pretty printer.

Reproduces the layout level editors expect: top-level keys one per line,
primitive arrays on one line, object arrays one element per line with
each element flattened.
"""

from __future__ import annotations

import json
from typing import Any


def _is_container(value: Any) -> bool:
    return isinstance(value, (dict, list, tuple))


def _scalar(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def format_single_line(value: Any) -> str:
    """Render any value on one line."""
    if isinstance(value, dict):
        entries = ", ".join(
            f"{_scalar(str(k))}: {format_single_line(v)}" for k, v in value.items()
        )
        return "{" + entries + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(format_single_line(v) for v in value) + "]"
    return _scalar(value)


def format_value(value: Any, indent: int = 0) -> str:
    """Render a value nested ``indent`` spaces deep."""
    if isinstance(value, (list, tuple)):
        if not any(_is_container(v) for v in value):
            return "[" + ",".join(_scalar(v) for v in value) + "]"
        spaces = " " * indent
        items = ",\n".join(f"{spaces}  {format_single_line(v)}" for v in value)
        return "[\n" + items + "\n" + spaces + "]"
    if isinstance(value, dict):
        spaces = " " * indent
        items = ",\n".join(
            f"{spaces}  {_scalar(str(k))}: {format_value(v, indent + 2)}"
            for k, v in value.items()
        )
        return "{\n" + items + "\n" + spaces + "}"
    return _scalar(value)


def format_level(obj: dict) -> str:
    """Render a level mapping as file text."""
    items = ",\n".join(
        f"  {_scalar(str(k))}: {format_value(v, 2)}" for k, v in obj.items()
    )
    return "{\n" + items + "\n}"
