"""railpath/pathcodes.py — Path-code characters to headings.

Each character of a ``pathData`` string encodes one tile heading in
15° steps. ``!`` marks a midspin; the digits 5–8 are reserved codes with
no geometry of their own.
"""

from __future__ import annotations

from railpath.constants import MIDSPIN

PATH_CODE_TABLE: dict[str, int] = {
    "R": 0, "p": 15, "J": 30, "E": 45, "T": 60, "o": 75,
    "U": 90, "q": 105, "G": 120, "Q": 135, "H": 150, "W": 165,
    "L": 180, "x": 195, "N": 210, "Z": 225, "F": 240, "V": 255,
    "D": 270, "Y": 285, "B": 300, "C": 315, "M": 330, "A": 345,
    "5": 555, "6": 666, "7": 777, "8": 888,
    "!": MIDSPIN,
}

HEADING_TO_CODE: dict[int, str] = {v: k for k, v in PATH_CODE_TABLE.items()}


def decode_path(path_data: str) -> list[int]:
    """Convert a path-code string to a heading list.

    Raises:
        KeyError: If a character is not in the table.
    """
    headings = []
    for ch in path_data:
        if ch not in PATH_CODE_TABLE:
            raise KeyError(f"Unknown path code {ch!r}")
        headings.append(PATH_CODE_TABLE[ch])
    return headings


def encode_path(headings: list[float]) -> str | None:
    """Inverse of decode_path, or None if any heading has no code."""
    chars = []
    for h in headings:
        if h != int(h) or int(h) not in HEADING_TO_CODE:
            return None
        chars.append(HEADING_TO_CODE[int(h)])
    return "".join(chars)

