"""
Color Normalizer.

Maps any color representation a caller may hand us (canonical name, legacy
swatch hex, nothing at all, garbage) onto the fixed note palette.
"""

from enum import Enum
from typing import Any


class NoteColor(str, Enum):
    """The six colors a stored note may carry."""

    DEFAULT = "default"
    YELLOW = "yellow"
    GREEN = "green"
    BLUE = "blue"
    PINK = "pink"
    PURPLE = "purple"

    def __str__(self) -> str:
        return self.value


# Swatch background for each palette entry; also the legacy hex inputs.
COLOR_HEX: dict[NoteColor, str] = {
    NoteColor.DEFAULT: "#ffffff",
    NoteColor.YELLOW: "#fefce8",
    NoteColor.GREEN: "#f0fdf4",
    NoteColor.BLUE: "#eff6ff",
    NoteColor.PINK: "#fdf2f8",
    NoteColor.PURPLE: "#faf5ff",
}

HEX_TO_COLOR: dict[str, NoteColor] = {hex_value: color for color, hex_value in COLOR_HEX.items()}

NOTE_COLORS: tuple[NoteColor, ...] = tuple(NoteColor)
NOTE_COLOR_NAMES: frozenset[str] = frozenset(color.value for color in NoteColor)


def normalize_color(value: Any) -> NoteColor:
    """
    Normalize a color value to one of the six palette names.

    Canonical names pass through unchanged and must match exactly. Known
    swatch hex codes map to their palette name, compared case-insensitively.
    Anything else (missing, unknown hex, non-string, a name in other case)
    becomes ``NoteColor.DEFAULT``.

    The function is total and idempotent:
    ``normalize_color(normalize_color(x)) == normalize_color(x)``.

    Args:
        value: Color in any accepted representation

    Returns:
        Palette color
    """
    if isinstance(value, NoteColor):
        return value
    if not isinstance(value, str):
        return NoteColor.DEFAULT

    if value in NOTE_COLOR_NAMES:
        return NoteColor(value)
    return HEX_TO_COLOR.get(value.lower(), NoteColor.DEFAULT)


def color_hex(color: Any) -> str:
    """Return the swatch hex code for a color in any accepted representation."""
    return COLOR_HEX[normalize_color(color)]
