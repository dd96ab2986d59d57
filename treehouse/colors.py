"""Colour palette and terminal colouring helpers."""

from __future__ import annotations

from collections.abc import Sequence

SERVICE_COLORS: tuple[str, ...] = (
    "#dc322f",
    "#859900",
    "#b58900",
    "#268bd2",
    "#d33682",
    "#2aa198",
)

HEADER = "#61AFEF"
SELECTED_BACKGROUND = "#3E4451"
SELECTED_FOREGROUND = "#FFFFFF"
PENDING = "#A0A1A7"
RUNNING = "#98C379"
CRASHED = "#E06C75"
EXITED = "#61AFEF"
HEALTHY = "#98C379"
UNHEALTHY = "#E06C75"

RESET = "\x1b[0m"


def colorize(text: str, color: str) -> str:
    """Draw ``text`` in ``color``: a ``#rrggbb`` value or an ANSI 256-colour index."""
    if color.startswith("#") and len(color) == 7:
        rgb = ";".join(str(int(color[pos:pos + 2], 16)) for pos in (1, 3, 5))
        return f"\x1b[38;2;{rgb}m{text}{RESET}"
    if color.isdigit() and int(color) <= 255:
        return f"\x1b[38;5;{int(color)}m{text}{RESET}"
    raise ValueError(f"invalid color: {color!r}")


def service_color(index: int, palette: Sequence[str] | None = None) -> str:
    """Pick the colour for the service at ``index``, cycling through the palette."""
    colors = palette or SERVICE_COLORS
    return colors[index % len(colors)]