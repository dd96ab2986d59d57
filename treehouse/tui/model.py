"""State, update logic and rendering of the interactive service dashboard."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from treehouse.colors import (
    CRASHED,
    EXITED,
    HEALTHY,
    PENDING,
    RESET,
    RUNNING,
    SELECTED_BACKGROUND,
    SELECTED_FOREGROUND,
    colorize,
)
from treehouse.config import HealthEntry, ServiceConfig
from treehouse.service import Status
from treehouse.tui.keys import KeyMap, default_keys

SIDEBAR_WIDTH = 24
_BORDER_COLOR = "240"
_FOCUSED_BORDER_COLOR = "62"

_ANSI = re.compile(r"(\x1b\[[0-9;]*m)")


@dataclass(frozen=True)
class LogMsg:
    """One line of output from a service."""

    service: str
    line: str


@dataclass(frozen=True)
class StatusMsg:
    """A new status for a service."""

    service: str
    status: str


@dataclass(frozen=True)
class WindowSizeMsg:
    """The terminal was resized."""

    width: int
    height: int


@dataclass(frozen=True)
class KeyMsg:
    """A key press, named like ``"j"``, ``"up"`` or ``"ctrl+c"``."""

    key: str


def _width(text: str) -> int:
    return max(len(_ANSI.sub("", line)) for line in text.split("\n"))


def _cut(line: str, start: int, width: int | None) -> str:
    """Return visible columns ``start`` to ``start + width`` of ``line``, keeping escapes."""
    stop = None if width is None else start + width
    pieces, pos = [], 0
    for part in _ANSI.split(line):
        if _ANSI.fullmatch(part):
            pieces.append(part)
            continue
        for ch in part:
            if pos >= start and (stop is None or pos < stop):
                pieces.append(ch)
            pos += 1
    return "".join(pieces)


def _pad(line: str, width: int) -> str:
    return line + " " * (width - _width(line))


class Viewport:
    """A scrollable window onto a block of text."""

    _VERTICAL = {"up": -1, "k": -1, "down": 1, "j": 1}
    _HORIZONTAL = {"left": -1, "h": -1, "right": 1, "l": 1}

    def __init__(self, width: int = 0, height: int = 0, horizontal_step: int = 0) -> None:
        self.width = width
        self.height = height
        self.horizontal_step = horizontal_step
        self.y_offset = 0
        self.x_offset = 0
        self.lines: list[str] = [""]

    def _max_y_offset(self) -> int:
        return max(0, len(self.lines) - self.height) if self.height > 0 else 0

    def set_content(self, content: str) -> None:
        """Replace the text shown, keeping the scroll position where possible."""
        self.lines = content.replace("\r\n", "\n").split("\n")
        if self.y_offset > len(self.lines) - 1:
            self.goto_bottom()

    def goto_bottom(self) -> None:
        """Scroll so that the last line is visible."""
        self.y_offset = self._max_y_offset()

    def scroll_left(self, n: int) -> None:
        """Scroll ``n`` columns to the left, stopping at the first column."""
        self.x_offset = max(0, self.x_offset - n)

    def scroll_right(self, n: int) -> None:
        """Scroll ``n`` columns to the right, stopping when the longest line ends."""
        limit = max(0, _width("\n".join(self.lines)) - max(self.width, 0))
        self.x_offset = max(0, min(self.x_offset + n, limit))

    def _handle_key(self, key: str) -> None:
        if key in self._VERTICAL:
            step = self.y_offset + self._VERTICAL[key]
            self.y_offset = min(max(0, step), self._max_y_offset())
        elif key in self._HORIZONTAL:
            if self._HORIZONTAL[key] < 0:
                self.scroll_left(self.horizontal_step)
            else:
                self.scroll_right(self.horizontal_step)

    def view(self) -> str:
        """Render the visible part of the content."""
        if self.height > 0:
            visible = self.lines[self.y_offset:self.y_offset + self.height]
            visible += [""] * (self.height - len(visible))
        else:
            visible = self.lines[self.y_offset:]
        if self.width <= 0:
            return "\n".join(_cut(line, self.x_offset, None) for line in visible)
        return "\n".join(_pad(_cut(line, self.x_offset, self.width), self.width) for line in visible)


def _box(text: str, border_color: str, width: int | None = None) -> str:
    inner = _width(text) if width is None else width
    rows = [colorize("┌" + "─" * inner + "┐", border_color)]
    side = colorize("│", border_color)
    rows += [side + _pad(_cut(line, 0, inner), inner) + side for line in text.split("\n")]
    rows.append(colorize("└" + "─" * inner + "┘", border_color))
    return "\n".join(rows)


def _join_horizontal(left: str, right: str) -> str:
    left_lines, right_lines = left.split("\n"), right.split("\n")
    height = max(len(left_lines), len(right_lines))
    left_width = _width(left)
    left_lines += [""] * (height - len(left_lines))
    right_lines += [""] * (height - len(right_lines))
    return "\n".join(_pad(a, left_width) + b for a, b in zip(left_lines, right_lines))


_STATUS_COLORS = {
    Status.RUNNING: RUNNING,
    Status.STARTING: RUNNING,
    Status.HEALTHY: HEALTHY,
    Status.UNHEALTHY: CRASHED,
    Status.RESTARTING: CRASHED,
    Status.STOPPING: CRASHED,
    Status.EXITED: EXITED,
}


def style_status(status: str) -> str:
    """Colour a status name for display in the sidebar."""
    text = str(status)
    return colorize(text, _STATUS_COLORS.get(text, PENDING))


def _rgb(color: str) -> str:
    return ";".join(str(int(color[pos:pos + 2], 16)) for pos in (1, 3, 5))


class Model:
    """Dashboard state: a sidebar of services and the log of the selected one."""

    def __init__(
        self,
        services: Iterable[ServiceConfig],
        health_checks: Mapping[str, HealthEntry] | None = None,
        focus: str = "",
        mute: str = "",
    ) -> None:
        self.keys: KeyMap = default_keys()
        self.services: list[ServiceConfig] = list(services)
        self.health_checks: dict[str, HealthEntry] = dict(health_checks or {})
        self.logs: dict[str, list[str]] = {svc.name: [] for svc in self.services}
        self.statuses: dict[str, str] = {svc.name: Status.PENDING for svc in self.services}
        self.selected = 0
        self.sidebar = Viewport()
        self.content = Viewport(horizontal_step=1)
        self.width = 0
        self.height = 0
        self.view_focus = "sidebar"
        self.svc_focus = focus
        self.svc_mute = mute
        self.sidebar.set_content(self.sidebar_content())

    def _filtered(self, service: str) -> bool:
        if self.svc_focus and service != self.svc_focus:
            return True
        return bool(self.svc_mute) and service == self.svc_mute

    def _move(self, step: int) -> None:
        self.selected = min(max(0, self.selected + step), max(0, len(self.services) - 1))
        if self.services:
            name = self.services[self.selected].name
            self.content.set_content("\n".join(self.logs.get(name, [])))
            self.content.goto_bottom()
            self.sidebar.set_content(self.sidebar_content())

    def update(self, msg: object) -> bool:
        """Apply ``msg`` to the state; return True when the program should quit."""
        if isinstance(msg, LogMsg):
            if not self._filtered(msg.service):
                lines = self.logs.setdefault(msg.service, [])
                lines.append(msg.line)
                if self.services and msg.service == self.services[self.selected].name:
                    self.content.set_content("\n".join(lines))
                    self.content.goto_bottom()
            return False

        if isinstance(msg, StatusMsg):
            if not self._filtered(msg.service):
                self.statuses[msg.service] = msg.status
                self.sidebar.set_content(self.sidebar_content())
            return False

        if isinstance(msg, WindowSizeMsg):
            self.width, self.height = msg.width, msg.height
            self.sidebar.width = SIDEBAR_WIDTH
            self.sidebar.height = self.height - 3
            self.content.width = self.width - _width(self.sidebar.view()) - 4
            self.content.height = self.height - 3
            return False

        if isinstance(msg, KeyMsg):
            key = msg.key
            if self.keys.quit.matches(key):
                return True
            if self.keys.up.matches(key) or self.keys.down.matches(key):
                if self.view_focus == "sidebar":
                    self._move(-1 if self.keys.up.matches(key) else 1)
                    return False
            elif self.keys.left.matches(key):
                self.content.scroll_left(self.content.width)
            elif self.keys.right.matches(key):
                self.content.scroll_right(self.content.width)
            elif self.keys.tab.matches(key):
                self.view_focus = "content" if self.view_focus == "sidebar" else "sidebar"
            focused = self.sidebar if self.view_focus == "sidebar" else self.content
            focused._handle_key(key)
        return False

    def view(self) -> str:
        """Render the whole screen: sidebar, log pane and help line."""
        on_sidebar = self.view_focus == "sidebar"
        side = _box(
            self.sidebar.view(), _FOCUSED_BORDER_COLOR if on_sidebar else _BORDER_COLOR, SIDEBAR_WIDTH
        )
        content = _box(self.content.view(), _BORDER_COLOR if on_sidebar else _FOCUSED_BORDER_COLOR)
        return _join_horizontal(side, content) + "\n" + self.keys.help_view()

    def sidebar_content(self) -> str:
        """Render the list of services with their statuses."""
        selected_style = (
            f"\x1b[1;48;2;{_rgb(SELECTED_BACKGROUND)};38;2;{_rgb(SELECTED_FOREGROUND)}m"
        )
        rows = []
        for index, svc in enumerate(self.services):
            status = style_status(self.statuses.get(svc.name, Status.PENDING))
            if index == self.selected:
                rows.append(f"{selected_style}> {svc.name} [{status}]{RESET}\n")
            else:
                rows.append(f"  {svc.name} [{status}]\n")
        return "".join(rows)