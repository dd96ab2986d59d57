"""Key bindings of the interactive interface and their help text."""

from __future__ import annotations

from dataclasses import dataclass

HELP_SEPARATOR = " • "


@dataclass(frozen=True)
class KeyBinding:
    """A set of key names bound to one action, with its help label."""

    keys: tuple[str, ...]
    help_key: str
    help_desc: str

    def matches(self, key: str) -> bool:
        """Return True if ``key`` triggers this binding."""
        return key in self.keys


@dataclass(frozen=True)
class KeyMap:
    """All bindings the interface reacts to."""

    up: KeyBinding
    down: KeyBinding
    left: KeyBinding
    right: KeyBinding
    tab: KeyBinding
    help: KeyBinding
    quit: KeyBinding

    def short_help(self) -> list[KeyBinding]:
        """Bindings shown in the one-line help."""
        return [self.up, self.down, self.left, self.right, self.tab, self.help, self.quit]

    def full_help(self) -> list[list[KeyBinding]]:
        """Bindings shown in the expanded help, in columns."""
        return [
            [self.up, self.down, self.left, self.right],
            [self.tab, self.help, self.quit],
        ]

    def help_view(self) -> str:
        """Render the one-line help text."""
        return HELP_SEPARATOR.join(
            f"{binding.help_key} {binding.help_desc}" for binding in self.short_help()
        )


def default_keys() -> KeyMap:
    """Return the standard key map."""
    return KeyMap(
        up=KeyBinding(("up", "k"), "↑/k", "move up"),
        down=KeyBinding(("down", "j"), "↓/j", "move down"),
        left=KeyBinding(("left", "h"), "←/h", "scroll left"),
        right=KeyBinding(("right", "l"), "→/l", "scroll right"),
        tab=KeyBinding(("tab",), "tab", "switch view"),
        help=KeyBinding(("?",), "?", "toggle help"),
        quit=KeyBinding(("q", "esc", "ctrl+c"), "q", "quit"),
    )