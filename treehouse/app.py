"""Choosing between the dashboard and plain service output."""

from __future__ import annotations

import sys
from dataclasses import dataclass

from treehouse.config import ConfigError
from treehouse.contexts import with_signal_cancel
from treehouse.runner import Options, Runner
from treehouse.tui.run import run as run_tui


class ExitError(Exception):
    """A failure that should end the program with ``exit_code``."""

    def __init__(self, message: str = "", exit_code: int = 1) -> None:
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code


@dataclass
class App:
    """What to run and how: services, mode, filters and whether to show the dashboard."""

    config_dir: str = ""
    mode: str = ""
    focus: str = ""
    mute: str = ""
    no_tui: bool = False
    spm_mode: bool = False

    def run(self) -> None:
        """Run the dashboard, or the plain runner when ``no_tui`` is set.

        Raises :class:`ExitError` when the plain runner fails and
        :class:`~treehouse.tui.run.TuiError` when the dashboard does.
        """
        if self.no_tui:
            self._run_services()
            return
        run_tui(self.config_dir, self.mode, self.focus, self.mute)

    def _run_services(self) -> None:
        runner = Runner(
            Options(
                config_dir=self.config_dir,
                mode=self.mode,
                focus=self.focus,
                mute=self.mute,
                spm_mode=self.spm_mode,
            )
        )
        ctx = with_signal_cancel()
        try:
            runner.run(ctx)
        except ConfigError as exc:
            print(exc, file=sys.stderr)
            raise ExitError("", 1) from exc
        finally:
            ctx.cancel()