"""Running the interactive dashboard alongside the service processes."""

from __future__ import annotations

import os
import queue
import select
import sys
import termios
import threading
import tty
from typing import TextIO

from treehouse.config import ConfigError, HealthEntry, ServiceConfig, load_config
from treehouse.contexts import Context
from treehouse.health import (
    DEFAULT_HEALTH_INTERVAL,
    DEFAULT_HEALTH_TIMEOUT,
    HTTPClient,
    UrllibClient,
    check_status,
)
from treehouse.runner import CONFIG_FILE_NAME
from treehouse.service import ServiceError, ServiceProcess, Status
from treehouse.tui.model import KeyMsg, LogMsg, Model, StatusMsg, WindowSizeMsg

_TICK = 0.1
_ENTER_SCREEN = "\x1b[?1049h\x1b[?25l"
_LEAVE_SCREEN = "\x1b[?25h\x1b[?1049l"
_CLEAR = "\x1b[H\x1b[2J"

_KEY_SEQUENCES = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1b[5~": "pgup",
    "\x1b[6~": "pgdown",
}

_CONTROL_KEYS = {
    "\t": "tab",
    "\r": "enter",
    "\n": "enter",
    "\x1b": "esc",
    "\x03": "ctrl+c",
    "\x04": "ctrl+d",
    "\x15": "ctrl+u",
    " ": "space",
    "\x7f": "backspace",
}


class TuiError(Exception):
    """Raised when the dashboard cannot load its configuration or drive the terminal."""


def _decode_keys(data: str) -> list[str]:
    """Split raw terminal input into key names; unknown escape sequences are dropped."""
    keys: list[str] = []
    pos = 0
    while pos < len(data):
        for sequence, name in _KEY_SEQUENCES.items():
            if data.startswith(sequence, pos):
                keys.append(name)
                pos += len(sequence)
                break
        else:
            ch = data[pos]
            if ch == "\x1b" and pos + 1 < len(data) and data[pos + 1] in "[O":
                end = pos + 2
                if data[pos + 1] == "[":
                    while end < len(data) and not ("@" <= data[end] <= "~"):
                        end += 1
                pos = end + 1
                continue
            keys.append(_CONTROL_KEYS.get(ch, ch))
            pos += 1
    return keys


def _terminal_fd(stream: TextIO) -> int:
    try:
        fd = stream.fileno()
    except (AttributeError, OSError, ValueError):
        raise TuiError("error starting TUI: not a terminal") from None
    if not os.isatty(fd):
        raise TuiError("error starting TUI: not a terminal")
    return fd


class _Program:
    """Feeds messages and key presses to a model and redraws the screen."""

    def __init__(self, model: Model, stdin: TextIO, stdout: TextIO) -> None:
        self.model = model
        self._in_fd = _terminal_fd(stdin)
        self._out_fd = _terminal_fd(stdout)
        self._queue: queue.Queue[object] = queue.Queue()
        self._stop = threading.Event()

    def send(self, msg: object) -> None:
        self._queue.put(msg)

    def _write(self, text: str) -> None:
        os.write(self._out_fd, text.encode("utf-8"))

    def run(self) -> None:
        try:
            saved = termios.tcgetattr(self._in_fd)
        except termios.error as exc:
            raise TuiError(f"error starting TUI: {exc}") from exc
        reader = threading.Thread(target=self._read_keys, name="tui-input", daemon=True)
        try:
            self._write(_ENTER_SCREEN)
            tty.setraw(self._in_fd)
            reader.start()
            self._loop()
        except (OSError, termios.error) as exc:
            raise TuiError(f"error starting TUI: {exc}") from exc
        finally:
            self._stop.set()
            termios.tcsetattr(self._in_fd, termios.TCSADRAIN, saved)
            self._write(_LEAVE_SCREEN)
            if reader.is_alive():
                reader.join(timeout=1)

    def _loop(self) -> None:
        size = None
        dirty = True
        while True:
            current = os.get_terminal_size(self._out_fd)
            if current != size:
                size = current
                self.send(WindowSizeMsg(current.columns, current.lines))
            messages = []
            try:
                messages.append(self._queue.get(timeout=_TICK))
                while True:
                    messages.append(self._queue.get_nowait())
            except queue.Empty:
                pass
            for msg in messages:
                if self.model.update(msg):
                    return
                dirty = True
            if dirty:
                self._write(_CLEAR + self.model.view().replace("\n", "\r\n"))
                dirty = False

    def _read_keys(self) -> None:
        while not self._stop.is_set():
            ready, _, _ = select.select([self._in_fd], [], [], _TICK)
            if not ready:
                continue
            data = os.read(self._in_fd, 1024)
            if not data:
                return
            for key in _decode_keys(data.decode("utf-8", errors="replace")):
                self.send(KeyMsg(key))


def _run_service(ctx: Context, program: _Program, svc: ServiceConfig) -> None:
    def on_line(line: str) -> None:
        program.send(LogMsg(svc.name, line))

    def on_status(status: Status) -> None:
        program.send(StatusMsg(svc.name, str(status)))

    process = ServiceProcess(svc, on_stdout=on_line, on_stderr=on_line, on_status=on_status)
    try:
        process.start(ctx)
    except ServiceError:
        program.send(StatusMsg(svc.name, str(Status.ERROR)))


def _watch_health(
    ctx: Context, program: _Program, name: str, entry: HealthEntry, client: HTTPClient
) -> None:
    interval = entry.interval_seconds if entry.interval_seconds > 0 else DEFAULT_HEALTH_INTERVAL
    timeout = entry.timeout_seconds if entry.timeout_seconds > 0 else DEFAULT_HEALTH_TIMEOUT
    elapsed = 0.0
    started = threading.Event()
    started.set()
    import time

    begin = time.monotonic()
    while not ctx.is_cancelled():
        try:
            ok, _ = check_status(client, entry.url, entry.codes)
        except Exception:  # any client failure counts as an unsuccessful attempt
            ok = False
        if ok:
            program.send(StatusMsg(name, str(Status.HEALTHY)))
            return
        elapsed = time.monotonic() - begin
        if elapsed > timeout:
            program.send(StatusMsg(name, str(Status.UNHEALTHY)))
            return
        ctx.wait(interval)


def run(config_dir: str, mode: str = "", focus: str = "", mute: str = "") -> None:
    """Load the configuration, start every core service and show the dashboard.

    Blocks until the user quits, then stops all services. Raises
    :class:`TuiError` when the configuration cannot be loaded or the terminal
    cannot be driven.
    """
    try:
        cfg = load_config(os.path.join(config_dir, CONFIG_FILE_NAME))
    except ConfigError as exc:
        raise TuiError(f"error loading config: {exc}") from exc

    os.environ.update(cfg.global_env)

    services: list[ServiceConfig] = []
    health_checks: dict[str, HealthEntry] = {}
    for name, svc in cfg.core_services.items():
        try:
            services.append(cfg.get_service_config(name, mode))
        except ConfigError as exc:
            raise TuiError(f"getting service config: {exc}") from exc
        os.environ.update(svc.env)
        health_checks[name] = cfg.get_health_check(name)

    model = Model(services, health_checks, focus, mute)
    program = _Program(model, sys.stdin, sys.stdout)

    ctx = Context()
    service_threads = [
        threading.Thread(
            target=_run_service, args=(ctx, program, svc), name=f"service-{svc.name}", daemon=True
        )
        for svc in services
    ]
    for thread in service_threads:
        thread.start()

    client = UrllibClient()
    for name, entry in health_checks.items():
        # A service without a health-check URL has nothing to poll.
        if not entry.url:
            continue
        threading.Thread(
            target=_watch_health,
            args=(ctx, program, name, entry, client),
            name=f"health-{name}",
            daemon=True,
        ).start()

    try:
        program.run()
    finally:
        ctx.cancel()
        for thread in service_threads:
            thread.join()