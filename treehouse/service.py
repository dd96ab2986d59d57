"""Running a service command and streaming its output."""

from __future__ import annotations

import os
import signal
import subprocess
import threading
from collections.abc import Callable, Iterable
from enum import Enum

from treehouse.config import ServiceConfig
from treehouse.contexts import Context


class Status(str, Enum):
    """Lifecycle states reported for a service."""

    PENDING = "Pending"
    STARTING = "Starting"
    RESTARTING = "Restarting"
    RUNNING = "Running"
    STOPPING = "Stopping"
    ERROR = "Error"
    CRASHED = "Crashed"
    EXITED = "Exited"
    HEALTHY = "Healthy"
    UNHEALTHY = "Unhealthy"

    def __str__(self) -> str:
        return self.value


class ServiceError(Exception):
    """Raised when a service cannot be started or exits unsuccessfully."""


LineCallback = Callable[[str], None]
StatusCallback = Callable[[Status], None]


class ServiceProcess:
    """One service command run through ``sh -c``, with output and status callbacks."""

    def __init__(
        self,
        config: ServiceConfig,
        *,
        focus: str = "",
        mute: str = "",
        on_stdout: LineCallback | None = None,
        on_stderr: LineCallback | None = None,
        on_status: StatusCallback | None = None,
    ) -> None:
        self.config = config
        self.focus = focus
        self.mute = mute
        self.on_stdout = on_stdout
        self.on_stderr = on_stderr
        self.on_status = on_status

    def _send_status(self, status: Status) -> None:
        if self.on_status is not None:
            self.on_status(status)

    def start(self, ctx: Context | None = None) -> None:
        """Run the command to completion, killing its process group if ``ctx`` is cancelled.

        Raises :class:`ServiceError` if the command cannot start or exits non-zero.
        """
        self._send_status(Status.STARTING)
        if ctx is not None and ctx.is_cancelled():
            self._send_status(Status.CRASHED)
            raise ServiceError("failed to start command: context cancelled")
        try:
            proc = subprocess.Popen(
                ["sh", "-c", self.config.cmd],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                start_new_session=True,
            )
        except OSError as exc:
            self._send_status(Status.CRASHED)
            raise ServiceError(f"failed to start command: {exc}") from exc

        self._send_status(Status.RUNNING)
        finished = threading.Event()
        if ctx is not None:
            threading.Thread(target=_kill_on_cancel, args=(ctx, proc, finished), daemon=True).start()

        with proc:
            readers = [
                threading.Thread(target=self.process_stream, args=(proc.stdout, self.on_stdout)),
                threading.Thread(target=self.process_stream, args=(proc.stderr, self.on_stderr)),
            ]
            for reader in readers:
                reader.start()
            for reader in readers:
                reader.join()
            returncode = proc.wait()
            finished.set()

        if returncode != 0:
            self._send_status(Status.CRASHED)
            raise ServiceError(f"command exited with error: exit status {returncode}")
        self._send_status(Status.EXITED)

    def process_stream(self, stream: Iterable[str | bytes], handle_line: LineCallback | None) -> None:
        """Pass each line of ``stream`` to ``handle_line`` unless focus or mute filters it out."""
        name = self.config.name
        for raw in stream:
            line = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
            line = line.removesuffix("\n").removesuffix("\r")
            if handle_line is None or (self.focus and self.focus != name):
                continue
            if self.mute and self.mute == name:
                continue
            handle_line(line)


def _kill_on_cancel(ctx: Context, proc: subprocess.Popen, finished: threading.Event) -> None:
    while not finished.wait(0.05):
        if ctx.is_cancelled():
            try:
                os.killpg(os.getpgid(proc.pid), signal.SIGKILL)
            except OSError:
                proc.kill()
            return