"""Running every core service with prefixed, coloured output and health checks."""

from __future__ import annotations

import os
import sys
import threading
import time
from collections.abc import Sequence
from dataclasses import dataclass, replace
from typing import TextIO

from treehouse.colors import SERVICE_COLORS, colorize, service_color
from treehouse.config import ConfigError, HealthEntry, ServiceConfig, load_config
from treehouse.contexts import Context
from treehouse.health import (
    DEFAULT_HEALTH_INTERVAL,
    DEFAULT_HEALTH_TIMEOUT,
    HTTPClient,
    UrllibClient,
    check_status,
)
from treehouse.service import ServiceError, ServiceProcess

CONFIG_FILE_NAME = "treehouse.yaml"


@dataclass
class Options:
    """Settings for a :class:`Runner`; unset values fall back to defaults."""

    config_dir: str = ""
    mode: str = ""
    focus: str = ""
    mute: str = ""
    colors: Sequence[str] = ()
    default_health_interval: int = 0
    default_health_timeout: int = 0
    http_client: HTTPClient | None = None
    spm_mode: bool = False
    output: TextIO | None = None


class Runner:
    """Starts the configured core services and polls their health endpoints."""

    def __init__(self, options: Options | None = None) -> None:
        opts = options if options is not None else Options()
        self.options = replace(
            opts,
            colors=tuple(opts.colors) or SERVICE_COLORS,
            default_health_interval=(
                opts.default_health_interval
                if opts.default_health_interval > 0
                else DEFAULT_HEALTH_INTERVAL
            ),
            default_health_timeout=(
                opts.default_health_timeout
                if opts.default_health_timeout > 0
                else DEFAULT_HEALTH_TIMEOUT
            ),
            http_client=opts.http_client if opts.http_client is not None else UrllibClient(),
        )
        self._lock = threading.Lock()

    def run(self, ctx: Context | None = None) -> None:
        """Set up the environment, run all services and health checks, and wait for them.

        Raises :class:`ConfigError` when the configuration cannot be loaded.
        """
        ctx = ctx if ctx is not None else Context()
        path = os.path.join(self.options.config_dir, CONFIG_FILE_NAME)
        try:
            cfg = load_config(path)
        except ConfigError as exc:
            raise ConfigError(f"loading config: {exc}") from exc

        os.environ.update(cfg.global_env)

        services: list[ServiceConfig] = []
        for name, svc in cfg.core_services.items():
            services.append(cfg.get_service_config(name, self.options.mode))
            os.environ.update(svc.env)

        colors = self.options.colors
        service_threads = [
            threading.Thread(
                target=self._start_service,
                args=(ctx, svc, service_color(index, colors)),
                name=f"service-{svc.name}",
                daemon=True,
            )
            for index, svc in enumerate(services)
        ]
        for thread in service_threads:
            thread.start()

        health_threads = []
        for index, svc in enumerate(services):
            if self.options.spm_mode and svc.name != self.options.focus:
                continue
            entry = cfg.get_health_check(svc.name)
            # A service without a health-check URL has nothing to poll.
            if not entry.url:
                continue
            thread = threading.Thread(
                target=self._start_health,
                args=(ctx, svc.name, entry, service_color(index, colors)),
                name=f"health-{svc.name}",
                daemon=True,
            )
            health_threads.append(thread)
            thread.start()

        for thread in health_threads:
            thread.join()
        for thread in service_threads:
            thread.join()

    def _emit(self, text: str) -> None:
        with self._lock:
            print(text, file=self.options.output or sys.stdout, flush=True)

    def _start_service(self, ctx: Context, svc: ServiceConfig, color: str) -> None:
        prefix = colorize(f"[{svc.name}]", color)

        def handle_line(line: str) -> None:
            self._emit(f"{prefix} {line}")

        process = ServiceProcess(
            svc,
            focus=self.options.focus,
            mute=self.options.mute,
            on_stdout=handle_line,
            on_stderr=handle_line,
        )
        try:
            process.start(ctx)
        except ServiceError as exc:
            with self._lock:
                print(f"Error for {svc.name}: {exc}", file=sys.stderr, flush=True)

    def _start_health(self, ctx: Context, name: str, entry: HealthEntry, color: str) -> None:
        interval = (
            entry.interval_seconds
            if entry.interval_seconds > 0
            else self.options.default_health_interval
        )
        timeout = (
            entry.timeout_seconds
            if entry.timeout_seconds > 0
            else self.options.default_health_timeout
        )
        label = colorize(f"[health][{name}]", color)
        started = time.monotonic()
        while True:
            if ctx.is_cancelled():
                self._emit(f"{label} aborted")
                return
            try:
                ok, code = check_status(self.options.http_client, entry.url, entry.codes)
            except Exception:  # any client failure counts as an unsuccessful attempt
                ok, code = False, 0
            if ok:
                self._emit(f"{label} success ({code})")
                return
            if time.monotonic() - started > timeout:
                self._emit(f"{label} failure (timeout)")
                return
            ctx.wait(interval)