"""Loading and querying the treehouse YAML configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from os import PathLike
from typing import Any

import yaml


class ConfigError(Exception):
    """Raised when configuration cannot be read, parsed or queried."""


@dataclass(frozen=True)
class ServiceConfig:
    """The name and shell command of a service to run."""

    name: str
    cmd: str = ""


@dataclass
class HealthEntry:
    """How to poll a service's health endpoint."""

    url: str = ""
    codes: list[int] = field(default_factory=list)
    interval_seconds: int = 0
    timeout_seconds: int = 0


@dataclass
class Service:
    """A service definition as written in the configuration file."""

    command: str = ""
    modes: dict[str, str] = field(default_factory=dict)
    env: dict[str, str] = field(default_factory=dict)
    health_check: HealthEntry = field(default_factory=HealthEntry)


@dataclass
class Config:
    """The complete configuration: core and optional services plus global env."""

    core_services: dict[str, Service] = field(default_factory=dict)
    optional_services: dict[str, Service] = field(default_factory=dict)
    global_env: dict[str, str] = field(default_factory=dict)

    def _find(self, service_name: str) -> Service | None:
        if service_name in self.core_services:
            return self.core_services[service_name]
        return self.optional_services.get(service_name)

    def get_service_config(self, service_name: str, mode: str = "") -> ServiceConfig:
        """Return the command for ``service_name``, using the ``mode`` override if any."""
        svc = self._find(service_name)
        if svc is None:
            raise ConfigError(f"service {service_name} not found")
        cmd = svc.modes.get(mode, svc.command) if mode else svc.command
        return ServiceConfig(name=service_name, cmd=cmd)

    def get_health_check(self, service_name: str) -> HealthEntry:
        """Return the health-check settings of ``service_name``."""
        svc = self._find(service_name)
        if svc is None:
            raise ConfigError(f"health check for service {service_name} not found")
        return svc.health_check

    def get_env(self, service_name: str, mode: str = "") -> dict[str, str]:
        """Return the global environment merged with the service's own."""
        env = dict(self.global_env)
        svc = self._find(service_name)
        if svc is not None:
            env.update(svc.env)
        return env


def _str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (dict, list)):
        raise TypeError(f"expected a string, got {value!r}")
    return str(value)


def _int(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected an integer, got {value!r}")
    return value


def _str_map(value: Any) -> dict[str, str]:
    return {_str(key): _str(item) for key, item in (value or {}).items()}


def _service(data: Any) -> Service:
    data = data or {}
    health = data.get("health_check") or {}
    return Service(
        command=_str(data.get("command")),
        modes=_str_map(data.get("modes")),
        env=_str_map(data.get("env")),
        health_check=HealthEntry(
            url=_str(health.get("url")),
            codes=[_int(code) for code in health.get("codes") or []],
            interval_seconds=_int(health.get("interval_seconds")),
            timeout_seconds=_int(health.get("timeout_seconds")),
        ),
    )


def parse_config(data: str | bytes) -> Config:
    """Parse YAML configuration text into a :class:`Config`."""
    try:
        root = yaml.safe_load(data) or {}
        return Config(
            core_services={
                _str(k): _service(v) for k, v in (root.get("core_services") or {}).items()
            },
            optional_services={
                _str(k): _service(v) for k, v in (root.get("optional_services") or {}).items()
            },
            global_env=_str_map(root.get("global_env")),
        )
    except (yaml.YAMLError, TypeError, AttributeError, ValueError) as exc:
        raise ConfigError(f"failed to parse config file: {exc}") from exc


def load_config(config_path: str | PathLike[str]) -> Config:
    """Read and parse the configuration file at ``config_path``."""
    try:
        with open(config_path, "rb") as handle:
            data = handle.read()
    except OSError as exc:
        raise ConfigError(f"failed to read config file: {exc}") from exc
    return parse_config(data)