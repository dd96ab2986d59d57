# treehouse

A development control tool for POSIX systems. It reads one YAML file
that describes your local services. It starts each one as a shell
command and shows their output, either in a full-screen dashboard or as
prefixed, coloured lines. It also polls their health-check URLs until
they answer with an expected status code.

## Installation

```
pip install .
```

This installs the `treehouse` command. The only runtime dependency is
PyYAML.

## Configuration

treehouse reads `treehouse.yaml` from the config directory, which is
`configs` by default:

```yaml
core_services:
  web:
    command: "run-web"
    modes:
      prod: "run-web --prod"
    env:
      PORT: "3000"
    health_check:
      url: "http://localhost:3000"
      codes: [200]
      interval_seconds: 2
      timeout_seconds: 30

optional_services:
  cache:
    command: "run-cache"

global_env:
  ENVIRONMENT: "dev"
```

- `command` is run with `sh -c` in its own process group.
- `modes` maps a mode name to a replacement command. The active mode is
  chosen with `--mode`. A service that has no entry for that mode runs
  its plain `command`.
- `global_env` and each started service's `env` are written into the
  process environment before the services start. The services inherit
  that environment.
- `health_check` is polled every `interval_seconds` (default 2) until one
  of `codes` comes back or `timeout_seconds` (default 30) runs out. A
  service without a `url` is not polled.

Only `core_services` are started. `optional_services` can be read and
queried through the library API, but no command starts them.

## Usage

Global options come before the sub-command:

```
treehouse [--config-dir DIR] [--mode MODE] [--focus SERVICE] [--mute SERVICE] COMMAND
```

| Option | Short | Default | Meaning |
| --- | --- | --- | --- |
| `--config-dir` | `-c` | `configs` | Directory containing `treehouse.yaml` |
| `--mode` | `-m` | `dev` | Mode to run (e.g. `dev`, `prod`) |
| `--focus` | `-f` | | Show output and status of this service only |
| `--mute` | | | Hide output and status of this service |

### `treehouse start`

Starts every core service and shows them in a full-screen dashboard. The
sidebar lists each service with its status: Pending, Starting, Running,
Exited, Crashed, Error, Healthy or Unhealthy. The right-hand pane shows
the log of the selected service.

| Key | Action |
| --- | --- |
| `↑` / `k` | select the previous service |
| `↓` / `j` | select the next service |
| `←` / `h` | scroll the log left |
| `→` / `l` | scroll the log right |
| `tab` | switch focus between the sidebar and the log pane |
| `q`, `esc`, `ctrl+c` | quit and stop all services |

`start` needs an interactive terminal. Run from anything else, it fails
with `error starting TUI: not a terminal`.

### `treehouse spm SERVICE_NAME`

Runs without the dashboard. All core services are started, but only the
output of `SERVICE_NAME` is printed, each line prefixed with
`[SERVICE_NAME]`. Only that service's health check runs, and it reports
`success (CODE)`, `failure (timeout)` or `aborted`. Press Ctrl+C to kill
the services' process groups and stop.

`spm` needs exactly one service name. Otherwise it exits with status 1.

### `treehouse compose`

Prints a notice that compose mode is not available yet and exits with
status 1.

### Errors

Errors such as a missing or unparsable `treehouse.yaml` are printed to
standard error, and the command exits with status 1.

## Library use

The building blocks can be imported directly:

- `treehouse.config`:
  - `load_config(path)` and `parse_config(text)` return a `Config` and
    raise `ConfigError` on failure.
  - `Config.get_service_config(name, mode)` resolves a service's command
    for a mode.
  - `Config.get_health_check(name)` returns a service's health-check
    settings.
  - `Config.get_env(name, mode)` merges the global environment with the
    service's own.
- `treehouse.service.ServiceProcess(config, focus=..., mute=..., on_stdout=..., on_stderr=..., on_status=...)`
  runs one command. `start(ctx)` reports `Status` values through
  `on_status` and raises `ServiceError` when the command cannot start or
  exits non-zero.
- `treehouse.health.check_status(client, url, codes)` returns
  `(matched, status_code)`. `UrllibClient` is the default HTTP client.
- `treehouse.runner.Runner(Options(...)).run(ctx)` is the plain,
  non-dashboard runner behind `spm`.
- `treehouse.contexts.Context` is the cancellation flag shared by these
  pieces. `with_signal_cancel()` returns one that is cancelled on SIGINT.

## What it does not do

- Crashed services are not restarted.
- `compose` has no service or mode picker yet.
- No command starts `optional_services`.
- The dashboard always shows the short, one-line key help. `?` is listed
  there but does not open a longer view.

## Running the tests

```
pip install ".[test]"
pytest
```