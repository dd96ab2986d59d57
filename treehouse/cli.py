"""Command-line entry point."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from treehouse.app import App, ExitError
from treehouse.tui.run import TuiError


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with global options and the subcommands."""
    parser = argparse.ArgumentParser(prog="treehouse", description="Development control tool")
    parser.add_argument(
        "-c", "--config-dir", default="configs", help="Directory containing config files"
    )
    parser.add_argument("-m", "--mode", default="dev", help="Mode to run (e.g., dev, prod)")
    parser.add_argument("-f", "--focus", default="", help="Service to focus on")
    parser.add_argument("--mute", default="", help="Service to mute")

    commands = parser.add_subparsers(dest="command", metavar="COMMAND")
    commands.add_parser("start", help="Start all services with full TUI")
    spm = commands.add_parser(
        "spm", help="Run a single service without TUI", usage="treehouse spm SERVICE_NAME"
    )
    spm.add_argument("service_names", nargs="*", metavar="SERVICE_NAME")
    commands.add_parser("compose", help="Open TUI menu to select services and modes")
    return parser


def _run_app(app: App) -> None:
    try:
        app.run()
    except (ExitError, TuiError) as exc:
        if str(exc):
            print(exc, file=sys.stderr)
        raise ExitError("", 1) from exc


def run_with_options(args: argparse.Namespace, no_tui: bool) -> None:
    """Run all services with the parsed options; raise :class:`ExitError` on failure."""
    _run_app(
        App(
            config_dir=args.config_dir,
            mode=args.mode,
            focus=args.focus,
            mute=args.mute,
            no_tui=no_tui,
        )
    )


def run_single_service(args: argparse.Namespace, service_name: str) -> None:
    """Run without the dashboard, showing and health-checking only ``service_name``."""
    _run_app(
        App(
            config_dir=args.config_dir,
            mode=args.mode,
            focus=service_name,
            mute="",
            no_tui=True,
            spm_mode=True,
        )
    )


def run_compose_mode(args: argparse.Namespace) -> None:
    """Report that interactive service composition is unavailable and fail."""
    print("Compose mode is not available yet")
    raise ExitError("compose mode is unavailable", 1)


def main(argv: Sequence[str] | None = None) -> int:
    """Parse ``argv``, run the chosen command and return the exit code."""
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return 0 if exc.code in (0, None) else 1

    try:
        if args.command == "start":
            run_with_options(args, False)
        elif args.command == "spm":
            if len(args.service_names) != 1:
                raise ExitError("spm command requires exactly one service name argument", 1)
            run_single_service(args, args.service_names[0])
        elif args.command == "compose":
            run_compose_mode(args)
        else:
            parser.print_help()
    except ExitError as exc:
        if exc.message:
            print(exc.message, file=sys.stderr)
        return exc.exit_code
    return 0


if __name__ == "__main__":
    sys.exit(main())