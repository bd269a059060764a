from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Any, Sequence

from provlock.cli import ux
from provlock.config.loader import load_declaration
from provlock.config.settings import Settings
from provlock.core.errors import ExitCode, main_with_error_handling
from provlock.logging import bind_context, configure_logging
from provlock.providers.lock import LockEntry, load_lock
from provlock.providers.reconciler import LockReconciler


def _format_entry(entry: LockEntry) -> str:
    alias_display = entry.alias or "-"
    return f"{entry.name}\t{entry.package}\t{entry.version}\t{alias_display}"


def _load_settings(args: argparse.Namespace) -> Settings:
    overrides: dict[str, Any] = {}
    if args.config:
        overrides["config_path"] = Path(args.config).expanduser()
    if args.platform_dir:
        overrides["platform_dir"] = Path(args.platform_dir).expanduser()
    if args.log_level:
        overrides["log_level"] = args.log_level
    return Settings(**overrides)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="provlock", description="Provider lock tooling")
    parser.add_argument("--config", help="Path to the provider declaration file", default=None)
    parser.add_argument("--platform-dir", help="Directory holding package.json", default=None)
    parser.add_argument("--log-level", help="Log level (DEBUG, INFO, ...)", default=None)
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("check", help="Exit non-zero when the lock is out of date")

    install_parser = subparsers.add_parser("install", help="Resolve and install providers")
    install_parser.add_argument(
        "--force", action="store_true", help="Reinstall even if the lock is up to date"
    )

    subparsers.add_parser("list", help="List locked providers")
    return parser


@main_with_error_handling()
def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    settings = _load_settings(args)
    configure_logging(settings.log_level, log_format=settings.log_format)
    log = bind_context(command=args.command, platform_dir=str(settings.platform_dir))

    if args.command == "list":
        lock = load_lock(settings.lock_path)
        for entry in lock:
            print(_format_entry(entry))
        return ExitCode.SUCCESS

    specs = load_declaration(settings.config_path)
    reconciler = LockReconciler.from_settings(settings, specs)

    if args.command == "check":
        if reconciler.needs_install():
            ux.warning(f"Provider lock is out of date: {settings.lock_path}")
            return ExitCode.WARNING
        ux.success("Provider lock is up to date")
        return ExitCode.SUCCESS

    if args.command == "install":
        log.info("install_requested", force=args.force)
        with ux.spinner("Installing providers"):
            installed = asyncio.run(reconciler.ensure_installed(force=args.force))
        if installed:
            ux.success(f"Installed {len(reconciler.lock)} provider(s) into {settings.platform_dir}")
        else:
            ux.info("Providers already up to date")
        return ExitCode.SUCCESS

    parser.print_help()
    return 1


if __name__ == "__main__":  # pragma: no cover - exercised via module entrypoint
    raise SystemExit(main())
