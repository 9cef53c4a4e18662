"""Command line utilities for Praetor."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from .config import load_config
from .exceptions import ConfigurationError
from .host import Host
from .metadata import PROJECT_NAME
from .provider import AdminServiceProvider

DEFAULT_CONFIG = Path("config") / "admin.toml"


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    return args.func(args)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=PROJECT_NAME, description="Admin panel management commands")
    parser.add_argument("--config", default=None, help="TOML file with the [admin] settings (default: config/admin.toml)")
    parser.add_argument("--base-path", default=".", help="Project root the admin directory is resolved against")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    sub = parser.add_subparsers(dest="command", required=True)

    install = sub.add_parser("admin:install", help="Install the admin package")
    install.set_defaults(func=_cmd_install)

    publish = sub.add_parser("publish", help="Publish admin resources into the project")
    publish.add_argument("--tag", action="append", default=[], help="Resource tag to publish (admin-config, admin-views)")
    publish.add_argument("--force", action="store_true", help="Overwrite files that already exist")
    publish.set_defaults(func=_cmd_publish)

    return parser


def _cmd_install(args: argparse.Namespace) -> int:
    host = _console_host(args)
    try:
        return host.call("admin:install")
    except OSError as exc:
        raise SystemExit(str(exc)) from exc


def _cmd_publish(args: argparse.Namespace) -> int:
    host = _console_host(args)
    tags = args.tag or list(host.publish_tags)
    for tag in tags:
        try:
            written = host.publish(tag, force=args.force)
        except (LookupError, OSError) as exc:
            raise SystemExit(str(exc)) from exc
        for path in written:
            print(f"published {host.relative(path)}")
    return 0


def _console_host(args: argparse.Namespace) -> Host:
    base_path = Path(args.base_path)
    if args.config is not None:
        source: Path | None = Path(args.config)
    elif (base_path / DEFAULT_CONFIG).is_file():
        source = base_path / DEFAULT_CONFIG
    else:
        source = None
    try:
        config = load_config(source)
    except ConfigurationError as exc:
        raise SystemExit(str(exc)) from exc
    host = Host(base_path, running_in_console=True)
    provider = AdminServiceProvider(host, config)
    provider.register()
    provider.register_publishing()
    return host


__all__ = ["main"]
