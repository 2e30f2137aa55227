"""
Command-line interface for logbatch.

    logbatch send "deploy finished" --level WARN --profile staging
    logbatch config --profile staging
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from typing import Sequence

from pydantic import ValidationError

from .._version import __version__
from ..core.config import ConfigResolver
from ..core.settings import Settings
from ..core.shipper import LogShipper


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="logbatch", description="Ship log records to an HTTP JSON endpoint"
    )
    parser.add_argument("--version", action="version", version=__version__)
    sub = parser.add_subparsers(dest="command", required=True)

    send = sub.add_parser("send", help="Send one log record and wait for delivery")
    send.add_argument("message")
    send.add_argument("--level", default=None)
    send.add_argument("--profile", default=None)
    send.add_argument(
        "--timeout",
        type=float,
        default=10.0,
        help="Seconds to wait for delivery before exiting",
    )

    cfg = sub.add_parser("config", help="Print the resolved configuration as JSON")
    cfg.add_argument("--profile", default=None)
    return parser


def _cmd_send(args: argparse.Namespace, settings: Settings) -> int:
    config = ConfigResolver(profile=args.profile, settings=settings).get()
    shipper = LogShipper(config)
    try:
        # In batch mode the record lands in the session and is sent on exit
        with shipper.new_session() as session:
            shipper.single_log(args.message, level=args.level, batch=session)
        shipper.drain(args.timeout)
    finally:
        shipper.close(args.timeout)
    return 0


def _cmd_config(args: argparse.Namespace, settings: Settings) -> int:
    config = ConfigResolver(profile=args.profile, settings=settings).get()
    print(json.dumps(asdict(config), indent=2, sort_keys=True))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Main CLI entry point."""
    args = _build_parser().parse_args(argv)
    try:
        settings = Settings()
    except ValidationError as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return 1
    if args.command == "send":
        return _cmd_send(args, settings)
    return _cmd_config(args, settings)


def cli_main() -> int:
    """Console-script entry."""
    return main()


if __name__ == "__main__":
    sys.exit(cli_main())
