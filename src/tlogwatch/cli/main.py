"""
tlogwatch command line entry point.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from pydantic import ValidationError

from tlogwatch.cli.commands import EXIT_ABORTED, cmd_reset, cmd_status, cmd_update


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--state-file",
        default=None,
        help="Trusted state file (default: $TLOGWATCH_STATE_FILE or ~/.tlogwatch/state.json)",
    )
    parser.add_argument(
        "--output",
        choices=["table", "json", "jsonl"],
        default="table",
        help="Output format",
    )


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tlogwatch",
        description="Append-only monitor for transparency logs",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (default: $TLOGWATCH_LOG_LEVEL or INFO)",
    )
    sub = parser.add_subparsers(dest="command")

    # update
    p_update = sub.add_parser(
        "update",
        help="Verify the log extends the trusted state and advance it",
    )
    p_update.add_argument("--server", default=None, help="Log server base URL")
    p_update.add_argument(
        "--public-key",
        default=None,
        help="Pin the log public key (PEM or DER file)",
    )
    p_update.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Network timeout in seconds (default: 5)",
    )
    _add_common(p_update)
    p_update.set_defaults(func=cmd_update)

    # status
    p_status = sub.add_parser("status", help="Show the trusted state")
    _add_common(p_status)
    p_status.set_defaults(func=cmd_status)

    # reset
    p_reset = sub.add_parser("reset", help="Forget the trusted state")
    p_reset.add_argument("--yes", action="store_true", help="Confirm deletion")
    _add_common(p_reset)
    p_reset.set_defaults(func=cmd_reset)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    from tlogwatch.core.settings import get_settings
    from tlogwatch.utils.logging import configure_logging

    parser = create_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return EXIT_ABORTED

    try:
        args.settings = get_settings()
    except ValidationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_ABORTED

    try:
        configure_logging(args.log_level or args.settings.log_level)
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_ABORTED

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
