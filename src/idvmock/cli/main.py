from __future__ import annotations

import argparse
import logging
from pathlib import Path

from rich.console import Console

from idvmock.cli.commands import accounts_cmd, init_cmd, result_cmd, serve_cmd, token_cmd
from idvmock.cli.context import CLIContext
from idvmock.core.config import load_paths, load_settings
from idvmock.core.errors import IdvMockError
from idvmock.core.logging import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="idvmock",
        description="Mock identity-verification API server",
    )
    parser.add_argument(
        "--project-root",
        type=Path,
        default=Path.cwd(),
        help="Project root to use for .idvmock data (default: current working directory)",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0)

    subparsers = parser.add_subparsers(dest="command", required=True)
    init_cmd.register(subparsers)
    serve_cmd.register(subparsers)
    accounts_cmd.register(subparsers)
    result_cmd.register(subparsers)
    token_cmd.register(subparsers)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    console = Console()

    ctx = CLIContext(paths=load_paths(args.project_root), settings=load_settings(), console=console)

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 2

    try:
        return handler(args, ctx)
    except IdvMockError as exc:
        logger.error(str(exc))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
