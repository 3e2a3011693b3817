from __future__ import annotations

import argparse

from idvmock.application.services.token_service import TokenService
from idvmock.cli.context import CLIContext


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("token", help="Print a fresh OAuth2 bearer token")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    token = TokenService(ctx.settings).issue_oauth2_token()
    ctx.console.print(token, soft_wrap=True, highlight=False)
    return 0
