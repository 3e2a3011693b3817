from __future__ import annotations

import argparse

from idvmock.cli.context import CLIContext
from idvmock.web.app import create_app


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("serve", help="Run the mock verification API server")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=None, help="Port to bind (default: $PORT or 3000)")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    try:
        import uvicorn
    except Exception as exc:  # pragma: no cover
        raise RuntimeError("uvicorn is required for serve mode. Install project dependencies.") from exc

    port = args.port or ctx.settings.port
    ctx.console.rule("IDV Mock Server")
    ctx.console.print(f"Base URL: {ctx.settings.base_url}")
    ctx.console.print(f"Callback delay: {ctx.settings.callback_delay_ms}ms")
    ctx.console.print("Mock email patterns:")
    ctx.console.print("  approved@test.com -> [green]APPROVED[/green]")
    ctx.console.print("  rejected@test.com -> [red]REJECTED[/red]")
    ctx.console.print("  review@test.com   -> [yellow]MANUAL_REVIEW[/yellow]")

    app = create_app(ctx.paths, ctx.settings)
    uvicorn.run(app, host=args.host, port=port)
    return 0
