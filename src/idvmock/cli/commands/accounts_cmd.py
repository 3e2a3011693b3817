from __future__ import annotations

import argparse

from rich.table import Table

from idvmock.application.services.project_service import ProjectService
from idvmock.cli.context import CLIContext
from idvmock.core.errors import ProjectNotInitializedError
from idvmock.infrastructure.db.repos.account_repo import AccountRepo
from idvmock.infrastructure.db.repos.workflow_execution_repo import WorkflowExecutionRepo


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("accounts", help="List mock accounts and their workflow executions")
    parser.add_argument("--limit", type=int, default=50)
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    project_service = ProjectService(ctx.paths)
    if not project_service.is_initialized():
        raise ProjectNotInitializedError(
            f"Project is not initialized. Run 'idvmock init' first in {ctx.paths.project_root}"
        )

    account_repo = AccountRepo(ctx.paths.db_path)
    workflow_repo = WorkflowExecutionRepo(ctx.paths.db_path)
    accounts = account_repo.list(limit=args.limit)

    table = Table(title=f"Accounts ({len(accounts)})")
    table.add_column("ID")
    table.add_column("User Reference")
    table.add_column("Created")
    table.add_column("Workflow Executions", overflow="fold")

    for account in accounts:
        executions = workflow_repo.list_for_account(account.id)
        summary = "\n".join(f"{we.id} {we.status}" for we in executions)
        table.add_row(account.id, account.user_reference or "", account.created_at, summary)

    ctx.console.print(table)
    return 0
