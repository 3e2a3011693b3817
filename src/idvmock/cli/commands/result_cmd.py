from __future__ import annotations

import argparse
import json

from idvmock.application.services.progressive_result_engine import ProgressiveResultEngine
from idvmock.application.services.project_service import ProjectService
from idvmock.cli.context import CLIContext
from idvmock.core.errors import ProjectNotInitializedError, WorkflowNotFoundError
from idvmock.infrastructure.db.repos.workflow_execution_repo import WorkflowExecutionRepo


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("result", help="Show the workflow result a poll would return right now")
    parser.add_argument("account_id")
    parser.add_argument("workflow_execution_id")
    parser.add_argument("--delay-ms", type=int, default=None, help="Override the configured callback delay")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    if not ProjectService(ctx.paths).is_initialized():
        raise ProjectNotInitializedError(
            f"Project is not initialized. Run 'idvmock init' first in {ctx.paths.project_root}"
        )

    record = WorkflowExecutionRepo(ctx.paths.db_path).get_record(
        args.workflow_execution_id,
        account_id=args.account_id,
    )
    if record is None:
        raise WorkflowNotFoundError(
            f"Workflow execution not found: {args.account_id}/{args.workflow_execution_id}"
        )

    engine = ProgressiveResultEngine(delay_ms=ctx.settings.callback_delay_ms)
    document = engine.compute_status(
        started_at=record.execution.created_at,
        completed_at=record.execution.completed_at,
        email=record.account_user_reference,
        account_id=args.account_id,
        workflow_execution_id=args.workflow_execution_id,
        delay_ms=args.delay_ms,
    )
    ctx.console.print_json(json.dumps(document))
    return 0
