from __future__ import annotations

from pathlib import Path

from idvmock.domain.models.account import WorkflowExecution, WorkflowRecord
from idvmock.infrastructure.db.sqlite import get_connection

_RECORD_SELECT = """
    SELECT we.*,
           a.user_reference AS account_user_reference,
           a.callback_url AS callback_url,
           a.success_url AS success_url,
           a.error_url AS error_url
    FROM workflow_executions we
    JOIN accounts a ON we.account_id = a.id
"""


class WorkflowExecutionRepo:
    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path

    def insert(self, execution: WorkflowExecution) -> None:
        with get_connection(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO workflow_executions (id, account_id, status, user_reference, completed_at, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    execution.id,
                    execution.account_id,
                    execution.status,
                    execution.user_reference,
                    execution.completed_at,
                    execution.created_at,
                ),
            )

    def get_by_id(self, workflow_execution_id: str) -> WorkflowExecution | None:
        with get_connection(self.db_path) as conn:
            row = conn.execute(
                "SELECT * FROM workflow_executions WHERE id = ?",
                (workflow_execution_id,),
            ).fetchone()
        return self._to_execution(row) if row else None

    def get_record(self, workflow_execution_id: str, account_id: str | None = None) -> WorkflowRecord | None:
        query = _RECORD_SELECT + " WHERE we.id = ?"
        params: tuple[str, ...] = (workflow_execution_id,)
        if account_id is not None:
            query += " AND a.id = ?"
            params = (workflow_execution_id, account_id)
        with get_connection(self.db_path) as conn:
            row = conn.execute(query, params).fetchone()
        return self._to_record(row) if row else None

    def list_for_account(self, account_id: str) -> list[WorkflowExecution]:
        with get_connection(self.db_path) as conn:
            rows = conn.execute(
                """
                SELECT * FROM workflow_executions
                WHERE account_id = ?
                ORDER BY created_at DESC
                """,
                (account_id,),
            ).fetchall()
        return [self._to_execution(row) for row in rows]

    def mark_completed(self, workflow_execution_id: str, status: str, completed_at: str) -> None:
        with get_connection(self.db_path) as conn:
            conn.execute(
                """
                UPDATE workflow_executions
                SET status = ?, completed_at = ?
                WHERE id = ?
                """,
                (status, completed_at, workflow_execution_id),
            )

    @staticmethod
    def _to_execution(row) -> WorkflowExecution:
        return WorkflowExecution(
            id=row["id"],
            account_id=row["account_id"],
            status=row["status"],
            user_reference=row["user_reference"],
            completed_at=row["completed_at"],
            created_at=row["created_at"],
        )

    @classmethod
    def _to_record(cls, row) -> WorkflowRecord:
        return WorkflowRecord(
            execution=cls._to_execution(row),
            account_user_reference=row["account_user_reference"],
            callback_url=row["callback_url"],
            success_url=row["success_url"],
            error_url=row["error_url"],
        )
