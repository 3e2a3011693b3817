from __future__ import annotations

from pathlib import Path

from idvmock.domain.models.account import Account
from idvmock.infrastructure.db.sqlite import get_connection


class AccountRepo:
    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path

    def insert(self, account: Account) -> None:
        with get_connection(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO accounts (
                    id,
                    customer_internal_reference,
                    user_reference,
                    workflow_definition_key,
                    callback_url,
                    success_url,
                    error_url,
                    created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    account.id,
                    account.customer_internal_reference,
                    account.user_reference,
                    account.workflow_definition_key,
                    account.callback_url,
                    account.success_url,
                    account.error_url,
                    account.created_at,
                ),
            )

    def update_workflow_settings(
        self,
        account_id: str,
        workflow_definition_key: str | None,
        callback_url: str | None,
        success_url: str | None,
        error_url: str | None,
    ) -> None:
        with get_connection(self.db_path) as conn:
            conn.execute(
                """
                UPDATE accounts
                SET workflow_definition_key = ?, callback_url = ?, success_url = ?, error_url = ?
                WHERE id = ?
                """,
                (workflow_definition_key, callback_url, success_url, error_url, account_id),
            )

    def get_by_id(self, account_id: str) -> Account | None:
        with get_connection(self.db_path) as conn:
            row = conn.execute(
                "SELECT * FROM accounts WHERE id = ?",
                (account_id,),
            ).fetchone()
        return self._to_account(row) if row else None

    def list(self, limit: int = 100) -> list[Account]:
        with get_connection(self.db_path) as conn:
            rows = conn.execute(
                """
                SELECT * FROM accounts
                ORDER BY created_at DESC
                LIMIT ?
                """,
                (limit,),
            ).fetchall()
        return [self._to_account(row) for row in rows]

    @staticmethod
    def _to_account(row) -> Account:
        return Account(
            id=row["id"],
            customer_internal_reference=row["customer_internal_reference"],
            user_reference=row["user_reference"],
            workflow_definition_key=row["workflow_definition_key"],
            callback_url=row["callback_url"],
            success_url=row["success_url"],
            error_url=row["error_url"],
            created_at=row["created_at"],
        )
