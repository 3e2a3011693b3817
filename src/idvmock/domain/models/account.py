from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class Account:
    id: str
    customer_internal_reference: str | None
    user_reference: str | None
    workflow_definition_key: str | None
    callback_url: str | None
    success_url: str | None
    error_url: str | None
    created_at: str


@dataclass(slots=True)
class WorkflowExecution:
    id: str
    account_id: str
    status: str
    user_reference: str | None
    completed_at: str | None
    created_at: str


@dataclass(slots=True)
class AccountRequest:
    customer_internal_reference: str | None = None
    user_reference: str | None = None
    workflow_definition_key: str | None = None
    has_workflow_definition: bool = False
    callback_url: str | None = None
    success_url: str | None = None
    error_url: str | None = None


@dataclass(slots=True)
class WorkflowRecord:
    """A workflow execution joined with the owning account's references and URLs."""

    execution: WorkflowExecution
    account_user_reference: str | None
    callback_url: str | None
    success_url: str | None
    error_url: str | None
