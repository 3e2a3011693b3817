from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from idvmock.application.services.callback_service import CallbackService
from idvmock.application.services.progressive_result_engine import ProgressiveResultEngine
from idvmock.application.services.status_classifier import classify
from idvmock.application.services.token_service import TokenService
from idvmock.core.config import Settings
from idvmock.core.errors import AccountNotFoundError, ValidationError, WorkflowNotFoundError
from idvmock.core.ids import new_account_id, new_workflow_execution_id
from idvmock.core.time import epoch_millis, now_utc, to_iso
from idvmock.domain.models.account import Account, AccountRequest, WorkflowExecution
from idvmock.domain.models.verification import VerificationOutcome
from idvmock.infrastructure.db.repos.account_repo import AccountRepo
from idvmock.infrastructure.db.repos.workflow_execution_repo import WorkflowExecutionRepo

logger = logging.getLogger(__name__)

PENDING_STATUS = "PENDING"
ALLOWED_CHANNELS = ["WEB", "API", "SDK"]


@dataclass(slots=True)
class AccountCreation:
    account_id: str
    workflow_execution_id: str
    sdk_token: str
    api_token: str
    response: dict[str, Any]


@dataclass(slots=True)
class SubmissionResult:
    outcome: VerificationOutcome
    account_id: str
    workflow_execution_id: str
    completed_at: str
    callback_scheduled: bool
    response: dict[str, Any]


class AccountService:
    def __init__(
        self,
        settings: Settings,
        account_repo: AccountRepo,
        workflow_repo: WorkflowExecutionRepo,
        token_service: TokenService,
        engine: ProgressiveResultEngine,
        callback_service: CallbackService,
    ) -> None:
        self.settings = settings
        self.account_repo = account_repo
        self.workflow_repo = workflow_repo
        self.token_service = token_service
        self.engine = engine
        self.callback_service = callback_service

    def create_account(self, request: AccountRequest) -> AccountCreation:
        if not request.workflow_definition_key:
            raise ValidationError("workflowDefinition.key is required")

        now = now_utc()
        account = Account(
            id=new_account_id(),
            customer_internal_reference=request.customer_internal_reference,
            user_reference=request.user_reference,
            workflow_definition_key=request.workflow_definition_key,
            callback_url=request.callback_url,
            success_url=request.success_url,
            error_url=request.error_url,
            created_at=to_iso(now),
        )
        self.account_repo.insert(account)
        logger.info("Created account %s", account.id)

        return self._start_workflow(account.id, request, now)

    def update_account(self, account_id: str, request: AccountRequest) -> AccountCreation:
        account = self.account_repo.get_by_id(account_id)
        if account is None:
            raise AccountNotFoundError("Account not found")

        if request.has_workflow_definition:
            self.account_repo.update_workflow_settings(
                account_id,
                workflow_definition_key=request.workflow_definition_key,
                callback_url=request.callback_url,
                success_url=request.success_url,
                error_url=request.error_url,
            )

        return self._start_workflow(account_id, request, now_utc())

    def get_account(self, account_id: str) -> dict[str, Any]:
        account = self.account_repo.get_by_id(account_id)
        if account is None:
            raise AccountNotFoundError("Account not found")

        executions = self.workflow_repo.list_for_account(account_id)
        return {
            "id": account.id,
            "customerInternalReference": account.customer_internal_reference,
            "userReference": account.user_reference,
            "workflowDefinitionKey": account.workflow_definition_key,
            "createdAt": account.created_at,
            "workflowExecutions": [
                {
                    "id": we.id,
                    "status": we.status,
                    "createdAt": we.created_at,
                    "completedAt": we.completed_at,
                }
                for we in executions
            ],
        }

    def get_workflow_result(
        self,
        account_id: str,
        workflow_execution_id: str,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        record = self.workflow_repo.get_record(workflow_execution_id, account_id=account_id)
        if record is None:
            raise WorkflowNotFoundError("Workflow execution not found")

        return self.engine.compute_status(
            started_at=record.execution.created_at,
            completed_at=record.execution.completed_at,
            email=record.account_user_reference,
            account_id=account_id,
            workflow_execution_id=workflow_execution_id,
            now=now,
        )

    def workflow_exists(self, workflow_execution_id: str) -> bool:
        return self.workflow_repo.get_by_id(workflow_execution_id) is not None

    def submit_workflow(self, workflow_execution_id: str) -> SubmissionResult:
        record = self.workflow_repo.get_record(workflow_execution_id)
        if record is None:
            raise WorkflowNotFoundError("Workflow not found")

        outcome = classify(record.account_user_reference)
        verification_status = outcome.verification_status
        completed_at = to_iso(now_utc())
        self.workflow_repo.mark_completed(workflow_execution_id, verification_status, completed_at)
        logger.info("Workflow %s submitted with status %s", workflow_execution_id, verification_status)

        callback_scheduled = False
        if record.callback_url:
            self.callback_service.schedule(
                record.callback_url,
                record.execution.account_id,
                workflow_execution_id,
                verification_status,
            )
            callback_scheduled = True

        base_url = self.settings.base_url
        response = {
            "status": "success" if outcome is VerificationOutcome.APPROVED else "error",
            "verificationStatus": verification_status,
            "successUrl": record.success_url or f"{base_url}/success",
            "errorUrl": record.error_url or f"{base_url}/error",
        }
        return SubmissionResult(
            outcome=outcome,
            account_id=record.execution.account_id,
            workflow_execution_id=workflow_execution_id,
            completed_at=completed_at,
            callback_scheduled=callback_scheduled,
            response=response,
        )

    def _start_workflow(self, account_id: str, request: AccountRequest, now: datetime) -> AccountCreation:
        execution = WorkflowExecution(
            id=new_workflow_execution_id(),
            account_id=account_id,
            status=PENDING_STATUS,
            user_reference=request.user_reference,
            completed_at=None,
            created_at=to_iso(now),
        )
        self.workflow_repo.insert(execution)

        sdk_token = self.token_service.issue_sdk_token(account_id, execution.id)
        api_token = self.token_service.issue_api_token(execution.id)
        response = self._account_response(
            account_id,
            execution.id,
            sdk_token,
            api_token,
            success_url=request.success_url,
            error_url=request.error_url,
            now=now,
        )
        return AccountCreation(
            account_id=account_id,
            workflow_execution_id=execution.id,
            sdk_token=sdk_token,
            api_token=api_token,
            response=response,
        )

    def _account_response(
        self,
        account_id: str,
        workflow_execution_id: str,
        sdk_token: str,
        api_token: str,
        success_url: str | None,
        error_url: str | None,
        now: datetime,
    ) -> dict[str, Any]:
        base_url = self.settings.base_url
        execution_url = f"{base_url}/api/v1/workflow-executions/{workflow_execution_id}"
        stamp = epoch_millis(now)
        return {
            "timestamp": to_iso(now),
            "account": {"id": account_id},
            "web": {
                "href": f"{base_url}/workflow/{workflow_execution_id}",
                "successUrl": success_url or f"{base_url}/success",
                "errorUrl": error_url or f"{base_url}/error",
            },
            "sdk": {"token": sdk_token},
            "workflowExecution": {
                "id": workflow_execution_id,
                "credentials": [
                    {
                        "id": f"crd_id_{stamp}",
                        "category": "ID",
                        "label": "Identity Document",
                        "allowedChannels": list(ALLOWED_CHANNELS),
                        "api": {
                            "token": api_token,
                            "workflowExecution": execution_url,
                            "parts": {
                                "front": f"{execution_url}/parts/FRONT",
                                "back": f"{execution_url}/parts/BACK",
                            },
                        },
                    },
                    {
                        "id": f"crd_selfie_{stamp}",
                        "category": "SELFIE",
                        "label": "Selfie",
                        "allowedChannels": list(ALLOWED_CHANNELS),
                        "api": {
                            "token": api_token,
                            "workflowExecution": execution_url,
                            "parts": {"face": f"{execution_url}/parts/FACE"},
                        },
                    },
                ],
            },
        }
