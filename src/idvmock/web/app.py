from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from fastapi import Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from idvmock import __version__
from idvmock.application.services.account_service import AccountService
from idvmock.application.services.callback_service import CallbackService
from idvmock.application.services.mock_result_builder import MockResultBuilder
from idvmock.application.services.progressive_result_engine import ProgressiveResultEngine
from idvmock.application.services.project_service import ProjectService
from idvmock.application.services.token_service import ACCESS_TOKEN_EXPIRY_SECONDS, TokenService
from idvmock.core.config import AppPaths, Settings, load_settings
from idvmock.core.errors import IdvMockError, UnsupportedGrantTypeError, ValidationError, WorkflowNotFoundError
from idvmock.core.time import now_utc_iso
from idvmock.domain.models.account import AccountRequest
from idvmock.infrastructure.db.repos.account_repo import AccountRepo
from idvmock.infrastructure.db.repos.workflow_execution_repo import WorkflowExecutionRepo
from idvmock.web.auth import require_basic_client, require_bearer_token

logger = logging.getLogger(__name__)

EMAIL_PATTERNS = {
    "approved@* or success@*": "APPROVED_VERIFIED",
    "rejected@* or failed@*": "REJECTED_UNSUPPORTED_ID_TYPE",
    "review@* or manual@*": "REQUIRES_MANUAL_REVIEW",
    "other": "APPROVED_VERIFIED (default)",
}


class WorkflowDefinitionPayload(BaseModel):
    key: str | int | None = None


class AccountPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    customer_internal_reference: str | None = Field(default=None, alias="customerInternalReference")
    user_reference: str | None = Field(default=None, alias="userReference")
    workflow_definition: WorkflowDefinitionPayload | None = Field(default=None, alias="workflowDefinition")
    callback_url: str | None = Field(default=None, alias="callbackUrl")
    success_url: str | None = Field(default=None, alias="successUrl")
    error_url: str | None = Field(default=None, alias="errorUrl")

    def to_request(self) -> AccountRequest:
        key = self.workflow_definition.key if self.workflow_definition else None
        return AccountRequest(
            customer_internal_reference=self.customer_internal_reference,
            user_reference=self.user_reference,
            workflow_definition_key=str(key) if key not in (None, "") else None,
            has_workflow_definition=self.workflow_definition is not None,
            callback_url=self.callback_url,
            success_url=self.success_url,
            error_url=self.error_url,
        )


class SubmitPayload(BaseModel):
    uploads: Any = None


def create_app(paths: AppPaths, settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    app = FastAPI(title="IDV Mock Server", version=__version__)
    static_dir = Path(__file__).resolve().parent / "static"

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    project_service = ProjectService(paths)
    project_service.init_project()

    token_service = TokenService(settings)
    engine = ProgressiveResultEngine(MockResultBuilder(), delay_ms=settings.callback_delay_ms)
    callback_service = CallbackService(delay_ms=settings.callback_delay_ms)

    def get_account_service() -> AccountService:
        return AccountService(
            settings=settings,
            account_repo=AccountRepo(paths.db_path),
            workflow_repo=WorkflowExecutionRepo(paths.db_path),
            token_service=token_service,
            engine=engine,
            callback_service=callback_service,
        )

    def basic_client(request: Request) -> str:
        return require_basic_client(request.headers.get("authorization"), token_service)

    def bearer_claims(request: Request) -> dict[str, Any]:
        return require_bearer_token(request.headers.get("authorization"), token_service)

    def static_page(name: str) -> HTMLResponse:
        return HTMLResponse((static_dir / name).read_text(encoding="utf-8"))

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info("%s %s", request.method, request.url.path)
        return await call_next(request)

    @app.exception_handler(IdvMockError)
    async def idvmock_error_handler(request: Request, exc: IdvMockError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("Request failed: %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.error_code, exc.message_field: str(exc)},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else "Invalid request body"
        return await idvmock_error_handler(request, ValidationError(message))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            return JSONResponse(status_code=404, content={"success": False, "error": "Route not found"})
        return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.detail})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "Internal server error",
                "message": str(exc) if settings.is_development else None,
            },
        )

    @app.get("/")
    def index() -> dict[str, Any]:
        return {
            "success": True,
            "message": "IDV Mock Server - Identity Verification API",
            "version": __version__,
            "endpoints": {
                "oauth2": "/oauth2/token",
                "accounts": "/api/v1/accounts",
                "retrieval": "/api/v1/accounts/:accountId/workflow-executions/:workflowExecutionId",
                "webInterface": "/workflow/:workflowExecutionId",
                "health": "/health",
            },
            "mockInfo": {"emailPatterns": dict(EMAIL_PATTERNS)},
        }

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {"success": True, "status": "healthy", "timestamp": now_utc_iso()}

    @app.post("/oauth2/token")
    async def oauth2_token(request: Request, client_id: str = Depends(basic_client)) -> dict[str, Any]:
        content_type = request.headers.get("content-type", "")
        if content_type.startswith("application/json"):
            try:
                body = await request.json()
            except ValueError as exc:
                raise ValidationError("Malformed request body", message_field="error_description") from exc
            grant_type = body.get("grant_type") if isinstance(body, dict) else None
        else:
            form = await request.form()
            grant_type = form.get("grant_type")

        if grant_type != "client_credentials":
            raise UnsupportedGrantTypeError("Only client_credentials grant type is supported")

        logger.info("Issued access token for client %s", client_id)
        return {
            "access_token": token_service.issue_oauth2_token(),
            "token_type": "Bearer",
            "expires_in": ACCESS_TOKEN_EXPIRY_SECONDS,
        }

    @app.post("/api/v1/accounts", status_code=201)
    def create_account(
        req: AccountPayload | None = Body(default=None),
        _claims: dict[str, Any] = Depends(bearer_claims),
    ) -> dict[str, Any]:
        return get_account_service().create_account((req or AccountPayload()).to_request()).response

    @app.put("/api/v1/accounts/{account_id}")
    def update_account(
        account_id: str,
        req: AccountPayload | None = Body(default=None),
        _claims: dict[str, Any] = Depends(bearer_claims),
    ) -> dict[str, Any]:
        return get_account_service().update_account(account_id, (req or AccountPayload()).to_request()).response

    @app.get("/api/v1/accounts/{account_id}/workflow-executions/{workflow_execution_id}")
    def workflow_results(
        account_id: str,
        workflow_execution_id: str,
        _claims: dict[str, Any] = Depends(bearer_claims),
    ) -> dict[str, Any]:
        return get_account_service().get_workflow_result(account_id, workflow_execution_id)

    @app.get("/api/v1/accounts/{account_id}")
    def get_account(account_id: str, _claims: dict[str, Any] = Depends(bearer_claims)) -> dict[str, Any]:
        return get_account_service().get_account(account_id)

    @app.get("/workflow/{workflow_execution_id}", response_class=HTMLResponse)
    def hosted_workflow(workflow_execution_id: str) -> HTMLResponse:
        if not get_account_service().workflow_exists(workflow_execution_id):
            return HTMLResponse("<h1>Workflow not found</h1>", status_code=404)
        return static_page("workflow.html")

    @app.post("/workflow/{workflow_execution_id}/submit")
    def submit_workflow(workflow_execution_id: str, _payload: SubmitPayload | None = None) -> Any:
        try:
            result = get_account_service().submit_workflow(workflow_execution_id)
        except WorkflowNotFoundError as exc:
            return JSONResponse(status_code=404, content={"status": "error", "message": str(exc)})
        return result.response

    @app.get("/success", response_class=HTMLResponse)
    def success_page() -> HTMLResponse:
        return static_page("success.html")

    @app.get("/error", response_class=HTMLResponse)
    def error_page() -> HTMLResponse:
        return static_page("error.html")

    return app
