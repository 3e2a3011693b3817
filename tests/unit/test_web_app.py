import sqlite3
from contextlib import closing
from pathlib import Path

from fastapi.testclient import TestClient

from idvmock.core.config import AppPaths, Settings
from idvmock.web.app import create_app

CLIENT_AUTH = ("client", "secret")


def _client(tmp_path: Path, callback_delay_ms: int = 60_000) -> TestClient:
    project_root = tmp_path / "proj"
    project_root.mkdir(parents=True, exist_ok=True)
    paths = AppPaths(
        project_root=project_root,
        data_dir=project_root / ".idvmock",
        db_path=project_root / ".idvmock" / "idvmock.db",
    )
    settings = Settings(
        port=3000,
        base_url="http://testserver",
        callback_delay_ms=callback_delay_ms,
        client_id="client",
        client_secret="secret",
        jwt_secret="test-secret",
        sdk_token_expiry_seconds=3600,
        environment="test",
    )
    return TestClient(create_app(paths, settings))


def _bearer(client: TestClient) -> dict[str, str]:
    r = client.post("/oauth2/token", data={"grant_type": "client_credentials"}, auth=CLIENT_AUTH)
    assert r.status_code == 200
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


def test_web_app_end_to_end_smoke(tmp_path: Path) -> None:
    client = _client(tmp_path)

    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "healthy"

    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["mockInfo"]["emailPatterns"]["rejected@* or failed@*"] == "REJECTED_UNSUPPORTED_ID_TYPE"

    headers = _bearer(client)

    r = client.post(
        "/api/v1/accounts",
        json={
            "customerInternalReference": "cust-1",
            "userReference": "approved@test.com",
            "workflowDefinition": {"key": 10164},
        },
        headers=headers,
    )
    assert r.status_code == 201
    created = r.json()
    account_id = created["account"]["id"]
    wfe_id = created["workflowExecution"]["id"]
    assert created["web"]["href"] == f"http://testserver/workflow/{wfe_id}"

    r = client.get(f"/api/v1/accounts/{account_id}/workflow-executions/{wfe_id}", headers=headers)
    assert r.status_code == 200
    early = r.json()
    assert early["workflowExecution"]["status"] == "INITIATED"
    assert "decision" not in early

    r = client.get(f"/workflow/{wfe_id}")
    assert r.status_code == 200
    assert "Verify your identity" in r.text

    r = client.post(f"/workflow/{wfe_id}/submit", json={"uploads": []})
    assert r.status_code == 200
    assert r.json() == {
        "status": "success",
        "verificationStatus": "APPROVED_VERIFIED",
        "successUrl": "http://testserver/success",
        "errorUrl": "http://testserver/error",
    }

    r = client.get(f"/api/v1/accounts/{account_id}/workflow-executions/{wfe_id}", headers=headers)
    assert r.status_code == 200
    final = r.json()
    assert final["workflowExecution"]["status"] == "PROCESSED"
    assert final["decision"]["type"] == "ACCEPTED"
    assert len(final["capabilities"]) == 5

    r = client.get(f"/api/v1/accounts/{account_id}", headers=headers)
    assert r.status_code == 200
    assert r.json()["workflowExecutions"][0]["status"] == "APPROVED_VERIFIED"

    r = client.put(
        f"/api/v1/accounts/{account_id}",
        json={"userReference": "approved@test.com"},
        headers=headers,
    )
    assert r.status_code == 200
    assert r.json()["workflowExecution"]["id"] != wfe_id

    r = client.get("/success")
    assert r.status_code == 200
    assert "Verification Successful" in r.text
    r = client.get("/error")
    assert "Verification Failed" in r.text


def test_oauth2_token_errors(tmp_path: Path) -> None:
    client = _client(tmp_path)

    r = client.post("/oauth2/token", data={"grant_type": "client_credentials"})
    assert r.status_code == 401
    assert r.json() == {"error": "unauthorized", "error_description": "Basic authentication required"}

    r = client.post("/oauth2/token", data={"grant_type": "client_credentials"}, auth=("client", "nope"))
    assert r.status_code == 401
    assert r.json()["error"] == "invalid_client"

    r = client.post(
        "/oauth2/token",
        data={"grant_type": "client_credentials"},
        headers={"Authorization": "Basic %%%not-base64%%%"},
    )
    assert r.status_code == 401
    assert r.json()["error"] == "invalid_request"

    r = client.post("/oauth2/token", data={"grant_type": "password"}, auth=CLIENT_AUTH)
    assert r.status_code == 400
    assert r.json() == {
        "error": "unsupported_grant_type",
        "error_description": "Only client_credentials grant type is supported",
    }

    r = client.post("/oauth2/token", json={"grant_type": "client_credentials"}, auth=CLIENT_AUTH)
    assert r.status_code == 200
    assert r.json()["token_type"] == "Bearer"
    assert r.json()["expires_in"] == 3600


def test_bearer_protection_and_validation(tmp_path: Path) -> None:
    client = _client(tmp_path)

    r = client.post("/api/v1/accounts", json={"workflowDefinition": {"key": "10164"}})
    assert r.status_code == 401
    assert r.json() == {"error": "unauthorized", "message": "Bearer token required"}

    r = client.get("/api/v1/accounts/acc_x", headers={"Authorization": "Bearer garbage"})
    assert r.status_code == 401
    assert r.json() == {"error": "invalid_token", "message": "Invalid or expired token"}

    headers = _bearer(client)
    r = client.post("/api/v1/accounts", json={"userReference": "x@test.com"}, headers=headers)
    assert r.status_code == 400
    assert r.json() == {"error": "invalid_request", "message": "workflowDefinition.key is required"}

    r = client.get("/api/v1/accounts/acc_missing", headers=headers)
    assert r.status_code == 404
    assert r.json() == {"error": "not_found", "message": "Account not found"}

    r = client.get("/api/v1/accounts/acc_missing/workflow-executions/wfe_missing", headers=headers)
    assert r.status_code == 404
    assert r.json()["message"] == "Workflow execution not found"


def test_hosted_page_and_unknown_routes(tmp_path: Path) -> None:
    client = _client(tmp_path)

    r = client.get("/workflow/wfe_missing")
    assert r.status_code == 404
    assert "Workflow not found" in r.text

    r = client.post("/workflow/wfe_missing/submit", json={})
    assert r.status_code == 404
    assert r.json() == {"status": "error", "message": "Workflow not found"}

    r = client.get("/does/not/exist")
    assert r.status_code == 404
    assert r.json() == {"success": False, "error": "Route not found"}


def test_account_routes_treat_missing_body_as_empty(tmp_path: Path) -> None:
    client = _client(tmp_path)
    headers = _bearer(client)

    r = client.post("/api/v1/accounts", headers=headers)
    assert r.status_code == 400
    assert r.json() == {"error": "invalid_request", "message": "workflowDefinition.key is required"}

    r = client.put("/api/v1/accounts/acc_missing", headers=headers)
    assert r.status_code == 404
    assert r.json() == {"error": "not_found", "message": "Account not found"}

    r = client.post(
        "/api/v1/accounts",
        json={"userReference": "approved@test.com", "workflowDefinition": {"key": "10164"}},
        headers=headers,
    )
    account_id = r.json()["account"]["id"]
    first_wfe = r.json()["workflowExecution"]["id"]

    r = client.put(f"/api/v1/accounts/{account_id}", headers=headers)
    assert r.status_code == 200
    assert r.json()["workflowExecution"]["id"] != first_wfe


def test_account_body_that_fails_model_is_invalid_request(tmp_path: Path) -> None:
    client = _client(tmp_path)
    headers = _bearer(client)

    r = client.post("/api/v1/accounts", json={"workflowDefinition": {"key": 1.5}}, headers=headers)
    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "invalid_request"
    assert body["message"].startswith("workflowDefinition.key")
    assert "detail" not in body

    r = client.post("/api/v1/accounts", json=["not", "an", "object"], headers=headers)
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_request"


def test_oauth2_token_malformed_json_body(tmp_path: Path) -> None:
    client = _client(tmp_path)

    r = client.post(
        "/oauth2/token",
        content=b"{bad",
        headers={"Content-Type": "application/json"},
        auth=CLIENT_AUTH,
    )
    assert r.status_code == 400
    assert r.json() == {"error": "invalid_request", "error_description": "Malformed request body"}


def test_unparsable_creation_timestamp_is_server_error(tmp_path: Path) -> None:
    client = _client(tmp_path)
    headers = _bearer(client)

    r = client.post(
        "/api/v1/accounts",
        json={"userReference": "approved@test.com", "workflowDefinition": {"key": "10164"}},
        headers=headers,
    )
    account_id = r.json()["account"]["id"]
    wfe_id = r.json()["workflowExecution"]["id"]

    db_path = tmp_path / "proj" / ".idvmock" / "idvmock.db"
    with closing(sqlite3.connect(db_path)) as conn:
        conn.execute("UPDATE workflow_executions SET created_at = ? WHERE id = ?", ("not-a-date", wfe_id))
        conn.commit()

    r = client.get(f"/api/v1/accounts/{account_id}/workflow-executions/{wfe_id}", headers=headers)
    assert r.status_code == 500
    body = r.json()
    assert body["error"] == "invalid_timestamp"
    assert "not-a-date" in body["message"]
