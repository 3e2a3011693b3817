from dataclasses import replace
from datetime import timedelta

from idvmock.application.services.token_service import TokenService
from idvmock.core.config import Settings
from idvmock.core.time import now_utc


def _settings() -> Settings:
    return Settings(
        port=3000,
        base_url="http://localhost:3000",
        callback_delay_ms=2000,
        client_id="client",
        client_secret="secret",
        jwt_secret="test-secret",
        sdk_token_expiry_seconds=600,
        environment="test",
    )


def test_issued_tokens_verify_with_expected_claims() -> None:
    service = TokenService(_settings())

    oauth = service.verify_token(service.issue_oauth2_token())
    assert oauth is not None
    assert oauth["type"] == "oauth2"
    assert oauth["scope"] == "full"
    assert oauth["iss"] == "http://localhost:3000"
    assert oauth["exp"] - oauth["iat"] == 3600

    sdk = service.verify_token(service.issue_sdk_token("acc_1", "wfe_1"))
    assert sdk is not None
    assert sdk["type"] == "sdk"
    assert sdk["accountId"] == "acc_1"
    assert sdk["workflowExecutionId"] == "wfe_1"
    assert sdk["exp"] - sdk["iat"] == 600

    api = service.verify_token(service.issue_api_token("wfe_1"))
    assert api is not None
    assert api["type"] == "api"
    assert api["workflowExecutionId"] == "wfe_1"


def test_expired_token_is_rejected() -> None:
    issued_long_ago = TokenService(_settings(), clock=lambda: now_utc() - timedelta(hours=2))
    token = issued_long_ago.issue_oauth2_token()

    assert TokenService(_settings()).verify_token(token) is None


def test_forged_or_malformed_tokens_are_rejected() -> None:
    service = TokenService(_settings())
    token = service.issue_oauth2_token()
    header, payload, signature = token.split(".")
    forged = ".".join([header, payload, signature[::-1]])

    assert service.verify_token(forged) is None
    assert service.verify_token("not-a-jwt") is None

    other = replace(_settings(), jwt_secret="other-secret")
    assert TokenService(other).verify_token(token) is None


def test_client_credentials_check() -> None:
    service = TokenService(_settings())
    assert service.check_client_credentials("client", "secret") is True
    assert service.check_client_credentials("client", "wrong") is False
    assert service.check_client_credentials("other", "secret") is False
