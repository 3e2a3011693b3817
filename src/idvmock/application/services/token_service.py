from __future__ import annotations

import hmac
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import jwt

from idvmock.core.config import Settings
from idvmock.core.time import now_utc

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRY_SECONDS = 3600


class TokenService:
    """Issues and verifies the HS256 bearer tokens handed out by the mock provider."""

    def __init__(self, settings: Settings, clock: Callable[[], datetime] = now_utc) -> None:
        self.settings = settings
        self.clock = clock

    def issue_token(self, payload: dict[str, Any], expires_in: int = ACCESS_TOKEN_EXPIRY_SECONDS) -> str:
        now = self.clock().astimezone(timezone.utc).replace(microsecond=0)
        claims = {
            **payload,
            "iat": now,
            "exp": now + timedelta(seconds=expires_in),
            "iss": self.settings.base_url,
        }
        return jwt.encode(claims, self.settings.jwt_secret, algorithm=ALGORITHM)

    def issue_oauth2_token(self) -> str:
        return self.issue_token({"type": "oauth2", "scope": "full"}, ACCESS_TOKEN_EXPIRY_SECONDS)

    def issue_sdk_token(self, account_id: str, workflow_execution_id: str) -> str:
        return self.issue_token(
            {"accountId": account_id, "workflowExecutionId": workflow_execution_id, "type": "sdk"},
            self.settings.sdk_token_expiry_seconds,
        )

    def issue_api_token(self, workflow_execution_id: str) -> str:
        return self.issue_token(
            {"workflowExecutionId": workflow_execution_id, "type": "api"},
            ACCESS_TOKEN_EXPIRY_SECONDS,
        )

    def verify_token(self, token: str) -> dict[str, Any] | None:
        """Return the token claims, or None when the token is malformed, forged or expired."""
        try:
            return jwt.decode(
                token,
                self.settings.jwt_secret,
                algorithms=[ALGORITHM],
                options={"verify_iss": False},
            )
        except jwt.PyJWTError as exc:
            logger.debug("Rejected bearer token: %s", exc)
            return None

    def check_client_credentials(self, client_id: str, client_secret: str) -> bool:
        id_ok = hmac.compare_digest(client_id.encode("utf-8"), self.settings.client_id.encode("utf-8"))
        secret_ok = hmac.compare_digest(client_secret.encode("utf-8"), self.settings.client_secret.encode("utf-8"))
        return id_ok and secret_ok
