from __future__ import annotations

import base64
import binascii
from typing import Any

from idvmock.application.services.token_service import TokenService
from idvmock.core.errors import AuthenticationError


def parse_basic_credentials(header: str | None) -> tuple[str, str]:
    if not header or not header.startswith("Basic "):
        raise AuthenticationError(
            "Basic authentication required",
            error_code="unauthorized",
            message_field="error_description",
        )
    try:
        decoded = base64.b64decode(header.split(" ", 1)[1].strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise AuthenticationError(
            "Malformed authorization header",
            error_code="invalid_request",
            message_field="error_description",
        ) from exc
    client_id, _, client_secret = decoded.partition(":")
    return client_id, client_secret


def require_basic_client(header: str | None, token_service: TokenService) -> str:
    client_id, client_secret = parse_basic_credentials(header)
    if not token_service.check_client_credentials(client_id, client_secret):
        raise AuthenticationError(
            "Invalid client credentials",
            error_code="invalid_client",
            message_field="error_description",
        )
    return client_id


def require_bearer_token(header: str | None, token_service: TokenService) -> dict[str, Any]:
    if not header or not header.startswith("Bearer "):
        raise AuthenticationError("Bearer token required", error_code="unauthorized")
    token = header.split(" ", 1)[1].strip()
    payload = token_service.verify_token(token)
    if payload is None:
        raise AuthenticationError("Invalid or expired token", error_code="invalid_token")
    return payload
