from __future__ import annotations

import json
import logging
import threading
from typing import Any

from idvmock.core.time import now_utc_iso

logger = logging.getLogger(__name__)


def build_callback_payload(account_id: str, workflow_execution_id: str, status: str) -> dict[str, Any]:
    return {
        "timestamp": now_utc_iso(),
        "account": {"id": account_id},
        "workflowExecution": {"id": workflow_execution_id, "status": status},
    }


class CallbackService:
    """Simulates provider callbacks. Payloads are logged after a delay, never delivered."""

    def __init__(self, delay_ms: int) -> None:
        self.delay_ms = delay_ms

    def schedule(
        self,
        callback_url: str,
        account_id: str,
        workflow_execution_id: str,
        status: str,
    ) -> threading.Timer:
        timer = threading.Timer(
            self.delay_ms / 1000,
            self.emit,
            args=(callback_url, account_id, workflow_execution_id, status),
        )
        timer.daemon = True
        timer.start()
        return timer

    def emit(self, callback_url: str, account_id: str, workflow_execution_id: str, status: str) -> dict[str, Any]:
        payload = build_callback_payload(account_id, workflow_execution_id, status)
        logger.info("Callback would be sent to: %s", callback_url)
        logger.info("Callback payload: %s", json.dumps(payload, indent=2))
        return payload
