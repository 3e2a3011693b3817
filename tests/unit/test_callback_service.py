import logging

from idvmock.application.services.callback_service import CallbackService, build_callback_payload


def test_build_callback_payload_shape() -> None:
    payload = build_callback_payload("acc_1", "wfe_1", "APPROVED_VERIFIED")

    assert payload["account"] == {"id": "acc_1"}
    assert payload["workflowExecution"] == {"id": "wfe_1", "status": "APPROVED_VERIFIED"}
    assert payload["timestamp"].endswith("Z")


def test_scheduled_callback_is_logged_not_sent(caplog) -> None:
    caplog.set_level(logging.INFO, logger="idvmock.application.services.callback_service")
    service = CallbackService(delay_ms=0)

    timer = service.schedule("https://example.test/hook", "acc_1", "wfe_1", "REQUIRES_MANUAL_REVIEW")
    timer.join(timeout=5)

    assert not timer.is_alive()
    assert "Callback would be sent to: https://example.test/hook" in caplog.text
    assert "REQUIRES_MANUAL_REVIEW" in caplog.text
