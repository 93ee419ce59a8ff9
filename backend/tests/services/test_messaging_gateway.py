"""WhatsAppOtpGateway tests: one GET per dispatch, success only on "return": true."""

import httpx
import pytest

from samaj_diary.core.errors import MessagingGatewayError
from samaj_diary.infrastructure.messaging_gateway import WhatsAppOtpGateway


def _gateway(handler):
    return WhatsAppOtpGateway(
        "https://gateway.test/dev/whatsapp",
        auth_key="key", message_id="42", phone_number_id="7",
        transport=httpx.MockTransport(handler),
    )


async def test_successful_dispatch_sends_template_params():
    seen = []

    def handler(request):
        seen.append(dict(request.url.params))
        return httpx.Response(200, json={"return": True, "request_id": "r1"})

    assert await _gateway(handler).send_otp("9876543210", "123456") is True
    assert seen == [{
        "authorization": "key",
        "message_id": "42",
        "phone_number_id": "7",
        "numbers": "9876543210",
        "variables_values": "123456",
    }]


async def test_provider_rejection_returns_false():
    handler = lambda r: httpx.Response(200, json={"return": False, "message": "bad key"})  # noqa: E731
    assert await _gateway(handler).send_otp("9876543210", "123456") is False


async def test_non_json_body_returns_false():
    handler = lambda r: httpx.Response(502, text="<html>bad gateway</html>")  # noqa: E731
    assert await _gateway(handler).send_otp("9876543210", "123456") is False


async def test_transport_failure_raises():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(MessagingGatewayError):
        await _gateway(handler).send_otp("9876543210", "123456")


async def test_code_is_never_logged(caplog):
    handler = lambda r: httpx.Response(200, json={"return": True})  # noqa: E731
    with caplog.at_level("DEBUG", logger="samaj_diary.infrastructure.messaging_gateway"):
        await _gateway(handler).send_otp("9876543210", "918273")
    ours = [r.getMessage() for r in caplog.records if r.name.startswith("samaj_diary")]
    assert ours
    assert not any("918273" in m or "9876543210" in m for m in ours)
