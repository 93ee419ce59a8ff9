"""WhatsApp OTP Gateway: dispatch a templated one-time code through the SMS provider.

Invariants:
    - One GET per dispatch; no retries
    - Success iff the JSON body has "return": true
    - A provider-side rejection returns False; a transport failure raises
      MessagingGatewayError. Neither path reports success.
    - The code is never logged
"""

import logging

import httpx

from samaj_diary.core.errors import MessagingGatewayError
from samaj_diary.core.validation import mask_mobile

logger = logging.getLogger(__name__)


class WhatsAppOtpGateway:
    """Sends the OTP template variable to one 10-digit number."""

    def __init__(
        self,
        base_url: str,
        auth_key: str,
        message_id: str,
        phone_number_id: str,
        timeout_seconds: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url
        self.auth_key = auth_key
        self.message_id = message_id
        self.phone_number_id = phone_number_id
        self.client = httpx.AsyncClient(
            timeout=timeout_seconds, transport=transport,
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    async def send_otp(self, mobile: str, code: str) -> bool:
        params = {
            "authorization": self.auth_key,
            "message_id": self.message_id,
            "phone_number_id": self.phone_number_id,
            "numbers": mobile,
            "variables_values": code,
        }
        try:
            response = await self.client.get(self.base_url, params=params)
            result = response.json()
        except httpx.HTTPError as e:
            logger.error(f"OTP gateway unreachable for {mask_mobile(mobile)}: {e}")
            raise MessagingGatewayError(type(e).__name__)
        except ValueError:
            logger.error(
                f"OTP gateway returned non-JSON (HTTP {response.status_code})",
            )
            return False

        if isinstance(result, dict) and result.get("return") is True:
            logger.info(f"OTP dispatched to {mask_mobile(mobile)}")
            return True
        message = result.get("message") if isinstance(result, dict) else result
        logger.error(f"OTP gateway rejected dispatch: {message}")
        return False
