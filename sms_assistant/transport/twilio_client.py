"""Twilio SMS 适配器。

- URL: {base_url}/Accounts/{account_sid}/Messages.json
- 认证: HTTP Basic（account_sid / auth_token）
- 请求体: application/x-www-form-urlencoded，字段 From/To/Body
"""

import httpx

from sms_assistant.config.settings import settings
from sms_assistant.domain.exceptions import ValidationError
from sms_assistant.transport.base import SendResult


class TwilioMessagingClient:
    """Twilio Programmable Messaging 客户端实现。"""

    name = "twilio"

    def __init__(self, cfg=settings):
        self._settings = cfg

    def send(self, destination_id: str, text: str) -> SendResult:
        sid = getattr(self._settings, "twilio_account_sid", None)
        token = getattr(self._settings, "twilio_auth_token", None)
        sender = getattr(self._settings, "twilio_phone_number", None)
        if not (sid and token and sender):
            raise ValidationError(code="MISSING_TWILIO_CONFIG", message="Twilio credentials not set")

        base = getattr(self._settings, "twilio_base_url", None) or "https://api.twilio.com/2010-04-01"
        try:
            with httpx.Client(timeout=self._settings.http_timeout, trust_env=False) as client:
                resp = client.post(
                    f"{base}/Accounts/{sid}/Messages.json",
                    data={"From": sender, "To": destination_id, "Body": text},
                    auth=(sid, token),
                )
        except httpx.RequestError as e:
            return SendResult(ok=False, error=f"NETWORK_ERROR: {e}", retryable=True)
        if resp.status_code == 429 or resp.status_code >= 500:
            return SendResult(ok=False, error=f"HTTP {resp.status_code}: {resp.text}", retryable=True)
        if resp.status_code >= 400:
            return SendResult(ok=False, error=f"HTTP {resp.status_code}: {resp.text}")
        try:
            message_sid = resp.json().get("sid")
        except ValueError:
            message_sid = None
        return SendResult(ok=True, provider_message_id=message_sid)
