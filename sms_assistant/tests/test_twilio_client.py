import httpx
import pytest

from sms_assistant.domain.exceptions import ValidationError
from sms_assistant.transport.twilio_client import TwilioMessagingClient


class SettingsStub:
    twilio_account_sid = "AC123"
    twilio_auth_token = "secret"
    twilio_phone_number = "+15550009999"
    twilio_base_url = "https://api.twilio.com/2010-04-01"
    http_timeout = 1.0


class Resp:
    def __init__(self, status_code, data=None, text=""):
        self.status_code = status_code
        self._data = data or {}
        self.text = text

    def json(self):
        return self._data


def _client(resp, captured=None):
    class Client:
        def __init__(self, *a, **kw):
            pass

        def __enter__(self):
            return self

        def __exit__(self, *a):
            return False

        def post(self, url, data=None, auth=None, **_):
            if captured is not None:
                captured.update(url=url, data=data, auth=auth)
            if isinstance(resp, Exception):
                raise resp
            return resp

    return Client


def test_twilio_send_posts_form(monkeypatch):
    captured = {}
    monkeypatch.setattr("httpx.Client", _client(Resp(201, {"sid": "SM1"}), captured))
    result = TwilioMessagingClient(SettingsStub()).send("+15550001111", "hello")
    assert result.ok
    assert result.provider_message_id == "SM1"
    assert captured["url"] == "https://api.twilio.com/2010-04-01/Accounts/AC123/Messages.json"
    assert captured["data"] == {"From": "+15550009999", "To": "+15550001111", "Body": "hello"}
    assert captured["auth"] == ("AC123", "secret")


@pytest.mark.parametrize("status, retryable", [(500, True), (429, True), (400, False)])
def test_twilio_send_reports_http_failure(monkeypatch, status, retryable):
    monkeypatch.setattr("httpx.Client", _client(Resp(status, text="nope")))
    result = TwilioMessagingClient(SettingsStub()).send("+15550001111", "hello")
    assert not result.ok
    assert result.retryable is retryable
    assert str(status) in result.error


def test_twilio_send_network_error_is_retryable(monkeypatch):
    monkeypatch.setattr("httpx.Client", _client(httpx.ConnectError("down")))
    result = TwilioMessagingClient(SettingsStub()).send("+15550001111", "hello")
    assert not result.ok
    assert result.retryable


def test_twilio_missing_credentials():
    class Missing(SettingsStub):
        twilio_auth_token = None

    with pytest.raises(ValidationError):
        TwilioMessagingClient(Missing()).send("+15550001111", "hello")
