import httpx
import pytest

from sms_assistant.domain.exceptions import ApiError, NetworkError, RateLimitError, ValidationError
from sms_assistant.domain.models import ChatMessage, ChatRequest
from sms_assistant.providers import ChatCompletionsClient, create_provider
from sms_assistant.providers.registry import OPENAI_CONFIG


class SettingsStub:
    openai_api_key = "sk-test-0123456789"
    http_timeout = 1.0
    openai_base_url = "https://api.openai.com/v1"


def _req():
    return ChatRequest(provider="openai", model="sms-chat", messages=[ChatMessage(role="user", content="hi")])


def _client_returning(resp, captured=None):
    class Client:
        def __init__(self, *a, **kw):
            pass

        def __enter__(self):
            return self

        def __exit__(self, *a):
            return False

        def post(self, url, json=None, headers=None, **_):
            if captured is not None:
                captured["url"] = url
                captured["payload"] = json
                captured["headers"] = headers
            if isinstance(resp, Exception):
                raise resp
            return resp

    return Client


class Resp:
    def __init__(self, status_code=200, data=None, text=""):
        self.status_code = status_code
        self._data = data
        self.text = text

    def json(self):
        return self._data


def test_chat_completions_client_basic(monkeypatch):
    captured = {}
    data = {
        "choices": [{"index": 0, "message": {"role": "assistant", "content": "ok"}, "finish_reason": "stop"}],
        "usage": {"prompt_tokens": 1, "completion_tokens": 1, "total_tokens": 2},
    }
    monkeypatch.setattr("httpx.Client", _client_returning(Resp(data=data), captured))
    res = ChatCompletionsClient(OPENAI_CONFIG, SettingsStub()).chat(_req())
    assert res.choices[0].message.content == "ok"
    assert res.usage.total_tokens == 2
    assert captured["url"] == "https://api.openai.com/v1/chat/completions"
    assert captured["payload"]["model"] == "gpt-4o"
    assert captured["payload"]["messages"] == [{"role": "user", "content": "hi"}]
    assert captured["headers"]["Authorization"] == "Bearer sk-test-0123456789"


def test_chat_completions_client_rate_limit(monkeypatch):
    monkeypatch.setattr("httpx.Client", _client_returning(Resp(status_code=429)))
    with pytest.raises(RateLimitError):
        ChatCompletionsClient(OPENAI_CONFIG, SettingsStub()).chat(_req())


def test_chat_completions_client_api_error(monkeypatch):
    monkeypatch.setattr("httpx.Client", _client_returning(Resp(status_code=500, text="boom")))
    with pytest.raises(ApiError) as exc:
        ChatCompletionsClient(OPENAI_CONFIG, SettingsStub()).chat(_req())
    assert exc.value.http_status == 500


def test_chat_completions_client_network_error(monkeypatch):
    monkeypatch.setattr("httpx.Client", _client_returning(httpx.ConnectError("unreachable")))
    with pytest.raises(NetworkError):
        ChatCompletionsClient(OPENAI_CONFIG, SettingsStub()).chat(_req())


def test_chat_completions_client_missing_key():
    class NoKey(SettingsStub):
        openai_api_key = None

    with pytest.raises(ValidationError):
        ChatCompletionsClient(OPENAI_CONFIG, NoKey()).chat(_req())


def test_create_provider_default(monkeypatch):
    class DummySettings:
        default_provider = "openai"
        http_timeout = 1.0

    monkeypatch.setattr("sms_assistant.providers.settings", DummySettings())
    provider = create_provider()
    assert isinstance(provider, ChatCompletionsClient)
    assert provider.name == "openai"


def test_create_provider_explicit(monkeypatch):
    class DummySettings:
        default_provider = "openai"
        http_timeout = 1.0

    monkeypatch.setattr("sms_assistant.providers.settings", DummySettings())
    assert create_provider("KIMI").name == "kimi"
    with pytest.raises(KeyError):
        create_provider("nope")
