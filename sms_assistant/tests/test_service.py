import pytest

from sms_assistant.agents.chat_engine import ChatEngine, ContextWindow
from sms_assistant.api import service
from sms_assistant.domain.exceptions import BusinessError, ValidationError
from sms_assistant.flows.orchestrator import ConversationOrchestrator
from sms_assistant.infrastructure.storage.memory_store import InMemoryConversationStore
from sms_assistant.stats.quota import DailyQuota
from sms_assistant.transport.base import SendResult


class FakeBackend:
    def complete(self, turns):
        return f"echo: {turns[-1].text}"


class RecordingMessenger:
    name = "fake"

    def __init__(self):
        self.sent = []

    def send(self, destination_id, text):
        self.sent.append((destination_id, text))
        return SendResult(ok=True)


@pytest.fixture
def messenger(monkeypatch):
    store = InMemoryConversationStore()
    m = RecordingMessenger()
    orch = ConversationOrchestrator(
        store=store,
        engine=ChatEngine(FakeBackend(), ContextWindow(max_turns=20)),
        messaging=m,
        quota=DailyQuota(limit=0),
    )
    monkeypatch.setattr(service, "_store", store)
    monkeypatch.setattr(service, "_orchestrator", orch)
    return m


def test_handle_twilio_webhook_chat(messenger):
    summary = service.handle_twilio_webhook({"From": "+15550001111", "Body": "ping"})
    assert summary["conversation_id"] == "+15550001111"
    assert summary["status"] == "done"
    assert summary["command"] == "plain_text"
    assert summary["delivered"] == 1
    assert summary["failures"] == []
    assert messenger.sent == [("+15550001111", "echo: ping")]


def test_handle_twilio_webhook_requires_sender(messenger):
    with pytest.raises(ValidationError):
        service.handle_twilio_webhook({"Body": "ping"})


def test_history_and_listing(messenger):
    service.handle_inbound("+15550001111", "hello")
    service.handle_inbound("+15550002222", "!help")
    assert service.list_conversations() == ["+15550001111", "+15550002222"]
    data = service.get_conversation_history("+15550001111")
    assert [h["role"] for h in data["history"]] == ["user", "assistant"]
    assert data["stats"]["message_count"] == 1
    assert data["stats"]["assistant_reply_count"] == 1


def test_history_of_unknown_sender_does_not_create_conversation(messenger):
    service.handle_inbound("+15550001111", "hello")
    with pytest.raises(BusinessError) as exc:
        service.get_conversation_history("+15559999999")
    assert exc.value.code == "CONVERSATION_NOT_FOUND"
    assert exc.value.http_status == 404
    assert service.list_conversations() == ["+15550001111"]
