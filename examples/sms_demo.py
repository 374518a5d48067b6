"""Minimal local demonstration: replies are printed instead of texted."""

from sms_assistant.agents import ChatEngine, ProviderChatBackend
from sms_assistant.domain.models import InboundEvent
from sms_assistant.flows import ConversationOrchestrator
from sms_assistant.infrastructure.storage import create_store
from sms_assistant.providers import create_provider
from sms_assistant.transport import SendResult


class ConsoleMessagingClient:
    name = "console"

    def send(self, destination_id: str, text: str) -> SendResult:
        print(f"-> {destination_id}: {text}")
        return SendResult(ok=True)


if __name__ == "__main__":
    orchestrator = ConversationOrchestrator(
        store=create_store(),
        engine=ChatEngine(ProviderChatBackend(create_provider())),
        messaging=ConsoleMessagingClient(),
    )
    for text in ["!help", "What is the tallest mountain in Europe?", "!stats"]:
        print(f"<- +15550001111: {text}")
        result = orchestrator.handle(InboundEvent(sender_id="+15550001111", raw_text=text))
        if not result.ok:
            print("failures:", result.failures)
