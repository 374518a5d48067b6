from sms_assistant.agents.backend import ChatBackend, ProviderChatBackend
from sms_assistant.agents.chat_engine import ChatEngine, ContextWindow

__all__ = ["ChatBackend", "ChatEngine", "ContextWindow", "ProviderChatBackend"]
