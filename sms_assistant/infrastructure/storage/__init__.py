from typing import Optional

from sms_assistant.config.settings import settings
from sms_assistant.domain.conversation import ConversationStore
from sms_assistant.infrastructure.storage.json_store import JsonConversationStore
from sms_assistant.infrastructure.storage.memory_store import InMemoryConversationStore


def create_store(backend: Optional[str] = None) -> ConversationStore:
    """根据名称创建会话存储，默认取配置中的 storage_backend。"""

    name = (backend or settings.storage_backend).lower()
    if name == "json":
        return JsonConversationStore(root=settings.storage_root)
    return InMemoryConversationStore()


__all__ = ["create_store", "InMemoryConversationStore", "JsonConversationStore"]
