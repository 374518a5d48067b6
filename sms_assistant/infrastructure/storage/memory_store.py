from typing import Callable, Dict, List, Optional, TypeVar

from sms_assistant.domain.conversation import ConversationState, ConversationStore
from sms_assistant.infrastructure.storage.locks import KeyedLocks

T = TypeVar("T")


class InMemoryConversationStore(ConversationStore):
    """进程内会话存储，进程退出即丢失。"""

    def __init__(self) -> None:
        self._states: Dict[str, ConversationState] = {}
        self._locks = KeyedLocks()

    def get(self, conversation_id: str) -> Optional[ConversationState]:
        with self._locks.get(conversation_id):
            state = self._states.get(conversation_id)
            return state.snapshot() if state is not None else None

    def get_or_create(self, conversation_id: str) -> ConversationState:
        with self._locks.get(conversation_id):
            return self._load_or_init(conversation_id).snapshot()

    def apply(self, conversation_id: str, mutation: Callable[[ConversationState], T]) -> T:
        with self._locks.get(conversation_id):
            return mutation(self._load_or_init(conversation_id))

    def list_conversation_ids(self) -> List[str]:
        return sorted(self._states)

    def _load_or_init(self, conversation_id: str) -> ConversationState:
        state = self._states.get(conversation_id)
        if state is None:
            state = ConversationState(conversation_id=conversation_id)
            self._states[conversation_id] = state
        return state
