"""会话状态模型与 ConversationStore 抽象。

ConversationState 由 ConversationStore 独占：其他组件只能在
store.apply() 的回调期间借用它，回调返回后不得保留引用。
"""

import copy
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Literal, Optional, Protocol, TypeVar

TurnRole = Literal["user", "assistant"]

T = TypeVar("T")

QUOTA_WINDOW = timedelta(days=1)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Turn:
    """会话中的一条消息，追加后不可修改。"""

    role: TurnRole
    text: str
    timestamp: datetime


@dataclass
class ConversationStats:
    """单个会话的用量统计。

    - message_count: 收到的普通聊天消息数（不含命令）。
    - assistant_reply_count: 模型实际产生的回复数。
    - inbound_count: 收到的全部消息数（含命令）。
    - outbound_count: 成功交给网关的短信分段数。
    - received_today / quota_reset_at: 每日配额窗口。
    """

    created_at: datetime
    last_active_at: datetime
    quota_reset_at: datetime
    message_count: int = 0
    assistant_reply_count: int = 0
    inbound_count: int = 0
    outbound_count: int = 0
    received_today: int = 0
    estimated_cost: float = 0.0

    @classmethod
    def fresh(cls, now: Optional[datetime] = None) -> "ConversationStats":
        now = now or utc_now()
        return cls(created_at=now, last_active_at=now, quota_reset_at=now + QUOTA_WINDOW)


@dataclass
class ConversationState:
    conversation_id: str
    history: List[Turn] = field(default_factory=list)
    stats: ConversationStats = field(default_factory=ConversationStats.fresh)

    def snapshot(self) -> "ConversationState":
        """返回与存储解耦的深拷贝，供只读场景使用。"""
        return copy.deepcopy(self)


class ConversationStore(Protocol):
    def get(self, conversation_id: str) -> Optional[ConversationState]:
        """只读查询，会话不存在时返回 None，不会创建。"""
        ...

    def get_or_create(self, conversation_id: str) -> ConversationState:
        ...

    def apply(self, conversation_id: str, mutation: Callable[[ConversationState], T]) -> T:
        """在该会话的独占锁内执行一次变更，并返回变更函数的结果。"""
        ...

    def list_conversation_ids(self) -> List[str]:
        ...
