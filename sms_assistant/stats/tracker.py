"""会话用量统计。

所有方法都只在 ConversationStore.apply() 的回调中调用，
因此本身不需要加锁。计数器单调递增，没有回退路径。
"""

from datetime import datetime
from typing import Optional

from sms_assistant.config.settings import settings
from sms_assistant.domain.conversation import ConversationState, QUOTA_WINDOW, utc_now


class StatsTracker:
    def __init__(self, cost_per_message: Optional[float] = None, daily_limit: Optional[int] = None):
        self._cost_per_message = settings.cost_per_message if cost_per_message is None else cost_per_message
        self._daily_limit = settings.daily_message_limit if daily_limit is None else daily_limit

    def record_inbound(self, state: ConversationState, chat: bool = True, now: Optional[datetime] = None) -> None:
        """记录一条入站消息；chat=False 表示命令或空消息，不计入聊天数。"""
        now = now or utc_now()
        stats = state.stats
        self.roll_quota_window(state, now)
        stats.inbound_count += 1
        if chat:
            stats.message_count += 1
            stats.received_today += 1
        stats.last_active_at = now
        self._refresh_cost(state)

    def record_assistant_reply(self, state: ConversationState) -> None:
        state.stats.assistant_reply_count += 1
        self._refresh_cost(state)

    def record_outbound(self, state: ConversationState, segments: int = 1, now: Optional[datetime] = None) -> None:
        state.stats.outbound_count += segments
        state.stats.last_active_at = now or utc_now()

    @staticmethod
    def roll_quota_window(state: ConversationState, now: datetime) -> None:
        """配额窗口从第一条入站消息的时间开始计算，每 24 小时重置一次。"""
        stats = state.stats
        if stats.inbound_count == 0 or now >= stats.quota_reset_at:
            stats.received_today = 0
            stats.quota_reset_at = now + QUOTA_WINDOW

    def render(self, state: ConversationState) -> str:
        s = state.stats
        today = f"{s.received_today}/{self._daily_limit}" if self._daily_limit else str(s.received_today)
        return (
            f"Chat messages: {s.message_count}, replies: {s.assistant_reply_count}, "
            f"total received: {s.inbound_count}, texts sent: {s.outbound_count}, "
            f"today: {today}, est. cost: ${s.estimated_cost:.2f}, "
            f"since {s.created_at:%Y-%m-%d}"
        )

    def _refresh_cost(self, state: ConversationState) -> None:
        s = state.stats
        s.estimated_cost = round((s.message_count + s.assistant_reply_count) * self._cost_per_message, 4)
