from typing import Optional

from sms_assistant.config.settings import settings
from sms_assistant.domain.conversation import ConversationState


class DailyQuota:
    """每日普通消息配额。limit 为 0 时不做限制。

    received_today 在判断前已包含当前消息，因此用 > 比较：
    第 limit 条消息仍会得到回复，第 limit + 1 条起才被拦截。
    !help、!stats 等命令不计入 received_today，也永远不会被拦截。
    """

    def __init__(self, limit: Optional[int] = None):
        self.limit = settings.daily_message_limit if limit is None else limit

    def exceeded(self, state: ConversationState) -> bool:
        return bool(self.limit) and state.stats.received_today > self.limit

    def notice(self, state: ConversationState) -> str:
        reset_at = state.stats.quota_reset_at
        return (
            f"You have reached the daily message limit of {self.limit}. "
            f"Your quota will reset at {reset_at:%Y-%m-%d %H:%M} UTC."
        )
