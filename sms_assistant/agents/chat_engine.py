"""对话引擎核心模块。

负责：追加用户 Turn、按 FIFO 策略裁剪上下文、调用 ChatBackend、
仅在成功时追加助手 Turn。调用方需在 ConversationStore.apply()
内调用 respond()，以保证同一会话的变更串行执行。
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sms_assistant.agents.backend import ChatBackend
from sms_assistant.config.settings import settings
from sms_assistant.domain.conversation import ConversationState, Turn, utc_now
from sms_assistant.domain.exceptions import BackendError, BackendUnavailable
from sms_assistant.infrastructure.logging.logger import log_event


def estimate_tokens(text: str) -> int:
    """粗略估算：约 4 个字符一个 token。"""
    return len(text) // 4 + 1


@dataclass
class ContextWindow:
    """上下文裁剪策略：超出轮次或 token 预算时从最旧的 Turn 开始丢弃。

    最新的一条 Turn 永远保留，即使它单独就超出 token 预算。
    """

    max_turns: int
    max_tokens: Optional[int] = None

    def evict(self, history: List[Turn]) -> int:
        """原地裁剪 history，返回被丢弃的 Turn 数量。"""
        total = sum(estimate_tokens(t.text) for t in history)
        dropped = 0
        while len(history) > 1 and (
            len(history) > self.max_turns
            or (self.max_tokens is not None and total > self.max_tokens)
        ):
            total -= estimate_tokens(history.pop(0).text)
            dropped += 1
        return dropped


class ChatEngine:
    def __init__(self, backend: ChatBackend, window: Optional[ContextWindow] = None):
        self._backend = backend
        self._window = window or ContextWindow(
            max_turns=getattr(settings, "max_context_messages", 20),
            max_tokens=getattr(settings, "max_context_tokens", None),
        )

    def respond(self, state: ConversationState, user_text: str, log_ctx: Optional[Dict[str, Any]] = None) -> str:
        """执行一次对话。

        Args:
            state: 当前会话状态（由 store.apply 借出）
            user_text: 用户消息原文

        Returns:
            助手回复文本

        Raises:
            BackendUnavailable: 瞬时失败，history 中只保留用户 Turn
            BackendRejected: 永久失败，history 中只保留用户 Turn
        """
        log_ctx = dict(log_ctx or {}, conversation_id=state.conversation_id)

        # 1. 追加用户消息
        state.history.append(Turn(role="user", text=user_text, timestamp=utc_now()))

        # 2. 裁剪上下文
        dropped = self._window.evict(state.history)
        if dropped:
            log_event(logging.INFO, "Evicted oldest turns", log_ctx, dropped=dropped, kept=len(state.history))

        # 3. 调用后端
        log_event(logging.INFO, "Calling chat backend", log_ctx, turn_count=len(state.history))
        try:
            reply = self._backend.complete(list(state.history))
        except BackendError as e:
            log_event(logging.WARNING, "Chat backend failed", log_ctx, code=e.code, retryable=e.retryable)
            raise
        except Exception as e:
            log_event(logging.ERROR, "Chat backend raised unexpectedly", log_ctx, error=repr(e))
            raise BackendUnavailable(code="BACKEND_ERROR", message=str(e)) from e

        reply = (reply or "").strip()
        if not reply:
            raise BackendUnavailable(code="EMPTY_REPLY", message="chat backend returned an empty reply")

        # 4. 仅在成功时追加助手消息
        state.history.append(Turn(role="assistant", text=reply, timestamp=utc_now()))
        self._window.evict(state.history)
        log_event(logging.INFO, "Stored assistant turn", log_ctx, reply_chars=len(reply))
        return reply
