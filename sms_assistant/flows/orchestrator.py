"""入站短信编排入口。

ConversationOrchestrator.handle() 处理一条 InboundEvent：
解析命令 -> 内置回复或调用 ChatEngine -> 分段 -> 按序投递 -> 更新统计。
所有内部错误都被转换为 HandlingResult.failures，调用方据 retryable 决定是否重试；
只有非法输入（空的发送方号码）会直接抛出 ValidationError。
"""

import logging
from typing import Optional
from uuid import uuid4

from sms_assistant.agents.chat_engine import ChatEngine
from sms_assistant.commands.router import CommandRouter
from sms_assistant.config.settings import settings
from sms_assistant.domain.conversation import ConversationStore
from sms_assistant.domain.exceptions import ValidationError
from sms_assistant.domain.models import InboundEvent
from sms_assistant.flows.graph import build_graph
from sms_assistant.flows.state import HandlingResult, OrchestrationState
from sms_assistant.infrastructure.logging.logger import log_event
from sms_assistant.stats.quota import DailyQuota
from sms_assistant.stats.tracker import StatsTracker
from sms_assistant.transport.base import MessagingClient
from sms_assistant.transport.segmenter import ResponseSegmenter


def conversation_id_for(sender_id: str) -> str:
    cid = (sender_id or "").strip()
    if not cid:
        raise ValidationError(code="MISSING_SENDER", message="inbound event has no sender id")
    return cid


class ConversationOrchestrator:
    def __init__(
        self,
        store: ConversationStore,
        engine: ChatEngine,
        messaging: MessagingClient,
        router: Optional[CommandRouter] = None,
        tracker: Optional[StatsTracker] = None,
        quota: Optional[DailyQuota] = None,
        segmenter: Optional[ResponseSegmenter] = None,
        max_segment_length: Optional[int] = None,
    ):
        self.store = store
        self.engine = engine
        self.messaging = messaging
        self.router = router or CommandRouter()
        self.quota = quota or DailyQuota()
        self.tracker = tracker or StatsTracker(daily_limit=self.quota.limit)
        self.segmenter = segmenter or ResponseSegmenter()
        self.max_segment_length = max_segment_length or settings.max_segment_length
        self._graph = build_graph(self)

    def handle(self, event: InboundEvent) -> HandlingResult:
        cid = conversation_id_for(event.sender_id)
        trace_id = f"tr-{uuid4().hex}"
        log_event(
            logging.INFO,
            "Received inbound event",
            {"trace_id": trace_id, "conversation_id": cid},
            text_chars=len(event.raw_text or ""),
        )
        state: OrchestrationState = {
            "event": event,
            "conversation_id": cid,
            "trace_id": trace_id,
            "command": None,
            "reply": "",
            "segments": [],
            "delivered": 0,
            "failures": [],
            "stages": ["received"],
            "aborted": False,
        }
        final = self._graph.invoke(state)
        command = final.get("command")
        return HandlingResult(
            conversation_id=cid,
            command=command.kind if command is not None else "unknown",
            reply=final.get("reply") or "",
            segments=list(final.get("segments") or []),
            delivered=final.get("delivered", 0),
            failures=list(final.get("failures") or []),
            stages=list(final.get("stages") or []),
        )
