"""对外 API 服务模块。

提供简化的函数接口供 Webhook 服务器等上层应用调用。
Webhook 签名校验和 HTTP 服务本身不在本模块范围内。
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from sms_assistant.agents.backend import ProviderChatBackend
from sms_assistant.agents.chat_engine import ChatEngine
from sms_assistant.config.settings import settings
from sms_assistant.domain.conversation import ConversationStore
from sms_assistant.domain.exceptions import BusinessError, ValidationError
from sms_assistant.domain.models import InboundEvent
from sms_assistant.flows.orchestrator import ConversationOrchestrator, conversation_id_for
from sms_assistant.flows.state import HandlingResult
from sms_assistant.infrastructure.logging.logger import logger
from sms_assistant.infrastructure.storage import create_store
from sms_assistant.providers import create_provider
from sms_assistant.transport.twilio_client import TwilioMessagingClient


_store: Optional[ConversationStore] = None
_orchestrator: Optional[ConversationOrchestrator] = None


def get_default_orchestrator() -> ConversationOrchestrator:
    """获取默认的编排器实例（单例）。"""
    global _store, _orchestrator
    if _store is None:
        _store = create_store()
    if _orchestrator is None:
        backend = ProviderChatBackend(create_provider())
        _orchestrator = ConversationOrchestrator(
            store=_store,
            engine=ChatEngine(backend),
            messaging=TwilioMessagingClient(settings),
        )
    return _orchestrator


def handle_inbound(sender_id: str, text: str, received_at: Optional[datetime] = None) -> Dict[str, Any]:
    """处理一条入站短信并返回处理摘要。

    Args:
        sender_id: 发送方号码
        text: 短信正文
        received_at: 网关收到消息的时间（可选）

    Returns:
        包含会话ID、状态、分段数、失败信息的字典

    Raises:
        ValidationError: 发送方号码为空
    """
    event = InboundEvent(
        sender_id=sender_id,
        raw_text=text,
        received_at=received_at or datetime.now(timezone.utc),
    )
    try:
        result = get_default_orchestrator().handle(event)
    except ValidationError as e:
        logger.error(f"Inbound event rejected: {e}", extra={"extra": {"code": e.code}})
        raise
    return _summary(result)


def handle_twilio_webhook(form: Mapping[str, str]) -> Dict[str, Any]:
    """处理 Twilio 入站 Webhook 表单（字段 From / Body）。"""
    sender = form.get("From")
    if not sender:
        raise ValidationError(code="MISSING_SENDER", message="webhook form has no 'From' field")
    return handle_inbound(sender, form.get("Body") or "")


def list_conversations() -> List[str]:
    """列出所有会话 ID（即发送方号码）。"""
    return get_default_orchestrator().store.list_conversation_ids()


def get_conversation_history(sender_id: str) -> Dict[str, Any]:
    """获取会话历史与统计（只读，不会创建会话）。

    Raises:
        BusinessError: 该号码从未发来过消息（CONVERSATION_NOT_FOUND）
    """
    cid = conversation_id_for(sender_id)
    state = get_default_orchestrator().store.get(cid)
    if state is None:
        raise BusinessError(code="CONVERSATION_NOT_FOUND", message=f"no conversation for {cid}", http_status=404)
    stats = state.stats
    return {
        "conversation_id": state.conversation_id,
        "history": [
            {"role": t.role, "text": t.text, "timestamp": t.timestamp.isoformat()}
            for t in state.history
        ],
        "stats": {
            "message_count": stats.message_count,
            "assistant_reply_count": stats.assistant_reply_count,
            "inbound_count": stats.inbound_count,
            "outbound_count": stats.outbound_count,
            "received_today": stats.received_today,
            "estimated_cost": stats.estimated_cost,
            "created_at": stats.created_at.isoformat(),
            "last_active_at": stats.last_active_at.isoformat(),
        },
    }


def _summary(result: HandlingResult) -> Dict[str, Any]:
    return {
        "conversation_id": result.conversation_id,
        "command": result.command,
        "status": result.status,
        "segments": len(result.segments),
        "delivered": result.delivered,
        "retryable": result.retryable,
        "failures": [
            {"stage": f.stage, "code": f.code, "message": f.message, "retryable": f.retryable}
            for f in result.failures
        ],
    }
