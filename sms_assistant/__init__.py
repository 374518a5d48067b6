"""SMS Assistant 顶层包。

该包把短信通道与对话式大模型桥接起来，包括配置加载、领域模型、
Provider 适配、命令解析、对话引擎、回复分段、用量统计、
会话持久化以及基于 LangGraph 的入站事件编排。
"""

from sms_assistant.domain.models import InboundEvent
from sms_assistant.flows import ConversationOrchestrator, HandlingResult

__all__ = ["ConversationOrchestrator", "HandlingResult", "InboundEvent"]
