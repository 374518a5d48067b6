"""State definition for the inbound-event LangGraph."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional, TypedDict

from sms_assistant.domain.commands import Command
from sms_assistant.domain.models import InboundEvent

FailureStage = Literal["store", "chatting", "delivering"]


@dataclass
class Failure:
    """编排过程中的一次失败。retryable 供外层 supervisor 决定是否重试。"""

    stage: FailureStage
    code: str
    message: str
    retryable: bool


@dataclass
class HandlingResult:
    """一次入站事件处理的结果。

    stages 记录实际经过的状态，例如
    ["received", "routed", "chatting", "segmenting", "delivering", "done"]。
    """

    conversation_id: str
    command: str
    reply: str
    segments: List[str]
    delivered: int
    failures: List[Failure] = field(default_factory=list)
    stages: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def status(self) -> str:
        return "done" if self.ok else "failed"

    @property
    def retryable(self) -> bool:
        return bool(self.failures) and all(f.retryable for f in self.failures)


class OrchestrationState(TypedDict, total=False):
    """State shared across LangGraph nodes."""

    event: InboundEvent
    conversation_id: str
    trace_id: str
    command: Optional[Command]
    reply: str
    segments: List[str]
    delivered: int
    failures: List[Failure]
    stages: List[str]
    aborted: bool
