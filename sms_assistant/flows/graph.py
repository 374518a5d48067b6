"""LangGraph construction and node implementations.

received -> routed -> {handling_command | chatting} -> segmenting -> delivering -> done/failed
存储不可用时直接跳到结束节点，不发送任何短信。
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional, Tuple

from langgraph.graph import END, StateGraph
from langgraph.graph.state import CompiledStateGraph

from sms_assistant.commands.router import HELP_TEXT
from sms_assistant.domain.commands import HelpCommand, PlainText
from sms_assistant.domain.conversation import ConversationState
from sms_assistant.domain.exceptions import BackendRejected, BackendUnavailable, BusinessError, StoreUnavailable
from sms_assistant.flows.state import Failure, OrchestrationState
from sms_assistant.infrastructure.logging.logger import log_event
from sms_assistant.transport.base import SendResult

if TYPE_CHECKING:
    from sms_assistant.flows.orchestrator import ConversationOrchestrator

UNAVAILABLE_REPLY = "Sorry, the assistant is unavailable right now. Please try again later."
REJECTED_REPLY = "Sorry, the assistant could not answer that message. Try rephrasing it."


def _ctx(state: OrchestrationState) -> dict:
    return {"trace_id": state["trace_id"], "conversation_id": state["conversation_id"]}


def _store_failed(state: OrchestrationState, e: StoreUnavailable) -> OrchestrationState:
    log_event(logging.ERROR, "Conversation store unavailable", _ctx(state), code=e.code, error=e.message)
    state["failures"].append(Failure(stage="store", code=e.code, message=e.message, retryable=True))
    state["aborted"] = True
    return state


def route_node(state: OrchestrationState, orch: ConversationOrchestrator) -> OrchestrationState:
    state["stages"].append("routed")
    command = orch.router.parse(state["event"].raw_text)
    state["command"] = command
    log_event(logging.INFO, "route_node.command", _ctx(state), command=command.kind)
    return state


def command_node(state: OrchestrationState, orch: ConversationOrchestrator) -> OrchestrationState:
    state["stages"].append("handling_command")
    command = state["command"]
    received_at = state["event"].received_at

    def mutate(conv: ConversationState) -> str:
        orch.tracker.record_inbound(conv, chat=False, now=received_at)
        if isinstance(command, HelpCommand):
            return HELP_TEXT
        return orch.tracker.render(conv)

    try:
        state["reply"] = orch.store.apply(state["conversation_id"], mutate)
    except StoreUnavailable as e:
        return _store_failed(state, e)
    return state


def chat_node(state: OrchestrationState, orch: ConversationOrchestrator) -> OrchestrationState:
    state["stages"].append("chatting")
    command = state["command"]
    received_at = state["event"].received_at
    log_ctx = _ctx(state)

    def mutate(conv: ConversationState) -> Tuple[str, Optional[Failure]]:
        is_chat = bool(command.text.strip())
        orch.tracker.record_inbound(conv, chat=is_chat, now=received_at)
        if not is_chat:
            return "", None
        if orch.quota.exceeded(conv):
            log_event(logging.INFO, "Daily quota exceeded", log_ctx, received_today=conv.stats.received_today)
            return orch.quota.notice(conv), None
        try:
            reply = orch.engine.respond(conv, command.text, log_ctx)
        except BackendUnavailable as e:
            return UNAVAILABLE_REPLY, Failure(stage="chatting", code=e.code, message=e.message, retryable=True)
        except BackendRejected as e:
            return REJECTED_REPLY, Failure(stage="chatting", code=e.code, message=e.message, retryable=False)
        orch.tracker.record_assistant_reply(conv)
        return reply, None

    try:
        reply, failure = orch.store.apply(state["conversation_id"], mutate)
    except StoreUnavailable as e:
        return _store_failed(state, e)
    state["reply"] = reply
    if failure is not None:
        state["failures"].append(failure)
    return state


def segment_node(state: OrchestrationState, orch: ConversationOrchestrator) -> OrchestrationState:
    state["stages"].append("segmenting")
    state["segments"] = orch.segmenter.segment(state.get("reply") or "", orch.max_segment_length)
    return state


def deliver_node(state: OrchestrationState, orch: ConversationOrchestrator) -> OrchestrationState:
    state["stages"].append("delivering")
    destination = state["conversation_id"]
    delivered = 0
    for index, segment in enumerate(state["segments"]):
        result = _send(orch, destination, segment)
        if not result.ok:
            # 后续分段若继续发送会乱序，直接停止
            log_event(logging.WARNING, "Segment delivery failed", _ctx(state), index=index, error=result.error)
            state["failures"].append(
                Failure(
                    stage="delivering",
                    code="TRANSPORT_FAILURE",
                    message=result.error or "delivery failed",
                    retryable=result.retryable,
                )
            )
            break
        delivered += 1
    state["delivered"] = delivered

    if delivered:
        try:
            orch.store.apply(
                state["conversation_id"],
                lambda conv: orch.tracker.record_outbound(conv, segments=delivered),
            )
        except StoreUnavailable as e:
            # 短信已经发出，重试整个事件会重复发送，这里只记录
            log_event(logging.WARNING, "Outbound stats not recorded", _ctx(state), code=e.code, error=e.message)
    return state


def finish_node(state: OrchestrationState) -> OrchestrationState:
    state["stages"].append("failed" if state["failures"] else "done")
    log_event(
        logging.INFO,
        "Inbound event handled",
        _ctx(state),
        stages=state["stages"],
        delivered=state.get("delivered", 0),
        failures=[f.code for f in state["failures"]],
    )
    return state


def _send(orch: ConversationOrchestrator, destination: str, segment: str) -> SendResult:
    try:
        return orch.messaging.send(destination, segment)
    except BusinessError as e:
        return SendResult(ok=False, error=f"{e.code}: {e.message}", retryable=e.retryable)


def command_router(state: OrchestrationState) -> str:
    if isinstance(state.get("command"), PlainText):
        return "chat"
    return "command"


def reply_router(state: OrchestrationState) -> str:
    if state.get("aborted"):
        return "finish"
    return "segment"


def build_graph(orch: ConversationOrchestrator) -> CompiledStateGraph:
    graph = StateGraph(OrchestrationState)
    graph.add_node("route", lambda s: route_node(s, orch))
    graph.add_node("command", lambda s: command_node(s, orch))
    graph.add_node("chat", lambda s: chat_node(s, orch))
    graph.add_node("segment", lambda s: segment_node(s, orch))
    graph.add_node("deliver", lambda s: deliver_node(s, orch))
    graph.add_node("finish", finish_node)
    graph.set_entry_point("route")
    graph.add_conditional_edges("route", command_router, {"chat": "chat", "command": "command"})
    graph.add_conditional_edges("command", reply_router, {"segment": "segment", "finish": "finish"})
    graph.add_conditional_edges("chat", reply_router, {"segment": "segment", "finish": "finish"})
    graph.add_edge("segment", "deliver")
    graph.add_edge("deliver", "finish")
    graph.add_edge("finish", END)
    return graph.compile()
