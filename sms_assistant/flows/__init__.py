"""Inbound SMS orchestration built on LangGraph."""

from sms_assistant.flows.orchestrator import ConversationOrchestrator, conversation_id_for
from sms_assistant.flows.state import Failure, HandlingResult

__all__ = ["ConversationOrchestrator", "Failure", "HandlingResult", "conversation_id_for"]
