"""ChatBackend 协议与基于 ProviderClient 的实现。

ChatEngine 只依赖 ChatBackend.complete(turns) -> str；
ProviderChatBackend 负责：
1. 补上 system prompt，把 Turn 序列转成 ChatRequest；
2. 调用具体 ProviderClient；
3. 把 Provider 层异常归类为 BackendUnavailable（瞬时）或 BackendRejected（永久）；
4. 对瞬时错误按指数退避重试，重试次数与退避基数来自配置。
"""

import logging
import time
from typing import Callable, Optional, Protocol, Sequence

from sms_assistant.config.settings import settings
from sms_assistant.domain.conversation import Turn
from sms_assistant.domain.exceptions import (
    ApiError,
    BackendRejected,
    BackendUnavailable,
    NetworkError,
    RateLimitError,
    ValidationError,
)
from sms_assistant.domain.models import ChatMessage, ChatRequest, ChatResult
from sms_assistant.infrastructure.logging.logger import log_event
from sms_assistant.prompts import load_system_prompt
from sms_assistant.providers.base import ProviderClient

# 这些状态码视为瞬时错误，其余 4xx 视为请求本身有问题
TRANSIENT_HTTP_STATUSES = {408, 409}


class ChatBackend(Protocol):
    def complete(self, turns: Sequence[Turn]) -> str:
        ...


class ProviderChatBackend:
    def __init__(
        self,
        provider_client: ProviderClient,
        model: Optional[str] = None,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_backoff: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._provider = provider_client
        self._model = model or getattr(settings, "default_model", "sms-chat")
        self._system_prompt = load_system_prompt() if system_prompt is None else system_prompt
        self._temperature = settings.temperature if temperature is None else temperature
        self._max_retries = settings.backend_max_retries if max_retries is None else max_retries
        self._retry_backoff = settings.backend_retry_backoff if retry_backoff is None else retry_backoff
        self._sleep = sleep

    def complete(self, turns: Sequence[Turn]) -> str:
        req = self._build_request(turns)
        log_ctx = {"provider": self._provider.name, "model": self._model}
        attempt = 0
        while True:
            try:
                return self._call(req, log_ctx)
            except BackendUnavailable as e:
                if attempt >= self._max_retries:
                    raise
                delay = self._retry_backoff * (2 ** attempt)
                log_event(logging.WARNING, "Retrying backend call", log_ctx, attempt=attempt + 1, delay=delay, code=e.code)
                self._sleep(delay)
                attempt += 1

    def _build_request(self, turns: Sequence[Turn]) -> ChatRequest:
        messages = []
        if self._system_prompt:
            messages.append(ChatMessage(role="system", content=self._system_prompt))
        messages.extend(ChatMessage(role=t.role, content=t.text) for t in turns)
        return ChatRequest(
            provider=self._provider.name,
            model=self._model,
            messages=messages,
            temperature=self._temperature,
        )

    def _call(self, req: ChatRequest, log_ctx: dict) -> str:
        try:
            result: ChatResult = self._provider.chat(req)
        except (NetworkError, RateLimitError) as e:
            raise BackendUnavailable(code=e.code, message=e.message, provider=self._provider.name) from e
        except ApiError as e:
            if e.http_status in TRANSIENT_HTTP_STATUSES or e.http_status >= 500:
                raise BackendUnavailable(code=e.code, message=e.message, provider=self._provider.name) from e
            raise BackendRejected(code=e.code, message=e.message, provider=self._provider.name) from e
        except ValidationError as e:
            raise BackendRejected(code=e.code, message=e.message, provider=self._provider.name) from e

        if result.usage:
            log_event(
                logging.INFO,
                "Token usage",
                log_ctx,
                prompt_tokens=result.usage.prompt_tokens,
                completion_tokens=result.usage.completion_tokens,
                total_tokens=result.usage.total_tokens,
            )
        if not result.choices:
            raise BackendUnavailable(code="EMPTY_REPLY", message="provider returned no choices")
        choice = result.choices[0]
        if choice.finish_reason == "content_filter":
            raise BackendRejected(code="CONTENT_FILTER", message="reply blocked by content policy")
        return choice.message.content
