"""OpenAI 兼容的 chat/completions Provider 适配器。

OpenAI、Kimi（Moonshot）、GLM（BigModel）的接口字段一致：
- URL: {base_url}/chat/completions
- 认证: Authorization: Bearer <api_key>

本实现只依赖公共字段：model/messages/temperature/max_tokens/top_p。
"""

from typing import Any, Dict

import httpx

from sms_assistant.config.settings import settings
from sms_assistant.domain.exceptions import ApiError, NetworkError, RateLimitError, ValidationError
from sms_assistant.domain.models import ChatChoice, ChatMessage, ChatRequest, ChatResult, ChatUsage
from sms_assistant.providers.registry import ModelConfig, ProviderConfig


class ChatCompletionsClient:
    """按 ProviderConfig 参数化的通用客户端。"""

    def __init__(self, provider_cfg: ProviderConfig, cfg=settings):
        self._provider = provider_cfg
        self._settings = cfg
        self.name = provider_cfg.name

    def chat(self, req: ChatRequest) -> ChatResult:
        api_key = getattr(self._settings, f"{self._provider.settings_prefix}_api_key", None)
        if not api_key:
            raise ValidationError(
                code="MISSING_API_KEY",
                message=f"{self._provider.settings_prefix.upper()}_API_KEY not set",
            )
        model_cfg = self._provider.models.get(req.model)
        if model_cfg is None:
            raise ValidationError(code="UNKNOWN_MODEL", message=f"{self.name} has no model {req.model!r}")
        payload = self._build_payload(req, model_cfg)
        base = getattr(self._settings, f"{self._provider.settings_prefix}_base_url", None) or self._provider.base_url
        try:
            with httpx.Client(timeout=self._settings.http_timeout, trust_env=False) as client:
                resp = client.post(
                    f"{base}/chat/completions",
                    json=payload,
                    headers={
                        "Authorization": f"Bearer {api_key}",
                        "Content-Type": "application/json",
                    },
                )
        except httpx.RequestError as e:
            raise NetworkError(code="NETWORK_ERROR", message=str(e), provider=self.name)
        if resp.status_code == 429:
            raise RateLimitError(code="RATE_LIMIT", message=f"{self.name} rate limit", http_status=429)
        if resp.status_code >= 400:
            raise ApiError(code="API_ERROR", message=resp.text, http_status=resp.status_code, provider=self.name)
        try:
            data = resp.json()
        except ValueError as e:
            raise ApiError(code="BAD_RESPONSE", message=str(e), http_status=502, provider=self.name)
        return self._parse_response(data, req)

    # ---- 辅助方法 ----

    def _build_payload(self, req: ChatRequest, model_cfg: ModelConfig) -> dict:
        return {
            "model": model_cfg.provider_model,
            "messages": [self._message_to_payload(m) for m in req.messages],
            "temperature": req.temperature or model_cfg.default_temperature,
            "max_tokens": req.max_tokens or model_cfg.max_tokens,
            "top_p": req.top_p,
            "stream": False,
        }

    def _parse_response(self, data: dict, req: ChatRequest) -> ChatResult:
        choices: list[ChatChoice] = []
        for i, ch in enumerate(data.get("choices", [])):
            msg = ch.get("message") or {}
            cm = ChatMessage(role=msg.get("role") or "assistant", content=msg.get("content") or "")
            choices.append(ChatChoice(index=i, message=cm, finish_reason=ch.get("finish_reason")))
        usage_raw = data.get("usage") or {}
        usage = ChatUsage(
            prompt_tokens=usage_raw.get("prompt_tokens", 0),
            completion_tokens=usage_raw.get("completion_tokens", 0),
            total_tokens=usage_raw.get("total_tokens", 0),
        )
        return ChatResult(provider=self.name, model=req.model, choices=choices, usage=usage, raw=data)

    @staticmethod
    def _message_to_payload(message: ChatMessage) -> Dict[str, Any]:
        return {"role": message.role, "content": message.content}
