"""配置管理模块。

支持从 .env、config.yaml 以及环境变量加载配置。
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_config_from_yaml() -> Dict[str, Any]:
    """从 config.yaml 加载配置（若存在）。"""
    candidates = []
    explicit = os.getenv("SMS_ASSISTANT_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend([
        Path.cwd() / "config.yaml",
        Path(__file__).resolve().parents[2] / "config.yaml",
    ])

    seen: set[Path] = set()
    for path in candidates:
        if not path or path in seen:
            continue
        seen.add(path)
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}


class Settings(BaseSettings):
    """短信助手配置（使用 Pydantic）。"""

    # ---- Provider 相关配置 ----
    default_provider: str = Field(
        default="openai",
        description="默认使用的 Provider 名称，例如 openai、kimi、glm",
    )
    default_model: str = Field(
        default="sms-chat",
        description="逻辑模型名，由 registry 映射为具体厂商模型",
    )
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="生成温度")

    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API 密钥")
    openai_base_url: str = Field(default="https://api.openai.com/v1", description="OpenAI API 基础URL")
    kimi_api_key: Optional[str] = Field(default=None, description="Kimi API 密钥")
    kimi_base_url: str = Field(default="https://api.moonshot.cn/v1", description="Kimi API 基础URL")
    glm_api_key: Optional[str] = Field(default=None, description="GLM API 密钥")
    glm_base_url: str = Field(
        default="https://open.bigmodel.cn/api/paas/v4",
        description="GLM API 基础URL",
    )
    http_timeout: float = Field(default=30.0, ge=1.0, description="HTTP 超时时间（秒）")

    # ---- 后端重试 ----
    backend_max_retries: int = Field(default=2, ge=0, le=10, description="瞬时错误的最大重试次数")
    backend_retry_backoff: float = Field(default=1.0, ge=0.0, description="重试退避基数（秒），按 2^n 递增")

    # ---- 存储与日志 ----
    storage_backend: Literal["memory", "json"] = Field(default="memory", description="会话存储实现")
    storage_root: str = Field(default=".storage", description="存储根目录")
    log_dir: str = Field(default="logs", description="日志目录")
    log_redact_content: bool = Field(default=False, description="是否脱敏日志内容")

    # ---- 会话策略 ----
    max_context_messages: int = Field(default=20, ge=1, le=200, description="上下文保留的最大轮次数")
    max_context_tokens: int = Field(default=3000, ge=1, description="上下文保留的估算 token 上限")
    max_segment_length: int = Field(default=1600, ge=1, description="单条短信最大字符数")
    daily_message_limit: int = Field(default=10, ge=0, description="每日普通消息上限，0 表示不限制")
    cost_per_message: float = Field(default=0.01, ge=0.0, description="每条消息的估算费用（美元）")

    # ---- Twilio ----
    twilio_account_sid: Optional[str] = Field(default=None, description="Twilio Account SID")
    twilio_auth_token: Optional[str] = Field(default=None, description="Twilio Auth Token")
    twilio_phone_number: Optional[str] = Field(default=None, description="发送短信使用的号码")
    twilio_base_url: str = Field(default="https://api.twilio.com/2010-04-01", description="Twilio REST 基础URL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @field_validator("openai_api_key", "kimi_api_key", "glm_api_key")
    @classmethod
    def validate_api_key(cls, v: Optional[str]) -> Optional[str]:
        if v and len(v) < 10:
            raise ValueError("API key seems too short")
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )


settings = Settings()
