"""短信网关抽象接口。

编排层只依赖此协议，不依赖具体厂商：

- 每个网关实现一个 MessagingClient（如 TwilioMessagingClient）。
- send() 按调用顺序投递单个分段，失败通过 SendResult 报告，不抛异常、不重试。
"""

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass
class SendResult:
    ok: bool
    error: Optional[str] = None
    retryable: bool = False
    provider_message_id: Optional[str] = None


class MessagingClient(Protocol):
    """短信网关客户端协议。"""

    name: str

    def send(self, destination_id: str, text: str) -> SendResult:
        ...
