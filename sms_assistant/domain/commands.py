"""入站短信解析后的命令类型。

三种变体互斥：一条消息只会被解析为其中之一。
"""

from dataclasses import dataclass
from typing import ClassVar, Union


@dataclass(frozen=True)
class HelpCommand:
    kind: ClassVar[str] = "help"


@dataclass(frozen=True)
class StatsCommand:
    kind: ClassVar[str] = "stats"


@dataclass(frozen=True)
class PlainText:
    """普通聊天消息，text 保留未裁剪的原文。"""

    text: str
    kind: ClassVar[str] = "plain_text"


Command = Union[HelpCommand, StatsCommand, PlainText]
