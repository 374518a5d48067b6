"""短信命令解析。

规则：裁剪首尾空白后，若以 "!" 开头且第一个词（不区分大小写）
是已知命令，则返回对应命令；否则原样作为 PlainText。
未知的 "!xxx" 也按普通文本处理，避免误输入的 "!" 被静默吞掉。
"""

from typing import Dict, Type

from sms_assistant.domain.commands import Command, HelpCommand, PlainText, StatsCommand

COMMAND_PREFIX = "!"

KNOWN_COMMANDS: Dict[str, Type[Command]] = {
    "help": HelpCommand,
    "stats": StatsCommand,
}

HELP_TEXT = (
    "Commands: !help - show this message. "
    "!stats - usage for this conversation. "
    "Anything else is sent to the assistant."
)


class CommandRouter:
    def __init__(self, prefix: str = COMMAND_PREFIX):
        self._prefix = prefix

    def parse(self, raw_text: str) -> Command:
        trimmed = (raw_text or "").strip()
        if trimmed.startswith(self._prefix):
            rest = trimmed[len(self._prefix):]
            words = rest.split(maxsplit=1)
            if words and not rest[0].isspace():
                command_cls = KNOWN_COMMANDS.get(words[0].lower())
                if command_cls is not None:
                    return command_cls()
        return PlainText(text=raw_text or "")
