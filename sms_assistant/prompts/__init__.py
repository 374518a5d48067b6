"""系统提示词加载工具。

按语言(locale) 从 prompts/<locale> 目录读取短信助手的 system prompt，
由 ChatBackend 构造成 ChatMessage(role="system").
"""

from pathlib import Path


PROMPTS_DIR = Path(__file__).resolve().parent


def load_system_prompt(locale: str = "en") -> str:
    """根据语言加载系统提示词文本。"""

    fname = PROMPTS_DIR / locale / "sms_system.md"
    return fname.read_text(encoding="utf-8").strip()
