"""领域层模型与协议。

包含：
- models: 统一的 ChatMessage / ChatRequest / ChatResult / InboundEvent 模型。
- conversation: Turn、ConversationState 以及 ConversationStore 抽象。
- commands: 短信命令类型（!help、!stats、普通文本）。
- exceptions: 业务异常类型定义。
"""
