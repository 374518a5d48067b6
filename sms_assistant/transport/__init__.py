"""短信传输层：网关协议、Twilio 适配器与回复分段。"""

from sms_assistant.transport.base import MessagingClient, SendResult
from sms_assistant.transport.segmenter import ResponseSegmenter
from sms_assistant.transport.twilio_client import TwilioMessagingClient

__all__ = ["MessagingClient", "ResponseSegmenter", "SendResult", "TwilioMessagingClient"]
