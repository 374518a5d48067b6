from sms_assistant.commands.router import HELP_TEXT, CommandRouter

__all__ = ["CommandRouter", "HELP_TEXT"]
