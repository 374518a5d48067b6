from sms_assistant.commands.router import CommandRouter
from sms_assistant.domain.commands import HelpCommand, PlainText, StatsCommand


def test_parse_known_commands_case_insensitive():
    router = CommandRouter()
    assert router.parse("!help") == HelpCommand()
    assert router.parse("  !HELP \n") == HelpCommand()
    assert router.parse("!Stats") == StatsCommand()
    assert router.parse("!stats please") == StatsCommand()


def test_plain_text_keeps_untrimmed_original():
    router = CommandRouter()
    assert router.parse("  hello there ") == PlainText(text="  hello there ")


def test_unknown_bang_words_fall_back_to_plain_text():
    router = CommandRouter()
    assert router.parse("!reset") == PlainText(text="!reset")
    assert router.parse("!helpful tips") == PlainText(text="!helpful tips")
    assert router.parse("! help") == PlainText(text="! help")
    assert router.parse("!") == PlainText(text="!")
    assert router.parse("wow!help") == PlainText(text="wow!help")


def test_empty_text_is_plain_text():
    router = CommandRouter()
    assert router.parse("") == PlainText(text="")
