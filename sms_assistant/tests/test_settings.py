import pytest

from sms_assistant.config.settings import Settings


def test_yaml_config_file_is_loaded(tmp_path, monkeypatch):
    cfg = tmp_path / "config.yaml"
    cfg.write_text("daily_message_limit: 3\nmax_segment_length: 160\n", encoding="utf-8")
    monkeypatch.setenv("SMS_ASSISTANT_CONFIG_FILE", str(cfg))
    s = Settings()
    assert s.daily_message_limit == 3
    assert s.max_segment_length == 160


def test_environment_overrides_yaml(tmp_path, monkeypatch):
    cfg = tmp_path / "config.yaml"
    cfg.write_text("daily_message_limit: 3\n", encoding="utf-8")
    monkeypatch.setenv("SMS_ASSISTANT_CONFIG_FILE", str(cfg))
    monkeypatch.setenv("DAILY_MESSAGE_LIMIT", "5")
    assert Settings().daily_message_limit == 5


def test_short_api_key_is_rejected(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "short")
    with pytest.raises(ValueError):
        Settings()
