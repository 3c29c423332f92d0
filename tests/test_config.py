import pytest

from chorus.config import Settings, get_settings


def test_settings_read_prefixed_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CHORUS_API_KEY", "sk-env")
    monkeypatch.setenv("CHORUS_CHAT_MODEL", "gpt-4o-mini")
    monkeypatch.setenv("CHORUS_MAX_TOKENS", "64")

    settings = Settings()

    assert settings.api_key == "sk-env"
    assert settings.chat_model == "gpt-4o-mini"
    assert settings.max_tokens == 64


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("CHORUS_API_KEY", "CHORUS_ADVANCED_CHAT_MODEL", "CHORUS_COMPLETION_MODEL"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.api_key is None
    assert settings.advanced_chat_model == "gpt-4"
    assert settings.completion_model == "gpt-3.5-turbo-instruct"


def test_get_settings_configures_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    levels: list[str] = []
    monkeypatch.setenv("CHORUS_LOG_LEVEL", "debug")
    monkeypatch.setattr("chorus.config.configure_logging", lambda *, level: levels.append(level))

    settings = get_settings()

    assert settings.log_level == "debug"
    assert levels == ["debug"]
