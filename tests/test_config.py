import pytest

from app.core.config import ConfigurationError, Settings


def test_missing_api_key_is_fatal(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("FULLTASK_OPENAI_API_KEY", raising=False)

    with pytest.raises(ConfigurationError):
        Settings(openai_api_key=None, _env_file=None).check_startup()


def test_api_key_read_from_plain_env_name(monkeypatch):
    monkeypatch.delenv("FULLTASK_OPENAI_API_KEY", raising=False)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    config = Settings(_env_file=None)

    assert config.openai_api_key == "sk-test"
    config.check_startup()


def test_defaults_match_service_constants():
    config = Settings(openai_api_key="k", _env_file=None)

    assert config.api_port == 10000
    assert config.history_cap == 48
    assert (config.temperature, config.max_tokens, config.top_p) == (0.2, 800, 1.0)


def test_store_backend_auto_follows_redis_url():
    assert Settings(openai_api_key="k", _env_file=None).resolved_store_backend() == "memory"
    assert Settings(
        openai_api_key="k", redis_url="redis://localhost:6379/0", _env_file=None
    ).resolved_store_backend() == "redis"


def test_redis_backend_without_url_is_fatal():
    config = Settings(openai_api_key="k", store_backend="redis", redis_url=None, _env_file=None)

    with pytest.raises(ConfigurationError):
        config.check_startup()


def test_unknown_backend_is_fatal():
    with pytest.raises(ConfigurationError):
        Settings(openai_api_key="k", store_backend="sqlite", _env_file=None).check_startup()
