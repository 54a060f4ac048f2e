import pytest

from agent_relay.config import RelaySettings, env_bool
from agent_relay.integrations.bonzo.config import DEFAULT_BASE_URL, BonzoSettings

_RELAY_ENV = (
    "HOST",
    "PORT",
    "HEDERA_NETWORK",
    "LLM_MODEL",
    "LLM_MAX_TOKENS",
    "LLM_TEMPERATURE",
    "LLM_TIMEOUT",
    "FORCE_CLEAR_MEMORY",
    "LOG_LEVEL",
    "LOG_FORMAT",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in _RELAY_ENV:
        monkeypatch.delenv(name, raising=False)
    for name in ("BONZO_API_BASE_URL", "BONZO_MIN_INTERVAL", "BONZO_CACHE_TTL"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    settings = RelaySettings.load()
    assert settings.port == 8080
    assert settings.network == "testnet"
    assert settings.llm_model == "gpt-5-mini"
    assert settings.llm_temperature == 1.0
    assert settings.force_clear_memory is False


def test_env_overrides(clean_env):
    clean_env.setenv("PORT", "9000")
    clean_env.setenv("HEDERA_NETWORK", "MAINNET")
    clean_env.setenv("LLM_MODEL", "gpt-4o")
    clean_env.setenv("LLM_TEMPERATURE", "0.2")
    clean_env.setenv("FORCE_CLEAR_MEMORY", "true")

    settings = RelaySettings.load()

    assert settings.port == 9000
    assert settings.network == "mainnet"
    assert settings.llm_temperature == 0.2
    assert settings.force_clear_memory is True


def test_temperature_defaults_for_non_gpt5_models(clean_env):
    clean_env.setenv("LLM_MODEL", "gemini-2.5-flash")
    assert RelaySettings.load().llm_temperature == 0.7


def test_gpt5_ignores_temperature_override(clean_env):
    clean_env.setenv("LLM_TEMPERATURE", "0.1")
    assert RelaySettings.load().llm_temperature == 1.0


def test_invalid_network_is_rejected(clean_env):
    clean_env.setenv("HEDERA_NETWORK", "previewnet")
    with pytest.raises(ValueError, match="HEDERA_NETWORK"):
        RelaySettings.load()


@pytest.mark.parametrize("raw, expected", [("1", True), ("YES", True), ("on", True), ("false", False), ("", False)])
def test_env_bool(monkeypatch, raw, expected):
    monkeypatch.setenv("SOME_FLAG", raw)
    assert env_bool("SOME_FLAG") is expected


def test_bonzo_settings(clean_env):
    assert BonzoSettings.load().base_url == DEFAULT_BASE_URL

    clean_env.setenv("BONZO_API_BASE_URL", "https://data.bonzo.finance/")
    clean_env.setenv("BONZO_MIN_INTERVAL", "0.5")
    clean_env.setenv("BONZO_CACHE_TTL", "60")
    settings = BonzoSettings.load()

    assert settings.base_url == "https://data.bonzo.finance"
    assert settings.min_interval == 0.5
    assert settings.cache_ttl == 60.0
