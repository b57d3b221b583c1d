import pytest

from cordai.config import Settings
from cordai.providers.llm import AnthropicProvider, OpenAIProvider, get_llm_provider


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "SOLANA_RPC_URL",
        "NEXT_PUBLIC_HELIUS_RPC_URL",
        "HELIUS_RPC_URL",
        "ANTHROPIC_API_KEY",
        "OPENAI_API_KEY",
        "LLM_PROVIDER",
        "LLM_MODEL",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.chat_strategy == "agent"
    assert settings.chat_agent_name == "cordaiAgent"
    assert settings.chat_stream_protocol == "sse"
    assert settings.chat_timeout_seconds == 120.0
    assert settings.require_user_id is True
    assert settings.solana_rpc_url == "https://api.devnet.solana.com"
    assert settings.solana_commitment == "confirmed"


def test_rpc_url_falls_back_to_web_client_variable(monkeypatch):
    """The web client's Helius variable is honoured when no RPC URL is set."""

    monkeypatch.setenv("NEXT_PUBLIC_HELIUS_RPC_URL", "https://mainnet.helius-rpc.com/?api-key=k")

    settings = Settings(_env_file=None)

    assert settings.solana_rpc_url == "https://mainnet.helius-rpc.com/?api-key=k"


def test_explicit_rpc_url_wins(monkeypatch):
    monkeypatch.setenv("SOLANA_RPC_URL", "https://rpc.example")
    monkeypatch.setenv("NEXT_PUBLIC_HELIUS_RPC_URL", "https://helius.example")

    settings = Settings(_env_file=None)

    assert settings.solana_rpc_url == "https://rpc.example"


def test_default_model_resolution():
    settings = Settings(_env_file=None)

    assert settings.resolve_default_model("anthropic") == "claude-sonnet-4-20250514"
    assert settings.resolve_default_model("openai") == "gpt-4o-mini"
    assert settings.resolve_provider_for_model("gpt-3.5-turbo") == "openai"
    assert settings.resolve_provider_for_model("unknown-model") is None


def test_llm_provider_requires_api_key():
    settings = Settings(_env_file=None)

    with pytest.raises(ValueError):
        get_llm_provider(settings=settings)


def test_llm_provider_selection():
    settings = Settings(_env_file=None, anthropic_api_key="sk-ant", openai_api_key="sk-oai")

    anthropic = get_llm_provider(settings=settings)
    openai = get_llm_provider(provider_name="gpt", settings=settings)
    by_model = get_llm_provider(model="gpt-3.5-turbo", settings=settings)

    assert isinstance(anthropic, AnthropicProvider)
    assert anthropic.model == "claude-sonnet-4-20250514"
    assert isinstance(openai, OpenAIProvider)
    assert openai.model == "gpt-4o-mini"
    assert isinstance(by_model, OpenAIProvider)
    assert by_model.model == "gpt-3.5-turbo"
