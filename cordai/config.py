import os

from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def model_post_init(self, __context: Any) -> None:
        """Pick up the RPC URL variable the web client historically shared with us."""

        super().model_post_init(__context)

        if not self.solana_rpc_url:
            fallback = os.getenv("NEXT_PUBLIC_HELIUS_RPC_URL") or os.getenv("HELIUS_RPC_URL")
            object.__setattr__(self, "solana_rpc_url", fallback or "https://api.devnet.solana.com")

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")

    # External APIs
    coingecko_api_key: str = Field(default="", description="Coingecko API key (optional on the public tier)")
    coingecko_base_url: str = Field(
        default="https://api.coingecko.com/api/v3",
        description="Base URL for the Coingecko API",
    )
    solana_rpc_url: str = Field(
        default="",
        description="Solana JSON-RPC endpoint used for balance lookups",
        validation_alias=AliasChoices("solana_rpc_url", "SOLANA_RPC_URL"),
    )
    solana_commitment: str = Field(default="confirmed", description="Commitment level for RPC reads")
    request_timeout_seconds: int = Field(default=15, description="Timeout for outbound lookup requests")

    # Chat relay
    chat_strategy: str = Field(
        default="agent",
        description="Invocation strategy for /chat: 'agent' (tool-enabled) or 'direct' (plain model stream)",
    )
    chat_agent_name: str = Field(default="cordaiAgent", description="Logical name of the chat agent")
    require_user_id: bool = Field(default=True, description="Reject chat requests without a wallet-scoped userId")
    chat_timeout_seconds: float = Field(default=120.0, description="Wall-clock budget for one streamed chat request")
    chat_stream_protocol: str = Field(
        default="sse",
        description="Wire encoding for streamed frames: 'sse' or 'data-stream'",
    )

    # LLM Provider Settings
    llm_provider: str = Field(default="anthropic", description="Default LLM provider")
    anthropic_api_key: str = Field(default="", description="Anthropic API key")
    openai_api_key: str = Field(default="", description="OpenAI (or compatible) API key")
    openai_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL for the OpenAI-compatible chat completions API",
    )

    # LLM Configuration
    llm_model: str = Field(default="", description="Default LLM model (empty uses the provider default)")
    max_tokens: int = Field(default=4000, description="Maximum tokens for LLM response")
    temperature: float = Field(default=0.7, description="LLM temperature setting")
    agent_max_steps: int = Field(default=5, ge=1, description="Maximum model turns per message in the tool loop")
    memory_max_messages: int = Field(default=40, ge=2, description="Thread messages replayed to the model")
    memory_max_threads: int = Field(default=1000, ge=1, description="Threads kept in memory before the oldest is evicted")
    provider_models_catalog: Dict[str, List[Dict[str, Any]]] = Field(
        default_factory=lambda: {
            "anthropic": [
                {
                    "id": "claude-sonnet-4-20250514",
                    "label": "Claude Sonnet 4",
                    "description": "Balanced depth and latency for daily use.",
                    "default": True,
                },
            ],
            "openai": [
                {
                    "id": "gpt-4o-mini",
                    "label": "GPT-4o mini",
                    "description": "Fast, inexpensive tool-calling model.",
                    "default": True,
                },
                {
                    "id": "gpt-3.5-turbo",
                    "label": "GPT-3.5 Turbo",
                    "description": "Legacy chat model.",
                },
            ],
        },
        description="Provider models metadata",
    )

    def resolve_default_model(self, provider: str) -> str:
        provider_lower = provider.lower()
        options = self.provider_models_catalog.get(provider_lower, [])
        for option in options:
            default_flag = option.get("default")
            if isinstance(default_flag, str):
                is_default = default_flag.lower() in {"true", "1", "yes"}
            else:
                is_default = bool(default_flag)
            if is_default:
                return option.get("id", self.llm_model)
        if options:
            return options[0].get("id", self.llm_model)
        return self.llm_model

    def resolve_provider_for_model(self, model_id: str) -> Optional[str]:
        target = (model_id or "").strip().lower()
        if not target:
            return None
        for provider, options in self.provider_models_catalog.items():
            for option in options:
                option_id = option.get("id")
                if option_id and option_id.lower() == target:
                    return provider
        return None


# Global settings instance
settings = Settings()
