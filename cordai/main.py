import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import chat, conversations, health, tools
from .config import Settings, settings as default_settings
from .core.agent import AgentRegistry, CORDAI_INSTRUCTIONS, ThreadMemory, build_cordai_agent
from .core.conversations import ConversationStore
from .core.errors import CordAiError
from .core.frames import get_frame_encoder
from .core.invocation import AgentInvocationAdapter, ChatInvoker, DirectModelInvoker
from .core.relay import ChatRelay
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware
from .providers.base import BalanceProvider, PriceProvider
from .providers.coingecko import CoingeckoProvider
from .providers.llm import get_llm_provider
from .providers.llm.base import LLMProvider
from .providers.solana import SolanaProvider

_logger = logging.getLogger(__name__)


def _resolve_llm_provider(settings: Settings) -> Optional[LLMProvider]:
    try:
        return get_llm_provider(settings=settings)
    except ValueError as e:
        _logger.warning("LLM provider unavailable, chat will reject requests: %s", e)
        return None


def _build_invoker(
    settings: Settings,
    llm_provider: Optional[LLMProvider],
    agents: AgentRegistry,
) -> ChatInvoker:
    strategy = settings.chat_strategy.lower()
    if strategy == "agent":
        return AgentInvocationAdapter(agents, settings.chat_agent_name)
    if strategy == "direct":
        return DirectModelInvoker(
            llm_provider,
            instructions=CORDAI_INSTRUCTIONS,
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
        )
    raise ValueError(f"Unsupported chat strategy '{settings.chat_strategy}'. Available: agent, direct")


def create_app(
    settings: Optional[Settings] = None,
    *,
    llm_provider: Optional[LLMProvider] = None,
    price_provider: Optional[PriceProvider] = None,
    balance_provider: Optional[BalanceProvider] = None,
) -> FastAPI:
    """Build the API with its collaborators wired onto ``app.state``.

    Providers can be passed in to replace the network-backed defaults.
    """

    settings = settings or default_settings
    setup_logging(settings.log_level)

    app = FastAPI(
        title="CordAi API",
        description="Solana chat assistant backend",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    price_provider = price_provider or CoingeckoProvider(settings=settings)
    balance_provider = balance_provider or SolanaProvider(settings=settings)
    if llm_provider is None:
        llm_provider = _resolve_llm_provider(settings)

    memory = ThreadMemory(
        max_history_messages=settings.memory_max_messages,
        max_threads=settings.memory_max_threads,
    )
    agents = AgentRegistry()
    if llm_provider is not None:
        agents.register(
            settings.chat_agent_name,
            build_cordai_agent(settings, llm_provider, price_provider, balance_provider, memory=memory),
        )

    relay = ChatRelay(
        invoker=_build_invoker(settings, llm_provider, agents),
        encoder=get_frame_encoder(settings.chat_stream_protocol),
        timeout_seconds=settings.chat_timeout_seconds,
        require_user_id=settings.require_user_id,
    )

    app.state.settings = settings
    app.state.price_provider = price_provider
    app.state.balance_provider = balance_provider
    app.state.memory = memory
    app.state.agents = agents
    app.state.conversations = ConversationStore()
    app.state.relay = relay

    @app.exception_handler(CordAiError)
    async def cordai_error_handler(request: Request, exc: CordAiError) -> JSONResponse:
        if exc.status_code >= 500:
            _logger.error(
                "%s %s failed (%s): %s", request.method, request.url.path, exc.category.value, exc.cause or exc
            )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.public_message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        _logger.info("%s %s rejected: %s", request.method, request.url.path, exc.errors())
        return JSONResponse(status_code=400, content={"error": "Invalid request"})

    app.include_router(health.router, tags=["Health"])
    app.include_router(chat.router, tags=["Chat"])
    app.include_router(conversations.router, tags=["Conversations"])
    app.include_router(tools.router, tags=["Tools"])

    @app.get("/")
    async def root():
        """Root endpoint with basic info"""
        return {
            "name": "CordAi API",
            "version": "0.1.0",
            "description": "Solana chat assistant backend",
            "docs": "/docs",
            "health": "/healthz",
        }

    _logger.info(
        "CordAi API ready: strategy=%s protocol=%s agents=%s",
        settings.chat_strategy,
        settings.chat_stream_protocol,
        agents.names(),
    )
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "cordai.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=True,
        log_level=default_settings.log_level.lower(),
    )
