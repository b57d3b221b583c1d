from typing import Any, Dict

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/healthz")
async def health_check(request: Request) -> Dict[str, Any]:
    """Health check endpoint that verifies provider status"""

    state = request.app.state
    provider_status = {
        "coingecko": await state.price_provider.health_check(),
        "solana": await state.balance_provider.health_check(),
    }

    all_healthy = all(
        status["status"] in ["healthy", "unavailable"]
        for status in provider_status.values()
    )
    available_providers = sum(
        1 for status in provider_status.values()
        if status["status"] == "healthy"
    )

    return {
        "status": "healthy" if all_healthy and available_providers > 0 else "degraded",
        "providers": provider_status,
        "agents": state.agents.names(),
        "strategy": state.settings.chat_strategy,
        "available_providers": available_providers,
        "total_providers": len(provider_status),
    }
