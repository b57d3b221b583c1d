"""
Error Classification

Every error the service raises on purpose derives from ``CordAiError`` and
carries the HTTP status it maps to plus a message that is safe to show users.
The underlying cause, when there is one, is chained and only ever logged.
"""

from enum import Enum
from typing import Optional


class ErrorCategory(str, Enum):
    """Categories of errors for response and logging decisions."""

    VALIDATION = "validation"        # Missing/malformed input, never opens a stream
    CONFIGURATION = "configuration"  # Required collaborator not wired up
    UPSTREAM = "upstream"            # Price/RPC/LLM provider failure
    TIMEOUT = "timeout"              # Request exceeded its wall-clock budget


class CordAiError(Exception):
    """Base class for classified service errors."""

    status_code: int = 500
    category: ErrorCategory = ErrorCategory.UPSTREAM
    default_message: str = "An unexpected error occurred."

    def __init__(self, message: Optional[str] = None, *, cause: Optional[BaseException] = None):
        self.public_message = message or self.default_message
        super().__init__(self.public_message)
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


# =============================================================================
# Validation (400)
# =============================================================================

class ValidationError(CordAiError):
    status_code = 400
    category = ErrorCategory.VALIDATION
    default_message = "Invalid request"


class MissingUserId(ValidationError):
    default_message = "User ID required"


class MissingFields(ValidationError):
    default_message = "Required fields missing"


class InvalidAddress(ValidationError):
    default_message = "Invalid Solana wallet address"

    def __init__(self, address: Optional[str] = None, message: Optional[str] = None):
        super().__init__(message)
        self.address = address


# =============================================================================
# Configuration (500)
# =============================================================================

class ConfigurationError(CordAiError):
    status_code = 500
    category = ErrorCategory.CONFIGURATION
    default_message = "Service not configured"


class AgentUnavailable(ConfigurationError):
    default_message = "Agent not configured"

    def __init__(self, agent_name: str, message: Optional[str] = None):
        super().__init__(message)
        self.agent_name = agent_name


# =============================================================================
# Upstream (502)
# =============================================================================

class UpstreamFetchError(CordAiError):
    status_code = 502
    category = ErrorCategory.UPSTREAM
    default_message = "Upstream service unavailable. Please try again."


class PriceFetchError(UpstreamFetchError):
    default_message = "Failed to fetch SOL price. Please try again."


class BalanceFetchError(UpstreamFetchError):
    default_message = "Invalid wallet address or failed to fetch balance"


class AgentExecutionError(UpstreamFetchError):
    default_message = "The assistant failed to respond. Please try again."


class RelayTimeout(UpstreamFetchError):
    status_code = 504
    category = ErrorCategory.TIMEOUT
    default_message = "The request took too long. Please try again."


__all__ = [
    "ErrorCategory",
    "CordAiError",
    "ValidationError",
    "MissingUserId",
    "MissingFields",
    "InvalidAddress",
    "ConfigurationError",
    "AgentUnavailable",
    "UpstreamFetchError",
    "PriceFetchError",
    "BalanceFetchError",
    "AgentExecutionError",
    "RelayTimeout",
]
