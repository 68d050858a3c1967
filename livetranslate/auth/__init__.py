"""Authorization token sources and renewal."""

from .token_source import (
    AbstractTokenSource,
    AzureIssueTokenSource,
    EndpointTokenSource,
    TokenResponse,
    parse_token_response,
)
from .token_manager import TokenManager

__all__ = [
    "AbstractTokenSource",
    "AzureIssueTokenSource",
    "EndpointTokenSource",
    "TokenResponse",
    "parse_token_response",
    "TokenManager",
]
