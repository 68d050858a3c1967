"""Credential sources that issue short-lived speech authorization tokens."""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

import aiohttp
from pydantic import BaseModel, Field, ValidationError

from ..errors import AuthError
from ..models.session import Token

logger = logging.getLogger(__name__)

ISSUE_TOKEN_URL = "https://{region}.api.cognitive.microsoft.com/sts/v1.0/issueToken"


class TokenResponse(BaseModel):
    """JSON body returned by a token endpoint."""
    token: str = Field(min_length=1)
    region: str = Field(min_length=1)


class AbstractTokenSource(ABC):
    """Abstract base class for credential sources."""

    @abstractmethod
    def fetch_token(self) -> Token:
        """Request a fresh token.

        Raises:
            AuthError: If the source is unreachable or returns an invalid token
        """
        pass


class _HttpTokenSource(AbstractTokenSource):
    """Runs an aiohttp request to completion for synchronous callers."""

    def __init__(self, timeout_seconds: float = 10.0):
        self.timeout_seconds = timeout_seconds

    def fetch_token(self) -> Token:
        try:
            token = asyncio.run(self._fetch())
        except AuthError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            logger.error(f"Token request failed: {e}")
            raise AuthError(f"Credential source unreachable: {e}") from e
        logger.debug(f"Fetched token for region {token.region}")
        return token

    @abstractmethod
    async def _fetch(self) -> Token:
        pass


class AzureIssueTokenSource(_HttpTokenSource):
    """Exchanges a subscription key for a token at the regional issueToken endpoint."""

    def __init__(self, subscription_key: str, region: str, timeout_seconds: float = 10.0):
        super().__init__(timeout_seconds)
        if not subscription_key:
            raise ValueError("Subscription key is required")
        self.subscription_key = subscription_key
        self.region = region
        self.url = ISSUE_TOKEN_URL.format(region=region)

    async def _fetch(self) -> Token:
        headers = {
            "Ocp-Apim-Subscription-Key": self.subscription_key,
            "Content-Type": "application/x-www-form-urlencoded",
        }
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(self.url, headers=headers) as response:
                body = await response.text()
                if response.status != 200:
                    raise AuthError(f"issueToken error: {response.status} - {body}")

        if not body.strip():
            raise AuthError("issueToken returned an empty token")
        return Token(auth_token=body.strip(), region=self.region, issued_at=datetime.now())


class EndpointTokenSource(_HttpTokenSource):
    """Fetches {"token", "region"} JSON from a backend token route."""

    def __init__(self, url: str, timeout_seconds: float = 10.0):
        super().__init__(timeout_seconds)
        self.url = url

    async def _fetch(self) -> Token:
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(self.url) as response:
                if response.status != 200:
                    error_text = await response.text()
                    raise AuthError(f"Token endpoint error: {response.status} - {error_text}")
                payload = await response.json(content_type=None)

        return parse_token_response(payload)


def parse_token_response(payload: Optional[dict]) -> Token:
    """Validate a token endpoint body and convert it to a Token."""
    try:
        response = TokenResponse.model_validate(payload)
    except ValidationError as e:
        raise AuthError(f"Invalid token response: {e}") from e
    return Token(auth_token=response.token, region=response.region, issued_at=datetime.now())
