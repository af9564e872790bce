"""Base asset provider with retry, pacing and error handling.

Adapters subclass :class:`AssetProvider` and only translate their provider's
query parameters and payloads. Everything network related lives here:

- authentication headers (supplied by the adapter)
- advisory pacing derived from the configured hourly rate limit
- retry with exponential backoff for 429 and 5xx (except 522) and for
  transport failures
- classification of terminal failures into :mod:`assetstore.providers.errors`
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, ClassVar

import httpx
from pydantic import ValidationError

from assetstore.models.asset import Asset, AssetApiResponse, AssetSearchParams
from assetstore.models.config import AssetProviderConfig
from assetstore.providers.errors import (
    ProviderAuthError,
    ProviderDisabledError,
    ProviderError,
    ProviderNetworkError,
    ProviderResponseError,
    classify_status,
    is_retryable_status,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 1
REQUEST_TIMEOUT = 30.0
USER_AGENT = "assetstore/0.1.0"


@dataclass
class ProviderOutcome:
    """Result of invoking one provider: either a response or an error."""
    provider: str
    response: AssetApiResponse | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.response is not None and self.response.success

    @property
    def failure_message(self) -> str | None:
        """Error to surface, if the call did not succeed."""
        if self.succeeded:
            return None
        if self.error:
            return self.error
        if self.response is not None and self.response.error:
            return self.response.error
        return f"{self.provider} request failed"


class AssetProvider(ABC):
    """Abstract base class for stock media providers.

    Implementations must supply:
    - the auth header scheme for their API
    - search, featured listing, categories and key validation
    - translation of native payloads into :data:`Asset` models
    """

    name: ClassVar[str]
    display_name: ClassVar[str]
    base_url: ClassVar[str]
    max_per_page: ClassVar[int]
    default_query: ClassVar[str] = "nature"
    supports_videos: ClassVar[bool] = False

    def __init__(
        self,
        config: AssetProviderConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config
        self._client = client
        self._owns_client = client is None

    def is_enabled(self) -> bool:
        """Configured on and holding a credential."""
        return self.config.enabled and bool(self.config.api_key)

    @property
    def rate_limit(self) -> int:
        """Configured requests per hour."""
        return self.config.rate_limit

    @property
    def api_root(self) -> str:
        return self.config.base_url or self.base_url

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=REQUEST_TIMEOUT,
                headers={"User-Agent": USER_AGENT},
            )
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None

    # --- Capability contract ---

    @abstractmethod
    def get_auth_headers(self) -> dict[str, str]:
        """Headers carrying the credential."""
        ...

    @abstractmethod
    async def search_assets(self, params: AssetSearchParams) -> AssetApiResponse:
        """Free-text search."""
        ...

    @abstractmethod
    async def get_featured_assets(self, params: AssetSearchParams | None = None) -> AssetApiResponse:
        """Curated or popular listing; ``params.query`` is ignored."""
        ...

    @abstractmethod
    async def get_categories(self) -> list[str]:
        """Category vocabulary for this provider."""
        ...

    @abstractmethod
    async def validate_api_key(self) -> bool:
        """Issue one minimal read to check the credential."""
        ...

    async def search_videos(self, params: AssetSearchParams) -> AssetApiResponse:
        """Video search, for providers that offer it."""
        raise NotImplementedError(f"{self.display_name} does not support video search")

    async def get_featured_videos(self, params: AssetSearchParams | None = None) -> AssetApiResponse:
        """Popular video listing, for providers that offer it."""
        raise NotImplementedError(f"{self.display_name} does not support video listings")

    # --- Shared helpers ---

    def clamp_per_page(self, per_page: int) -> int:
        return max(1, min(per_page, self.max_per_page))

    def query_or_default(self, query: str | None) -> str:
        """Some providers reject empty queries."""
        query = (query or "").strip()
        return query or self.default_query

    def build_url(self, endpoint: str) -> str:
        return f"{self.api_root.rstrip('/')}/{endpoint.lstrip('/')}"

    async def pace(self) -> None:
        """Advisory delay of 1000 / rate_limit milliseconds before a request."""
        await asyncio.sleep(1 / self.rate_limit)

    async def make_request(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ) -> Any:
        """GET ``endpoint`` and return decoded JSON.

        Retries 429, 5xx other than 522, and transport errors up to
        ``max_retries`` times, sleeping ``2 ** attempt`` seconds before each
        retry. Raises a :class:`ProviderError` subclass on terminal failure.
        """
        if not self.is_enabled():
            raise ProviderDisabledError(self.display_name)

        url = self.build_url(endpoint)
        query = {k: v for k, v in (params or {}).items() if v is not None}

        await self.pace()

        retries = max(max_retries, 0)
        for attempt in range(retries + 1):
            error: ProviderError
            try:
                response = await self.client.get(
                    url, params=query, headers=self.get_auth_headers()
                )
            except httpx.TransportError as e:
                error = ProviderNetworkError(
                    self.display_name,
                    f"{self.display_name} request failed: {type(e).__name__} {e}".strip(),
                )
            else:
                if response.is_success:
                    try:
                        return response.json()
                    except ValueError as e:
                        raise ProviderResponseError(
                            self.display_name,
                            f"{self.display_name} returned invalid JSON",
                            response.status_code,
                        ) from e

                error = classify_status(self.display_name, response.status_code, response.text)
                if not is_retryable_status(response.status_code):
                    raise error

            if attempt == retries:
                raise error

            delay = 2 ** attempt
            logger.warning(
                f"{self.display_name} request to {endpoint} failed ({error.message}); "
                f"retrying in {delay}s ({attempt + 1}/{retries})"
            )
            await asyncio.sleep(delay)

    async def guarded(
        self,
        page: int,
        per_page: int,
        operation: Callable[[], Awaitable[AssetApiResponse]],
    ) -> AssetApiResponse:
        """Run ``operation``, folding provider and schema errors into a failed response."""
        try:
            return await operation()
        except ProviderError as e:
            logger.warning(f"{self.display_name}: {e.message}")
            return AssetApiResponse.failure(e.message, page, per_page)
        except ValidationError as e:
            message = f"Unexpected response from {self.display_name}: {e.error_count()} schema error(s)"
            logger.warning(f"{message}\n{e}")
            return AssetApiResponse.failure(message, page, per_page)

    async def check_endpoint(self, endpoint: str, params: dict[str, Any] | None = None) -> bool:
        """Validate the credential with a single request.

        Any successful response counts, including an empty result set.
        """
        try:
            await self.make_request(endpoint, params)
        except ProviderAuthError as e:
            logger.info(f"{self.display_name} API key rejected: {e.message}")
            return False
        except ProviderError as e:
            logger.info(f"{self.display_name} API key validation failed: {e.message}")
            return False
        return True

    @staticmethod
    def error_message(error: BaseException) -> str:
        """Human readable message for any error raised by a provider call."""
        if isinstance(error, ProviderError):
            return error.message
        return str(error) or "Unknown error occurred"

    @abstractmethod
    def transform_asset(self, item: Any) -> Asset:
        """Translate one parsed native item into an :data:`Asset`."""
        ...
