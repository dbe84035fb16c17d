"""Async client for the Wikibase ``wbsearchentities`` API."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Protocol

import httpx
from pydantic import ValidationError
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..autocomplete.cancellation import CancellationToken
from ..autocomplete.exceptions import LookupTransportError
from ..core import metrics
from ..core.config import EntitySearchSettings, get_settings
from ..core.logging import get_logger
from ..schemas.search import SearchEntitiesResponse

logger = get_logger(name=__name__)


class EntityLookup(Protocol):
    async def lookup(
        self,
        term: str,
        language: str,
        *,
        token: CancellationToken | None = None,
    ) -> SearchEntitiesResponse: ...


class RetryableStatusError(Exception):
    """Raised internally for responses worth another attempt."""

    def __init__(self, response: httpx.Response) -> None:
        super().__init__(f"GET {response.request.url} -> {response.status_code}")
        self.response = response


@dataclass(slots=True)
class EntitySearchClientConfig:
    api_url: str
    entity_type: str = "item"
    request_limit: int = 50
    timeout_seconds: float = 10.0
    max_retries: int = 2
    retry_backoff_seconds: float = 0.5
    max_backoff_seconds: float = 8.0
    max_concurrent_requests: int = 4
    user_agent: str = "mediasearch-autocomplete/0.1.0"

    @classmethod
    def from_settings(cls, settings: EntitySearchSettings) -> EntitySearchClientConfig:
        return cls(
            api_url=settings.resolve_api_url(),
            entity_type=settings.entity_type,
            request_limit=settings.request_limit,
            timeout_seconds=settings.timeout_seconds,
            max_retries=settings.max_retries,
            retry_backoff_seconds=settings.retry_backoff_seconds,
            max_backoff_seconds=settings.max_backoff_seconds,
            max_concurrent_requests=settings.max_concurrent_requests,
            user_agent=settings.user_agent,
        )


class EntitySearchClient:
    RETRY_STATUS_RANGES = ((500, 599),)
    RETRY_STATUS_CODES = {408, 425, 429}

    def __init__(self, config: EntitySearchClientConfig, *, client: httpx.AsyncClient | None = None) -> None:
        self._config = config
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(config.timeout_seconds),
            headers={"User-Agent": config.user_agent},
        )
        # Lookups for one keystroke run side by side and share the client's limits.
        self._semaphore = asyncio.Semaphore(max(2, config.max_concurrent_requests))

    @classmethod
    def from_settings(
        cls,
        settings: EntitySearchSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> EntitySearchClient:
        resolved = settings or get_settings().entity_search
        return cls(EntitySearchClientConfig.from_settings(resolved), client=client)

    @property
    def config(self) -> EntitySearchClientConfig:
        return self._config

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> EntitySearchClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def build_params(self, term: str, language: str) -> dict[str, Any]:
        return {
            "action": "wbsearchentities",
            "search": term,
            "format": "json",
            "language": language,
            "uselang": language,
            "type": self._config.entity_type,
            "limit": self._config.request_limit,
        }

    async def lookup(
        self,
        term: str,
        language: str,
        *,
        token: CancellationToken | None = None,
    ) -> SearchEntitiesResponse:
        params = self.build_params(term, language)
        retrying = AsyncRetrying(
            retry=retry_if_exception_type((httpx.TransportError, RetryableStatusError)),
            wait=wait_exponential(
                multiplier=self._config.retry_backoff_seconds,
                max=self._config.max_backoff_seconds,
            ),
            stop=stop_after_attempt(self._config.max_retries + 1),
            before_sleep=self._before_retry,
            reraise=True,
        )
        start = time.perf_counter()
        try:
            async for attempt in retrying:
                with attempt:
                    if token is not None:
                        token.raise_if_cancelled()
                    response = await self._send(params)
        except RetryableStatusError as exc:
            raise LookupTransportError(str(exc), term=term) from exc
        except httpx.HTTPError as exc:
            raise LookupTransportError(f"entity search for {term!r} failed: {exc}", term=term) from exc

        result = self._decode(response, term)
        logger.debug(
            "entity_search_completed",
            term=term,
            language=language,
            matches=len(result.search),
            latency=time.perf_counter() - start,
        )
        if token is not None:
            token.raise_if_cancelled()
        return result

    async def _send(self, params: dict[str, Any]) -> httpx.Response:
        async with self._semaphore:
            response = await self._client.get(self._config.api_url, params=params)
        if self._should_retry_response(response):
            raise RetryableStatusError(response)
        response.raise_for_status()
        return response

    def _decode(self, response: httpx.Response, term: str) -> SearchEntitiesResponse:
        try:
            data = response.json()
        except ValueError as exc:
            raise LookupTransportError(f"entity search for {term!r} returned invalid JSON", term=term) from exc
        if not isinstance(data, dict):
            raise LookupTransportError(f"entity search for {term!r} returned an unexpected payload", term=term)
        if "error" in data:
            error = data["error"] if isinstance(data["error"], dict) else {"info": str(data["error"])}
            raise LookupTransportError(
                f"entity search for {term!r} failed: {error.get('code', 'unknown')}: {error.get('info', '')}",
                term=term,
            )
        try:
            return SearchEntitiesResponse.model_validate(data)
        except ValidationError as exc:
            raise LookupTransportError(f"entity search for {term!r} returned a malformed payload", term=term) from exc

    def _should_retry_response(self, response: httpx.Response) -> bool:
        if response.status_code in self.RETRY_STATUS_CODES:
            return True
        for lower, upper in self.RETRY_STATUS_RANGES:
            if lower <= response.status_code <= upper:
                return True
        return False

    @staticmethod
    def _before_retry(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        if isinstance(exc, RetryableStatusError):
            reason = f"status_{exc.response.status_code}"
        else:
            reason = "exception"
        metrics.increment_lookup_retry(reason=reason)
        logger.info(
            "entity_search_retry",
            attempt=retry_state.attempt_number,
            reason=reason,
            error=str(exc) if exc else None,
        )


__all__ = ["EntityLookup", "EntitySearchClient", "EntitySearchClientConfig", "RetryableStatusError"]
