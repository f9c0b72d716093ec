"""
conduit.transport.client - Authenticated HTTP Client

Owns one reusable httpx.AsyncClient for the external API. The client is a
scoped resource: acquire it with ``async with`` and it is closed on every
exit path (success, exception, cancellation).

Example:
    >>> async with ApiClient(settings) as client:
    ...     response = await client.call("GET", "/tasks/T-1")
    ...     if response.ok:
    ...         print(response.body["title"])
"""

import asyncio
import dataclasses
import logging
import random
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from conduit.settings import ConduitSettings

from .types import CallOutcome, RawResponse, TransportFailure

logger = logging.getLogger(__name__)

# Methods that are safe to resend without duplicating a side effect.
IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})

# Status used for pages that came back 2xx but were not a usable page.
MALFORMED_PAGE_STATUS = 502


def _decode_body(response: httpx.Response) -> Any:
    """Decode JSON bodies; fall back to text; empty bodies become None."""
    if not response.content:
        return None
    if "json" in response.headers.get("content-type", ""):
        try:
            return response.json()
        except ValueError:
            logger.debug("Response declared JSON but did not parse; keeping text")
    return response.text


def _clean_params(params: dict[str, Any] | None) -> dict[str, Any] | None:
    if not params:
        return None
    return {key: value for key, value in params.items() if value is not None}


class ApiClient:
    """
    Authenticated transport for one external HTTP API.

    Features:
    - Bearer credential attached once, when the session is opened
    - Status classification (success / client error / server error)
    - Bounded exponential-backoff retry for idempotent methods only
    - Page-following for paginated collections, exposed as one logical call
    - Idempotent close()

    The underlying httpx.AsyncClient pools connections and is safe to share
    between concurrent tasks. Cancelling a task aborts its in-flight request.

    Example:
        >>> client = ApiClient(settings)
        >>> async with client:
        ...     tasks = await client.call_paginated("/tasks", params={"state": "open"})
        >>> client.is_open
        False
    """

    def __init__(
        self,
        settings: ConduitSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """
        Initialize the client without opening a connection.

        Args:
            settings: Resolved adapter configuration
            transport: Optional httpx transport (e.g. httpx.MockTransport in tests)
            sleep: Coroutine used for backoff delays
        """
        self._settings = settings
        self._transport = transport
        self._sleep = sleep
        self._client: httpx.AsyncClient | None = None

    @property
    def settings(self) -> ConduitSettings:
        return self._settings

    @property
    def is_open(self) -> bool:
        return self._client is not None

    # -- Lifecycle -------------------------------------------------------------

    async def open(self) -> "ApiClient":
        """Open the HTTP session. Calling open() on an open client is a no-op."""
        if self._client is not None:
            return self

        self._client = httpx.AsyncClient(
            base_url=self._settings.api_url,
            headers={
                "Authorization": f"Bearer {self._settings.api_token.get_secret_value()}",
                "Accept": "application/json",
                "User-Agent": self._settings.user_agent,
            },
            timeout=httpx.Timeout(self._settings.timeout_seconds),
            follow_redirects=True,
            transport=self._transport,
        )
        logger.info(
            f"Opened API session to {self._settings.api_url}",
            extra={"api_url": self._settings.api_url},
        )
        return self

    async def close(self) -> None:
        """Close the HTTP session. Safe to call more than once."""
        client, self._client = self._client, None
        if client is None:
            return
        await client.aclose()
        logger.info("Closed API session", extra={"api_url": self._settings.api_url})

    async def __aenter__(self) -> "ApiClient":
        return await self.open()

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _require_open(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("ApiClient is not open; use 'async with ApiClient(...)'")
        return self._client

    # -- Calls -----------------------------------------------------------------

    async def call(
        self,
        method: str,
        path: str,
        *,
        body: Any = None,
        params: dict[str, Any] | None = None,
    ) -> RawResponse:
        """
        Issue one logical request.

        Idempotent methods are retried on transport failures and server
        errors, up to ``settings.max_attempts`` attempts in total. Other
        methods are sent exactly once; retrying a write is the caller's
        decision.

        Args:
            method: HTTP method
            path: Path relative to the configured API URL
            body: JSON body (None for no body)
            params: Query parameters (None values are dropped)

        Returns:
            RawResponse for any call that received a status code

        Raises:
            TransportFailure: If no status was received on the last attempt
            RuntimeError: If the client is not open
        """
        client = self._require_open()
        method = method.upper()
        max_attempts = self._settings.max_attempts if method in IDEMPOTENT_METHODS else 1
        query = _clean_params(params)

        attempt = 0
        while True:
            attempt += 1
            try:
                response = await client.request(method, path, json=body, params=query)
            except httpx.RequestError as e:
                if attempt >= max_attempts:
                    logger.warning(
                        f"{method} {path} failed without a response after {attempt} attempt(s): {e}",
                        extra={"method": method, "path": path, "attempts": attempt},
                    )
                    raise TransportFailure(method, path, e, attempts=attempt) from e
                await self._backoff(method, path, attempt, max_attempts, f"{type(e).__name__}")
                continue

            raw = RawResponse(
                method=method,
                path=path,
                status=response.status_code,
                body=_decode_body(response),
                attempts=attempt,
            )

            if raw.outcome is CallOutcome.SERVER_ERROR and attempt < max_attempts:
                await self._backoff(method, path, attempt, max_attempts, f"status {raw.status}")
                continue

            logger.debug(
                f"{method} {path} -> {raw.status}",
                extra={"method": method, "path": path, "status": raw.status, "attempts": attempt},
            )
            return raw

    async def call_paginated(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        items_key: str = "items",
    ) -> RawResponse:
        """
        Fetch every page of a collection as one logical call.

        Pages are requested with ``page``/``per_page`` query parameters and
        followed through each page's ``next_page`` field until it is null or
        ``settings.max_pages`` pages have been read.

        Returns:
            On success, a 200 RawResponse whose body is the concatenated item
            list, with ``truncated`` set if pages remained past
            ``max_pages``. On failure, the failing page's response (status
            preserved), or a 502 response if a page was not a well-formed page.
        """
        items: list[Any] = []
        page = 1
        pages = 0
        attempts = 0
        truncated = False

        while True:
            query = {**(params or {}), "page": page, "per_page": self._settings.page_size}
            response = await self.call("GET", path, params=query)
            pages += 1
            attempts += response.attempts

            if not response.ok:
                return dataclasses.replace(response, attempts=attempts, pages=pages)

            body = response.body
            page_items = body.get(items_key) if isinstance(body, dict) else None
            if not isinstance(page_items, list):
                return self._malformed_page(
                    path, f"page {page} has no '{items_key}' list", attempts, pages
                )
            items.extend(page_items)

            next_page = body.get("next_page")
            if next_page is None:
                break
            if not isinstance(next_page, int) or isinstance(next_page, bool) or next_page <= page:
                return self._malformed_page(
                    path, f"page {page} has invalid next_page {next_page!r}", attempts, pages
                )
            if pages >= self._settings.max_pages:
                logger.warning(
                    f"Stopped paginating {path} after {pages} pages (max_pages reached)",
                    extra={"path": path, "pages": pages, "items": len(items)},
                )
                truncated = True
                break
            page = next_page

        return RawResponse(
            method="GET",
            path=path,
            status=200,
            body=items,
            attempts=attempts,
            pages=pages,
            truncated=truncated,
        )

    # -- Internals -------------------------------------------------------------

    async def _backoff(
        self, method: str, path: str, attempt: int, max_attempts: int, reason: str
    ) -> None:
        delay = self._settings.backoff_delay(attempt - 1)
        # +/-25% jitter
        delay += delay * 0.25 * (2 * random.random() - 1)
        logger.info(
            f"Retrying {method} {path} after {reason} (attempt {attempt + 1}/{max_attempts})",
            extra={"method": method, "path": path, "attempt": attempt + 1, "delay_s": delay},
        )
        await self._sleep(delay)

    @staticmethod
    def _malformed_page(path: str, detail: str, attempts: int, pages: int) -> RawResponse:
        logger.warning(f"Malformed page from {path}: {detail}", extra={"path": path})
        return RawResponse(
            method="GET",
            path=path,
            status=MALFORMED_PAGE_STATUS,
            body={"message": detail},
            attempts=attempts,
            pages=pages,
        )
