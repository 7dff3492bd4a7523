"""
HTTP client utilities for ngkeeper.

:class:`HTTPClient` wraps :class:`httpx.AsyncClient` (HTTP/2 enabled) for
registry traffic:

- transport errors, timeouts and 5xx responses are retried with
  exponential backoff and jitter;
- ``429`` responses wait for ``Retry-After`` on a separate budget, so
  throttling does not use up the retry attempts;
- ``404`` becomes :class:`~ngkeeper.exceptions.RegistryError` and any other
  4xx a :class:`~ngkeeper.exceptions.NetworkError`, both without retrying;
- a semaphore caps requests in flight.
"""

from __future__ import annotations

import httpx
import random
import asyncio
from typing import Any, Dict, Optional

from ngkeeper.utils.logger import get_logger
from ngkeeper.__version__ import __version__
from ngkeeper.exceptions import NetworkError, RegistryError
from ngkeeper.constants import (
    DEFAULT_TIMEOUT,
    DEFAULT_MAX_RETRIES,
    DEFAULT_CONCURRENT_LIMIT,
    USER_AGENT_TEMPLATE,
)

logger = get_logger("http")

#: Failures worth another attempt.
_TRANSIENT_ERRORS = (httpx.TimeoutException, httpx.NetworkError)


class HTTPClient:
    """Asynchronous registry client with retries and a concurrency cap.

    Args:
        timeout: Request timeout in seconds.
        max_retries: Extra attempts after the first one for transient
            failures (timeouts, connection errors, 5xx).
        verify_ssl: Whether to verify TLS certificates.
        user_agent: Custom User-Agent header value.
        max_concurrency: Maximum number of requests in flight.

    Example:
        >>> async with HTTPClient() as client:
        ...     packument = await client.get_json("https://registry.npmjs.org/rxjs")
    """

    def __init__(
        self,
        *,
        timeout: int = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        verify_ssl: bool = True,
        user_agent: Optional[str] = None,
        max_concurrency: int = DEFAULT_CONCURRENT_LIMIT,
    ) -> None:
        self.timeout = timeout
        self.max_retries = max_retries
        self.verify_ssl = verify_ssl
        self.user_agent = user_agent or USER_AGENT_TEMPLATE.format(version=__version__)
        self.max_concurrency = max_concurrency

        self._client: Optional[httpx.AsyncClient] = None
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._max_429_retries: int = 5

    async def __aenter__(self) -> "HTTPClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                http2=True,
                verify=self.verify_ssl,
                follow_redirects=True,
                headers={
                    "User-Agent": self.user_agent,
                    "Accept": "application/json",
                },
            )
        return self._client

    async def close(self) -> None:
        """Close the connection pool; safe to call more than once."""
        client, self._client = self._client, None
        if client is not None:
            await client.aclose()

    # ------------------------------------------------------------------
    # Request pipeline
    # ------------------------------------------------------------------

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        client = await self._ensure_client()
        async with self._semaphore:
            return await client.request(method, url, **kwargs)

    @staticmethod
    def _check_status(response: httpx.Response, url: str) -> httpx.Response:
        """Raise for unusable responses.

        Client errors raise ngkeeper exceptions (final); server errors
        raise :class:`httpx.HTTPStatusError` (retried by the caller).
        """
        status = response.status_code

        if status == 404:
            raise RegistryError(
                f"Resource not found: {url}",
                url=url,
                status_code=404,
            )
        if 400 <= status < 500:
            raise NetworkError(
                f"HTTP {status} error for {url}",
                url=url,
                status_code=status,
                response_body=response.text,
            )

        response.raise_for_status()
        return response

    def _backoff_delay(self, failures: int) -> float:
        return (2 ** (failures - 1)) + random.uniform(0.0, 0.3)

    async def _request_with_retry(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        last_exc: Optional[Exception] = None
        rate_limited = 0
        failures = 0

        while True:
            try:
                response = await self._send(method, url, **kwargs)
            except _TRANSIENT_ERRORS as exc:
                last_exc = exc
            else:
                if response.status_code == 429:
                    rate_limited += 1
                    if rate_limited > self._max_429_retries:
                        raise NetworkError(
                            f"Rate limit exceeded after {self._max_429_retries} retries",
                            url=url,
                            status_code=429,
                        )
                    wait = _retry_after_seconds(response)
                    logger.warning(
                        "Rate limited by %s, waiting %ds (%d/%d)",
                        url,
                        wait,
                        rate_limited,
                        self._max_429_retries,
                    )
                    await asyncio.sleep(wait)
                    continue

                try:
                    return self._check_status(response, url)
                except httpx.HTTPStatusError as exc:
                    last_exc = exc

            failures += 1
            logger.warning(
                "Request to %s failed (%d/%d): %s",
                url,
                failures,
                self.max_retries + 1,
                last_exc,
            )
            if failures > self.max_retries:
                break

            delay = self._backoff_delay(failures)
            logger.debug("Retrying %s in %.2fs", url, delay)
            await asyncio.sleep(delay)

        raise NetworkError(
            f"Request failed after {failures} attempts: {url}",
            url=url,
        ) from last_exc

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """GET *url* with retries."""
        return await self._request_with_retry("GET", url, **kwargs)

    async def get_json(self, url: str, **kwargs: Any) -> Dict[str, Any]:
        """GET *url* and decode the body, which must be a JSON object.

        Raises:
            NetworkError: The request failed or the body is not an object.
            RegistryError: The resource does not exist.
        """
        response = await self.get(url, **kwargs)

        try:
            data = response.json()
        except ValueError as exc:
            raise NetworkError(
                f"Invalid JSON response from {url}",
                url=url,
                response_body=response.text,
            ) from exc

        if isinstance(data, dict):
            return data

        raise NetworkError(
            f"Expected JSON object from {url}, got {type(data).__name__}",
            url=url,
            response_body=response.text,
        )


def _retry_after_seconds(response: httpx.Response) -> int:
    """Read ``Retry-After`` as whole seconds (default 1, never negative)."""
    try:
        return max(int(response.headers.get("Retry-After", "1")), 0)
    except ValueError:
        return 1
